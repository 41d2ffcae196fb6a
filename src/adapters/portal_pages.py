"""Parsers de páginas concretas del portal.

Estos parsers están en adapters porque dependen del HTML (BeautifulSoup) y del
layout actual del portal; devuelven modelos del dominio.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from adapters.tables import (
    cell_link,
    cell_text,
    extract_labeled,
    iter_title_values,
    nested_cells,
    parse_ratio,
    sibling_index,
)
from core.domain.models import (
    HandleDetail,
    InfoDetail,
    ResourceCIDRBlock,
    ResourceInfo,
    ResourceManagerInfo,
)
from core.domain.schema import (
    AD_RATIO_LABEL,
    DETAIL_LABELS,
    GROUP_HANDLE_LABEL,
    HANDLE_LABELS,
    PERSON_HANDLE_LABEL,
    RESOURCE_MANAGER_LABELS,
    TOTAL_USAGE_LABEL,
)
from core.errors import StructuralError

DETAIL_TABLE_DEPTH = 4
HANDLE_TABLE_DEPTH = 3
RESOURCE_TABLE_DEPTH = 4

CONFIRMATION_PHRASE = "上記の申請内容でよろしければ、「確認」ボタンを押してください。"
RECEP_NO_LABEL = "受付番号"
CIDR_LINK_MARKER = "entryinfo"


def parse_info_detail(html: str) -> InfoDetail:
    return InfoDetail.model_validate(extract_labeled(html, DETAIL_LABELS, DETAIL_TABLE_DEPTH))


def parse_handle_detail(html: str) -> HandleDetail:
    """Handle de persona (`JPNICハンドル`) o de grupo (`グループハンドル`)."""

    soup = BeautifulSoup(html, "html.parser")
    record: dict[str, object] = {}
    for title, value_cell in iter_title_values(soup, HANDLE_TABLE_DEPTH):
        name = HANDLE_LABELS.field_for(title)
        if name is None:
            continue
        if title == PERSON_HANDLE_LABEL:
            record["is_jpnic_handle"] = True
        elif title == GROUP_HANDLE_LABEL:
            record["is_jpnic_handle"] = False
        record[name] = cell_text(value_cell)
    return HandleDetail.model_validate(record)


def parse_resource_management(html: str) -> ResourceInfo:
    """Página `資源管理者情報`: filas de 2 o 3 columnas.

    Columna 0: título (o dirección CIDR con enlace a `entryinfo`).
    Columna 1: valor del campo o fecha de asignación del bloque.
    Columna 2: utilización (`総利用率`, `ＡＤ　ｒａｔｉｏ` o la del bloque).
    """

    manager: dict[str, str] = {}
    info = ResourceInfo()
    title = ""
    in_cidr_row = False
    block = ResourceCIDRBlock()

    for cell in nested_cells(html, RESOURCE_TABLE_DEPTH):
        text = cell_text(cell)
        index = sibling_index(cell)

        if index == 0:
            in_cidr_row = False
            title = text
            href = cell_link(cell)
            if href:
                in_cidr_row = CIDR_LINK_MARKER in href
                address = re.sub(r"[\n\t]", "", text.split("(")[0]).strip()
                block = ResourceCIDRBlock(address=address, url=href)
        elif index == 1:
            name = RESOURCE_MANAGER_LABELS.field_for(title)
            if name is not None:
                manager[name] = text
            elif in_cidr_row:
                block.assign_date = text
        elif index == 2:
            if title == TOTAL_USAGE_LABEL:
                info.usage = parse_ratio(text)
            elif title == AD_RATIO_LABEL:
                try:
                    info.ad_ratio = float(text)
                except ValueError as exc:
                    raise StructuralError(f"AD ratio mal formado: {text!r}") from exc
            elif in_cidr_row:
                block.usage = parse_ratio(text)
                info.cidr_blocks.append(block)

    info.manager = ResourceManagerInfo.model_validate(manager)
    return info


def find_recep_no(html: str) -> str:
    """Número de recepción en la página de fin de trámite ("" si no aparece)."""

    recep_no = ""
    for cell in BeautifulSoup(html, "html.parser").select("table table td"):
        previous = cell.find_previous_sibling()
        if previous is not None and RECEP_NO_LABEL in previous.get_text():
            recep_no = cell_text(cell)
    return recep_no


def find_highlighted_error(html: str) -> str | None:
    """Texto del último `<font color="red">` no vacío."""

    message = None
    for font in BeautifulSoup(html, "html.parser").find_all("font"):
        if str(font.get("color", "")).lower() != "red":
            continue
        text = font.get_text().strip()
        if text:
            message = text
    return message


def has_confirmation(html: str) -> bool:
    return CONFIRMATION_PHRASE in html
