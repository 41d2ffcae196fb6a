"""Extracción de registros desde tablas posicionales del portal.

Dos modos:
- filas (listados): celdas `td` en orden de documento, asignadas por el
  `RecordSchema`; el primer grupo completo es una cabecera repetida y se
  descarta.
- título/valor (páginas de detalle): pares alternos (título, valor) de tablas
  anidadas a profundidad fija; el título elige el campo vía `LabelTable`.

Todas las funciones son generadores: no guardan estado entre llamadas y cada
llamada vuelve a recorrer el HTML desde el principio.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from bs4 import BeautifulSoup
from bs4.element import Tag

from core.domain.models import UsageRatio
from core.domain.schema import CellRule, FieldSpec, LabelTable, RecordSchema
from core.errors import StructuralError

Markup = str | BeautifulSoup

# "12.50% (100/800)" -> grupo 1 = "100/800"
_RATIO_RE = re.compile(r"\(([^}]*)\)")


def _soup(markup: Markup) -> BeautifulSoup:
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup, "html.parser")


def cell_text(cell: Tag) -> str:
    return cell.get_text().strip()


def cell_link(cell: Tag) -> str:
    anchor = cell.find("a")
    if anchor is None or not anchor.has_attr("href"):
        return ""
    return str(anchor["href"])


def parse_ratio(text: str) -> UsageRatio:
    """`pct% (usadas/total)` -> `UsageRatio`.

    Raises:
        StructuralError: si la celda no tiene ese formato.
    """

    match = _RATIO_RE.search(text)
    if match is None:
        raise StructuralError(f"dato de utilización inexistente: {text!r}")
    parts = match.group(1).split("/")
    try:
        used = int(parts[0].strip())
        total = int(parts[1].strip())
        ratio = float(text[: text.index("%")].strip())
    except (IndexError, ValueError) as exc:
        raise StructuralError(f"dato de utilización mal formado: {text!r}") from exc
    return UsageRatio(used=used, total=total, ratio=ratio)


def _apply(record: dict[str, Any], spec: FieldSpec, cell: Tag) -> None:
    text = cell_text(cell)
    if spec.rule is CellRule.RATIO:
        record[spec.name] = parse_ratio(text)
        return
    record[spec.name] = text
    if spec.rule is CellRule.TEXT_WITH_LINK and spec.link_field:
        record[spec.link_field] = cell_link(cell)


def _has_exact_class(cell: Tag, css_class: str) -> bool:
    classes = cell.get("class") or []
    if isinstance(classes, str):
        return classes == css_class
    return " ".join(classes) == css_class


def sibling_index(cell: Tag) -> int:
    index = 0
    for sibling in cell.previous_siblings:
        if isinstance(sibling, Tag):
            index += 1
    return index


def _data_cells(soup: BeautifulSoup) -> list[Tag]:
    return soup.select("table td")


def _rows_counted(soup: BeautifulSoup, schema: RecordSchema) -> Iterator[dict[str, Any]]:
    width = schema.width
    cells = [c for c in _data_cells(soup) if _has_exact_class(c, schema.row_class or "")]
    record: dict[str, Any] = {}
    groups = 0
    index = 0
    for cell in cells:
        # La cabecera se cuenta pero no se decodifica.
        if groups or not schema.drop_header:
            _apply(record, schema.fields[index], cell)
        index += 1
        if index < width:
            continue
        if groups or not schema.drop_header:
            yield record
        groups += 1
        record = {}
        index = 0


def _rows_positional(soup: BeautifulSoup, schema: RecordSchema) -> Iterator[dict[str, Any]]:
    width = schema.width
    record: dict[str, Any] = {}
    groups = 0
    for cell in _data_cells(soup):
        index = sibling_index(cell)
        if index >= width:
            continue
        if groups or not schema.drop_header:
            _apply(record, schema.fields[index], cell)
        if index < width - 1:
            continue
        if groups or not schema.drop_header:
            yield record
        groups += 1
        record = {}


def extract_rows(markup: Markup, schema: RecordSchema) -> Iterator[dict[str, Any]]:
    """Registros (dicts campo -> valor) de una página de listado."""

    soup = _soup(markup)
    if schema.row_class:
        yield from _rows_counted(soup, schema)
    else:
        yield from _rows_positional(soup, schema)


def nested_cells(markup: Markup, depth: int) -> list[Tag]:
    """Celdas `td` dentro de `depth` tablas anidadas."""

    if depth < 1:
        raise ValueError("depth debe ser >= 1")
    selector = " ".join(["table"] * depth + ["td"])
    return _soup(markup).select(selector)


def iter_title_values(markup: Markup, depth: int) -> Iterator[tuple[str, Tag]]:
    """Pares (título recortado, celda de valor) en orden de documento."""

    cells = nested_cells(markup, depth)
    for title_cell, value_cell in zip(cells[0::2], cells[1::2]):
        yield cell_text(title_cell), value_cell


def extract_labeled(markup: Markup, labels: LabelTable, depth: int) -> dict[str, str]:
    """Campos de una página de detalle; los títulos desconocidos se ignoran."""

    record: dict[str, str] = {}
    for title, value_cell in iter_title_values(markup, depth):
        name = labels.field_for(title)
        if name is None:
            continue
        record[name] = cell_text(value_cell)
        link_field = labels.link_fields.get(name)
        if link_field:
            record[link_field] = cell_link(value_cell)
    return record
