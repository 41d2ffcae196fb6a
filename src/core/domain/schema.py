"""Esquemas declarativos de registros del portal.

Por qué un esquema en vez de un `switch` por índice:
- La asignación posicional (columna i -> campo) queda como dato, testeable
  contra HTML de fixture sin tocar el extractor.
- Un cambio de layout en el portal se corrige editando una tabla, no un bucle.

Los textos de las etiquetas (`DETAIL_LABELS`, etc.) son los títulos que el
portal muestra; algunos tienen variantes ortográficas que apuntan al mismo
campo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CellRule(str, Enum):
    """Cómo se decodifica una celda."""

    TEXT = "text"
    TEXT_WITH_LINK = "text+link"
    RATIO = "ratio"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    rule: CellRule = CellRule.TEXT
    link_field: str | None = None

    def __post_init__(self) -> None:
        if self.rule is CellRule.TEXT_WITH_LINK and not self.link_field:
            raise ValueError(f"{self.name}: TEXT_WITH_LINK requiere link_field")


@dataclass(frozen=True)
class RecordSchema:
    """Lista ordenada de campos + filtro opcional de clase CSS.

    - `row_class`: si está definido, solo cuentan las celdas `td` cuya clase es
      exactamente ésta y el índice de campo es un contador corrido módulo
      `width`. Si es None, el índice es la posición de la celda en su fila.
    - `drop_header`: el primer grupo completo es una cabecera repetida.
    """

    fields: tuple[FieldSpec, ...]
    row_class: str | None = None
    drop_header: bool = True

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError("RecordSchema sin campos")

    @property
    def width(self) -> int:
        return len(self.fields)


@dataclass(frozen=True)
class LabelTable:
    """Tabla título -> campo para páginas de detalle (modo título/valor)."""

    labels: dict[str, str]
    link_fields: dict[str, str] = field(default_factory=dict)

    def field_for(self, title: str) -> str | None:
        return self.labels.get(title)


LISTING_ROW_CLASS = "dataRow_mnt04"


IPV4_LISTING = RecordSchema(
    fields=(
        FieldSpec("ip_address", CellRule.TEXT_WITH_LINK, link_field="detail_link"),
        FieldSpec("size"),
        FieldSpec("network_name"),
        FieldSpec("assign_date"),
        FieldSpec("return_date"),
        FieldSpec("org_name"),
        FieldSpec("short_name"),
        FieldSpec("recep_no"),
        FieldSpec("deli_no"),
        FieldSpec("type"),
        FieldSpec("kind_id"),
    ),
    row_class=LISTING_ROW_CLASS,
)

IPV6_LISTING = RecordSchema(
    fields=(
        FieldSpec("ip_address", CellRule.TEXT_WITH_LINK, link_field="detail_link"),
        FieldSpec("network_name"),
        FieldSpec("assign_date"),
        FieldSpec("return_date"),
        FieldSpec("org_name"),
        FieldSpec("short_name"),
        FieldSpec("recep_no"),
        FieldSpec("deli_no"),
        FieldSpec("kind_id"),
    ),
    row_class=LISTING_ROW_CLASS,
)

REQUEST_LIST = RecordSchema(
    fields=(
        FieldSpec("recep_no"),
        FieldSpec("deli_no"),
        FieldSpec("apply_kind"),
        FieldSpec("apply_class"),
        FieldSpec("applicant"),
        FieldSpec("apply_date"),
        FieldSpec("complete_date"),
        FieldSpec("status"),
    ),
    row_class=None,
)


DETAIL_LABELS = LabelTable(
    labels={
        "IPネットワークアドレス": "ip_address",
        "資源管理者略称": "short_name",
        "アドレス種別": "type",
        "インフラ・ユーザ区分": "infra_user_kind",
        "ネットワーク名": "network_name",
        "組織名": "org",
        "Organization": "org_en",
        "郵便番号": "post_code",
        "住所": "address",
        "Address": "address_en",
        "管理者連絡窓口": "admin_handle",
        "技術連絡担当者": "tech_handle",
        "ネームサーバ": "name_server",
        "DSレコード": "ds_record",
        "通知アドレス": "notify_address",
        "審議番号": "deli_no",
        "受付番号": "recep_no",
        "割当年月日": "assign_date",
        "返却年月日": "return_date",
        "最終更新": "update_date",
    },
    link_fields={
        "admin_handle": "admin_handle_link",
        "tech_handle": "tech_handle_link",
    },
)

# Portal mezcla 電子メール/電子メイル y Fax番号/FAX番号.
HANDLE_LABELS = LabelTable(
    labels={
        "グループハンドル": "handle",
        "JPNICハンドル": "handle",
        "グループ名": "org",
        "Group Name": "org_en",
        "氏名": "org",
        "Last, First": "org_en",
        "電子メール": "email",
        "電子メイル": "email",
        "組織名": "org",
        "Organization": "org_en",
        "部署": "division",
        "Division": "division_en",
        "肩書": "title",
        "Title": "title_en",
        "電話番号": "tel",
        "Fax番号": "fax",
        "FAX番号": "fax",
        "通知アドレス": "notify_address",
        "最終更新": "update_date",
    },
)

PERSON_HANDLE_LABEL = "JPNICハンドル"
GROUP_HANDLE_LABEL = "グループハンドル"

RESOURCE_MANAGER_LABELS = LabelTable(
    labels={
        "資源管理者番号": "manager_no",
        "資源管理者略称": "short_name",
        "管理組織名": "org",
        "Organization": "org_en",
        "郵便番号": "zip_code",
        "住所": "address",
        "Address": "address_en",
        "電話番号": "tel",
        "FAX番号": "fax",
        "資源管理責任者": "management_manager",
        "連絡担当窓口": "contact_person",
        "一般問い合わせ窓口": "inquiry",
        "資源管理者通知アドレス": "notify_mail",
        "アサインメントウィンドウサイズ": "assignment_window_size",
        "管理開始日": "management_start_date",
        "管理終了日": "management_end_date",
        "最終更新日": "update_date",
    },
)

TOTAL_USAGE_LABEL = "総利用率"
AD_RATIO_LABEL = "ＡＤ　ｒａｔｉｏ"
