"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación y documentación autocontenida (Field) sin acoplar el Core
  a librerías de I/O.
- Facilita exportar los registros extraídos del portal a JSON.

Nota:
- Estos modelos describen *qué* devuelve el portal, no *cómo* se extrae. Los
  textos se guardan tal cual aparecen (recortados), sin normalizar fechas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.errors import ApplicationError


class UsageRatio(BaseModel):
    """Uso de direcciones en formato `pct% (usadas/total)`."""

    used: int = Field(..., ge=0, description="Direcciones utilizadas.")
    total: int = Field(..., ge=0, description="Direcciones totales.")
    ratio: float = Field(..., ge=0, description="Porcentaje de utilización publicado por el portal.")


class InfoDetail(BaseModel):
    """Página de detalle de una asignación (IPv4/IPv6)."""

    model_config = ConfigDict(extra="ignore")

    ip_address: str = ""
    short_name: str = Field(default="", description="資源管理者略称.")
    type: str = ""
    infra_user_kind: str = ""
    network_name: str = ""
    org: str = ""
    org_en: str = ""
    post_code: str = ""
    address: str = ""
    address_en: str = ""
    admin_handle: str = Field(default="", description="管理者連絡窓口 (handle).")
    admin_handle_link: str = ""
    tech_handle: str = Field(default="", description="技術連絡担当者 (handle).")
    tech_handle_link: str = ""
    name_server: str = ""
    ds_record: str = ""
    notify_address: str = ""
    deli_no: str = ""
    recep_no: str = ""
    assign_date: str = ""
    return_date: str = ""
    update_date: str = ""


class InfoIPv4(BaseModel):
    """Fila del listado `登録情報検索(IPv4)`."""

    model_config = ConfigDict(extra="ignore")

    ip_address: str = ""
    detail_link: str = Field(default="", description="href relativo a la página de detalle.")
    size: str = ""
    network_name: str = ""
    assign_date: str = ""
    return_date: str = ""
    org_name: str = ""
    short_name: str = ""
    recep_no: str = ""
    deli_no: str = ""
    type: str = ""
    kind_id: str = ""
    detail: InfoDetail | None = Field(
        default=None,
        description="Detalle (solo si se pidió y la descarga no falló).",
    )


class InfoIPv6(BaseModel):
    """Fila del listado `登録情報検索(IPv6)`."""

    model_config = ConfigDict(extra="ignore")

    ip_address: str = ""
    detail_link: str = ""
    network_name: str = ""
    assign_date: str = ""
    return_date: str = ""
    org_name: str = ""
    short_name: str = ""
    recep_no: str = ""
    deli_no: str = ""
    kind_id: str = ""
    detail: InfoDetail | None = None


class HandleDetail(BaseModel):
    """Detalle de una JPNICハンドル (persona) o グループハンドル."""

    model_config = ConfigDict(extra="ignore")

    is_jpnic_handle: bool = Field(
        default=False,
        description="True para handle de persona, False para handle de grupo.",
    )
    handle: str = ""
    org: str = Field(default="", description="氏名 / グループ名 / 組織名 (según la página).")
    org_en: str = ""
    email: str = ""
    division: str = ""
    division_en: str = ""
    title: str = ""
    title_en: str = ""
    tel: str = ""
    fax: str = ""
    notify_address: str = ""
    update_date: str = ""


class ResourceManagerInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    manager_no: str = ""
    short_name: str = ""
    org: str = ""
    org_en: str = ""
    zip_code: str = ""
    address: str = ""
    address_en: str = ""
    tel: str = ""
    fax: str = ""
    management_manager: str = ""
    contact_person: str = ""
    inquiry: str = ""
    notify_mail: str = ""
    assignment_window_size: str = ""
    management_start_date: str = ""
    management_end_date: str = ""
    update_date: str = ""


class ResourceCIDRBlock(BaseModel):
    """Bloque CIDR listado en `資源管理者情報`."""

    address: str = ""
    url: str = ""
    assign_date: str = ""
    usage: UsageRatio | None = None


class ResourceInfo(BaseModel):
    """Resumen de gestión de recursos del miembro."""

    manager: ResourceManagerInfo = Field(default_factory=ResourceManagerInfo)
    usage: UsageRatio | None = Field(default=None, description="総利用率.")
    ad_ratio: float | None = Field(default=None, description="ＡＤ　ｒａｔｉｏ.")
    cidr_blocks: list[ResourceCIDRBlock] = Field(default_factory=list)


class RequestInfo(BaseModel):
    """Fila de `申請一覧`."""

    recep_no: str = ""
    deli_no: str = ""
    apply_kind: str = ""
    apply_class: str = ""
    applicant: str = ""
    apply_date: str = ""
    complete_date: str = ""
    status: str = ""


class InterfaceError(BaseModel):
    """Error por línea decodificado de un `RET_CODE` compuesto."""

    raw: str = Field(..., description="Valor crudo del RET_CODE.")
    interface_code: str = ""
    genre_code: str = ""
    message: str = ""


class ResultOutcome(BaseModel):
    """Resultado tipado del protocolo de control RET/RET_CODE.

    Invariante: `overall_code == "00"` implica que no hay error de nivel
    superior; cualquier otro código se clasifica vía `ErrorClassifier`.
    """

    recep_no: str = ""
    adm_handle: str = ""
    tech1_handle: str = ""
    tech2_handle: str = ""
    overall_code: str = "00"
    overall_message: str | None = None
    interface_errors: list[InterfaceError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.overall_message is None and not self.interface_errors

    def messages(self) -> list[str]:
        out: list[str] = []
        if self.overall_message:
            out.append(self.overall_message)
        out.extend(e.message for e in self.interface_errors)
        return out

    def raise_for_error(self) -> None:
        """Lanza `ApplicationError` con todos los mensajes juntos."""

        if self.ok:
            return
        raise ApplicationError("; ".join(self.messages()), outcome=self)


class SearchIPv4(BaseModel):
    """Criterios de `登録情報検索(IPv4)`.

    Los flags booleanos se envían como `on` / vacío.
    """

    ip_address: str = ""
    size_start: str = ""
    size_end: str = ""
    network_name: str = ""
    reg_start: str = ""
    reg_end: str = ""
    return_start: str = ""
    return_end: str = ""
    org: str = ""
    short_name: str = ""
    recep_no: str = ""
    deli_no: str = ""
    is_pa: bool = False
    is_allocate: bool = False
    is_assign_infra: bool = False
    is_assign_user: bool = False
    is_sub_allocate: bool = False
    is_historical_pi: bool = False
    is_special_pi: bool = False
    myself: bool = Field(
        default=False,
        description="Usar el 略称 propio del operador (leído del formulario).",
    )
    is_detail: bool = Field(
        default=False,
        description="Descargar detalle y handles de cada fila.",
    )
    skip_handles: list[str] = Field(
        default_factory=list,
        description="Handles ya conocidos que no se deben descargar.",
    )


class SearchIPv6(BaseModel):
    """Criterios de `登録情報検索(IPv6)`."""

    ip_address: str = ""
    size_start: str = ""
    size_end: str = ""
    network_name: str = ""
    reg_start: str = ""
    reg_end: str = ""
    return_start: str = ""
    return_end: str = ""
    org: str = ""
    short_name: str = ""
    recep_no: str = ""
    deli_no: str = ""
    is_allocate: bool = False
    is_assign_infra: bool = False
    is_assign_user: bool = False
    is_sub_allocate: bool = False
    myself: bool = False
    is_detail: bool = False
    skip_handles: list[str] = Field(default_factory=list)


class HandleInput(BaseModel):
    """Datos para `担当グループ（担当者）情報登録・変更`."""

    model_config = ConfigDict(extra="forbid")

    is_jpnic_handle: bool = Field(
        default=True,
        description="True: persona (kind=person); False: grupo (kind=group).",
    )
    jpnic_handle: str = ""
    name: str = ""
    name_en: str = ""
    email: str = ""
    org: str = ""
    org_en: str = ""
    zip_code: str = ""
    address: str = ""
    address_en: str = ""
    division: str = ""
    division_en: str = ""
    title: str = ""
    title_en: str = ""
    tel: str = ""
    fax: str = ""
    notify_mail: str = ""
    apply_mail: str = Field(
        ...,
        min_length=1,
        description="申請者メールアドレス (se envía dos veces: valor y confirmación).",
    )


class IPv4SearchResult(BaseModel):
    records: list[InfoIPv4] = Field(default_factory=list)
    handles: list[HandleDetail] = Field(default_factory=list)


class IPv6SearchResult(BaseModel):
    records: list[InfoIPv6] = Field(default_factory=list)
    handles: list[HandleDetail] = Field(default_factory=list)
