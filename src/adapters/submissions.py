"""Cuerpos de envío de cada formulario del portal.

El orden y la presencia de los campos son parte del contrato: el portal
rechaza (o interpreta distinto) un cuerpo con otro orden o con campos de más.
Los valores se insertan tal cual; la transcodificación a Windows-31J la hace
la sesión sobre el cuerpo completo.
"""

from __future__ import annotations

from adapters.forms import (
    ACTION_CONFIRM,
    ACTION_REQUEST,
    ACTION_SEARCH_ENCODED,
    ACTION_SEARCH_RAW,
    APLYID_FIELD,
    DESTDISP_FIELD,
    PREV_DISP_ID_FIELD,
    TOKEN_FIELD,
    FormSeed,
    FormSubmission,
    checkbox,
)
from core.domain.models import HandleInput, SearchIPv4, SearchIPv6

SHORT_NAME_FIELD = "resceAdmSnm"


def _criteria(search: SearchIPv4 | SearchIPv6, short_name: str) -> list[tuple[str, str]]:
    return [
        ("ipaddr", search.ip_address),
        ("sizeS", search.size_start),
        ("sizeE", search.size_end),
        ("netwrkName", search.network_name),
        ("regDateS", search.reg_start),
        ("regDateE", search.reg_end),
        ("rtnDateS", search.return_start),
        ("rtnDateE", search.return_end),
        ("organizationName", search.org),
        (SHORT_NAME_FIELD, short_name),
        ("recepNo", search.recep_no),
        ("deliNo", search.deli_no),
    ]


def build_ipv4_search(submit_id: str, search: SearchIPv4, *, own_short_name: str | None = None) -> FormSubmission:
    """Búsqueda IPv4; con `myself` el 略称 viene del formulario."""

    short_name = own_short_name if search.myself and own_short_name is not None else search.short_name
    body = FormSubmission([(DESTDISP_FIELD, submit_id)])
    body.extend(_criteria(search, short_name))
    body.extend(
        [
            ("ipaddrKindPa", checkbox(search.is_pa)),
            ("regKindAllo", checkbox(search.is_allocate)),
            ("regKindEvent", checkbox(search.is_assign_infra)),
            ("regKindUser", checkbox(search.is_assign_user)),
            ("regKindSubA", checkbox(search.is_sub_allocate)),
            ("ipaddrKindPiHistorical", checkbox(search.is_historical_pi)),
            ("ipaddrKindPiSpecial", checkbox(search.is_special_pi)),
        ]
    )
    # IPv4 envía el caption crudo; se transcodifica con el resto.
    body.add("action", ACTION_SEARCH_RAW)
    return body


def build_ipv6_search(submit_id: str, search: SearchIPv6, *, own_short_name: str | None = None) -> FormSubmission:
    """Búsqueda IPv6.

    Con `myself` todos los criterios van vacíos salvo el 略称 y no se envían
    los flags de tipo de registro.
    """

    body = FormSubmission([(DESTDISP_FIELD, submit_id)])
    if search.myself and own_short_name is not None:
        body.extend((name, own_short_name if name == SHORT_NAME_FIELD else "") for name, _ in _criteria(search, ""))
    else:
        body.extend(_criteria(search, search.short_name))
        body.extend(
            [
                ("regKindAllo", checkbox(search.is_allocate)),
                ("regKindEvent", checkbox(search.is_assign_infra)),
                ("regKindUser", checkbox(search.is_assign_user)),
                ("regKindSubA", checkbox(search.is_sub_allocate)),
            ]
        )
    body.add("action", ACTION_SEARCH_ENCODED)
    return body


def build_contact_change(seed: FormSeed, data: HandleInput) -> FormSubmission:
    """Primer paso de `担当グループ（担当者）情報登録・変更`."""

    kind = "person" if data.is_jpnic_handle else "group"
    return FormSubmission(
        [
            (TOKEN_FIELD, seed.value(TOKEN_FIELD)),
            (DESTDISP_FIELD, seed.value(DESTDISP_FIELD)),
            (APLYID_FIELD, seed.value(APLYID_FIELD)),
            ("kind", kind),
            ("jpnic_hdl", data.jpnic_handle),
            ("name_jp", data.name),
            ("name", data.name_en),
            ("email", data.email),
            ("org_nm_jp", data.org),
            ("org_nm", data.org_en),
            ("zipcode", data.zip_code),
            ("addr_jp", data.address),
            ("addr", data.address_en),
            ("division_jp", data.division),
            ("division", data.division_en),
            ("title_jp", data.title),
            ("title", data.title_en),
            ("phone", data.tel),
            ("fax", data.fax),
            ("ntfy_mail", data.notify_mail),
            ("aply_from_addr", data.apply_mail),
            ("aply_from_addr_confirm", data.apply_mail),
            ("action", ACTION_REQUEST),
        ]
    )


def build_confirmation(seed: FormSeed) -> FormSubmission:
    """Segundo paso: confirmar lo mostrado en la página de confirmación."""

    return FormSubmission(
        [
            (TOKEN_FIELD, seed.value(TOKEN_FIELD)),
            (PREV_DISP_ID_FIELD, seed.value(PREV_DISP_ID_FIELD)),
            (APLYID_FIELD, seed.value(APLYID_FIELD)),
            (DESTDISP_FIELD, seed.value(DESTDISP_FIELD)),
            ("inputconf", ACTION_CONFIRM),
        ]
    )


def build_request_list(destdisp: str, start_recep_no: str) -> FormSubmission:
    return FormSubmission(
        [
            (DESTDISP_FIELD, destdisp),
            ("startRecepNo", start_recep_no),
            ("endRecepNo", ""),
            ("deliNo", ""),
            ("aplyKind", ""),
            ("aplyClass", ""),
            (SHORT_NAME_FIELD, ""),
            ("aplyDateS", ""),
            ("aplyDateE", ""),
            ("completDateS", ""),
            ("completDateE", ""),
            ("statusId", ""),
            ("pswdResceNewConfirm", ACTION_SEARCH_ENCODED),
        ]
    )
