"""Orquestación de los workflows del portal de miembros.

Cada función pública es una operación completa (navegar menú, leer formulario,
enviar, extraer) sobre una `PortalSession` ya autenticada. La sesión es de uso
exclusivo: el portal guarda el "paso actual" en la cookie, así que todas las
peticiones de un workflow son secuenciales.

Efectos laterales (impresión, progreso) quedan fuera: la CLI se entera de los
avisos a través de `WorkflowHooks`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

from adapters.forms import FormSeed, action_contains, extract_form
from adapters.http_client import TRANSACTION_CONTENT_TYPE, PortalSession
from adapters.navigation import (
    MENU_CHANGE_CONTACT,
    MENU_HANDLE_SEARCH,
    MENU_REQUEST_LIST,
    MENU_RESOURCE_MANAGER,
    MENU_SEARCH_IPV4,
    MENU_SEARCH_IPV6,
    resolve_menu,
)
from adapters.portal_pages import (
    find_highlighted_error,
    find_recep_no,
    has_confirmation,
    parse_handle_detail,
    parse_info_detail,
    parse_resource_management,
)
from adapters.submissions import (
    SHORT_NAME_FIELD,
    build_confirmation,
    build_contact_change,
    build_ipv4_search,
    build_ipv6_search,
    build_request_list,
)
from adapters.tables import extract_rows
from core.domain.models import (
    HandleDetail,
    HandleInput,
    InfoDetail,
    InfoIPv4,
    InfoIPv6,
    IPv4SearchResult,
    IPv6SearchResult,
    RequestInfo,
    ResourceInfo,
    ResultOutcome,
    SearchIPv4,
    SearchIPv6,
)
from core.domain.schema import IPV4_LISTING, IPV6_LISTING, REQUEST_LIST, RecordSchema
from core.encoding import from_legacy, to_legacy
from core.errors import ApplicationError, DeadlineExceeded, PortalError, StructuralError
from core.interfaces.portal import Clock, RateLimiter
from core.result_codes import ErrorClassifier
from core.result_parser import marshal_transaction, parse_result_lines
from core.traversal import IntervalRateLimiter, LinkResolutionCache

logger = logging.getLogger(__name__)

HANDLE_PAGE_PATH = "/jpnic/entryinfo_handle.do?jpnic_hdl="

_Listed = TypeVar("_Listed", InfoIPv4, InfoIPv6)


@dataclass
class TraversalOptions:
    """Colaboradores de un recorrido de listado con descarga de detalle.

    `limiter_factory` permite inyectar un limitador propio (tests); por
    defecto se crea un `IntervalRateLimiter` nuevo por llamada.
    """

    min_interval: float = 1.0
    clock: Clock | None = None
    limiter_factory: Callable[[], RateLimiter] | None = None


@dataclass
class WorkflowHooks:
    """Callbacks opcionales para la capa de UI."""

    warning: Callable[[str], None] | None = None


@dataclass
class _Traversal:
    session: PortalSession
    limiter: RateLimiter
    cache: LinkResolutionCache
    hooks: WorkflowHooks
    handles: list[HandleDetail] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        if self.hooks.warning:
            self.hooks.warning(message)


def _build_limiter(session: PortalSession, options: TraversalOptions) -> RateLimiter:
    if options.limiter_factory is not None:
        return options.limiter_factory()
    return IntervalRateLimiter(options.min_interval, clock=options.clock, deadline=session.deadline)


def _open_search_form(session: PortalSession, label: str) -> tuple[FormSeed, str]:
    html = session.get_page(resolve_menu(session, label))
    seed = extract_form(html)
    if seed.first_input_value is None:
        raise StructuralError(f"{label}: no se pudo leer el identificador del formulario")
    return seed, seed.first_input_value


def _own_short_name(seed: FormSeed, myself: bool) -> str | None:
    if not myself:
        return None
    return seed.require(SHORT_NAME_FIELD, "資源管理者略称")


def _fetch_detail(state: _Traversal, link: str) -> InfoDetail | None:
    if not link:
        logger.debug("fila sin enlace de detalle, se omite")
        return None
    state.limiter.wait_turn()
    try:
        return parse_info_detail(state.session.get_page(link))
    except DeadlineExceeded:
        raise
    except PortalError as exc:
        state.warn(f"detalle omitido ({link}): {exc}")
        return None


def _fetch_handle(state: _Traversal, link: str) -> None:
    if not link:
        logger.debug("handle sin enlace, se omite")
        return
    state.limiter.wait_turn()
    try:
        state.handles.append(parse_handle_detail(state.session.get_page(link)))
    except DeadlineExceeded:
        raise
    except PortalError as exc:
        state.warn(f"handle omitido ({link}): {exc}")


def _resolve_handles(state: _Traversal, detail: InfoDetail) -> None:
    # Cruzado: la clave del técnico decide si se descarga el enlace del
    # administrador y viceversa.
    # TODO: confirmar con JPNIC si el cruce es intencional y, si no, emparejar
    # cada clave con su propio enlace.
    if state.cache.should_fetch(detail.tech_handle):
        _fetch_handle(state, detail.admin_handle_link)
        state.cache.mark_fetched(detail.tech_handle)
    if state.cache.should_fetch(detail.admin_handle):
        _fetch_handle(state, detail.tech_handle_link)
        state.cache.mark_fetched(detail.admin_handle)


def _traverse_listing(
    *,
    session: PortalSession,
    html: str,
    schema: RecordSchema,
    model: type[_Listed],
    is_detail: bool,
    skip_handles: Iterable[str],
    options: TraversalOptions,
    hooks: WorkflowHooks,
) -> tuple[list[_Listed], list[HandleDetail]]:
    state = _Traversal(
        session=session,
        limiter=_build_limiter(session, options),
        cache=LinkResolutionCache(skip_handles),
        hooks=hooks,
    )
    records: list[_Listed] = []
    for row in extract_rows(html, schema):
        record = model.model_validate(row)
        if is_detail:
            record.detail = _fetch_detail(state, record.detail_link)
            if record.detail is not None:
                _resolve_handles(state, record.detail)
        records.append(record)

    logger.info("listado: %d registros, %d handles", len(records), len(state.handles))
    return records, state.handles


def search_ipv4(
    *,
    session: PortalSession,
    search: SearchIPv4,
    options: TraversalOptions | None = None,
    hooks: WorkflowHooks | None = None,
) -> IPv4SearchResult:
    """`登録情報検索(IPv4)`: listado y, con `is_detail`, detalle y handles."""

    seed, submit_id = _open_search_form(session, MENU_SEARCH_IPV4)
    body = build_ipv4_search(submit_id, search, own_short_name=_own_short_name(seed, search.myself))
    html = session.post_page(seed.action, body.encode())

    records, handles = _traverse_listing(
        session=session,
        html=html,
        schema=IPV4_LISTING,
        model=InfoIPv4,
        is_detail=search.is_detail,
        skip_handles=search.skip_handles,
        options=options or TraversalOptions(),
        hooks=hooks or WorkflowHooks(),
    )
    return IPv4SearchResult(records=records, handles=handles)


def search_ipv6(
    *,
    session: PortalSession,
    search: SearchIPv6,
    options: TraversalOptions | None = None,
    hooks: WorkflowHooks | None = None,
) -> IPv6SearchResult:
    """`登録情報検索(IPv6)`; mismo recorrido que IPv4 con su propio esquema."""

    seed, submit_id = _open_search_form(session, MENU_SEARCH_IPV6)
    body = build_ipv6_search(submit_id, search, own_short_name=_own_short_name(seed, search.myself))
    html = session.post_page(seed.action, body.encode())

    records, handles = _traverse_listing(
        session=session,
        html=html,
        schema=IPV6_LISTING,
        model=InfoIPv6,
        is_detail=search.is_detail,
        skip_handles=search.skip_handles,
        options=options or TraversalOptions(),
        hooks=hooks or WorkflowHooks(),
    )
    return IPv6SearchResult(records=records, handles=handles)


def get_ip_user(*, session: PortalSession, user_url: str) -> InfoDetail:
    """Detalle de una asignación a partir de su enlace (relativo al host)."""

    # El menú solo establece el estado de login en la sesión.
    resolve_menu(session, MENU_HANDLE_SEARCH)
    return parse_info_detail(session.get_page(user_url))


def get_handle(*, session: PortalSession, handle: str) -> HandleDetail:
    """Detalle de un JPNICハンドル o de una グループハンドル."""

    session.get_page(resolve_menu(session, MENU_SEARCH_IPV6))
    return parse_handle_detail(session.get_page(HANDLE_PAGE_PATH + handle))


def get_resource_management(*, session: PortalSession) -> tuple[ResourceInfo, str]:
    """`資源管理者情報`: datos del gestor, utilización y bloques CIDR.

    Devuelve también el HTML crudo (útil para archivar la página tal cual).
    """

    html = session.get_page(resolve_menu(session, MENU_RESOURCE_MANAGER))
    return parse_resource_management(html), html


def change_contact_info(*, session: PortalSession, handle_input: HandleInput) -> str:
    """Solicita el cambio de datos de un handle en dos pasos.

    1. Envía el formulario relleno.
    2. Si el portal muestra la página de confirmación, la confirma.

    Returns:
        El 受付番号 de la página final ("" si el portal no lo muestra).

    Raises:
        ApplicationError: el portal rechazó los datos (texto en rojo).
        StructuralError: no apareció la confirmación ni un error reconocible.
    """

    html = session.get_page(resolve_menu(session, MENU_CHANGE_CONTACT))
    seed = extract_form(html, action_contains("regist.do"))
    body = build_contact_change(seed, handle_input)
    html = session.post_page(seed.action, body.encode())

    if not has_confirmation(html):
        message = find_highlighted_error(html)
        if message:
            raise ApplicationError(message)
        raise StructuralError("el portal no mostró la página de confirmación")

    seed = extract_form(html, action_contains("apply"))
    html = session.post_page(seed.action, build_confirmation(seed).encode())
    recep_no = find_recep_no(html)
    logger.info("cambio de contacto solicitado (受付番号=%s)", recep_no or "-")
    return recep_no


def get_request_list(*, session: PortalSession, start_recep_no: str = "") -> list[RequestInfo]:
    """`申請一覧` desde un 受付番号 inicial (vacío = todos)."""

    html = session.get_page(resolve_menu(session, MENU_REQUEST_LIST))
    seed = extract_form(html)
    body = build_request_list(seed.value("destdisp"), start_recep_no)
    html = session.post_page(seed.action, body.encode())
    return [RequestInfo.model_validate(row) for row in extract_rows(html, REQUEST_LIST)]


def send_transaction(
    *,
    session: PortalSession,
    url: str,
    fields: Iterable[tuple[str, str]],
    classifier: ErrorClassifier | None = None,
    raise_on_error: bool = True,
) -> ResultOutcome:
    """Envía una Webトランザクション y clasifica RET / RET_CODE.

    Raises:
        ApplicationError: si `raise_on_error` y el resultado no es limpio. El
            `ResultOutcome` completo viaja en `exc.outcome`.
    """

    payload = marshal_transaction(fields)
    raw = session.post(session.resolve(url), to_legacy(payload), content_type=TRANSACTION_CONTENT_TYPE)
    outcome = parse_result_lines(from_legacy(raw).splitlines(), classifier)
    logger.info("transacción: RET=%s, %d errores de interfaz", outcome.overall_code, len(outcome.interface_errors))
    if raise_on_error:
        outcome.raise_for_error()
    return outcome

