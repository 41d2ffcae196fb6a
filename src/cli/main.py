"""CLI principal (Typer).

Por qué la CLI es delgada:
- Toda la navegación vive en `core.services.portal_workflows`; aquí solo se
  abren credenciales/sesión, se traducen errores a códigos de salida y se
  presenta el resultado (Rich o JSON).
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.credentials import load_credential_files
from adapters.http_client import PortalSession, open_session
from adapters.json_exporter import dump_records, export_records_json
from cli import doctor
from cli.ui_components import (
    build_cidr_table,
    build_detail_panel,
    build_handle_panel,
    build_handles_table,
    build_ipv4_table,
    build_ipv6_table,
    build_outcome_panel,
    build_requests_table,
    build_resource_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import HandleInput, SearchIPv4, SearchIPv6
from core.errors import ApplicationError, PortalError
from core.services import portal_workflows
from core.traversal import Deadline

app = typer.Typer(no_args_is_help=True, help="Cliente del portal de miembros de JPNIC.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"nivel de logging desconocido: {level!r}", param_hint="--log-level")
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING..."),
    banner: bool = typer.Option(False, "--banner", help="Show the welcome banner."),
) -> None:
    settings = AppSettings()
    _configure_logging(log_level or settings.log_level)
    if banner:
        print_banner(_console)


@contextmanager
def _portal_session(settings: AppSettings) -> Iterator[PortalSession]:
    """Sesión autenticada con el plazo global del workflow."""

    deadline = Deadline.optional(settings.workflow_timeout_seconds)
    with open_session(load_credential_files(settings), settings, deadline=deadline) as session:
        yield session


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Traduce la taxonomía de errores a mensajes y códigos de salida.

    - 1: error de credenciales, red, codificación o estructura.
    - 2: rechazo de negocio del portal.
    """

    try:
        yield
    except ApplicationError as exc:
        _err_console.print(f"[red]Rechazado por el portal:[/red] {exc}")
        if exc.outcome is not None:
            _err_console.print(build_outcome_panel(exc.outcome))
        raise typer.Exit(2) from exc
    except PortalError as exc:
        _err_console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
        raise typer.Exit(1) from exc


def _emit_json(payload: BaseModel | list, output: Path | None) -> None:
    if output is None:
        typer.echo(dump_records(payload), nl=False)
        return
    path = export_records_json(payload=payload, output_path=output)
    _console.print(f"[green]JSON:[/green] {path}")


def _warn(message: str) -> None:
    _err_console.print(f"[yellow]Aviso:[/yellow] {message}")


def _traversal_options(settings: AppSettings) -> portal_workflows.TraversalOptions:
    return portal_workflows.TraversalOptions(min_interval=settings.request_interval_seconds)


@app.command("search-v4")
def search_v4(
    ip_address: str = typer.Option("", "--ip", help="IPネットワークアドレス"),
    network_name: str = typer.Option("", "--network-name"),
    org: str = typer.Option("", "--org"),
    short_name: str = typer.Option("", "--short-name", help="資源管理者略称"),
    size_start: str = typer.Option("", "--size-start"),
    size_end: str = typer.Option("", "--size-end"),
    reg_start: str = typer.Option("", "--reg-start"),
    reg_end: str = typer.Option("", "--reg-end"),
    return_start: str = typer.Option("", "--return-start"),
    return_end: str = typer.Option("", "--return-end"),
    recep_no: str = typer.Option("", "--recep-no"),
    deli_no: str = typer.Option("", "--deli-no"),
    is_pa: bool = typer.Option(False, "--pa"),
    is_allocate: bool = typer.Option(False, "--allocate"),
    is_assign_infra: bool = typer.Option(False, "--assign-infra"),
    is_assign_user: bool = typer.Option(False, "--assign-user"),
    is_sub_allocate: bool = typer.Option(False, "--sub-allocate"),
    is_historical_pi: bool = typer.Option(False, "--historical-pi"),
    is_special_pi: bool = typer.Option(False, "--special-pi"),
    myself: bool = typer.Option(False, "--myself", help="Usar el 略称 propio."),
    is_detail: bool = typer.Option(False, "--detail", help="Descargar detalle y handles."),
    skip_handles: list[str] = typer.Option([], "--skip-handle", help="Handle ya conocido (repetible)."),
    as_json: bool = typer.Option(False, "--json", help="Salida JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Fichero JSON de salida."),
) -> None:
    """`登録情報検索(IPv4)`."""

    settings = AppSettings()
    search = SearchIPv4(
        ip_address=ip_address,
        size_start=size_start,
        size_end=size_end,
        network_name=network_name,
        reg_start=reg_start,
        reg_end=reg_end,
        return_start=return_start,
        return_end=return_end,
        org=org,
        short_name=short_name,
        recep_no=recep_no,
        deli_no=deli_no,
        is_pa=is_pa,
        is_allocate=is_allocate,
        is_assign_infra=is_assign_infra,
        is_assign_user=is_assign_user,
        is_sub_allocate=is_sub_allocate,
        is_historical_pi=is_historical_pi,
        is_special_pi=is_special_pi,
        myself=myself,
        is_detail=is_detail,
        skip_handles=skip_handles,
    )
    with _cli_errors(), _portal_session(settings) as session:
        result = portal_workflows.search_ipv4(
            session=session,
            search=search,
            options=_traversal_options(settings),
            hooks=portal_workflows.WorkflowHooks(warning=_warn),
        )

    if as_json or output:
        _emit_json(result, output)
        return
    _console.print(build_ipv4_table(result.records))
    if result.handles:
        _console.print(build_handles_table(result.handles))


@app.command("search-v6")
def search_v6(
    ip_address: str = typer.Option("", "--ip", help="IPネットワークアドレス"),
    network_name: str = typer.Option("", "--network-name"),
    org: str = typer.Option("", "--org"),
    short_name: str = typer.Option("", "--short-name", help="資源管理者略称"),
    size_start: str = typer.Option("", "--size-start"),
    size_end: str = typer.Option("", "--size-end"),
    reg_start: str = typer.Option("", "--reg-start"),
    reg_end: str = typer.Option("", "--reg-end"),
    return_start: str = typer.Option("", "--return-start"),
    return_end: str = typer.Option("", "--return-end"),
    recep_no: str = typer.Option("", "--recep-no"),
    deli_no: str = typer.Option("", "--deli-no"),
    is_allocate: bool = typer.Option(False, "--allocate"),
    is_assign_infra: bool = typer.Option(False, "--assign-infra"),
    is_assign_user: bool = typer.Option(False, "--assign-user"),
    is_sub_allocate: bool = typer.Option(False, "--sub-allocate"),
    myself: bool = typer.Option(False, "--myself", help="Usar el 略称 propio."),
    is_detail: bool = typer.Option(False, "--detail", help="Descargar detalle y handles."),
    skip_handles: list[str] = typer.Option([], "--skip-handle", help="Handle ya conocido (repetible)."),
    as_json: bool = typer.Option(False, "--json", help="Salida JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Fichero JSON de salida."),
) -> None:
    """`登録情報検索(IPv6)`."""

    settings = AppSettings()
    search = SearchIPv6(
        ip_address=ip_address,
        size_start=size_start,
        size_end=size_end,
        network_name=network_name,
        reg_start=reg_start,
        reg_end=reg_end,
        return_start=return_start,
        return_end=return_end,
        org=org,
        short_name=short_name,
        recep_no=recep_no,
        deli_no=deli_no,
        is_allocate=is_allocate,
        is_assign_infra=is_assign_infra,
        is_assign_user=is_assign_user,
        is_sub_allocate=is_sub_allocate,
        myself=myself,
        is_detail=is_detail,
        skip_handles=skip_handles,
    )
    with _cli_errors(), _portal_session(settings) as session:
        result = portal_workflows.search_ipv6(
            session=session,
            search=search,
            options=_traversal_options(settings),
            hooks=portal_workflows.WorkflowHooks(warning=_warn),
        )

    if as_json or output:
        _emit_json(result, output)
        return
    _console.print(build_ipv6_table(result.records))
    if result.handles:
        _console.print(build_handles_table(result.handles))


@app.command("handle")
def handle(
    jpnic_handle: str = typer.Argument(..., help="JPNICハンドル o グループハンドル"),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Detalle de un handle."""

    settings = AppSettings()
    with _cli_errors(), _portal_session(settings) as session:
        detail = portal_workflows.get_handle(session=session, handle=jpnic_handle)

    if as_json:
        _emit_json(detail, None)
        return
    _console.print(build_handle_panel(detail))


@app.command("ip-user")
def ip_user(
    user_url: str = typer.Argument(..., help="Enlace de detalle (p.ej. /jpnic/entryinfo_v4.do?...)"),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Detalle de una asignación a partir de su enlace."""

    settings = AppSettings()
    with _cli_errors(), _portal_session(settings) as session:
        detail = portal_workflows.get_ip_user(session=session, user_url=user_url)

    if as_json:
        _emit_json(detail, None)
        return
    _console.print(build_detail_panel(detail))


@app.command("resources")
def resources(
    as_json: bool = typer.Option(False, "--json"),
    save_html: Optional[Path] = typer.Option(None, "--save-html", help="Guardar la página cruda."),
) -> None:
    """`資源管理者情報`: gestor, utilización y bloques CIDR."""

    settings = AppSettings()
    with _cli_errors(), _portal_session(settings) as session:
        info, html = portal_workflows.get_resource_management(session=session)

    if save_html is not None:
        save_html.parent.mkdir(parents=True, exist_ok=True)
        save_html.write_text(html, encoding="utf-8")
    if as_json:
        _emit_json(info, None)
        return
    _console.print(build_resource_panel(info))
    _console.print(build_cidr_table(info))


@app.command("requests")
def requests(
    start_recep_no: str = typer.Option("", "--start", help="受付番号 inicial."),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """`申請一覧`."""

    settings = AppSettings()
    with _cli_errors(), _portal_session(settings) as session:
        rows = portal_workflows.get_request_list(session=session, start_recep_no=start_recep_no)

    if as_json:
        _emit_json(rows, None)
        return
    _console.print(build_requests_table(rows))


@app.command("change-contact")
def change_contact(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON con los datos del handle."),
) -> None:
    """`担当グループ（担当者）情報登録・変更` en dos pasos."""

    try:
        data = HandleInput.model_validate(json.loads(input_file.read_text(encoding="utf-8")))
    except (ValueError, ValidationError) as exc:
        raise typer.BadParameter(f"{input_file}: {exc}") from exc

    settings = AppSettings()
    with _cli_errors(), _portal_session(settings) as session:
        recep_no = portal_workflows.change_contact_info(session=session, handle_input=data)

    _console.print(f"[green]Solicitud enviada.[/green] 受付番号: {recep_no or '-'}")


def _read_transaction(path: Path) -> list[tuple[str, str]]:
    fields: list[tuple[str, str]] = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise typer.BadParameter(f"línea sin '=': {line!r}")
        key, value = line.split("=", 1)
        fields.append((key.strip(), value))
    return fields


@app.command("send")
def send(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Fichero CLAVE=VALOR."),
    url: Optional[str] = typer.Option(None, "--url", help="Endpoint (por defecto JPNIC_PORTAL_TRANSACTION_URL)."),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Envía una Webトランザクション y muestra RET / RET_CODE."""

    settings = AppSettings()
    target = url or settings.transaction_url
    if not target:
        raise typer.BadParameter("falta --url (o JPNIC_PORTAL_TRANSACTION_URL)")
    fields = _read_transaction(input_file)

    with _cli_errors(), _portal_session(settings) as session:
        outcome = portal_workflows.send_transaction(session=session, url=target, fields=fields)

    if as_json:
        _emit_json(outcome, None)
        return
    _console.print(build_outcome_panel(outcome))


def run() -> None:
    app()
