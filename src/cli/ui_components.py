"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import (
    HandleDetail,
    InfoDetail,
    InfoIPv4,
    InfoIPv6,
    RequestInfo,
    ResourceInfo,
    ResultOutcome,
    UsageRatio,
)


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("JPNIC Portal", style="bold cyan")
    subtitle = Text("Búsqueda de registros • Handles • Solicitudes", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _ratio(usage: UsageRatio | None) -> str:
    if usage is None:
        return "-"
    return f"{usage.ratio:.2f}% ({usage.used}/{usage.total})"


def build_ipv4_table(records: list[InfoIPv4]) -> Table:
    table = Table(title="登録情報 (IPv4)")
    table.add_column("IP", style="cyan", no_wrap=True)
    table.add_column("Size", style="white")
    table.add_column("Network", style="white")
    table.add_column("Org", style="white")
    table.add_column("略称", style="magenta")
    table.add_column("Asignación", style="dim")
    table.add_column("受付番号", style="dim")
    for r in records:
        table.add_row(r.ip_address, r.size, r.network_name, r.org_name, r.short_name, r.assign_date, r.recep_no)
    return table


def build_ipv6_table(records: list[InfoIPv6]) -> Table:
    table = Table(title="登録情報 (IPv6)")
    table.add_column("IP", style="cyan", no_wrap=True)
    table.add_column("Network", style="white")
    table.add_column("Org", style="white")
    table.add_column("略称", style="magenta")
    table.add_column("Asignación", style="dim")
    table.add_column("受付番号", style="dim")
    for r in records:
        table.add_row(r.ip_address, r.network_name, r.org_name, r.short_name, r.assign_date, r.recep_no)
    return table


def build_handles_table(handles: list[HandleDetail]) -> Table:
    table = Table(title="Handles")
    table.add_column("Handle", style="cyan", no_wrap=True)
    table.add_column("Tipo", style="white")
    table.add_column("Nombre / Org", style="white")
    table.add_column("Email", style="magenta")
    table.add_column("Tel", style="dim")
    for h in handles:
        kind = "persona" if h.is_jpnic_handle else "grupo"
        table.add_row(h.handle, kind, h.org, h.email, h.tel)
    return table


def build_detail_panel(detail: InfoDetail) -> Panel:
    body = Text()
    for name, value in detail.model_dump().items():
        if value:
            body.append(f"{name}: ", style="bold")
            body.append(f"{value}\n")
    return Panel(body, title=Text(detail.ip_address or "detalle", style="bold cyan"), border_style="cyan")


def build_handle_panel(handle: HandleDetail) -> Panel:
    body = Text()
    for name, value in handle.model_dump().items():
        if value not in ("", None):
            body.append(f"{name}: ", style="bold")
            body.append(f"{value}\n")
    return Panel(body, title=Text(handle.handle or "handle", style="bold cyan"), border_style="cyan")


def build_resource_panel(info: ResourceInfo) -> Panel:
    """Panel del gestor de recursos + tabla de bloques CIDR."""

    manager = info.manager
    body = Text()
    body.append(f"{manager.org} ({manager.short_name})\n", style="bold")
    body.append(f"資源管理者番号: {manager.manager_no}\n")
    body.append(f"総利用率: {_ratio(info.usage)}\n")
    ad_ratio = "-" if info.ad_ratio is None else f"{info.ad_ratio}"
    body.append(f"AD ratio: {ad_ratio}\n")
    body.append(f"Bloques CIDR: {len(info.cidr_blocks)}", style="dim")
    return Panel(body, title=Text("資源管理者情報", style="bold yellow"), border_style="yellow")


def build_cidr_table(info: ResourceInfo) -> Table:
    table = Table(title="CIDR")
    table.add_column("Bloque", style="cyan", no_wrap=True)
    table.add_column("Asignación", style="white")
    table.add_column("Utilización", style="green")
    for block in info.cidr_blocks:
        table.add_row(block.address, block.assign_date, _ratio(block.usage))
    return table


def build_requests_table(requests: list[RequestInfo]) -> Table:
    table = Table(title="申請一覧")
    table.add_column("受付番号", style="cyan", no_wrap=True)
    table.add_column("審議番号", style="white")
    table.add_column("種別", style="white")
    table.add_column("区分", style="white")
    table.add_column("申請者", style="magenta")
    table.add_column("申請日", style="dim")
    table.add_column("完了日", style="dim")
    table.add_column("Estado", style="green")
    for r in requests:
        table.add_row(
            r.recep_no,
            r.deli_no,
            r.apply_kind,
            r.apply_class,
            r.applicant,
            r.apply_date,
            r.complete_date,
            r.status,
        )
    return table


def build_outcome_panel(outcome: ResultOutcome) -> Panel:
    """Panel para presentar el resultado RET/RET_CODE."""

    style = "green" if outcome.ok else "red"
    body = Text()
    body.append(f"RET: {outcome.overall_code}\n", style="bold")
    for label, value in (
        ("受付番号", outcome.recep_no),
        ("ADM", outcome.adm_handle),
        ("TECH1", outcome.tech1_handle),
        ("TECH2", outcome.tech2_handle),
    ):
        if value:
            body.append(f"{label}: {value}\n")
    for message in outcome.messages():
        body.append(f"- {message}\n", style="red")
    return Panel(body, title=Text("Webトランザクション", style=f"bold {style}"), border_style=style)
