"""Doctor command for environment diagnostics."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.credentials import decode_client_identity, load_credential_files
from adapters.http_client import LOGIN_PATH, open_session
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.errors import PortalError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_credentials(settings: AppSettings) -> tuple[bool, str]:
    try:
        identity = decode_client_identity(load_credential_files(settings))
    except PortalError as exc:
        return False, str(exc)
    return True, identity.subject


def _check_portal(settings: AppSettings) -> tuple[bool, str]:
    """GET del menú de miembros con la identidad cliente."""

    try:
        with open_session(load_credential_files(settings), settings) as session:
            html = session.get_page(LOGIN_PATH)
    except PortalError as exc:
        return False, str(exc)
    return True, f"{len(html)} caracteres"


@app.command()
def run(
    offline: bool = typer.Option(False, "--offline", help="Skip the portal connectivity check."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="JPNIC Portal Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Base URL", "OK", settings.base_url)
    if settings.transaction_url:
        table.add_row("Transaction URL", "OK", settings.transaction_url)
    else:
        table.add_row("Transaction URL", "OPTIONAL", "Not set -> `send` requires --url")
    table.add_row("User config", "OK" if get_user_env_file().exists() else "MISSING", str(get_user_env_file()))

    missing = [
        name
        for name, value in (("PFX path", settings.pfx_path), ("PFX pass", settings.pfx_pass), ("CA path", settings.ca_path))
        if value is None
    ]
    for name in missing:
        table.add_row(name, "FAIL", "Run `doctor setup`")

    ok_cred = False
    if not missing:
        ok_cred, detail_cred = _check_credentials(settings)
        table.add_row("Client certificate", "OK" if ok_cred else "FAIL", detail_cred)

    # Connectivity (best-effort)
    if ok_cred and not offline:
        ok_http, detail_http = _check_portal(settings)
        table.add_row("Portal menu", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if missing or not ok_cred:
        _console.print(
            "\n[yellow]Note:[/yellow] Every workflow needs the PKCS#12 bundle, its passphrase and the CA file."
        )
        raise typer.Exit(1)


@app.command(name="setup")
def setup() -> None:
    """Interactive credential setup (stores config in the user config .env)."""

    pfx_path = typer.prompt("PKCS#12 bundle path (.p12/.pfx)").strip()
    pfx_pass = typer.prompt("PKCS#12 passphrase", hide_input=True, confirmation_prompt=False)
    ca_path = typer.prompt("CA certificate path (PEM)").strip()
    transaction_url = typer.prompt("Web transaction URL (optional)", default="", show_default=False).strip()

    for label, raw in (("PKCS#12 bundle", pfx_path), ("CA certificate", ca_path)):
        if not Path(raw).expanduser().is_file():
            raise typer.BadParameter(f"{label} not found: {raw}")

    values = {
        "JPNIC_PORTAL_PFX_PATH": str(Path(pfx_path).expanduser().resolve()),
        "JPNIC_PORTAL_PFX_PASS": pfx_pass,
        "JPNIC_PORTAL_CA_PATH": str(Path(ca_path).expanduser().resolve()),
    }
    if transaction_url:
        values["JPNIC_PORTAL_TRANSACTION_URL"] = transaction_url

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved portal config to:[/green] {env_path}")
