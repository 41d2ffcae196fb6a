"""Resolución de etiquetas de menú a endpoints.

El portal no publica URLs estables para cada formulario: se llega a ellos por
el menú de la página de login de miembros. Las etiquetas son contrato externo.
"""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup

from adapters.http_client import LOGIN_PATH, PortalSession
from core.errors import NavigationError

MENU_SEARCH_IPV4 = "登録情報検索(IPv4)"
MENU_SEARCH_IPV6 = "登録情報検索(IPv6)"
MENU_HANDLE_SEARCH = "担当グループ・JPNICハンドル検索／変換"
MENU_CHANGE_CONTACT = "担当グループ（担当者）情報登録・変更"
MENU_REQUEST_LIST = "申請一覧"
MENU_RESOURCE_MANAGER = "資源管理者情報"


@dataclass(frozen=True)
class MenuEntry:
    label: str
    endpoint: str


def find_menu_entry(html: str, label: str) -> MenuEntry | None:
    """Primer `<a href>` cuyo texto visible (recortado solo en los extremos) es exactamente `label`."""

    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.find_all("a", href=True):
        if anchor.get_text().strip() == label:
            return MenuEntry(label=label, endpoint=str(anchor["href"]))
    return None


def resolve_menu(session: PortalSession, label: str) -> str:
    """Navega al menú principal y devuelve la URL absoluta del formulario."""

    html = session.get_page(LOGIN_PATH)
    entry = find_menu_entry(html, label)
    if entry is None:
        raise NavigationError(
            f"menú '{label}' no encontrado (¿cambió el layout o falló el login?)"
        )
    return session.resolve(entry.endpoint)
