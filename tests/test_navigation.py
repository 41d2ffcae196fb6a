"""Tests for adapters.navigation and PortalSession URL handling."""

from __future__ import annotations

import pytest

from adapters.navigation import (
    MENU_REQUEST_LIST,
    MENU_SEARCH_IPV4,
    find_menu_entry,
    resolve_menu,
)
from core.errors import NavigationError, StructuralError, TransportError
from tests.conftest import BASE_URL, html_page, menu_page


class TestFindMenuEntry:
    def test_exact_label(self):
        entry = find_menu_entry(menu_page(), MENU_SEARCH_IPV4)
        assert entry is not None
        assert entry.endpoint == "ipv4search.do"

    def test_partial_label_does_not_match(self):
        assert find_menu_entry(menu_page(), "登録情報検索") is None

    def test_fragmented_anchor_text_does_not_match(self):
        html = html_page('<a href="ipv4search.do">登録情報検索 <span>(IPv4)</span></a>')
        assert find_menu_entry(html, MENU_SEARCH_IPV4) is None

    def test_anchor_without_href_ignored(self):
        html = html_page(f"<a>{MENU_REQUEST_LIST}</a><a href='list2.do'>{MENU_REQUEST_LIST}</a>")
        entry = find_menu_entry(html, MENU_REQUEST_LIST)
        assert entry is not None
        assert entry.endpoint == "list2.do"


class TestResolveMenu:
    def test_relative_menu_href(self, session, portal):
        assert resolve_menu(session, MENU_SEARCH_IPV4) == f"{BASE_URL}/jpnic/ipv4search.do"
        assert portal.paths() == ["/jpnic/certmemberlogin.do"]

    def test_missing_label(self, session, portal):
        portal.page("GET", "/jpnic/certmemberlogin.do", html_page("<p>ログインしてください</p>"))
        with pytest.raises(NavigationError, match="no encontrado"):
            resolve_menu(session, MENU_SEARCH_IPV4)

    def test_navigation_error_is_structural(self):
        assert issubclass(NavigationError, StructuralError)

    def test_menu_page_http_error(self, session, portal):
        portal.page("GET", "/jpnic/certmemberlogin.do", 503)
        with pytest.raises(TransportError, match="HTTP 503"):
            resolve_menu(session, MENU_SEARCH_IPV4)


class TestSessionResolve:
    @pytest.mark.parametrize(
        ("href", "expected"),
        [
            ("https://other.test/x.do", "https://other.test/x.do"),
            ("/jpnic/entryinfo_v4.do?id=1", f"{BASE_URL}/jpnic/entryinfo_v4.do?id=1"),
            ("resceadm.do", f"{BASE_URL}/jpnic/resceadm.do"),
        ],
    )
    def test_resolve(self, session, href, expected):
        assert session.resolve(href) == expected
