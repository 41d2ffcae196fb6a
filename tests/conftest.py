"""Shared test fixtures for the portal engine tests.

The portal is replaced by `PortalStub`, an `httpx.MockTransport` handler that
serves cp932-encoded fixture pages by (method, path+query) and records every
request it sees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Union

import httpx
import pytest

from adapters.http_client import LOGIN_PATH, PortalSession, build_client
from core.config import AppSettings

BASE_URL = "https://portal.test"

MENU_LINKS = {
    "登録情報検索(IPv4)": "ipv4search.do",
    "登録情報検索(IPv6)": "ipv6search.do",
    "担当グループ・JPNICハンドル検索／変換": "handlesearch.do",
    "担当グループ（担当者）情報登録・変更": "G11320.do?aplyid=1",
    "申請一覧": "aplylist.do",
    "資源管理者情報": "resceadm.do",
}

Reply = Union[str, int, Callable[[httpx.Request], httpx.Response]]


@dataclass
class RecordedRequest:
    method: str
    path: str
    body: bytes
    content_type: str | None


@dataclass
class PortalStub:
    """Routes (method, path) to a page, a bare status code or a callable."""

    routes: dict[tuple[str, str], Reply] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)

    def page(self, method: str, path: str, reply: Reply) -> None:
        self.routes[(method, path)] = reply

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode("ascii")
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=path,
                body=request.read(),
                content_type=request.headers.get("Content-Type"),
            )
        )
        reply = self.routes.get((request.method, path))
        if reply is None:
            return httpx.Response(404)
        if callable(reply):
            return reply(request)
        if isinstance(reply, int):
            return httpx.Response(reply)
        return httpx.Response(200, content=reply.encode("cp932"))

    def paths(self, method: str | None = None) -> list[str]:
        return [r.path for r in self.requests if method is None or r.method == method]

    def last_post(self) -> RecordedRequest:
        return [r for r in self.requests if r.method == "POST"][-1]


class FakeClock:
    """Manual clock: time only moves when something sleeps."""

    def __init__(self, start: float = 100.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds

    def advance(self, seconds: float) -> None:
        self.current += seconds


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------

def html_page(body: str) -> str:
    return f"<html><head><title>JPNIC</title></head><body>{body}</body></html>"


def menu_page() -> str:
    links = "".join(f'<li><a href="{href}"> {label} </a></li>' for label, href in MENU_LINKS.items())
    return html_page(f'<ul>{links}</ul><a href="logout.do">ログアウト</a>')


def nested_table(rows: str, depth: int) -> str:
    html = f"<table>{rows}</table>"
    for _ in range(depth - 1):
        html = f"<table><tr><td>{html}</td></tr></table>"
    return html


def title_value_rows(pairs: list[tuple[str, str]]) -> str:
    return "".join(f"<tr><td>{title}</td><td>{value}</td></tr>" for title, value in pairs)


def title_value_page(pairs: list[tuple[str, str]], depth: int) -> str:
    return html_page(nested_table(title_value_rows(pairs), depth))


def listing_page(groups: list[list[str]], css_class: str = "dataRow_mnt04") -> str:
    rows = "".join(
        "<tr>" + "".join(f'<td class="{css_class}">{cell}</td>' for cell in group) + "</tr>"
        for group in groups
    )
    return html_page(f'<table><tr><td class="pager">1/1</td></tr>{rows}</table>')


def handle_link(handle: str) -> str:
    return f'<a href="/jpnic/entryinfo_handle.do?jpnic_hdl={handle}">{handle}</a>'


def detail_page(ip: str, admin: str, tech: str) -> str:
    return title_value_page(
        [
            ("IPネットワークアドレス", ip),
            ("資源管理者略称", "EXAMPLE"),
            ("ネットワーク名", "EXAMPLE-NET"),
            ("組織名", "株式会社エグザンプル"),
            ("Organization", "Example Co., Ltd."),
            ("管理者連絡窓口", handle_link(admin)),
            ("技術連絡担当者", handle_link(tech)),
            ("割当年月日", "2020/04/01"),
            ("未知の項目", "ignored"),
        ],
        depth=4,
    )


def handle_page(handle: str, *, group: bool = False) -> str:
    label = "グループハンドル" if group else "JPNICハンドル"
    return title_value_page(
        [
            (label, handle),
            ("氏名", f"担当 {handle}"),
            ("電子メイル", f"{handle.lower()}@example.jp"),
            ("FAX番号", "03-0000-0001"),
            ("最終更新", "2023/01/01"),
        ],
        depth=3,
    )


def ipv4_row(ip: str, link: str, suffix: str) -> list[str]:
    return [
        f'<a href="{link}">{ip}</a>',
        "256",
        f"NET-{suffix}",
        "2020/04/01",
        "",
        f"Org {suffix}",
        "EXAMPLE",
        f"R{suffix}",
        f"D{suffix}",
        "ASSIGNED",
        f"K{suffix}",
    ]


IPV4_HEADER = [
    "IPネットワークアドレス",
    "サイズ",
    "ネットワーク名",
    "割当年月日",
    "返却年月日",
    "組織名",
    "資源管理者略称",
    "受付番号",
    "審議番号",
    "種別",
    "kind",
]

SEARCH_FORM_V4 = html_page(
    '<form action="/jpnic/ipv4search_result.do" method="post">'
    '<input type="hidden" name="destdisp" value="D1101">'
    "<ul><table><tr><td><table><tr><td>"
    '<input type="text" name="resceAdmSnm" value="EXAMPLE">'
    "</td></tr></table></td></tr></table></ul>"
    "</form>"
)

SEARCH_FORM_V6 = SEARCH_FORM_V4.replace("ipv4search_result", "ipv6search_result").replace("D1101", "D1201")


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        base_url=BASE_URL,
        transaction_url=f"{BASE_URL}/webtrans/entry",
        request_interval_seconds=0,
    )


@pytest.fixture
def portal() -> PortalStub:
    stub = PortalStub()
    stub.page("GET", LOGIN_PATH, menu_page())
    return stub


@pytest.fixture
def session(portal: PortalStub, settings: AppSettings) -> Iterator[PortalSession]:
    client = build_client(settings, transport=httpx.MockTransport(portal.handle))
    with PortalSession(client, base_url=settings.base_url) as s:
        yield s


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
