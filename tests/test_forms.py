"""Tests for adapters.forms and adapters.submissions: form seeds and fixed-format bodies."""

from __future__ import annotations

import pytest

from adapters.forms import (
    TOKEN_FIELD,
    FormSubmission,
    action_contains,
    checkbox,
    extract_form,
)
from adapters.submissions import (
    build_confirmation,
    build_contact_change,
    build_ipv4_search,
    build_ipv6_search,
    build_request_list,
)
from core.domain.models import HandleInput, SearchIPv4, SearchIPv6
from core.errors import FormNotFoundError, StructuralError
from tests.conftest import SEARCH_FORM_V4, html_page

TWO_FORMS = html_page(
    '<form action="/jpnic/logout.do"><input type="hidden" name="x" value="1"></form>'
    '<form action="/jpnic/G11320regist.do" method="post">'
    f'<input type="hidden" name="{TOKEN_FIELD}" value="tok-1">'
    '<input type="hidden" name="destdisp" value="G11320">'
    '<input type="hidden" name="aplyid" value="1">'
    '<input type="text" name="name_jp" value="">'
    '<input type="submit" value="申請">'
    "</form>"
)


# ---------------------------------------------------------------------------
# extract_form
# ---------------------------------------------------------------------------

class TestExtractForm:
    def test_first_form_without_predicate(self):
        seed = extract_form(TWO_FORMS)
        assert seed.action == "/jpnic/logout.do"
        assert seed.hidden == {"x": "1"}

    def test_predicate_selects_matching_form(self):
        seed = extract_form(TWO_FORMS, action_contains("regist.do"))
        assert seed.action == "/jpnic/G11320regist.do"
        assert seed.value(TOKEN_FIELD) == "tok-1"
        assert seed.value("destdisp") == "G11320"
        assert seed.value("aplyid") == "1"

    def test_hidden_fields_only_from_matched_form(self):
        seed = extract_form(TWO_FORMS, action_contains("regist.do"))
        assert "x" not in seed.hidden

    def test_visible_inputs_kept_apart(self):
        seed = extract_form(TWO_FORMS, action_contains("regist.do"))
        assert seed.inputs == {"name_jp": ""}
        assert TOKEN_FIELD not in seed.inputs

    def test_first_input_value(self):
        assert extract_form(SEARCH_FORM_V4).first_input_value == "D1101"

    def test_no_matching_form(self):
        with pytest.raises(FormNotFoundError, match="2 formularios"):
            extract_form(TWO_FORMS, action_contains("apply"))

    def test_page_without_forms(self):
        with pytest.raises(FormNotFoundError):
            extract_form(html_page("<p>セッションが切れました</p>"))

    def test_form_not_found_is_structural(self):
        assert issubclass(FormNotFoundError, StructuralError)

    def test_require_missing_field(self):
        seed = extract_form(TWO_FORMS, action_contains("regist.do"))
        with pytest.raises(StructuralError, match="resceAdmSnm"):
            seed.require("resceAdmSnm")

    def test_value_default(self):
        seed = extract_form(TWO_FORMS, action_contains("regist.do"))
        assert seed.value("prevDispId") == ""
        assert seed.value("prevDispId", "none") == "none"


# ---------------------------------------------------------------------------
# FormSubmission
# ---------------------------------------------------------------------------

class TestFormSubmission:
    def test_keeps_order_and_does_not_escape(self):
        body = FormSubmission([("a", "1")]).add("action", "%81%40").add("b", "x y&")
        assert body.encode() == "a=1&action=%81%40&b=x y&"

    def test_repeated_names(self):
        body = FormSubmission().extend([("id", "1"), ("id", "2")])
        assert body.names() == ["id", "id"]
        assert str(body) == "id=1&id=2"

    def test_checkbox(self):
        assert checkbox(True) == "on"
        assert checkbox(False) == ""


# ---------------------------------------------------------------------------
# Bodies per form
# ---------------------------------------------------------------------------

class TestSearchBodies:
    def test_ipv4_manual(self):
        search = SearchIPv4(ip_address="192.0.2.0", short_name="OTHER", is_pa=True, is_special_pi=True)
        body = build_ipv4_search("D1101", search).encode()
        assert body == (
            "destdisp=D1101&ipaddr=192.0.2.0&sizeS=&sizeE=&netwrkName=&regDateS=&regDateE="
            "&rtnDateS=&rtnDateE=&organizationName=&resceAdmSnm=OTHER&recepNo=&deliNo="
            "&ipaddrKindPa=on&regKindAllo=&regKindEvent=&regKindUser=&regKindSubA="
            "&ipaddrKindPiHistorical=&ipaddrKindPiSpecial=on&action=　検索　"
        )

    def test_ipv4_myself_uses_form_short_name(self):
        search = SearchIPv4(short_name="IGNORED", myself=True, network_name="NET")
        body = build_ipv4_search("D1101", search, own_short_name="EXAMPLE")
        pairs = dict(body.pairs)
        assert pairs["resceAdmSnm"] == "EXAMPLE"
        assert pairs["netwrkName"] == "NET"

    def test_ipv6_myself_blanks_criteria_and_flags(self):
        search = SearchIPv6(ip_address="2001:db8::", is_allocate=True, myself=True)
        body = build_ipv6_search("D1201", search, own_short_name="EXAMPLE").encode()
        assert body == (
            "destdisp=D1201&ipaddr=&sizeS=&sizeE=&netwrkName=&regDateS=&regDateE="
            "&rtnDateS=&rtnDateE=&organizationName=&resceAdmSnm=EXAMPLE&recepNo=&deliNo="
            "&action=%81%40%8C%9F%8D%F5%81%40"
        )

    def test_ipv6_manual_has_kind_flags(self):
        search = SearchIPv6(ip_address="2001:db8::", is_allocate=True, is_sub_allocate=True)
        body = build_ipv6_search("D1201", search)
        names = body.names()
        assert names[-5:] == ["regKindAllo", "regKindEvent", "regKindUser", "regKindSubA", "action"]
        assert dict(body.pairs)["regKindSubA"] == "on"
        assert "ipaddrKindPa" not in names


class TestContactChangeBodies:
    def _seed(self):
        return extract_form(TWO_FORMS, action_contains("regist.do"))

    def test_person_request(self):
        data = HandleInput(jpnic_handle="AB123JP", name="山田 太郎", email="t@example.jp", apply_mail="a@example.jp")
        body = build_contact_change(self._seed(), data).encode()
        assert body.startswith(f"{TOKEN_FIELD}=tok-1&destdisp=G11320&aplyid=1&kind=person&jpnic_hdl=AB123JP")
        assert "&name_jp=山田 太郎&name=&email=t@example.jp&" in body
        assert body.endswith("&aply_from_addr=a@example.jp&aply_from_addr_confirm=a@example.jp&action=%90%5C%90%BF")

    def test_group_request(self):
        data = HandleInput(is_jpnic_handle=False, apply_mail="a@example.jp")
        pairs = dict(build_contact_change(self._seed(), data).pairs)
        assert pairs["kind"] == "group"

    def test_field_order(self):
        data = HandleInput(apply_mail="a@example.jp")
        names = build_contact_change(self._seed(), data).names()
        assert names[3:] == [
            "kind", "jpnic_hdl", "name_jp", "name", "email", "org_nm_jp", "org_nm", "zipcode",
            "addr_jp", "addr", "division_jp", "division", "title_jp", "title", "phone", "fax",
            "ntfy_mail", "aply_from_addr", "aply_from_addr_confirm", "action",
        ]

    def test_confirmation(self):
        page = html_page(
            '<form action="/jpnic/G11320apply.do">'
            f'<input type="hidden" name="{TOKEN_FIELD}" value="tok-2">'
            '<input type="hidden" name="prevDispId" value="G11320">'
            '<input type="hidden" name="aplyid" value="1">'
            '<input type="hidden" name="destdisp" value="G11321">'
            "</form>"
        )
        body = build_confirmation(extract_form(page, action_contains("apply"))).encode()
        assert body == f"{TOKEN_FIELD}=tok-2&prevDispId=G11320&aplyid=1&destdisp=G11321&inputconf=%8Am%94F"

    def test_apply_mail_required(self):
        with pytest.raises(ValueError):
            HandleInput(apply_mail="")


class TestRequestListBody:
    def test_fixed_body(self):
        assert build_request_list("L01", "2024000123").encode() == (
            "destdisp=L01&startRecepNo=2024000123&endRecepNo=&deliNo=&aplyKind=&aplyClass="
            "&resceAdmSnm=&aplyDateS=&aplyDateE=&completDateS=&completDateE=&statusId="
            "&pswdResceNewConfirm=%81%40%8C%9F%8D%F5%81%40"
        )
