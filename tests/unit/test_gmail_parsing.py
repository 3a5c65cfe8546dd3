"""Unit tests for Gmail message parsing helpers."""

import pytest

from tests.fakes import b64, make_message
from unsubscribe_finder.exceptions import MalformedPayloadError, PayloadTooDeepError, UpstreamError
from unsubscribe_finder.gmail.parsing import (
    build_header_map,
    decode_body_data,
    format_internal_date,
    message_to_email_detail,
    message_to_unsubscribe_email,
    resolve_body,
)
from unsubscribe_finder.models import LinkSource, PayloadPart


DEEP_TREE_HTML = '<html><a href="https://s.com/unsubscribe">Unsubscribe</a></html>'


def _tree(payload: dict) -> PayloadPart:
    return PayloadPart.from_api(payload)


def _nested(leaf: dict, levels: int) -> dict:
    node = leaf
    for _ in range(levels):
        node = {"mimeType": "multipart/mixed", "parts": [node]}
    return node


class TestBuildHeaderMap:
    """Test suite for header normalization."""

    def test_names_are_lower_cased(self) -> None:
        headers = build_header_map([{"name": "List-Unsubscribe", "value": "<https://x>"}])

        assert headers == {"list-unsubscribe": "<https://x>"}

    def test_later_duplicates_win(self) -> None:
        headers = build_header_map(
            [
                {"name": "Subject", "value": "first"},
                {"name": "SUBJECT", "value": "second"},
            ]
        )

        assert headers == {"subject": "second"}

    def test_empty_input(self) -> None:
        assert build_header_map([]) == {}
        assert build_header_map(None) == {}


class TestResolveBody:
    """Test suite for body resolution."""

    def test_html_preferred_over_earlier_plain_text(self) -> None:
        payload = {
            "mimeType": "multipart/alternative",
            "parts": [
                {"mimeType": "text/plain", "body": {"data": b64("plain")}},
                {"mimeType": "text/html", "body": {"data": b64("<html>rich</html>")}},
            ],
        }

        assert resolve_body(_tree(payload)) == "<html>rich</html>"

    def test_root_content_takes_priority_over_parts(self) -> None:
        payload = {
            "mimeType": "text/html",
            "body": {"data": b64("root body")},
            "parts": [{"mimeType": "text/html", "body": {"data": b64("child body")}}],
        }

        assert resolve_body(_tree(payload)) == "root body"

    def test_plain_text_only_message_resolves_empty(self) -> None:
        payload = {
            "mimeType": "multipart/alternative",
            "parts": [{"mimeType": "text/plain", "body": {"data": b64("plain")}}],
        }

        assert resolve_body(_tree(payload)) == ""

    def test_nested_html_found_depth_first(self) -> None:
        payload = {
            "mimeType": "multipart/mixed",
            "parts": [
                {
                    "mimeType": "multipart/related",
                    "parts": [
                        {
                            "mimeType": "multipart/alternative",
                            "parts": [
                                {"mimeType": "text/plain", "body": {"data": b64("plain")}},
                                {"mimeType": "text/html", "body": {"data": b64("<html>deep</html>")}},
                            ],
                        }
                    ],
                },
                {"mimeType": "text/html", "body": {"data": b64("<html>sibling</html>")}},
            ],
        }

        assert resolve_body(_tree(payload)) == "<html>deep</html>"

    def test_empty_nested_branch_falls_through_to_sibling(self) -> None:
        payload = {
            "mimeType": "multipart/mixed",
            "parts": [
                {"mimeType": "multipart/alternative", "parts": [{"mimeType": "text/plain"}]},
                {"mimeType": "text/html", "body": {"data": b64("<html>next</html>")}},
            ],
        }

        assert resolve_body(_tree(payload)) == "<html>next</html>"

    def test_empty_payload(self) -> None:
        assert resolve_body(_tree({})) == ""

    def test_depth_limit(self) -> None:
        payload = _nested({"mimeType": "text/html", "body": {"data": b64("<html>x</html>")}}, 60)

        with pytest.raises(PayloadTooDeepError):
            resolve_body(PayloadPart.from_api(payload, max_depth=50))

        assert issubclass(PayloadTooDeepError, UpstreamError)

    def test_root_content_ignores_deep_parts(self) -> None:
        payload = {
            "mimeType": "text/html",
            "body": {"data": b64(DEEP_TREE_HTML)},
            "parts": [_nested({"mimeType": "text/plain"}, 60)],
        }
        message = make_message("deep-root", payload=payload)

        email = message_to_unsubscribe_email(message, max_depth=50)

        assert [link.url for link in email.unsubscribe_links] == ["https://s.com/unsubscribe"]

    def test_first_html_sibling_wins_before_deep_branch(self) -> None:
        payload = {
            "mimeType": "multipart/mixed",
            "parts": [
                {"mimeType": "text/html", "body": {"data": b64(DEEP_TREE_HTML)}},
                _nested({"mimeType": "text/plain"}, 60),
            ],
        }
        message = make_message("deep-sibling", payload=payload)

        email = message_to_unsubscribe_email(message, max_depth=50)

        assert [link.url for link in email.unsubscribe_links] == ["https://s.com/unsubscribe"]


class TestDecodeBodyData:
    """Test suite for body decoding."""

    def test_url_safe_unpadded(self) -> None:
        assert decode_body_data(b64("héllo ~~~ ???")) == "héllo ~~~ ???"

    def test_malformed_data_raises(self) -> None:
        with pytest.raises(MalformedPayloadError):
            decode_body_data("a")


class TestMessageConversion:
    """Test suite for converting whole messages."""

    def test_unsubscribe_email_fields(self, newsletter_html: str) -> None:
        message = make_message(
            "m1",
            headers={
                "From": "News <news@example.com>",
                "Subject": "Weekly",
                "List-Unsubscribe": "<https://news.example.com/u>",
            },
            html=newsletter_html,
            snippet="Weekly tips",
        )

        email = message_to_unsubscribe_email(message)

        assert email.id == "m1"
        assert email.thread_id == "thread-m1"
        assert email.sender == "News <news@example.com>"
        assert email.subject == "Weekly"
        assert email.date == "2024-01-01T00:00:00.000Z"
        assert email.snippet == "Weekly tips"
        assert [link.source for link in email.unsubscribe_links] == [
            LinkSource.HEADER,
            LinkSource.BODY,
        ]

    def test_missing_headers_use_placeholders(self) -> None:
        email = message_to_unsubscribe_email(make_message("m2"))

        assert email.sender == "Unknown"
        assert email.subject == "No Subject"
        assert email.unsubscribe_links == []

    def test_wire_format_uses_camel_case(self) -> None:
        email = message_to_unsubscribe_email(make_message("m3"))

        dumped = email.model_dump(by_alias=True)

        assert "threadId" in dumped
        assert "unsubscribeLinks" in dumped

    def test_email_detail(self) -> None:
        message = make_message("m4", headers={"Subject": "Hi"}, html="<html>body</html>")

        detail = message_to_email_detail(message)

        assert detail.subject == "Hi"
        assert detail.body == "<html>body</html>"
        assert detail.headers == {"subject": "Hi"}

    def test_format_internal_date(self) -> None:
        assert format_internal_date("1704067200123") == "2024-01-01T00:00:00.123Z"

    @pytest.mark.parametrize("value", [None, "", "soon"])
    def test_invalid_internal_date_rejected(self, value) -> None:
        with pytest.raises(MalformedPayloadError):
            format_internal_date(value)
