"""Unit tests for unsubscribe link extraction."""

from unsubscribe_finder.extraction import (
    extract_body_links,
    extract_header_links,
    extract_unsubscribe_links,
)
from unsubscribe_finder.gmail.parsing import build_header_map
from unsubscribe_finder.models import LinkSource, UnsubscribeLink


def _header(value: str) -> dict[str, str]:
    return build_header_map([{"name": "List-Unsubscribe", "value": value}])


class TestHeaderLinks:
    """Test suite for the List-Unsubscribe header pass."""

    def test_mailto_dropped_http_kept(self) -> None:
        links = extract_header_links(_header("<mailto:x@y>, <https://z.com/u>"))

        assert links == [UnsubscribeLink(source=LinkSource.HEADER, url="https://z.com/u")]

    def test_header_without_brackets_yields_nothing(self) -> None:
        assert extract_header_links(_header("https://z.com/u")) == []

    def test_missing_header_yields_nothing(self) -> None:
        assert extract_header_links({}) == []

    def test_repeated_urls_are_kept_in_order(self) -> None:
        links = extract_header_links(
            _header("<https://a.com/u>, <http://b.com/u>, <https://a.com/u>")
        )

        assert [link.url for link in links] == [
            "https://a.com/u",
            "http://b.com/u",
            "https://a.com/u",
        ]


class TestBodyLinks:
    """Test suite for the HTML body pass."""

    def test_duplicate_anchor_reported_once(self) -> None:
        body = (
            "<html><body>"
            '<a href="https://s.com/unsubscribe?id=1">one</a>'
            '<a href="https://s.com/unsubscribe?id=1">two</a>'
            "</body></html>"
        )

        links = extract_body_links(body)

        assert links == [UnsubscribeLink(source=LinkSource.BODY, url="https://s.com/unsubscribe?id=1")]

    def test_body_without_html_marker_is_not_scanned(self) -> None:
        assert extract_body_links('<a href="https://s.com/unsubscribe">x</a>') == []

    def test_patterns_reported_in_fixed_order(self) -> None:
        body = (
            "<html>"
            "<a href='https://s.com/manage_subscription'>m</a>"
            '<a href="https://s.com/remove-me">r</a>'
            '<a href="https://s.com/OptOut">o</a>'
            '<a href="https://s.com/Unsubscribe">u</a>'
            "</html>"
        )

        urls = [link.url for link in extract_body_links(body)]

        assert urls == [
            "https://s.com/Unsubscribe",
            "https://s.com/OptOut",
            "https://s.com/remove-me",
            "https://s.com/manage_subscription",
        ]

    def test_url_matching_two_patterns_reported_once(self) -> None:
        body = '<html><a href="https://s.com/unsubscribe/opt-out">x</a></html>'

        assert [link.url for link in extract_body_links(body)] == ["https://s.com/unsubscribe/opt-out"]

    def test_relative_and_mailto_targets_dropped(self) -> None:
        body = (
            "<html>"
            '<a href="/unsubscribe">rel</a>'
            '<a href="mailto:unsubscribe@s.com">mail</a>'
            "</html>"
        )

        assert extract_body_links(body) == []

    def test_unrelated_links_ignored(self) -> None:
        body = '<html><a href="https://s.com/prefs">p</a><a href="https://s.com/optics">o</a></html>'

        assert extract_body_links(body) == []


class TestExtractUnsubscribeLinks:
    """Test suite for the combined extractor."""

    def test_header_hits_precede_body_hits(self) -> None:
        headers = _header("<https://h.com/u>")
        body = '<html><a href="https://b.com/unsubscribe">x</a></html>'

        links = extract_unsubscribe_links(headers, body)

        assert [(link.source, link.url) for link in links] == [
            (LinkSource.HEADER, "https://h.com/u"),
            (LinkSource.BODY, "https://b.com/unsubscribe"),
        ]

    def test_same_url_in_header_and_body_survives_twice(self) -> None:
        url = "https://s.com/unsubscribe"
        headers = _header(f"<{url}>")
        body = f'<html><a href="{url}">x</a></html>'

        links = extract_unsubscribe_links(headers, body)

        assert [link.source for link in links] == [LinkSource.HEADER, LinkSource.BODY]

    def test_repeated_runs_are_identical(self, newsletter_html: str) -> None:
        headers = _header("<https://h.com/u>, <mailto:u@h.com>")

        first = extract_unsubscribe_links(headers, newsletter_html)
        second = extract_unsubscribe_links(headers, newsletter_html)

        assert first == second
        assert [link.model_dump_json() for link in first] == [
            link.model_dump_json() for link in second
        ]

    def test_nothing_found(self) -> None:
        assert extract_unsubscribe_links({}, "") == []
