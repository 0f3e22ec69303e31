"""Behaviour tests for rendering site pages.

These scenarios render small markdown documents the way the page builder
does and inspect the resulting HTML with BeautifulSoup. They cover relative
link resolution from index and regular pages, the external link marker, and
the removal of the leading page title.

The steps are bound to ``features/page_rendering.feature``.

Usage:
    pytest tests/bdd/test_page_rendering.py -v
"""

from __future__ import annotations

from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from ter_pages.rendering import MarkdownRenderer, RenderResult

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "page_rendering.feature"
)
scenarios(FEATURE_FILE)

BASE_URL = "https://example.com/"


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {"pages": [], "results": []}


def _pages(scenario_state: dict[str, object]) -> list[tuple[str, bool, str]]:
    return scenario_state["pages"]  # type: ignore[return-value]


def _results(scenario_state: dict[str, object]) -> list[RenderResult]:
    return scenario_state["results"]  # type: ignore[return-value]


@given(parsers.parse('an index page at "{path}" linking to "{href}"'))
def given_index_page(scenario_state: dict[str, object], path: str, href: str) -> None:
    """Queue an index document containing a single link."""
    _pages(scenario_state).append((path, True, f"[link]({href})\n"))


@given(parsers.parse('a post at "{path}" linking to "{href}"'))
def given_post(scenario_state: dict[str, object], path: str, href: str) -> None:
    """Queue a regular document containing a single link."""
    _pages(scenario_state).append((path, False, f"[link]({href})\n"))


@given(
    parsers.parse(
        'a post at "{path}" with the title "{title}" and two "{section}" sections'
    )
)
def given_titled_post(
    scenario_state: dict[str, object], path: str, title: str, section: str
) -> None:
    """Queue a document with a title and two identically named sections."""
    text = f"# {title}\n\nIntro.\n\n## {section}\n\nOne.\n\n## {section}\n\nTwo.\n"
    _pages(scenario_state).append((path, False, text))


@when("both pages are rendered")
@when("the post is rendered")
def when_rendered(scenario_state: dict[str, object]) -> None:
    """Render every queued document with a fresh renderer."""
    renderer = MarkdownRenderer()
    for path, is_index, text in _pages(scenario_state):
        _results(scenario_state).append(
            renderer.render(
                text, current_path=path, is_index=is_index, base_url=BASE_URL
            )
        )


def _anchors(scenario_state: dict[str, object]) -> list[dict[str, object]]:
    anchors = []
    for result in _results(scenario_state):
        anchor = BeautifulSoup(result.html, "html.parser").find("a")
        assert anchor is not None, f"expected an anchor in {result.html!r}"
        anchors.append(anchor.attrs)
    return anchors


@then(parsers.parse('both links point at "{href}"'))
def then_links_point_at(scenario_state: dict[str, object], href: str) -> None:
    """Verify every rendered page links to ``href``."""
    hrefs = [attrs["href"] for attrs in _anchors(scenario_state)]
    assert hrefs == [href, href], f"expected both links to be {href!r}, got {hrefs!r}"


@then(parsers.parse('both pages report the target "{target}"'))
def then_pages_report_target(scenario_state: dict[str, object], target: str) -> None:
    """Verify every rendered page registered the same backlink target."""
    links = [result.links for result in _results(scenario_state)]
    assert links == [(target,), (target,)], f"unexpected targets {links!r}"


@then("the link carries the external rel marker")
def then_link_is_external(scenario_state: dict[str, object]) -> None:
    """Verify the single rendered link is marked external."""
    (attrs,) = _anchors(scenario_state)
    assert attrs.get("rel") == ["external", "noopener", "noreferrer"], (
        f"expected external rel marker, got {attrs.get('rel')!r}"
    )


@then("the post reports no internal targets")
def then_no_targets(scenario_state: dict[str, object]) -> None:
    """Verify external links are not registered as targets."""
    (result,) = _results(scenario_state)
    assert result.links == ()


@then("the body has no level-one heading")
def then_no_h1(scenario_state: dict[str, object]) -> None:
    """Verify the leading title was removed from the HTML."""
    (result,) = _results(scenario_state)
    soup = BeautifulSoup(result.html, "html.parser")
    assert soup.find("h1") is None, "the title heading should be removed"


@then(parsers.parse('the headings are "{slugs}"'))
def then_heading_slugs(scenario_state: dict[str, object], slugs: str) -> None:
    """Verify the collected heading slugs, including the removed title."""
    (result,) = _results(scenario_state)
    expected = [slug.strip() for slug in slugs.split(",")]
    actual = [heading.slug for heading in result.headings]
    assert actual == expected, f"expected slugs {expected!r}, got {actual!r}"
    ids = [h2["id"] for h2 in BeautifulSoup(result.html, "html.parser").find_all("h2")]
    assert ids == expected[1:], "heading ids should match the reported slugs"
