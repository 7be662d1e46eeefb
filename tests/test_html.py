import pytest

from marktrim.html import collapse_omission, html_truncate


def test_fitting_markup_returned_untouched() -> None:
    markup = "<b>hi</b>&nbsp;there"
    assert html_truncate(markup, 100) is markup


def test_markup_truncated_and_balanced() -> None:
    result = html_truncate("<p>Hello <em>world</em> of truncation</p>", 24)
    assert result == "<p>Hello …</p>"
    assert len(result.encode()) <= 24


def test_plain_text_fragment() -> None:
    assert html_truncate("Hello, world of truncation", 10) == "Hello, …"


def test_reference_kept_whole() -> None:
    assert html_truncate("Fish &amp; chips and more", 13) == "Fish &amp;…"
    assert html_truncate("Fish &amp; chips and more", 12) == "Fish …"


def test_separator_option() -> None:
    assert html_truncate("<p>alpha beta gamma</p>", 21, separator=" ") == "<p>alpha beta…</p>"


def test_content_measurement() -> None:
    assert html_truncate("<p>Hello <b>world</b></p>", 9, content=True) == "<p>Hello …</p>"


def test_non_html_uses_text_truncation() -> None:
    assert html_truncate("a<b>c</b>defgh", 8, html=False) == "a<b>c…"


def test_nothing_fits_returns_empty_string() -> None:
    assert html_truncate("<p>text</p>", 2) == ""


def test_default_budget() -> None:
    result = html_truncate("x" * 2000)
    assert len(result.encode()) <= 1024
    assert result.endswith("…")


@pytest.mark.parametrize("budget", range(0, 60, 3))
def test_result_never_exceeds_budget(budget: int) -> None:
    markup = '<ul class="x"><li>one &amp; two</li><li>three <b>four</b></li></ul> and ☃ more'
    result = html_truncate(markup, budget)
    assert len(result.encode()) <= budget
    assert "……" not in result


def test_collapse_omission() -> None:
    assert collapse_omission("a………b…c", "…") == "a…b…c"
    assert collapse_omission("a....b", "..") == "a..b"
    assert collapse_omission("unchanged", "") == "unchanged"


def test_deeply_nested_fragment() -> None:
    depth = 600
    markup = "<b>" * depth + "x" * 50 + "</b>" * depth
    assert html_truncate(markup, 100) == ""
    expected = "<b>" * depth + "x" * 27 + "…" + "</b>" * depth
    assert html_truncate(markup, 7 * depth + 30) == expected
