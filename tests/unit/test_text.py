"""
Tests for text sanitization helpers
"""

import pytest

from taxoai.utils.text import clean_list, sanitize_html, sanitize_text_field, slugify, ucfirst


def test_sanitize_text_field_strips_markup_and_whitespace():
    assert sanitize_text_field("  <b>Blue</b>\n  Tee ") == "Blue Tee"
    assert sanitize_text_field("<script>alert(1)</script>Safe") == "Safe"
    assert sanitize_text_field(None) == ""


def test_sanitize_html_keeps_formatting():
    html = '<p class="x">Soft <strong>cotton</strong></p><ul><li>Breathable</li></ul>'

    assert sanitize_html(html) == "<p>Soft <strong>cotton</strong></p><ul><li>Breathable</li></ul>"


@pytest.mark.parametrize(
    "html,expected",
    [
        ("<p>ok</p><script>alert(1)</script>", "<p>ok</p>"),
        ('<p onmouseover="steal()">ok</p>', "<p>ok</p>"),
        ("<div><p>ok</p></div>", "<p>ok</p>"),
        ('<iframe src="https://evil.test"></iframe>text', "text"),
        ('<a href="javascript:alert(1)">link</a>', "<a>link</a>"),
        ('<a href="https://shop.test" onclick="x()">link</a>', '<a href="https://shop.test">link</a>'),
    ],
)
def test_sanitize_html_removes_unsafe_content(html, expected):
    assert sanitize_html(html) == expected


def test_sanitize_html_empty():
    assert sanitize_html(None) == ""
    assert sanitize_html("") == ""


def test_slugify():
    assert slugify("Shirts & Tops") == "shirts-tops"
    assert slugify("Camisetas Básicas") == "camisetas-basicas"
    assert slugify("") == ""


def test_ucfirst():
    assert ucfirst("color") == "Color"
    assert ucfirst("") == ""


def test_clean_list():
    assert clean_list("Blue") == ["Blue"]
    assert clean_list(["Blue", "", None, " <i>Navy</i> "]) == ["Blue", "Navy"]
    assert clean_list(None) == []
    assert clean_list(42) == ["42"]
