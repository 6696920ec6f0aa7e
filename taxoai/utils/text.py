"""
Text sanitization helpers for values written back onto products
"""
import re
import unicodedata
from typing import Any, Iterable, List

from bs4 import BeautifulSoup


# Tags kept by sanitize_html, with the attributes each may carry
ALLOWED_TAGS = {
    "a": {"href", "title", "rel", "target"},
    "b": set(),
    "blockquote": set(),
    "br": set(),
    "em": set(),
    "h2": set(),
    "h3": set(),
    "h4": set(),
    "h5": set(),
    "h6": set(),
    "i": set(),
    "li": set(),
    "ol": set(),
    "p": set(),
    "span": set(),
    "strong": set(),
    "u": set(),
    "ul": set(),
}

# Removed together with their content
DROPPED_TAGS = ("script", "style", "iframe", "object", "embed", "form", "noscript")

UNSAFE_URL = re.compile(r"^\s*(javascript|vbscript|data):", re.IGNORECASE)


def strip_all_tags(text: Any) -> str:
    """Remove markup (and script/style bodies) leaving plain text"""
    if text is None:
        return ""

    soup = BeautifulSoup(str(text), "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text(" ").strip()


def sanitize_text_field(text: Any) -> str:
    """
    Single-line plain text:
    - Strip markup
    - Collapse whitespace and line breaks
    """
    if text is None:
        return ""
    return " ".join(strip_all_tags(text).split())


def sanitize_html(html: Any) -> str:
    """Keep a small allow-list of formatting tags, drop everything else"""
    if not html:
        return ""

    soup = BeautifulSoup(str(html), "html.parser")

    for tag in soup(DROPPED_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        allowed = ALLOWED_TAGS.get(tag.name)
        if allowed is None:
            tag.unwrap()
            continue

        for attr in list(tag.attrs):
            if attr not in allowed or attr.startswith("on"):
                del tag.attrs[attr]
        if tag.name == "a" and UNSAFE_URL.match(tag.get("href", "")):
            del tag.attrs["href"]

    return str(soup).strip()


def slugify(text: str) -> str:
    """URL-safe slug: lowercase ascii words joined by hyphens"""
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text)
    text = "".join(char for char in text if not unicodedata.combining(char))
    text = re.sub(r"[^a-z0-9\s\-]", "", text.lower())
    return re.sub(r"[\s\-]+", "-", text).strip("-")


def ucfirst(text: str) -> str:
    return text[:1].upper() + text[1:] if text else text


def clean_list(values: Any) -> List[str]:
    """Normalize a scalar or list of values to sanitized, non-empty strings"""
    if values is None:
        return []
    if isinstance(values, (str, int, float)):
        values = [values]
    elif not isinstance(values, Iterable):
        return []

    cleaned = (sanitize_text_field(value) for value in values if value is not None)
    return [value for value in cleaned if value]
