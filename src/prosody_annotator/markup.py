"""Markup helpers -- element names, attribute names and lxml load/dump.

The annotator works on an already-parsed ``lxml.etree`` tree. Element
names are matched namespace-agnostically so that both plain and
namespaced (``http://mary.dfki.de/2002/MaryXML``) documents work.
"""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from .exceptions import MarkupParseError

MARKUP_NAMESPACE = "http://mary.dfki.de/2002/MaryXML"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

# Element local names.
SYLLABLE = "syllable"
PHONE = "ph"
BOUNDARY = "boundary"
VOICE = "voice"
PROSODY = "prosody"

# Segment attributes.
PHONE_SYMBOL = "p"
DURATION = "d"
END = "end"
F0 = "f0"


def local_name(element: etree._Element) -> str:
    """Return the tag of *element* without its namespace."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def any_ns(name: str) -> str:
    """Tag selector matching *name* in any (or no) namespace."""
    return "{*}" + name


def language_of(element: etree._Element) -> str | None:
    """Return the nearest ``xml:lang`` value on *element* or its ancestors."""
    node: etree._Element | None = element
    while node is not None:
        lang = node.get(XML_LANG)
        if lang:
            return lang
        node = node.getparent()
    return None


def find_voice_name(root: etree._Element) -> str | None:
    """Return the ``name`` of the first ``<voice>`` element, if any."""
    for element in root.iter(any_ns(VOICE)):
        name = element.get("name")
        if name:
            return name.strip()
    return None


def phone_symbol(segment: etree._Element) -> str:
    return (segment.get(PHONE_SYMBOL) or "").strip()


def parse_markup(text: str) -> etree._Element:
    """Parse markup text and return the root element.

    Raises :class:`~prosody_annotator.exceptions.MarkupParseError` on
    malformed XML.
    """
    try:
        return etree.fromstring(text.encode("utf-8"))  # noqa: S320
    except etree.XMLSyntaxError as exc:
        raise MarkupParseError(
            str(exc),
            line=getattr(exc, "lineno", None),
            column=getattr(exc, "position", (None, None))[1] if hasattr(exc, "position") else None,
        ) from exc


def load_markup(path: str | Path) -> etree._Element:
    """Parse a markup file from disk."""
    p = Path(path)
    return parse_markup(p.read_text(encoding="utf-8"))


def to_markup_string(root: etree._Element, pretty: bool = False) -> str:
    """Serialize an element tree back to a unicode string."""
    return etree.tostring(root, encoding="unicode", pretty_print=pretty)
