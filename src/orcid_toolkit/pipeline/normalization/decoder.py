"""XML decoding of ORCID record summary documents.

Documents are parsed with lxml, flattened into a nested mapping keyed by
element local names (namespace prefixes vary between dump versions and are
ignored) and validated into :class:`~orcid_toolkit.entities.Record`.
"""

from __future__ import annotations

import threading
from typing import Any, Dict

from lxml import etree
from pydantic import ValidationError

from ...entities.core import Record

ROOT_PATH = "."

_local = threading.local()


class DecodeError(ValueError):
    """Raised when a document cannot be decoded into a :class:`Record`.

    ``path`` is the dotted structural location of the failure (``.`` for
    document-level problems such as malformed XML).
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


def _parser() -> etree.XMLParser:
    # lxml parser objects must not be shared between threads.
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
        )
        _local.parser = parser
    return parser


def element_to_payload(element: etree._Element) -> Any:
    """Convert *element* into nested dicts/lists/strings.

    Children become mapping keys (local name); repeated children collapse
    into a list. Leaf elements become their text, or ``""`` when empty.
    Attributes are not carried over.
    """

    children = [child for child in element if isinstance(child.tag, str)]
    if not children:
        return element.text or ""

    payload: Dict[str, Any] = {}
    for child in children:
        key = etree.QName(child).localname
        value = element_to_payload(child)
        if key in payload:
            existing = payload[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                payload[key] = [existing, value]
        else:
            payload[key] = value
    return payload


def _format_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or ROOT_PATH


def decode_record(content: str | bytes) -> Record:
    """Decode one record document into a :class:`Record`.

    Raises :class:`DecodeError` carrying the structural path of the first
    problem found.
    """

    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        root = etree.fromstring(data, parser=_parser())
    except etree.XMLSyntaxError as exc:
        raise DecodeError(ROOT_PATH, f"malformed XML: {exc}") from exc
    if root is None:
        raise DecodeError(ROOT_PATH, "empty document")

    payload = element_to_payload(root)
    try:
        return Record.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise DecodeError(_format_location(first["loc"]), first["msg"]) from exc


__all__ = ["DecodeError", "decode_record", "element_to_payload", "ROOT_PATH"]
