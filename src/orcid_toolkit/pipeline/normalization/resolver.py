"""Organization identifier resolution backed by a read-only lookup table."""

from __future__ import annotations

import csv
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ...entities.core import ExtractedIdentifier, OrgIdentifier
from ...utils.helpers import trailing_segment
from ...utils.logging import get_logger

ROR_SCHEME = "ROR"
FUNDREF_SCHEME = "FUNDREF"

_LOGGER = get_logger(module=__name__)


class OrgMapError(ValueError):
    """Raised when an organization mapping file cannot be parsed."""


def normalize_org_identifier(scheme: str, identifier: str) -> str:
    """Return the lookup form of *identifier* for *scheme*.

    ROR and FUNDREF identifiers are reduced to their trailing path segment;
    every other scheme is used verbatim.
    """

    if scheme in (ROR_SCHEME, FUNDREF_SCHEME):
        return trailing_segment(identifier)
    return identifier


class OrgResolver:
    """Map ``(scheme, identifier)`` pairs onto canonical organization ids.

    The table is frozen at construction and safe to share between worker
    threads without locking.
    """

    def __init__(self, mapping: Mapping[ExtractedIdentifier, str] | None = None) -> None:
        table: Dict[ExtractedIdentifier, str] = {}
        for key, org_id in (mapping or {}).items():
            table[self._lookup_key(key.scheme, key.identifier)] = org_id
        self._table: Mapping[ExtractedIdentifier, str] = MappingProxyType(table)

    @staticmethod
    def _lookup_key(scheme: str, identifier: str) -> ExtractedIdentifier:
        return ExtractedIdentifier(
            scheme=scheme, identifier=normalize_org_identifier(scheme, identifier)
        )

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[str, str, str]]) -> "OrgResolver":
        return cls({ExtractedIdentifier(scheme=s, identifier=i): org for s, i, org in rows})

    @classmethod
    def from_csv(cls, path: Path | str | None) -> "OrgResolver":
        """Load a header-less ``scheme,identifier,org_id`` CSV file.

        A missing path or file yields an empty resolver.
        """

        if path is None:
            return cls()
        source = Path(path)
        if not source.is_file():
            _LOGGER.warning("Organization mapping file not found; continuing without it", path=str(source))
            return cls()

        rows = []
        with source.open("r", encoding="utf-8", newline="") as handle:
            for line_no, row in enumerate(csv.reader(handle), start=1):
                if not row:
                    continue
                if len(row) != 3:
                    raise OrgMapError(
                        f"{source}:{line_no}: expected 3 columns (scheme, identifier, org id), got {len(row)}"
                    )
                rows.append((row[0], row[1], row[2]))
        resolver = cls.from_rows(rows)
        _LOGGER.info("Loaded organization mappings", path=str(source), entries=len(resolver))
        return resolver

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def lookup(self, scheme: str, identifier: str) -> Optional[str]:
        return self._table.get(self._lookup_key(scheme, identifier))

    def resolve(self, org_identifier: OrgIdentifier | None) -> Optional[str]:
        """Return the canonical organization id for *org_identifier*, if any.

        ROR identifiers are canonical already; other schemes go through the
        lookup table.
        """

        if org_identifier is None:
            return None
        if org_identifier.source == ROR_SCHEME:
            return trailing_segment(org_identifier.identifier)
        return self.lookup(org_identifier.source, org_identifier.identifier)


__all__ = [
    "OrgMapError",
    "OrgResolver",
    "normalize_org_identifier",
    "ROR_SCHEME",
    "FUNDREF_SCHEME",
]
