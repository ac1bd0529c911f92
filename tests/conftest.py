"""Shared fixtures: record documents, tmp_path archives and log capture."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Sequence, Tuple

import pytest
from loguru import logger

from orcid_toolkit.config.policies import PipelinePolicy
from orcid_toolkit.config.settings import Settings

DATA_DIR = Path(__file__).parent / "data"

_NAMESPACES = (
    'xmlns:record="http://www.orcid.org/ns/record" '
    'xmlns:common="http://www.orcid.org/ns/common" '
    'xmlns:person="http://www.orcid.org/ns/person" '
    'xmlns:personal-details="http://www.orcid.org/ns/personal-details" '
    'xmlns:activities="http://www.orcid.org/ns/activities" '
    'xmlns:employment="http://www.orcid.org/ns/employment"'
)


def employment_xml(
    name: str,
    *,
    identifier: str | None = None,
    source: str = "ROR",
    ended: bool = False,
) -> str:
    disambiguated = ""
    if identifier is not None:
        disambiguated = (
            "<common:disambiguated-organization>"
            f"<common:disambiguated-organization-identifier>{identifier}</common:disambiguated-organization-identifier>"
            f"<common:disambiguation-source>{source}</common:disambiguation-source>"
            "</common:disambiguated-organization>"
        )
    end = "<common:end-date><common:year>2019</common:year></common:end-date>" if ended else ""
    return (
        "<activities:affiliation-group><employment:employment-summary>"
        f"<common:start-date><common:year>2010</common:year></common:start-date>{end}"
        f"<common:organization><common:name>{name}</common:name>{disambiguated}</common:organization>"
        "</employment:employment-summary></activities:affiliation-group>"
    )


def record_xml(
    orcid: str = "0000-0002-1825-0097",
    *,
    given: str | None = "Josiah",
    family: str | None = "Carberry",
    employments: Sequence[str] = (),
) -> str:
    """Build a minimal ORCID 3.0 record summary document."""

    names = ""
    if given is not None:
        names += f"<personal-details:given-names>{given}</personal-details:given-names>"
    if family is not None:
        names += f"<personal-details:family-name>{family}</personal-details:family-name>"
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<record:record {_NAMESPACES}>"
        "<common:orcid-identifier>"
        f"<common:uri>https://orcid.org/{orcid}</common:uri>"
        f"<common:path>{orcid}</common:path>"
        "<common:host>orcid.org</common:host>"
        "</common:orcid-identifier>"
        f"<person:person><person:name>{names}</person:name></person:person>"
        "<activities:activities-summary>"
        f"<activities:employments>{''.join(employments)}</activities:employments>"
        "</activities:activities-summary>"
        "</record:record>"
    )


def write_archive(
    path: Path,
    entries: Iterable[Tuple[str, str | bytes]],
    *,
    mode: str = "w:gz",
    directories: Iterable[str] = (),
) -> Path:
    """Write a tar archive holding *entries* (name, content) to *path*."""

    with tarfile.open(path, mode) as tar:
        for directory in directories:
            info = tarfile.TarInfo(directory)
            info.type = tarfile.DIRTYPE
            tar.addfile(info)
        for name, content in entries:
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture()
def alex_path() -> Path:
    return DATA_DIR / "alex.xml"


@pytest.fixture()
def alex_xml(alex_path: Path) -> str:
    return alex_path.read_text(encoding="utf-8")


@pytest.fixture()
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    def _make(
        entries: Mapping[str, str | bytes] | Iterable[Tuple[str, str | bytes]],
        *,
        name: str = "summaries.tar.gz",
        mode: str = "w:gz",
        directories: Iterable[str] = (),
    ) -> Path:
        items = entries.items() if isinstance(entries, Mapping) else entries
        return write_archive(tmp_path / name, items, mode=mode, directories=directories)

    return _make


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    """Settings isolated from the repository config directory."""

    return Settings(
        config_dir=tmp_path / "config",
        environment="testing",
        pipeline=PipelinePolicy(batch_size=2, queue_capacity=2, workers=2),
    )


@pytest.fixture()
def log_records() -> List[dict]:
    """Capture loguru records emitted while the test runs."""

    captured: List[dict] = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    try:
        yield captured
    finally:
        logger.remove(handler_id)
