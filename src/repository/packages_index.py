"""Reader for Debian ``Packages`` index files.

Turns each stanza of an (already downloaded and verified) index into a
PackageRecord. Plain, gzip and xz compressed files are accepted.
"""

from __future__ import annotations

import gzip
import logging
import lzma
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from resolver.errors import CatalogError
from resolver.models import Checksum, PackageRecord
from versioning.parser import clean_name, split_dependency_field

logger = logging.getLogger(__name__)

_CHECKSUM_FIELDS = {
    "SHA256": "SHA256",
    "SHA1": "SHA1",
    "SHA512": "SHA512",
    "MD5sum": "MD5",
}


def full_url(filename: str, base_url: str) -> str:
    """Join a ``Filename`` field onto the repository base URL."""
    if filename.startswith("http://") or filename.startswith("https://"):
        return filename
    if not base_url:
        return filename
    return f"{base_url.rstrip('/')}/{filename.lstrip('/')}"


def iter_stanzas(lines: Iterable[str]) -> Iterator[Dict[str, str]]:
    """Yield one ``{field: value}`` mapping per blank-line separated stanza.

    Continuation lines are dropped, so multi-line fields keep their first line.
    """
    stanza: Dict[str, str] = {}
    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip():
            if stanza:
                yield stanza
                stanza = {}
            continue
        if line[0] in " \t":
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        stanza[key.strip()] = value.strip()
    if stanza:
        yield stanza


def record_from_stanza(stanza: Dict[str, str], base_url: str = "") -> Optional[PackageRecord]:
    """Build a PackageRecord from one stanza; None when it has no ``Package`` field."""
    name = stanza.get("Package", "")
    if not name:
        return None

    requires: List[str] = []
    requires_raw: List[str] = []
    for clause in split_dependency_field(stanza.get("Pre-Depends", "")):
        cleaned = clean_name(clause)
        if cleaned:
            requires.append(cleaned)
    for clause in split_dependency_field(stanza.get("Depends", "")):
        requires_raw.append(clause)
        cleaned = clean_name(clause)
        if cleaned:
            requires.append(cleaned)

    provides = tuple(
        entry.split()[0] for entry in split_dependency_field(stanza.get("Provides", ""))
    )
    checksums = tuple(
        Checksum(algorithm, stanza[field])
        for field, algorithm in _CHECKSUM_FIELDS.items()
        if stanza.get(field)
    )
    arch = stanza.get("Architecture", "")
    if arch in ("all", "any"):
        arch = "noarch"
    filename = stanza.get("Filename", "")

    return PackageRecord(
        name=name,
        version=stanza.get("Version", ""),
        architecture=arch,
        origin_url=full_url(filename, base_url) if filename else "",
        requires=tuple(requires),
        requires_raw=tuple(requires_raw),
        provides=provides,
        checksums=checksums,
        description=stanza.get("Description", ""),
        maintainer=stanza.get("Maintainer", ""),
    )


def parse_packages_text(text: str, base_url: str = "") -> List[PackageRecord]:
    """Parse the text of a ``Packages`` index."""
    records = []
    for stanza in iter_stanzas(text.splitlines()):
        record = record_from_stanza(stanza, base_url)
        if record is not None:
            records.append(record)
    return records


def _read_index(path: str) -> str:
    if path.endswith(".gz"):
        with gzip.open(path, "rt", encoding="utf-8") as fh:
            return fh.read()
    if path.endswith(".xz"):
        with lzma.open(path, "rt", encoding="utf-8") as fh:
            return fh.read()
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def load_packages_file(path: str, base_url: str = "") -> List[PackageRecord]:
    """Read and parse one index file.

    Raises:
        CatalogError: the file is missing, unreadable or not decodable.
    """
    with Timer() as timer:
        try:
            text = _read_index(path)
        except FileNotFoundError as exc:
            raise CatalogError(f"package index not found: {path}") from exc
        except (OSError, EOFError, lzma.LZMAError, UnicodeDecodeError) as exc:
            raise CatalogError(f"failed to read package index {path}: {exc}") from exc
        records = parse_packages_text(text, base_url)

    logger.info("Loaded %d packages from %s", len(records), path)
    if is_debug_enabled(logger):
        logger.debug(
            "Package index parsed",
            extra=extra_context(
                event="function_exit", component="catalog", action="load_packages_file",
                outcome="success", count=len(records), target=path, duration_ms=timer.duration_ms(),
            ),
        )
    return records


def load_catalog(sources: Iterable[Tuple[str, str]]) -> List[PackageRecord]:
    """Concatenate the records of several ``(path, base_url)`` index sources in order."""
    catalog: List[PackageRecord] = []
    for path, base_url in sources:
        catalog.extend(load_packages_file(path, base_url))
    return catalog
