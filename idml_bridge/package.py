"""IDML package store.

IDML files are ZIP archives of XML parts. The store keeps every entry as raw
bytes so parts the rewrite does not touch pass through byte for byte.

Key IDML Structure:
    - mimetype (uncompressed, must be first)
    - designmap.xml (manifest)
    - Stories/Story_*.xml (text content)
    - Spreads/Spread_*.xml (page layout)

References:
    - IDML Cookbook: http://wwwimages.adobe.com/www.adobe.com/content/dam/acom/en/devnet/indesign/sdk/cs6/idml/idml-cookbook.pdf
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from zipfile import BadZipFile, ZIP_DEFLATED, ZIP_STORED, ZipFile

from .errors import FormatError, NotFoundError

logger = logging.getLogger(__name__)

IDML_MIMETYPE = "application/vnd.adobe.indesign-idml-package"
MIMETYPE_ENTRY = "mimetype"
DESIGNMAP_ENTRY = "designmap.xml"
STORIES_PREFIX = "Stories/Story_"
SPREADS_PREFIX = "Spreads/Spread_"


class IDMLPackage:
    """
    In-memory view of an IDML archive.

    Usage:
        >>> package = IDMLPackage.load(data)
        >>> for path in package.story_paths():
        ...     xml_bytes = package.read_entry(path)
        >>> new_bytes = package.save({"Stories/Story_u1.xml": updated})
    """

    def __init__(self, entries: Dict[str, bytes]):
        self._entries = entries

    @classmethod
    def load(cls, data: bytes) -> "IDMLPackage":
        """
        Load an archive from raw bytes.

        Raises:
            FormatError: If the bytes are not a valid ZIP archive
        """
        try:
            with ZipFile(io.BytesIO(data), "r") as zip_ref:
                entries = {info.filename: zip_ref.read(info) for info in zip_ref.infolist()}
        except BadZipFile as exc:
            raise FormatError(f"Not a valid IDML archive: {exc}") from exc

        logger.debug(f"Loaded IDML package with {len(entries)} entries")
        return cls(entries)

    @classmethod
    def from_path(cls, idml_path: Path) -> "IDMLPackage":
        """Load an archive from disk."""
        if not idml_path.exists():
            raise NotFoundError(f"IDML file not found: {idml_path}")
        return cls.load(idml_path.read_bytes())

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entry_names(self) -> List[str]:
        """Entry paths in archive order."""
        return list(self._entries)

    def list_entries(self, prefix: str = "", suffix: str = "") -> List[str]:
        """
        List entry paths matching prefix and suffix, sorted lexically.

        Sorting keeps extraction and rewrite replay-deterministic regardless
        of archive order.
        """
        return sorted(
            name
            for name in self._entries
            if name.startswith(prefix) and name.endswith(suffix) and not name.endswith("/")
        )

    def story_paths(self) -> List[str]:
        return self.list_entries(STORIES_PREFIX, ".xml")

    def spread_paths(self) -> List[str]:
        return self.list_entries(SPREADS_PREFIX, ".xml")

    def read_entry(self, path: str) -> bytes:
        """
        Read raw bytes of an entry.

        Raises:
            NotFoundError: If the entry is absent
        """
        try:
            return self._entries[path]
        except KeyError:
            raise NotFoundError(f"Entry not found in IDML package: {path}") from None

    def save(self, overrides: Optional[Mapping[str, bytes]] = None) -> bytes:
        """
        Produce a new archive.

        CRITICAL: IDML requires specific ZIP structure:
            1. 'mimetype' file must be FIRST in archive
            2. 'mimetype' must be UNCOMPRESSED (ZIP_STORED)
            3. All other files use DEFLATE compression

        Every original entry is written in original order; entries in
        ``overrides`` replace the original bytes, unknown ones are appended.

        Args:
            overrides: Mapping of entry path -> replacement bytes

        Returns:
            Archive bytes
        """
        overrides = dict(overrides or {})
        merged: Dict[str, bytes] = dict(self._entries)
        merged.update(overrides)

        names = list(self._entries) + [name for name in overrides if name not in self._entries]
        if MIMETYPE_ENTRY in merged:
            names.remove(MIMETYPE_ENTRY)
            names.insert(0, MIMETYPE_ENTRY)

        buffer = io.BytesIO()
        with ZipFile(buffer, "w") as zip_ref:
            for name in names:
                compress_type = ZIP_STORED if name == MIMETYPE_ENTRY else ZIP_DEFLATED
                zip_ref.writestr(name, merged[name], compress_type=compress_type)

        logger.debug(
            f"Saved IDML package: {len(names)} entries, {len(overrides)} replaced or added"
        )
        return buffer.getvalue()

    def save_to(self, output_path: Path, overrides: Optional[Mapping[str, bytes]] = None) -> None:
        """Write a new archive to disk."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.save(overrides))

    def validate_structure(self) -> List[str]:
        """
        Check basic IDML shape.

        Checks for:
            - mimetype entry with the IDML media type
            - designmap.xml
            - at least one story

        Returns:
            List of problems, empty if the shape looks valid
        """
        problems = []

        if MIMETYPE_ENTRY not in self._entries:
            problems.append("mimetype entry missing")
        else:
            mimetype = self._entries[MIMETYPE_ENTRY].decode("ascii", errors="replace").strip()
            if mimetype != IDML_MIMETYPE:
                problems.append(f"unexpected mimetype: {mimetype!r}")

        if DESIGNMAP_ENTRY not in self._entries:
            problems.append("designmap.xml missing")

        if not self.story_paths():
            problems.append("no Stories/Story_*.xml entries")

        return problems
