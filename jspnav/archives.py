"""Cached access to source archives (dependency ``-sources.jar``, JDK ``src.zip``).

Archives are assumed immutable for the life of a session: open handles,
failed opens and entry lookups are all cached until the session is closed.
Extracted entries are written under a dedicated directory, mirroring the
entry path, and reused while the extracted file still exists on disk.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class ArchiveAccessLayer:
    """Open, query and extract zip-format source archives."""

    def __init__(self, extract_dir: Path) -> None:
        self.extract_dir = extract_dir
        self.extract_dir.mkdir(parents=True, exist_ok=True)
        self._handles: Dict[Path, Optional[zipfile.ZipFile]] = {}
        self._extracted: Dict[Tuple[Path, str], Path] = {}

    @staticmethod
    def _key(archive_path: Path) -> Path:
        return Path(archive_path).expanduser().absolute()

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    def open_archive(self, archive_path: Path) -> Optional[zipfile.ZipFile]:
        """Return a cached handle, or ``None`` if the archive is missing or unreadable.

        A failed open is remembered for the session; the path is not retried.
        """
        key = self._key(archive_path)
        if key in self._handles:
            return self._handles[key]

        handle: Optional[zipfile.ZipFile] = None
        try:
            present = key.is_file()
        except OSError as exc:
            logger.debug("Cannot stat archive %s: %s", key, exc)
            present = False
        if present:
            try:
                handle = zipfile.ZipFile(key)
                logger.debug("Opened archive %s (%d entries)", key, len(handle.namelist()))
            except (OSError, zipfile.BadZipFile) as exc:
                logger.warning("Could not open archive %s: %s", key, exc)
        else:
            logger.debug("Archive not found: %s", key)

        self._handles[key] = handle
        return handle

    def has_entry(self, archive_path: Path, entry_name: str) -> bool:
        handle = self.open_archive(archive_path)
        if handle is None:
            return False
        try:
            handle.getinfo(entry_name)
        except KeyError:
            return False
        return True

    def find_entry_by_suffix(self, archive_path: Path, relative_path: str) -> Optional[str]:
        """First entry equal to *relative_path* or ending in ``/relative_path``."""
        handle = self.open_archive(archive_path)
        if handle is None:
            return None
        suffix = "/" + relative_path
        for name in handle.namelist():
            if name == relative_path or name.endswith(suffix):
                return name
        return None

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extraction_path(self, archive_path: Path, entry_name: str) -> Optional[Path]:
        """Deterministic target path for an entry, or ``None`` for unsafe names."""
        entry = PurePosixPath(entry_name)
        if entry.is_absolute() or ".." in entry.parts or not entry.parts:
            return None
        return self.extract_dir.joinpath(Path(archive_path).stem, *entry.parts)

    def extract(self, archive_path: Path, entry_name: str) -> Optional[Path]:
        """Copy one entry to disk and return the local path.

        Repeated calls for the same entry return the same path without
        reading the archive again, as long as the extracted file exists.
        """
        key = (self._key(archive_path), entry_name)
        cached = self._extracted.get(key)
        if cached is not None:
            try:
                if cached.is_file():
                    return cached
            except OSError as exc:
                logger.debug("Cannot stat %s: %s", cached, exc)

        target = self.extraction_path(archive_path, entry_name)
        if target is None:
            logger.warning("Refusing to extract unsafe entry %r from %s", entry_name, archive_path)
            return None

        handle = self.open_archive(archive_path)
        if handle is None:
            return None

        try:
            data = handle.read(entry_name)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except KeyError:
            logger.debug("Entry %s not in %s", entry_name, archive_path)
            return None
        except (OSError, zipfile.BadZipFile) as exc:
            logger.warning("Could not extract %s from %s: %s", entry_name, archive_path, exc)
            return None

        logger.debug("Extracted %s -> %s", entry_name, target)
        self._extracted[key] = target
        return target

    def close(self) -> None:
        for handle in self._handles.values():
            if handle is not None:
                handle.close()
        self._handles.clear()
        self._extracted.clear()
