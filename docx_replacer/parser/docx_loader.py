"""DOCX package accessor that hands out exclusive, short-lived read handles."""
from __future__ import annotations

import threading
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from docx_replacer.errors import (
    ArchiveBusyError,
    ArchiveClosedError,
    ArchiveFormatError,
    ArchiveOpenError,
    EntryNotFoundError,
)
from docx_replacer.utils.logger import get_logger

LOGGER = get_logger(__name__)

DOCUMENT_XML_PATH = "word/document.xml"
DOCUMENT_RELS_PATH = "word/_rels/document.xml.rels"
MEDIA_PREFIX = "word/media/"
HEADER_MARKER = "header"
FOOTER_MARKER = "footer"

PathLike = Union[str, Path]


class ExclusiveHandle:
    """Read access to the archive entries, valid only while it is held."""

    def __init__(self, zip_file: zipfile.ZipFile) -> None:
        self._zip: Optional[zipfile.ZipFile] = zip_file

    def __len__(self) -> int:
        return len(self._require().infolist())

    def names(self) -> List[str]:
        """Entry names in archive order."""
        return self._require().namelist()

    def info_at(self, index: int) -> zipfile.ZipInfo:
        infos = self._require().infolist()
        if not 0 <= index < len(infos):
            raise EntryNotFoundError(f"No entry at index {index} (archive has {len(infos)})")
        return infos[index]

    def name_at(self, index: int) -> str:
        return self.info_at(index).filename

    def contains(self, name: str) -> bool:
        try:
            self._require().getinfo(name)
        except KeyError:
            return False
        return True

    def read(self, name: str) -> bytes:
        """Return the raw bytes of the entry called ``name``."""
        zip_file = self._require()
        try:
            info = zip_file.getinfo(name)
        except KeyError as exc:
            raise EntryNotFoundError(f"Entry not found in package: {name}") from exc
        return self._read_info(info)

    def read_index(self, index: int) -> bytes:
        """Return the raw bytes of the entry at position ``index``."""
        return self._read_info(self.info_at(index))

    def read_text(self, name: str) -> str:
        """Return the entry decoded as UTF-8 text."""
        return _decode_part(name, self.read(name))

    def read_text_at(self, index: int) -> str:
        info = self.info_at(index)
        return _decode_part(info.filename, self._read_info(info))

    def _read_info(self, info: zipfile.ZipInfo) -> bytes:
        try:
            return self._require().read(info)
        except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
            raise ArchiveFormatError(f"Corrupt entry {info.filename}: {exc}") from exc

    def _release(self) -> None:
        self._zip = None

    def _require(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise ArchiveClosedError("Access handle used outside of its exclusive_access() block")
        return self._zip


class DocxArchive:
    """Open DOCX package whose entries are read through exclusive handles.

    One file handle is kept open for the lifetime of the archive. Callers
    never touch it directly; they enter :meth:`exclusive_access` and use the
    yielded :class:`ExclusiveHandle`, which stops working once the block
    exits. Acquisition is not reentrant: a nested request fails instead of
    waiting on itself.
    """

    def __init__(self, zip_file: zipfile.ZipFile, path: Optional[Path] = None) -> None:
        self._zip: Optional[zipfile.ZipFile] = zip_file
        self._lock = threading.Lock()
        self.path = path

    @classmethod
    def open(cls, path: PathLike) -> "DocxArchive":
        """Open the package at ``path``."""
        docx_path = Path(path)
        try:
            zip_file = zipfile.ZipFile(docx_path)
        except zipfile.BadZipFile as exc:
            raise ArchiveFormatError(f"Not a valid DOCX package: {docx_path}") from exc
        except OSError as exc:
            raise ArchiveOpenError(f"Cannot open DOCX package {docx_path}: {exc.strerror or exc}") from exc

        LOGGER.debug("Opened %s with %d entries", docx_path.name, len(zip_file.infolist()))
        return cls(zip_file, docx_path)

    @property
    def closed(self) -> bool:
        return self._zip is None

    @contextmanager
    def exclusive_access(self) -> Iterator[ExclusiveHandle]:
        """Lend out the archive to a single holder for the duration of the block."""
        zip_file = self._require()
        if not self._lock.acquire(blocking=False):
            raise ArchiveBusyError("Archive is already being accessed by another holder")
        handle = ExclusiveHandle(zip_file)
        try:
            yield handle
        finally:
            handle._release()
            self._lock.release()

    def close(self) -> None:
        if self._zip is None:
            return
        if self._lock.locked():
            raise ArchiveBusyError("Cannot close the archive while it is being accessed")
        self._zip.close()
        self._zip = None

    def __enter__(self) -> "DocxArchive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise ArchiveClosedError("Archive has been closed")
        return self._zip


def _decode_part(name: str, data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ArchiveFormatError(f"Part {name} is not valid UTF-8 text") from exc
