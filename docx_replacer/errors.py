"""Exception hierarchy raised while reading and rewriting DOCX packages."""
from __future__ import annotations


class DocxError(Exception):
    """Base class for every error raised by the package."""


class ArchiveOpenError(DocxError, OSError):
    """The package file could not be opened for reading."""


class ArchiveFormatError(DocxError, ValueError):
    """The file is not a valid zip package or a part is not UTF-8 text."""


class EntryNotFoundError(DocxError, KeyError):
    """A named or indexed entry does not exist in the archive."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class PartMissingError(EntryNotFoundError):
    """A part required to build the document model is absent."""


class ArchiveBusyError(DocxError, RuntimeError):
    """Exclusive access was requested while another holder is active."""


class ArchiveClosedError(DocxError, RuntimeError):
    """The archive, or an access handle on it, is no longer usable."""


class DestinationConflictError(DocxError, ValueError):
    """The output path is the package currently being read."""
