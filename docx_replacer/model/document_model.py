"""In-memory projection of the editable parts of a DOCX package."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Set, Union

from docx_replacer.errors import PartMissingError
from docx_replacer.parser.docx_loader import (
    DOCUMENT_RELS_PATH,
    DOCUMENT_XML_PATH,
    FOOTER_MARKER,
    HEADER_MARKER,
    MEDIA_PREFIX,
    DocxArchive,
    ExclusiveHandle,
)
from docx_replacer.utils.logger import get_logger
from docx_replacer.utils.text_encoder import encode_docx_text

if TYPE_CHECKING:
    from docx_replacer.writer.docx_writer import WriteOptions

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class DocumentModel:
    """Snapshot of the main text, manifest, headers, footers and media names.

    The collections are filled once by :meth:`load`. Entries that appear in
    the archive afterwards are not tracked here, but the writer still
    copies them because it walks the archive itself.
    """

    archive: DocxArchive
    main_content: str
    relationships: str
    headers: Dict[str, str] = field(default_factory=dict)
    footers: Dict[str, str] = field(default_factory=dict)
    media_assets: Set[str] = field(default_factory=set)

    @classmethod
    def open(cls, path: Union[str, Path]) -> "DocumentModel":
        """Open the package at ``path`` and load its editable parts."""
        archive = DocxArchive.open(path)
        try:
            return cls.load(archive)
        except BaseException:
            archive.close()
            raise

    @classmethod
    def load(cls, archive: DocxArchive) -> "DocumentModel":
        """Extract the tracked parts from an already opened archive."""
        with archive.exclusive_access() as handle:
            main_content = _read_required(handle, DOCUMENT_XML_PATH)
            relationships = _read_required(handle, DOCUMENT_RELS_PATH)

            headers: Dict[str, str] = {}
            footers: Dict[str, str] = {}
            media_assets: Set[str] = set()
            for index in range(len(handle)):
                name = handle.name_at(index)
                # Substring match, so e.g. word/_rels/header1.xml.rels counts too.
                if HEADER_MARKER in name:
                    headers[name] = handle.read_text_at(index)
                if FOOTER_MARKER in name:
                    footers[name] = handle.read_text_at(index)
                if name.startswith(MEDIA_PREFIX):
                    media_assets.add(name)

        LOGGER.debug(
            "Loaded document with %d header, %d footer and %d media parts",
            len(headers),
            len(footers),
            len(media_assets),
        )
        return cls(
            archive=archive,
            main_content=main_content,
            relationships=relationships,
            headers=headers,
            footers=footers,
            media_assets=media_assets,
        )

    # ------------------------------------------------------------------
    # Public helpers
    def get_content(self) -> str:
        return self.main_content

    def replace(self, old: str, new: str, limit: int = 0) -> int:
        """Replace ``old`` with ``new`` in the main document text.

        Both strings are encoded first so line breaks and tabs match the
        markup stored in the part. At most ``limit`` occurrences are
        replaced, left to right; ``0`` replaces all of them. A search string
        that does not occur is not an error, and neither is one that encodes
        to the empty string: both leave the text unchanged. Returns the
        number of replacements made.
        """
        if limit < 0:
            raise ValueError(f"limit must be zero or positive, got {limit}")

        encoded_old = encode_docx_text(old)
        encoded_new = encode_docx_text(new)
        LOGGER.debug("Replacing %r -> %r (encoded %r -> %r)", old, new, encoded_old, encoded_new)
        if not encoded_old:
            return 0

        found = self.main_content.count(encoded_old)
        replaced = found if limit == 0 else min(found, limit)
        if replaced:
            self.main_content = self.main_content.replace(encoded_old, encoded_new, replaced)
        return replaced

    def write(self, destination: Union[str, Path], options: Optional["WriteOptions"] = None) -> None:
        """Serialize the package with the current part values to ``destination``."""
        from docx_replacer.writer.docx_writer import write_docx

        write_docx(self, destination, options)

    def close(self) -> None:
        self.archive.close()

    def __enter__(self) -> "DocumentModel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _read_required(handle: ExclusiveHandle, name: str) -> str:
    if not handle.contains(name):
        raise PartMissingError(f"Required DOCX part missing: {name}")
    return handle.read_text(name)
