"""Literal text replacement inside DOCX packages."""
from docx_replacer.errors import (
    ArchiveBusyError,
    ArchiveClosedError,
    ArchiveFormatError,
    ArchiveOpenError,
    DestinationConflictError,
    DocxError,
    EntryNotFoundError,
    PartMissingError,
)
from docx_replacer.model.document_model import DocumentModel
from docx_replacer.parser.docx_loader import DocxArchive, ExclusiveHandle
from docx_replacer.utils.text_encoder import TextEncoder, encode_docx_text
from docx_replacer.writer.docx_writer import DocxWriter, WriteOptions, write_docx

__all__ = [
    "ArchiveBusyError",
    "ArchiveClosedError",
    "ArchiveFormatError",
    "ArchiveOpenError",
    "DestinationConflictError",
    "DocumentModel",
    "DocxArchive",
    "DocxError",
    "DocxWriter",
    "EntryNotFoundError",
    "ExclusiveHandle",
    "PartMissingError",
    "TextEncoder",
    "WriteOptions",
    "encode_docx_text",
    "write_docx",
]
