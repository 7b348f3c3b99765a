"""Rebuild a DOCX package from the original archive and the edited model."""
from __future__ import annotations

import os
import stat
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from docx_replacer.errors import DestinationConflictError
from docx_replacer.parser.docx_loader import (
    DOCUMENT_RELS_PATH,
    DOCUMENT_XML_PATH,
    FOOTER_MARKER,
    HEADER_MARKER,
    ExclusiveHandle,
)
from docx_replacer.utils.logger import get_logger

if TYPE_CHECKING:
    from docx_replacer.model.document_model import DocumentModel

LOGGER = get_logger(__name__)

_UNIX_SYSTEM = 3


@dataclass(frozen=True)
class WriteOptions:
    """Settings applied to every entry of the output package."""

    compress_type: int = zipfile.ZIP_STORED
    unix_permissions: int = 0o755
    atomic: bool = False


class DocxWriter:
    """Writes the entries of the source archive, in order, to a new package.

    Parts tracked by the model are taken from its current in-memory values;
    everything else is copied from the source unchanged.
    """

    def __init__(self, model: "DocumentModel", options: Optional[WriteOptions] = None) -> None:
        self._model = model
        self._options = options or WriteOptions()

    def write(self, destination: Union[str, Path]) -> None:
        output_path = Path(destination)
        if self._options.atomic:
            self._write_atomic(output_path)
        else:
            self._reject_source_destination(output_path)
            self._write_to(output_path)
        LOGGER.debug("Wrote %s", output_path)

    def _write_atomic(self, output_path: Path) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
        )
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            os.chmod(tmp_path, _destination_mode(output_path))
            self._write_to(tmp_path)
            os.replace(tmp_path, output_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def _reject_source_destination(self, output_path: Path) -> None:
        source = self._model.archive.path
        if source is not None and output_path.exists() and output_path.samefile(source):
            raise DestinationConflictError(
                f"Refusing to overwrite {output_path} while reading it; use an atomic write"
            )

    def _write_to(self, output_path: Path) -> None:
        with self._model.archive.exclusive_access() as handle:
            with zipfile.ZipFile(output_path, "w") as out_zip:
                for index in range(len(handle)):
                    info = handle.info_at(index)
                    data = self._entry_payload(handle, index, info.filename)
                    out_zip.writestr(self._output_info(info), data)

    def _entry_payload(self, handle: ExclusiveHandle, index: int, name: str) -> bytes:
        model = self._model
        if name == DOCUMENT_XML_PATH:
            return model.main_content.encode("utf-8")
        if name == DOCUMENT_RELS_PATH:
            return model.relationships.encode("utf-8")
        if HEADER_MARKER in name and name in model.headers:
            return model.headers.get(name, "").encode("utf-8")
        if FOOTER_MARKER in name and name in model.footers:
            return model.footers.get(name, "").encode("utf-8")
        return handle.read_index(index)

    def _output_info(self, source: zipfile.ZipInfo) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(source.filename, date_time=source.date_time)
        info.compress_type = self._options.compress_type
        info.create_system = _UNIX_SYSTEM
        file_type = stat.S_IFDIR if source.is_dir() else stat.S_IFREG
        info.external_attr = (file_type | self._options.unix_permissions) << 16
        return info


def _destination_mode(output_path: Path) -> int:
    """Mode for a new output file: keep an existing file's mode, else honour the umask."""
    if output_path.exists():
        return stat.S_IMODE(output_path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_docx(
    model: "DocumentModel", destination: Union[str, Path], options: Optional[WriteOptions] = None
) -> None:
    """Write ``model`` back out as a DOCX package at ``destination``."""
    DocxWriter(model, options).write(destination)
