"""Command line entry point: replace text in a DOCX and write a new package."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from docx_replacer.errors import DocxError
from docx_replacer.model.document_model import DocumentModel
from docx_replacer.utils.logger import get_logger, set_verbosity
from docx_replacer.writer.docx_writer import WriteOptions

LOGGER = get_logger(__name__)

_SHELL_ESCAPES = {"\\n": "\n", "\\r": "\r", "\\t": "\t", "\\\\": "\\"}


def unescape_argument(value: str) -> str:
    """Expand ``\\n``, ``\\r``, ``\\t`` and ``\\\\`` typed on a shell command line."""
    out: List[str] = []
    i = 0
    while i < len(value):
        pair = value[i : i + 2]
        if pair in _SHELL_ESCAPES:
            out.append(_SHELL_ESCAPES[pair])
            i += 2
        else:
            out.append(value[i])
            i += 1
    return "".join(out)


def replace_in_docx(
    source: Path,
    destination: Path,
    replacements: Sequence[Tuple[str, str]],
    limit: int = 0,
    options: Optional[WriteOptions] = None,
) -> List[int]:
    """Apply each (old, new) pair to ``source`` and write the result to ``destination``."""
    counts: List[int] = []
    with DocumentModel.open(source) as model:
        for old, new in replacements:
            count = model.replace(old, new, limit)
            LOGGER.info("Replaced %d occurrence(s) of %r", count, old)
            counts.append(count)
        model.write(destination, options)
    return counts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replace text inside the main body of a DOCX file")
    parser.add_argument("docx_file", help="Path to the input .docx file")
    parser.add_argument("output", help="Path of the .docx file to write")
    parser.add_argument(
        "--replace",
        nargs=2,
        action="append",
        metavar=("OLD", "NEW"),
        required=True,
        help="Text to find and its replacement; \\n, \\r and \\t are expanded",
    )
    parser.add_argument("--count", type=int, default=0, help="Maximum replacements per pair (0 = all)")
    parser.add_argument("--atomic", action="store_true", help="Write through a temporary file and rename")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_verbosity(args.verbose)
    if args.count < 0:
        print("error: --count must be zero or positive", file=sys.stderr)
        return 1

    replacements = [(unescape_argument(old), unescape_argument(new)) for old, new in args.replace]
    source = Path(args.docx_file).resolve()
    destination = Path(args.output).resolve()

    LOGGER.info("Editing %s", source.name)
    try:
        replace_in_docx(source, destination, replacements, args.count, WriteOptions(atomic=args.atomic))
    except (DocxError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    LOGGER.info("Wrote %s", destination)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
