"""
Integration tests for the open -> replace -> write -> reopen cycle.

Also drives the command line entry point end to end.
"""

import logging
import tempfile
import unittest
import zipfile
from pathlib import Path

from docx_replacer import DocumentModel
from docx_replacer.main import main, replace_in_docx, unescape_argument
from docx_replacer.tests.docx_factory import build_docx, corrupt_stored_bytes, read_entries
from docx_replacer.utils.logger import set_verbosity


class RoundTripTest(unittest.TestCase):
    """Replacement survives a full rewrite of the package."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_dir = Path(self._tmp.name)
        self.source = build_docx(self.tmp_dir / "TestDocument.docx")
        self.result = self.tmp_dir / "TestDocumentResult.docx"

    def test_control_characters_round_trip(self):
        cases = [
            ("Windows line breaks", "line1\r\nline2", "line1<w:br/>line2"),
            ("Mac line breaks", "line1\rline2", "line1<w:br/>line2"),
            ("Linux line breaks", "line1\nline2", "line1<w:br/>line2"),
            ("Tabs", "line1\tline2", "line1</w:t><w:tab/><w:t>line2"),
        ]
        for name, replace_with, expected in cases:
            with self.subTest(name):
                with DocumentModel.open(self.source) as doc:
                    doc.replace("document.", replace_with, 1)
                    doc.write(self.result)

                with DocumentModel.open(self.result) as reopened:
                    content = reopened.get_content()
                self.assertIn(expected, content)
                self.assertIn("This is a test line1", content)
                self.assertNotIn("This is a test document.", content)

    def test_media_and_parts_survive(self):
        with DocumentModel.open(self.source) as doc:
            media = set(doc.media_assets)
            headers = dict(doc.headers)
            doc.replace("document.", "page.", 0)
            doc.write(self.result)

        with DocumentModel.open(self.result) as reopened:
            self.assertEqual(reopened.media_assets, media)
            self.assertEqual(reopened.headers, headers)
            self.assertNotIn("document.", reopened.get_content())

    def test_stored_output_is_valid_zip(self):
        with DocumentModel.open(self.source) as doc:
            doc.write(self.result)
        with zipfile.ZipFile(self.result) as zf:
            self.assertIsNone(zf.testzip())

    def test_writing_over_source_with_atomic_replace(self):
        from docx_replacer.writer.docx_writer import WriteOptions

        with DocumentModel.open(self.source) as doc:
            doc.replace("document.", "page.", 1)
            doc.write(self.source, WriteOptions(atomic=True))
        with DocumentModel.open(self.source) as reopened:
            self.assertIn("This is a test page.", reopened.get_content())


class CommandLineTest(unittest.TestCase):
    """Exercise the docx-replace entry point."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_dir = Path(self._tmp.name)
        self.source = build_docx(self.tmp_dir / "in.docx")
        self.result = self.tmp_dir / "out.docx"

    def test_unescape_argument(self):
        test_cases = [
            ("a\\nb", "a\nb"),
            ("a\\r\\nb", "a\r\nb"),
            ("a\\tb", "a\tb"),
            ("a\\\\nb", "a\\nb"),
            ("plain", "plain"),
            ("trailing\\", "trailing\\"),
        ]
        for raw, expected in test_cases:
            self.assertEqual(unescape_argument(raw), expected, f"Failed for input: {raw!r}")

    def test_main_writes_output(self):
        exit_code = main([str(self.source), str(self.result), "--replace", "document.", "x\\ny"])
        self.assertEqual(exit_code, 0)
        content = read_entries(self.result)["word/document.xml"].decode("utf-8")
        self.assertIn("x<w:br/>y", content)
        self.assertNotIn("document.", content)

    def test_main_respects_count(self):
        main([str(self.source), str(self.result), "--replace", "document.", "page.", "--count", "1"])
        content = read_entries(self.result)["word/document.xml"].decode("utf-8")
        self.assertEqual(content.count("document."), 1)

    def test_main_reports_missing_input(self):
        exit_code = main([str(self.tmp_dir / "missing.docx"), str(self.result), "--replace", "a", "b"])
        self.assertEqual(exit_code, 1)
        self.assertFalse(self.result.exists())

    def test_main_reports_corrupt_input(self):
        stored = build_docx(self.tmp_dir / "corrupt.docx", compression=zipfile.ZIP_STORED)
        corrupt_stored_bytes(stored, b"This is a test document.")
        exit_code = main([str(stored), str(self.result), "--replace", "a", "b"])
        self.assertEqual(exit_code, 1)
        self.assertFalse(self.result.exists())

    def test_verbose_leaves_host_handlers_alone(self):
        root = logging.getLogger()
        handler = logging.NullHandler()
        handler.setLevel(logging.WARNING)
        root.addHandler(handler)
        package_logger = logging.getLogger("docx_replacer")
        previous = package_logger.level
        self.addCleanup(root.removeHandler, handler)
        self.addCleanup(package_logger.setLevel, previous)

        set_verbosity(True)
        self.assertEqual(handler.level, logging.WARNING)
        self.assertEqual(package_logger.level, logging.DEBUG)
        set_verbosity(False)
        self.assertEqual(handler.level, logging.WARNING)
        self.assertEqual(package_logger.level, logging.INFO)

    def test_main_rejects_negative_count(self):
        exit_code = main([str(self.source), str(self.result), "--replace", "a", "b", "--count", "-1"])
        self.assertEqual(exit_code, 1)

    def test_replace_in_docx_returns_counts(self):
        counts = replace_in_docx(
            self.source,
            self.result,
            [("document.", "page."), ("Second", "Next"), ("absent", "x")],
        )
        self.assertEqual(counts, [2, 1, 0])


if __name__ == "__main__":
    unittest.main()
