"""
Text encoding for strings spliced into WordprocessingML run text.

Line breaks and tabs cannot appear raw inside ``<w:t>``; they are turned
into ``<w:br/>`` and a run split around ``<w:tab/>`` respectively.
"""

from typing import Tuple

LINE_BREAK = "<w:br/>"
TAB = "</w:t><w:tab/><w:t>"


class TextEncoder:
    """Converts control characters into their WordprocessingML markup."""

    # Applied top to bottom. "\r\n" must run before the single-character
    # rules or it would become two breaks.
    RULES: Tuple[Tuple[str, str], ...] = (
        ("<string>", ""),       # Serialization wrapper left by some callers
        ("</string>", ""),
        ("\r\n", LINE_BREAK),   # Windows newline
        ("\r", LINE_BREAK),     # Classic Mac newline
        ("\n", LINE_BREAK),     # Unix newline
        ("\t", TAB),            # Tab splits the run
    )

    def encode(self, text: str) -> str:
        """Return ``text`` with every rule applied in order."""
        if not text:
            return text

        encoded = text
        for source, target in self.RULES:
            encoded = encoded.replace(source, target)
        return encoded


_default_encoder = TextEncoder()


def encode_docx_text(text: str) -> str:
    """Encode text using the shared default encoder."""
    return _default_encoder.encode(text)
