"""
app/decoding/byte_decoder.py

Character-encoding detection for uploaded price lists.

Polish developer exports arrive as UTF-8 (with or without BOM) or in one of
the two legacy Central-European code pages. The cascade below always
produces text; the encoding tag and confidence tell the caller how much to
trust it.
"""

from __future__ import annotations

import logging
import re

from app.domain.price_batch import Confidence, DecodedText, Encoding

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"

# Byte values of ą, ś, ź in each code page. The two pages disagree on them,
# which is what makes counting useful.
WINDOWS_1250_INDICATORS = frozenset({0xB9, 0x9C, 0x9F})
ISO_8859_2_INDICATORS = frozenset({0xB1, 0xB6, 0xBC})

_PYTHON_CODECS = {
    Encoding.WINDOWS_1250: "cp1250",
    Encoding.ISO_8859_2: "iso8859_2",
}

_POLISH_LETTERS = re.compile(r"[ąćęłńóśźżĄĆĘŁŃÓŚŹŻ]")


def has_polish_letters(text: str) -> bool:
    return _POLISH_LETTERS.search(text) is not None


def _decode_strict_utf8(content: bytes) -> str | None:
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if "\ufffd" in text:
        return None
    return text


def _decode_legacy(content: bytes, encoding: str) -> str | None:
    try:
        return content.decode(_PYTHON_CODECS[encoding])
    except UnicodeDecodeError:
        return None


def preferred_legacy_encoding(content: bytes) -> str:
    """
    Pick the legacy code page whose Polish-letter byte values occur more often.
    """

    windows_hits = sum(1 for byte in content if byte in WINDOWS_1250_INDICATORS)
    iso_hits = sum(1 for byte in content if byte in ISO_8859_2_INDICATORS)
    logger.debug("Legacy indicator counts windows-1250=%d iso-8859-2=%d", windows_hits, iso_hits)
    if windows_hits > iso_hits:
        return Encoding.WINDOWS_1250
    return Encoding.ISO_8859_2


def decode(content: bytes) -> DecodedText:
    """
    Decode raw upload bytes into text. Never raises.
    """

    if content.startswith(UTF8_BOM):
        content = content[len(UTF8_BOM):]
        text = _decode_strict_utf8(content)
        if text is not None:
            return DecodedText(
                content=text,
                encoding=Encoding.UTF8_BOM,
                confidence=Confidence.HIGH,
                has_extended_chars=has_polish_letters(text),
            )
        logger.info("UTF-8 BOM present but payload is not valid UTF-8; continuing detection")

    text = _decode_strict_utf8(content)
    if text is not None:
        return DecodedText(
            content=text,
            encoding=Encoding.UTF8,
            confidence=Confidence.HIGH,
            has_extended_chars=has_polish_letters(text),
        )

    preferred = preferred_legacy_encoding(content)
    secondary = Encoding.ISO_8859_2 if preferred == Encoding.WINDOWS_1250 else Encoding.WINDOWS_1250

    text = _decode_legacy(content, preferred)
    if text is not None:
        polish = has_polish_letters(text)
        return DecodedText(
            content=text,
            encoding=preferred,
            confidence=Confidence.HIGH if polish else Confidence.MEDIUM,
            has_extended_chars=polish,
        )

    text = _decode_legacy(content, secondary)
    if text is not None:
        polish = has_polish_letters(text)
        return DecodedText(
            content=text,
            encoding=secondary,
            confidence=Confidence.MEDIUM if polish else Confidence.LOW,
            has_extended_chars=polish,
        )

    logger.warning("No encoding matched cleanly; decoding %d bytes with replacement", len(content))
    text = content.decode("utf-8", errors="replace")
    return DecodedText(
        content=text,
        encoding=Encoding.UTF8_FALLBACK,
        confidence=Confidence.LOW,
        has_extended_chars=has_polish_letters(text),
    )
