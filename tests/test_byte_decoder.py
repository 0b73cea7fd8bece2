from __future__ import annotations

import unittest

from app.decoding.byte_decoder import decode, has_polish_letters, preferred_legacy_encoding
from app.domain.price_batch import Confidence, Encoding


class TestByteDecoder(unittest.TestCase):
    def test_bom_prefixed_utf8_is_detected_and_stripped(self) -> None:
        content = b"\xef\xbb\xbf" + "Nr lokalu;Województwo\nA1;mazowieckie\n".encode("utf-8")

        decoded = decode(content)

        self.assertEqual(decoded.encoding, Encoding.UTF8_BOM)
        self.assertEqual(decoded.confidence, Confidence.HIGH)
        self.assertTrue(decoded.content.startswith("Nr lokalu"))
        self.assertTrue(decoded.has_extended_chars)

    def test_plain_utf8_is_high_confidence(self) -> None:
        decoded = decode("Gmina;Łódź\n".encode("utf-8"))

        self.assertEqual(decoded.encoding, Encoding.UTF8)
        self.assertEqual(decoded.confidence, Confidence.HIGH)
        self.assertEqual(decoded.content, "Gmina;Łódź\n")

    def test_ascii_only_is_utf8_without_extended_chars(self) -> None:
        decoded = decode(b"unit;area\nA1;50\n")

        self.assertEqual(decoded.encoding, Encoding.UTF8)
        self.assertFalse(decoded.has_extended_chars)

    def test_windows_1250_bytes_decode_with_polish_letters(self) -> None:
        content = "Województwo;Gmina\nśląskie;Gliwice\nŚwiętokrzyskie;Kielce\n".encode("cp1250")

        decoded = decode(content)

        self.assertEqual(decoded.encoding, Encoding.WINDOWS_1250)
        self.assertEqual(decoded.confidence, Confidence.HIGH)
        self.assertIn("śląskie", decoded.content)

    def test_iso_8859_2_bytes_decode_with_polish_letters(self) -> None:
        content = "Województwo;Gmina\nśląskie;Gliwice\nźródło;Wąchock\n".encode("iso8859_2")

        decoded = decode(content)

        self.assertEqual(decoded.encoding, Encoding.ISO_8859_2)
        self.assertIn("śląskie", decoded.content)
        self.assertIn("Wąchock", decoded.content)

    def test_empty_input_is_utf8(self) -> None:
        decoded = decode(b"")

        self.assertEqual(decoded.encoding, Encoding.UTF8)
        self.assertEqual(decoded.content, "")

    def test_bom_with_invalid_payload_falls_through_to_legacy(self) -> None:
        content = b"\xef\xbb\xbf" + "Województwo;śląskie\n".encode("cp1250")

        decoded = decode(content)

        self.assertNotEqual(decoded.encoding, Encoding.UTF8_BOM)
        self.assertFalse(decoded.content.startswith("\ufeff"))

    def test_windows_indicator_majority_prefers_windows_1250(self) -> None:
        self.assertEqual(preferred_legacy_encoding(b"\xb9\x9c\x9f\xb1"), Encoding.WINDOWS_1250)

    def test_indicator_tie_prefers_iso_8859_2(self) -> None:
        self.assertEqual(preferred_legacy_encoding(b"\xb9\xb1"), Encoding.ISO_8859_2)
        self.assertEqual(preferred_legacy_encoding(b"plain"), Encoding.ISO_8859_2)

    def test_has_polish_letters(self) -> None:
        self.assertTrue(has_polish_letters("Żoliborz"))
        self.assertFalse(has_polish_letters("Mokotow"))


if __name__ == "__main__":
    unittest.main()
