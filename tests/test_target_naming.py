from __future__ import annotations

import unittest
from datetime import date

from app.services.target_naming import (
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
    choose_project_name,
    extract_project_name,
    slugify,
)


class TestSlugify(unittest.TestCase):
    def test_polish_name_becomes_ascii_slug(self) -> None:
        self.assertEqual(slugify("Osiedle Słoneczne 2025"), "osiedle-sloneczne-2025")

    def test_punctuation_collapses_to_single_dash(self) -> None:
        self.assertEqual(slugify("  Żółta -- Łąka / etap II!  "), "zolta-laka-etap-ii")

    def test_symbol_only_name_has_empty_slug(self) -> None:
        self.assertEqual(slugify("!!!"), "")

    def test_slug_is_capped(self) -> None:
        slug = slugify("a" * 300)

        self.assertEqual(len(slug), MAX_SLUG_LENGTH)


class TestProjectNaming(unittest.TestCase):
    def test_file_name_is_title_cased(self) -> None:
        self.assertEqual(extract_project_name("osiedle_słoneczne-2025.csv"), "Osiedle Słoneczne 2025")

    def test_known_prefixes_are_stripped(self) -> None:
        self.assertEqual(
            extract_project_name("Ceny-ofertowe-mieszkan-dewelopera-Zielony-Zakatek.xlsx"),
            "Zielony Zakatek",
        )
        self.assertEqual(extract_project_name("export-park_avenue.csv"), "Park Avenue")

    def test_ministerial_template_name(self) -> None:
        name = extract_project_name("Wzorcowy_zakres_danych_dotyczących_cen_mieszkań.xlsx")

        self.assertEqual(name, "Ministerstwo")

    def test_bare_date_falls_back_to_import_name(self) -> None:
        name = extract_project_name("2025-01-31.csv", today=date(2026, 10, 18))

        self.assertEqual(name, "Import z 2026-10-18")

    def test_too_short_name_falls_back_to_import_name(self) -> None:
        self.assertEqual(extract_project_name("a.csv", today=date(2026, 10, 18)), "Import z 2026-10-18")

    def test_hint_wins_over_batch_and_file_name(self) -> None:
        name = choose_project_name(name_hint=" Nowa Praga ", batch_name="Inne", file_name="plik.csv")

        self.assertEqual(name, "Nowa Praga")

    def test_batch_name_wins_over_file_name(self) -> None:
        name = choose_project_name(name_hint=None, batch_name="Osiedle Lipowe", file_name="plik.csv")

        self.assertEqual(name, "Osiedle Lipowe")

    def test_unsluggable_hint_is_ignored(self) -> None:
        name = choose_project_name(name_hint="???", batch_name=None, file_name="Osiedle Słoneczne 2025.csv")

        self.assertEqual(name, "Osiedle Słoneczne 2025")
        self.assertEqual(slugify(name), "osiedle-sloneczne-2025")

    def test_long_names_are_capped(self) -> None:
        from_hint = choose_project_name(name_hint="Osiedle " * 60, batch_name=None, file_name="plik.csv")
        from_file = choose_project_name(name_hint=None, batch_name=None, file_name="Osiedle_" * 60 + ".csv")

        self.assertLessEqual(len(from_hint), MAX_NAME_LENGTH)
        self.assertLessEqual(len(from_file), MAX_NAME_LENGTH)
        self.assertTrue(from_hint.startswith("Osiedle Osiedle"))


if __name__ == "__main__":
    unittest.main()
