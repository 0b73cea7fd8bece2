"""
app/services/target_naming.py

Project naming helpers: display names inferred from file names and the
URL-safe slugs used to find a project again on re-upload.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date

MAX_SLUG_LENGTH = 255
MAX_NAME_LENGTH = 255
DEFAULT_SLUG = "import"

_EXTENSION = re.compile(r"\.(csv|xlsx|xls)$", re.IGNORECASE)
_PREFIX_REPLACEMENTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^Ceny-ofertowe-mieszkan-dewelopera-", re.IGNORECASE), ""),
    (re.compile(r"^Wzorcowy_zakres_danych_dotyczących_cen_mieszkań", re.IGNORECASE), "Ministerstwo"),
    (re.compile(r"^dane-", re.IGNORECASE), ""),
    (re.compile(r"^data-", re.IGNORECASE), ""),
    (re.compile(r"^export-", re.IGNORECASE), ""),
    (re.compile(r"^raport-", re.IGNORECASE), ""),
)
_BARE_DATE = re.compile(r"^\d{4}[-\s]\d{2}[-\s]\d{2}$")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Lowercase ASCII slug: diacritics stripped, other characters collapsed to '-'.

    >>> slugify("Osiedle Słoneczne 2025")
    'osiedle-sloneczne-2025'
    """

    decomposed = unicodedata.normalize("NFD", name.lower())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).replace("ł", "l")
    slug = _NON_SLUG.sub("-", ascii_only).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def extract_project_name(file_name: str, *, today: date | None = None) -> str:
    """
    Infer a project display name from an uploaded file name.
    """

    name = _EXTENSION.sub("", file_name.strip())
    for pattern, replacement in _PREFIX_REPLACEMENTS:
        name = pattern.sub(replacement, name)
    name = re.sub(r"[-_]", " ", name).strip()

    if len(name) < 3 or _BARE_DATE.match(name):
        return f"Import z {(today or date.today()).isoformat()}"
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split())


def choose_project_name(
    *,
    name_hint: str | None,
    batch_name: str | None,
    file_name: str,
    today: date | None = None,
) -> str:
    """
    Pick the target name: explicit hint, then the batch's own column, then the file name.
    """

    for candidate in (name_hint, batch_name):
        if candidate and candidate.strip() and slugify(candidate):
            return candidate.strip()[:MAX_NAME_LENGTH].rstrip()
    return extract_project_name(file_name, today=today)[:MAX_NAME_LENGTH].rstrip()
