# backoffice/utils/slug.py
"""Identyfikatory bezpieczne w URL dla obiektów katalogu.

    generate("Главная страница")  -> "glavnaya-stranitsa"
    generate("About Us")          -> "about-us"
    generate("Продукты & Услуги") -> "produkty-uslugi"
"""
import re
from typing import Iterable

_CYRILLIC = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}
_TRANSLIT = str.maketrans(_CYRILLIC)

_DISALLOWED = re.compile(r"[^a-z0-9_\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_VALID = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

MAX_SLUG_LENGTH = 100


def generate(text: str | None) -> str:
    if not text:
        return ""

    slug = str(text).lower().strip().translate(_TRANSLIT)
    # \w w pythonie lapie tez unicode, wiec dopuszczamy tylko ascii
    slug = _DISALLOWED.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def generate_unique(text: str | None, existing_slugs: Iterable[str] = ()) -> str:
    """Dokleja -1, -2, ... dopóki slug jest zajęty.

    Tylko best effort: przy równoległych zapisach unikalność gwarantuje
    dopiero unique index na kolumnie slug.
    """
    taken = set(existing_slugs)
    base = generate(text)
    slug = base
    counter = 1

    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1

    return slug


def is_valid(slug: str | None) -> bool:
    if not slug:
        return False
    return len(slug) <= MAX_SLUG_LENGTH and bool(_VALID.match(slug))
