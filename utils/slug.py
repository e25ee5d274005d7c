"""Slug generation for page URLs"""

import re
import unicodedata

SLUG_PATTERN = r'^[a-z0-9]+(?:-[a-z0-9]+)*$'


def slugify(text: str) -> str:
    """Convert a title to a lowercase, hyphen-separated ASCII slug.

    Accents are folded ("Portfólio Ágil" -> "portfolio-agil").
    """
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-')
