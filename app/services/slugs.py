from __future__ import annotations

import re
import unicodedata

from app.core.config import settings

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
MAX_BASE_CHARS = 120


def slugify(value: str | None) -> str:
    if not value:
        return ""
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", ascii_value.lower()).strip("-")


def generate_listing_slug(title: str | None, city: str | None, listing_id: str, *, id_chars: int | None = None) -> str:
    """
    Deterministic URL slug: <title>-<city>-<id fragment>.
    e.g. ("2BR Sea View", "Pune", "lst_9f1c2a...") -> "2br-sea-view-pune-9f1c2a.."

    Raises ValueError when the title does not produce any slug characters.
    """
    id_chars = id_chars or settings.slug_id_chars

    base = slugify(title)[:MAX_BASE_CHARS].strip("-")
    if not base:
        raise ValueError(f"title {title!r} produces an empty slug")

    suffix = slugify(listing_id.split("_", 1)[-1])[:id_chars]
    if not suffix:
        raise ValueError(f"listing id {listing_id!r} produces an empty slug suffix")

    parts = [base]
    city_part = slugify(city)
    if city_part:
        parts.append(city_part)
    parts.append(suffix)
    return "-".join(parts)
