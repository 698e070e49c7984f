"""Text helpers: URL slugs and privacy masking of display names."""
import re

_NON_SLUG_RE = re.compile(r"[^a-z0-9-]+")
_DASH_RUN_RE = re.compile(r"-{2,}")


def generate_slug(text: str) -> str:
    """
    "Kaos Polos  Premium!" -> "kaos-polos-premium"

    Lowercase, spaces to dashes, drop anything outside [a-z0-9-],
    collapse dash runs and trim dashes at both ends.
    """
    slug = (text or "").lower().strip().replace(" ", "-")
    slug = _NON_SLUG_RE.sub("", slug)
    slug = _DASH_RUN_RE.sub("-", slug)
    return slug.strip("-")


def _mask_word(word: str) -> str:
    if len(word) <= 2:
        return word
    return word[0] + "*" * (len(word) - 2) + word[-1]


def mask_name(name: str) -> str:
    """Mask every word of a name, keeping its first and last letter ("Budi Santoso" -> "B**i S*****o")."""
    if not name:
        return ""
    return " ".join(_mask_word(word) for word in name.split())
