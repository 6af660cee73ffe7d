import re
import unicodedata


def slugify(value: str) -> str:
    """
    Build a URL slug from a title or name.

    - Remove accents
    - Lowercase
    - Collapse every run of non-alphanumeric characters into one hyphen

    Example: "Café Society: Part 2" -> "cafe-society-part-2"
    """
    if not value:
        return ""

    # Unicode normalize (remove accents)
    value = unicodedata.normalize("NFKD", value)
    value = "".join(c for c in value if unicodedata.category(c) != "Mn")

    value = re.sub(r"[^a-zA-Z0-9]+", "-", value.lower())
    return value.strip("-")
