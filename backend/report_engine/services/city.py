import re

TYPO_FIXES = {"zambaonga": "zamboanga"}

# ASCII word boundaries
FILLER_WORDS_RE = re.compile(r"\b(?:city|of)\b", re.ASCII)
WHITESPACE_RE = re.compile(r"\s+")


def normalize_city(raw: str) -> str:
    """Canonical city name used to group sales by city.

    "Zambaonga City" -> "Zamboanga", "city of san-fernando" -> "San Fernando".
    Only the first letter of each word is uppercased; the rest is left as-is.
    Returns "" when nothing is left, and such records are not grouped at all.
    """
    city = (raw or "").strip().lower()
    for typo, fixed in TYPO_FIXES.items():
        city = city.replace(typo, fixed)
    city = FILLER_WORDS_RE.sub("", city)
    city = city.replace("-", " ")
    city = WHITESPACE_RE.sub(" ", city).strip()
    return " ".join(_capitalize_first(word) for word in city.split(" ") if word)


def _capitalize_first(word: str) -> str:
    # "ß".upper() is "SS"; keep letters whose uppercase is not a single character
    first = word[0].upper()
    if len(first) != 1:
        first = word[0]
    return first + word[1:]
