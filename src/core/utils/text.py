import re


_LEGAL_SUFFIXES = re.compile(
    r"\b(inc|corp|llc|ltd|plc|gmbh|therapeutics|biosciences|pharmaceuticals|pharma)\b"
)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def strip_term(text: str, term: str | None) -> str:
    """Remove every case-insensitive occurrence of ``term`` from ``text``."""
    if not text:
        return ""
    if not term:
        return collapse_whitespace(text)
    cleaned = re.sub(re.escape(term), "", text, flags=re.IGNORECASE)
    return collapse_whitespace(cleaned)


def normalize_company_name(name: str | None) -> str:
    if not name:
        return ""
    cleaned = re.sub(r"[,.]", "", name.lower())
    cleaned = _LEGAL_SUFFIXES.sub("", cleaned)
    return collapse_whitespace(cleaned)


def names_similar(a: str, b: str) -> bool:
    """Loose match for normalized company names (prefix or infix overlap)."""
    if not a or not b:
        return False
    if a == b:
        return True
    if len(a) >= 6 and b.startswith(a[:6]):
        return True
    if len(b) >= 6 and a.startswith(b[:6]):
        return True
    if len(a) >= 8 and a[:8] in b:
        return True
    if len(b) >= 8 and b[:8] in a:
        return True
    return False


def is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()
