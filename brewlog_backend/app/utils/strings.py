# brewlog_backend/app/utils/strings.py

from unicodedata import normalize

# What it does:
# Strip whitespace or convert falsy/nulls to None
def null_to_none_or_strip(x) -> str | None:
    if not x:
        return None
    return str(x).strip() or None

def fold_key(name: str) -> str:
    """
    Comparison key for display names:
    - normalizes unicode (so "Café" typed two ways matches)
    - case-folds
    - collapses inner whitespace
    """
    if not name:
        return ""
    name = normalize("NFKC", name)
    return " ".join(name.casefold().split())
