# core/utils.py

def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data before writing to Supabase:
    - Empty / whitespace-only strings → None
    - Strip string whitespace
    - Preserve None, booleans and other types as-is

    Numeric-looking strings stay strings: phone and apartment
    numbers keep their leading zeros.
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped or None
            continue

        clean[k] = v

    return clean


def is_safe_redirect_path(path: str) -> bool:
    """Only same-origin absolute paths ("/x", not "//host" or "http://")."""
    return bool(path) and path.startswith("/") and not path.startswith("//") and "\\" not in path
