import re

_SCHEME = re.compile(r"^https?://")


def normalize_url(url: str) -> str:
    """Canonical form of a URL used only for equality checks.

    Lowercases, then drops an http(s) scheme, a leading ``www.`` and one
    trailing slash. ``"https://"`` normalizes to ``""``, which is still a key.
    """
    u = (url or "").lower()
    u = _SCHEME.sub("", u, count=1)
    if u.startswith("www."):
        u = u[4:]
    if u.endswith("/"):
        u = u[:-1]
    return u


def same_site(a: str, b: str) -> bool:
    return normalize_url(a) == normalize_url(b)
