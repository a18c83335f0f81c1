from http.cookies import SimpleCookie
from typing import Literal


def serialize_cookie(  # noqa: PLR0913
    name: str,
    value: str,
    *,
    max_age: int,
    path: str = "/",
    domain: str | None = None,
    secure: bool = True,
    http_only: bool = True,
    same_site: Literal["lax", "strict", "none"] = "lax",
) -> str:
    """Render a ``Set-Cookie`` header value."""
    cookie: SimpleCookie = SimpleCookie()
    cookie[name] = value
    morsel = cookie[name]
    if not value:
        # SimpleCookie renders an empty value as ""
        morsel.set(name, "", "")
    morsel["max-age"] = max_age
    morsel["path"] = path
    if domain:
        morsel["domain"] = domain
    if secure:
        morsel["secure"] = True
    if http_only:
        morsel["httponly"] = True
    morsel["samesite"] = same_site.capitalize()
    return morsel.OutputString()


def parse_cookie_header(header: str | None) -> dict[str, str]:
    """Parse a ``Cookie`` request header leniently; malformed pairs are skipped.

    ``SimpleCookie.load`` drops every cookie in the header once it meets a
    malformed pair, so a stray third-party cookie would hide the session.
    """
    cookies: dict[str, str] = {}
    if not header:
        return cookies
    for chunk in header.split(";"):
        if "=" not in chunk:
            continue
        key, value = chunk.split("=", 1)
        key, value = key.strip(), value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':  # noqa: PLR2004
            value = value[1:-1]
        if key:
            cookies[key] = value
    return cookies
