import asyncio
import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

log = logging.getLogger("uxaudit")

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}

MAX_REDIRECTS = 5

BLOCKED_PATTERNS = [
    "access denied",
    "captcha",
    "unusual traffic",
    "service unavailable",
]


@dataclass(frozen=True)
class PageContext:
    title: Optional[str]
    description: Optional[str]


def is_block_page(html: Optional[str]) -> bool:
    """Detect common block/captcha pages"""
    if not html:
        return True
    text = BeautifulSoup(html, "lxml").get_text().lower()
    return any(p in text for p in BLOCKED_PATTERNS)


def _meta(soup: BeautifulSoup, *names: str) -> Optional[str]:
    for name in names:
        tag = soup.find("meta", {"property": name}) or soup.find("meta", {"name": name})
        if tag and tag.get("content"):
            return tag["content"].strip()
    return None


def extract_page_context(html: str) -> Optional[PageContext]:
    soup = BeautifulSoup(html or "", "lxml")
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else None
    title = title or _meta(soup, "og:title", "twitter:title")
    description = _meta(soup, "description", "og:description", "twitter:description")
    if not title and not description:
        return None
    return PageContext(title=title, description=description)


async def resolve_host(host: str) -> List[str]:
    infos = await asyncio.get_running_loop().getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


def _is_public_ip(address: str) -> bool:
    ip = ipaddress.ip_address(address.split("%", 1)[0])
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


async def is_public_host(host: Optional[str]) -> bool:
    """True only when every address the host resolves to is publicly routable."""
    if not host:
        return False
    try:
        return _is_public_ip(host)
    except ValueError:
        pass  # a name, not an IP literal
    try:
        addresses = await resolve_host(host)
    except (OSError, UnicodeError) as e:
        log.warning("Page context skipped, cannot resolve %s: %s", host, e)
        return False
    return bool(addresses) and all(_is_public_ip(a) for a in addresses)


async def fetch_page_context(url: str, client: Optional[httpx.AsyncClient] = None) -> Optional[PageContext]:
    """Best-effort title/description of the audited page; ``None`` on any failure.

    Only public hosts are fetched. Redirects are followed by hand so that
    every hop is checked the same way.
    """
    target = url if url.lower().startswith(("http://", "https://")) else f"https://{url}"
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=20)
    try:
        next_url = httpx.URL(target)
        for _ in range(MAX_REDIRECTS + 1):
            if not await is_public_host(next_url.host):
                log.warning("Page context skipped, %s is not a public host", next_url.host)
                return None
            r = await client.get(next_url, headers=BROWSER_HEADERS, follow_redirects=False)
            if not r.is_redirect:
                break
            next_url = r.url.join(r.headers["location"])
        else:
            log.warning("Page context skipped, too many redirects for %s", target)
            return None
        if r.status_code != 200:
            log.warning("Page context fetch returned %s for %s", r.status_code, target)
            return None
        html = r.text
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        log.warning("Page context fetch failed for %s: %s", target, e)
        return None
    finally:
        if owns_client:
            await client.aclose()

    if is_block_page(html):
        log.warning("Page context skipped, %s looks like a block page", target)
        return None
    return extract_page_context(html)
