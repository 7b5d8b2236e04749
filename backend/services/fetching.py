from typing import Union

import requests
from bs4 import BeautifulSoup

from config import get_settings
from errors import UnsupportedContentType, UpstreamFetchError
from logger import get_logger
from models import ExtractedText, InputKind, NoContentFound

log = get_logger(__name__)

SUPPORTED_CONTENT_TYPES = ("text/plain", "text/html")


def html_to_text(html: str) -> str:
    """Visible text of an HTML page, one block per line."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


def fetch_link(url: str) -> Union[ExtractedText, NoContentFound]:
    """
    GET the URL once and return its text.

    Non-2xx statuses raise UpstreamFetchError carrying the upstream status;
    anything other than plain text or HTML raises UnsupportedContentType.
    An empty body is not an error: it comes back as NoContentFound.
    """
    s = get_settings()
    try:
        resp = requests.get(
            url,
            timeout=s.fetch_timeout,
            headers={"User-Agent": s.user_agent},
        )
    except requests.RequestException as e:
        log.warning("Fetching %s failed: %s", url, e)
        raise UpstreamFetchError(502, str(e))

    if not 200 <= resp.status_code < 300:
        log.info("Fetching %s returned %s", url, resp.status_code)
        raise UpstreamFetchError(resp.status_code, resp.reason or "")

    content_type = resp.headers.get("Content-Type", "")
    media_type = content_type.lower()
    if "text/plain" in media_type:
        text = resp.text
    elif "text/html" in media_type:
        text = html_to_text(resp.text)
    else:
        raise UnsupportedContentType(content_type)

    if not text.strip():
        return NoContentFound(url=url)

    return ExtractedText(text=text, source_kind=InputKind.link, url=url)
