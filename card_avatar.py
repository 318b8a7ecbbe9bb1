from __future__ import annotations
import base64

import requests

import card_config
from card_config import debug


def resolve_avatar(source_url: str | None, inline: bool | None = None, timeout: float | None = None) -> str:
    """Return an href for the avatar image.

    Inline mode fetches the image and embeds it as a base64 data URI; any failure
    yields "" so the card falls back to the placeholder glyph. With inlining off the
    source URL is passed through untouched.
    """
    if not source_url:
        return ""
    if inline is None:
        inline = card_config.INLINE_AVATAR
    if not inline:
        return source_url
    try:
        r = requests.get(
            source_url,
            headers={"User-Agent": card_config.USER_AGENT},
            timeout=timeout or card_config.AVATAR_TIMEOUT,
        )
    except requests.RequestException as e:
        debug(f"avatar fetch failed for {source_url}: {e}")
        return ""
    if not 200 <= r.status_code < 300:
        debug(f"avatar fetch returned {r.status_code} for {source_url}")
        return ""
    content_type = (r.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if not content_type.startswith("image/"):
        debug(f"avatar has non-image content type {content_type!r}")
        return ""
    b64 = base64.b64encode(r.content).decode('ascii')
    return f"data:{content_type};base64,{b64}"
