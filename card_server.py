"""
Stat card HTTP service (Flask).

Endpoints:
  GET /                      -> usage card
  GET /<username>            -> stat card SVG
      ?theme=dark|light|matrix   palette (unknown values render as dark)
      ?demo=1                    fixed demo data, no token needed ('test'/'demo' handles too)
      ?inline=0|1                embed the avatar as a data URI (default INLINE_AVATAR)
      ?refresh=1                 skip the cache lookup
  GET /healthz               -> JSON status

Run:
  export GITHUB_TOKEN="github_pat_..."
  python card_server.py
"""

from __future__ import annotations
import os
import time
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from flask import Flask, Response, jsonify, request

import card_config
from card_avatar import resolve_avatar
from card_config import ConfigurationMissing, debug
from card_github import DEMO_LOGINS, AccountStats, UpstreamQueryError, demo_stats, fetch_account_stats
from card_rank import calculate_rank
from card_render import render_card_svg, render_error_svg, render_info_svg
from card_themes import ThemePalette, get_theme

app = Flask(__name__)

SVG_CONTENT_TYPE = "image/svg+xml; charset=utf-8"
NOT_FOUND_MESSAGE = "GitHub user not found."

# Response cache: normalized URL -> (stored_at, svg)
_CACHE: Dict[str, Tuple[float, str]] = {}


def _flag(name: str) -> Optional[bool]:
    raw = request.args.get(name)
    if raw is None:
        return None
    return raw == "1"


def is_demo_request(username: str) -> bool:
    return username.lower() in DEMO_LOGINS or request.args.get("demo") == "1"


def cache_key(username: str, theme: ThemePalette) -> str:
    # Only parameters that change the rendered card take part in the key.
    inline = _flag("inline")
    if inline is None:
        inline = card_config.INLINE_AVATAR
    query = urlencode([("inline", "1" if inline else "0"), ("theme", theme.name)])
    return f"/{username.lower()}?{query}"


def _store(key: str, svg: str):
    now = time.time()
    for stale in [k for k, (stored_at, _) in _CACHE.items() if now - stored_at > card_config.CACHE_TTL_SECONDS]:
        del _CACHE[stale]
    _CACHE[key] = (now, svg)


def svg_response(svg: str, status: int = 200, cache_control: Optional[str] = None) -> Response:
    resp = Response(svg, status=status, content_type=SVG_CONTENT_TYPE)
    if cache_control:
        resp.headers["Cache-Control"] = cache_control
    return resp


def error_response(message: str, status: int, theme: ThemePalette) -> Response:
    return svg_response(render_error_svg(message, theme), status, "no-store")


def build_card(stats: AccountStats, theme: ThemePalette, inline: Optional[bool] = None) -> str:
    avatar = resolve_avatar(stats.avatar_url, inline)
    rank = calculate_rank(stats, theme)
    return render_card_svg(stats, rank, avatar, theme)


@app.route("/", methods=["GET"])
def home():
    return svg_response(render_info_svg(get_theme(request.args.get("theme"))))


@app.route("/<path:username>", methods=["GET"])
def card(username: str):
    username = username.strip("/")
    theme = get_theme(request.args.get("theme"))
    if not username:
        return svg_response(render_info_svg(theme))

    if is_demo_request(username):
        return svg_response(build_card(demo_stats(username), theme, _flag("inline")))

    key = cache_key(username, theme)
    if not _flag("refresh"):
        cached = _CACHE.get(key)
        if cached and (time.time() - cached[0]) <= card_config.CACHE_TTL_SECONDS:
            debug(f"cache hit {key}")
            return svg_response(cached[1], cache_control=f"public, max-age={card_config.CACHE_TTL_SECONDS}")

    try:
        token = card_config.require_token()
        stats = fetch_account_stats(username, token)
        if stats is None:
            return error_response(NOT_FOUND_MESSAGE, 404, theme)
        svg = build_card(stats, theme, _flag("inline"))
    except (ConfigurationMissing, UpstreamQueryError) as e:
        return error_response(str(e), 500, theme)
    except Exception as e:
        return error_response(str(e) or "Unknown error", 500, theme)

    _store(key, svg)
    return svg_response(svg, cache_control=f"public, max-age={card_config.CACHE_TTL_SECONDS}")


@app.route("/healthz", methods=["GET"])
def healthz():
    return jsonify({
        "ok": True,
        "token_configured": bool(card_config.GITHUB_TOKEN),
        "cache_ttl_seconds": card_config.CACHE_TTL_SECONDS,
    })


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=card_config.DEBUG)
