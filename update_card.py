#!/usr/bin/env python3
"""
Stat card file generator.

Renders the card for one account into one SVG per theme, reusing a single
stats aggregation and avatar fetch.

Environment Variables:
  GITHUB_TOKEN / ACCESS_TOKEN : Personal token. Falls back to ACCESS_TOKEN.
  USER_NAME                   : GitHub login. Defaults to repository owner / actor.
  OUTPUT_DIR                  : Where card-<theme>.svg files go. Default '.'.
  INLINE_AVATAR               : '1' => embed avatar as data URI. '0' => link it.

Output SVG files: card-dark.svg, card-light.svg, card-matrix.svg
"""

from __future__ import annotations
import os
import sys
import time
from pathlib import Path

import card_config
from card_avatar import resolve_avatar
from card_config import ConfigurationMissing
from card_github import GraphQLClient, UpstreamQueryError, fetch_account_stats
from card_rank import calculate_rank
from card_render import render_card_svg
from card_themes import THEMES

SVG_FILES = {name: f"card-{name}.svg" for name in THEMES}


def resolve_user_name() -> str:
    repository = os.environ.get("GITHUB_REPOSITORY", "")
    default_owner = repository.split("/")[0] if "/" in repository else ""
    return os.environ.get("USER_NAME") or os.environ.get("GITHUB_ACTOR") or default_owner


def write_cards(stats, out_dir: Path, inline: bool | None = None):
    avatar = resolve_avatar(stats.avatar_url, inline)
    out_dir.mkdir(parents=True, exist_ok=True)
    for theme_name, file_name in SVG_FILES.items():
        theme = THEMES[theme_name]
        svg = render_card_svg(stats, calculate_rank(stats, theme), avatar, theme)
        (out_dir / file_name).write_text(svg, encoding="utf-8")
        print(f"wrote {out_dir / file_name}")


def main() -> int:
    user_name = resolve_user_name()
    if not user_name:
        print("ERROR: Cannot infer USER_NAME. Set USER_NAME env variable.", file=sys.stderr)
        return 1

    print("Collecting stats...")
    t0 = time.time()
    try:
        client = GraphQLClient(card_config.require_token())
        stats = fetch_account_stats(user_name, client=client)
    except (ConfigurationMissing, UpstreamQueryError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    if stats is None:
        print(f"ERROR: GitHub user {user_name} not found.", file=sys.stderr)
        return 1

    write_cards(stats, Path(os.environ.get("OUTPUT_DIR", ".")))

    print("Done in {:.2f}s".format(time.time() - t0))
    print("GraphQL query count:", client.query_count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
