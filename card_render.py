"""
SVG rendering for the stat card and its info/error variants.

Layout is fixed (640x320); every colour comes from the ThemePalette so a new
theme never touches this module. All variable text goes through escape_xml().
"""

from __future__ import annotations
import math
from typing import List, Tuple
from xml.sax.saxutils import escape

from card_github import AccountStats
from card_rank import RankResult
from card_themes import ThemePalette, get_theme

WIDTH = 640
HEIGHT = 320

METRIC_COUNT = 5
TILE_TOP = 146
TILE_ROW_STEP = 54
TILE_HEIGHT = 44
TILE_LEFT = 24
TILE_RIGHT_COL = 336
TILE_HALF_WIDTH = 280
TILE_FULL_WIDTH = 592

AVATAR_CX, AVATAR_CY, AVATAR_R = 60, 64, 36

_XML_ENTITIES = {'"': "&quot;", "'": "&#39;"}


def escape_xml(value) -> str:
    return escape(str(value), _XML_ENTITIES)


def format_number(value) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "0"
    if math.isnan(value) or math.isinf(value):
        return "0"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def metric_tile_position(index: int, count: int = METRIC_COUNT) -> Tuple[int, int, int]:
    """(x, y, width) of metric tile ``index``; the last tile spans the full row."""
    is_last = index == count - 1
    col = index % 2
    row = index // 2
    x = TILE_LEFT if is_last or col == 0 else TILE_RIGHT_COL
    width = TILE_FULL_WIDTH if is_last else TILE_HALF_WIDTH
    return x, TILE_TOP + row * TILE_ROW_STEP, width


def card_metrics(stats: AccountStats) -> List[Tuple[str, str]]:
    return [
        ("Total Stars Earned", format_number(stats.total_stars)),
        ("Total Commits (last year)", format_number(stats.commits)),
        ("Total PRs", format_number(stats.prs)),
        ("Total Issues", format_number(stats.issues)),
        ("Contributed to (last year)", format_number(stats.contributed)),
    ]


def accessible_label(stats: AccountStats, rank: RankResult) -> str:
    parts = ", ".join(f"{label} {value}" for label, value in card_metrics(stats))
    return f"{stats.name} GitHub stats card. {parts}. Grade {rank.level}."


def subtitles(stats: AccountStats) -> Tuple[str, str]:
    return (
        f"@{stats.login} · {format_number(stats.total_repos)} repos",
        f"Last year: {stats.period_label} · Joined {stats.joined}",
    )


def _svg_open(label: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg width="{WIDTH}" height="{HEIGHT}" viewBox="0 0 {WIDTH} {HEIGHT}" '
        f'xmlns="http://www.w3.org/2000/svg" role="img" aria-label="{escape_xml(label)}">\n'
    )


def _defs(theme: ThemePalette) -> str:
    font = theme.font_family
    return f"""  <defs>
    <linearGradient id="bg" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0%" stop-color="{theme.bg_start}" />
      <stop offset="100%" stop-color="{theme.bg_end}" />
    </linearGradient>
    <linearGradient id="accent" x1="0" y1="0" x2="1" y2="0">
      <stop offset="0%" stop-color="{theme.accent_start}" />
      <stop offset="100%" stop-color="{theme.accent_end}" />
    </linearGradient>
    <clipPath id="avatarClip">
      <circle cx="{AVATAR_CX}" cy="{AVATAR_CY}" r="{AVATAR_R}" />
    </clipPath>
    <filter id="softGlow" x="-20%" y="-20%" width="140%" height="140%">
      <feGaussianBlur stdDeviation="8" result="blur" />
      <feColorMatrix type="matrix" values="{theme.glow_matrix}" />
      <feBlend in="SourceGraphic" in2="blur" mode="screen" />
    </filter>
    <filter id="panelShadow" x="-10%" y="-10%" width="120%" height="130%">
      <feDropShadow dx="0" dy="6" stdDeviation="{theme.shadow_blur}" flood-color="{theme.shadow_color}" flood-opacity="{theme.shadow_opacity}" />
    </filter>
    <style>
      .title {{ font: 600 22px {font}; fill: {theme.title_color}; }}
      .subtitle {{ font: 400 13px {font}; fill: {theme.subtitle_color}; }}
      .label {{ font: 500 11px {font}; fill: {theme.label_color}; letter-spacing: 0.4px; text-transform: uppercase; }}
      .value {{ font: 600 16px {font}; fill: {theme.value_color}; }}
      .grade {{ font: 700 22px {font}; fill: {theme.grade_text_color}; }}
      .score {{ font: 500 11px {font}; fill: {theme.score_text_color}; text-transform: uppercase; letter-spacing: 1px; }}
    </style>
  </defs>
"""


def _avatar(avatar: str, theme: ThemePalette) -> str:
    # Placeholder glyph is always drawn; a resolved avatar covers it.
    parts = [
        f'    <circle cx="{AVATAR_CX}" cy="{AVATAR_CY}" r="{AVATAR_R}" fill="{theme.placeholder_fill}" stroke="{theme.avatar_ring}" stroke-width="2" />\n',
        f'    <g id="avatarPlaceholder" fill="{theme.placeholder_glyph}">\n'
        f'      <circle cx="{AVATAR_CX}" cy="{AVATAR_CY - 10}" r="11" />\n'
        f'      <path d="M{AVATAR_CX - 20} {AVATAR_CY + 22}c0-12 9-19 20-19s20 7 20 19z" />\n'
        '    </g>\n',
    ]
    if avatar:
        size = AVATAR_R * 2
        parts.append(
            f'    <image id="avatar" href="{escape_xml(avatar)}" x="{AVATAR_CX - AVATAR_R}" y="{AVATAR_CY - AVATAR_R}" '
            f'width="{size}" height="{size}" clip-path="url(#avatarClip)" />\n'
        )
    return "".join(parts)


def _metric_tiles(stats: AccountStats, theme: ThemePalette) -> str:
    blocks = []
    metrics = card_metrics(stats)
    for index, (label, value) in enumerate(metrics):
        x, y, width = metric_tile_position(index, len(metrics))
        blocks.append(
            f'  <g transform="translate({x} {y})">\n'
            f'    <rect width="{width}" height="{TILE_HEIGHT}" rx="14" fill="{theme.tile_fill}" stroke="{theme.tile_stroke}" />\n'
            f'    <text class="label" x="16" y="18">{escape_xml(label)}</text>\n'
            f'    <text class="value" x="16" y="34">{escape_xml(value)}</text>\n'
            '  </g>\n'
        )
    return "".join(blocks)


def render_card_svg(stats: AccountStats, rank: RankResult, avatar: str, theme: ThemePalette) -> str:
    subtitle, subtitle2 = subtitles(stats)
    return (
        _svg_open(accessible_label(stats, rank))
        + _defs(theme)
        + f'\n  <rect width="{WIDTH}" height="{HEIGHT}" rx="28" fill="url(#bg)" />\n'
        + f'  <rect x="18" y="18" width="{WIDTH - 36}" height="{HEIGHT - 36}" rx="22" fill="{theme.panel_fill}" '
          f'stroke="{theme.panel_stroke}" filter="url(#panelShadow)" />\n\n'
        + f'  <circle cx="540" cy="80" r="70" fill="url(#accent)" opacity="{theme.accent_opacity}" filter="url(#softGlow)" />\n'
        + f'  <circle cx="560" cy="260" r="90" fill="{theme.glow_color}" opacity="{theme.glow_opacity}" />\n\n'
        + '  <g>\n'
        + _avatar(avatar, theme)
        + f'    <text class="title" x="112" y="56">{escape_xml(stats.name)}</text>\n'
        + f'    <text class="subtitle" x="112" y="78">{escape_xml(subtitle)}</text>\n'
        + f'    <text class="subtitle" x="112" y="96">{escape_xml(subtitle2)}</text>\n'
        + '  </g>\n\n'
        + '  <g id="gradeBadge" transform="translate(468 36)">\n'
        + f'    <rect width="148" height="72" rx="18" fill="{rank.color}" />\n'
        + f'    <text class="grade" x="18" y="40">{escape_xml(rank.level)}</text>\n'
        + f'    <text class="score" x="18" y="58">Percentile {rank.percentile_text}</text>\n'
        + '  </g>\n\n'
        + _metric_tiles(stats, theme)
        + '</svg>'
    )


def _simple_card(label: str, lines: List[Tuple[int, int, str, str]], theme: ThemePalette) -> str:
    body = [_svg_open(label), f'  <rect width="{WIDTH}" height="{HEIGHT}" rx="28" fill="{theme.bg_start}" />\n']
    for y, size, color, text in lines:
        body.append(
            f'  <text x="32" y="{y}" font-family="{escape_xml(theme.font_family)}" font-size="{size}" '
            f'fill="{color}">{escape_xml(text)}</text>\n'
        )
    body.append('</svg>')
    return "".join(body)


def render_info_svg(theme: ThemePalette | None = None) -> str:
    theme = theme or get_theme(None)
    return _simple_card("GitHub card usage", [
        (70, 22, theme.title_color, "GitHubCard Worker"),
        (110, 14, theme.subtitle_color, "Usage: https://your-domain.com/username"),
        (140, 14, theme.subtitle_color, "Set GITHUB_TOKEN to enable GitHub API access."),
    ], theme)


def render_error_svg(message: str, theme: ThemePalette | None = None) -> str:
    theme = theme or get_theme(None)
    return _simple_card("GitHub card error", [
        (70, 20, theme.title_color, "GitHubCard Error"),
        (110, 14, theme.error_color, message),
    ], theme)
