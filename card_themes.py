"""Visual palettes for the stat card. One complete token record per theme."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple

DEFAULT_THEME = "dark"


@dataclass(frozen=True)
class ThemePalette:
    name: str
    font_family: str
    # Background and frame
    bg_start: str
    bg_end: str
    panel_fill: str
    panel_stroke: str
    # Decorative glows
    accent_start: str
    accent_end: str
    accent_opacity: float
    glow_color: str
    glow_opacity: float
    glow_matrix: str
    # Text
    title_color: str
    subtitle_color: str
    label_color: str
    value_color: str
    grade_text_color: str
    score_text_color: str
    error_color: str
    # Metric tiles
    tile_fill: str
    tile_stroke: str
    # Avatar
    avatar_ring: str
    placeholder_fill: str
    placeholder_glyph: str
    # Shadow under the glass panel
    shadow_color: str
    shadow_opacity: float
    shadow_blur: int
    # Grade badge colours in Grade order (S, A+, A, A-, B+, B, B-, C+, C)
    grade_colors: Tuple[str, ...]
    grade_default: str


DARK = ThemePalette(
    name="dark",
    font_family="'Space Grotesk', 'Segoe UI', sans-serif",
    bg_start="#0f172a",
    bg_end="#1f2937",
    panel_fill="rgba(15,23,42,0.45)",
    panel_stroke="rgba(148,163,184,0.15)",
    accent_start="#38bdf8",
    accent_end="#f59e0b",
    accent_opacity=0.14,
    glow_color="#f97316",
    glow_opacity=0.08,
    glow_matrix="0 0 0 0 0.4  0 0 0 0 0.7  0 0 0 0 1  0 0 0 0.3 0",
    title_color="#f8fafc",
    subtitle_color="#94a3b8",
    label_color="#cbd5f5",
    value_color="#f1f5f9",
    grade_text_color="#0f172a",
    score_text_color="#0f172a",
    error_color="#fca5a5",
    tile_fill="rgba(255,255,255,0.08)",
    tile_stroke="rgba(148,163,184,0.12)",
    avatar_ring="rgba(148,163,184,0.35)",
    placeholder_fill="#1e293b",
    placeholder_glyph="#64748b",
    shadow_color="#020617",
    shadow_opacity=0.45,
    shadow_blur=12,
    grade_colors=(
        "#fde68a", "#bae6fd", "#93c5fd", "#a7f3d0", "#86efac",
        "#bbf7d0", "#fef08a", "#fecaca", "#e2e8f0",
    ),
    grade_default="#e2e8f0",
)

LIGHT = ThemePalette(
    name="light",
    font_family="'Space Grotesk', 'Segoe UI', sans-serif",
    bg_start="#f8fafc",
    bg_end="#e2e8f0",
    panel_fill="rgba(255,255,255,0.65)",
    panel_stroke="rgba(100,116,139,0.20)",
    accent_start="#0ea5e9",
    accent_end="#f97316",
    accent_opacity=0.12,
    glow_color="#6366f1",
    glow_opacity=0.06,
    glow_matrix="0 0 0 0 0.1  0 0 0 0 0.4  0 0 0 0 0.9  0 0 0 0.2 0",
    title_color="#0f172a",
    subtitle_color="#475569",
    label_color="#334155",
    value_color="#0f172a",
    grade_text_color="#0f172a",
    score_text_color="#1e293b",
    error_color="#b91c1c",
    tile_fill="rgba(15,23,42,0.05)",
    tile_stroke="rgba(100,116,139,0.18)",
    avatar_ring="rgba(71,85,105,0.30)",
    placeholder_fill="#cbd5e1",
    placeholder_glyph="#64748b",
    shadow_color="#94a3b8",
    shadow_opacity=0.35,
    shadow_blur=10,
    grade_colors=(
        "#fcd34d", "#7dd3fc", "#60a5fa", "#6ee7b7", "#4ade80",
        "#86efac", "#fde047", "#fca5a5", "#cbd5e1",
    ),
    grade_default="#cbd5e1",
)

MATRIX = ThemePalette(
    name="matrix",
    font_family="ui-monospace, SFMono-Regular, Menlo, monospace",
    bg_start="#08110b",
    bg_end="#030604",
    panel_fill="rgba(3,12,6,0.60)",
    panel_stroke="rgba(79,245,122,0.25)",
    accent_start="#4ff57a",
    accent_end="#1f4028",
    accent_opacity=0.16,
    glow_color="#22c55e",
    glow_opacity=0.10,
    glow_matrix="0 0 0 0 0.2  0 0 0 0 1  0 0 0 0 0.4  0 0 0 0.35 0",
    title_color="#d7ffe0",
    subtitle_color="#7fc38f",
    label_color="#8af29f",
    value_color="#d7ffe0",
    grade_text_color="#030604",
    score_text_color="#030604",
    error_color="#ff6b6b",
    tile_fill="rgba(79,245,122,0.06)",
    tile_stroke="rgba(79,245,122,0.22)",
    avatar_ring="rgba(79,245,122,0.45)",
    placeholder_fill="#0a120d",
    placeholder_glyph="#4ff57a",
    shadow_color="#000000",
    shadow_opacity=0.6,
    shadow_blur=14,
    grade_colors=(
        "#4ff57a", "#6df78f", "#8af29f", "#a6f5b5", "#b9f7c6",
        "#c9f9d3", "#d7ffe0", "#9fbfa6", "#7fc38f",
    ),
    grade_default="#7fc38f",
)

THEMES: Dict[str, ThemePalette] = {t.name: t for t in (DARK, LIGHT, MATRIX)}


def get_theme(name: str | None) -> ThemePalette:
    """Return the palette for ``name`` (exact identifier); anything else falls back to dark."""
    return THEMES.get(name or DEFAULT_THEME, THEMES[DEFAULT_THEME])
