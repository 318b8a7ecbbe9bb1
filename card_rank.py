"""
Percentile rank model.

Each metric is normalised by a fixed median and squashed into [0, 1) by a
saturating CDF shape. The weighted mean of those values is the share of the
population the account already exceeds; the displayed percentile is the
remaining share (top N%), so a lower percentile means a better grade.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple

from card_themes import ThemePalette, get_theme


class Grade(enum.Enum):
    S = "S"
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"


GRADES: List[Grade] = list(Grade)
THRESHOLDS: List[float] = [1, 12.5, 25, 37.5, 50, 62.5, 75, 87.5, 100]

# (median, weight)
COMMITS = (250, 2)
PRS = (50, 3)
ISSUES = (25, 1)
REVIEWS = (2, 1)
STARS = (50, 4)
FOLLOWERS = (10, 1)
TOTAL_WEIGHT = sum(w for _, w in (COMMITS, PRS, ISSUES, REVIEWS, STARS, FOLLOWERS))


@dataclass(frozen=True)
class RankResult:
    grade: Grade
    percentile: float
    color: str

    @property
    def level(self) -> str:
        return self.grade.value

    @property
    def percentile_text(self) -> str:
        return format_percentile(self.percentile)


def exponential_cdf(x: float) -> float:
    return 1 - 2 ** -x


def log_normal_cdf(x: float) -> float:
    return x / (1 + x)


def format_percentile(value: float) -> str:
    # Decimal(float) is exact, so ties round half-up on the true binary value
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def grade_for_percentile(percentile: float) -> Grade:
    for threshold, grade in zip(THRESHOLDS, GRADES):
        if percentile <= threshold:
            return grade
    return GRADES[-1]


def grade_color(grade: Grade, theme: ThemePalette) -> str:
    try:
        return theme.grade_colors[GRADES.index(grade)]
    except (ValueError, IndexError):
        return theme.grade_default


def _weighted(value: int, shape, median_weight: Tuple[int, int]) -> float:
    median, weight = median_weight
    return weight * shape(max(0, value or 0) / median)


def calculate_rank(stats, theme: ThemePalette | str | None = None) -> RankResult:
    if not isinstance(theme, ThemePalette):
        theme = get_theme(theme)
    score = (
        _weighted(stats.commits, exponential_cdf, COMMITS)
        + _weighted(stats.prs, exponential_cdf, PRS)
        + _weighted(stats.issues, exponential_cdf, ISSUES)
        + _weighted(stats.reviews, exponential_cdf, REVIEWS)
        + _weighted(stats.total_stars, log_normal_cdf, STARS)
        + _weighted(stats.followers, log_normal_cdf, FOLLOWERS)
    ) / TOTAL_WEIGHT
    percentile = (1 - score) * 100
    grade = grade_for_percentile(percentile)
    return RankResult(grade=grade, percentile=percentile, color=grade_color(grade, theme))
