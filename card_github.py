"""
GitHub GraphQL access and the one-year stats aggregation behind the card.

The aggregation walks the owned, non-fork repository listing 100 nodes at a
time. Profile fields, followers and the contributions collection are identical
on every page, so they are captured from the first page only; star counts are
summed across all pages.
"""

from __future__ import annotations
import datetime
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from dateutil import parser as date_parser
from dateutil import relativedelta

import card_config
from card_config import debug, warn

PAGE_SIZE = 100

STATS_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!, $after: String) {
  user(login: $login) {
    name
    login
    avatarUrl(size: 128)
    createdAt
    followers { totalCount }
    contributionsCollection(from: $from, to: $to) {
      totalCommitContributions
      totalPullRequestContributions
      totalPullRequestReviewContributions
      totalIssueContributions
      totalRepositoryContributions
      contributionCalendar { totalContributions }
    }
    repositories(ownerAffiliations: OWNER, isFork: false, first: 100, after: $after) {
      nodes { stargazerCount }
      totalCount
      pageInfo { hasNextPage endCursor }
    }
  }
}"""


class UpstreamQueryError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class AccountStats:
    name: str
    login: str
    avatar_url: str
    created_at: Optional[str]
    total_stars: int = 0
    total_repos: int = 0
    commits: int = 0
    prs: int = 0
    reviews: int = 0
    issues: int = 0
    contributed: int = 0
    followers: int = 0
    total_contributions: int = 0
    joined: str = "N/A"
    period_label: str = ""


# ------------------ Date helpers ------------------
def trailing_window(now: Optional[datetime.datetime] = None):
    to = now or datetime.datetime.now(datetime.timezone.utc)
    return to - relativedelta.relativedelta(years=1), to


def iso_utc(value: datetime.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_year_month(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return "N/A"
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc)
    return f"{parsed.year}-{parsed.month:02d}"


def period_label(start: datetime.datetime, end: datetime.datetime) -> str:
    return f"{start.year}-{start.month:02d} to {end.year}-{end.month:02d}"


def _count(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


# ------------------ Transport ------------------
class GraphQLClient:
    """POSTs GraphQL queries with a small retry loop for transient failures."""

    def __init__(self, token: str, url: Optional[str] = None, max_retries: Optional[int] = None,
                 backoff: Optional[float] = None, timeout: Optional[float] = None):
        self.token = token
        self.url = url or card_config.GITHUB_GRAPHQL_URL
        self.max_retries = max(1, card_config.MAX_RETRIES if max_retries is None else max_retries)
        self.backoff = card_config.RETRY_BACKOFF if backoff is None else backoff
        self.timeout = timeout or card_config.GQL_TIMEOUT
        self.query_count = 0

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"bearer {self.token}",
            "User-Agent": card_config.USER_AGENT,
        }

    def _sleep(self, attempt: int):
        time.sleep(self.backoff ** attempt)

    def execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        for attempt in range(1, self.max_retries + 1):
            last = attempt == self.max_retries
            self.query_count += 1
            try:
                r = requests.post(
                    self.url,
                    json={"query": query, "variables": variables},
                    headers=self.headers,
                    timeout=self.timeout,
                )
            except (requests.Timeout, requests.ConnectionError) as e:
                if not last:
                    debug(f"network error {e}, retry {attempt}")
                    self._sleep(attempt)
                    continue
                raise UpstreamQueryError(f"GitHub API error: {e}") from e
            if r.status_code == 502 and not last:  # transient
                debug(f"502 Bad Gateway, retry {attempt}")
                self._sleep(attempt)
                continue
            if not 200 <= r.status_code < 300:
                raise UpstreamQueryError(f"GitHub API error: {r.status_code} {r.text[:300]}", r.status_code)
            try:
                data = r.json()
            except ValueError as e:
                raise UpstreamQueryError(f"GitHub API error: invalid JSON response ({r.status_code})",
                                         r.status_code) from e
            errors = data.get("errors") or []
            if errors:
                messages = " | ".join((e or {}).get("message", "") for e in errors)
                if "rate limit" in messages.lower() and not last:
                    debug(f"rate limit encountered, backoff retry {attempt}")
                    self._sleep(attempt)
                    continue
                raise UpstreamQueryError((errors[0] or {}).get("message") or "GitHub API error", r.status_code)
            return data
        raise UpstreamQueryError("GitHub API error: retries exhausted")


# ------------------ Aggregation ------------------
class _StatsAccumulator:
    def __init__(self):
        self.profile: Optional[Dict[str, Any]] = None
        self.contributions: Dict[str, Any] = {}
        self.followers = 0
        self.total_repos = 0
        self.total_stars = 0
        self.pages = 0

    @property
    def captured(self) -> bool:
        return self.profile is not None

    def add_page(self, user: Dict[str, Any]):
        repos = user.get("repositories") or {}
        if not self.captured:
            self.profile = {
                "name": user.get("name") or user.get("login") or "",
                "login": user.get("login") or "",
                "avatar_url": user.get("avatarUrl") or "",
                "created_at": user.get("createdAt"),
            }
            self.contributions = user.get("contributionsCollection") or {}
            self.followers = _count((user.get("followers") or {}).get("totalCount"))
            self.total_repos = _count(repos.get("totalCount"))
        for node in repos.get("nodes") or []:
            self.total_stars += _count((node or {}).get("stargazerCount"))
        self.pages += 1

    @property
    def max_pages(self) -> int:
        return max(1, math.ceil(self.total_repos / PAGE_SIZE))

    def finalize(self, start: datetime.datetime, end: datetime.datetime) -> AccountStats:
        c = self.contributions
        profile = self.profile or {}
        return AccountStats(
            name=profile.get("name", ""),
            login=profile.get("login", ""),
            avatar_url=profile.get("avatar_url", ""),
            created_at=profile.get("created_at"),
            total_stars=self.total_stars,
            total_repos=self.total_repos,
            commits=_count(c.get("totalCommitContributions")),
            prs=_count(c.get("totalPullRequestContributions")),
            reviews=_count(c.get("totalPullRequestReviewContributions")),
            issues=_count(c.get("totalIssueContributions")),
            contributed=_count(c.get("totalRepositoryContributions")),
            followers=self.followers,
            total_contributions=_count((c.get("contributionCalendar") or {}).get("totalContributions")),
            joined=format_year_month(profile.get("created_at")),
            period_label=period_label(start, end),
        )


def fetch_account_stats(login: str, token: Optional[str] = None, client: Optional[GraphQLClient] = None,
                        now: Optional[datetime.datetime] = None) -> Optional[AccountStats]:
    """Aggregate one year of activity for ``login``.

    Returns None when the account does not exist. Raises UpstreamQueryError on a
    failed upstream call; no partial result is produced.
    """
    if client is None:
        client = GraphQLClient(card_config.require_token(token))
    start, end = trailing_window(now)
    variables = {"login": login, "from": iso_utc(start), "to": iso_utc(end), "after": None}
    acc = _StatsAccumulator()
    while True:
        debug(f"stats page {acc.pages + 1} for {login} (after={variables['after']})")
        data = client.execute(STATS_QUERY, variables)
        user = (data.get("data") or {}).get("user")
        if not user:
            return None
        acc.add_page(user)
        page_info = (user.get("repositories") or {}).get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        if not page_info.get("endCursor"):
            warn(f"{login}: hasNextPage without endCursor; stopping")
            break
        if acc.pages >= acc.max_pages:
            warn(f"{login}: upstream reported more pages than {acc.total_repos} repositories allow; stopping")
            break
        variables = {**variables, "after": page_info["endCursor"]}
    return acc.finalize(start, end)


# ------------------ Demo ------------------
DEMO_LOGINS = ("test", "demo")


def demo_stats(login: str, now: Optional[datetime.datetime] = None) -> AccountStats:
    start, end = trailing_window(now)
    created_at = "2017-06-18T00:00:00Z"
    return AccountStats(
        name="Octavia Chen",
        login=login,
        avatar_url="https://avatars.githubusercontent.com/u/9919?s=128&v=4",
        created_at=created_at,
        total_stars=1480,
        total_repos=42,
        commits=1327,
        prs=96,
        reviews=28,
        issues=34,
        contributed=18,
        followers=512,
        total_contributions=1638,
        joined=format_year_month(created_at),
        period_label=period_label(start, end),
    )
