"""
Aggregation test: mocks GitHub GraphQL pages so pagination, first-page capture
and error propagation can be checked without network calls.

Run:  pytest -q
"""
import datetime
import json
from unittest.mock import patch

import pytest
import requests

import card_config
from card_github import (
    GraphQLClient,
    UpstreamQueryError,
    fetch_account_stats,
    format_year_month,
    trailing_window,
)
from card_config import ConfigurationMissing

NOW = datetime.datetime(2024, 2, 29, 12, 0, 0, tzinfo=datetime.timezone.utc)

CONTRIBUTIONS = {
    "totalCommitContributions": 321,
    "totalPullRequestContributions": 12,
    "totalPullRequestReviewContributions": 4,
    "totalIssueContributions": 9,
    "totalRepositoryContributions": 6,
    "contributionCalendar": {"totalContributions": 400},
}


class FakeResp:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)
        self.headers = {"Content-Type": "application/json"}

    def json(self):
        return self.payload


def user_page(stars, total, has_next, cursor, followers=42, name="Ada Lovelace", contributions=CONTRIBUTIONS):
    return {
        "data": {
            "user": {
                "name": name,
                "login": "ada",
                "avatarUrl": "https://avatars.example/ada.png",
                "createdAt": "2015-03-09T10:00:00Z",
                "followers": {"totalCount": followers},
                "contributionsCollection": contributions,
                "repositories": {
                    "nodes": [{"stargazerCount": s} for s in stars],
                    "totalCount": total,
                    "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
                },
            }
        }
    }


class PagedUpstream:
    """Serves N repositories 100 per page, keyed by the `after` cursor."""

    def __init__(self, star_counts, **page_kwargs):
        self.star_counts = star_counts
        self.page_kwargs = page_kwargs
        self.calls = []

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        after = json["variables"]["after"]
        page = 0 if after is None else int(after.split("-")[1])
        chunk = self.star_counts[page * 100:(page + 1) * 100]
        has_next = (page + 1) * 100 < len(self.star_counts)
        kwargs = self.page_kwargs if page == 0 else {**self.page_kwargs, **self.later_pages()}
        return FakeResp(user_page(chunk, len(self.star_counts), has_next,
                                  f"cursor-{page + 1}" if has_next else None, **kwargs))

    def later_pages(self):
        return {}


def client():
    return GraphQLClient("tok", max_retries=3, backoff=0)


@pytest.mark.parametrize("repo_count,expected_calls", [(0, 1), (1, 1), (100, 1), (101, 2), (250, 3)])
def test_pagination_sums_all_stars(repo_count, expected_calls):
    stars = [(i % 7) + 1 for i in range(repo_count)]
    upstream = PagedUpstream(stars)
    with patch("requests.post", side_effect=upstream):
        stats = fetch_account_stats("ada", client=client(), now=NOW)
    assert len(upstream.calls) == expected_calls
    assert stats.total_stars == sum(stars)
    assert stats.total_repos == repo_count


def test_cursor_is_forwarded_between_pages():
    upstream = PagedUpstream([1] * 230)
    with patch("requests.post", side_effect=upstream):
        fetch_account_stats("ada", client=client(), now=NOW)
    afters = [c["json"]["variables"]["after"] for c in upstream.calls]
    assert afters == [None, "cursor-1", "cursor-2"]
    first = upstream.calls[0]
    assert first["json"]["variables"]["login"] == "ada"
    assert first["json"]["variables"]["from"] == "2023-02-28T12:00:00Z"
    assert first["json"]["variables"]["to"] == "2024-02-29T12:00:00Z"
    assert first["headers"]["Authorization"] == "bearer tok"


def test_profile_fields_come_from_first_page_only():
    upstream = PagedUpstream([2] * 150)
    upstream.later_pages = lambda: {"followers": 999, "name": "Someone Else",
                                    "contributions": {"totalCommitContributions": 1}}
    with patch("requests.post", side_effect=upstream):
        stats = fetch_account_stats("ada", client=client(), now=NOW)
    assert len(upstream.calls) == 2
    assert stats.followers == 42
    assert stats.name == "Ada Lovelace"
    assert stats.commits == 321
    assert stats.total_stars == 300


def test_summary_record_fields():
    with patch("requests.post", side_effect=PagedUpstream([5, 3])):
        stats = fetch_account_stats("ada", client=client(), now=NOW)
    assert stats.login == "ada"
    assert stats.avatar_url == "https://avatars.example/ada.png"
    assert (stats.commits, stats.prs, stats.reviews, stats.issues) == (321, 12, 4, 9)
    assert stats.contributed == 6
    assert stats.total_contributions == 400
    assert stats.joined == "2015-03"
    assert stats.period_label == "2023-02 to 2024-02"


def test_missing_aggregates_default_to_zero():
    upstream = PagedUpstream([None, 4], contributions=None, name=None)
    with patch("requests.post", side_effect=upstream):
        stats = fetch_account_stats("ada", client=client(), now=NOW)
    assert stats.name == "ada"
    assert stats.total_stars == 4
    assert (stats.commits, stats.prs, stats.reviews, stats.issues, stats.contributed) == (0, 0, 0, 0, 0)
    assert stats.total_contributions == 0


def test_unknown_user_returns_none():
    with patch("requests.post", return_value=FakeResp({"data": {"user": None}})) as mock_post:
        assert fetch_account_stats("ghost", client=client(), now=NOW) is None
    assert mock_post.call_count == 1


def test_error_payload_raises_with_upstream_message():
    payload = {"data": None, "errors": [{"message": "Something went sideways"}]}
    with patch("requests.post", return_value=FakeResp(payload)):
        with pytest.raises(UpstreamQueryError, match="Something went sideways"):
            fetch_account_stats("ada", client=client(), now=NOW)


def test_error_status_raises_without_retry():
    with patch("requests.post", return_value=FakeResp({"message": "Bad credentials"}, 401)) as mock_post:
        with pytest.raises(UpstreamQueryError) as excinfo:
            fetch_account_stats("ada", client=client(), now=NOW)
    assert excinfo.value.status == 401
    assert "GitHub API error: 401" in str(excinfo.value)
    assert mock_post.call_count == 1


class HtmlResp(FakeResp):
    def __init__(self):
        super().__init__(None)
        self.text = "<html>maintenance</html>"
        self.headers = {"Content-Type": "text/html"}

    def json(self):
        return json.loads(self.text)


def test_non_json_body_raises_upstream_error():
    with patch("requests.post", return_value=HtmlResp()) as mock_post:
        with pytest.raises(UpstreamQueryError, match="invalid JSON response") as excinfo:
            fetch_account_stats("ada", client=client(), now=NOW)
    assert excinfo.value.status == 200
    assert mock_post.call_count == 1


def test_failure_on_later_page_aborts_walk():
    responses = [FakeResp(user_page([1] * 100, 150, True, "cursor-1")), FakeResp({}, 500)]
    with patch("requests.post", side_effect=responses):
        with pytest.raises(UpstreamQueryError):
            fetch_account_stats("ada", client=client(), now=NOW)


def test_transient_failures_are_retried_by_transport():
    ok = user_page([3], 1, False, None)
    responses = [FakeResp({}, 502), requests.ConnectionError("reset"), FakeResp(ok)]
    c = client()
    with patch("requests.post", side_effect=responses):
        stats = fetch_account_stats("ada", client=c, now=NOW)
    assert stats.total_stars == 3
    assert c.query_count == 3


def test_network_errors_exhaust_retries():
    with patch("requests.post", side_effect=requests.Timeout("slow")):
        with pytest.raises(UpstreamQueryError, match="slow"):
            fetch_account_stats("ada", client=client(), now=NOW)


def test_missing_token_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(card_config, "GITHUB_TOKEN", "")
    with pytest.raises(ConfigurationMissing):
        fetch_account_stats("ada", now=NOW)


def test_trailing_window_is_one_calendar_year():
    start, end = trailing_window(datetime.datetime(2025, 10, 18, tzinfo=datetime.timezone.utc))
    assert start == datetime.datetime(2024, 10, 18, tzinfo=datetime.timezone.utc)
    assert end.year == 2025


@pytest.mark.parametrize("value,expected", [
    ("2017-06-18T00:00:00Z", "2017-06"),
    ("", "N/A"),
    (None, "N/A"),
    ("not a date", "N/A"),
])
def test_format_year_month(value, expected):
    assert format_year_month(value) == expected
