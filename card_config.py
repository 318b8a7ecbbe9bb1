"""
Environment configuration for the stat card service and CLI.

Environment Variables:
  GITHUB_TOKEN / ACCESS_TOKEN : Upstream credential. Required for live cards.
  GITHUB_GRAPHQL_URL          : GraphQL endpoint. Default https://api.github.com/graphql
  GQL_MAX_RETRIES             : Transport retries for transient failures. Default 3.
  GQL_RETRY_BACKOFF           : Backoff base in seconds (base ** attempt). Default 1.5.
  GQL_TIMEOUT                 : Upstream request timeout in seconds. Default 40.
  AVATAR_TIMEOUT              : Avatar fetch timeout in seconds. Default 10.
  CACHE_TTL_SECONDS           : Response cache lifetime. Default 3600.
  INLINE_AVATAR               : '1' => embed avatars as data URIs. '0' => link them.
  DEBUG                       : '1' => print [DEBUG] lines.
"""

from __future__ import annotations
import os
import sys

# ------------------ Config & Env ------------------
GITHUB_TOKEN = (os.environ.get("GITHUB_TOKEN") or os.environ.get("ACCESS_TOKEN") or "").strip()
GITHUB_GRAPHQL_URL = os.environ.get("GITHUB_GRAPHQL_URL", "https://api.github.com/graphql")
USER_AGENT = "githubcard-worker"

MAX_RETRIES = int(os.environ.get("GQL_MAX_RETRIES", "3"))
RETRY_BACKOFF = float(os.environ.get("GQL_RETRY_BACKOFF", "1.5"))
GQL_TIMEOUT = float(os.environ.get("GQL_TIMEOUT", "40"))
AVATAR_TIMEOUT = float(os.environ.get("AVATAR_TIMEOUT", "10"))

CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", str(60 * 60)))
INLINE_AVATAR = os.environ.get("INLINE_AVATAR", "1") == "1"
DEBUG = os.environ.get("DEBUG", "0") == "1"


class ConfigurationMissing(RuntimeError):
    pass


def require_token(token: str | None = None) -> str:
    token = GITHUB_TOKEN if token is None else token
    if not token:
        raise ConfigurationMissing("Missing GITHUB_TOKEN. Use /test to preview or add a GitHub token.")
    return token


def debug(msg: str):
    if DEBUG:
        print(f"[DEBUG] {msg}")


def warn(msg: str):
    print(f"[WARN] {msg}", file=sys.stderr)
