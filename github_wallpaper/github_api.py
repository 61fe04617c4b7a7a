import logging
from collections.abc import Mapping
from typing import Any

import httpx

logger = logging.getLogger(__name__)

CONTRIBUTION_CALENDAR_QUERY = """
query($login: String!) {
  user(login: $login) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
            color
          }
        }
      }
    }
  }
}
"""


class GitHubAPIError(Exception):
    """Raised when the contribution calendar cannot be fetched."""


class GitHubTransportError(GitHubAPIError):
    """Raised on network failures and unsuccessful HTTP responses."""


class GitHubGraphQLError(GitHubAPIError):
    """Raised when GitHub answers with a GraphQL error payload."""


class GitHubUserNotFoundError(GitHubAPIError):
    """Raised when the requested login does not exist."""


class MalformedResponseError(GitHubAPIError):
    """Raised when the response does not have the expected shape."""


def build_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "User-Agent": "github-wallpaper",
    }
    if token and token.strip():
        headers["Authorization"] = f"Bearer {token.strip()}"
    return headers


def fetch_contribution_calendar(
    username: str,
    token: str | None,
    graphql_url: str,
    timeout: float = 30.0,
) -> Mapping[str, Any]:
    """Fetch the contribution calendar of a user from GitHub GraphQL API.

    The token is optional; without it the request is sent unauthenticated and
    GitHub will usually refuse it, which surfaces as a transport error.
    """

    logger.debug(
        "Fetching contribution calendar for %s (%s)",
        username,
        "with token" if token and token.strip() else "no token",
    )

    try:
        response = httpx.post(
            graphql_url,
            json={
                "query": CONTRIBUTION_CALENDAR_QUERY,
                "variables": {"login": username},
            },
            headers=build_headers(token),
            timeout=timeout,
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise GitHubTransportError(str(exc) or exc.__class__.__name__) from exc

    if not response.is_success:
        raise GitHubTransportError(
            f"HTTP {response.status_code}: {response.reason_phrase}"
        )

    try:
        payload: Any = response.json()
    except ValueError as exc:
        raise MalformedResponseError("GitHub GraphQL response is not JSON") from exc

    if not isinstance(payload, Mapping):
        raise MalformedResponseError("GitHub GraphQL response is invalid")

    errors = payload.get("errors")
    if errors:
        raise GitHubGraphQLError(_first_error_message(errors))

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise MalformedResponseError("GitHub GraphQL data is missing")

    user = data.get("user")
    if user is None:
        raise GitHubUserNotFoundError(f"User not found: {username}")
    if not isinstance(user, Mapping):
        raise MalformedResponseError("GitHub user is invalid")

    collection = user.get("contributionsCollection")
    if not isinstance(collection, Mapping):
        raise MalformedResponseError("GitHub contributionsCollection is missing")

    calendar = collection.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise MalformedResponseError("GitHub contributionCalendar is missing")

    return calendar


def _first_error_message(errors: Any) -> str:
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, Mapping) and isinstance(first.get("message"), str):
            return first["message"]
    return "GitHub GraphQL returned errors"
