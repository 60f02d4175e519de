"""
GitHub API client infrastructure for changelog.

Provides the release and file lookups the changelog resolver needs:
- Latest release, recent releases, release by tag
- Raw file contents at the default branch
- Optional bearer token (env, config, or `gh auth token`)
- Rate limit tracking from response headers
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, List, Dict, Any
from urllib.parse import quote

from .http_client import HttpClient
from ..config import get_setting
from ..domain import RepoReference
from ..exit_codes import APIError
from ..utils import run_command

logger = logging.getLogger(__name__)

ACCEPT_JSON = 'application/vnd.github.v3+json'
ACCEPT_RAW = 'application/vnd.github.v3.raw'


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 10 remaining)."""
        return self.remaining < 10

    @classmethod
    def from_headers(cls, headers) -> Optional['RateLimitStatus']:
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
        except (ValueError, TypeError):
            return None
        if remaining < 0 or limit < 0:
            return None
        return cls(remaining=remaining, limit=limit, reset_time=reset_time)


@dataclass(frozen=True)
class GitHubRelease:
    """A published release as returned by the releases API."""
    tag_name: str
    name: Optional[str] = None
    body: Optional[str] = None
    html_url: str = ""
    published_at: Optional[str] = None
    prerelease: bool = False
    draft: bool = False

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> Optional['GitHubRelease']:
        """Create from a GitHub API response, or None if it is not a release."""
        if not isinstance(data, dict) or not data.get('tag_name'):
            return None
        return cls(
            tag_name=str(data['tag_name']),
            name=data.get('name'),
            body=data.get('body') if isinstance(data.get('body'), str) else None,
            html_url=data.get('html_url') or '',
            published_at=data.get('published_at'),
            prerelease=bool(data.get('prerelease', False)),
            draft=bool(data.get('draft', False)),
        )

    @property
    def has_notes(self) -> bool:
        return bool(self.body and self.body.strip())


async def get_github_token(config=None) -> Optional[str]:
    """
    Find a GitHub token without requiring one.

    Checks GITHUB_TOKEN, GH_TOKEN, the github.token setting, then asks the
    gh CLI (when github.use_gh_cli is enabled).

    Returns:
        Token string or None to proceed unauthenticated
    """
    for var in ('GITHUB_TOKEN', 'GH_TOKEN'):
        token = os.environ.get(var, '').strip()
        if token:
            return token

    token = str(get_setting(config, 'github', 'token', '') or '').strip()
    if token:
        return token

    if get_setting(config, 'github', 'use_gh_cli', True):
        output, returncode = await run_command(['gh', 'auth', 'token'], config=config)
        if returncode == 0 and output:
            return output.strip()
        logger.debug("No token from gh CLI; using unauthenticated GitHub API")

    return None


class GitHubClient:
    """
    GitHub REST API client for release notes.

    Example:
        client = GitHubClient(token=await get_github_token())
        release = await client.get_latest_release(RepoReference("sharkdp", "bat"))
        if release:
            print(release.tag_name)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        http: Optional[HttpClient] = None,
        api_url: Optional[str] = None,
        config=None,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: Bearer token, or None for unauthenticated access
            http: HTTP client to use (one is created from config otherwise)
            api_url: API root (defaults to github.api_url)
            config: Loaded configuration
        """
        self.token = token
        self.http = http or HttpClient(config=config)
        self.api_url = (api_url or get_setting(config, 'github', 'api_url', 'https://api.github.com')).rstrip('/')
        self._rate_limit_status: Optional[RateLimitStatus] = None

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the last response."""
        return self._rate_limit_status

    def _headers(self, accept: str = ACCEPT_JSON) -> Dict[str, str]:
        headers = {'Accept': accept}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _track_rate_limit(self, response) -> None:
        status = RateLimitStatus.from_headers(response.headers)
        if status is None:
            return
        self._rate_limit_status = status
        if status.is_low:
            hint = "" if self.token else " (set GITHUB_TOKEN or run `gh auth login` for a higher limit)"
            logger.warning(
                f"GitHub API rate limit low: {status.remaining}/{status.limit} remaining, "
                f"resets in {status.minutes_until_reset} minutes{hint}"
            )

    async def _get(self, endpoint: str, accept: str = ACCEPT_JSON):
        url = f"{self.api_url}/{endpoint}"
        response = await self.http.get(url, headers=self._headers(accept))
        self._track_rate_limit(response)
        return url, response

    async def _api(self, endpoint: str) -> Optional[Any]:
        """Call the API and decode JSON; None on 404."""
        url, response = await self._get(endpoint)
        if not self.http.check_status(url, response):
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON from {url}: {e}", status=response.status_code) from e

    async def get_latest_release(self, repo: RepoReference) -> Optional[GitHubRelease]:
        """
        Get the most recent non-draft, non-prerelease release.

        Returns:
            GitHubRelease or None if the repository has none
        """
        data = await self._api(f"repos/{repo.owner}/{repo.repo}/releases/latest")
        return GitHubRelease.from_api_response(data) if data else None

    async def get_recent_releases(self, repo: RepoReference, count: int = 10) -> List[GitHubRelease]:
        """
        Get the last releases of a repository, drafts excluded.

        Args:
            repo: Repository reference
            count: Maximum releases to request

        Returns:
            Newest-first list of releases
        """
        data = await self._api(f"repos/{repo.owner}/{repo.repo}/releases?per_page={count}")
        if not isinstance(data, list):
            return []
        releases = [GitHubRelease.from_api_response(item) for item in data]
        return [r for r in releases if r is not None and not r.draft]

    async def get_release_by_tag(self, repo: RepoReference, tag: str) -> Optional[GitHubRelease]:
        """Get the release published for exactly this tag."""
        data = await self._api(f"repos/{repo.owner}/{repo.repo}/releases/tags/{quote(tag, safe='')}")
        return GitHubRelease.from_api_response(data) if data else None

    async def get_file(self, repo: RepoReference, path: str) -> Optional[str]:
        """
        Get a file's raw text at the default branch.

        Returns:
            File content, or None if the file does not exist
        """
        url, response = await self._get(
            f"repos/{repo.owner}/{repo.repo}/contents/{quote(path)}",
            accept=ACCEPT_RAW,
        )
        if not self.http.check_status(url, response):
            return None
        return response.text

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> 'GitHubClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
