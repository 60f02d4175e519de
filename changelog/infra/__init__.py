"""
Infrastructure layer for changelog.

Contains abstractions for external systems:
- HttpClient: JSON/text GETs over requests, awaitable
- GitHubClient: GitHub releases and repository files

These provide clean interfaces that can be mocked for testing.
"""

from .http_client import HttpClient
from .github_client import GitHubClient, GitHubRelease, RateLimitStatus, get_github_token

__all__ = [
    'HttpClient',
    'GitHubClient',
    'GitHubRelease',
    'RateLimitStatus',
    'get_github_token',
]
