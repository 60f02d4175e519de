"""
Domain layer for changelog.

Contains pure value objects with no I/O or side effects:
- RepoReference: Normalized (owner, repo) of a GitHub repository
- Ecosystem: Package ecosystem a command was installed from
- ProbeResult / DispatchResult: Outcome of resolving a command
- ChangelogResult: Release notes or changelog file content

All objects are immutable; the results provide to_dict() for JSON output.
"""

from .reference import RepoReference, Ecosystem
from .results import (
    ProbeFailure,
    ProbeResult,
    ResolvedCommand,
    DispatchResult,
    ChangelogKind,
    ChangelogResult,
)

__all__ = [
    'RepoReference',
    'Ecosystem',
    'ProbeFailure',
    'ProbeResult',
    'ResolvedCommand',
    'DispatchResult',
    'ChangelogKind',
    'ChangelogResult',
]
