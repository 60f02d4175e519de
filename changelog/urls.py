"""
Repository URL normalization.

Registries describe repositories in many shapes:
    https://github.com/owner/repo
    git+https://github.com/owner/repo.git
    git@github.com:owner/repo.git
    https://github.com/owner/repo/tree/main/subdir
All of them reduce to the same RepoReference. Anything that is not on
github.com yields None.
"""

import re
from typing import Iterable, Optional

from .domain import RepoReference

# owner and repo segments stop at a slash, query string or fragment;
# the host is github.com itself (gist., api. and other subdomains are not repositories)
SSH_RE = re.compile(r"git@github\.com:([^/#?]+)/([^/#?]+)")
PATH_RE = re.compile(r"(?:^|[/@])(?:www\.)?github\.com/([^/#?]+)/([^/#?]+)")


def _clean(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("git+"):
        cleaned = cleaned[len("git+"):]
    cleaned = cleaned.rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[:-len(".git")]
    return cleaned.rstrip("/")


def normalize(raw: Optional[str]) -> Optional[RepoReference]:
    """
    Parse a repository reference string into owner and repo.

    Args:
        raw: URL or SSH reference, may be empty or None

    Returns:
        RepoReference, or None if the string does not point at GitHub
    """
    if not raw or not isinstance(raw, str):
        return None

    cleaned = _clean(raw)

    for pattern in (SSH_RE, PATH_RE):
        match = pattern.search(cleaned)
        if not match:
            continue
        owner, repo = match.group(1), match.group(2)
        if repo.endswith(".git"):
            repo = repo[:-len(".git")]
        if owner and repo:
            return RepoReference(owner=owner, repo=repo)

    return None


def first_repo(candidates: Iterable[Optional[str]]) -> Optional[RepoReference]:
    """Return the reference of the first candidate that normalizes."""
    for candidate in candidates:
        repo = normalize(candidate)
        if repo is not None:
            return repo
    return None
