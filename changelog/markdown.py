"""
Markdown cleanup for terminal display.

Release notes are written for the GitHub web UI; in a terminal, link
targets, asset tables and download instructions are noise.
"""

import re
from typing import Optional

from .domain import ChangelogResult, RepoReference

LINK_RE = re.compile(r'\[([^\]]+)\]\([^)]+\)')
DOWNLOAD_HEADER_RE = re.compile(r'^##\s+(download|install)\b')
SECTION_HEADER_RE = re.compile(r'^##\s+')


def strip_markdown_links(content: str) -> str:
    """[text](url) -> text"""
    return LINK_RE.sub(r'\1', content)


def strip_markdown_tables(content: str) -> str:
    """Drop table rows (lines starting with a pipe)."""
    return '\n'.join(
        line for line in content.split('\n')
        if not line.strip().startswith('|')
    )


def strip_download_sections(content: str) -> str:
    """Drop `## Download` and `## Install` sections up to the next `##` header."""
    result = []
    skipping = False

    for line in content.split('\n'):
        stripped = line.strip()
        if DOWNLOAD_HEADER_RE.match(stripped.lower()):
            skipping = True
            continue
        if skipping and SECTION_HEADER_RE.match(stripped):
            skipping = False
        if not skipping:
            result.append(line)

    return '\n'.join(result)


def clean_release_notes(content: str) -> str:
    return strip_download_sections(strip_markdown_tables(strip_markdown_links(content)))


def format_repo_name(name: str) -> str:
    """Display name for a repository: 'git-cliff' -> 'Git Cliff'."""
    return ' '.join(word[:1].upper() + word[1:] for word in name.split('-'))


def build_document(repo: RepoReference, changelog: ChangelogResult,
                   version: Optional[str] = None) -> str:
    """
    Assemble the markdown shown to the user.

    Args:
        repo: Repository the notes belong to
        changelog: Resolved release notes or changelog file
        version: Heading version (defaults to the release tag, else 'latest')
    """
    heading = version or changelog.version or 'latest'
    header = f"# {format_repo_name(repo.repo)} {heading}\n\n"
    return header + clean_release_notes(changelog.content)
