"""
changelog - Release notes for the commands you have installed.

changelog works out which package manager installed a command, finds the
package's GitHub repository and fetches its release notes, falling back
to a changelog file in the repository.

Quick Start:
    import asyncio
    import changelog

    result = asyncio.run(changelog.resolve("rg"))
    if result.repo:
        notes = asyncio.run(changelog.resolve_changelog(result.repo))
        print(notes.version, notes.url)

    # Release notes for a specific tag ("v" prefix optional)
    notes = asyncio.run(changelog.resolve_changelog(
        changelog.RepoReference("BurntSushi", "ripgrep"), "14.1.0"))

Domain Objects:
    RepoReference - GitHub owner/repo pair
    DispatchResult - Package, version and repository for a command
    ChangelogResult - Release notes or changelog file content
"""

__version__ = "0.3.0"

# Resolution pipeline
from .dispatcher import resolve
from .releases import resolve_changelog

# Domain objects
from .domain import (
    RepoReference,
    Ecosystem,
    ProbeFailure,
    ProbeResult,
    DispatchResult,
    ChangelogKind,
    ChangelogResult,
)

# Configuration
from .config import load_config

__all__ = [
    # Version
    "__version__",
    # Resolution pipeline
    "resolve",
    "resolve_changelog",
    # Domain objects
    "RepoReference",
    "Ecosystem",
    "ProbeFailure",
    "ProbeResult",
    "DispatchResult",
    "ChangelogKind",
    "ChangelogResult",
    # Configuration
    "load_config",
]
