"""
Repository reference and ecosystem tags.
"""

from dataclasses import dataclass
from enum import Enum


class Ecosystem(str, Enum):
    """Package ecosystem a command was installed from.

    The values double as the ``manager`` field of JSON output.
    """
    BREW = "brew"      # package registry (Homebrew formulae and casks)
    CARGO = "cargo"    # source build tool (crates.io)
    NPM = "npm"        # Node ecosystem
    PYPI = "pypi"      # Python ecosystem (pip, uv, pipx)

    @classmethod
    def from_name(cls, name: str) -> 'Ecosystem':
        """Look up an ecosystem by its value, case-insensitively."""
        return cls(name.strip().lower())


@dataclass(frozen=True)
class RepoReference:
    """A GitHub repository identified by owner and name."""
    owner: str
    repo: str

    def __post_init__(self):
        if not self.owner or not self.repo:
            raise ValueError("RepoReference requires a non-empty owner and repo")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    @property
    def releases_url(self) -> str:
        return f"{self.html_url}/releases"

    def __str__(self) -> str:
        return self.full_name
