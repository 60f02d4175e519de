"""
Result objects produced by the resolution pipeline.

ProbeResult and DispatchResult carry failures as values: a missing
repository is a normal outcome, reported through ``error`` and ``failure``
rather than raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

from .reference import RepoReference, Ecosystem


class ProbeFailure(str, Enum):
    """Why a resolution did not produce a repository reference."""
    COMMAND_NOT_FOUND = "command_not_found"  # not on PATH
    UNCLASSIFIED = "unclassified"            # install path matches no ecosystem
    NOT_FOUND = "not_found"                  # package unknown to the ecosystem
    QUERY_FAILED = "query_failed"            # registry or tool call failed
    NO_REPOSITORY = "no_repository"          # package found, no GitHub URL

    @property
    def is_terminal(self) -> bool:
        """Failures that retrying the same lookup cannot fix."""
        return self is not ProbeFailure.QUERY_FAILED


@dataclass(frozen=True)
class ProbeResult:
    """Package metadata for one command in one ecosystem."""
    package_name: str
    repo: Optional[RepoReference] = None
    version: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[ProbeFailure] = None

    def __post_init__(self):
        if self.repo is None and not self.error:
            raise ValueError("ProbeResult without a repository must explain why")

    @classmethod
    def found(cls, package_name: str, repo: Optional[RepoReference],
              version: Optional[str], missing_reason: str) -> 'ProbeResult':
        """Result for a package the ecosystem knows about."""
        if repo is not None:
            return cls(package_name=package_name, repo=repo, version=version)
        return cls(
            package_name=package_name,
            version=version,
            error=missing_reason,
            failure=ProbeFailure.NO_REPOSITORY,
        )

    @classmethod
    def not_found(cls, package_name: str, error: str) -> 'ProbeResult':
        return cls(package_name=package_name, error=error, failure=ProbeFailure.NOT_FOUND)

    @classmethod
    def query_failed(cls, package_name: str, error: str) -> 'ProbeResult':
        return cls(package_name=package_name, error=error, failure=ProbeFailure.QUERY_FAILED)

    @property
    def ok(self) -> bool:
        return self.repo is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'package': self.package_name,
            'repo': self.repo.full_name if self.repo else None,
            'version': self.version,
            'error': self.error,
            'failure': self.failure.value if self.failure else None,
        }


@dataclass(frozen=True)
class ResolvedCommand:
    """Where a command was found and where its symlinks lead."""
    bin_path: str
    resolved_path: str


@dataclass(frozen=True)
class DispatchResult(ProbeResult):
    """A ProbeResult annotated with how the command was located."""
    ecosystem: Optional[Ecosystem] = None
    bin_path: Optional[str] = None
    resolved_path: Optional[str] = None

    @classmethod
    def from_probe(cls, result: ProbeResult, ecosystem: Ecosystem,
                   located: ResolvedCommand) -> 'DispatchResult':
        return cls(
            package_name=result.package_name,
            repo=result.repo,
            version=result.version,
            error=result.error,
            failure=result.failure,
            ecosystem=ecosystem,
            bin_path=located.bin_path,
            resolved_path=located.resolved_path,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'manager': self.ecosystem.value if self.ecosystem else None,
            'bin_path': self.bin_path,
            'resolved_path': self.resolved_path,
        })
        return data


class ChangelogKind(str, Enum):
    """Where changelog content came from."""
    RELEASE = "release"
    CHANGELOG_FILE = "changelog"


@dataclass(frozen=True)
class ChangelogResult:
    """Release notes or changelog document for a repository."""
    kind: ChangelogKind
    content: str
    url: str
    version: Optional[str] = None

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValueError("ChangelogResult content must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind.value,
            'url': self.url,
            'version': self.version,
            'content': self.content,
        }
