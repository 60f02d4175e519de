"""
Tests for domain objects.

Tests cover:
- RepoReference validation and derived URLs
- Ecosystem lookup
- ProbeResult construction rules and to_dict()
- DispatchResult.from_probe()
- ChangelogResult validation
"""

import pytest

from changelog.domain import (
    ChangelogKind,
    ChangelogResult,
    DispatchResult,
    Ecosystem,
    ProbeFailure,
    ProbeResult,
    RepoReference,
    ResolvedCommand,
)


class TestRepoReference:

    def test_urls(self):
        ref = RepoReference("sharkdp", "bat")
        assert ref.full_name == "sharkdp/bat"
        assert str(ref) == "sharkdp/bat"
        assert ref.html_url == "https://github.com/sharkdp/bat"
        assert ref.releases_url == "https://github.com/sharkdp/bat/releases"

    @pytest.mark.parametrize("owner, repo", [("", "bat"), ("sharkdp", "")])
    def test_empty_parts_rejected(self, owner, repo):
        with pytest.raises(ValueError):
            RepoReference(owner, repo)

    def test_hashable(self):
        assert len({RepoReference("a", "b"), RepoReference("a", "b")}) == 1


class TestEcosystem:

    def test_from_name(self):
        assert Ecosystem.from_name(" Cargo ") == Ecosystem.CARGO

    def test_unknown(self):
        with pytest.raises(ValueError):
            Ecosystem.from_name("apt")


class TestProbeResult:

    def test_found(self):
        result = ProbeResult.found("ripgrep", RepoReference("BurntSushi", "ripgrep"), "14.1.0", "unused")
        assert result.ok
        assert result.error is None
        assert result.failure is None

    def test_found_without_repository(self):
        result = ProbeResult.found("wget", None, "1.24.5", "No GitHub URL found in formula")
        assert not result.ok
        assert result.version == "1.24.5"
        assert result.failure == ProbeFailure.NO_REPOSITORY

    def test_missing_repo_requires_error(self):
        with pytest.raises(ValueError):
            ProbeResult(package_name="x")

    def test_to_dict(self):
        result = ProbeResult.not_found("x", "Not found on PyPI: x")
        assert result.to_dict() == {
            'package': 'x',
            'repo': None,
            'version': None,
            'error': 'Not found on PyPI: x',
            'failure': 'not_found',
        }

    def test_terminal_failures(self):
        assert ProbeFailure.NOT_FOUND.is_terminal
        assert not ProbeFailure.QUERY_FAILED.is_terminal


class TestDispatchResult:

    def test_from_probe(self):
        probe = ProbeResult.found("bat", RepoReference("sharkdp", "bat"), "0.24.0", "unused")
        located = ResolvedCommand("/opt/homebrew/bin/bat", "/opt/homebrew/Cellar/bat/0.24.0/bin/bat")

        result = DispatchResult.from_probe(probe, Ecosystem.BREW, located)

        assert result.repo == probe.repo
        data = result.to_dict()
        assert data['manager'] == 'brew'
        assert data['repo'] == 'sharkdp/bat'
        assert data['bin_path'] == "/opt/homebrew/bin/bat"
        assert data['resolved_path'].endswith("/Cellar/bat/0.24.0/bin/bat")


class TestChangelogResult:

    def test_to_dict(self):
        result = ChangelogResult(ChangelogKind.CHANGELOG_FILE, "# Changes", "https://x/blob/HEAD/CHANGES.md")
        assert result.to_dict() == {
            'type': 'changelog',
            'content': '# Changes',
            'url': 'https://x/blob/HEAD/CHANGES.md',
            'version': None,
        }

    def test_blank_content_rejected(self):
        with pytest.raises(ValueError):
            ChangelogResult(ChangelogKind.RELEASE, " \n", "https://x")
