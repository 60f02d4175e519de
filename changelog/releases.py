"""
Changelog resolution.

Release notes are preferred; a changelog document committed to the
repository is the fallback:
1. The requested tag's release (tried as given, then with/without `v`),
   or the latest release
2. The first conventional changelog file present at the default branch
3. ChangelogNotFoundError pointing at the releases page
"""

from typing import List, Optional

from .config import logger, load_config, get_setting, get_default_config
from .domain import RepoReference, ChangelogKind, ChangelogResult
from .exit_codes import ChangelogNotFoundError
from .infra.github_client import GitHubClient, GitHubRelease, get_github_token

DEFAULT_CHANGELOG_FILES = get_default_config()['changelog']['filenames']


def tag_candidates(tag: str) -> List[str]:
    """The tag as given, then its complementary `v`-prefixed form."""
    tag = tag.strip()
    if not tag:
        return []
    if tag.startswith('v') and len(tag) > 1:
        return [tag, tag[1:]]
    return [tag, f"v{tag}"]


async def find_release(client: GitHubClient, repo: RepoReference,
                       tag: Optional[str] = None) -> Optional[GitHubRelease]:
    """
    Look up the release to show.

    With a tag, the first exact match among the tag candidates; without one,
    the latest release, or the newest non-draft release when the repository
    only publishes prereleases.
    """
    if tag:
        for candidate in tag_candidates(tag):
            release = await client.get_release_by_tag(repo, candidate)
            if release is not None:
                return release
        logger.debug(f"No release tagged {tag} in {repo}")
        return None

    release = await client.get_latest_release(repo)
    if release is not None:
        return release

    recent = await client.get_recent_releases(repo, count=10)
    return recent[0] if recent else None


async def find_changelog_file(client: GitHubClient, repo: RepoReference,
                              filenames: List[str]) -> Optional[ChangelogResult]:
    """Fetch the first non-empty changelog document, in filename order."""
    for filename in filenames:
        content = await client.get_file(repo, filename)
        if content and content.strip():
            return ChangelogResult(
                kind=ChangelogKind.CHANGELOG_FILE,
                content=content,
                url=f"{repo.html_url}/blob/HEAD/{filename}",
            )
    return None


async def resolve_changelog(repo: RepoReference, tag: Optional[str] = None, *,
                            client: Optional[GitHubClient] = None,
                            config=None) -> ChangelogResult:
    """
    Get release notes, or a changelog file, for a repository.

    Args:
        repo: Repository to read
        tag: Version tag to show (latest release if omitted)
        client: GitHub client; one using any available token is created
            (and closed afterwards) otherwise
        config: Loaded configuration

    Returns:
        ChangelogResult

    Raises:
        ChangelogNotFoundError: Neither release notes nor a changelog file exist
        APIError: GitHub answered with an unexpected status
        NetworkError: GitHub could not be reached
    """
    if config is None:
        config = load_config()
    if client is None:
        with GitHubClient(token=await get_github_token(config), config=config) as owned:
            return await resolve_changelog(repo, tag, client=owned, config=config)

    release = await find_release(client, repo, tag)
    if release is not None and release.has_notes:
        return ChangelogResult(
            kind=ChangelogKind.RELEASE,
            content=release.body,
            url=release.html_url or f"{repo.releases_url}/tag/{release.tag_name}",
            version=release.tag_name,
        )

    if release is not None:
        logger.debug(f"Release {release.tag_name} of {repo} has no notes; looking for a changelog file")

    filenames = get_setting(config, 'changelog', 'filenames', None) or DEFAULT_CHANGELOG_FILES
    changelog = await find_changelog_file(client, repo, list(filenames))
    if changelog is not None:
        return changelog

    raise ChangelogNotFoundError(
        f"No release notes or changelog file found for {repo.full_name}\n"
        f"Check: {repo.releases_url}",
        releases_url=repo.releases_url,
    )
