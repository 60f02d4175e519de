#!/usr/bin/env python3

import asyncio
import sys
from typing import Optional, Tuple

import click

from . import __version__
from .config import load_config, configure_logging
from .dispatcher import resolve
from .domain import ChangelogResult, DispatchResult, ProbeFailure
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    CommandError, NotFoundError, APIError,
    get_exit_code_for_exception,
)
from .markdown import build_document
from .output import changelog_payload, emit_error, emit_json, emit_markdown, emit_warning
from .releases import resolve_changelog
from .version import get_command_version


def _raise_for_failure(command: str, result: DispatchResult) -> None:
    """Turn an unresolved DispatchResult into the matching CommandError."""
    if result.ok:
        return
    message = result.error or f"Could not find GitHub repo for '{command}'"
    if result.failure is ProbeFailure.NO_REPOSITORY and result.ecosystem:
        message = f"{message} (package manager: {result.ecosystem.value})"
    if result.failure is not None and not result.failure.is_terminal:
        raise APIError(message)
    raise NotFoundError(message)


async def fetch(command: str, local: bool = False,
                config=None) -> Tuple[DispatchResult, ChangelogResult]:
    """
    Resolve a command and fetch its release notes.

    Args:
        command: Installed command name
        local: Show the notes for the installed version instead of the latest
        config: Loaded configuration

    Raises:
        CommandError: The command, its repository or its changelog was not found
    """
    result = await resolve(command, config=config)
    _raise_for_failure(command, result)

    tag: Optional[str] = None
    if local:
        tag = await get_command_version(command, config=config)
        if not tag:
            emit_warning("Could not determine installed version, showing latest")

    changelog = await resolve_changelog(result.repo, tag, config=config)
    return result, changelog


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('command', required=False)
@click.option('-l', '--local', is_flag=True, help="Show the installed version's release notes")
@click.option('-j', '--json', 'as_json', is_flag=True, help='Output as JSON')
@click.option('-r', '--raw', is_flag=True, help='Print cleaned markdown without rendering')
@click.option('-o', '--open', 'open_url', is_flag=True, help='Open the release page in a browser')
@click.option('--debug', is_flag=True, help='Log resolution steps to stderr')
@click.version_option(__version__, '-v', '--version', prog_name='changelog')
def changelog_cmd(command, local, as_json, raw, open_url, debug):
    """changelog - Show release notes for an installed command.

    Finds which package manager installed COMMAND (Homebrew, cargo, npm or
    pip/uv/pipx), looks up its GitHub repository and prints the latest
    release notes, falling back to the repository's changelog file.

    \b
    Examples:
        changelog rg             Latest release notes for ripgrep
        changelog rg --local     Notes for the installed version
        changelog bat --json     JSON output for scripting
        changelog fd --open      Open the release page
    """
    if not command:
        raise click.UsageError("No command specified")

    config = load_config()
    configure_logging(config, debug=debug)

    try:
        result, changelog = asyncio.run(fetch(command, local=local, config=config))
    except KeyboardInterrupt:
        emit_error("Interrupted by user", type="interrupted", as_json=as_json)
        sys.exit(INTERRUPTED)
    except CommandError as e:
        context = {'releases_url': e.releases_url} if getattr(e, 'releases_url', None) else None
        emit_error(str(e), type=type(e).__name__, context=context, as_json=as_json)
        sys.exit(e.exit_code)

    if open_url:
        try:
            click.launch(changelog.url)
        except OSError as e:
            emit_error(f"Could not open {changelog.url}: {e}", as_json=as_json)
            sys.exit(get_exit_code_for_exception(e))
        sys.exit(SUCCESS)

    if as_json:
        emit_json(changelog_payload(command, result, changelog))
        sys.exit(SUCCESS)

    document = build_document(result.repo, changelog)
    if raw:
        click.echo(document)
    else:
        emit_markdown(document)


def main():
    changelog_cmd()

if __name__ == "__main__":
    main()
