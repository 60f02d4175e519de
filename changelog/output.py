"""
Output module for changelog.

Provides the three ways a result leaves the program:
- JSON: one indented object on stdout for scripting
- Markdown: rendered with Rich, paged when stdout is a terminal
- Errors: plain `Error: ...` lines, or JSON objects in --json mode

Usage:
    from changelog.output import emit_json, emit_error

    emit_json(changelog_payload(command, result, changelog))
    emit_error("Not found", type="not_found", as_json=True)
"""

import json
import sys
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.markdown import Markdown

from .domain import ChangelogResult, DispatchResult

console = Console()


def changelog_payload(command: str, result: DispatchResult,
                      changelog: ChangelogResult) -> Dict[str, Any]:
    """The --json document for a resolved command."""
    dispatch = result.to_dict()
    return {
        'command': command,
        'package': dispatch['package'],
        'manager': dispatch['manager'],
        'repo': dispatch['repo'],
        **changelog.to_dict(),
    }


def emit_json(data: Dict[str, Any], stream=None) -> None:
    """Print a JSON object, indented for reading."""
    print(json.dumps(data, indent=2, ensure_ascii=False), file=stream or sys.stdout, flush=True)


def emit_markdown(document: str, pager: Optional[bool] = None) -> None:
    """
    Render markdown to the terminal.

    Args:
        document: Markdown text
        pager: Page the output (defaults to whether stdout is a terminal)
    """
    if pager is None:
        pager = console.is_terminal

    if pager:
        with console.pager(styles=True):
            console.print(Markdown(document))
    else:
        console.print(Markdown(document))


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None,
    as_json: bool = False
) -> None:
    """
    Emit error to stderr.

    Args:
        error: Error message
        type: Error type (e.g., "not_found", "api_error")
        context: Additional context dict
        as_json: Emit a JSON object instead of an `Error:` line
    """
    if not as_json:
        click.echo(f"Error: {error}", err=True)
        return

    obj = {
        'error': error,
        'type': type
    }
    if context:
        obj['context'] = context

    print(json.dumps(obj, ensure_ascii=False), file=sys.stderr, flush=True)


def emit_warning(message: str) -> None:
    click.secho(f"Warning: {message}", fg='yellow', err=True)
