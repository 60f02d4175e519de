"""
npm probe.

Metadata comes from `npm view --json`. When the command is not itself a
package name, the package is read off the resolved install path:
    /usr/lib/node_modules/@biomejs/biome/bin/biome -> @biomejs/biome

Only npm's E404 means the package does not exist; timeouts and other npm
errors are reported as failed queries.
"""

import asyncio
import json
from typing import Optional, Tuple

from ..config import logger
from ..domain import ProbeResult
from ..urls import first_repo
from ..utils import TIMEOUT_RC, run_command, which

NODE_MODULES = 'node_modules'
NPM_NOT_FOUND = 'E404'


def package_from_path(resolved_path: Optional[str]) -> Optional[str]:
    """
    Extract the package owning a file inside node_modules.

    The last node_modules marker wins (nested dependencies), `.bin` shim
    directories are skipped and `@scope/name` is kept whole.
    """
    if not resolved_path:
        return None

    parts = [p for p in resolved_path.replace('\\', '/').split('/') if p]
    for index in range(len(parts) - 1, -1, -1):
        if parts[index] != NODE_MODULES:
            continue
        rest = parts[index + 1:]
        if not rest or rest[0] == '.bin':
            continue
        if rest[0].startswith('@'):
            if len(rest) < 2:
                continue
            return f"{rest[0]}/{rest[1]}"
        return rest[0]

    return None


async def _npm_view(package: str, field: str, config=None) -> Tuple[Optional[str], Optional[str]]:
    """
    Read one field with `npm view <package> <field> --json`.

    Returns:
        tuple: (value, error). error is None on success, NPM_NOT_FOUND for
        an unknown package, and otherwise npm's error code or the exit status.
    """
    output, returncode = await run_command(
        ['npm', 'view', package, field, '--json'], config=config, log_stderr=True,
    )

    data = None
    if output:
        try:
            data = json.loads(output)
        except json.JSONDecodeError:
            if returncode == 0:
                return None, "invalid JSON"

    if returncode != 0:
        # npm reports errors as {"error": {"code": "E404", ...}} in --json mode
        error = data.get('error') if isinstance(data, dict) else None
        code = error.get('code') if isinstance(error, dict) else None
        if code:
            return None, code
        if returncode == TIMEOUT_RC:
            return None, "timed out"
        return None, f"exit {returncode}"

    if isinstance(data, str) and data.strip():
        return data.strip(), None
    return None, None


async def get_package_name(command: str, hint: Optional[str] = None,
                           config=None) -> Tuple[Optional[str], Optional[str]]:
    """
    Find the npm package for a command: its own name first, then the install path.

    Returns:
        tuple: (package, failure). failure describes a lookup npm could not
        answer; it is None when every candidate was simply unknown.
    """
    candidates = [command]
    from_path = package_from_path(hint)
    if from_path and from_path != command:
        candidates.append(from_path)

    failure = None
    for candidate in candidates:
        if candidate != command:
            logger.debug(f"Trying npm package {candidate} from install path")
        name, error = await _npm_view(candidate, 'name', config=config)
        if error is None and name:
            return candidate, None
        if error not in (None, NPM_NOT_FOUND) and failure is None:
            failure = f"npm view {candidate} failed ({error})"

    return None, failure


async def probe(command: str, hint: Optional[str] = None, *, config=None) -> ProbeResult:
    """
    Probe the npm registry for package info and GitHub repo.

    Args:
        command: Command name as typed by the user
        hint: Resolved install path, used when the command is not a package name
        config: Loaded configuration
    """
    if not which('npm'):
        return ProbeResult.query_failed(command, "npm is not installed; cannot query the npm registry")

    package_name, failure = await get_package_name(command, hint, config=config)
    if not package_name:
        if failure:
            return ProbeResult.query_failed(command, failure)
        return ProbeResult.not_found(command, f"Not found in npm: {command}")

    # Independent fields, fetched together
    (repo_url, repo_error), (homepage, homepage_error), (version, version_error) = await asyncio.gather(
        _npm_view(package_name, 'repository.url', config=config),
        _npm_view(package_name, 'homepage', config=config),
        _npm_view(package_name, 'version', config=config),
    )

    error = repo_error or homepage_error or version_error
    if error:
        return ProbeResult.query_failed(package_name, f"npm view {package_name} failed ({error})")

    return ProbeResult.found(
        package_name,
        first_repo([repo_url, homepage]),
        version,
        "No GitHub URL found in package",
    )
