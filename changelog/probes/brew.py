"""
Homebrew probe.

Formula names often differ from the binaries they ship (`rg` comes from
`ripgrep`), so the formula providing a binary is asked for first and the
command name is only tried as a formula name afterwards.
"""

import json
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple

from ..config import logger
from ..domain import ProbeResult
from ..urls import first_repo
from ..utils import COMMAND_NOT_FOUND_RC, TIMEOUT_RC, run_command


def _str(value) -> Optional[str]:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class BrewFormula:
    """The parts of a `brew info --json=v2` formula entry we use."""
    name: str
    homepage: Optional[str] = None
    stable_version: Optional[str] = None
    stable_url: Optional[str] = None
    head_url: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> Optional['BrewFormula']:
        if not isinstance(data, dict) or not _str(data.get('name')):
            return None
        versions = data.get('versions') if isinstance(data.get('versions'), dict) else {}
        urls = data.get('urls') if isinstance(data.get('urls'), dict) else {}
        stable = urls.get('stable') if isinstance(urls.get('stable'), dict) else {}
        head = urls.get('head') if isinstance(urls.get('head'), dict) else {}
        return cls(
            name=data['name'],
            homepage=_str(data.get('homepage')),
            stable_version=_str(versions.get('stable')),
            stable_url=_str(stable.get('url')),
            head_url=_str(head.get('url')),
        )

    @property
    def repo_candidates(self) -> List[Optional[str]]:
        return [self.homepage, self.stable_url, self.head_url]


@dataclass(frozen=True)
class BrewCask:
    """The parts of a `brew info --json=v2` cask entry we use."""
    token: str
    homepage: Optional[str] = None
    version: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> Optional['BrewCask']:
        if not isinstance(data, dict) or not _str(data.get('token')):
            return None
        return cls(
            token=data['token'],
            homepage=_str(data.get('homepage')),
            version=_str(data.get('version')),
            url=_str(data.get('url')),
        )

    @property
    def repo_candidates(self) -> List[Optional[str]]:
        return [self.homepage, self.url]


@dataclass(frozen=True)
class BrewInfo:
    formulae: List[BrewFormula] = field(default_factory=list)
    casks: List[BrewCask] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: Any) -> 'BrewInfo':
        if not isinstance(data, dict):
            return cls()
        formulae = [BrewFormula.from_api_response(f) for f in data.get('formulae') or []]
        casks = [BrewCask.from_api_response(c) for c in data.get('casks') or []]
        return cls(
            formulae=[f for f in formulae if f is not None],
            casks=[c for c in casks if c is not None],
        )


def _brew_failure(args: List[str], returncode: int) -> Optional[str]:
    """Describe a brew call that could not answer, or None for an ordinary miss."""
    if returncode == TIMEOUT_RC:
        return f"brew {' '.join(args)} timed out"
    if returncode == COMMAND_NOT_FOUND_RC:
        return "brew could not be run"
    return None


async def get_package_name(command: str, config=None) -> Tuple[Optional[str], Optional[str]]:
    """
    Find the formula or cask that provides a command.

    Uses `brew which-formula`, then checks whether the command is itself a
    formula name.

    Returns:
        tuple: (package, failure). failure is set when brew timed out or
        could not be run, so a miss cannot be trusted.
    """
    args = ['which-formula', command]
    output, returncode = await run_command(['brew'] + args, config=config)
    if returncode == 0 and output:
        name = output.splitlines()[0].strip()
        if name:
            return name, None
    failure = _brew_failure(args, returncode)

    args = ['info', command]
    _, returncode = await run_command(['brew'] + args, config=config)
    if returncode == 0:
        return command, None

    return None, failure or _brew_failure(args, returncode)


async def probe(command: str, hint: Optional[str] = None, *, config=None) -> ProbeResult:
    """
    Probe Homebrew for package info and GitHub repo.

    Args:
        command: Command name as typed by the user
        hint: Resolved install path (unused; formulae are found by name)
        config: Loaded configuration
    """
    package_name, failure = await get_package_name(command, config=config)
    if not package_name:
        if failure:
            return ProbeResult.query_failed(command, failure)
        return ProbeResult.not_found(command, f"Not found in Homebrew: {command}")

    output, returncode = await run_command(['brew', 'info', '--json=v2', package_name], config=config)
    if returncode != 0 or output is None:
        return ProbeResult.query_failed(package_name, f"brew info failed for {package_name} (exit {returncode})")

    try:
        info = BrewInfo.from_api_response(json.loads(output))
    except json.JSONDecodeError as e:
        logger.debug(f"Unparseable brew info output for {package_name}: {e}")
        return ProbeResult.query_failed(package_name, f"brew info returned invalid JSON: {e}")

    # Formulae first, then casks
    if info.formulae:
        formula = info.formulae[0]
        return ProbeResult.found(
            formula.name,
            first_repo(formula.repo_candidates),
            formula.stable_version,
            "No GitHub URL found in formula",
        )

    if info.casks:
        cask = info.casks[0]
        return ProbeResult.found(
            cask.token,
            first_repo(cask.repo_candidates),
            cask.version,
            "No GitHub URL found in cask",
        )

    return ProbeResult.query_failed(package_name, "No formula or cask data returned")
