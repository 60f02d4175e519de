"""
Cargo / crates.io probe.

Only the installed binary is guaranteed to exist, not cargo itself, so
nothing here shells out. The crate behind a binary is read from cargo's
install ledger (`rg` is installed from the `ripgrep` crate) and metadata
comes straight from the crates.io API.
"""

import json
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, Iterable, Tuple

from ..config import logger
from ..domain import ProbeResult
from ..exit_codes import APIError, NetworkError
from ..infra.http_client import HttpClient
from ..urls import first_repo

CRATES_API_BASE = "https://crates.io/api/v1/crates"


@dataclass(frozen=True)
class CrateInfo:
    """The `crate` object of a crates.io API response."""
    name: str
    repository: Optional[str] = None
    homepage: Optional[str] = None
    max_stable_version: Optional[str] = None
    newest_version: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> Optional['CrateInfo']:
        crate = data.get('crate') if isinstance(data, dict) else None
        if not isinstance(crate, dict) or not crate.get('name'):
            return None
        return cls(
            name=crate['name'],
            repository=crate.get('repository'),
            homepage=crate.get('homepage'),
            max_stable_version=crate.get('max_stable_version'),
            newest_version=crate.get('newest_version'),
        )

    @property
    def version(self) -> Optional[str]:
        return self.max_stable_version or self.newest_version


def find_cargo_home(hint: Optional[str] = None) -> Path:
    """
    Locate the cargo home that installed a binary.

    Prefers the `.cargo` directory in the binary's own path, then
    $CARGO_HOME, then ~/.cargo.
    """
    if hint:
        parts = Path(hint).parts
        if '.cargo' in parts:
            index = len(parts) - 1 - parts[::-1].index('.cargo')
            return Path(*parts[:index + 1])
    if os.environ.get('CARGO_HOME'):
        return Path(os.environ['CARGO_HOME'])
    return Path.home() / '.cargo'


def _parse_package_id(package_id: str) -> Tuple[str, Optional[str]]:
    """Split "ripgrep 14.1.0 (registry+...)" into name and version."""
    parts = package_id.split()
    name = parts[0] if parts else ''
    version = parts[1] if len(parts) > 1 else None
    return name, version


def _bin_matches(bins: Iterable[str], command: str) -> bool:
    for name in bins:
        if not isinstance(name, str):
            continue
        if name == command or name == f"{command}.exe":
            return True
    return False


def crate_for_binary(command: str, cargo_home: Path) -> Optional[str]:
    """
    Find which installed crate provides a binary.

    Reads `.crates2.json` (cargo >= 1.41) and falls back to the older
    `.crates.toml`.

    Returns:
        Crate name or None if the ledger does not list the binary
    """
    ledger_v2 = cargo_home / '.crates2.json'
    if ledger_v2.exists():
        try:
            with open(ledger_v2, 'r', encoding='utf-8') as f:
                installs = json.load(f).get('installs', {})
            for package_id, entry in installs.items():
                if isinstance(entry, dict) and _bin_matches(entry.get('bins', []), command):
                    return _parse_package_id(package_id)[0] or None
        except (OSError, ValueError, AttributeError) as e:
            logger.debug(f"Error reading {ledger_v2}: {e}")

    ledger_v1 = cargo_home / '.crates.toml'
    if ledger_v1.exists():
        try:
            with open(ledger_v1, 'rb') as f:
                installs = tomllib.load(f).get('v1', {})
            for package_id, bins in installs.items():
                if isinstance(bins, list) and _bin_matches(bins, command):
                    return _parse_package_id(package_id)[0] or None
        except (OSError, tomllib.TOMLDecodeError, AttributeError) as e:
            logger.debug(f"Error reading {ledger_v1}: {e}")

    return None


async def probe(command: str, hint: Optional[str] = None, *, config=None,
                http: Optional[HttpClient] = None) -> ProbeResult:
    """
    Probe crates.io for package info and GitHub repo.

    Args:
        command: Command name as typed by the user
        hint: Resolved install path, used to find the cargo home
        config: Loaded configuration
        http: HTTP client (created from config and closed afterwards if omitted)
    """
    if http is None:
        with HttpClient(config=config) as owned:
            return await probe(command, hint, config=config, http=owned)

    crate_name = crate_for_binary(command, find_cargo_home(hint)) or command
    if crate_name != command:
        logger.debug(f"cargo ledger maps {command} to crate {crate_name}")

    try:
        data = await http.get_json(f"{CRATES_API_BASE}/{crate_name}")
    except (APIError, NetworkError) as e:
        return ProbeResult.query_failed(crate_name, f"crates.io lookup failed: {e}")

    if data is None:
        return ProbeResult.not_found(crate_name, f"Not found on crates.io: {crate_name}")

    crate = CrateInfo.from_api_response(data)
    if crate is None:
        return ProbeResult.query_failed(crate_name, "crates.io returned no crate data")

    return ProbeResult.found(
        crate.name,
        first_repo([crate.repository, crate.homepage]),
        crate.version,
        "No GitHub URL found in crate",
    )
