"""
Ecosystem probes.

Each probe turns a command name into package metadata and, when the
package declares one, a GitHub repository:

    async probe(command, hint=None, *, config=None) -> ProbeResult

`hint` is the symlink-resolved install path. Probes never raise for
network or subprocess failures; they report them in the result.
"""

from typing import Awaitable, Callable, Dict, Optional

from ..domain import Ecosystem, ProbeResult
from . import brew, cargo, npm, pypi

Probe = Callable[..., Awaitable[ProbeResult]]

PROBES: Dict[Ecosystem, Probe] = {
    Ecosystem.BREW: brew.probe,
    Ecosystem.CARGO: cargo.probe,
    Ecosystem.NPM: npm.probe,
    Ecosystem.PYPI: pypi.probe,
}


def get_probe(ecosystem: Ecosystem) -> Probe:
    """Look up the probe for an ecosystem."""
    return PROBES[ecosystem]


async def run_probe(ecosystem: Ecosystem, command: str, hint: Optional[str] = None,
                    config=None) -> ProbeResult:
    """Run one ecosystem's probe for a command."""
    return await get_probe(ecosystem)(command, hint, config=config)


__all__ = [
    'Probe',
    'PROBES',
    'get_probe',
    'run_probe',
]
