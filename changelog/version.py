"""
Installed version detection.

Runs a command with the usual version flags and picks the first
version-looking token out of its output, e.g.:
    "ripgrep 14.1.0\n-SIMD -AVX (compiled)" -> "14.1.0"
    "bat 0.24.0" -> "0.24.0"
"""

import re
from typing import Optional

from .config import logger
from .utils import run_command

VERSION_FLAGS = ['--version', '-V', 'version', '-v']

# Most specific first
VERSION_PATTERNS = [
    re.compile(r'(\d+\.\d+\.\d+(?:-[\w.]+)?(?:\+[\w.]+)?)'),  # 1.2.3, 1.2.3-beta.1, 1.2.3+build
    re.compile(r'v(\d+\.\d+\.\d+)'),                          # v1.2.3
    re.compile(r'(\d+\.\d+)'),                                # 1.2
]


def parse_version(output: Optional[str]) -> Optional[str]:
    """Extract a version number from command output, or None."""
    if not output:
        return None
    for pattern in VERSION_PATTERNS:
        match = pattern.search(output)
        if match:
            return match.group(1)
    return None


async def get_command_version(command: str, config=None) -> Optional[str]:
    """
    Ask an installed command for its version.

    Each flag in VERSION_FLAGS is tried in turn; the first output that
    contains a version wins. Flags that fail or print nothing are skipped.
    """
    for flag in VERSION_FLAGS:
        output, returncode = await run_command([command, flag], config=config)
        if returncode != 0:
            continue
        version = parse_version(output)
        if version:
            logger.debug(f"{command} {flag} reported version {version}")
            return version
    return None
