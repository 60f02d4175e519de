"""
Install-path classification.

Maps the real location of an executable to the ecosystem that installed it,
using the directory conventions each package manager follows.
"""

from typing import Optional, Tuple

from .config import get_setting
from .domain import Ecosystem
from .exit_codes import ConfigError

# Evaluated in order; the first matching fragment wins.
PATH_RULES: Tuple[Tuple[Ecosystem, Tuple[str, ...]], ...] = (
    (Ecosystem.CARGO, ('/.cargo/bin/',)),
    (Ecosystem.PYPI, (
        '/.local/bin/',
        '/site-packages/',
        '/.venv/',
        '/venv/',
        '/uv/tools/',
        '/pipx/venvs/',
    )),
    (Ecosystem.NPM, (
        '/node_modules/.bin/',
        '/node_modules/',
        '/.nvm/versions/',
    )),
    (Ecosystem.BREW, (
        '/opt/homebrew/',
        '/usr/local/Cellar/',
        '/Homebrew/',
        '/.linuxbrew/',
    )),
)

# Shared by Homebrew on Intel macOS and by pip/npm system installs.
AMBIGUOUS_FRAGMENT = '/usr/local/bin/'
DEFAULT_AMBIGUOUS_ECOSYSTEM = Ecosystem.BREW

_UNSET = object()


def classify(resolved_path: str, ambiguous_default=_UNSET) -> Optional[Ecosystem]:
    """
    Decide which ecosystem installed an executable.

    Args:
        resolved_path: Symlink-free path of the executable
        ambiguous_default: Ecosystem assumed for /usr/local/bin. This is a
            guess; pass None to leave such paths unclassified.

    Returns:
        Ecosystem, or None for system binaries and unknown layouts
    """
    if not resolved_path:
        return None

    for ecosystem, fragments in PATH_RULES:
        if any(fragment in resolved_path for fragment in fragments):
            return ecosystem

    if AMBIGUOUS_FRAGMENT in resolved_path:
        if ambiguous_default is _UNSET:
            return DEFAULT_AMBIGUOUS_ECOSYSTEM
        return ambiguous_default

    return None


def ambiguous_default_from_config(config=None) -> Optional[Ecosystem]:
    """Read classifier.ambiguous_default; an empty value disables the guess."""
    name = get_setting(config, 'classifier', 'ambiguous_default', DEFAULT_AMBIGUOUS_ECOSYSTEM.value)
    if not name:
        return None
    try:
        return Ecosystem.from_name(str(name))
    except ValueError:
        choices = ', '.join(e.value for e in Ecosystem)
        raise ConfigError(f"classifier.ambiguous_default must be one of {choices} or empty, got '{name}'")
