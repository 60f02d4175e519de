"""
PyPI probe.

Works for commands installed by pip, uv or pipx. The distribution that
declares a console script is looked up in the environment owning the
resolved path; PyPI's JSON API then supplies the version and project links.
"""

import configparser
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

from ..config import logger
from ..domain import ProbeResult
from ..exit_codes import APIError, NetworkError
from ..infra.http_client import HttpClient
from ..urls import first_repo

PYPI_API_BASE = "https://pypi.org/pypi"

# A dedicated source link beats a generic homepage.
PROJECT_URL_PRIORITY = [
    'github',
    'repository',
    'source',
    'sourcecode',
    'code',
    'homepage',
    'home',
]

SCRIPT_SECTIONS = ('console_scripts', 'gui_scripts')


def _url_key(label: str) -> str:
    """Normalize a project_urls label: 'Source Code' -> 'sourcecode'."""
    return re.sub(r'[\s_\-.:]', '', label).lower()


@dataclass(frozen=True)
class PyPIProject:
    """The `info` object of a PyPI JSON API response."""
    name: str
    version: Optional[str] = None
    home_page: Optional[str] = None
    project_urls: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> Optional['PyPIProject']:
        info = data.get('info') if isinstance(data, dict) else None
        if not isinstance(info, dict) or not info.get('name'):
            return None
        project_urls = info.get('project_urls')
        if not isinstance(project_urls, dict):
            project_urls = {}
        return cls(
            name=info['name'],
            version=info.get('version') or None,
            home_page=info.get('home_page') or None,
            project_urls={str(k): v for k, v in project_urls.items() if isinstance(v, str)},
        )

    @property
    def repo_candidates(self) -> List[str]:
        """Project links in the order they should be trusted."""
        by_key = {}
        for label, url in self.project_urls.items():
            by_key.setdefault(_url_key(label), url)

        candidates = [by_key[key] for key in PROJECT_URL_PRIORITY if key in by_key]
        if self.home_page:
            candidates.append(self.home_page)
        candidates.extend(url for url in self.project_urls.values() if url not in candidates)
        return candidates


def _environment_root(resolved_path: str) -> Optional[Path]:
    """The prefix an executable was installed into (the parent of bin/ or Scripts/)."""
    path = Path(resolved_path)
    if path.parent.name.lower() not in ('bin', 'scripts'):
        return None
    return path.parent.parent


def _dist_name(dist_info: Path) -> str:
    """Distribution name from METADATA, falling back to the directory name."""
    metadata = dist_info / 'METADATA'
    try:
        with open(metadata, 'r', encoding='utf-8', errors='replace') as f:
            for line in f:
                if not line.strip():
                    break
                if line.lower().startswith('name:'):
                    return line.split(':', 1)[1].strip()
    except OSError:
        pass
    return dist_info.name[:-len('.dist-info')].split('-')[0]


def _declares_script(entry_points: Path, command: str) -> bool:
    parser = configparser.ConfigParser(delimiters=('=',), interpolation=None)
    parser.optionxform = str
    try:
        parser.read(entry_points, encoding='utf-8')
    except configparser.Error as e:
        logger.debug(f"Error parsing {entry_points}: {e}")
        return False
    return any(
        parser.has_section(section) and parser.has_option(section, command)
        for section in SCRIPT_SECTIONS
    )


def distribution_for_script(command: str, resolved_path: Optional[str]) -> Optional[str]:
    """
    Find the installed distribution declaring a console script.

    Searches the site-packages of the environment the executable lives in.
    """
    if not resolved_path:
        return None
    root = _environment_root(resolved_path)
    if root is None:
        return None

    site_dirs = list(root.glob('lib/python*/site-packages')) + list(root.glob('Lib/site-packages'))
    for site_dir in site_dirs:
        for entry_points in sorted(site_dir.glob('*.dist-info/entry_points.txt')):
            if _declares_script(entry_points, command):
                return _dist_name(entry_points.parent)
    return None


def tool_from_path(resolved_path: Optional[str]) -> Optional[str]:
    """Tool name from uv (`uv/tools/<name>/`) and pipx (`pipx/venvs/<name>/`) layouts."""
    if not resolved_path:
        return None
    match = re.search(r'/(?:uv/tools|pipx/venvs)/([^/]+)/', resolved_path)
    return match.group(1) if match else None


def get_package_name(command: str, hint: Optional[str] = None) -> str:
    """Best guess of the PyPI project behind a command."""
    return distribution_for_script(command, hint) or tool_from_path(hint) or command


async def probe(command: str, hint: Optional[str] = None, *, config=None,
                http: Optional[HttpClient] = None) -> ProbeResult:
    """
    Probe PyPI for package info and GitHub repo.

    Args:
        command: Command name as typed by the user
        hint: Resolved install path, used to find the owning distribution
        config: Loaded configuration
        http: HTTP client (created from config and closed afterwards if omitted)
    """
    if http is None:
        with HttpClient(config=config) as owned:
            return await probe(command, hint, config=config, http=owned)

    package_name = get_package_name(command, hint)
    if package_name != command:
        logger.debug(f"{command} is provided by the {package_name} distribution")

    try:
        data = await http.get_json(f"{PYPI_API_BASE}/{package_name}/json")
    except (APIError, NetworkError) as e:
        return ProbeResult.query_failed(package_name, f"PyPI lookup failed: {e}")

    if data is None:
        return ProbeResult.not_found(package_name, f"Not found on PyPI: {package_name}")

    project = PyPIProject.from_api_response(data)
    if project is None:
        return ProbeResult.query_failed(package_name, "PyPI returned no project info")

    return ProbeResult.found(
        project.name,
        first_repo(project.repo_candidates),
        project.version,
        "No GitHub URL found in package",
    )
