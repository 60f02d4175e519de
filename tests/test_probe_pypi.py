"""
Tests for the PyPI probe.

Tests cover:
- project_urls ranking
- Console-script lookup in an environment's site-packages
- uv / pipx tool directory names
- PyPI JSON API responses with mocked HTTP
"""

import asyncio
import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from changelog.domain import ProbeFailure, RepoReference
from changelog.infra.http_client import HttpClient
from changelog.probes import pypi
from changelog.probes.pypi import (
    PyPIProject,
    distribution_for_script,
    get_package_name,
    tool_from_path,
)

HTTPIE_JSON = {
    "info": {
        "name": "httpie",
        "version": "3.2.2",
        "home_page": "https://httpie.io/",
        "project_urls": {
            "Documentation": "https://httpie.io/docs",
            "Homepage": "https://httpie.io/",
            "Source": "https://github.com/httpie/cli",
        },
    }
}


def make_http(status_code=200, json_data=None):
    session = MagicMock()
    response = MagicMock()
    response.status_code = status_code
    response.headers = {}
    response.json.return_value = json_data
    response.text = ''
    session.get.return_value = response
    return HttpClient(session=session, config={}), session


@pytest.fixture
def venv():
    """A minimal virtual environment with one installed distribution."""
    root = Path(tempfile.mkdtemp()) / 'venv'
    site = root / 'lib' / 'python3.12' / 'site-packages'
    dist_info = site / 'httpie-3.2.2.dist-info'
    dist_info.mkdir(parents=True)
    (dist_info / 'METADATA').write_text("Metadata-Version: 2.1\nName: httpie\nVersion: 3.2.2\n\nLong description\n")
    (dist_info / 'entry_points.txt').write_text(
        "[console_scripts]\n"
        "http = httpie.__main__:main\n"
        "https = httpie.__main__:main\n"
        "httpie = httpie.manager.__main__:main\n"
    )
    other = site / 'black-24.1.0.dist-info'
    other.mkdir()
    (other / 'entry_points.txt').write_text("[console_scripts]\nblack = black:patched_main\n")
    (root / 'bin').mkdir()
    yield root
    shutil.rmtree(root.parent)


class TestPyPIProject:
    """Tests for PyPIProject parsing."""

    def test_source_link_ranked_first(self):
        project = PyPIProject.from_api_response(HTTPIE_JSON)
        assert project.repo_candidates[0] == "https://github.com/httpie/cli"

    def test_label_normalization(self):
        project = PyPIProject(name='x', project_urls={
            'Home': 'https://example.com',
            'Source Code': 'https://github.com/me/x',
        })
        assert project.repo_candidates[0] == 'https://github.com/me/x'

    def test_home_page_after_ranked_links(self):
        project = PyPIProject(name='x', home_page='https://github.com/me/x', project_urls={
            'Bug Tracker': 'https://github.com/me/x/issues',
        })
        assert project.repo_candidates == ['https://github.com/me/x', 'https://github.com/me/x/issues']

    def test_missing_info(self):
        assert PyPIProject.from_api_response({"message": "Not Found"}) is None

    def test_null_project_urls(self):
        data = {"info": {"name": "x", "version": "1.0", "project_urls": None, "home_page": ""}}
        project = PyPIProject.from_api_response(data)
        assert project.project_urls == {}
        assert project.home_page is None


class TestPackageName:
    """Tests for finding the distribution behind a command."""

    def test_script_declared_by_distribution(self, venv):
        hint = str(venv / 'bin' / 'http')
        assert distribution_for_script('http', hint) == 'httpie'

    def test_other_distribution(self, venv):
        hint = str(venv / 'bin' / 'black')
        assert distribution_for_script('black', hint) == 'black'

    def test_undeclared_script(self, venv):
        assert distribution_for_script('ruff', str(venv / 'bin' / 'ruff')) is None

    def test_not_in_bin_directory(self, venv):
        assert distribution_for_script('http', str(venv / 'http')) is None

    def test_uv_tool_directory(self):
        assert tool_from_path('/home/me/.local/share/uv/tools/ruff/bin/ruff') == 'ruff'

    def test_pipx_venv_directory(self):
        assert tool_from_path('/home/me/.local/pipx/venvs/poetry/bin/poetry') == 'poetry'

    def test_fallback_to_command(self):
        assert get_package_name('ruff', '/home/me/.local/bin/ruff') == 'ruff'
        assert get_package_name('ruff', None) == 'ruff'


class TestPyPIProbe:
    """Tests for the PyPI probe."""

    def test_found_via_console_script(self, venv):
        http, session = make_http(json_data=HTTPIE_JSON)

        result = asyncio.run(pypi.probe('http', str(venv / 'bin' / 'http'), config={}, http=http))

        assert result.package_name == 'httpie'
        assert result.repo == RepoReference('httpie', 'cli')
        assert result.version == '3.2.2'
        assert session.get.call_args.args[0] == 'https://pypi.org/pypi/httpie/json'

    def test_no_github_url(self):
        data = {"info": {"name": "tool", "version": "1.0", "home_page": "https://example.com", "project_urls": {}}}
        http, _ = make_http(json_data=data)

        result = asyncio.run(pypi.probe('tool', None, config={}, http=http))

        assert result.failure == ProbeFailure.NO_REPOSITORY
        assert result.error == 'No GitHub URL found in package'

    def test_not_found(self):
        http, _ = make_http(status_code=404)
        result = asyncio.run(pypi.probe('mystery', None, config={}, http=http))
        assert result.failure == ProbeFailure.NOT_FOUND
        assert result.error == 'Not found on PyPI: mystery'

    def test_server_error(self):
        http, _ = make_http(status_code=502)
        result = asyncio.run(pypi.probe('tool', None, config={}, http=http))
        assert result.failure == ProbeFailure.QUERY_FAILED
        assert result.error.startswith('PyPI lookup failed')

    def test_owned_client_closed_after_failure(self):
        http, session = make_http(status_code=502)

        with patch('changelog.probes.pypi.HttpClient', return_value=http):
            result = asyncio.run(pypi.probe('tool', None, config={}))

        assert result.failure == ProbeFailure.QUERY_FAILED
        session.close.assert_called_once()
