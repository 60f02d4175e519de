"""
Tests for the npm probe.
"""

import asyncio
import json
import unittest
from unittest.mock import patch

from changelog.domain import ProbeFailure, RepoReference
from changelog.probes import npm
from changelog.probes.npm import package_from_path


class FakeNpm:
    """
    Answers `npm view <package> <field> --json` from a registry dict.

    Unknown packages get npm's E404 error object; (package, field) pairs in
    `failures` get the given (stdout, returncode) instead.
    """

    def __init__(self, registry, failures=None):
        self.registry = registry
        self.failures = failures or {}
        self.calls = []

    async def __call__(self, command, timeout=None, config=None, log_stderr=False):
        self.calls.append(command)
        assert command[:2] == ['npm', 'view'] and command[4:] == ['--json'], command
        package, field = command[2], command[3]
        for key in ((package, field), (package, '*')):
            if key in self.failures:
                return self.failures[key]
        if package not in self.registry:
            return json.dumps({'error': {'code': 'E404', 'summary': f'{package} is not in this registry.'}}), 1
        value = self.registry[package].get(field)
        return (json.dumps(value), 0) if value is not None else ('', 0)


PRETTIER = {
    'name': 'prettier',
    'repository.url': 'git+https://github.com/prettier/prettier.git',
    'homepage': 'https://prettier.io',
    'version': '3.2.5',
}

BIOME = {
    'name': '@biomejs/biome',
    'repository.url': 'git+https://github.com/biomejs/biome.git',
    'homepage': 'https://biomejs.dev',
    'version': '1.5.3',
}


def run_probe(registry, command, hint=None, npm_path='/usr/local/bin/npm', failures=None):
    fake = FakeNpm(registry, failures)
    with patch('changelog.probes.npm.run_command', fake), \
         patch('changelog.probes.npm.which', return_value=npm_path):
        return asyncio.run(npm.probe(command, hint, config={})), fake


class TestPackageFromPath(unittest.TestCase):
    """Test extracting package names from install paths."""

    def test_plain_package(self):
        path = '/usr/local/lib/node_modules/prettier/bin/prettier.cjs'
        self.assertEqual(package_from_path(path), 'prettier')

    def test_scoped_package(self):
        path = '/usr/lib/node_modules/@biomejs/biome/bin/biome'
        self.assertEqual(package_from_path(path), '@biomejs/biome')

    def test_nested_dependency_wins(self):
        path = '/lib/node_modules/outer/node_modules/inner/cli.js'
        self.assertEqual(package_from_path(path), 'inner')

    def test_bin_directory_skipped(self):
        path = '/project/node_modules/typescript/node_modules/.bin/tsc'
        self.assertEqual(package_from_path(path), 'typescript')

    def test_no_node_modules(self):
        self.assertIsNone(package_from_path('/usr/bin/node'))
        self.assertIsNone(package_from_path(None))

    def test_incomplete_scope(self):
        self.assertIsNone(package_from_path('/lib/node_modules/@scope'))


class TestNpmProbe(unittest.TestCase):
    """Test the npm probe with a fake npm CLI."""

    def test_command_is_package(self):
        result, fake = run_probe({'prettier': PRETTIER}, 'prettier')

        self.assertEqual(result.package_name, 'prettier')
        self.assertEqual(result.repo, RepoReference('prettier', 'prettier'))
        self.assertEqual(result.version, '3.2.5')
        fields = {call[3] for call in fake.calls}
        self.assertEqual(fields, {'name', 'repository.url', 'homepage', 'version'})

    def test_package_from_install_path(self):
        """`biome` is not a package; the scoped package comes from the path."""
        hint = '/usr/lib/node_modules/@biomejs/biome/bin/biome'

        result, _ = run_probe({'@biomejs/biome': BIOME}, 'biome', hint)

        self.assertEqual(result.package_name, '@biomejs/biome')
        self.assertEqual(result.repo, RepoReference('biomejs', 'biome'))

    def test_homepage_fallback(self):
        package = {'name': 'tool', 'homepage': 'https://github.com/me/tool#readme', 'version': '1.0.0'}
        result, _ = run_probe({'tool': package}, 'tool')
        self.assertEqual(result.repo, RepoReference('me', 'tool'))

    def test_no_github_url(self):
        package = {'name': 'tool', 'repository.url': 'https://gitlab.com/me/tool', 'version': '1.0.0'}

        result, _ = run_probe({'tool': package}, 'tool')

        self.assertEqual(result.error, 'No GitHub URL found in package')
        self.assertEqual(result.failure, ProbeFailure.NO_REPOSITORY)
        self.assertEqual(result.version, '1.0.0')

    def test_not_found(self):
        result, _ = run_probe({}, 'nothing-here', '/usr/lib/node_modules/other/bin/x')
        self.assertEqual(result.error, 'Not found in npm: nothing-here')
        self.assertEqual(result.failure, ProbeFailure.NOT_FOUND)

    def test_name_lookup_timeout_is_query_failure(self):
        """A timed-out lookup is retryable, not a missing package."""
        result, _ = run_probe({'prettier': PRETTIER}, 'prettier',
                              failures={('prettier', 'name'): (None, -1)})

        self.assertEqual(result.failure, ProbeFailure.QUERY_FAILED)
        self.assertEqual(result.error, 'npm view prettier failed (timed out)')

    def test_name_lookup_network_error(self):
        offline = json.dumps({'error': {'code': 'ENOTFOUND', 'summary': 'getaddrinfo ENOTFOUND'}})
        result, _ = run_probe({}, 'prettier', failures={('prettier', 'name'): (offline, 1)})

        self.assertEqual(result.failure, ProbeFailure.QUERY_FAILED)
        self.assertIn('ENOTFOUND', result.error)

    def test_path_candidate_found_after_failed_lookup(self):
        """A failing direct lookup does not hide the package from the install path."""
        hint = '/usr/lib/node_modules/@biomejs/biome/bin/biome'

        result, _ = run_probe({'@biomejs/biome': BIOME}, 'biome', hint,
                              failures={('biome', 'name'): (None, -1)})

        self.assertTrue(result.ok)
        self.assertEqual(result.package_name, '@biomejs/biome')

    def test_metadata_timeout_is_query_failure(self):
        """Timed-out field queries are not reported as a missing repository."""
        failures = {('prettier', 'repository.url'): (None, -1), ('prettier', 'homepage'): (None, -1)}

        result, _ = run_probe({'prettier': PRETTIER}, 'prettier', failures=failures)

        self.assertEqual(result.failure, ProbeFailure.QUERY_FAILED)
        self.assertEqual(result.package_name, 'prettier')
        self.assertIn('timed out', result.error)

    def test_all_queries_time_out(self):
        result, _ = run_probe({'prettier': PRETTIER}, 'prettier',
                              failures={('prettier', '*'): (None, -1)})
        self.assertEqual(result.failure, ProbeFailure.QUERY_FAILED)

    def test_invalid_json(self):
        result, _ = run_probe({'prettier': PRETTIER}, 'prettier',
                              failures={('prettier', 'version'): ('not json', 0)})
        self.assertEqual(result.failure, ProbeFailure.QUERY_FAILED)
        self.assertIn('invalid JSON', result.error)

    def test_npm_missing(self):
        result, fake = run_probe({'prettier': PRETTIER}, 'prettier', npm_path=None)

        self.assertEqual(result.failure, ProbeFailure.QUERY_FAILED)
        self.assertIn('npm is not installed', result.error)
        self.assertEqual(fake.calls, [])


if __name__ == '__main__':
    unittest.main()
