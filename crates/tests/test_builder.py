"""
Tests for DocBuilder.

Archives are served by FakeArtifactStore and cargo is mocked, so no network
access or Rust toolchain is needed.
"""
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase

from crates.builder import DocBuilder
from crates.cargo_wrapper import CommandResult
from crates.errors import BuildFailed, CrateIndexError, DependencyResolutionError, FetchError
from crates.index import CrateRecord
from crates.models import Crate, Release
from crates.models.release import BuildStatus
from crates.tests.test_ingest import FakeRegistry, make_options
from crates.tests.utils import FakeArtifactStore, cargo_toml, write_index_file


def fake_cargo_doc(target_name='rand', returncode=0, output='Documenting rand v0.3.14\n'):
    """
    Stand-in for cargo_wrapper.run_command that creates target/doc/<target>
    in the working directory it is given, like cargo doc would.
    """
    def run(args, cwd):
        if returncode == 0:
            (Path(cwd) / 'target' / 'doc' / target_name).mkdir(parents=True)
            (Path(cwd) / 'target' / 'doc' / target_name / 'index.html').write_text('<html/>')
        return CommandResult(returncode, output)
    return run


class CombinedSession(FakeArtifactStore):
    """Serves crate archives and registry API responses"""

    def __init__(self, artifact_host, registry):
        super().__init__(artifact_host)
        self.registry = registry

    def get(self, url, **kwargs):
        if url.startswith(self.artifact_host):
            return super().get(url, **kwargs)
        return self.registry.get(url, **kwargs)


class BuilderTestMixin:

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.options = make_options(self.tmp)
        self.session = CombinedSession(self.options.artifact_host, FakeRegistry())
        self.builder = DocBuilder(self.options, session=self.session)
        write_index_file(self.options.index_path, 'rand', ['0.3.13', '0.3.14'])
        self.session.add('rand', '0.3.14', {
            'Cargo.toml': cargo_toml('rand', '0.3.14', 'description = "Random numbers"\n'),
            'src/lib.rs': '//! Random numbers\n',
        })
        self.record = CrateRecord('rand', ['0.3.14', '0.3.13'])

    def tearDown(self):
        shutil.rmtree(self.tmp)


@patch('crates.cargo_wrapper.get_cargo_executable', return_value='cargo')
class BuildCrateDocTests(BuilderTestMixin, SimpleTestCase):
    """The clean/fetch/extract/stage/invoke/classify sequence"""

    def test_successful_build_returns_log(self, mock_exe):
        with patch('crates.cargo_wrapper.run_command', side_effect=fake_cargo_doc()) as mock_run:
            log = self.builder.build_crate_doc(self.record, 0)

        self.assertEqual(log, 'Documenting rand v0.3.14\n')
        package_root = self.options.build_dir / 'rand-0.3.14'
        mock_run.assert_called_once_with(['cargo', 'doc', '--no-deps', '--verbose'], cwd=package_root)
        self.assertTrue((package_root / 'target' / 'doc' / 'rand').is_dir())

    def test_failed_build_raises_with_log(self, mock_exe):
        run = fake_cargo_doc(returncode=101, output='error[E0425]: unresolved name\n')
        with patch('crates.cargo_wrapper.run_command', side_effect=run):
            with self.assertRaises(BuildFailed) as ctx:
                self.builder.build_crate_doc(self.record, 0)

        self.assertIn('unresolved name', ctx.exception.log)

    def test_stale_build_dir_is_removed(self, mock_exe):
        stale = self.options.build_dir / 'rand-0.3.14'
        stale.mkdir(parents=True)
        (stale / 'leftover.txt').write_text('old')

        with patch('crates.cargo_wrapper.run_command', side_effect=fake_cargo_doc()):
            self.builder.build_crate_doc(self.record, 0)

        self.assertFalse((stale / 'leftover.txt').exists())

    def test_missing_archive(self, mock_exe):
        with patch('crates.cargo_wrapper.run_command') as mock_run:
            with self.assertRaises(FetchError):
                self.builder.build_crate_doc(self.record, 1)

        mock_run.assert_not_called()

    def test_staging_failure_leaves_extracted_dir(self, mock_exe):
        self.session.add('rand', '0.3.13', {
            'Cargo.toml': cargo_toml('rand', '0.3.13',
                                     '\n[dependencies]\nrand-core = { version = "0.1", path = "core" }\n'),
            'src/lib.rs': '',
        })

        with patch('crates.cargo_wrapper.run_command') as mock_run:
            with self.assertRaises(DependencyResolutionError):
                self.builder.build_crate_doc(self.record, 1)

        mock_run.assert_not_called()
        self.assertTrue((self.options.build_dir / 'rand-0.3.13').is_dir())

    def test_stages_local_dependencies_before_building(self, mock_exe):
        write_index_file(self.options.index_path, 'rand-core', ['0.1.0'])
        self.session.add('rand-core', '0.1.0', {
            'Cargo.toml': cargo_toml('rand-core', '0.1.0'),
            'src/lib.rs': '',
        })
        self.session.add('rand', '0.3.13', {
            'Cargo.toml': cargo_toml('rand', '0.3.13',
                                     '\n[dependencies]\nrand-core = { version = "0.1", path = "core" }\n'),
            'src/lib.rs': '',
        })

        def run(args, cwd):
            # The dependency must be in place by the time cargo runs
            self.assertTrue((Path(cwd) / 'core' / 'Cargo.toml').exists())
            return CommandResult(0, 'ok')

        with patch('crates.cargo_wrapper.run_command', side_effect=run):
            self.builder.build_crate_doc(self.record, 1)


@patch('crates.cargo_wrapper.get_cargo_executable', return_value='cargo')
class BuildPackageTests(BuilderTestMixin, SimpleTestCase):
    """Storing logs, docs and sources after a build"""

    def test_success_stores_everything(self, mock_exe):
        with patch('crates.cargo_wrapper.run_command', side_effect=fake_cargo_doc()):
            status = self.builder.build_package('rand')

        self.assertEqual(status, BuildStatus.SUCCEEDED)
        self.assertEqual(self.options.log_path('rand', '0.3.14').read_text(),
                         'Documenting rand v0.3.14\n')
        self.assertTrue((self.options.doc_path('rand', '0.3.14') / 'rand' / 'index.html').exists())
        sources = self.options.source_path('rand', '0.3.14')
        self.assertTrue((sources / 'Cargo.toml').exists())
        self.assertFalse((sources / 'target').exists())
        self.assertFalse((self.options.build_dir / 'rand-0.3.14').exists())
        self.assertFalse((self.options.build_dir / 'rand-0.3.14.crate').exists())

    def test_failure_stores_only_the_log(self, mock_exe):
        run = fake_cargo_doc(returncode=101, output='error: aborting\n')
        with patch('crates.cargo_wrapper.run_command', side_effect=run):
            status = self.builder.build_package('rand', '0.3.14')

        self.assertEqual(status, BuildStatus.FAILED)
        self.assertEqual(self.options.log_path('rand', '0.3.14').read_text(), 'error: aborting\n')
        self.assertFalse(self.options.doc_path('rand', '0.3.14').exists())
        self.assertFalse(self.options.source_path('rand', '0.3.14').exists())

    def test_unknown_crate(self, mock_exe):
        with self.assertRaises(CrateIndexError):
            self.builder.build_package('does-not-exist')

    def test_unknown_version(self, mock_exe):
        with self.assertRaises(CrateIndexError):
            self.builder.build_package('rand', '7.')


@patch('crates.cargo_wrapper.get_cargo_executable', return_value='cargo')
class BuildAndRecordTests(BuilderTestMixin, TestCase):
    """Building followed by ingestion"""

    def test_successful_build_is_recorded(self, mock_exe):
        with patch('crates.cargo_wrapper.run_command', side_effect=fake_cargo_doc()):
            release = self.builder.build_and_record('rand', '0.3.14')

        self.assertEqual(release.build_status, BuildStatus.SUCCEEDED)
        self.assertEqual(release.rustdoc_status, 1)
        self.assertEqual(release.description, 'Random numbers')
        self.assertEqual(Crate.objects.get(name='rand').versions, ['0.3.14'])

    def test_failed_build_is_recorded(self, mock_exe):
        run = fake_cargo_doc(returncode=101, output='error: aborting\n')
        with patch('crates.cargo_wrapper.run_command', side_effect=run):
            release = self.builder.build_and_record('rand')

        self.assertEqual(release.build_status, BuildStatus.FAILED)
        self.assertEqual(release.rustdoc_status, 0)

    def test_add_package_without_build(self, mock_exe):
        with patch('crates.cargo_wrapper.run_command') as mock_run:
            release = self.builder.add_package('rand', '0.3.14')

        mock_run.assert_not_called()
        self.assertEqual(release.build_status, BuildStatus.UNTRIED)

    def test_build_world_continues_after_errors(self, mock_exe):
        # 0.3.13 has no archive and fails to download
        with patch('crates.cargo_wrapper.run_command', side_effect=fake_cargo_doc()):
            counts = self.builder.build_world()

        self.assertEqual(counts, {'built': 1, 'failed': 0, 'errors': 1})
        self.assertEqual(Release.objects.count(), 1)
