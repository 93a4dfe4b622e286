"""
Unit tests for FirmwarePipeline.

Tests the complete pipeline against a fake arm-none-eabi toolchain:
- Stage ordering and abort on first failure
- Exit code propagation from the failing tool
- Isolated and in-place build modes
- Installation into the appbins directory
"""

import signal
import sys

import pytest
from pathlib import Path
from unittest.mock import Mock

from appbin.build.orchestrator import FirmwarePipeline, BuildResult
from appbin.config import PipelineConfig
from appbin.toolchain import Toolchain, ToolchainError


@pytest.fixture
def config(fake_toolchain):
    return PipelineConfig(toolchain_path=str(fake_toolchain.bin_dir))


@pytest.fixture
def appbins(app_project):
    return app_project.parent.parent / 'kernel' / 'appbins'


class TestSuccessfulBuild:
    """Full pipeline runs."""

    def test_classic_scenario(self, fake_toolchain, app_project, appbins, config):
        result = FirmwarePipeline().build(app_project, config)

        assert isinstance(result, BuildResult)
        assert result.success, result.message
        assert result.stages == ['compile', 'link', 'extract', 'install']
        assert result.bin_path == appbins.resolve() / 'test.bin'
        assert result.bin_path.exists()
        assert fake_toolchain.calls() == ['compile', 'link', 'size', 'objcopy']

    def test_blob_smaller_than_elf(self, fake_toolchain, app_project, config):
        result = FirmwarePipeline().build(app_project, config)

        assert result.success
        assert result.bin_size < result.elf_size
        assert result.bin_path.stat().st_size == result.bin_size

    def test_rebuild_is_byte_identical(self, fake_toolchain, app_project, config):
        first = FirmwarePipeline().build(app_project, config)
        first_bytes = first.bin_path.read_bytes()

        second = FirmwarePipeline().build(app_project, config)

        assert second.success
        assert second.bin_path.read_bytes() == first_bytes

    def test_size_info_reported(self, fake_toolchain, app_project, config):
        result = FirmwarePipeline().build(app_project, config)

        assert result.size_info is not None
        assert result.size_info.data == 4
        assert result.size_info.bss == 16

    def test_isolated_build_leaves_project_clean(self, fake_toolchain, app_project, config):
        result = FirmwarePipeline().build(app_project, config)

        assert result.success
        for name in config.intermediate_names:
            assert not (app_project / name).exists()
        assert result.elf_path is None
        assert result.map_path is None

    def test_in_place_build_leaves_intermediates(self, fake_toolchain, app_project, config):
        config.mode = 'in-place'

        result = FirmwarePipeline().build(app_project, config)

        assert result.success
        for name in config.intermediate_names:
            assert (app_project / name).exists()
        assert result.elf_path == app_project.resolve() / 'test.elf'
        assert result.map_path == app_project.resolve() / 'test.map'

    def test_keep_intermediates_exports_files(self, fake_toolchain, app_project, config):
        config.keep_intermediates = True

        result = FirmwarePipeline().build(app_project, config)

        assert result.success
        for name in config.intermediate_names:
            assert (app_project / name).exists()
        assert result.map_path == app_project.resolve() / 'test.map'

    def test_custom_install_dir(self, fake_toolchain, app_project, config, tmp_path):
        target = tmp_path / 'elsewhere'
        target.mkdir()
        config.install_dir = str(target)

        result = FirmwarePipeline().build(app_project, config)

        assert result.success
        assert (target / 'test.bin').exists()

    def test_compile_flags_reach_compiler(self, fake_toolchain, app_project, config):
        config.cflags = ['-Os']

        FirmwarePipeline().build(app_project, config)

        compile_line = fake_toolchain.log_path.read_text().splitlines()[0]
        assert '-std=c99 -mthumb -mcpu=cortex-m4 -mhard-float -Os -c' in compile_line

    def test_project_relative_include_in_isolated_mode(self, fake_toolchain, app_project, config):
        (app_project / 'include').mkdir()
        config.cflags = ['-Iinclude']

        result = FirmwarePipeline().build(app_project, config)

        assert result.success, result.message
        assert config.isolated
        for name in config.intermediate_names:
            assert not (app_project / name).exists()


class TestStageFailures:
    """A failing stage stops every later stage."""

    def test_compile_error_stops_pipeline(self, fake_toolchain, app_project, appbins, config):
        (app_project / 'test.c').write_text('#error broken\n')

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'compile'
        assert result.returncode == 1
        assert '#error' in result.message
        assert result.stages == []
        assert fake_toolchain.calls() == ['compile']
        assert not (appbins / 'test.bin').exists()

    def test_link_failure_exit_code_propagates(self, fake_toolchain, app_project, appbins, config, monkeypatch):
        monkeypatch.setenv('FAKE_TOOLCHAIN_FAIL', 'link')
        monkeypatch.setenv('FAKE_TOOLCHAIN_EXIT', '7')

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'link'
        assert result.returncode == 7
        assert result.stages == ['compile']
        assert 'objcopy' not in fake_toolchain.calls()
        assert not (appbins / 'test.bin').exists()

    @pytest.mark.skipif(sys.platform == 'win32', reason='POSIX signals')
    def test_tool_killed_by_signal_reports_shell_code(self, fake_toolchain, app_project, config, monkeypatch):
        monkeypatch.setenv('FAKE_TOOLCHAIN_FAIL', 'compile')
        monkeypatch.setenv('FAKE_TOOLCHAIN_SIGNAL', str(int(signal.SIGSEGV)))

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'compile'
        assert result.returncode == 128 + signal.SIGSEGV
        assert fake_toolchain.calls() == ['compile']

    def test_objcopy_failure_stops_install(self, fake_toolchain, app_project, appbins, config, monkeypatch):
        monkeypatch.setenv('FAKE_TOOLCHAIN_FAIL', 'objcopy')
        monkeypatch.setenv('FAKE_TOOLCHAIN_EXIT', '3')

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'extract'
        assert result.returncode == 3
        assert result.stages == ['compile', 'link']
        assert not (appbins / 'test.bin').exists()

    def test_missing_library_produces_nothing(self, fake_toolchain, app_project, appbins, config):
        config.mode = 'in-place'
        (app_project / 'libc_userspace.a').unlink()

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'link'
        assert 'libc_userspace.a' in result.message
        assert fake_toolchain.calls() == ['compile']
        assert not (app_project / 'test.elf').exists()
        assert not (app_project / 'test.bin').exists()
        assert not (appbins / 'test.bin').exists()

    def test_missing_linker_script_produces_nothing(self, fake_toolchain, app_project, config):
        config.mode = 'in-place'
        (app_project / 'link.x').unlink()

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'link'
        assert not (app_project / 'test.elf').exists()

    def test_missing_appbins_fails_install(self, fake_toolchain, app_project, appbins, config):
        appbins.rmdir()

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'install'
        assert result.returncode != 0
        assert result.stages == ['compile', 'link', 'extract']
        assert not appbins.exists()

    def test_missing_source(self, fake_toolchain, app_project, config):
        (app_project / 'test.c').unlink()

        result = FirmwarePipeline().build(app_project, config)

        assert result.failed_stage == 'compile'
        assert fake_toolchain.calls() == []

    def test_missing_toolchain(self, app_project, tmp_path):
        empty = tmp_path / 'empty-bin'
        empty.mkdir()
        config = PipelineConfig(toolchain_path=str(empty))

        result = FirmwarePipeline().build(app_project, config)

        assert not result.success
        assert result.failed_stage == 'setup'
        assert 'arm-none-eabi-gcc' in result.message

    def test_injected_toolchain(self, app_project):
        toolchain = Mock(spec=Toolchain)
        toolchain.verify = Mock(side_effect=ToolchainError('arm-none-eabi-objcopy not found'))

        result = FirmwarePipeline(toolchain=toolchain).build(app_project, PipelineConfig())

        assert result.failed_stage == 'setup'
        toolchain.verify.assert_called_once()
