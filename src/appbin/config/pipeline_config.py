"""
appbin.ini configuration parser.

Every key is optional. With no appbin.ini at all the pipeline reproduces the
classic build of test.c against libc_userspace.a and link.x, installing
test.bin into ../../kernel/appbins.

Example appbin.ini:
    [app]
    name = blinker
    source = blinker.c

    [target]
    cpu = cortex-m4
    float = hard

    [build]
    mode = isolated
"""

import configparser
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .target_specs import FLOAT_ABIS, get_target_spec

CONFIG_FILENAME = "appbin.ini"

BUILD_MODES = ("isolated", "in-place")


class PipelineConfigError(Exception):
    """Exception raised for appbin.ini configuration errors."""

    pass


@dataclass
class PipelineConfig:
    """Resolved settings for one application build."""

    name: str = "test"
    source: str = "test.c"
    library: str = "libc_userspace.a"
    linker_script: str = "link.x"
    install_dir: str = "../../kernel/appbins"

    cpu: str = "cortex-m4"
    std: str = "c99"
    thumb: bool = True
    float_abi: str = "hard"

    toolchain_prefix: str = "arm-none-eabi-"
    toolchain_path: Optional[str] = None
    timeout: Optional[float] = None

    mode: str = "isolated"
    keep_intermediates: bool = False
    cflags: List[str] = field(default_factory=list)
    ldflags: List[str] = field(default_factory=list)

    @property
    def object_name(self) -> str:
        return f"{self.name}.o"

    @property
    def elf_name(self) -> str:
        return f"{self.name}.elf"

    @property
    def map_name(self) -> str:
        return f"{self.name}.map"

    @property
    def bin_name(self) -> str:
        return f"{self.name}.bin"

    @property
    def intermediate_names(self) -> List[str]:
        """Names of every file the pipeline writes next to the source."""
        return [self.object_name, self.elf_name, self.map_name, self.bin_name]

    @property
    def isolated(self) -> bool:
        return self.mode == "isolated"

    def validate(self) -> None:
        """
        Check target and build options for consistency.

        Raises:
            PipelineConfigError: If any option is unsupported
        """
        if not self.name:
            raise PipelineConfigError("Application name must not be empty")

        spec = get_target_spec(self.cpu)
        if spec is None:
            raise PipelineConfigError(f"Unsupported CPU: {self.cpu}")

        if self.float_abi not in FLOAT_ABIS:
            raise PipelineConfigError(
                f"Unsupported float ABI '{self.float_abi}' "
                + f"(expected one of: {', '.join(FLOAT_ABIS)})"
            )

        if self.float_abi == "hard" and not spec.has_fpu:
            raise PipelineConfigError(
                f"CPU {spec.cpu} has no FPU; use float = soft"
            )

        if self.mode not in BUILD_MODES:
            raise PipelineConfigError(
                f"Unsupported build mode '{self.mode}' "
                + f"(expected one of: {', '.join(BUILD_MODES)})"
            )

        if self.timeout is not None and self.timeout <= 0:
            raise PipelineConfigError("Timeout must be a positive number of seconds")


def _get_bool(parser: configparser.ConfigParser, section: str, key: str, default: bool) -> bool:
    try:
        return parser.getboolean(section, key, fallback=default)
    except ValueError as e:
        raise PipelineConfigError(f"[{section}] {key}: {e}") from e
    except AttributeError as e:
        # Bare key without a value (allow_no_value)
        raise PipelineConfigError(f"[{section}] {key}: expected a boolean value") from e


def _get_str(parser: configparser.ConfigParser, section: str, key: str, default: Optional[str]) -> Optional[str]:
    value = parser.get(section, key, fallback=None)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def load_config(project_dir: Path, config_path: Optional[Path] = None) -> PipelineConfig:
    """
    Load pipeline configuration for a project.

    Args:
        project_dir: Project directory containing the application source
        config_path: Explicit config file (default: project_dir/appbin.ini if present)

    Returns:
        Validated PipelineConfig

    Raises:
        PipelineConfigError: If the file cannot be parsed or holds invalid values
    """
    config = PipelineConfig()

    if config_path is None:
        candidate = Path(project_dir) / CONFIG_FILENAME
        if not candidate.exists():
            config.validate()
            return config
        config_path = candidate
    elif not config_path.exists():
        raise PipelineConfigError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser(
        allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
    )

    try:
        parser.read(config_path, encoding="utf-8")
    except configparser.Error as e:
        raise PipelineConfigError(f"Failed to parse {config_path}: {e}") from e

    config.name = _get_str(parser, "app", "name", config.name) or config.name
    config.source = _get_str(parser, "app", "source", f"{config.name}.c") or config.source
    config.library = _get_str(parser, "app", "library", config.library) or config.library
    config.linker_script = _get_str(parser, "app", "linker_script", config.linker_script) or config.linker_script
    config.install_dir = _get_str(parser, "app", "install_dir", config.install_dir) or config.install_dir

    config.cpu = (_get_str(parser, "target", "cpu", config.cpu) or config.cpu).lower()
    config.std = _get_str(parser, "target", "std", config.std) or config.std
    config.thumb = _get_bool(parser, "target", "thumb", config.thumb)
    config.float_abi = (_get_str(parser, "target", "float", config.float_abi) or config.float_abi).lower()

    # An explicit empty prefix selects the native toolchain
    prefix = parser.get("toolchain", "prefix", fallback=None)
    if prefix is not None:
        config.toolchain_prefix = prefix.strip()
    config.toolchain_path = _get_str(parser, "toolchain", "path", None)

    timeout = _get_str(parser, "toolchain", "timeout", None)
    if timeout is not None:
        try:
            config.timeout = float(timeout)
        except ValueError as e:
            raise PipelineConfigError(f"[toolchain] timeout: invalid number '{timeout}'") from e

    config.mode = (_get_str(parser, "build", "mode", config.mode) or config.mode).lower()
    config.keep_intermediates = _get_bool(parser, "build", "keep_intermediates", config.keep_intermediates)
    config.cflags = shlex.split(_get_str(parser, "build", "cflags", "") or "")
    config.ldflags = shlex.split(_get_str(parser, "build", "ldflags", "") or "")

    config.validate()
    return config
