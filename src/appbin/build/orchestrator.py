"""
Build orchestration for appbin projects.

This module runs the application pipeline end to end:
- Configuration (appbin.ini or built-in defaults)
- Toolchain resolution (arm-none-eabi-gcc, objcopy, size)
- Compile: one C source to an object file
- Link: object + static library against a linker script, with link map
- Extract: raw binary via objcopy, installed into the kernel's appbins

Stages run strictly in order. The first failing stage ends the build and
no later stage runs. Tools always run from the project directory; only their
outputs are written to the build directory.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import PipelineConfig, get_target_spec
from ..toolchain import Toolchain, ToolchainError
from .binary_generator import BinaryGenerator, BinaryGeneratorError
from .compiler import CompilerARM, CompilerError
from .linker import LinkerARM, LinkerError, SizeInfo
from .process_runner import ProcessRunner
from .workspace import BuildWorkspace

@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    bin_path: Optional[Path]
    elf_path: Optional[Path]
    map_path: Optional[Path]
    size_info: Optional[SizeInfo]
    build_time: float
    message: str
    failed_stage: Optional[str] = None
    returncode: int = 0
    stages: List[str] = field(default_factory=list)
    elf_size: Optional[int] = None
    bin_size: Optional[int] = None


class BuildOrchestratorError(Exception):
    """Exception raised for build orchestration errors."""

    def __init__(self, stage: str, message: str, returncode: int = 1):
        super().__init__(message)
        self.stage = stage
        self.returncode = returncode


class FirmwarePipeline:
    """
    Orchestrates the compile, link and extract stages for one application.

    Example usage:
        pipeline = FirmwarePipeline(verbose=True)
        result = pipeline.build(Path("c-output"), load_config(Path("c-output")))
        if result.success:
            print(f"Installed: {result.bin_path}")
    """

    def __init__(
        self,
        toolchain: Optional[Toolchain] = None,
        runner: Optional[ProcessRunner] = None,
        verbose: bool = False
    ):
        """
        Initialize the pipeline.

        Args:
            toolchain: Toolchain to use (default: derived from the config)
            runner: Process runner (default: derived from the config timeout)
            verbose: Print stage progress
        """
        self.toolchain = toolchain
        self.runner = runner
        self.verbose = verbose

    def build(self, project_dir: Path, config: PipelineConfig) -> BuildResult:
        """
        Execute the pipeline.

        Args:
            project_dir: Directory holding the source, library and linker script
            config: Validated pipeline configuration

        Returns:
            BuildResult with status, failing stage and tool exit code
        """
        start_time = time.time()
        project_dir = Path(project_dir).resolve()
        completed: List[str] = []

        try:
            toolchain = self.toolchain or Toolchain(
                prefix=config.toolchain_prefix,
                bin_dir=Path(config.toolchain_path) if config.toolchain_path else None
            )
            tools = toolchain.verify()
        except ToolchainError as e:
            return self._failure("setup", str(e), 1, completed, start_time)

        runner = self.runner or ProcessRunner(timeout=config.timeout, verbose=self.verbose)
        spec = get_target_spec(config.cpu)

        compiler = CompilerARM(
            gcc=tools['gcc'],
            cpu=config.cpu,
            std=config.std,
            thumb=config.thumb,
            float_flag=spec.float_flag(config.float_abi) if spec else None,
            extra_flags=config.cflags,
            runner=runner
        )
        linker = LinkerARM(
            gcc=tools['gcc'],
            size_tool=tools.get('size'),
            extra_flags=config.ldflags,
            runner=runner
        )
        generator = BinaryGenerator(
            objcopy=tools['objcopy'],
            runner=runner,
            show_progress=self.verbose
        )

        source = project_dir / config.source
        library = project_dir / config.library
        linker_script = project_dir / config.linker_script
        install_dir = (project_dir / config.install_dir).resolve()

        workspace = BuildWorkspace(project_dir, isolated=config.isolated)

        try:
            with workspace as build_dir:
                obj_path = build_dir / config.object_name
                elf_path = build_dir / config.elf_name
                map_path = build_dir / config.map_name
                bin_path = build_dir / config.bin_name

                # Stage 1: compile
                self._progress(1, f"Compiling {config.source}...")
                try:
                    compile_result = compiler.compile(source, obj_path, cwd=project_dir)
                except CompilerError as e:
                    raise BuildOrchestratorError("compile", str(e)) from e
                except OSError as e:
                    raise BuildOrchestratorError("compile", f"Failed to run compiler: {e}") from e
                if not compile_result.success:
                    raise BuildOrchestratorError(
                        "compile",
                        f"Compilation failed for {config.source}\n{compile_result.stderr}",
                        compile_result.returncode or 1
                    )
                completed.append("compile")

                # Stage 2: link
                self._progress(2, f"Linking {config.elf_name}...")
                try:
                    link_result = linker.link(
                        objects=[obj_path],
                        libraries=[library],
                        linker_script=linker_script,
                        output_elf=elf_path,
                        map_file=map_path,
                        cwd=project_dir
                    )
                except LinkerError as e:
                    raise BuildOrchestratorError("link", str(e)) from e
                except OSError as e:
                    raise BuildOrchestratorError("link", f"Failed to run linker: {e}") from e
                if not link_result.success:
                    raise BuildOrchestratorError(
                        "link",
                        f"Linking failed for {config.elf_name}\n{link_result.stderr}",
                        link_result.returncode or 1
                    )
                completed.append("link")

                size_info = linker.size(elf_path)

                # Stage 3: extract and install
                self._progress(3, f"Extracting {config.bin_name}...")
                try:
                    generator.generate_bin(elf_path, bin_path, cwd=project_dir)
                except BinaryGeneratorError as e:
                    raise BuildOrchestratorError("extract", str(e), e.returncode) from e
                except OSError as e:
                    raise BuildOrchestratorError("extract", f"Failed to run objcopy: {e}") from e
                completed.append("extract")

                try:
                    installed = generator.install(bin_path, install_dir)
                except BinaryGeneratorError as e:
                    raise BuildOrchestratorError("install", str(e), e.returncode) from e
                completed.append("install")

                elf_size = elf_path.stat().st_size
                bin_size = bin_path.stat().st_size

                kept_elf: Optional[Path] = None
                kept_map: Optional[Path] = None
                if not config.isolated:
                    kept_elf, kept_map = elf_path, map_path
                elif config.keep_intermediates:
                    workspace.export(config.intermediate_names)
                    kept_elf = project_dir / config.elf_name
                    kept_map = project_dir / config.map_name

        except BuildOrchestratorError as e:
            return self._failure(e.stage, str(e), e.returncode, completed, start_time)

        build_time = time.time() - start_time
        logging.info(f"Built {installed} in {build_time:.2f}s")

        return BuildResult(
            success=True,
            bin_path=installed,
            elf_path=kept_elf,
            map_path=kept_map if kept_map and kept_map.exists() else None,
            size_info=size_info,
            build_time=build_time,
            message="Build successful",
            stages=completed,
            elf_size=elf_size,
            bin_size=bin_size
        )

    def _progress(self, step: int, message: str) -> None:
        if self.verbose:
            print(f"[{step}/3] {message}")

    def _failure(
        self,
        stage: str,
        message: str,
        returncode: int,
        completed: List[str],
        start_time: float
    ) -> BuildResult:
        logging.error(f"{stage} stage failed (exit code {returncode})")
        return BuildResult(
            success=False,
            bin_path=None,
            elf_path=None,
            map_path=None,
            size_info=None,
            build_time=time.time() - start_time,
            message=message,
            failed_stage=stage,
            returncode=returncode,
            stages=completed
        )
