"""
ARM cross compiler wrapper for building userspace applications.

This module provides a wrapper around arm-none-eabi-gcc for compiling a
single C source file to a relocatable object file.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .process_runner import ProcessRunner


class CompilerError(Exception):
    """Raised when compilation cannot be attempted."""
    pass


@dataclass
class CompileResult:
    """Result of a compilation operation."""
    success: bool
    object_file: Optional[Path]
    stdout: str
    stderr: str
    returncode: int


class CompilerARM:
    """
    Wrapper for the ARM GCC cross compiler.

    Compiles C sources for a Cortex-M target in compile-only mode.
    """

    def __init__(
        self,
        gcc: Path,
        cpu: str = 'cortex-m4',
        std: str = 'c99',
        thumb: bool = True,
        float_flag: Optional[str] = '-mhard-float',
        extra_flags: Optional[List[str]] = None,
        runner: Optional[ProcessRunner] = None
    ):
        """
        Initialize compiler.

        Args:
            gcc: Path to arm-none-eabi-gcc executable
            cpu: Core passed to -mcpu (e.g., cortex-m4)
            std: C language standard (e.g., c99)
            thumb: Emit Thumb instructions
            float_flag: Float ABI flag (e.g., -mhard-float), None to omit
            extra_flags: Additional compiler flags from appbin.ini
            runner: Process runner (default: new runner without timeout)
        """
        self.gcc = Path(gcc)
        self.cpu = cpu
        self.std = std
        self.thumb = thumb
        self.float_flag = float_flag
        self.extra_flags = list(extra_flags or [])
        self.runner = runner or ProcessRunner()

    def build_command(self, source: Path, output: Path) -> List[str]:
        """Build the gcc command for compiling one C source."""
        cmd = [
            str(self.gcc),
            f'-std={self.std}',
        ]

        if self.thumb:
            cmd.append('-mthumb')

        cmd.append(f'-mcpu={self.cpu}')

        if self.float_flag:
            cmd.append(self.float_flag)

        cmd.extend(self.extra_flags)

        # Compile only, explicit input and output
        cmd.extend(['-c', str(source), '-o', str(output)])

        return cmd

    def compile(self, source: Path, output: Path, cwd: Optional[Path] = None) -> CompileResult:
        """
        Compile a C source file to an object file.

        Args:
            source: Path to .c source file
            output: Path to output .o object file
            cwd: Working directory for the compiler

        Returns:
            CompileResult with compilation status

        Raises:
            CompilerError: If the source file does not exist
        """
        source = Path(source)
        output = Path(output)

        if not source.exists():
            raise CompilerError(f"Source file not found: {source}")

        output.parent.mkdir(parents=True, exist_ok=True)

        result = self.runner.run(self.build_command(source, output), cwd=cwd)

        obj_file = output if result.success and output.exists() else None

        return CompileResult(
            success=result.success,
            object_file=obj_file,
            stdout=result.stdout,
            stderr=result.stderr,
            returncode=result.returncode
        )
