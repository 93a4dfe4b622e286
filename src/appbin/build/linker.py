"""
ARM linker wrapper for creating application images.

This module provides a wrapper around the arm-none-eabi-gcc link driver and
arm-none-eabi-size for linking an object file and a static library into a
fully static ELF image with a link map.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .process_runner import ProcessRunner


@dataclass
class SizeInfo:
    """Application image size information."""

    text: int  # Code and read-only data in bytes
    data: int  # Initialized data
    bss: int   # Zero-initialized data

    @property
    def total_flash(self) -> int:
        """Bytes occupied in the raw image (text + data)."""
        return self.text + self.data

    @property
    def total_ram(self) -> int:
        """Bytes of RAM claimed at runtime (data + bss)."""
        return self.data + self.bss

    @staticmethod
    def parse(size_output: str) -> 'SizeInfo':
        """
        Parse `size -A` output.

        Sections are grouped by name prefix, so .text.startup counts
        towards text and .bss.heap towards bss.

        Args:
            size_output: Output from `arm-none-eabi-size -A` command

        Returns:
            SizeInfo object with parsed size data
        """
        text = 0
        data = 0
        bss = 0

        for line in size_output.split('\n'):
            parts = line.split()
            if len(parts) >= 2:
                section = parts[0]
                try:
                    size = int(parts[1])
                except ValueError:
                    continue
                if section.startswith(('.text', '.rodata', '.vector', '.isr_vector')):
                    text += size
                elif section.startswith('.data'):
                    data += size
                elif section.startswith('.bss'):
                    bss += size

        return SizeInfo(text=text, data=data, bss=bss)


@dataclass
class LinkResult:
    """Result of linking operation."""

    success: bool
    elf_path: Optional[Path]
    map_path: Optional[Path]
    stdout: str
    stderr: str
    returncode: int


class LinkerError(Exception):
    """Raised when linking cannot be attempted."""
    pass


class LinkerARM:
    """
    Wrapper for the ARM GCC link driver.

    Links with --static and -nostartfiles: the application brings its own
    entry point and the linker script decides the memory layout.
    """

    def __init__(
        self,
        gcc: Path,
        size_tool: Optional[Path] = None,
        extra_flags: Optional[List[str]] = None,
        runner: Optional[ProcessRunner] = None
    ):
        """
        Initialize linker.

        Args:
            gcc: Path to arm-none-eabi-gcc executable (used as link driver)
            size_tool: Path to arm-none-eabi-size (optional, for size reporting)
            extra_flags: Additional linker flags from appbin.ini
            runner: Process runner (default: new runner without timeout)
        """
        self.gcc = Path(gcc)
        self.size_tool = Path(size_tool) if size_tool else None
        self.extra_flags = list(extra_flags or [])
        self.runner = runner or ProcessRunner()

    def build_command(
        self,
        objects: List[Path],
        libraries: List[Path],
        linker_script: Path,
        output_elf: Path,
        map_file: Path
    ) -> List[str]:
        """Build the gcc link command. Objects always precede libraries."""
        cmd = [
            str(self.gcc),
            '--static',
            '-nostartfiles',
            f'-T{linker_script}',
            f'-Wl,-Map={map_file}',
        ]

        cmd.extend(self.extra_flags)
        cmd.extend(['-o', str(output_elf)])
        cmd.extend(str(obj) for obj in objects)
        cmd.extend(str(lib) for lib in libraries)

        return cmd

    def link(
        self,
        objects: List[Path],
        libraries: List[Path],
        linker_script: Path,
        output_elf: Path,
        map_file: Path,
        cwd: Optional[Path] = None
    ) -> LinkResult:
        """
        Link object files and static libraries into an ELF image.

        Args:
            objects: Object files to link
            libraries: Static library archives (.a), linked after the objects
            linker_script: Linker script describing the memory layout
            output_elf: Output .elf file path
            map_file: Output link map path
            cwd: Working directory for the link driver

        Returns:
            LinkResult with linking status

        Raises:
            LinkerError: If an input file does not exist
        """
        linker_script = Path(linker_script)
        output_elf = Path(output_elf)
        map_file = Path(map_file)

        for path in [*objects, *libraries]:
            if not Path(path).exists():
                raise LinkerError(f"Link input not found: {path}")
        if not linker_script.exists():
            raise LinkerError(f"Linker script not found: {linker_script}")

        output_elf.parent.mkdir(parents=True, exist_ok=True)

        cmd = self.build_command(
            [Path(p) for p in objects],
            [Path(p) for p in libraries],
            linker_script,
            output_elf,
            map_file
        )
        result = self.runner.run(cmd, cwd=cwd)

        if not result.success:
            return LinkResult(
                success=False,
                elf_path=None,
                map_path=map_file if map_file.exists() else None,
                stdout=result.stdout,
                stderr=result.stderr or 'Linking failed',
                returncode=result.returncode
            )

        return LinkResult(
            success=output_elf.exists(),
            elf_path=output_elf if output_elf.exists() else None,
            map_path=map_file if map_file.exists() else None,
            stdout=result.stdout,
            stderr=result.stderr if output_elf.exists() else f'Linker produced no image: {output_elf}',
            returncode=result.returncode if output_elf.exists() else 1
        )

    def size(self, elf_path: Path) -> Optional[SizeInfo]:
        """
        Get image size information.

        Args:
            elf_path: Path to .elf file

        Returns:
            SizeInfo object or None if the size tool is unavailable or fails
        """
        if self.size_tool is None:
            return None

        cmd = [
            str(self.size_tool),
            '-A',  # SysV format with per-section sizes
            str(elf_path)
        ]

        try:
            result = self.runner.run(cmd)
        except OSError:
            return None

        if result.success:
            return SizeInfo.parse(result.stdout)
        return None
