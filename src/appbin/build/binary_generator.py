"""Binary Generation Utilities.

This module turns a linked ELF image into the raw binary blob the kernel
loads, and installs that blob into the kernel's appbins directory.

Design:
    - objcopy -O binary drops headers and symbols, leaving a memory image
    - Installation copies with metadata (cp -a semantics for a regular file)
    - The install directory belongs to the kernel build and is never created here
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from .process_runner import ProcessRunner


class BinaryGeneratorError(Exception):
    """Raised when binary generation or installation fails."""

    def __init__(self, message: str, returncode: int = 1):
        super().__init__(message)
        self.returncode = returncode


class BinaryGenerator:
    """Handles raw binary generation from ELF images.

    This class provides:
    - ELF to BIN conversion using objcopy
    - Installation of the BIN into the appbins directory
    """

    def __init__(
        self,
        objcopy: Path,
        runner: Optional[ProcessRunner] = None,
        show_progress: bool = True
    ):
        """Initialize binary generator.

        Args:
            objcopy: Path to arm-none-eabi-objcopy
            runner: Process runner (default: new runner without timeout)
            show_progress: Whether to print generation progress
        """
        self.objcopy = Path(objcopy)
        self.runner = runner or ProcessRunner()
        self.show_progress = show_progress

    def generate_bin(self, elf_path: Path, output_bin: Path, cwd: Optional[Path] = None) -> Path:
        """Generate a raw binary from an ELF image.

        Args:
            elf_path: Path to the .elf image
            output_bin: Path for output .bin file
            cwd: Working directory for objcopy

        Returns:
            Path to generated .bin

        Raises:
            BinaryGeneratorError: If conversion fails
        """
        if not elf_path.exists():
            raise BinaryGeneratorError(f"ELF file not found: {elf_path}")

        cmd = [
            str(self.objcopy),
            "-O", "binary",
            str(elf_path),
            str(output_bin)
        ]

        result = self.runner.run(cmd, cwd=cwd)

        if not result.success:
            error_msg = f"objcopy failed for {elf_path.name}\n"
            error_msg += f"stderr: {result.stderr}\n"
            error_msg += f"stdout: {result.stdout}"
            raise BinaryGeneratorError(error_msg, result.returncode)

        if not output_bin.exists():
            raise BinaryGeneratorError(f"{output_bin.name} was not created: {output_bin}")

        if self.show_progress:
            size = output_bin.stat().st_size
            print(f"✓ Created {output_bin.name}: {size:,} bytes ({size / 1024:.2f} KB)")

        return output_bin

    def install(self, bin_path: Path, install_dir: Path) -> Path:
        """Copy a raw binary into the appbins directory.

        Args:
            bin_path: Path to the .bin to install
            install_dir: Existing destination directory

        Returns:
            Path of the installed copy

        Raises:
            BinaryGeneratorError: If the directory is missing or the copy fails
        """
        if not bin_path.exists():
            raise BinaryGeneratorError(f"Binary not found: {bin_path}")

        if not install_dir.is_dir():
            raise BinaryGeneratorError(f"Install directory does not exist: {install_dir}")

        destination = install_dir / bin_path.name
        logging.info(f"+ cp -a {bin_path} {install_dir}/")

        try:
            shutil.copy2(bin_path, destination)
        except OSError as e:
            raise BinaryGeneratorError(f"Failed to install {bin_path.name} to {install_dir}: {e}") from e

        if self.show_progress:
            print(f"✓ Installed {destination}")

        return destination
