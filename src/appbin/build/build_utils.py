"""Build utilities for appbin.

This module provides helpers for printing build output.
"""

from typing import Optional

from .linker import SizeInfo


class SizeInfoPrinter:
    """Utility class for printing application size information."""

    @staticmethod
    def print_size_info(
        size_info: Optional[SizeInfo],
        elf_size: Optional[int] = None,
        bin_size: Optional[int] = None
    ) -> None:
        """
        Print application size information in a formatted display.

        Args:
            size_info: Section sizes from the size tool (None to skip sections)
            elf_size: Size of the ELF image file in bytes
            bin_size: Size of the raw binary in bytes
        """
        if size_info:
            print("Application Size:")
            print(f"  Text:     {size_info.text:6d} bytes")
            print(f"  Data:     {size_info.data:6d} bytes")
            print(f"  BSS:      {size_info.bss:6d} bytes")
            print(f"  Flash:    {size_info.total_flash:6d} bytes")
            print(f"  RAM:      {size_info.total_ram:6d} bytes")

        if bin_size is not None:
            print(f"  Binary:   {bin_size:6d} bytes", end="")
            if elf_size:
                print(f" (ELF image {elf_size} bytes)")
            else:
                print()
