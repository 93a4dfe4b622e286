"""Cross Toolchain Binary Finder.

This module locates the GNU cross toolchain binaries used by the pipeline.

Binary Naming Conventions:
    - ARM bare metal: arm-none-eabi-gcc, arm-none-eabi-objcopy, arm-none-eabi-size
    - Any other GNU prefix works the same way ({prefix}gcc, {prefix}objcopy, ...)

Search Order:
    1. The configured toolchain bin directory, if one is given
    2. The executable search path (PATH)
"""

import shutil
from pathlib import Path
from typing import Dict, Optional


class ToolchainError(Exception):
    """Raised when a required toolchain binary is not found."""

    pass


class Toolchain:
    """Resolves cross toolchain binaries by prefix."""

    REQUIRED_TOOLS = ("gcc", "objcopy")
    OPTIONAL_TOOLS = ("size",)

    def __init__(self, prefix: str = "arm-none-eabi-", bin_dir: Optional[Path] = None):
        """Initialize the toolchain.

        Args:
            prefix: Binary name prefix including the trailing dash
            bin_dir: Directory holding the binaries (default: search PATH)
        """
        self.prefix = prefix
        self.bin_dir = Path(bin_dir) if bin_dir else None

    def find_tool(self, tool: str) -> Optional[Path]:
        """Find a single toolchain binary.

        Args:
            tool: Tool name without prefix (e.g., "gcc")

        Returns:
            Path to the binary, or None if not found
        """
        name = f"{self.prefix}{tool}"

        if self.bin_dir is not None:
            found = shutil.which(name, path=str(self.bin_dir))
        else:
            found = shutil.which(name)

        return Path(found) if found else None

    def get_tool(self, tool: str) -> Path:
        """Get a required toolchain binary.

        Args:
            tool: Tool name without prefix (e.g., "objcopy")

        Returns:
            Path to the binary

        Raises:
            ToolchainError: If the binary cannot be found
        """
        path = self.find_tool(tool)
        if path is None:
            where = str(self.bin_dir) if self.bin_dir else "PATH"
            raise ToolchainError(
                f"{self.prefix}{tool} not found in {where}. "
                + "Ensure the cross toolchain is installed."
            )
        return path

    def verify(self) -> Dict[str, Path]:
        """Resolve all required tools at once.

        Returns:
            Dictionary mapping tool name to binary path

        Raises:
            ToolchainError: Listing every missing required tool
        """
        tools = {}
        missing = []
        for tool in self.REQUIRED_TOOLS:
            path = self.find_tool(tool)
            if path is None:
                missing.append(f"{self.prefix}{tool}")
            else:
                tools[tool] = path

        if missing:
            where = str(self.bin_dir) if self.bin_dir else "PATH"
            raise ToolchainError(
                f"Toolchain binaries not found in {where}: {', '.join(missing)}"
            )

        for tool in self.OPTIONAL_TOOLS:
            path = self.find_tool(tool)
            if path is not None:
                tools[tool] = path

        return tools
