"""Build workspace management.

Intermediate files (.o, .elf, .map, .bin) live either in a private temporary
directory per build (isolated mode) or directly in the project directory
under fixed names (in-place mode). Isolated workspaces are removed on every
exit path, so two builds of the same project never share intermediates.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional


class BuildWorkspace:
    """Context manager providing the directory that receives intermediates.

    Example usage:
        with BuildWorkspace(project_dir, isolated=True) as build_dir:
            compile_to(build_dir / "test.o")
    """

    def __init__(self, project_dir: Path, isolated: bool = True, prefix: str = "appbin-"):
        """
        Initialize workspace.

        Args:
            project_dir: Project directory (used directly in in-place mode)
            isolated: Create a private temporary directory for this build
            prefix: Temporary directory name prefix
        """
        self.project_dir = Path(project_dir)
        self.isolated = isolated
        self.prefix = prefix
        self._tmp: Optional[tempfile.TemporaryDirectory] = None
        self.build_dir: Optional[Path] = None

    def __enter__(self) -> Path:
        if self.isolated:
            self._tmp = tempfile.TemporaryDirectory(prefix=self.prefix)
            self.build_dir = Path(self._tmp.name)
            logging.info(f"Using isolated build directory {self.build_dir}")
        else:
            self.build_dir = self.project_dir
        return self.build_dir

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._tmp is not None:
            logging.debug(f"Removing build directory {self.build_dir}")
            self._tmp.cleanup()
            self._tmp = None
        self.build_dir = None

    def export(self, names: List[str]) -> List[Path]:
        """
        Copy intermediates from an isolated workspace into the project directory.

        Args:
            names: File names inside the build directory

        Returns:
            Paths of the copies in the project directory (missing files skipped)
        """
        if self.build_dir is None or self.build_dir == self.project_dir:
            return [self.project_dir / name for name in names if (self.project_dir / name).exists()]

        exported = []
        for name in names:
            src = self.build_dir / name
            if src.exists():
                dst = self.project_dir / name
                shutil.copy2(src, dst)
                exported.append(dst)
        return exported


def clean_intermediates(project_dir: Path, names: List[str]) -> List[Path]:
    """
    Remove fixed-name intermediates left by in-place builds.

    Args:
        project_dir: Project directory
        names: File names to remove

    Returns:
        Paths that were removed
    """
    removed = []
    for name in names:
        path = Path(project_dir) / name
        if path.is_file():
            path.unlink()
            removed.append(path)
            logging.info(f"Removed {path}")
    return removed
