"""
Command-line interface for appbin.

This module provides the `appbin` CLI tool for building userspace
applications into raw binaries for the kernel's appbins directory.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from appbin import __version__
from appbin.build import FirmwarePipeline, SizeInfoPrinter, clean_intermediates
from appbin.cli_utils import ErrorFormatter, PathValidator, setup_logging
from appbin.config import PipelineConfigError, load_config


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    config: Optional[Path] = None
    install_dir: Optional[Path] = None
    in_place: bool = False
    keep_intermediates: bool = False
    timeout: Optional[float] = None
    verbose: bool = False


@dataclass
class CleanArgs:
    """Arguments for the clean command."""

    project_dir: Path
    config: Optional[Path] = None
    verbose: bool = False


def build_command(args: BuildArgs) -> None:
    """Build an application and install it into appbins.

    Examples:
        appbin build                         # Build in the current directory
        appbin build c-userspace/c-output    # Build a specific project
        appbin build --in-place              # Leave .o/.elf/.map/.bin next to the source
        appbin build --timeout 120           # Kill a tool that hangs
        appbin build --verbose               # Echo every tool command
    """
    setup_logging(args.verbose)

    try:
        config = load_config(args.project_dir, args.config)

        if args.install_dir is not None:
            config.install_dir = str(args.install_dir.resolve())
        if args.in_place:
            config.mode = "in-place"
        if args.keep_intermediates:
            config.keep_intermediates = True
        if args.timeout is not None:
            config.timeout = args.timeout
        config.validate()

        if args.verbose:
            print(f"Building project: {args.project_dir}")
            print(f"Application: {config.name} ({config.cpu}, {config.float_abi} float)")
            print(f"Mode: {config.mode}")
            print()
        else:
            print(f"Building {config.name}...")

        pipeline = FirmwarePipeline(verbose=args.verbose)
        result = pipeline.build(args.project_dir, config)

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print()
            print(f"Binary: {result.bin_path}")
            if result.map_path:
                print(f"Link map: {result.map_path}")
            print()
            SizeInfoPrinter.print_size_info(result.size_info, result.elf_size, result.bin_size)
            print(f"Build time: {result.build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error(
                f"Build failed at {result.failed_stage} stage!", result.message
            )
            sys.exit(result.returncode or 1)

    except PipelineConfigError as e:
        ErrorFormatter.print_error("Error: Invalid configuration", str(e))
        sys.exit(1)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def clean_command(args: CleanArgs) -> None:
    """Remove intermediates left by in-place builds.

    Examples:
        appbin clean                         # Clean the current directory
        appbin clean c-userspace/c-output    # Clean a specific project
    """
    setup_logging(args.verbose)

    try:
        config = load_config(args.project_dir, args.config)
        removed = clean_intermediates(args.project_dir, config.intermediate_names)

        if removed:
            for path in removed:
                print(f"Removed {path.name}")
        else:
            print("Nothing to clean")
        sys.exit(0)

    except PipelineConfigError as e:
        ErrorFormatter.print_error("Error: Invalid configuration", str(e))
        sys.exit(1)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main() -> None:
    """appbin - build userspace applications for the kernel."""
    parser = argparse.ArgumentParser(
        prog="appbin",
        description="appbin - build userspace applications into kernel app binaries",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"appbin {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Compile, link and install an application binary",
    )
    build_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    build_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: appbin.ini in the project directory)",
    )
    build_parser.add_argument(
        "--install-dir",
        type=Path,
        default=None,
        help="Existing directory that receives the binary (default: ../../kernel/appbins)",
    )
    build_parser.add_argument(
        "--in-place",
        action="store_true",
        help="Write intermediates next to the source instead of a private temp directory",
    )
    build_parser.add_argument(
        "--keep-intermediates",
        action="store_true",
        help="Copy .o/.elf/.map/.bin into the project directory after an isolated build",
    )
    build_parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Per-tool timeout in seconds (default: wait forever)",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )

    # Clean command
    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove intermediates left by in-place builds",
    )
    clean_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    clean_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: appbin.ini in the project directory)",
    )
    clean_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    # Parse arguments
    parsed_args = parser.parse_args()

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    # Validate project directory exists
    PathValidator.validate_project_dir(parsed_args.project_dir)

    # Execute command
    if parsed_args.command == "build":
        build_args = BuildArgs(
            project_dir=parsed_args.project_dir,
            config=parsed_args.config,
            install_dir=parsed_args.install_dir,
            in_place=parsed_args.in_place,
            keep_intermediates=parsed_args.keep_intermediates,
            timeout=parsed_args.timeout,
            verbose=parsed_args.verbose,
        )
        build_command(build_args)
    elif parsed_args.command == "clean":
        clean_args = CleanArgs(
            project_dir=parsed_args.project_dir,
            config=parsed_args.config,
            verbose=parsed_args.verbose,
        )
        clean_command(clean_args)


if __name__ == "__main__":
    main()
