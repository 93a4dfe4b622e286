"""
Build system components for appbin.

This module provides the pipeline implementation:
- Compilation (arm-none-eabi-gcc -c)
- Linking (arm-none-eabi-gcc --static -nostartfiles)
- Binary extraction and installation (arm-none-eabi-objcopy -O binary)
- Build orchestration
"""

from .binary_generator import BinaryGenerator, BinaryGeneratorError
from .build_utils import SizeInfoPrinter
from .compiler import CompileResult, CompilerARM, CompilerError
from .linker import LinkerARM, LinkerError, LinkResult, SizeInfo
from .orchestrator import (
    BuildOrchestratorError,
    BuildResult,
    FirmwarePipeline,
)
from .process_runner import ProcessRunner, ToolResult
from .workspace import BuildWorkspace, clean_intermediates

__all__ = [
    'BinaryGenerator',
    'BinaryGeneratorError',
    'SizeInfoPrinter',
    'CompileResult',
    'CompilerARM',
    'CompilerError',
    'LinkerARM',
    'LinkerError',
    'LinkResult',
    'SizeInfo',
    'BuildOrchestratorError',
    'BuildResult',
    'FirmwarePipeline',
    'ProcessRunner',
    'ToolResult',
    'BuildWorkspace',
    'clean_intermediates',
]
