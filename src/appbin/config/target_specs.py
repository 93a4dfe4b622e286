"""
Target specifications for ARM Cortex-M cores.

This module centralizes what each supported core can do, so the compile
flags derived from appbin.ini can be validated before any tool runs.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class TargetSpec:
    """Capabilities of an ARM Cortex-M core."""

    cpu: str
    has_fpu: bool  # Single-precision FPU available (hard float ABI allowed)

    def float_flag(self, float_abi: str) -> str:
        """
        Get the compiler flag for a float ABI on this core.

        Args:
            float_abi: 'hard' or 'soft'

        Returns:
            Compiler flag (e.g., '-mhard-float')
        """
        if float_abi == "hard":
            return "-mhard-float"
        return "-msoft-float"


CORTEX_M_SPECS = {
    "cortex-m0": TargetSpec(cpu="cortex-m0", has_fpu=False),
    "cortex-m0plus": TargetSpec(cpu="cortex-m0plus", has_fpu=False),
    "cortex-m3": TargetSpec(cpu="cortex-m3", has_fpu=False),
    "cortex-m4": TargetSpec(cpu="cortex-m4", has_fpu=True),
    "cortex-m7": TargetSpec(cpu="cortex-m7", has_fpu=True),
    "cortex-m33": TargetSpec(cpu="cortex-m33", has_fpu=True),
}

FLOAT_ABIS = ("hard", "soft")


def get_target_spec(cpu: str) -> Optional[TargetSpec]:
    """
    Get target specifications by CPU name.

    Args:
        cpu: CPU identifier as passed to -mcpu (e.g., 'cortex-m4')

    Returns:
        TargetSpec if found, None otherwise
    """
    return CORTEX_M_SPECS.get(cpu.lower())
