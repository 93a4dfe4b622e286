"""Tool Process Runner.

This module runs external toolchain commands and collects their output.

Design:
    - Every command is echoed through logging before it runs ("+ cmd")
    - Without a timeout the runner waits for the tool indefinitely
    - With a timeout the tool's whole process tree is terminated, then killed
    - A timed-out tool reports exit code 124
    - A tool killed by a signal reports 128 + signal number, like the shell
    - Warnings from a successful tool are logged at WARNING level
"""

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import psutil

TIMEOUT_EXIT_CODE = 124


@dataclass
class ToolResult:
    """Outcome of one external tool invocation."""

    cmd: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    duration: float = field(default=0.0, compare=False)

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def command_line(self) -> str:
        return shlex.join(self.cmd)


def kill_process_tree(pid: int, grace: float = 3.0) -> int:
    """Terminate a process and all of its children.

    Children are signalled before parents. Processes that survive the grace
    period are force killed.

    Args:
        pid: Root process ID
        grace: Seconds to wait for graceful termination

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        procs = root.children(recursive=True)
        procs.reverse()
        procs.append(root)
    except psutil.NoSuchProcess:
        return 0

    signalled: List[psutil.Process] = []
    for proc in procs:
        try:
            proc.terminate()
            signalled.append(proc)
            logging.debug(f"Terminated process {proc.pid}")
        except psutil.NoSuchProcess:
            pass  # Already dead

    _gone, alive = psutil.wait_procs(signalled, timeout=grace)

    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)


class ProcessRunner:
    """Runs toolchain commands one at a time."""

    def __init__(self, timeout: Optional[float] = None, verbose: bool = False):
        """Initialize the runner.

        Args:
            timeout: Per-command timeout in seconds (None waits forever)
            verbose: Echo tool output even when the tool succeeds
        """
        self.timeout = timeout
        self.verbose = verbose

    def run(self, cmd: Sequence[str], cwd: Optional[Path] = None) -> ToolResult:
        """Run a command to completion.

        Args:
            cmd: Command and arguments
            cwd: Working directory for the command

        Returns:
            ToolResult with exit code and captured output

        Raises:
            FileNotFoundError: If the executable does not exist
        """
        cmd = [str(part) for part in cmd]
        logging.info(f"+ {shlex.join(cmd)}")

        start = time.time()
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logging.error(f"{Path(cmd[0]).name} timed out after {self.timeout}s, killing process tree")
            kill_process_tree(proc.pid)
            stdout, stderr = proc.communicate()
            return ToolResult(
                cmd=cmd,
                returncode=TIMEOUT_EXIT_CODE,
                stdout=stdout or "",
                stderr=(stderr or "") + f"\n{Path(cmd[0]).name} timed out after {self.timeout}s",
                timed_out=True,
                duration=time.time() - start,
            )
        except KeyboardInterrupt:
            kill_process_tree(proc.pid)
            raise

        # Popen reports death by signal N as -N
        returncode = proc.returncode
        if returncode < 0:
            returncode = 128 - returncode

        result = ToolResult(
            cmd=cmd,
            returncode=returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            duration=time.time() - start,
        )

        if result.success:
            if self.verbose and result.stdout.strip():
                logging.info(result.stdout.rstrip())
            if result.stderr.strip():
                logging.warning(result.stderr.rstrip())
        else:
            logging.debug(f"{Path(cmd[0]).name} exited with code {result.returncode}")

        return result
