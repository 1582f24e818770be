"""
Command execution for lvm2 tools.

Every tool ends in a single call to `Executor.execute()`. The real
implementation shells out with `subprocess.run`; tests and dry runs swap in
`RecordingExecutor`.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Return codes for runs that never produced an exit status.
RETURNCODE_SPAWN_FAILED = -1
RETURNCODE_TIMEOUT = -2


def format_command(program: str, args: Sequence[str]) -> str:
    return shlex.join([program, *args])


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one external command.

    Attributes:
        success: Whether the command completed successfully
        stdout: Captured standard output (surrounding whitespace stripped)
        stderr: Captured standard error (surrounding whitespace stripped)
        returncode: Exit status, or a negative sentinel if none was produced
        command: The exact command line that was run
        argv: The same command line as a token tuple
    """

    success: bool
    stdout: str
    stderr: str
    returncode: int
    command: str
    argv: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "returnCode": self.returncode,
            "command": self.command,
        }


class Executor(ABC):
    """Runs an external program and reports its outcome.

    Ordinary command failure (non-zero exit) is a normal result with
    success=False, never an exception.
    """

    @abstractmethod
    def execute(
        self,
        program: str,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ExecutionResult:
        """Run `program` with `args`.

        Args:
            program: Program name (e.g. "lvcreate")
            args: Ordered argument vector
            timeout: Deadline in seconds for this call; None uses the
                executor's own default
            env: Extra environment variables for the child process

        Returns:
            ExecutionResult
        """


class SubprocessExecutor(Executor):
    """Executor backed by `subprocess.run`."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Default deadline in seconds; None waits indefinitely
        """
        self.timeout = timeout

    def execute(
        self,
        program: str,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ExecutionResult:
        argv = (program, *args)
        command = format_command(program, args)
        deadline = timeout if timeout is not None else self.timeout
        child_env = {**os.environ, **env} if env else None

        logger.info("Running: %s", command)
        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                check=False,
                timeout=deadline,
                env=child_env,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", deadline, command)
            return ExecutionResult(
                success=False,
                stdout="",
                stderr=f"Command timed out after {deadline} seconds",
                returncode=RETURNCODE_TIMEOUT,
                command=command,
                argv=argv,
            )
        except OSError as e:
            logger.warning("Failed to start %s: %s", program, e)
            return ExecutionResult(
                success=False,
                stdout="",
                stderr=str(e),
                returncode=RETURNCODE_SPAWN_FAILED,
                command=command,
                argv=argv,
            )

        if result.returncode != 0:
            logger.warning("Command failed (rc=%d): %s", result.returncode, command)

        return ExecutionResult(
            success=result.returncode == 0,
            stdout=(result.stdout or "").strip(),
            stderr=(result.stderr or "").strip(),
            returncode=result.returncode,
            command=command,
            argv=argv,
        )


@dataclass
class Invocation:
    """One call recorded by RecordingExecutor."""

    program: str
    args: List[str]
    timeout: Optional[float] = None
    env: Optional[Dict[str, str]] = None

    @property
    def command(self) -> str:
        return format_command(self.program, self.args)


@dataclass
class RecordingExecutor(Executor):
    """Executor double that records calls and returns scripted results.

    Lookup order for each call: a result registered for the exact command
    line via `script()`, then the next result queued with `enqueue()`, then
    a default success whose stdout names the program.
    """

    calls: List[Invocation] = field(default_factory=list)
    _scripted: Dict[str, ExecutionResult] = field(default_factory=dict)
    _queue: Deque[ExecutionResult] = field(default_factory=deque)

    def script(self, command: str, result: ExecutionResult) -> None:
        self._scripted[command] = result

    def enqueue(self, *results: ExecutionResult) -> None:
        self._queue.extend(results)

    @property
    def commands(self) -> List[str]:
        return [call.command for call in self.calls]

    def execute(
        self,
        program: str,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ExecutionResult:
        argv = (program, *args)
        command = format_command(program, args)
        self.calls.append(Invocation(program, list(args), timeout, dict(env) if env else None))

        if command in self._scripted:
            template = self._scripted[command]
        elif self._queue:
            template = self._queue.popleft()
        else:
            template = success_result(f"{program} executed successfully")
        return replace(template, command=command, argv=argv)


def success_result(stdout: str = "") -> ExecutionResult:
    return ExecutionResult(success=True, stdout=stdout, stderr="", returncode=0, command="")


def failure_result(stderr: str = "Command failed", returncode: int = 1) -> ExecutionResult:
    return ExecutionResult(success=False, stdout="", stderr=stderr, returncode=returncode, command="")
