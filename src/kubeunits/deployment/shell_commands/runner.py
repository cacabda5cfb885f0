"""Command runner for executing external commands.

This module provides the process execution used by every specialized
command module. Output of unit commands is streamed live to the parent's
stdout/stderr while being captured so that a failure can report the
child's stderr.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import IO, TextIO

from loguru import logger

from kubeunits.errors import CommandError

from .types import CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    All specialized command modules (Helm, kubectl, bash) use this runner
    for actual command execution.

    Attributes:
        kubeconfig: Exported as ``KUBECONFIG`` to every spawned process
        dry_run: When True, ``run_piped`` never spawns a process
    """

    def __init__(
        self,
        *,
        kubeconfig: str | None = None,
        dry_run: bool = False,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the command runner.

        Args:
            kubeconfig: Optional kubeconfig path passed through to commands
            dry_run: Log commands instead of running them
            cwd: Working directory (defaults to the current directory)
        """
        self.kubeconfig = kubeconfig
        self.dry_run = dry_run
        self.cwd = cwd

    def _env(self) -> dict[str, str]:
        env = os.environ.copy()
        if self.kubeconfig:
            env["KUBECONFIG"] = self.kubeconfig
        return env

    def run(self, cmd: Sequence[str]) -> CommandResult:
        """Execute a command and capture its output.

        This is used for queries whose output is parsed (e.g. ``helm list``)
        and is not affected by ``dry_run``; callers decide whether to query.

        Args:
            cmd: Command and arguments as a sequence

        Returns:
            CommandResult with success status, output, and return code

        Raises:
            CommandError: If the executable cannot be found
        """
        logger.debug(f"Querying {shlex.join(cmd)}")
        try:
            result = subprocess.run(
                list(cmd),
                cwd=self.cwd,
                env=self._env(),
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(f"Command not found: {cmd[0]}", command=cmd) from e

        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def run_piped(
        self,
        cmd: Sequence[str],
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> CommandResult:
        """Execute a command, echoing its output live while capturing it.

        stdout and stderr are drained by two concurrent readers so that a
        child blocked on one full pipe never stalls the other. Each reader
        owns its buffer and hands the text back through its future.

        Args:
            cmd: Command and arguments as a sequence
            stdout: Stream receiving the child's stdout (default: sys.stdout)
            stderr: Stream receiving the child's stderr (default: sys.stderr)

        Returns:
            Successful CommandResult carrying the captured stderr; captured
            stdout is discarded

        Raises:
            CommandError: If the executable cannot be found or the command
                exits with a non-zero status. The error message is the
                captured stderr.
        """
        logger.debug(f"Running command {shlex.join(cmd)}")

        if self.dry_run:
            return CommandResult(success=True)

        try:
            process = subprocess.Popen(
                list(cmd),
                cwd=self.cwd,
                env=self._env(),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise CommandError(f"Command not found: {cmd[0]}", command=cmd) from e

        if process.stdout is None or process.stderr is None:
            process.kill()
            raise CommandError(f"Could not read output of {cmd[0]}", command=cmd)

        with ThreadPoolExecutor(max_workers=2) as pool:
            stdout_future = pool.submit(
                _drain, process.stdout, stdout if stdout is not None else sys.stdout
            )
            stderr_future = pool.submit(
                _drain, process.stderr, stderr if stderr is not None else sys.stderr
            )
            stdout_future.result()
            stderr_text = stderr_future.result()

        returncode = process.wait()
        if returncode != 0:
            message = stderr_text.rstrip("\n") or (
                f"{shlex.join(cmd)} exited with status {returncode}"
            )
            raise CommandError(message, command=cmd, returncode=returncode)

        return CommandResult(success=True, stderr=stderr_text, returncode=0)


def _drain(stream: IO[str], sink: TextIO) -> str:
    """Copy ``stream`` line by line to ``sink`` and return everything read."""
    buffer: list[str] = []
    with stream:
        for line in iter(stream.readline, ""):
            line = line.rstrip("\n")
            print(line, file=sink, flush=True)
            buffer.append(line + "\n")
    return "".join(buffer)
