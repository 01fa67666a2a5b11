"""Low-level command execution with a wall-clock timeout.

Runs one external command with stdin closed and both output streams captured.
stdout and stderr are drained by two reader threads started right after spawn:
a child that fills one pipe while the parent blocks on the other would
otherwise deadlock. The child runs in its own session so a timeout kills the
whole process group, including anything it spawned.
"""
from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from enum import Enum
from typing import IO, List, Mapping, Optional, Sequence, Union

from common.logging_utils import Timer, extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class CmdErrorKind(Enum):
    """Classification of a failed command."""

    TIMEOUT = "timeout"
    OUTPUT_IN_STDERR = "output in stderr"
    EMPTY_STDOUT = "empty stdout"
    NONZERO_STATUS = "nonzero status"
    IO = "io error"


class CommandError(Exception):
    """A command failed; ``kind`` tells how."""

    def __init__(self, kind: CmdErrorKind, detail: str = "", returncode: Optional[int] = None):
        self.kind = kind
        self.detail = detail
        self.returncode = returncode
        message = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(message)


class _StreamReader(threading.Thread):
    """Reads one pipe to EOF into memory."""

    def __init__(self, stream: IO[bytes], label: str):
        super().__init__(name=f"cmd-{label}", daemon=True)
        self._stream = stream
        self._chunks: List[bytes] = []
        self.error: Optional[OSError] = None

    def run(self) -> None:
        try:
            for chunk in iter(lambda: self._stream.read(65536), b""):
                self._chunks.append(chunk)
        except OSError as exc:
            self.error = exc
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


def _kill_group(proc: subprocess.Popen) -> None:
    """Kill the child's process group (or the child alone) and reap it."""
    try:
        if hasattr(os, "killpg"):
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except (ProcessLookupError, PermissionError):
        # Group already gone; make sure the direct child is dead
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    proc.wait()


def execute(
    argv: Sequence[str],
    env: Mapping[str, str],
    cwd: PathLike,
    timeout: float,
) -> str:
    """Run a command and return its trimmed stdout.

    Args:
        argv: Non-empty command and arguments.
        env: Extra environment variables, added over the inherited environment.
        cwd: Working directory for the child.
        timeout: Wall-clock bound in seconds for the whole invocation.

    Returns:
        Trimmed stdout of a successful command.

    Raises:
        CommandError: On timeout, output in stderr, empty stdout, nonzero status,
            or an I/O failure (spawn or read).
        ValueError: If ``argv`` is empty.
    """
    if not argv:
        raise ValueError("command should not be empty")

    logger.debug("Evaluating command: %s", " ".join(argv))
    merged_env = dict(os.environ)
    merged_env.update(env)

    with Timer() as t:
        try:
            proc = subprocess.Popen(  # noqa: S603
                list(argv),
                cwd=os.fspath(cwd),
                env=merged_env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            raise CommandError(CmdErrorKind.IO, f"failed to spawn {argv[0]}: {exc}") from exc

        out_reader = _StreamReader(proc.stdout, "stdout")
        err_reader = _StreamReader(proc.stderr, "stderr")
        out_reader.start()
        err_reader.start()

        deadline = time.monotonic() + timeout
        timed_out = False
        try:
            proc.wait(timeout=max(0.0, deadline - time.monotonic()))
        except subprocess.TimeoutExpired:
            timed_out = True

        if not timed_out:
            # A background grandchild may still hold the pipes open
            for reader in (out_reader, err_reader):
                reader.join(max(0.0, deadline - time.monotonic()))
            timed_out = out_reader.is_alive() or err_reader.is_alive()

        if timed_out:
            _kill_group(proc)
            out_reader.join(1.0)
            err_reader.join(1.0)
            logger.warning("Command timed out after %ss: %s", timeout, " ".join(argv))
            raise CommandError(CmdErrorKind.TIMEOUT, f"exceeded {timeout}s")

    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="command_exit",
                component="cmd",
                outcome=proc.returncode,
                duration_ms=t.duration_ms(),
            ),
        )

    for reader in (out_reader, err_reader):
        if reader.error is not None:
            raise CommandError(CmdErrorKind.IO, f"failed to read output: {reader.error}") from reader.error

    out = out_reader.text()
    err = err_reader.text()
    code = proc.returncode
    logger.debug("%s", out)

    if err:
        logger.warning("%s", err.rstrip())
        raise CommandError(CmdErrorKind.OUTPUT_IN_STDERR, err.strip()[:200], returncode=code)

    if not out.strip():
        logger.warning("No output in stdout")
        raise CommandError(CmdErrorKind.EMPTY_STDOUT, returncode=code)

    if code != 0:
        logger.warning("Exited with nonzero status: %s", code)
        raise CommandError(CmdErrorKind.NONZERO_STATUS, f"exit code {code}", returncode=code)

    return out.strip()
