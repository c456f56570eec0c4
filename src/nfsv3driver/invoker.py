"""Execution of external mount helpers."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Protocol, Sequence

from .errors import InvocationError

logger = logging.getLogger(__name__)


class Invoker(Protocol):
    def invoke(self, command: str, args: Sequence[str], timeout: float | None = None) -> bytes:
        ...


class SubprocessInvoker:
    """Run a helper and return its combined stdout/stderr.

    Raises ``InvocationError`` when the helper cannot be started, times out,
    or exits with a non-zero status.
    """

    def invoke(self, command: str, args: Sequence[str], timeout: float | None = None) -> bytes:
        cmd = [command, *args]
        logger.debug("exec %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise InvocationError(command, args, None, reason="command not found") from exc
        except OSError as exc:
            raise InvocationError(command, args, None, reason=str(exc)) from exc
        except subprocess.TimeoutExpired as exc:
            raise InvocationError(
                command, args, None, exc.output or b"", reason=f"timed out after {timeout}s"
            ) from exc
        if result.returncode != 0:
            raise InvocationError(command, args, result.returncode, result.stdout or b"")
        return result.stdout or b""
