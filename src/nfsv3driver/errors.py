"""Errors raised while negotiating options or running mount helpers."""

from __future__ import annotations

from typing import Iterable, Sequence


class NegotiationError(ValueError):
    label = "Invalid options"

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = tuple(keys)
        super().__init__(self.keys)

    def __str__(self) -> str:
        return f"{self.label} : {', '.join(self.keys)}"


class UnsupportedOptionsError(NegotiationError):
    label = "Not allowed options"


class MissingMandatoryOptionsError(NegotiationError):
    label = "Missing mandatory options"


class InvocationError(RuntimeError):
    def __init__(
        self,
        command: str,
        args: Sequence[str],
        returncode: int | None,
        output: bytes = b"",
        reason: str | None = None,
    ) -> None:
        self.command = command
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        self.reason = reason
        super().__init__(command, returncode)

    def __str__(self) -> str:
        if self.reason:
            return f"{self.command}: {self.reason}"
        detail = self.output.decode("utf-8", errors="replace").strip()
        message = f"{self.command} exited with status {self.returncode}"
        if detail:
            message = f"{message}: {detail}"
        return message
