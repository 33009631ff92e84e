#!/usr/bin/env python3
"""Error taxonomy shared by the vw-varinfo processing modules."""

from __future__ import annotations


class VarinfoError(Exception):
    """Base class for every fatal vw-varinfo failure."""


class MalformedRecordError(VarinfoError, ValueError):
    pass


class AuditFormatError(VarinfoError, ValueError):
    pass


class UnsupportedOptionError(VarinfoError, ValueError):
    pass


class ExternalProcessError(VarinfoError, RuntimeError):
    def __init__(self, cmd: list[str], returncode: int, detail: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.detail = detail
        message = f"command failed (exit {returncode}): {' '.join(self.cmd)}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
