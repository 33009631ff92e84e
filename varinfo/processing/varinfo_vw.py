#!/usr/bin/env python3
"""Run the external trainer/auditor and own the transient run artifacts.

The pipeline only depends on two capabilities::

    trainer.train(corpus_path, options) -> model_path
    auditor.audit(model_path, probe_path) -> lines

``VwTrainer`` and ``VwAuditor`` implement them by shelling out to ``vw``.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Protocol

from varinfo_errors import ExternalProcessError
from varinfo_record_parser import CORPUS_ENCODING_ERRORS

DEFAULT_VW = "vw"
VW_ENV = "VW_VARINFO_VW"
STDERR_TAIL_LINES = 5


class Trainer(Protocol):
    def train(self, corpus_path: Path, options: list[str]) -> Path: ...


class Auditor(Protocol):
    def audit(self, model_path: Path, probe_path: Path) -> list[str]: ...


class RunWorkspace:
    """Scratch directory for the probe, model, readable model and audit capture.

    Removed on exit unless ``keep`` is set, in which case the paths are listed
    on stderr instead.
    """

    def __init__(self, keep: bool = False, parent: str | None = None) -> None:
        self.keep = keep
        self.parent = parent
        self.root: Path | None = None

    def __enter__(self) -> "RunWorkspace":
        self.root = Path(tempfile.mkdtemp(prefix="vw-varinfo-", dir=self.parent))
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.root is None:
            return
        if self.keep:
            print(f"vw-varinfo: keeping temporary files in {self.root}", file=sys.stderr)
            for path in sorted(self.root.iterdir()):
                print(f"  {path}", file=sys.stderr)
        else:
            shutil.rmtree(self.root, ignore_errors=True)

    def _path(self, name: str) -> Path:
        if self.root is None:
            raise RuntimeError("workspace is not open")
        return self.root / name

    @property
    def probe_path(self) -> Path:
        return self._path("probe.dat")

    @property
    def model_path(self) -> Path:
        return self._path("model.vw")

    @property
    def readable_model_path(self) -> Path:
        return self._path("model.readable.txt")

    @property
    def audit_path(self) -> Path:
        return self._path("audit.txt")


def resolve_vw(cli: str = "", configured: str = "") -> str:
    """Command line, then $VW_VARINFO_VW, then the config file, then plain 'vw'."""
    return cli or os.environ.get(VW_ENV, "") or configured or DEFAULT_VW


def _run(cmd: list[str], verbose: bool) -> subprocess.CompletedProcess:
    if verbose:
        print(f"vw-varinfo: running: {' '.join(cmd)}", file=sys.stderr)
    try:
        completed = subprocess.run(
            cmd, capture_output=True, text=True, encoding="utf-8", errors=CORPUS_ENCODING_ERRORS
        )
    except OSError as exc:
        raise ExternalProcessError(cmd, 127, str(exc)) from exc
    if completed.returncode != 0:
        stderr = completed.stderr.strip() or completed.stdout.strip()
        detail = " | ".join(stderr.splitlines()[-STDERR_TAIL_LINES:])
        raise ExternalProcessError(cmd, completed.returncode, detail)
    return completed


class VwTrainer:
    def __init__(self, workspace: RunWorkspace, vw: str = DEFAULT_VW, verbose: bool = False) -> None:
        self.workspace = workspace
        self.vw = vw
        self.verbose = verbose

    def train(self, corpus_path: Path, options: list[str]) -> Path:
        model_path = self.workspace.model_path
        cmd = [self.vw, *options, "-d", str(corpus_path)]
        if corpus_path.suffix == ".gz" and "--compressed" not in options:
            cmd.append("--compressed")
        cmd += ["-f", str(model_path), "--readable_model", str(self.workspace.readable_model_path), "--quiet"]
        _run(cmd, self.verbose)
        return model_path


class VwAuditor:
    def __init__(self, workspace: RunWorkspace, vw: str = DEFAULT_VW, verbose: bool = False) -> None:
        self.workspace = workspace
        self.vw = vw
        self.verbose = verbose

    def audit(self, model_path: Path, probe_path: Path) -> list[str]:
        cmd = [self.vw, "-t", "-i", str(model_path), "-d", str(probe_path), "--audit", "--quiet"]
        completed = _run(cmd, self.verbose)
        audit_path = self.workspace.audit_path
        audit_path.write_text(completed.stdout, encoding="utf-8", errors=CORPUS_ENCODING_ERRORS)
        return audit_path.read_text(encoding="utf-8", errors=CORPUS_ENCODING_ERRORS).splitlines()
