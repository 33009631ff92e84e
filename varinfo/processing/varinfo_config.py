#!/usr/bin/env python3
"""Load vw-varinfo settings from an optional YAML file."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

import yaml

from varinfo_errors import VarinfoError

DEFAULTS: dict[str, Any] = {
    "vw": "",
    "keep_tmp": False,
    "verbose": False,
    "metric": "w",
    "absolute": False,
    "tmpdir": "",
    "vw_args": [],
}


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def load_config(path: Path | None) -> dict[str, Any]:
    config = dict(DEFAULTS)
    if path is None:
        return config
    if not path.is_file():
        raise VarinfoError(f"missing config file: {path}")
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise VarinfoError(f"invalid YAML in config file {path}: {exc}") from exc
    if payload is None:
        return config
    if not isinstance(payload, dict):
        raise VarinfoError(f"config file must be a YAML mapping: {path}")

    unknown = sorted(set(payload) - set(DEFAULTS))
    if unknown:
        raise VarinfoError(f"unknown config keys in {path}: {', '.join(map(str, unknown))}")

    for key in ("keep_tmp", "verbose", "absolute"):
        if key in payload:
            config[key] = _parse_bool(payload[key])
    for key in ("vw", "metric", "tmpdir"):
        if key in payload and payload[key] is not None:
            config[key] = str(payload[key])
    if "vw_args" in payload:
        raw_args = payload["vw_args"] or []
        config["vw_args"] = shlex.split(raw_args) if isinstance(raw_args, str) else [str(arg) for arg in raw_args]
    return config
