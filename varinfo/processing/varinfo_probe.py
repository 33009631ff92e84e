#!/usr/bin/env python3
"""Build dense probe examples so the auditor reveals every known feature."""

from __future__ import annotations

from pathlib import Path

from varinfo_catalog import FeatureCatalog
from varinfo_record_parser import CORPUS_ENCODING_ERRORS

PROBE_VALUE = "1"


def _label_field(label: str, multiclass: bool) -> str:
    # Only the positive class marker; one auditable line per label.
    return f"{label}:{PROBE_VALUE}" if multiclass else label


def build_probe_examples(catalog: FeatureCatalog, labels: list[str], multiclass: bool) -> list[str]:
    """One example line per label, each carrying every (namespace, key) at the probe value."""
    regions = []
    for namespace, keys in catalog.namespaces.items():
        features = " ".join(f"{key}:{PROBE_VALUE}" for key in keys)
        regions.append(f"|{namespace} {features}")
    body = " ".join(regions)
    return [f"{_label_field(label, multiclass)} {body}".rstrip() for label in labels]


def write_probe_file(path: Path, examples: list[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in examples), encoding="utf-8", errors=CORPUS_ENCODING_ERRORS)
    return path
