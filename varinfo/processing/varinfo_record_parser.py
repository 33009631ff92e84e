#!/usr/bin/env python3
"""Parse namespaced sparse-vector training records.

A record line looks like::

    <label-field>|<ns-region>(|<ns-region>)*

where every namespace region is ``[ns][:weight] (key[:value])*``. A region
that starts with whitespace belongs to the default (empty) namespace.
"""

from __future__ import annotations

import gzip
import re
from pathlib import Path
from typing import Iterator

from varinfo_errors import MalformedRecordError

# Undecodable corpus bytes round-trip unchanged into the probe file.
CORPUS_ENCODING_ERRORS = "surrogateescape"
NAMESPACE_TOKEN_RE = re.compile(r"^([^\s:]*)(?::(\S*))?")
DEFAULT_FEATURE_VALUE = 1.0
DEFAULT_LABEL_WEIGHT = 1.0

Triple = tuple[str, str, float]


def _as_number(raw: str, what: str, line: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise MalformedRecordError(f"non-numeric {what} {raw!r} in record: {line.strip()}") from None


def _parse_region(region: str, line: str) -> tuple[str, list[tuple[str, float]]]:
    match = NAMESPACE_TOKEN_RE.match(region)
    namespace = match.group(1)
    rest = region[match.end():]
    features: list[tuple[str, float]] = []
    for token in rest.split():
        key, sep, raw_value = token.partition(":")
        if not key:
            continue
        value = _as_number(raw_value, "feature value", line) if sep else DEFAULT_FEATURE_VALUE
        features.append((key, value))
    return namespace, features


def parse_record(line: str) -> tuple[str, list[Triple]]:
    """Split one corpus line into its label field and (namespace, key, value) triples."""
    label_field, sep, remainder = line.rstrip("\r\n").partition("|")
    if not sep:
        raise MalformedRecordError(f"record has no '|' separator: {line.strip()}")

    triples: list[Triple] = []
    for region in remainder.split("|"):
        namespace, features = _parse_region(region, line)
        for key, value in features:
            triples.append((namespace, key, value))
    return label_field, triples


def _is_label_token(token: str) -> bool:
    label, _, _ = token.partition(":")
    try:
        float(label)
    except ValueError:
        return False
    return True


def parse_multiclass_labels(label_field: str) -> dict[str, float]:
    """Return ``{label: weight}`` from a multi-class label field.

    A trailing colon-less token after at least one label is the example tag
    and is dropped before the labels are read, even when it looks numeric.
    """
    tokens = label_field.split()
    if len(tokens) > 1 and ":" not in tokens[-1]:
        tokens = tokens[:-1]

    labels: dict[str, float] = {}
    for token in tokens:
        label, sep, raw_weight = token.partition(":")
        if not _is_label_token(token):
            raise MalformedRecordError(f"non-numeric class label {label!r} in label field: {label_field.strip()}")
        labels[label] = _as_number(raw_weight, "label weight", label_field) if sep and raw_weight else DEFAULT_LABEL_WEIGHT
    return labels


def sort_labels(labels) -> list[str]:
    """Order label identifiers by numeric value; probe and audit both rely on this order."""
    return sorted(labels, key=lambda label: (float(label), label))


def read_corpus_lines(path: Path) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` for every non-blank corpus line."""
    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "rt", encoding="utf-8", errors=CORPUS_ENCODING_ERRORS) as handle:
        for number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            yield number, line
