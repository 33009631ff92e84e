#!/usr/bin/env python3
"""Parse the auditor's two-lines-per-example output into hashes and weights.

The auditor does not echo labels back. Example ``i`` of the stream belongs to
``labels[i % len(labels)]``, the same ordered list the probe file was built
from.
"""

from __future__ import annotations

from typing import Iterable

from varinfo_catalog import CONSTANT_FEATURE
from varinfo_errors import AuditFormatError

AUDIT_FIELDS = 4


def split_audit_token(token: str) -> tuple[str, int, float, float]:
    """Return ``(feature, hash, value, weight)`` from ``feature:hash:value:weight``.

    Colons inside the feature name survive because only the trailing three
    fields are split off.
    """
    fields = token.split(":")
    if len(fields) < AUDIT_FIELDS:
        raise AuditFormatError(f"audit token needs {AUDIT_FIELDS} colon-separated fields: {token!r}")
    feature = ":".join(fields[: -(AUDIT_FIELDS - 1)])
    raw_hash, raw_value, raw_weight = fields[-(AUDIT_FIELDS - 1):]
    raw_weight = raw_weight.split("@", 1)[0]
    try:
        return feature, int(raw_hash), float(raw_value), float(raw_weight)
    except ValueError:
        raise AuditFormatError(f"non-numeric hash/value/weight in audit token: {token!r}") from None


class AuditResult:
    def __init__(self, labels: list[str], multiclass: bool) -> None:
        self.labels = list(labels)
        self.multiclass = multiclass
        self.feature_hash: dict[str, int] = {}
        self.weights: dict[str, float] = {}
        self.label_weights: dict[str, dict[str, float]] = {label: {} for label in self.labels}
        self.predictions: dict[str, str] = {}
        # audit order, deduplicated
        self.features: list[str] = []
        self.constants: list[str] = []
        self.examples = 0

    def weights_for(self, label: str) -> dict[str, float]:
        return self.label_weights[label] if self.multiclass else self.weights

    def features_for(self, label: str) -> list[str]:
        return list(self.label_weights[label]) if self.multiclass else list(self.features)


class AuditParser:
    def __init__(self, labels: list[str], multiclass: bool = False) -> None:
        if not labels:
            raise AuditFormatError("audit parsing needs at least one label")
        self.labels = list(labels)
        self.multiclass = multiclass

    def _feature_name(self, raw: str, label: str) -> str:
        if raw and (raw != CONSTANT_FEATURE or not self.multiclass):
            return raw
        if self.multiclass:
            return f"{CONSTANT_FEATURE}_{label}"
        return CONSTANT_FEATURE

    def parse(self, lines: Iterable[str]) -> AuditResult:
        result = AuditResult(self.labels, self.multiclass)
        seen: set[str] = set()
        prediction: str | None = None
        for raw_line in lines:
            line = raw_line.rstrip("\r\n")
            if prediction is None:
                prediction = line
                continue

            label = self.labels[result.examples % len(self.labels)]
            if self.multiclass:
                result.predictions[label] = prediction.strip()
            for token in line.split():
                raw_name, hash_code, _value, weight = split_audit_token(token)
                name = self._feature_name(raw_name, label)
                if name != raw_name and name not in result.constants:
                    result.constants.append(name)
                result.feature_hash[name] = hash_code
                result.weights_for(label)[name] = weight
                if name not in seen:
                    seen.add(name)
                    result.features.append(name)
            result.examples += 1
            prediction = None

        if prediction is not None:
            raise AuditFormatError(
                f"audit stream ended after a prediction line with no feature line (example {result.examples})"
            )
        return result
