#!/usr/bin/env python3
"""Score audited features and render the ranked report.

Every feature's score is normalized by the largest score magnitude for its
label, so the strongest feature reports +/-100.00%. This is a heuristic:
weights of co-occurring features are not independent.
"""

from __future__ import annotations

from typing import Callable

from varinfo_audit import AuditResult
from varinfo_catalog import CONSTANT_FEATURE, FeatureCatalog
from varinfo_errors import UnsupportedOptionError

MIN_NAME_WIDTH = 10
MIN_WEIGHT_WIDTH = 10
ZERO_DISTANCE_EPSILON = 1e-10

Metric = Callable[[float, float, float], float]

# selector -> score(weight, min_value, max_value)
METRICS: dict[str, Metric] = {
    "w": lambda weight, _min, _max: weight,
}


def resolve_metric(selector: str) -> Metric:
    metric = METRICS.get(selector)
    if metric is None:
        raise UnsupportedOptionError(f"ranking metric {selector!r} is not implemented (available: {', '.join(METRICS)})")
    return metric


class ScoreRow:
    __slots__ = ("name", "hash_code", "min_value", "max_value", "weight", "score", "relative")

    def __init__(
        self,
        name: str,
        hash_code: int,
        min_value: float,
        max_value: float,
        weight: float,
        score: float,
    ) -> None:
        self.name = name
        self.hash_code = hash_code
        self.min_value = min_value
        self.max_value = max_value
        self.weight = weight
        self.score = score
        self.relative = 0.0

    @property
    def percent(self) -> float:
        return self.relative * 100.0


class ScoreTable:
    def __init__(self, label: str, prediction: str = "") -> None:
        self.label = label
        self.prediction = prediction
        self.rows: list[ScoreRow] = []
        self.min_score = 0.0
        self.max_score = 0.0
        self.max_distance = ZERO_DISTANCE_EPSILON
        self.name_width = MIN_NAME_WIDTH
        self.weight_span = 0.0


class ScoreEngine:
    def __init__(
        self,
        catalog: FeatureCatalog,
        audit: AuditResult,
        metric: str = "w",
        absolute: bool = False,
    ) -> None:
        self.catalog = catalog
        self.audit = audit
        self.metric = resolve_metric(metric)
        self.absolute = absolute
        self.missing: list[tuple[str, str]] = []

    def unaudited_features(self) -> list[str]:
        """Catalog features the auditor never reported."""
        audited = set(self.audit.features)
        if self.audit.multiclass:
            # the bias is audited per label as Constant_<label>
            audited.add(CONSTANT_FEATURE)
        return [name for name in self.catalog.ranges if name not in audited]

    def score_label(self, label: str) -> ScoreTable:
        table = ScoreTable(label, self.audit.predictions.get(label, ""))
        weights = self.audit.weights_for(label)
        min_weight = max_weight = 0.0

        for name in self.audit.features_for(label):
            weight = weights.get(name)
            if weight is None:
                self.missing.append((label, name))
                continue
            min_value, max_value = self.catalog.range_of(name)
            if name.startswith(CONSTANT_FEATURE):
                score = 0.0
            else:
                score = self.metric(weight, min_value, max_value)
            table.rows.append(
                ScoreRow(name, self.audit.feature_hash.get(name, 0), min_value, max_value, weight, score)
            )
            table.min_score = min(table.min_score, score)
            table.max_score = max(table.max_score, score)
            min_weight = min(min_weight, weight)
            max_weight = max(max_weight, weight)
            table.name_width = max(table.name_width, len(name))

        max_distance = max(abs(table.max_score), abs(table.min_score))
        table.max_distance = max_distance if max_distance != 0 else ZERO_DISTANCE_EPSILON
        table.weight_span = max_weight - min_weight

        for row in table.rows:
            relative = row.score / table.max_distance
            row.relative = abs(relative) if self.absolute else relative
        table.rows.sort(key=lambda row: row.score, reverse=True)
        return table

    def score(self) -> list[ScoreTable]:
        return [self.score_label(label) for label in self.audit.labels]


def format_table(table: ScoreTable, multiclass: bool) -> str:
    name_width = table.name_width
    weight_width = max(MIN_WEIGHT_WIDTH, len(f"{table.weight_span:+.4f}") + 1)
    lines = []
    if multiclass:
        lines.append(f"=== Class Label: {table.label}  Prediction: {table.prediction}")
    lines.append(
        f"{'FeatureName':<{name_width}} {'HashVal':>9} {'MinVal':>10} {'MaxVal':>10} "
        f"{'Weight':>{weight_width}} {'RelScore':>9}"
    )
    for row in table.rows:
        lines.append(
            f"{row.name:<{name_width}} {row.hash_code:>9d} {row.min_value:>10.2f} {row.max_value:>10.2f} "
            f"{row.weight:>+{weight_width}.4f} {row.percent:>+8.2f}%"
        )
    return "\n".join(lines) + "\n"


def format_report(tables: list[ScoreTable], multiclass: bool) -> str:
    return "\n".join(format_table(table, multiclass) for table in tables)
