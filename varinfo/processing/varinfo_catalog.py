#!/usr/bin/env python3
"""Accumulate the namespace/feature universe and per-feature value ranges."""

from __future__ import annotations

from typing import Iterable

from varinfo_vw_options import WILDCARD_CODE, short_code

CONSTANT_FEATURE = "Constant"
NAMESPACE_SEPARATOR = "^"


def feature_name(namespace: str, key: str) -> str:
    return f"{namespace}{NAMESPACE_SEPARATOR}{key}"


class FeatureRange:
    """Observed value range of one feature.

    ``records`` counts the records the feature appeared in. A record without
    the feature contributes an implicit 0, so the reported range only
    excludes 0 when the feature was present in every record.
    """

    __slots__ = ("min", "max", "records")

    def __init__(self) -> None:
        self.min = 0.0
        self.max = 0.0
        self.records = 0

    def observe(self, value: float, new_record: bool = True) -> None:
        if self.records == 0:
            self.min = self.max = value
        else:
            self.max = max(self.max, value)
            self.min = min(self.min, value)
        if new_record:
            self.records += 1

    def bounds(self, total_records: int) -> tuple[float, float]:
        if self.records < total_records:
            return min(self.min, 0.0), max(self.max, 0.0)
        return self.min, self.max

    def __repr__(self) -> str:
        return f"FeatureRange(min={self.min!r}, max={self.max!r}, records={self.records})"


class FeatureCatalog:
    def __init__(self, ignore: Iterable[str] = (), keep: Iterable[str] = ()) -> None:
        self.ignore: set[str] = set(ignore)
        self.keep: set[str] = set(keep)
        # namespace -> {key: last seen value}, both in first-seen order
        self.namespaces: dict[str, dict[str, float]] = {}
        self.ranges: dict[str, FeatureRange] = {}
        self.records = 0

    def accepts(self, namespace: str) -> bool:
        code = short_code(namespace)
        if code in self.ignore:
            return False
        if self.keep and code not in self.keep:
            return False
        return True

    def ingest(self, triples: Iterable[tuple[str, str, float]]) -> int:
        """Record one parsed record's accepted triples; returns how many were kept."""
        self.records += 1
        seen: set[str] = set()
        kept = 0
        for namespace, key, value in triples:
            if not self.accepts(namespace):
                continue
            self.namespaces.setdefault(namespace, {})[key] = value
            name = feature_name(namespace, key)
            feature_range = self.ranges.get(name)
            if feature_range is None:
                feature_range = self.ranges[name] = FeatureRange()
            feature_range.observe(value, new_record=name not in seen)
            seen.add(name)
            kept += 1
        return kept

    def _namespaces_for(self, code: str) -> list[str]:
        return [
            namespace
            for namespace in self.namespaces
            if self.accepts(namespace) and (code == WILDCARD_CODE or short_code(namespace) == code)
        ]

    def expand_pairs(self, pair_specs: Iterable[tuple[str, str]]) -> int:
        """Register ``ns1^key1^ns2^key2`` for every namespace pair; returns how many were new.

        Pair ranges are not derived from co-occurring values and stay at (0, 0).
        """
        added = 0
        for left_code, right_code in pair_specs:
            right_namespaces = self._namespaces_for(right_code)
            for ns1 in self._namespaces_for(left_code):
                for key1 in self.namespaces[ns1]:
                    for ns2 in right_namespaces:
                        for key2 in self.namespaces[ns2]:
                            name = NAMESPACE_SEPARATOR.join((ns1, key1, ns2, key2))
                            if name not in self.ranges:
                                self.ranges[name] = FeatureRange()
                                added += 1
        return added

    def add_constant(self, name: str = CONSTANT_FEATURE) -> None:
        if name not in self.ranges:
            self.ranges[name] = FeatureRange()

    def finalize(self) -> None:
        self.add_constant(CONSTANT_FEATURE)

    def range_of(self, name: str) -> tuple[float, float]:
        feature_range = self.ranges.get(name)
        if feature_range is None:
            return 0.0, 0.0
        return feature_range.bounds(self.records)

    def feature_keys(self) -> list[tuple[str, str]]:
        return [(namespace, key) for namespace, keys in self.namespaces.items() for key in keys]

    def __len__(self) -> int:
        return len(self.ranges)

    def __contains__(self, name: object) -> bool:
        return name in self.ranges
