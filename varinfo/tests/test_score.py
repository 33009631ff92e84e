#!/usr/bin/env python3

from __future__ import annotations

import unittest

from varinfo_audit import AuditParser
from varinfo_catalog import FeatureCatalog
from varinfo_errors import UnsupportedOptionError
from varinfo_score import ZERO_DISTANCE_EPSILON, ScoreEngine, format_report, format_table


def score(audit_line: str, absolute: bool = False, catalog: FeatureCatalog | None = None):
    catalog = catalog or FeatureCatalog()
    catalog.finalize()
    audit = AuditParser(["1"]).parse(["0.0", audit_line])
    engine = ScoreEngine(catalog, audit, absolute=absolute)
    return engine, engine.score_label("1")


class ScoreEngineTest(unittest.TestCase):
    def test_relative_scores(self) -> None:
        _, table = score("a^n:1:1:-2 a^z:2:1:0 a^p:3:1:10")
        self.assertEqual(table.max_distance, 10)
        self.assertEqual([row.name for row in table.rows], ["a^p", "a^z", "a^n"])
        self.assertEqual([round(row.percent, 2) for row in table.rows], [100.0, 0.0, -20.0])
        self.assertEqual(table.weight_span, 12)

    def test_absolute_mode(self) -> None:
        _, table = score("a^n:1:1:-2 a^z:2:1:0 a^p:3:1:10", absolute=True)
        by_name = {row.name: row for row in table.rows}
        self.assertAlmostEqual(by_name["a^n"].percent, 20.0)
        self.assertEqual([row.name for row in table.rows], ["a^p", "a^z", "a^n"])

    def test_constant_scores_zero(self) -> None:
        _, table = score("a^p:3:1:10 Constant:4:1:50")
        by_name = {row.name: row for row in table.rows}
        self.assertEqual(by_name["Constant"].score, 0.0)
        self.assertEqual(by_name["Constant"].weight, 50.0)
        self.assertAlmostEqual(by_name["a^p"].percent, 100.0)

    def test_all_zero_scores_are_defined(self) -> None:
        _, table = score("a^x:1:1:0 Constant:2:1:0.7")
        self.assertEqual(table.max_distance, ZERO_DISTANCE_EPSILON)
        self.assertEqual([row.percent for row in table.rows], [0.0, 0.0])

    def test_ties_keep_audit_order(self) -> None:
        _, table = score("a^b:1:1:1 a^a:2:1:1 a^c:3:1:2")
        self.assertEqual([row.name for row in table.rows], ["a^c", "a^b", "a^a"])

    def test_ranges_come_from_catalog(self) -> None:
        catalog = FeatureCatalog()
        catalog.ingest([("a", "x", 2.0), ("a", "y", 3.0)])
        catalog.ingest([("a", "x", 1.0)])
        engine, table = score("a^x:1:1:0.5 a^q:2:1:0.1", catalog=catalog)
        by_name = {row.name: row for row in table.rows}
        self.assertEqual((by_name["a^x"].min_value, by_name["a^x"].max_value), (1.0, 2.0))
        self.assertEqual((by_name["a^q"].min_value, by_name["a^q"].max_value), (0.0, 0.0))
        self.assertEqual(engine.unaudited_features(), ["a^y", "Constant"])

    def test_multiclass_bias_is_not_reported_as_unaudited(self) -> None:
        catalog = FeatureCatalog()
        catalog.ingest([("a", "x", 1.0), ("a", "y", 1.0)])
        catalog.finalize()
        lines = ["1", "a^x:1:1:0.5 Constant:2:1:0.1", "2", "a^x:3:1:0.2 Constant:4:1:0.3"]
        audit = AuditParser(["1", "2"], multiclass=True).parse(lines)
        self.assertEqual(ScoreEngine(catalog, audit).unaudited_features(), ["a^y"])

    def test_unknown_metric_is_not_implemented(self) -> None:
        catalog = FeatureCatalog()
        audit = AuditParser(["1"]).parse([])
        with self.assertRaises(UnsupportedOptionError):
            ScoreEngine(catalog, audit, metric="z")


class ReportFormatTest(unittest.TestCase):
    def test_single_label_table(self) -> None:
        _, table = score("a^n:1:1:-2 a^p:3:1:10")
        lines = format_table(table, multiclass=False).splitlines()
        self.assertEqual(lines[0].split(), ["FeatureName", "HashVal", "MinVal", "MaxVal", "Weight", "RelScore"])
        self.assertEqual(lines[1].split(), ["a^p", "3", "0.00", "0.00", "+10.0000", "+100.00%"])
        self.assertEqual(lines[2].split(), ["a^n", "1", "0.00", "0.00", "-2.0000", "-20.00%"])

    def test_long_names_widen_the_name_column(self) -> None:
        name = "namespace^a_rather_long_feature"
        _, table = score(f"{name}:1:1:1")
        self.assertEqual(table.name_width, len(name))
        header, row = format_table(table, multiclass=False).splitlines()
        self.assertEqual(header.index("HashVal") + len("HashVal"), row.index(" 1 ") + 2)

    def test_multiclass_header(self) -> None:
        catalog = FeatureCatalog()
        audit = AuditParser(["1", "2"], multiclass=True).parse(["1", "a^x:1:1:0.5", "2", "a^x:9:1:-0.5"])
        tables = ScoreEngine(catalog, audit).score()
        report = format_report(tables, multiclass=True)
        self.assertIn("=== Class Label: 1  Prediction: 1", report)
        self.assertIn("=== Class Label: 2  Prediction: 2", report)
        self.assertLess(report.index("Class Label: 1"), report.index("Class Label: 2"))


if __name__ == "__main__":
    unittest.main()
