#!/usr/bin/env python3

from __future__ import annotations

import gzip
import pathlib
import tempfile
import unittest

from varinfo_errors import MalformedRecordError
from varinfo_record_parser import parse_multiclass_labels, parse_record, read_corpus_lines, sort_labels


class ParseRecordTest(unittest.TestCase):
    def test_named_namespace_with_values(self) -> None:
        label, triples = parse_record("1 |a x:2 y:3\n")
        self.assertEqual(label.strip(), "1")
        self.assertEqual(triples, [("a", "x", 2.0), ("a", "y", 3.0)])

    def test_value_defaults_to_one(self) -> None:
        _, triples = parse_record("-1 |a x y:0.5")
        self.assertEqual(triples, [("a", "x", 1.0), ("a", "y", 0.5)])

    def test_leading_whitespace_region_is_default_namespace(self) -> None:
        _, triples = parse_record("1 | x:4 y")
        self.assertEqual(triples, [("", "x", 4.0), ("", "y", 1.0)])

    def test_namespace_weight_suffix_is_stripped(self) -> None:
        _, triples = parse_record("1 |abc:0.5 x:2")
        self.assertEqual(triples, [("abc", "x", 2.0)])

    def test_multiple_regions_keep_order(self) -> None:
        _, triples = parse_record("1 tag|a x |b y:2 |c")
        self.assertEqual(triples, [("a", "x", 1.0), ("b", "y", 2.0)])

    def test_missing_separator_is_malformed(self) -> None:
        for line in ("1 a x:2", "just text", "-1"):
            with self.subTest(line=line):
                with self.assertRaises(MalformedRecordError):
                    parse_record(line)

    def test_non_numeric_value_is_malformed(self) -> None:
        with self.assertRaises(MalformedRecordError):
            parse_record("1 |a x:abc")


class MulticlassLabelTest(unittest.TestCase):
    def test_weights_default_to_one_and_quoted_tag_is_dropped(self) -> None:
        labels = parse_multiclass_labels("1:0.5 3 2:1.5 'example7")
        self.assertEqual(labels, {"1": 0.5, "3": 1.0, "2": 1.5})

    def test_trailing_word_tag_is_dropped(self) -> None:
        self.assertEqual(parse_multiclass_labels("10 2 mytag "), {"10": 1.0, "2": 1.0})

    def test_trailing_numeric_token_is_a_tag(self) -> None:
        self.assertEqual(parse_multiclass_labels("1 2"), {"1": 1.0})
        self.assertEqual(parse_multiclass_labels("1:0.5 3:2 7"), {"1": 0.5, "3": 2.0})

    def test_single_bare_label_is_kept(self) -> None:
        self.assertEqual(parse_multiclass_labels("4"), {"4": 1.0})

    def test_labels_sort_numerically(self) -> None:
        self.assertEqual(sort_labels({"10": 1.0, "2": 1.0, "1": 0.3}), ["1", "2", "10"])

    def test_non_numeric_label_is_malformed(self) -> None:
        with self.assertRaises(MalformedRecordError):
            parse_multiclass_labels("abc:1 2:1")


class ReadCorpusLinesTest(unittest.TestCase):
    def test_plain_and_gzip_corpora_skip_blank_lines(self) -> None:
        content = "1 |a x\n\n-1 |a y\n"
        with tempfile.TemporaryDirectory() as td:
            plain = pathlib.Path(td) / "train.dat"
            plain.write_text(content, encoding="utf-8")
            packed = pathlib.Path(td) / "train.dat.gz"
            with gzip.open(packed, "wt", encoding="utf-8") as handle:
                handle.write(content)

            for path in (plain, packed):
                with self.subTest(path=path.name):
                    lines = list(read_corpus_lines(path))
                    self.assertEqual([number for number, _ in lines], [1, 3])
                    self.assertEqual(lines[1][1].strip(), "-1 |a y")


if __name__ == "__main__":
    unittest.main()
