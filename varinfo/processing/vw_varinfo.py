#!/usr/bin/env python3
"""Report per-feature ranges, learned weights and relative scores for a vw corpus.

Pipeline: parse corpus -> build catalog -> expand pairs -> write probe
examples -> train -> audit the probe -> parse audit -> score -> report.
Any failure aborts the whole run and nothing is printed to stdout.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable

from varinfo_audit import AuditParser, AuditResult
from varinfo_catalog import FeatureCatalog
from varinfo_config import load_config
from varinfo_errors import MalformedRecordError, VarinfoError
from varinfo_probe import build_probe_examples, write_probe_file
from varinfo_record_parser import (
    CORPUS_ENCODING_ERRORS,
    parse_multiclass_labels,
    parse_record,
    read_corpus_lines,
    sort_labels,
)
from varinfo_score import ScoreEngine, format_report, resolve_metric
from varinfo_vw import Auditor, RunWorkspace, Trainer, VwAuditor, VwTrainer, resolve_vw
from varinfo_vw_options import SINGLE_LABEL, VwOptionSet


def _diag(message: str) -> None:
    print(f"vw-varinfo: {message}", file=sys.stderr)


def build_catalog(
    lines: Iterable[tuple[int, str]],
    options: VwOptionSet,
) -> tuple[FeatureCatalog, list[str]]:
    """One pass over the corpus: returns the finalized catalog and the ordered label list."""
    catalog = FeatureCatalog(ignore=options.ignore, keep=options.keep)
    labels: dict[str, float] = {}
    for number, line in lines:
        try:
            label_field, triples = parse_record(line)
            if options.multiclass:
                labels.update(parse_multiclass_labels(label_field))
        except MalformedRecordError as err:
            raise MalformedRecordError(f"line {number}: {err}") from err
        catalog.ingest(triples)

    catalog.expand_pairs(options.pairs)
    catalog.finalize()

    if not options.multiclass:
        return catalog, [SINGLE_LABEL]
    if not labels:
        raise MalformedRecordError("multi-class mode is active but the corpus has no class labels")
    return catalog, sort_labels(labels)


def run_pipeline(
    corpus_path: Path,
    options: VwOptionSet,
    workspace: RunWorkspace,
    trainer: Trainer,
    auditor: Auditor,
    metric: str = "w",
    absolute: bool = False,
    verbose: bool = False,
) -> str:
    """Run every stage in order and return the rendered report."""
    resolve_metric(metric)
    catalog, labels = build_catalog(read_corpus_lines(corpus_path), options)
    if verbose:
        _diag(f"catalog: {catalog.records} records, {len(catalog.namespaces)} namespaces, {len(catalog)} features")
        _diag(f"labels: {' '.join(labels)}")

    examples = build_probe_examples(catalog, labels, options.multiclass)
    write_probe_file(workspace.probe_path, examples)

    model_path = trainer.train(corpus_path, options.tokens)
    audit_lines = auditor.audit(model_path, workspace.probe_path)
    audit = AuditParser(labels, options.multiclass).parse(audit_lines)
    for name in audit.constants:
        catalog.add_constant(name)

    engine = ScoreEngine(catalog, audit, metric=metric, absolute=absolute)
    tables = engine.score()
    if verbose:
        _report_anomalies(engine.unaudited_features(), engine.missing, audit)
    return format_report(tables, options.multiclass)


def _report_anomalies(unaudited: list[str], missing: list[tuple[str, str]], audit: AuditResult) -> None:
    for name in unaudited:
        _diag(f"no audited weight for catalog feature {name}")
    for label, name in missing:
        _diag(f"no weight for feature {name} under label {label}")
    _diag(f"audited {audit.examples} probe examples, {len(audit.features)} features")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vw-varinfo",
        description="Show feature ranges, weights and relative importance for a vw training set",
    )
    parser.add_argument("--config", default="", help="Optional YAML config file")
    parser.add_argument("--vw", default="", help="vw executable (default: $VW_VARINFO_VW or 'vw')")
    parser.add_argument("-K", "--keep-tmp", action="store_true", help="Keep temporary files and list their paths")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print diagnostics to stderr")
    parser.add_argument("-m", "--metric", default=None, help="Single-letter ranking metric (default: w = weight)")
    parser.add_argument("-a", "--absolute", action="store_true", help="Report absolute relative scores")
    parser.add_argument("--tmpdir", default="", help="Parent directory for temporary files")
    parser.add_argument("data", help="Training data file (.gz accepted)")
    parser.add_argument("vw_args", nargs=argparse.REMAINDER, help="Options forwarded to vw")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)

    try:
        config = load_config(Path(args.config) if args.config else None)
        keep_tmp = args.keep_tmp or config["keep_tmp"]
        verbose = args.verbose or config["verbose"]
        absolute = args.absolute or config["absolute"]
        metric = args.metric or config["metric"]
        vw = resolve_vw(args.vw, config["vw"])

        options = VwOptionSet([*config["vw_args"], *args.vw_args])
        resolve_metric(metric)

        corpus_path = Path(args.data)
        if not corpus_path.is_file():
            _diag(f"error: training data does not exist: {corpus_path}")
            return 1

        with RunWorkspace(keep=keep_tmp, parent=args.tmpdir or config["tmpdir"] or None) as workspace:
            report = run_pipeline(
                corpus_path,
                options,
                workspace,
                VwTrainer(workspace, vw=vw, verbose=verbose),
                VwAuditor(workspace, vw=vw, verbose=verbose),
                metric=metric,
                absolute=absolute,
                verbose=verbose,
            )
    except (VarinfoError, OSError) as err:
        _diag(f"error: {err}")
        return 1

    sys.stdout.flush()
    sys.stdout.buffer.write(report.encode("utf-8", errors=CORPUS_ENCODING_ERRORS))
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
