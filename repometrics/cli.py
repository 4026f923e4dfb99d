"""CLI entrypoints for repometrics commands."""

from __future__ import annotations

import argparse
import asyncio
import functools
import json
import sys
from pathlib import Path
from typing import List

from .aggregator import find_repository_report, report_lookup
from .config import ConfigError, RepoMetricsConfig, load_config
from .errors import ContractViolation
from .logging import configure_logging
from .manifest import load_manifest
from .metrics import discover_metrics
from .models import Report
from .orchestrator import EvaluationTarget, Orchestrator, RunSummary
from .stores import PriorReportCache, load_reports, write_reports


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "config",
        nargs="?",
        default=".",
        help="Path to .repometrics.yml or the directory holding it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repometrics",
        description="Evaluate quality metrics across a set of repositories.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print warnings and errors to the console.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write a debug-level log of the run to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Evaluate every configured repository and emit the report set.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    _add_config_argument(run_parser)
    run_parser.add_argument(
        "--output",
        default=None,
        help="Write the JSON report set here instead of the configured reporter output file.",
    )
    run_parser.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Keep results of healthy metrics when one metric of a repository fails.",
    )
    run_parser.add_argument(
        "--groups",
        action="store_true",
        help="Print the evaluated metrics by group after the run.",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print the last recorded report for a repository.",
    )
    _add_verbose_option(show_parser, suppress_default=True)
    _add_config_argument(show_parser)
    show_parser.add_argument(
        "--repository",
        required=True,
        help="Repository label as it appears in the report set.",
    )
    show_parser.add_argument(
        "--metric",
        default=None,
        help="Only print the last result of this metric.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Expose evaluation over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_argument(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repometrics commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=args.quiet,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "run":
        _run(parser, args, config)
    elif args.command == "show":
        _show(parser, args, config)
    elif args.command == "serve":
        _serve(parser, args, config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_metric_types(parser: argparse.ArgumentParser, config: RepoMetricsConfig) -> List[type]:
    try:
        return discover_metrics(config.metrics.plugins, config.metrics.enabled or None)
    except (ContractViolation, ImportError, ValueError, RuntimeError) as exc:
        parser.exit(1, f"Cannot load metrics: {exc}\n")


def _build_orchestrator(
    config: RepoMetricsConfig, prior: PriorReportCache, *, fail_fast: bool
) -> Orchestrator:
    return Orchestrator(
        prior_reports=prior,
        manifest_loader=functools.partial(
            load_manifest, filename=config.evaluation.manifest_file
        ),
        fail_fast=fail_fast,
    )


def _run(parser: argparse.ArgumentParser, args: argparse.Namespace, config: RepoMetricsConfig) -> None:
    metric_types = _load_metric_types(parser, config)
    if not config.repositories:
        parser.exit(1, "No repositories configured.\n")

    prior = PriorReportCache.from_file(config.reporter.output_file)
    orchestrator = _build_orchestrator(
        config, prior, fail_fast=config.evaluation.fail_fast and not args.no_fail_fast
    )
    targets = [
        EvaluationTarget(repository=repo.descriptor(), working_dir=repo.path)
        for repo in config.repositories
    ]
    summary = asyncio.run(
        orchestrator.run(targets, metric_types, concurrency=config.evaluation.concurrency)
    )

    reports = _merge_reports(summary, prior)
    output = Path(args.output) if args.output else config.reporter.output_file
    if output is not None:
        write_reports(output, reports)
        print(f"Report written to {_relativize(output)}")
    else:
        print(json.dumps([report.to_dict() for report in reports], indent=2, sort_keys=True))

    if args.groups:
        for group, descriptors in orchestrator.registry.grouped_view().items():
            names = ", ".join(descriptor.name for descriptor in descriptors)
            print(f"{group or '(ungrouped)'}: {names}")

    if not summary.ok:
        lines = [
            f"{label}: not evaluated ({failure.cause})"
            for label, failure in summary.failures.items()
        ]
        parser.exit(1, "\n".join(lines) + "\n")


def _show(parser: argparse.ArgumentParser, args: argparse.Namespace, config: RepoMetricsConfig) -> None:
    source = config.reporter.output_file
    if source is None:
        parser.exit(1, "No reporter.output_file configured.\n")
    reports = load_reports(source)

    if args.metric:
        result = report_lookup(reports, args.repository, args.metric)
        if result is None:
            parser.exit(1, f"No result for '{args.metric}' on '{args.repository}'.\n")
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
        return

    report = find_repository_report(reports, args.repository)
    if report is None:
        parser.exit(1, f"No report for '{args.repository}'.\n")
    print(json.dumps(report.to_dict(), indent=2, sort_keys=True))


def _serve(parser: argparse.ArgumentParser, args: argparse.Namespace, config: RepoMetricsConfig) -> None:
    from .service import run_service

    metric_types = _load_metric_types(parser, config)
    prior = PriorReportCache.from_file(config.reporter.output_file)
    run_service(
        host=args.host,
        port=args.port,
        metric_types=metric_types,
        orchestrator_factory=lambda: _build_orchestrator(
            config, prior, fail_fast=config.evaluation.fail_fast
        ),
    )


def _merge_reports(summary: RunSummary, prior: PriorReportCache) -> List[Report]:
    """New reports plus the previous report of every repository that failed this run."""
    merged: List[Report] = list(summary.reports)
    for label in summary.failures:
        previous = prior.repository_report(label)
        if previous is not None:
            merged.append(previous)
    return merged


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
