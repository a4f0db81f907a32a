#!/usr/bin/env python3
"""CLI entrypoint for the HES report parser."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from home_energy.hes_parser import extract, normalize
from home_energy.hes_parser.catalog import CONDITION_UNKNOWN
from home_energy.hes_parser.pipeline import (
    HesParseOutput,
    NoTextExtractedError,
    parse_hes_pdf,
    parse_hes_text,
)

SUPPORTED_EXTENSIONS = {".pdf", ".txt"}
OUTPUT_SUFFIX = ".hes.json"

logger = logging.getLogger("home_energy.hes_parser.cli")


@dataclass
class ReportResult:
    """Outcome of parsing one input file."""

    file: str
    status: str
    output: HesParseOutput | None = None
    error: str | None = None
    pdf_meta: dict[str, Any] | None = None

    @property
    def populated_rows(self) -> int:
        if self.output is None:
            return 0
        return sum(
            1
            for row in self.output.suggestions
            if row.todays_condition != CONDITION_UNKNOWN or row.recommendation
        )


def configure_logging(verbose: bool = False) -> None:
    verbose = verbose or os.environ.get("HES_DEBUG") == "1"
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def parse_backend_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    parts = [entry.strip() for entry in value.split(",") if entry.strip()]
    return parts or None


def iter_report_files(root: Path) -> Iterator[Path]:
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS:
            yield path


def parse_report_file(
    path: Path,
    *,
    min_pdf_chars: int,
    pdf_backends: Iterable[str] | None,
) -> ReportResult:
    try:
        if path.suffix.lower() == ".txt":
            output = parse_hes_text(
                path.read_text(encoding="utf-8", errors="ignore"),
                source={"filename": path.name},
            )
        else:
            output = parse_hes_pdf(path, min_chars=min_pdf_chars, prefer_backends=pdf_backends)
    except NoTextExtractedError as exc:
        logger.warning("%s: %s", path, exc)
        return ReportResult(
            file=str(path), status="no-text", error=str(exc), pdf_meta=exc.meta.get("pdf_meta")
        )
    except OSError as exc:
        logger.error("Failed to read %s: %s", path, exc)
        return ReportResult(file=str(path), status="error", error=str(exc))
    return ReportResult(
        file=str(path),
        status="ok",
        output=output,
        pdf_meta=output.debug.get("source", {}).get("pdf_meta"),
    )


def write_json(path: Path, payload: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, ensure_ascii=False)


def command_parse(args: argparse.Namespace) -> int:
    pdf_backends = parse_backend_list(getattr(args, "pdf_backends", None))
    min_pdf_chars = extract.resolve_min_pdf_chars(getattr(args, "min_pdf_chars", None))
    output_dir = Path(args.output_dir).expanduser().resolve() if args.output_dir else None
    failures = 0
    for raw_path in args.paths:
        path = Path(raw_path).expanduser().resolve()
        result = parse_report_file(path, min_pdf_chars=min_pdf_chars, pdf_backends=pdf_backends)
        if result.output is None:
            failures += 1
            continue
        payload = result.output.to_dict()
        if output_dir is None:
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            continue
        target = output_dir / f"{path.stem}{OUTPUT_SUFFIX}"
        write_json(target, payload)
        logger.info(
            "%s: score %s, %d populated row(s) -> %s",
            path.name,
            result.output.hes_score,
            result.populated_rows,
            target,
        )
    return 1 if failures else 0


def command_text(args: argparse.Namespace) -> int:
    pdf_backends = parse_backend_list(getattr(args, "pdf_backends", None))
    min_pdf_chars = extract.resolve_min_pdf_chars(getattr(args, "min_pdf_chars", None))
    path = Path(args.path).expanduser().resolve()
    text, meta = extract.extract_pdf_text(
        path, min_chars=min_pdf_chars, prefer_backends=pdf_backends
    )
    if not text.strip():
        logger.error("No text extracted from %s (backend: %s)", path, meta.get("backend"))
        return 1
    print(normalize.normalize_report_text(text))
    return 0


def command_check(args: argparse.Namespace) -> int:
    target = Path(args.directory).expanduser().resolve()
    if not target.is_dir():
        raise SystemExit(f"Target directory not found: {target}")
    pdf_backends = parse_backend_list(getattr(args, "pdf_backends", None))
    min_pdf_chars = extract.resolve_min_pdf_chars(getattr(args, "min_pdf_chars", None))
    results = [
        parse_report_file(path, min_pdf_chars=min_pdf_chars, pdf_backends=pdf_backends)
        for path in iter_report_files(target)
    ]
    for result in results:
        if result.file.startswith(str(target)):
            result.file = str(Path(result.file).relative_to(target))
    print_status_table(results, pdf_rollup=format_pdf_rollup(results, min_pdf_chars))
    return 0


def print_status_table(results: list[ReportResult], *, pdf_rollup: str | None = None) -> None:
    print("File".ljust(60), "Status".ljust(10), "Score".ljust(6), "Rows")
    print("-" * 85)
    for result in sorted(results, key=lambda item: item.file):
        score = result.output.hes_score if result.output else None
        print(
            result.file.ljust(60),
            result.status.ljust(10),
            str(score if score is not None else "-").ljust(6),
            str(result.populated_rows),
        )
    if pdf_rollup:
        print("\n" + pdf_rollup)


def format_pdf_rollup(results: Iterable[ReportResult], min_pdf_chars: int) -> str | None:
    pdf_entries = [result for result in results if result.file.lower().endswith(".pdf")]
    if not pdf_entries:
        return None
    ok = short = error = 0
    backend_counter: Counter[str] = Counter()
    for result in pdf_entries:
        meta = result.pdf_meta or {}
        backend = str(meta.get("backend", "none"))
        chars = int(meta.get("chars", 0) or 0)
        if result.status == "error" or meta.get("error"):
            error += 1
            continue
        if backend == "none" or chars < min_pdf_chars:
            short += 1
            continue
        ok += 1
        backend_counter[backend] += 1
    if backend_counter:
        top_backend, top_count = backend_counter.most_common(1)[0]
    else:
        top_backend, top_count = ("none", 0)
    return (
        f"PDF: {len(pdf_entries)} files | ok: {ok} | short: {short} | error: {error} "
        f"| top backend: {top_backend} ({top_count}x)"
    )


def _add_pdf_options(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--pdf-backends",
        help="Comma-separated PDF extraction backend order (overrides HES_PDF_BACKENDS)",
    )
    subparser.add_argument(
        "--min-pdf-chars",
        type=int,
        help="Minimum characters required from a PDF (overrides HES_MIN_PDF_CHARS)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Parse Home Energy Score reports")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser_obj.add_subparsers(dest="command")

    parse_parser = subparsers.add_parser("parse", help="Parse reports into JSON")
    parse_parser.add_argument("paths", nargs="+", help="PDF or extracted .txt report files")
    parse_parser.add_argument("--output-dir", help="Write <name>.hes.json files here")
    _add_pdf_options(parse_parser)
    parse_parser.set_defaults(func=command_parse)

    text_parser = subparsers.add_parser("text", help="Print normalized report text")
    text_parser.add_argument("path", help="PDF report file")
    _add_pdf_options(text_parser)
    text_parser.set_defaults(func=command_text)

    check_parser = subparsers.add_parser("check", help="Dry-run every report in a directory")
    check_parser.add_argument("directory", help="Directory holding PDF or .txt reports")
    _add_pdf_options(check_parser)
    check_parser.set_defaults(func=command_check)

    return parser_obj


def main(argv: list[str] | None = None) -> int:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return 0
    configure_logging(args.verbose)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
