"""Batch certificate collection for a list of hosts."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from api.api import fetch_for_request
from config import Settings, get_settings
from errors import CertInfoError
from info_formatter import FIELDS, report_fields
from log import setup_logging


logger = logging.getLogger(__name__)


def _normalize_input_format(path: Path, explicit: Optional[str]) -> str:
    if explicit:
        return explicit.lower()
    suffix = path.suffix.lower()
    if suffix in {".txt", ".list"}:
        return "txt"
    if suffix == ".jsonl":
        return "jsonl"
    return "csv"


def _normalize_output_format(path: Path, explicit: Optional[str]) -> str:
    if explicit:
        return explicit.lower()
    if path.suffix.lower() == ".csv":
        return "csv"
    return "jsonl"


def _read_txt(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            host = line.strip()
            if not host or host.startswith("#"):
                continue
            yield host


def _read_csv(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            if not row:
                continue
            host = (row.get("host") or row.get("url") or row.get("URL") or "").strip()
            if host:
                yield host


def _read_jsonl(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            raw = line.strip()
            if not raw or raw.startswith("#"):
                continue
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("skipping malformed line: %s", raw)
                continue
            if isinstance(data, dict):
                data = data.get("host") or data.get("url") or ""
            if isinstance(data, str) and data.strip():
                yield data.strip()


def _iter_inputs(path: Path, input_format: str) -> Iterator[str]:
    if input_format == "txt":
        return _read_txt(path)
    if input_format == "jsonl":
        return _read_jsonl(path)
    return _read_csv(path)


def collect_one(host: str, settings: Settings) -> Dict:
    """Return the report fields for ``host``, or the error that stopped it."""
    row: Dict = {"input": host, "error": None, "error_kind": None}
    try:
        info = fetch_for_request(host, settings)
    except CertInfoError as exc:
        logger.warning("%s: %s", host, exc)
        row.update({"error": str(exc), "error_kind": exc.kind})
        return row
    row.update(report_fields(info))
    return row


def _write_jsonl(rows: Iterable[Dict], path: Path) -> None:
    with path.open("w", encoding="utf-8") as handle:
        for row in rows:
            handle.write(json.dumps(row, ensure_ascii=False))
            handle.write("\n")


def _write_csv(rows: Iterable[Dict], path: Path) -> None:
    fieldnames = ["input", *FIELDS, "error", "error_kind"]
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            row = dict(row)
            if "SANs" in row:
                row["SANs"] = " ".join(row["SANs"])
            writer.writerow(row)


def run_collect(input_path: Path, output_path: Path, input_format: str, output_format: str, settings: Settings) -> int:
    outputs = [collect_one(host, settings) for host in _iter_inputs(input_path, input_format)]

    if output_format == "csv":
        _write_csv(outputs, output_path)
    else:
        _write_jsonl(outputs, output_path)

    failed = sum(1 for row in outputs if row["error"])
    logger.info("collected %d hosts (%d failed) into %s", len(outputs), failed, output_path)
    return failed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect TLS leaf certificate details for a list of hosts.")
    parser.add_argument("input", help="Path to input list (.txt, .csv, .jsonl)")
    parser.add_argument("output", help="Path to output file (.jsonl or .csv)")
    parser.add_argument(
        "--input-format",
        choices=["txt", "csv", "jsonl"],
        help="Override input format detection",
    )
    parser.add_argument(
        "--output-format",
        choices=["jsonl", "csv"],
        help="Override output format detection",
    )
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    input_path = Path(args.input)
    output_path = Path(args.output)

    settings = get_settings()
    setup_logging(settings.log_level)

    if not input_path.exists():
        print(f"Input file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    input_format = _normalize_input_format(input_path, args.input_format)
    output_format = _normalize_output_format(output_path, args.output_format)

    failed = run_collect(input_path, output_path, input_format, output_format, settings)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
