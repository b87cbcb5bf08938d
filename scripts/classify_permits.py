#!/usr/bin/env python3
"""CLI script to classify a permit CSV export into housing categories."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from middlehousing.classification.rules import ClassificationEngine, RuleConfigError  # noqa: E402
from middlehousing.core.config import Settings  # noqa: E402
from middlehousing.core.logging import configure_logging  # noqa: E402
from middlehousing.core.types import FilterStatus  # noqa: E402
from middlehousing.ingest.csv_loader import DatasetError, load_csv  # noqa: E402
from middlehousing.ingest.pipeline import classify_rows, filter_results, summarize  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Classify construction permits into middle housing categories."
    )
    parser.add_argument(
        "csv_path",
        type=str,
        nargs="?",
        default=None,
        help="Permit CSV file. Defaults to the configured default dataset.",
    )
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="Path to an alternate keyword rules YAML file.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to write classified records as JSON.",
    )
    parser.add_argument(
        "--middle-only",
        action="store_true",
        help="Only write middle housing records to --output.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Load settings from environment.
    settings = Settings()
    configure_logging(settings.log_level)

    csv_path = args.csv_path or settings.ingest.default_csv_path
    try:
        engine = ClassificationEngine(
            rules_path=args.rules or settings.classifier.rules_path,
            cache_size=settings.classifier.cache_size,
        )
        rows = load_csv(csv_path)
    except (RuleConfigError, DatasetError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    results = classify_rows(rows, engine, max_workers=settings.ingest.max_workers)
    summary = summarize(results)

    print(f"Classified {summary.total} permits from {csv_path}")
    print(f"Middle housing: {summary.middle_housing}")
    for category, count in summary.by_category.items():
        print(f"  {category.value:<10} {count}")

    if args.output:
        status = FilterStatus.MIDDLE_HOUSING_ONLY if args.middle_only else FilterStatus.ALL
        selected = filter_results(results, status)
        payload = [r.model_dump(mode="json") for r in selected]
        Path(args.output).write_text(json.dumps(payload, indent=2))
        print(f"Wrote {len(payload)} records to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
