#!/usr/bin/env python3
"""
Duplicate Scan Runner

Finds likely duplicate inventory items and double-logged sales in catalog exports.

Usage:
    python scripts/run_duplicate_scan.py --inventory exports/inventory.csv --dry-run
    python scripts/run_duplicate_scan.py --inventory exports/inventory.csv --sales exports/sales.json --confirm

Options:
    --inventory FILE    Inventory export (CSV or JSON)
    --sales FILE        Sale history export (CSV or JSON)
    --threshold N       Title similarity threshold, 0-100 (default: 60 or DEDUPE_SIMILARITY_THRESHOLD;
                        70 or DEDUPE_TITLE_CHECK_THRESHOLD with --check-title)
    --output-dir DIR    Output directory (default: outputs/duplicate_detection)
    --dry-run           Analyze only, no file output (default)
    --confirm           Actually generate output files
    --check-title TEXT  Only list inventory items that look like duplicates of TEXT
    --verbose           Show every record in every group
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from duplicate_detection import (
    DetectionOptions,
    DuplicateAnalyzer,
    DuplicateReportGenerator,
    find_title_matches,
)
from duplicate_detection.analyzer import ExportLoadError
from duplicate_detection.config import DetectionConfig
from duplicate_detection.generator import GeneratorConfig

log = logging.getLogger("duplicate_scan")


def build_parser(config: DetectionConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find likely duplicate inventory items and sales"
    )
    parser.add_argument(
        "--inventory", "-i",
        help="Inventory export file (CSV or JSON)",
    )
    parser.add_argument(
        "--sales", "-s",
        help="Sale history export file (CSV or JSON)",
    )
    parser.add_argument(
        "--threshold", "-t",
        type=float,
        default=None,
        help=(
            f"Title similarity threshold 0-100 (default: {config.similarity_threshold:g} "
            f"for a scan, {config.title_check_threshold:g} with --check-title)"
        ),
    )
    parser.add_argument(
        "--output-dir", "-o",
        default=str(config.output_dir),
        help="Output directory for generated files",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=True,
        help="Analyze only, no file output (default)",
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Actually generate output files",
    )
    parser.add_argument(
        "--check-title",
        help="Only check this title against the inventory and list likely duplicates",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed output",
    )
    return parser


def check_title(title: str, analyzer: DuplicateAnalyzer, threshold: float) -> int:
    """Print inventory items that look like duplicates of one title."""
    matches = find_title_matches(title, analyzer.items, threshold=threshold)
    print(f"Title: {title}")
    print(f"Matches: {len(matches)} (threshold {threshold:g}%)")
    print()
    for match in matches:
        print(f"  - {match.record.id}: {match.record.name} ({match.similarity:.0f}%, {match.reason})")
    print()
    return 0


def main(argv=None, config: DetectionConfig = None) -> int:
    config = config or DetectionConfig.from_env()
    args = build_parser(config).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    # If --confirm specified, disable dry-run
    if args.confirm:
        args.dry_run = False

    if not args.inventory and not args.sales:
        print("ERROR: Provide --inventory and/or --sales")
        return 1

    if args.check_title and not args.inventory:
        print("ERROR: --check-title needs --inventory")
        return 1

    # An explicit --threshold applies to both the scan and --check-title
    if args.threshold is not None:
        threshold = args.threshold
    elif args.check_title:
        threshold = config.title_check_threshold
    else:
        threshold = config.similarity_threshold

    try:
        options = DetectionOptions(similarity_threshold=threshold)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    print("=" * 70)
    print("Duplicate Scan")
    print("=" * 70)
    print(f"Inventory: {args.inventory or '-'}")
    print(f"Sales:     {args.sales or '-'}")
    print(f"Output:    {args.output_dir}")
    print(f"Mode:      {'DRY-RUN (analysis only)' if args.dry_run else 'CONFIRM (will generate files)'}")
    print()

    analyzer = DuplicateAnalyzer(options)

    try:
        if args.inventory:
            print("Loading inventory...")
            item_count = analyzer.load_inventory(args.inventory)
            print(f"Loaded {item_count} inventory items")
        if args.sales:
            print("Loading sales...")
            sale_count = analyzer.load_sales(args.sales)
            print(f"Loaded {sale_count} sales")
    except (FileNotFoundError, ExportLoadError) as e:
        print(f"ERROR: {e}")
        return 1
    print()

    if config.max_inventory_items is not None and len(analyzer.items) > config.max_inventory_items:
        print(
            f"ERROR: {len(analyzer.items)} inventory items exceeds limit of "
            f"{config.max_inventory_items} (DEDUPE_MAX_INVENTORY_ITEMS)"
        )
        return 1

    if args.check_title:
        return check_title(args.check_title, analyzer, threshold)

    print("Scanning for duplicates...")
    result = analyzer.analyze()

    print()
    print("-" * 70)
    print("RESULTS")
    print("-" * 70)
    print()
    print(f"Inventory Duplicate Groups: {len(result.inventory_duplicates)}")
    print(f"Items in Groups: {result.total_inventory_duplicates}")
    print()

    for i, group in enumerate(result.inventory_duplicates[:20], 1):
        print(f"{i:2}. {group.records[0].name or '(untitled)'} ({group.count} items)")
        if args.verbose:
            for record in group.records:
                print(f"      - {record.id}: {record.name} (${record.purchase_price:.2f})")
    if len(result.inventory_duplicates) > 20:
        print(f"  ... and {len(result.inventory_duplicates) - 20} more")
    print()

    print("-" * 70)
    print(f"Sale Duplicate Groups: {len(result.sale_duplicates)}")
    print(f"Sales in Groups: {result.total_sale_duplicates}")
    print()

    for i, group in enumerate(result.sale_duplicates[:20], 1):
        first = group.records[0]
        print(f"{i:2}. {first.item_name or '(untitled)'} ${first.sale_price:.2f} {first.sale_date} ({group.count} sales)")
        if args.verbose:
            for record in group.records:
                print(f"      - {record.id}: {record.platform or 'unknown platform'}")
    print()

    # If dry-run, stop here
    if args.dry_run:
        print("=" * 70)
        print("DRY-RUN COMPLETE")
        print("=" * 70)
        print()
        print("To generate output files, run with --confirm")
        print()
        return 0

    print("=" * 70)
    print("GENERATING OUTPUT FILES")
    print("=" * 70)
    print()

    output_dir = Path(args.output_dir)
    generator = DuplicateReportGenerator(GeneratorConfig(output_dir=output_dir))
    for path in generator.generate_all(result):
        print(f"  Created: {path}")

    report_path = output_dir / "duplicate_report.md"
    with open(report_path, 'w', encoding='utf-8') as f:
        f.write(analyzer.generate_report(result))
    print(f"  Created: {report_path}")
    print()

    log.info(f"Wrote reports to {output_dir}")
    print("Next steps:")
    print("1. Review inventory_duplicates.csv and pick the item to keep in each group")
    print("2. Merge or link the rest from the inventory screen")
    print("3. Delete double-logged sales listed in sale_duplicates.csv")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
