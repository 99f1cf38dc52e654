"""
Command-line entry point for the SharePoint archive migration.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from migration.config import AUTH_MODES, MigrationConfig, get_config
from migration.exceptions import MigrationError
from migration.pipeline import MigrationPipeline

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Migrate SharePoint archive files listed in an inventory spreadsheet to Azure Blob Storage",
    )
    parser.add_argument("--inventory", help="Inventory spreadsheet (.xlsx or .csv); default INVENTORY_PATH")
    parser.add_argument("--sheet", help="Worksheet name; default first sheet")
    parser.add_argument("--destination", help="Local staging root; default DESTINATION_ROOT")
    parser.add_argument("--ledger", help="Audit ledger CSV path; default LEDGER_PATH")
    parser.add_argument("--auth-mode", choices=AUTH_MODES, help="SharePoint credential variant; default AUTH_MODE")
    parser.add_argument("--fail-on-empty", action="store_true", help="Treat an empty inventory as an error")
    parser.add_argument(
        "--record-download-failures",
        action="store_true",
        help="Write a DownloadFailed ledger row for files that could not be downloaded",
    )
    parser.add_argument("--dry-run", action="store_true", help="Validate and group the inventory, transfer nothing")
    parser.add_argument("--json", action="store_true", help="Print the run summary as JSON for calling scripts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def apply_overrides(config: MigrationConfig, args: argparse.Namespace) -> MigrationConfig:
    """Copy command-line overrides onto the configuration"""
    if args.inventory:
        config.inventory.path = args.inventory
    if args.sheet:
        config.inventory.sheet_name = args.sheet
    if args.destination:
        config.processing.destination_root = args.destination
    if args.ledger:
        config.processing.ledger_path = args.ledger
    if args.auth_mode:
        config.sharepoint.auth_mode = args.auth_mode
    if args.fail_on_empty:
        config.processing.fail_on_empty_inventory = True
    if args.record_download_failures:
        config.processing.record_download_failures = True
    return config


def _print_plan(pipeline: MigrationPipeline) -> None:
    groups = pipeline.plan()
    print(f"\nDry run: {sum(len(g) for g in groups)} file(s) across {len(groups)} site(s)")
    for group in groups:
        print(f"   {group.address}: {len(group)} file(s)")
        for record in group.records:
            print(f"      - {record.name} ({record.size_mb:.2f} MB)")


def main(argv: Optional[List[str]] = None, pipeline: Optional[MigrationPipeline] = None) -> int:
    """
    Run the migration from the command line.

    Returns:
        Process exit code: 0 when the run completed (individual transfer
        failures included), 1 for fatal inventory or configuration errors
    """
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = apply_overrides(pipeline.config if pipeline else get_config(), args)

    if not config.inventory.path:
        print("No inventory given (use --inventory or INVENTORY_PATH)")
        return 1

    # Dry runs and injected pipelines need no credentials
    if not args.dry_run and pipeline is None:
        is_valid, errors = config.validate_all()
        if not is_valid:
            print("Configuration validation failed:")
            for error in errors:
                print(f"   - {error}")
            return 1

    if not args.json:
        print("\n" + "=" * 60)
        print("SharePoint Archive -> Azure Blob Storage Migration")
        print("=" * 60)
    logger.debug(json.dumps(config.to_dict(), indent=2))

    pipeline = pipeline or MigrationPipeline(config)

    try:
        if args.dry_run:
            _print_plan(pipeline)
            return 0
        summary = pipeline.run()
    except MigrationError as e:
        logger.error(str(e))
        print(f"\nMigration aborted: {e}")
        return 1

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    print(f"\nMigration Results:")
    print(f"   Inventory records: {summary.total_records}")
    print(f"   Sites: {summary.groups} ({summary.sessions_failed} could not be opened)")
    print(f"   Uploaded: {summary.uploaded}")
    print(f"   Upload failed: {summary.upload_failed}")
    print(f"   Download failed: {summary.download_failed}")
    print(f"   Skipped (site unavailable): {summary.skipped_records}")
    if summary.errored:
        print(f"   Aborted by unexpected errors: {summary.errored}")

    if summary.warnings:
        print(f"\nWarnings:")
        for warning in summary.warnings[:20]:
            print(f"   [WARN] {warning}")
        if len(summary.warnings) > 20:
            print(f"   ... and {len(summary.warnings) - 20} more")

    print(f"\nLedger: {config.processing.ledger_path}")
    print("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
