"""Command line interface for downloading and uploading templates.

Usage:
    template-sync <theme_name> -d
    template-sync <theme_name> -u [template ...]
"""

import argparse
import sys
from collections.abc import Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError

from template_sync.exceptions import (
    ConfigurationError,
    GroupNotFound,
    InvalidGroup,
    LedgerCorrupt,
    TemplateSyncError,
)
from template_sync.files.local_file_set import LocalFileSet
from template_sync.models.config import AppConfig
from template_sync.store.record_store import RecordStore
from template_sync.store.sql_store import SQLRecordStore
from template_sync.sync.ledger import ModificationLedger
from template_sync.sync.sync_engine import SyncEngine
from template_sync.utils.config_loader import ConfigLoader
from template_sync.utils.console import StatusReporter
from template_sync.utils.logging_config import configure_logging

log = structlog.stdlib.get_logger()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="template-sync",
        description="Synchronize forum templates between the database and a local folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Download core and theme templates
  template-sync Default -d

  # Upload every changed template file
  template-sync Default -u

  # Upload only the header and footer templates
  template-sync Default -u header footer
        """,
    )

    parser.add_argument("theme", help="Name of the theme whose templates are synchronized")
    parser.add_argument(
        "templates",
        nargs="*",
        metavar="template",
        help="Restrict an upload to these template names",
    )

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "-d",
        "--download",
        action="store_true",
        help="Download templates from the database",
    )
    action.add_argument(
        "-u",
        "--upload",
        action="store_true",
        help="Upload changed template files to the database",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration YAML file (default: config/default.yaml)",
        default=None,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
        default=False,
    )
    return parser


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Template names may follow the action flag, so positionals and options
    are parsed intermixed. Exits with status 2 on usage errors.
    """
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if args.download and args.templates:
        parser.error("template names can only be given with -u/--upload")

    return args


def setup_logging(config: AppConfig, verbose: bool) -> None:
    """Configure logging from config, forcing DEBUG when verbose."""
    log_level = "DEBUG" if verbose else config.logging.log_level
    configure_logging(
        log_level=log_level,
        json_logs=config.logging.json_logs,
        log_file=config.logging.log_file,
    )
    log.debug("logging_configured", log_level=log_level, json_logs=config.logging.json_logs)


def create_sync_engine(
    config: AppConfig, store: RecordStore, reporter: StatusReporter
) -> SyncEngine:
    """Wire a sync engine from configuration and a record store."""
    files = LocalFileSet(
        config.storage.templates_path,
        extension=config.storage.extension,
        encoding=config.storage.encoding,
    )
    ledger = ModificationLedger(config.storage.ledger_path)
    return SyncEngine(
        store=store,
        files=files,
        ledger=ledger,
        reporter=reporter,
        core_group_id=config.sync.core_group_id,
        properties_key=config.sync.properties_key,
        version_code=config.sync.version_code,
    )


def run(args: argparse.Namespace, config: AppConfig, reporter: StatusReporter) -> int:
    """Run the requested action.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    store = SQLRecordStore.from_config(config.database)
    try:
        engine = create_sync_engine(config, store, reporter)
        if args.download:
            engine.download(args.theme)
        else:
            engine.upload(args.theme, args.templates)
        return 0
    except (GroupNotFound, InvalidGroup) as e:
        log.warning("theme_unusable", theme=args.theme, error=str(e))
        reporter.error(f"Error: {e}")
        return 1
    except LedgerCorrupt as e:
        log.error("ledger_corrupt", path=str(e.path), error=e.reason)
        reporter.error(f"Error: {e}")
        reporter.error("Fix or remove the ledger file manually; it is never reset automatically.")
        return 1
    except (TemplateSyncError, OSError, SQLAlchemyError) as e:
        log.error("sync_failed", theme=args.theme, error=str(e))
        reporter.error(f"Error: {e}")
        return 1
    finally:
        store.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the template-sync CLI.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_arguments(argv)
    reporter = StatusReporter()

    try:
        config = ConfigLoader().load_config(args.config)
    except ConfigurationError as e:
        configure_logging(log_level="DEBUG" if args.verbose else "WARNING")
        log.error("configuration_error", error=str(e))
        reporter.error(f"Configuration error: {e}")
        return 1

    setup_logging(config, args.verbose)
    log.info(
        "template_sync_started",
        theme=args.theme,
        action="download" if args.download else "upload",
        templates=args.templates,
    )

    try:
        return run(args, config, reporter)
    except KeyboardInterrupt:
        log.info("template_sync_interrupted_by_user")
        reporter.error("Interrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
