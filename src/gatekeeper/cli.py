"""
Gatekeeper Sync command line interface.

Runs one reconciliation pass: reads static host MAC addresses from the
configuration store and atomically replaces the kernel filter set.
No arguments are required; it is meant to be fired by cron, hotplug,
or a chat-bot SYNC command.
"""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import sys

import yaml

from gatekeeper import __version__
from gatekeeper.config import LoggingConfig, SyncConfig, load_config, validate_config
from gatekeeper.errors import GatekeeperError
from gatekeeper.filterset import FilterSet, IpsetFilterSet, NftablesFilterSet
from gatekeeper.reconciler import SetReconciler
from gatekeeper.reporter import ExitCode, Reporter
from gatekeeper.store import ConfigStore, EntrySource, FileConfigStore, UciConfigStore

logger = logging.getLogger("gatekeeper")

SYSLOG_IDENT = "gatekeeper-sync"


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure logging based on config.

    Raises:
        OSError: If the log file cannot be opened.
    """
    level = getattr(logging, config.level.upper(), logging.WARNING)

    file_handler = None
    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    root = logging.getLogger()
    root.setLevel(level)

    if file_handler is not None:
        root.addHandler(file_handler)

    if config.syslog:
        try:
            handler = logging.handlers.SysLogHandler(address="/dev/log")
        except OSError as e:
            logger.warning("Syslog unavailable: %s", e)
        else:
            handler.ident = f"{SYSLOG_IDENT}: "
            handler.setFormatter(logging.Formatter("%(message)s"))
            root.addHandler(handler)


def build_store(config: SyncConfig) -> ConfigStore:
    """Create the configured configuration store."""
    if config.store.backend == "file":
        return FileConfigStore(config.store.path)
    return UciConfigStore(
        package=config.store.package,
        binary=config.store.uci_binary,
        timeout=config.store.timeout,
    )


def build_filter_set(config: SyncConfig) -> FilterSet:
    """Create the configured filter set handle."""
    if config.filter.backend == "ipset":
        return IpsetFilterSet(
            set_name=config.filter.set_name,
            binary=config.filter.binary or "ipset",
            timeout=config.filter.timeout,
        )
    return NftablesFilterSet(
        set_name=config.filter.set_name,
        table=config.filter.table,
        family=config.filter.family,
        binary=config.filter.binary or "nft",
        timeout=config.filter.timeout,
    )


def run(
    config: SyncConfig,
    store: ConfigStore,
    filter_set: FilterSet,
    reporter: Reporter | None = None,
    dry_run: bool = False,
) -> int:
    """
    Execute one reconciliation pass and report it.

    Args:
        config: Loaded configuration
        store: Configuration store to enumerate
        filter_set: Filter set to reconcile into
        reporter: Reporter for the summary line
        dry_run: Compute without applying

    Returns:
        Process exit code.
    """
    reporter = reporter or Reporter()
    source = EntrySource(store, kind=config.store.kind, field=config.store.field)
    reconciler = SetReconciler(filter_set, skip_unchanged=config.sync.skip_unchanged)

    try:
        result = reconciler.reconcile(source, dry_run=dry_run)
    except GatekeeperError as e:
        return int(reporter.failure(e))

    return int(reporter.success(result))


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="gatekeeper-sync",
        description="Synchronize static DHCP host MAC addresses into the gatekeeper filter set",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c", "--config",
        metavar="FILE",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and compute the set without changing it",
    )

    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    if args.verbose:
        config.logging.level = "debug"

    errors = validate_config(config)
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        setup_logging(config.logging)
    except OSError as e:
        print(f"Error: cannot open log file {config.logging.file}: {e}", file=sys.stderr)
        return int(ExitCode.CONFIG_ERROR)
    logger.debug("gatekeeper-sync %s starting", __version__)

    return run(
        config,
        build_store(config),
        build_filter_set(config),
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    sys.exit(main())
