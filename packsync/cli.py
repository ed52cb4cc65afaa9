"""
PackSync - Client CLI Module

Command-line entry point for downloading a modpack. Loads configuration,
builds the security strategy, runs one sync and logs to a timestamped file.

Author: PackSync Project
"""

import argparse
import getpass
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .exceptions import PackSyncConfigError
from .managers import ConfigManager, DEFAULT_CLIENT_CONFIG, default_config_path
from .operations import SyncClient
from .security import create_security_strategy


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

CONFIG_FILE_NAME = "packsync-client.json"


def setup_cli_logging(config_manager: ConfigManager) -> Path:
    """
    Setup logging for CLI mode with timestamped log file.

    Creates log file with format: packsync-YYYY-MM-DD-HH-MM-SS.log
    in a "logs" subdirectory next to the config file.

    Args:
        config_manager: ConfigManager instance for log settings

    Returns:
        Path to the created log file
    """
    log_level = config_manager.get("log_level", "INFO")

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_dir = config_manager.config_file.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"packsync-{timestamp}.log"

    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)  # Also output to console
        ]
    )

    logger = logging.getLogger(__name__)
    logger.info(f"PackSync CLI - Log file: {log_file}")
    logger.info(f"Log level: {log_level}")

    return log_file


def cleanup_old_logs(config_manager: ConfigManager, current_log: Path):
    """
    Delete log files older than retention period.

    Args:
        config_manager: ConfigManager instance for retention settings
        current_log: Path to current log file (don't delete this)
    """
    logger = logging.getLogger(__name__)
    retention_days = config_manager.get("log_retention_days", 30)

    if retention_days <= 0:
        return  # Retention disabled

    cutoff_time = datetime.now().timestamp() - (retention_days * 86400)

    deleted_count = 0
    for log_file in current_log.parent.glob("packsync-*.log"):
        if log_file == current_log:
            continue

        try:
            if log_file.stat().st_mtime < cutoff_time:
                log_file.unlink()
                deleted_count += 1
        except OSError as e:
            logger.warning(f"Failed to delete old log file {log_file}: {e}")

    if deleted_count > 0:
        logger.info(f"Deleted {deleted_count} old log file(s)")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for packsync-client."""
    parser = argparse.ArgumentParser(
        description='PackSync - download the modpack published by a PackSync server'
    )
    parser.add_argument('--config', type=Path, default=None,
                        help=f'Config file (default: {CONFIG_FILE_NAME} in the current directory)')
    parser.add_argument('--server', help='Remote server URL (overrides config)')
    parser.add_argument('--output-dir', help='Folder to download into (overrides config)')
    parser.add_argument('--exclude', action='append', default=[], metavar='MODID',
                        help='Mod id to skip; may be given more than once')
    parser.add_argument('--set-password', action='store_true',
                        help='Prompt for the shared password, store it in the OS credential store and exit')
    return parser


def run_sync(config_mgr: ConfigManager, args: argparse.Namespace) -> int:
    """
    Run one modpack download with settings from config and arguments.

    Args:
        config_mgr: Loaded ConfigManager
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logger = logging.getLogger(__name__)

    remote_server = args.server or config_mgr.get("remote_server")
    output_dir = Path(args.output_dir or config_mgr.get("output_dir"))
    excluded_mod_ids = list(config_mgr.get("excluded_mod_ids") or []) + args.exclude

    try:
        security = create_security_strategy(config_mgr.resolve_security_settings())
    except PackSyncConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    logger.info("=" * 60)
    logger.info(f"Starting PackSync download into {output_dir}")
    if excluded_mod_ids:
        logger.info(f"Excluded mod ids: {', '.join(excluded_mod_ids)}")
    logger.info("=" * 60)

    client = SyncClient(output_dir, security, excluded_mod_ids, remote_server)
    success = client.wait_for_result()

    manifest = client.get_manifest()
    if manifest is not None:
        logger.info(f"Server manifest lists {len(manifest.files)} file(s)")

    if success:
        logger.info("=" * 60)
        logger.info("DOWNLOAD COMPLETED SUCCESSFULLY")
        logger.info("=" * 60)
        return EXIT_SUCCESS

    logger.error("=" * 60)
    logger.error("DOWNLOAD FAILED")
    logger.error("=" * 60)
    return EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for packsync-client.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    args = build_parser().parse_args(argv)
    config_mgr = ConfigManager(args.config or default_config_path(CONFIG_FILE_NAME), DEFAULT_CLIENT_CONFIG)

    try:
        config_mgr.load_config()
    except PackSyncConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.set_password:
        config_mgr.store_password(getpass.getpass("Modpack password: "))
        return EXIT_SUCCESS

    log_file = setup_cli_logging(config_mgr)
    cleanup_old_logs(config_mgr, log_file)

    try:
        return run_sync(config_mgr, args)
    except KeyboardInterrupt:
        logging.getLogger(__name__).warning("Operation cancelled by user (Ctrl+C)")
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
