"""Command-line entry point."""
import argparse
import json
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from .config import AppSettings, ConfigManager
from .llm.providers import LLMProvider, create_provider
from .orchestrator import StatementProcessor
from .sanitizer import DataSanitizer
from .utils.exceptions import ConfigError, StatementFlowError
from .utils.logger import get_logger, setup_logging

logger = get_logger("cli")
cancel_requested = threading.Event()

PAGE_SEPARATOR = "\f"


def signal_handler(signum, frame):
    """Stop after the page currently being processed."""
    logger.info(f"Received signal {signum}, cancelling after the current page...")
    cancel_requested.set()


def read_pages(paths: List[Path]) -> List[str]:
    """Read text files; form feeds split a file into pages."""
    pages = []
    for path in paths:
        text = path.read_text(encoding="utf-8")
        pages.extend(page for page in text.split(PAGE_SEPARATOR) if page.strip())
    return pages


def parse_categories(value: Optional[str]) -> List[dict]:
    """Comma-separated names, or a JSON file holding names or {"name": ...} objects."""
    if not value:
        return []
    path = Path(value)
    if path.suffix == ".json" and path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [item if isinstance(item, dict) else {"name": str(item)} for item in data]
    return [{"name": name.strip()} for name in value.split(",") if name.strip()]


def _build_provider(settings: AppSettings) -> LLMProvider:
    config_manager = ConfigManager(settings)
    provider_config = config_manager.load_provider_config()

    is_valid, message = config_manager.validate_config(provider_config)
    if not is_valid:
        raise ConfigError(f"Invalid configuration: {message}")
    return create_provider(provider_config, settings)


def _write_output(data: dict, output: Optional[Path]) -> None:
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"✓ Wrote {output}")
    else:
        print(text)


def extract_command(args, settings: AppSettings) -> int:
    pages = read_pages(args.paths)
    if not pages:
        print("No page text found.", file=sys.stderr)
        return 1

    provider = _build_provider(settings)
    processor = StatementProcessor(provider, settings.min_balance_confidence)
    statement = processor.process_statement(
        pages,
        user_categories=parse_categories(args.categories),
        cancel_event=cancel_requested,
    )
    _write_output(statement.to_dict(), args.output)

    if statement.cancelled:
        return 130
    return 1 if statement.pages_processed and len(statement.failed_pages) == statement.pages_processed else 0


def sanitize_command(args, settings: AppSettings) -> int:
    sanitizer = DataSanitizer(settings.sanitization)
    text = args.path.read_text(encoding="utf-8")
    result = sanitizer.sanitize(text)
    _write_output(
        {
            "totalDetections": result.total_detections,
            "securityBreakdown": result.security_breakdown(),
            "sanitizedText": result.sanitized_text,
        },
        args.output,
    )
    return 0


def validate_command(args, settings: AppSettings) -> int:
    provider = _build_provider(settings)
    data = provider.validate_statement(args.path.read_text(encoding="utf-8"))
    _write_output(data, args.output)
    return 0 if data.get("is_valid_statement") else 1


def test_connection_command(args, settings: AppSettings) -> int:
    provider = _build_provider(settings)
    result = provider.test_connection()
    if result.success:
        print(f"✓ Connected to {provider.display_name}")
        return 0
    print(f"✗ Connection to {provider.display_name} failed: {result.error}")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="StatementFlow bank statement extraction")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract transactions from page text files")
    extract.add_argument("paths", nargs="+", type=Path, help="Text files; form feeds separate pages")
    extract.add_argument("--categories", help="Comma-separated category names or a JSON file")
    extract.add_argument("--output", type=Path, help="Write JSON here instead of stdout")
    extract.set_defaults(handler=extract_command)

    sanitize = subparsers.add_parser("sanitize", help="Mask sensitive data and print the security report")
    sanitize.add_argument("path", type=Path)
    sanitize.add_argument("--output", type=Path)
    sanitize.set_defaults(handler=sanitize_command)

    validate = subparsers.add_parser("validate", help="Detect bank name and statement period")
    validate.add_argument("path", type=Path)
    validate.add_argument("--output", type=Path)
    validate.set_defaults(handler=validate_command)

    test_connection = subparsers.add_parser("test-connection", help="Check the configured provider")
    test_connection.set_defaults(handler=test_connection_command)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the StatementFlow CLI."""
    args = build_parser().parse_args(argv)

    try:
        settings = AppSettings.load(args.config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        max_file_size_mb=settings.log_max_file_size_mb,
        backup_count=settings.log_backup_count,
        enabled=settings.log_enabled,
    )

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        return args.handler(args, settings)
    except ConfigError as e:
        logger.critical(f"Configuration error: {e}")
        return 1
    except StatementFlowError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
