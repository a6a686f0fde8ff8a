"""Command line entry point for the role standardizer."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from standardizer.config.environment import EnvironmentConfig
from standardizer.config.exceptions import ConfigurationError
from standardizer.config.loader import load_config
from standardizer.config.models import AppConfig
from standardizer.domain.models import ContextTag
from standardizer.logging import get_logger
from standardizer.logging.config import configure_logging
from standardizer.persistence.database import close_database, init_database
from standardizer.persistence.exceptions import PersistenceError
from standardizer.persistence.seed import load_taxonomy_seed, seed_taxonomy
from standardizer.pipeline.exceptions import ImportFileError
from standardizer.pipeline.importer import read_csv_file
from standardizer.service import StandardizationService, build_service

logger = get_logger(__name__, component="cli")

LOG_LEVEL_CHOICES = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="standardizer",
        description="Role Standardizer - fuzzy role title and spreadsheet header matching",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present, else built-in defaults)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=LOG_LEVEL_CHOICES,
        help="Log level (overrides config and environment)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    match_parser = subparsers.add_parser("match", help="Resolve role titles")
    match_parser.add_argument("titles", nargs="+", help="Role titles to resolve")

    headers_parser = subparsers.add_parser("map-headers", help="Map spreadsheet headers to fields")
    headers_parser.add_argument("headers", nargs="*", help="Raw header strings in column order")
    headers_parser.add_argument("--file", type=Path, help="Read headers from a CSV file instead")

    import_parser = subparsers.add_parser("import", help="Import a CSV file")
    import_parser.add_argument("file", type=Path, help="CSV file to import")
    import_parser.add_argument(
        "--auto-confirm",
        type=int,
        default=None,
        metavar="CONFIDENCE",
        help="Learn matches at or above this confidence (overrides config)",
    )
    _add_context_arguments(import_parser)
    import_parser.add_argument(
        "--show-rows", action="store_true", help="Include normalized rows in the output"
    )

    confirm_parser = subparsers.add_parser("confirm", help="Record a confirmed title mapping")
    confirm_parser.add_argument("original_title")
    confirm_parser.add_argument("standardized_title")
    confirm_parser.add_argument("--seniority", default=None, help="Canonical seniority level")
    confirm_parser.add_argument("--family", default=None, help="Canonical role family")
    _add_context_arguments(confirm_parser)

    verify_parser = subparsers.add_parser("verify", help="Mark a learned mapping as verified")
    verify_parser.add_argument("original_title")

    report_parser = subparsers.add_parser("report", help="Report an issue with a learned mapping")
    report_parser.add_argument("original_title")

    seed_parser = subparsers.add_parser("seed-taxonomy", help="Load the role taxonomy")
    seed_parser.add_argument(
        "--file", type=Path, default=None, help="Taxonomy YAML (default: bundled taxonomy)"
    )
    seed_parser.add_argument(
        "--append", action="store_true", help="Keep existing entries instead of replacing them"
    )

    return parser


def _add_context_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--industry", default=None, help="Industry context tag")
    parser.add_argument("--region", default=None, help="Region context tag")
    parser.add_argument("--company-size", default=None, help="Company size context tag")


def _context_from_args(args: argparse.Namespace, app_config: AppConfig) -> ContextTag:
    defaults = app_config.import_context
    return ContextTag(
        industry=args.industry or defaults.industry,
        region=args.region or defaults.region,
        company_size=args.company_size or defaults.company_size,
    )


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def run_command(
    args: argparse.Namespace, app_config: AppConfig, service: StandardizationService
) -> int:
    """Execute one subcommand. Returns the process exit code."""
    if args.command == "match":
        results = service.match_role_titles_batch(args.titles)
        _print_json([result.to_dict() for result in results.values()])
        return 0

    if args.command == "map-headers":
        headers: List[str] = list(args.headers)
        if args.file:
            headers, _ = read_csv_file(args.file)
        if not headers:
            print("No headers given; pass headers or --file", file=sys.stderr)
            return 2
        detailed = service.header_mapper.map_headers_detailed(headers)
        _print_json(
            {
                "mapping": detailed.mapping,
                "scores": {a.header: round(a.score, 3) for a in detailed.assignments},
                "unmapped": detailed.unmapped,
            }
        )
        return 0

    if args.command == "import":
        result = service.import_table(
            args.file,
            context=_context_from_args(args, app_config),
            auto_confirm_threshold=args.auto_confirm,
        )
        payload = result.summary()
        if args.show_rows:
            payload["rows"] = [row.to_dict() for row in result.rows]
        _print_json(payload)
        return 1 if result.had_errors else 0

    if args.command == "confirm":
        context = _context_from_args(args, app_config)
        recorded = service.confirm_mapping(
            args.original_title,
            args.standardized_title,
            seniority_level=args.seniority,
            role_family=args.family,
            industry=context.industry,
            region=context.region,
            company_size=context.company_size,
        )
        return 0 if recorded else 1

    if args.command == "verify":
        return 0 if service.mark_verified(args.original_title) else 1

    if args.command == "report":
        return 0 if service.mark_reported(args.original_title) else 1

    if args.command == "seed-taxonomy":
        entries = load_taxonomy_seed(args.file)
        inserted = seed_taxonomy(entries, replace=not args.append)
        print(f"Seeded {inserted} taxonomy entries")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the role standardizer CLI.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        # Load configuration before logging so the format is known
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Role standardizer starting",
            extra={
                "event": "service.starting",
                "command": args.command,
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
            },
        )

        init_database(env_config.database_url)
        try:
            service = build_service(app_config)
            exit_code = run_command(args, app_config, service)
        finally:
            close_database()

        logger.info(
            "Role standardizer finished",
            extra={
                "event": "service.stopping",
                "command": args.command,
                "exit_code": exit_code,
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except ImportFileError as e:
        print(f"Import Error: {e}", file=sys.stderr)
        logger.error(
            f"Import file error: {e}",
            extra={"event": "import.file.failed", "error_type": type(e).__name__},
        )
        return 1
    except PersistenceError as e:
        print(f"Database Error: {e}", file=sys.stderr)
        logger.error(
            f"Persistence error: {e}",
            extra={"event": "database.error", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
