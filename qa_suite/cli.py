"""
Command Line Interface for the QA suite toolkit.

Subcommands:
- generate: ask the generation service for a suite and save it as JSON
- export: write the spreadsheet, Playwright bundle or raw JSON for a saved suite
- import-results: merge a Playwright JSON report into a saved suite
- init-config: write a starter user config file

Exits non-zero with a machine-readable error report on stderr when a step fails.
"""

from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional
import logging

from pydantic import ValidationError

from .config import init_default_config, load_settings
from .exceptions import (
    LLMRuntimeError,
    QASuiteError,
    ReportImportError,
    SchemaViolationError,
)
from .generator import SuiteGenerator
from .projections.script import count_automated_cases
from .projections.spreadsheet import EXPORT_FILENAME
from .runtime import create_runtime
from .session import SuiteSession

SUITE_FILENAME = "suite.json"


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Reduce noise from some libraries
    logging.getLogger('openai').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""

    parser = argparse.ArgumentParser(
        prog="qa-suite",
        description="QA suite toolkit - generate test suites, export them and reconcile Playwright results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate a suite (needs QA_SUITE_API_KEY or API_KEY)
  qa-suite generate --url https://movie-streaming-demo.vercel.app --output-dir ./qa

  # Spreadsheet and Playwright bundle
  qa-suite export --suite ./qa/suite.json --format xlsx --output-dir ./qa
  qa-suite export --suite ./qa/suite.json --format script --output-dir ./qa/e2e

  # After: npx playwright test e2e.spec.ts --reporter=json > results.json
  qa-suite import-results --suite ./qa/suite.json --report results.json
        """
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    gen = subparsers.add_parser('generate', help='Generate a test suite for a website')
    gen.add_argument('--url', required=True, help='Target website URL')
    gen.add_argument(
        '--output-dir',
        type=Path,
        default=Path.cwd(),
        help='Directory for suite.json (default: current directory)'
    )
    gen.add_argument('--provider', choices=['gemini', 'openai', 'local'], help='Generation service')
    gen.add_argument('--model', help='Model name')
    gen.add_argument('--base-url', help='Override the service endpoint')
    gen.add_argument('--api-key', help='API key for hosted services')

    exp = subparsers.add_parser('export', help='Export a saved suite')
    exp.add_argument('--suite', type=Path, required=True, help='Path to suite JSON')
    exp.add_argument(
        '--format',
        choices=['xlsx', 'script', 'json'],
        default='xlsx',
        help='Projection to write (default: xlsx)'
    )
    exp.add_argument(
        '--output-dir',
        type=Path,
        default=Path.cwd(),
        help='Output directory (default: current directory)'
    )

    imp = subparsers.add_parser('import-results', help='Merge a Playwright JSON report into a suite')
    imp.add_argument('--suite', type=Path, required=True, help='Path to suite JSON')
    imp.add_argument('--report', type=Path, required=True, help='Path to Playwright JSON report')
    imp.add_argument('--output', type=Path, help='Where to write the updated suite (default: overwrite --suite)')

    cfg = subparsers.add_parser('init-config', help='Write ~/.config/qa-suite/config.toml')
    cfg.add_argument('--force', action='store_true', help='Overwrite an existing config file')

    return parser


def validate_inputs(args: argparse.Namespace) -> None:
    """Validate command line inputs."""
    for name in ('suite', 'report'):
        path = getattr(args, name, None)
        if path is not None and not path.exists():
            raise FileNotFoundError(f"{name.capitalize()} file not found: {path}")


def run_generate(args: argparse.Namespace) -> int:
    settings = load_settings(
        provider=args.provider,
        model=args.model,
        base_url=args.base_url,
        api_key=args.api_key
    )
    runtime = create_runtime(settings, require_available=not settings.is_hosted)
    generator = SuiteGenerator(
        runtime,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens
    )

    session = SuiteSession()
    session.generate(args.url, generator)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    suite_path = args.output_dir / SUITE_FILENAME
    suite_path.write_text(session.export_json(), encoding='utf-8')

    suite = session.suite
    automated = count_automated_cases(suite)
    print(f"✅ Test Suite Generated Successfully")
    print(f"Project: {suite.title}")
    print(f"Base URL: {suite.base_url}")
    print(f"")
    print(f"📊 Summary:")
    print(f"  Test Cases: {len(suite.cases)}")
    print(f"  Scenario Groups: {len(session.runs())}")
    print(f"  Automated: {automated}")
    print(f"")
    print(f"📁 Suite: {suite_path}")
    return 0


def run_export(args: argparse.Namespace) -> int:
    session = SuiteSession()
    session.load(args.suite)
    args.output_dir.mkdir(parents=True, exist_ok=True)

    if args.format == 'xlsx':
        path = session.export_spreadsheet(args.output_dir / EXPORT_FILENAME)
        print(f"📁 Spreadsheet: {path}")
    elif args.format == 'script':
        paths = session.export_script_bundle(args.output_dir)
        for name, path in paths.items():
            print(f"📁 {name.capitalize()}: {path}")
    else:
        path = args.output_dir / args.suite.name
        if path.resolve() == args.suite.resolve():
            path = args.output_dir / f"{args.suite.stem}.export.json"
        path.write_text(session.export_json(), encoding='utf-8')
        print(f"📁 JSON: {path}")
    return 0


def run_import_results(args: argparse.Namespace) -> int:
    session = SuiteSession()
    session.load(args.suite)

    result = session.import_report(args.report.read_bytes())

    output = args.output or args.suite
    output.write_text(session.export_json(), encoding='utf-8')

    passed = sum(1 for o in result.outcomes.values() if o.status == "Pass")
    print(f"✅ Updated {len(result.matched_ids)} test results")
    print(f"  Reported: {len(result.outcomes)} ({passed} passed)")
    if result.unmatched_ids:
        print(f"  Unknown ids: {', '.join(result.unmatched_ids)}")
    print(f"📁 Suite: {output}")
    return 0


def print_error_summary(error: Exception) -> None:
    """Print machine-readable error summary to stderr."""

    error_report = {
        "error_type": type(error).__name__,
        "message": str(error),
        "details": getattr(error, 'details', None)
    }
    if isinstance(error, SchemaViolationError):
        error_report["errors"] = error.errors[:10]
    elif isinstance(error, ReportImportError):
        error_report["path"] = error.path

    print(json.dumps(error_report, indent=2, ensure_ascii=False, default=str), file=sys.stderr)


COMMANDS = {
    'generate': run_generate,
    'export': run_export,
    'import-results': run_import_results,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command == 'init-config':
        path = init_default_config(force=args.force)
        print(f"Config written: {path}")
        return 0

    try:
        validate_inputs(args)
        return COMMANDS[args.command](args)

    except (LLMRuntimeError, SchemaViolationError, ReportImportError) as e:
        logger.error(str(e))
        print_error_summary(e)
        return 1

    except (QASuiteError, ValidationError, ValueError, FileNotFoundError) as e:
        logger.error(f"Input validation failed: {e}")
        print_error_summary(e)
        return 2

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard Unix exit code for SIGINT

    except Exception as e:
        logger.exception("Unexpected error occurred")
        print_error_summary(e)
        return 3


if __name__ == '__main__':
    sys.exit(main())
