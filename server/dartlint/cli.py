"""
Command-line front end for dartlint.

Examples:
  dartlint analyze lib/ --format json
  dartlint analyze lib/main.dart --runtime-only --jobs 1
  dartlint serve . --port 8765
  dartlint init-config
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from .config import EngineConfig, find_config_file, get_default_config, load_config, save_config
from .discovery import discover_dart_files, load_sources
from .errors import DartLintError
from .registry import build_registry
from .runner import AnalysisEngine
from .schema import format_output

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_config(args: argparse.Namespace) -> EngineConfig:
    """Load the config file (explicit or found upward from the path) and apply flags."""
    config_path = getattr(args, "config", None) or find_config_file(args.path)
    config = load_config(config_path) if config_path else get_default_config()

    changes = {}
    if getattr(args, "jobs", None) is not None:
        changes["jobs"] = args.jobs
        if args.jobs == 1:
            changes["parallel"] = False
    if getattr(args, "max_line_length", None) is not None:
        changes["max_line_length"] = args.max_line_length
    if changes:
        config = config.with_overrides(**changes)
    if getattr(args, "style_only", False):
        config.runtime_rules.enabled = False
    if getattr(args, "runtime_only", False):
        config.style_rules.enabled = False
    return config


def build_engine(args: argparse.Namespace) -> AnalysisEngine:
    return AnalysisEngine(build_registry(), resolve_config(args))


def analyze_path(engine: AnalysisEngine, path: str):
    files = discover_dart_files(path, engine.config.exclude_patterns)
    return engine.run(load_sources(files))


def cmd_analyze(args: argparse.Namespace) -> int:
    engine = build_engine(args)
    start = time.time()
    result = analyze_path(engine, args.path)
    metrics = {"total_ms": (time.time() - start) * 1000}
    print(format_output(result, args.format, metrics))
    return EXIT_FINDINGS if result.has_errors() else EXIT_OK


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from dartlint_server.main import create_app

    engine = build_engine(args)
    result = analyze_path(engine, args.path)
    print(f"Analyzed {result.files_analyzed} files: {len(result)} diagnostics", file=sys.stderr)
    uvicorn.run(create_app(engine, project_path=args.path), host=args.host, port=args.port)
    return EXIT_OK


def cmd_init_config(args: argparse.Namespace) -> int:
    if os.path.exists(args.output) and not args.force:
        print(f"Error: {args.output} already exists (use --force to overwrite)", file=sys.stderr)
        return EXIT_USAGE
    save_config(get_default_config(), args.output)
    print(f"Wrote default configuration to {args.output}")
    return EXIT_OK


def cmd_rules(args: argparse.Namespace) -> int:
    engine = build_engine(args)
    for rule in engine.describe_rules():
        state = "on " if rule["enabled"] else "off"
        print(f"{state} {rule['id']:<32} {rule['category']:<8} {rule['severity']:<8} {rule['description']}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dartlint",
        description="Style and runtime-safety analysis for Dart code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a file or directory")
    analyze.add_argument("path", help="Dart file or directory to analyze")
    group = analyze.add_mutually_exclusive_group()
    group.add_argument("--style-only", action="store_true", help="Run only style rules")
    group.add_argument("--runtime-only", action="store_true", help="Run only runtime rules")
    analyze.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    analyze.add_argument("--config", help="Path to configuration file")
    analyze.add_argument("--jobs", type=int, help="Worker threads (0=auto, 1=sequential)")
    analyze.add_argument("--max-line-length", type=int, help="Override max_line_length")
    analyze.set_defaults(func=cmd_analyze)

    serve = sub.add_parser("serve", help="Analyze a project and serve diagnostics over HTTP")
    serve.add_argument("path", nargs="?", default=".", help="Project directory")
    serve.add_argument("--config", help="Path to configuration file")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8765)
    serve.set_defaults(func=cmd_serve)

    init = sub.add_parser("init-config", help="Write a default configuration file")
    init.add_argument("output", nargs="?", default="dartlint.yaml")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init.set_defaults(func=cmd_init_config)

    rules = sub.add_parser("rules", help="List rules and whether they are enabled")
    rules.add_argument("path", nargs="?", default=".", help="Directory used to find the config file")
    rules.add_argument("--config", help="Path to configuration file")
    rules.set_defaults(func=cmd_rules)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except DartLintError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
