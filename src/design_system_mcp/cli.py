"""
Command line interface for design-system-mcp.

Commands:
    scan      List the story files that would be analyzed
    list      Extract components and print a summary
    parse     Extract components and write context output
    generate  Consolidate inline context files into one MCP document
    serve     Run the MCP server
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .analysis.exceptions import (
    ChainAborted,
    ConfigurationError,
    DiscoveryError,
    format_error_details,
)
from .analysis.merge import MergeEngine, filter_ignored
from .analysis.models import AnalyzerResult, DiagnosticLevel, MergeStrategy
from .config.settings import (
    DesignLibrary,
    DesignSystemConfig,
    Framework,
    OutputMode,
    load_config,
)
from .discovery.story_discovery import find_story_files
from .output.generator import (
    find_inline_context_file,
    generate_mcp_output,
    load_inline_context_file,
    write_inline_context_files,
    write_mcp_output,
)
from .services.extraction_service import ExtractionReport, ExtractionService

logger = logging.getLogger(__name__)

INLINE_ANALYZER = "inline"


def configure_logging(verbose: bool = False) -> None:
    level_name = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="design-system-mcp",
        description="Extract design system components from Storybook stories into MCP context",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  design-system-mcp scan --root ./packages/ui
  design-system-mcp parse --output-mode inline-files --force
  design-system-mcp generate --output design-system.json
  design-system-mcp serve --transport sse
        """,
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to dsm.config.json")
    common.add_argument("--root", help="Design system root directory (default: cwd)")
    common.add_argument("--framework", choices=[f.value for f in Framework])
    common.add_argument("--design-library", choices=[d.value for d in DesignLibrary])
    common.add_argument("--base-import-path", help="Package path used in import statements")
    common.add_argument("--output", help="Output file for single-file mode")
    common.add_argument("--output-mode", choices=[m.value for m in OutputMode])
    common.add_argument(
        "--strategy",
        choices=[s.value for s in MergeStrategy],
        help="How records for the same component are combined",
    )
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("scan", parents=[common], help="List story files")
    subparsers.add_parser("list", parents=[common], help="List extracted components")

    parse_cmd = subparsers.add_parser(
        "parse", parents=[common], help="Extract components and write output"
    )
    parse_cmd.add_argument(
        "--force",
        action="store_true",
        help="Re-analyze stories whose inline context file is up to date",
    )

    subparsers.add_parser(
        "generate", parents=[common], help="Build the MCP document from inline files"
    )

    serve_cmd = subparsers.add_parser("serve", parents=[common], help="Run the MCP server")
    serve_cmd.add_argument("--transport", choices=["stdio", "sse"])
    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "framework": args.framework,
        "design_library": args.design_library,
        "base_import_path": args.base_import_path,
        "output_path": args.output,
        "output_mode": args.output_mode,
        "merge_strategy": args.strategy,
    }


def _log_diagnostics(report: ExtractionReport) -> None:
    for diagnostic in report.diagnostics:
        message = f"[{diagnostic.source or '-'}] {diagnostic.message}"
        if diagnostic.level == DiagnosticLevel.ERROR:
            logger.error(message)
        elif diagnostic.level == DiagnosticLevel.WARNING:
            logger.warning(message)
        else:
            logger.info(message)


def cmd_scan(config: DesignSystemConfig, args: argparse.Namespace) -> int:
    story_files = find_story_files(config)
    for story_file in story_files:
        print(os.path.relpath(story_file, config.root_directory))
    print(f"\n{len(story_files)} story file(s) found in {config.root_directory}")
    return 0


def cmd_list(config: DesignSystemConfig, args: argparse.Namespace) -> int:
    report = ExtractionService(config).extract()
    _log_diagnostics(report)
    for entity in sorted(report.entities, key=lambda e: e.key):
        category = entity.record.category or "general"
        print(f"{entity.name:<30} {category:<15} {', '.join(entity.contributors)}")
    print(f"\n{len(report.entities)} component(s)")
    return 0


def cmd_parse(config: DesignSystemConfig, args: argparse.Namespace) -> int:
    inline = config.output.mode == OutputMode.INLINE_FILES
    service = ExtractionService(config)
    report = service.extract(skip_up_to_date=inline and not args.force)
    _log_diagnostics(report)

    if inline:
        written = write_inline_context_files(
            ((f.story_file, f.entities) for f in report.files), config
        )
        print(
            f"Wrote {written} inline context file(s); "
            f"{report.files_skipped} up-to-date, {report.files_failed} failed"
        )
    else:
        output_path = write_mcp_output(
            generate_mcp_output(report.entities, config), config.resolve_output_path()
        )
        print(f"Wrote {len(report.entities)} component(s) to {output_path}")

    return 0


def collect_inline_results(config: DesignSystemConfig) -> List[AnalyzerResult]:
    """Read every existing inline context file as an analyzer result."""
    results = []
    for story_file in find_story_files(config):
        path = find_inline_context_file(story_file, config)
        if path is None:
            continue
        try:
            records = load_inline_context_file(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping unreadable context file {path}: {e}")
            continue
        results.append(
            AnalyzerResult(
                analyzer=INLINE_ANALYZER, records=records, metadata={"contextFile": path}
            )
        )
    return results


def cmd_generate(config: DesignSystemConfig, args: argparse.Namespace) -> int:
    results = collect_inline_results(config)
    if results:
        service = ExtractionService(config)
        manual = service.manual_result()
        if manual is not None:
            results.append(manual)
        outcome = MergeEngine().merge(results, config.chain.merge_strategy)
        entities = filter_ignored(outcome.entities, config.ignore_components)
        logger.info(f"Consolidating {len(results)} context file(s)")
    else:
        logger.info("No inline context files found, extracting from sources")
        report = ExtractionService(config).extract()
        _log_diagnostics(report)
        entities = report.entities

    output_path = write_mcp_output(
        generate_mcp_output(entities, config), config.resolve_output_path()
    )
    print(f"Wrote {len(entities)} component(s) to {output_path}")
    return 0


def cmd_serve(config: DesignSystemConfig, args: argparse.Namespace) -> int:
    from .core.app import ContextSingleton, run_server

    ContextSingleton().configure(
        config_path=args.config,
        root_directory=args.root,
        overrides=config_overrides(args),
    )
    asyncio.run(run_server(args.transport))
    return 0


COMMANDS = {
    "scan": cmd_scan,
    "list": cmd_list,
    "parse": cmd_parse,
    "generate": cmd_generate,
    "serve": cmd_serve,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(
            config_path=args.config,
            root_directory=args.root,
            overrides=config_overrides(args),
        )
        return COMMANDS[args.command](config, args)
    except ChainAborted as e:
        logger.error(f"Analyzer '{e.analyzer}' failed: {e}")
        logger.debug(f"Error details: {format_error_details(e)}")
        return 1
    except (ConfigurationError, DiscoveryError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
