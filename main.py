#!/usr/bin/env python3
"""Scout: daily intelligence pipeline powered by Gemini.

This CLI tool searches the web for a topic, asks Gemini for a strict JSON
report, and sends the report to Discord and Notion.

Commands:
    run         Run flows once, strictly one after another
    flows       List available flows
    status      Show non-secret configuration

Examples:
    python main.py run                    # Default job (FLOWS, research then apps)
    python main.py run briefing           # Finance briefing only
    python main.py run research apps -v   # Debug logging
    python main.py flows
    python main.py status

Environment:
    GEMINI_API_KEY, TAVILY_API_KEY, DISCORD_WEBHOOK_URL, NOTION_API_KEY,
    NOTION_AI_RESEARCH_DB_ID are required.
    See config.py for all configuration options.
"""

import argparse
import asyncio
import json
import logging
import sys

from config import Config
from observability.logging import setup_logging


def cmd_run(args: argparse.Namespace, config: Config) -> int:
    """Run the selected flows.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 if no flow aborted, 1 otherwise, 130 on Ctrl+C)
    """
    from flows import get_flows
    from pipeline import Pipeline

    logger = logging.getLogger(__name__)
    names = args.flows or config.flows

    try:
        profiles = get_flows(names)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1

    try:
        pipeline = Pipeline.from_config(config)
        results = asyncio.run(pipeline.run_job(profiles))
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130

    for result in results:
        logger.info("Flow result | %s", json.dumps(result.to_dict(), ensure_ascii=False))
    return 0 if all(r.ok for r in results) else 1


def cmd_flows(args: argparse.Namespace, config: Config) -> int:
    """List available flows."""
    from flows import FLOWS

    for name, profile in FLOWS.items():
        marker = "*" if name in config.flows else " "
        print(f"{marker} {name:<10} {profile.schema.variant.value:<10} {profile.label}")
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display non-secret configuration."""
    status = {
        "models": {
            "primary": config.primary_model,
            "secondary": config.secondary_model,
            "max_retries": config.max_retries,
            "retry_base_delay": config.retry_base_delay,
        },
        "flows": config.flows,
        "sinks": {
            "discord_webhook": bool(config.discord_webhook_url),
            "notion_database": config.notion_database_id or None,
            "notion_status": config.notion_status,
        },
        "search": {"tavily_key": bool(config.tavily_api_key)},
        "logging": {
            "dir": str(config.log_dir),
            "level": config.log_level,
            "format": config.log_format,
        },
        "enable_logfire": config.enable_logfire,
    }
    print(json.dumps(status, indent=2, ensure_ascii=False))
    return 0


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Scout: daily intelligence pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run flows once")
    run_parser.add_argument(
        "flows",
        nargs="*",
        help="Flows to run in order (default: FLOWS env, research apps)",
    )

    subparsers.add_parser("flows", help="List available flows")
    subparsers.add_parser("status", help="Show configuration")

    args = parser.parse_args()

    # Load configuration
    try:
        config = Config.load()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # Setup logging
    setup_logging(config, verbose=args.verbose)

    # Missing credentials are fatal before any flow starts
    if args.command == "run":
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1

    commands = {
        "run": cmd_run,
        "flows": cmd_flows,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except Exception as e:
            logging.getLogger(__name__).error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
