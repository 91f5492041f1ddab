"""CLI entry point for spotify-auth-relay.

Starts the relay under uvicorn, or prints the effective configuration.
"""
import argparse
import sys

import uvicorn

from config import load_config, load_env_file
from logging_config import setup_logging

VERSION = "1.0.0"


# ============== Commands ==============

def cmd_start(args):
    """Start the relay in the foreground."""
    config = load_config().replace(host=args.host, port=args.port, log_format=args.log_format)
    setup_logging(level=config.log_level, log_format=config.log_format, service_name="spotify-auth-relay")

    from main import app

    print(f"Application server starting on http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


def cmd_config(args):
    """Show the effective configuration."""
    config = load_config().replace(host=args.host, port=args.port, log_format=args.log_format)

    print("\n" + "=" * 50)
    print("  Spotify Auth Relay Configuration")
    print("=" * 50)
    for key, value in config.as_dict(mask_secret=True).items():
        print(f"  {key:<22} {value}")

    missing = config.missing_keys()
    if missing:
        print("\n[WARNING] Missing settings: " + ", ".join(missing))
    print("=" * 50 + "\n")
    return 1 if missing else 0


def cmd_version(args):
    """Show version information."""
    print(f"spotify-auth-relay v{VERSION}")
    return 0


# ============== Main Entry Point ==============

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spotify-auth-relay",
        description="Spotify OAuth authorization code relay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  start     Start the relay server (default)
  config    Show the effective configuration
  version   Show version

Examples:
  spotify-auth-relay start --port 8888
  spotify-auth-relay config --env-file .env.production
"""
    )

    parser.add_argument(
        "command",
        nargs="?",
        default="start",
        choices=["start", "config", "version"],
        help="Command to run (default: start)"
    )
    parser.add_argument("--host", help="Listening host (overrides HOST)")
    parser.add_argument("--port", type=int, help="Listening port (overrides PORT)")
    parser.add_argument("--env-file", help="Path to a .env file (default: ./.env)")
    parser.add_argument(
        "--log-format",
        choices=["plain", "json"],
        help="Log output format (overrides LOG_FORMAT)"
    )
    return parser


def main(argv=None):
    """Main entry point for CLI."""
    args = build_parser().parse_args(argv)
    load_env_file(args.env_file)

    commands = {
        "start": cmd_start,
        "config": cmd_config,
        "version": cmd_version,
    }
    result = commands[args.command](args)
    if result:
        sys.exit(result)


if __name__ == "__main__":
    main()
