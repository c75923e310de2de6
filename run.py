#!/usr/bin/env python3
"""Entry point script for PolyDB MCP Server."""

import sys
import subprocess
import argparse


def main():
    """Main entry point with backend selection."""
    parser = argparse.ArgumentParser(
        description="PolyDB MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run all backends over stdio with the health API on 8080
  python run.py

  # Only CouchDB and Virtuoso, health API on a custom port
  python run.py --backends couchdb,virtuoso --health-port 9090

  # Run with debug logging
  LOG_LEVEL=DEBUG python run.py --no-health-api
        """
    )

    parser.add_argument(
        "--backends",
        help="Comma-separated backends to enable (default: all)"
    )

    parser.add_argument(
        "--health-port",
        type=int,
        help="Port for health API (default: 8080)"
    )

    parser.add_argument(
        "--no-health-api",
        action="store_true",
        help="Disable health API service"
    )

    args = parser.parse_args()

    # Build command
    cmd = [sys.executable, "-m", "polydb_mcp.cli.mcp_server"]

    if args.backends:
        cmd.extend(["--backends", args.backends])

    if args.no_health_api:
        cmd.append("--no-health-api")
    elif args.health_port:
        cmd.extend(["--health-port", str(args.health_port)])

    # Startup info goes to stderr; stdout carries the MCP protocol
    print("Starting PolyDB MCP Server", file=sys.stderr)
    print(f"   Backends: {args.backends or 'all'}", file=sys.stderr)
    if not args.no_health_api:
        print(f"   Health API: http://0.0.0.0:{args.health_port or 8080}/health", file=sys.stderr)

    # Run the server
    try:
        subprocess.run(cmd)
    except KeyboardInterrupt:
        print("\nServer stopped", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
