#!/usr/bin/env python3
"""Run the difftreecheck API under uvicorn."""

import argparse
import sys
from pathlib import Path

# Allow running from a source checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import uvicorn


def main():
    """Parse server options and start uvicorn."""
    parser = argparse.ArgumentParser(
        description="Start the difftreecheck API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/start_api.py                  # 127.0.0.1:8000
  python scripts/start_api.py --host 0.0.0.0   # Listen on all interfaces
  python scripts/start_api.py --reload         # Auto-reload on changes
        """,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (default: info)",
    )
    args = parser.parse_args()

    print(f"Starting difftreecheck API on http://{args.host}:{args.port} (docs at /docs)")

    # Comparisons are long and sequential; one worker keeps timings honest
    uvicorn.run(
        "difftreecheck.api.app:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
        reload_dirs=["src"] if args.reload else None,
    )


if __name__ == "__main__":
    main()
