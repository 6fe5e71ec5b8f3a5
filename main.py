#!/usr/bin/env python3
"""
Admin Gate -- password login and session gate for a single admin account.

Usage:
  python main.py
  python main.py --host 0.0.0.0 --port 8000
  python main.py --reload --log-level debug

Environment variables (see core/config.py for the full list):
  SECRET_PASSWORD  The admin password. Required when PRODUCTION=true.
  PRODUCTION       Enables Secure/SameSite=None cookies and production CORS.
  FRONTEND_URL     Allowed CORS origin in production (default http://localhost:3000).
  TRUST_PROXY      Key throttles on X-Forwarded-For (only behind a trusted proxy).
"""

import argparse
from typing import Optional

import uvicorn

APP_PATH = "api.main:app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="admin-gate",
        description="Run the admin gate API server.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="uvicorn log level (default: info)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    # A single worker: sessions and throttles live in process memory.
    uvicorn.run(
        APP_PATH,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        # The app sets its own security headers; keep uvicorn's Server header off.
        server_header=False,
    )


if __name__ == "__main__":
    main()
