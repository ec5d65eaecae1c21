#!/usr/bin/env python
"""
Run the ModelCompare API server.

Usage:
    python run_api.py
    python run_api.py --reload  # Development mode
"""

import argparse

import uvicorn

from shared.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description=f"Run the {settings.app_name} server")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--host", type=str, help=f"Bind address (default {settings.host})")
    parser.add_argument("--port", type=int, help=f"Bind port (default {settings.port})")
    args = parser.parse_args()

    uvicorn.run(
        "api:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
