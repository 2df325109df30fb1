"""Entry point used to start the range analysis API without auto-reload."""
from __future__ import annotations

import argparse

import uvicorn

from app.core import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Start the range analysis API server.")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address for the server.")
    parser.add_argument(
        "--port",
        default=8000,
        type=int,
        help="Listening port (default: 8000).",
    )
    parser.add_argument(
        "--workers",
        default=1,
        type=int,
        help="Worker processes; each one keeps its own catalog cache.",
    )
    args = parser.parse_args()

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        workers=args.workers,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
