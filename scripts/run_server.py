#!/usr/bin/env python3
"""Serve the Molt Hotel API with uvicorn."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Molt Hotel WebSocket server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=3001, help="Listen port")
    parser.add_argument("--reload", action="store_true", help="Reload on source changes")
    parser.add_argument("--log-level", default="info", help="uvicorn log level")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    import uvicorn

    uvicorn.run(
        "apps.api.molthotel_api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
