"""
Botanist AI backend launcher.

Runs apps.app:app under uvicorn. Host/port default to the settings and can be
overridden on the command line.
"""

import argparse

import uvicorn

from apps.settings import load_settings


def main():
    """Start the HTTP server."""
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Botanist AI backend")
    parser.add_argument("--host", default=settings.host, help="bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="bind port")
    parser.add_argument("--reload", action="store_true", help="auto-reload on code changes")
    args = parser.parse_args()

    print(f"Starting Botanist AI backend on http://{args.host}:{args.port}")
    print(f"API docs: http://{args.host}:{args.port}/docs")
    uvicorn.run(
        "apps.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
