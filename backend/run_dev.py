#!/usr/bin/env python3
"""
Development server launcher

Features:
1. Loads settings.yaml / .env configuration
2. Hot reload
3. Configurable host and port

Usage:
    # run directly
    python run_dev.py

    # custom port
    python run_dev.py --port 8080

    # disable hot reload
    python run_dev.py --no-reload
"""

import argparse
import os
import sys

# Make sure the backend root is importable
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def main():
    parser = argparse.ArgumentParser(description="Loan Chat Backend Dev Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", default=True, help="Enable auto-reload (default: True)")
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"], help="Log level")

    args = parser.parse_args()

    import uvicorn

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║              🏦 Loan Chat Backend                            ║
╠══════════════════════════════════════════════════════════════╣
║  Host:     {args.host:<48} ║
║  Port:     {args.port:<48} ║
║  Reload:   {str(args.reload):<48} ║
║  Log:      {args.log_level:<48} ║
╠══════════════════════════════════════════════════════════════╣
║  API Docs: http://{args.host}:{args.port}/docs{' ' * 28}║
╚══════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=["api", "loanchat"] if args.reload else None,
    )


if __name__ == "__main__":
    main()
