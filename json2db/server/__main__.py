import argparse

import uvicorn

from json2db.server.logging_config import LOGGING_CONFIG


def main():
    parser = argparse.ArgumentParser(description="json2db document server")
    parser.add_argument(
        "--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        dest="reload",
        default=False,
        action="store_true",
        help="Enable auto-reload (disabled by default)",
    )

    args = parser.parse_args()

    print(f"Starting json2db on {args.host}:{args.port}")
    print(f"API docs will be available at http://{args.host}:{args.port}/docs")
    print(f"Auto-reload: {'enabled' if args.reload else 'disabled'}")
    print()

    uvicorn.run(
        "json2db.server.api:api",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=LOGGING_CONFIG,
    )


if __name__ == "__main__":
    main()
