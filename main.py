#!/usr/bin/env python3
"""
User Auth API -- signup / login service backed by MongoDB.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 127.0.0.1 --log-level debug

Environment variables (or .env):
  MONGO_URI         MongoDB connection string
  DB_NAME           Database holding the user collection
  COLLECTION_NAME   User collection name
  JWT_SECRET_KEY    HS256 signing key, at least 32 characters
  DEBUG             true = generate a throwaway JWT_SECRET_KEY if unset

Startup order: MongoDB is connected first. Only after the ping succeeds does
uvicorn bind the port. A failed connection exits with status 1.
"""

import argparse
import logging
import sys

import uvicorn
from pymongo.errors import PyMongoError

from api.main import create_app
from auth.store import connect_user_store
from core.config import get_settings

logger = logging.getLogger("userauth.main")


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="user-auth-api",
        description="Run the user signup / login HTTP service.",
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Interface to bind (default: {settings.host}, env HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port}, env PORT)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="debug" if settings.debug else "info",
        help="uvicorn log level",
    )
    args = parser.parse_args()

    try:
        store = connect_user_store(settings)
    except PyMongoError:
        logger.exception("MongoDB connection error")
        sys.exit(1)
    logger.info("MongoDB connected")

    app = create_app(user_store=store)
    logger.info("Server running on port %d", args.port)
    try:
        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    finally:
        store.close()


if __name__ == "__main__":
    main()
