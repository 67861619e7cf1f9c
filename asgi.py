"""
asgi.py -- ASGI entry point for process managers.

Run with:  uvicorn asgi:app

The lifespan connects to MongoDB before uvicorn starts accepting requests. If
the connection fails, startup is aborted and uvicorn exits non-zero.
"""

from api.main import create_app

app = create_app()
