"""
asgi.py -- ASGI entry point for Warden.

Run with:  uvicorn asgi:app --reload

api/main.py assembles the application (middleware, routers, handlers). This
module only re-exports it so the server command stays stable if assembly
moves.
"""

from api.main import app

__all__ = ["app"]
