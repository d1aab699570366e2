"""
asgi.py -- ASGI entry point for Storefront.

Run with:  uvicorn asgi:app --reload
           python main.py

Kept separate from api/main.py so process managers have one stable import
path (asgi:app) no matter how the api/ package is organized internally.
"""

from api.main import app

__all__ = ["app"]
