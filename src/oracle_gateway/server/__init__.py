"""HTTP surface -- FastAPI app factory and price/market routes."""

from oracle_gateway.server.app import create_app

__all__ = ["create_app"]
