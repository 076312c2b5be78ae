"""
API gateway: single entry point proxying to the domain services.
"""

from .main import app, create_gateway_app

__all__ = ["app", "create_gateway_app"]
