"""Mini README: HTTP interface for the relief ledger.

Exports the FastAPI application factory that exposes ledger operations and
queries as JSON endpoints.
"""

from .web_app import create_application

__all__ = ["create_application"]
