"""scriptparser HTTP service.

FastAPI application exposing the script data store under ``/api/scripts``.
"""

from scriptparser.api.app import create_app as create_app

__all__ = ["create_app"]
