"""authsvc: issue, validate, refresh and revoke signed access/refresh tokens.

``create_app`` builds the Flask service; the framework-free token engine lives
in :mod:`authsvc.services.tokens`.
"""

from __future__ import annotations

from .factory import create_app

__version__ = "0.1.0"

__all__ = ["__version__", "create_app"]
