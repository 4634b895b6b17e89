"""Expose the application factory at package level.

``from sherp_auth import create_app`` is also the ``FLASK_APP`` entry point.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
