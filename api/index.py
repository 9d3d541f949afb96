"""Vercel serverless function entry point.

Vercel's Python runtime serves the ASGI ``app`` exposed by this module.
"""

from flowchart_api.main import app  # noqa: F401
