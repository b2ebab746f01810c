"""
bookvision_auth.api

FastAPI surface for the auth core.

Responsibilities:
- App factory, dependency wiring, routers and exception handlers.
"""

# Package marker.
