"""
bookvision_auth.services

Service-layer package.

Responsibilities:
- Coordinate the credential store and the token service for auth use cases.
- Declare the credential store contract the service depends on.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are pure Python and testable with fake stores and fixed clocks.
