"""
bookvision_auth.auth

Authentication/authorization package.

Responsibilities:
- JWT issuing, validation and refresh.
- Role hierarchy and access evaluation.
- Request gate (framework-neutral) plus FastAPI auth dependencies.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `passwords` is imported only by the credential store; nothing else touches hashes.
