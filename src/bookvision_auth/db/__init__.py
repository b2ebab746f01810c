"""
bookvision_auth.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the users schema, engine/session setup, repositories and the credential store.
"""

# Package marker.
