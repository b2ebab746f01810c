"""
bookvision_auth.api.routers

HTTP routers (auth endpoints and health probes).
"""
