"""
Routers Module - HTTP endpoints.
"""
