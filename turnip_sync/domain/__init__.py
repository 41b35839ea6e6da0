"""
Domain layer - entities and error types.

Framework-agnostic objects shared by the cache, the gateway and the data
service.
"""
