"""
HTTP API layer.

Routers translate requests into booking workflows and domain errors
into HTTP responses.
"""
