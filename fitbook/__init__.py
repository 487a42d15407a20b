"""
FitBook - booking backend for a coach's fitness training classes.

This package contains the complete application:
- core: Framework-agnostic booking logic
- infrastructure: Persistence and external service integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
