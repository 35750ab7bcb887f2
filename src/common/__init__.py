"""
Process-wide services for the settings engine.

Modules:
- config: environment-backed configuration (encryption key, active features)
- features: feature-flag lookups with runtime overrides
- logging: structlog output configuration
"""

__all__ = [
    "config",
    "features",
    "logging",
]
