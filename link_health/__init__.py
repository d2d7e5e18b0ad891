"""
link_health package initializer.
The console script points at ``link_health.cli:cli``.
"""
__version__ = "0.1.0"
