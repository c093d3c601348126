"""
KeyProxy: per-user AI provider key vault and chat completion proxy.
"""

__version__ = "1.0.0"
