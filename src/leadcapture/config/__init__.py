"""
Configuration package for the lead capture service.
"""

from .settings import Settings

__all__ = ["Settings"]
