"""
Core module - configuration, observability and data models
"""

from .config import Config

__all__ = ['Config']
