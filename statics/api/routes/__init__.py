"""API route modules"""
from . import health, images

__all__ = ["health", "images"]
