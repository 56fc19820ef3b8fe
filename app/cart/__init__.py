"""
Cart package: append-only accumulation of chosen products.
"""

from .cart import Cart

__all__ = ["Cart"]
