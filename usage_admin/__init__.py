"""
Usage Admin.

Usage reporting dashboard for a shared AI usage pool.
"""

__version__ = "0.1.0"
