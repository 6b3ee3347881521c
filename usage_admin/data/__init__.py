"""
Data models and sources for usage reporting.
"""
