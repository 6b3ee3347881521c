"""
Core modules for Usage Admin.

This package contains the mock data generators, the derived pool metrics,
and the view state and loading logic behind the dashboard views.
"""
