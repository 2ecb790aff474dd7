"""
Internal application packages.
"""
