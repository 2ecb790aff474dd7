"""
Shared packages.
"""
