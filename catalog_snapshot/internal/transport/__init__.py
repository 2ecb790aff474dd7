"""
Boundaries of the generator towards its consumers.
"""
