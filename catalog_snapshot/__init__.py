"""
FOSSBilling catalog snapshot generator.
"""

__version__ = "1.0.0"
