"""
Publishing of the catalog document.
"""
from .json_writer import render_document, write_document

__all__ = ["render_document", "write_document"]
