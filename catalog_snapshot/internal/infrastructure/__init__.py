"""
Infrastructure adapters: billing API access and document publishing.
"""
