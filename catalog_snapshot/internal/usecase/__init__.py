"""
Use case package for the catalog generator.

Contains the collection pipeline, pricing resolution and publishing rules.
"""
from .build_catalog import (
    BuildCatalogUseCase,
    BuildCatalogInput,
    BuildCatalogOutput,
)
from .assembler import CatalogAssembler
from .pricing import CurrencyTable, PricingResolver

__all__ = [
    "BuildCatalogUseCase",
    "BuildCatalogInput",
    "BuildCatalogOutput",
    "CatalogAssembler",
    "CurrencyTable",
    "PricingResolver",
]
