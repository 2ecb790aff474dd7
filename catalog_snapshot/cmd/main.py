"""
Catalog Generator - Main Entry Point.

Pulls catalog, pricing and branding data from the billing platform and
writes the public catalog document consumed by the static storefront.

Usage:
    catalog-snapshot --out=data.json --pretty=1
"""
import argparse
import asyncio
import sys
from typing import Any, Optional, Sequence

from dotenv import load_dotenv
from prometheus_client import REGISTRY, write_to_textfile

from catalog_snapshot.config.settings import Settings, get_settings, parse_patterns
from catalog_snapshot.internal.domain.errors import CatalogError
from catalog_snapshot.internal.domain.run import RunContext
from catalog_snapshot.internal.infrastructure.fossbilling.client import BillingApiClient
from catalog_snapshot.internal.infrastructure.publisher.json_writer import write_document
from catalog_snapshot.internal.usecase.build_catalog import (
    BuildCatalogInput,
    BuildCatalogOutput,
    BuildCatalogUseCase,
)
from catalog_snapshot.internal.usecase.normalizers.fields import bool_like
from catalog_snapshot.pkg.logger.logger import get_logger, set_run_id, setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser. Every flag overrides its setting."""
    parser = argparse.ArgumentParser(
        prog="catalog-snapshot",
        description="Generate the public catalog document from the billing platform.",
    )
    parser.add_argument("--out", help="Output file (DATA_OUTPUT)")
    parser.add_argument("--pretty", nargs="?", const="1", help="Indent the JSON (JSON_PRETTY)")
    parser.add_argument("--show-errors", nargs="?", const="1", help="Print warnings to stderr (GEN_SHOW_ERRORS)")
    parser.add_argument("--timeout", type=int, help="Request timeout in seconds (BILLING_TIMEOUT)")
    parser.add_argument("--max-pages", type=int, help="Page cap per list call (BILLING_MAX_PAGES)")
    parser.add_argument("--per-page", type=int, help="Page size (BILLING_PER_PAGE)")
    parser.add_argument("--base-url", help="Billing platform URL (BILLING_BASE_URL)")
    parser.add_argument("--api-key", help="Admin API secret (BILLING_API_KEY)")
    parser.add_argument("--public-url", help="Storefront URL (PUBLIC_SITE_URL)")
    parser.add_argument("--strict-tls", nargs="?", const="1", help="Verify TLS certificates (BILLING_STRICT_TLS)")
    parser.add_argument("--exclude-patterns", help="CSV of product exclusion substrings (EXCLUDE_PRODUCT_PATTERNS)")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """
    Overlay command line flags on loaded settings.

    Args:
        settings: Settings from the environment.
        args: Parsed flags; ``None`` means not given.

    Returns:
        New settings instance.
    """
    updates: dict[str, Any] = {}

    plain = {
        "out": "data_output",
        "timeout": "billing_timeout",
        "max_pages": "billing_max_pages",
        "per_page": "billing_per_page",
        "base_url": "billing_base_url",
        "api_key": "billing_api_key",
        "public_url": "public_site_url",
    }
    for flag, field_name in plain.items():
        value = getattr(args, flag)
        if value is not None:
            updates[field_name] = value

    flags = {
        "pretty": ("json_pretty", True),
        "show_errors": ("gen_show_errors", False),
        "strict_tls": ("billing_strict_tls", True),
    }
    for flag, (field_name, default) in flags.items():
        value = getattr(args, flag)
        if value is not None:
            updates[field_name] = bool_like(value, default)

    # An empty list keeps the configured patterns.
    if args.exclude_patterns is not None and parse_patterns(args.exclude_patterns):
        updates["exclude_product_patterns"] = args.exclude_patterns

    return settings.model_copy(update=updates)


async def run(settings: Settings, api_key: str, context: RunContext) -> BuildCatalogOutput:
    """
    Build the catalog document.

    Args:
        settings: Effective settings.
        api_key: Admin API secret.
        context: Run context.

    Returns:
        Use case output.
    """
    async with BillingApiClient(
        base_url=settings.billing_base_url,
        api_key=api_key,
        context=context,
        timeout_seconds=settings.billing_timeout,
        strict_tls=settings.billing_strict_tls,
    ) as api:
        use_case = BuildCatalogUseCase(api, context)
        return await use_case.execute(
            BuildCatalogInput(
                public_site_url=settings.get_public_site_url(),
                exclude_patterns=settings.get_exclude_patterns(),
                per_page=settings.billing_per_page,
                max_pages=settings.billing_max_pages,
                max_concurrency=settings.billing_max_concurrency,
                motto=settings.site_motto,
                brand_mark=settings.site_brand_mark,
                custom_assets=settings.get_custom_assets(),
            )
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the generator.

    Returns:
        Process exit status.
    """
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)

    setup_logging(
        level=settings.log_level,
        json_format=(settings.log_format == "json"),
    )
    logger = get_logger(__name__)

    context = RunContext()
    set_run_id(context.run_id)

    try:
        api_key = settings.require_api_key()
        output = asyncio.run(run(settings, api_key, context))

        if settings.gen_show_errors and output.warnings:
            print("warnings:", file=sys.stderr)
            for warning in output.warnings:
                print(f" - {warning}", file=sys.stderr)

        path = write_document(output.document, settings.data_output, settings.json_pretty)
    except CatalogError as e:
        logger.error("Catalog generation failed", error=e.message)
        print(e.message, file=sys.stderr)
        return 1
    finally:
        if settings.metrics_textfile:
            write_to_textfile(settings.metrics_textfile, REGISTRY)

    logger.info(
        "Catalog generation completed",
        output=str(path),
        warnings=len(output.warnings),
        failed_calls=len(context.failed_calls()),
    )
    print(f"Generated {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
