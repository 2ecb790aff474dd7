"""
Cross-entity merge and enrichment.

Bulk listings are enriched by slower per-item detail calls. The merge only
fills gaps, so a value one source already had right is never regressed.
"""
from dataclasses import fields, is_dataclass, replace
from typing import Any, Iterable, Mapping, Optional

from catalog_snapshot.internal.domain.catalog import Category, HostingPlan, Product
from catalog_snapshot.internal.usecase.normalizers.aliases import (
    HOSTING_PLAN_ID_REFS,
    HOSTING_PLAN_NAME_REFS,
)
from catalog_snapshot.internal.usecase.normalizers.fields import id_text, lower_text, pick_first
from catalog_snapshot.internal.usecase.normalizers.limitations import is_set_limit


def is_empty(value: Any) -> bool:
    """None, empty strings and empty collections count as gaps."""
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _is_record(value: Any) -> bool:
    return isinstance(value, Mapping) or (is_dataclass(value) and not isinstance(value, type))


def _merge_value(current: Any, incoming: Any) -> Any:
    if _is_record(current) and _is_record(incoming):
        return merge_non_empty(current, incoming)
    if is_empty(current):
        return incoming
    return current


def merge_non_empty(base: Any, incoming: Any) -> Any:
    """
    Fill gaps in ``base`` from ``incoming``.

    Mappings gain the keys they lack; dataclass records of the same type
    are merged field by field. Nested records merge recursively. Lists are
    values, not records: a non-empty list is kept whole.

    Args:
        base: Trusted record.
        incoming: Record supplying missing values.

    Returns:
        New merged record; ``base`` is left untouched.
    """
    if isinstance(base, Mapping) and isinstance(incoming, Mapping):
        merged = dict(base)
        for key, value in incoming.items():
            if key not in merged:
                merged[key] = value
                continue
            merged[key] = _merge_value(merged[key], value)
        return merged

    if _is_record(base) and type(base) is type(incoming):
        changes = {}
        for record_field in fields(base):
            current = getattr(base, record_field.name)
            merged_value = _merge_value(current, getattr(incoming, record_field.name))
            if merged_value is not current:
                changes[record_field.name] = merged_value
        return replace(base, **changes) if changes else base

    return incoming if is_empty(base) else base


def find_hosting_plan(
    product: Product,
    plans_by_id: Mapping[str, HostingPlan],
    plans_by_name: Mapping[str, HostingPlan],
) -> Optional[HostingPlan]:
    """
    Resolve the hosting plan a product's config points at.

    The id reference wins; the name reference is matched case-insensitively.
    """
    plan_id = id_text(pick_first(product.config, HOSTING_PLAN_ID_REFS, ""))
    if plan_id != "" and plan_id in plans_by_id:
        return plans_by_id[plan_id]

    plan_name = lower_text(pick_first(product.config, HOSTING_PLAN_NAME_REFS, ""))
    if plan_name != "":
        return plans_by_name.get(plan_name)
    return None


def attach_hosting_plans(
    products: dict[str, Product],
    plans: Mapping[str, HostingPlan],
) -> int:
    """
    Attach hosting plans to products and merge plan limitations.

    The product's own set limitations win over the plan's.

    Args:
        products: Products by id, updated in place.
        plans: Hosting plans by id.

    Returns:
        Number of products a plan was attached to.
    """
    plans_by_name = {plan.name.lower(): plan for plan in plans.values() if plan.name != ""}

    attached = 0
    for product_id, product in products.items():
        plan = find_hosting_plan(product, plans, plans_by_name)
        if plan is None:
            continue

        limitations = dict(plan.limitations)
        for key, value in product.limitations.items():
            if is_set_limit(value):
                limitations[key] = value

        products[product_id] = replace(product, hosting_plan=plan.ref(), limitations=limitations)
        attached += 1

    return attached


def link_categories(
    categories: Mapping[str, Category],
    products: Iterable[Product],
) -> tuple[dict[str, Category], dict[str, Product]]:
    """
    Build the category -> product relation.

    Each product is listed in its category in iteration order and annotated
    with the category title. Products pointing at unknown categories are
    returned unchanged. The inputs are not modified.

    Returns:
        Linked categories and annotated products, both by id.
    """
    members: dict[str, list[str]] = {category_id: [] for category_id in categories}

    linked: dict[str, Product] = {}
    for product in products:
        category = categories.get(product.category_id)
        if category is not None:
            listed = members[product.category_id]
            if product.id not in listed:
                listed.append(product.id)
            product = replace(product, category_title=category.title)
        linked[product.id] = product

    linked_categories = {
        category_id: replace(category, products=members[category_id])
        for category_id, category in categories.items()
    }
    return linked_categories, linked
