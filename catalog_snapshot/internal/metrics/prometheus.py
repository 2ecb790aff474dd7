"""
Prometheus Metrics for the catalog generator.

The generator is a batch job, so metrics are exported once at the end of a
run through the node_exporter textfile collector.
"""

from prometheus_client import Counter, Gauge, Histogram

# Billing API metrics
API_CALLS = Counter(
    'catalog_api_calls_total',
    'Billing API call attempts',
    ['scope', 'mode', 'outcome']  # mode: json, form; outcome: success, error
)

API_CALL_DURATION = Histogram(
    'catalog_api_call_duration_seconds',
    'Billing API call attempt duration',
    ['scope', 'mode'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

# Pipeline metrics
WARNINGS = Counter(
    'catalog_warnings_total',
    'Recoverable failures absorbed during a run',
    ['stage']  # products, addons, currencies, ...
)

PUBLISHED_ENTITIES = Gauge(
    'catalog_published_entities',
    'Entities written to the last published document',
    ['collection']  # categories, products, addons, currencies, domains, gateways
)
