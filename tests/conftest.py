"""
Pytest configuration and fixtures.
"""
from typing import Callable

import httpx
import pytest

from catalog_snapshot.internal.domain.run import RunContext
from catalog_snapshot.internal.infrastructure.fossbilling.client import BillingApiClient

from tests.fakes import API_KEY, BILLING_URL, FakeBillingUpstream


@pytest.fixture
def run_context():
    """Fresh run context."""
    return RunContext(run_id="test-run")


@pytest.fixture
def upstream():
    """Empty fake billing upstream; tests add routes."""
    return FakeBillingUpstream()


@pytest.fixture
def make_client(run_context) -> Callable[..., BillingApiClient]:
    """Factory building a client wired to a fake upstream."""

    def factory(fake: FakeBillingUpstream, api_key: str = API_KEY) -> BillingApiClient:
        return BillingApiClient(
            base_url=BILLING_URL + "/",
            api_key=api_key,
            context=run_context,
            transport=httpx.MockTransport(fake.handler),
        )

    return factory


@pytest.fixture
def recurrent_pricing():
    """Shape A pricing: 10.00 per month."""
    return {
        "type": "recurrent",
        "recurrent": {
            "1M": {"price": "10.00", "setup": "0", "enabled": 1},
        },
    }
