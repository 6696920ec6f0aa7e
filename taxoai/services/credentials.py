"""
API key validation
"""

from typing import Optional

from taxoai.core.exceptions import InvalidInputError
from taxoai.core.logging import log
from taxoai.schemas.usage import UsageSnapshot
from taxoai.services.api_client import TaxoAIClient
from taxoai.services.usage_tracker import UsageTracker


async def validate_api_key(
    api_key: str,
    usage: UsageTracker,
    base_client: Optional[TaxoAIClient] = None,
) -> UsageSnapshot:
    """
    Check a key against the usage endpoint.

    The request reuses base_client's connection pool and URL when given.
    A valid key's usage snapshot primes the usage cache; an invalid one
    raises the client error unchanged.
    """
    api_key = (api_key or "").strip()
    if not api_key:
        raise InvalidInputError("API key is required.")

    client = TaxoAIClient(
        api_key=api_key,
        api_url=base_client.api_url if base_client else None,
        timeout=base_client.timeout if base_client else None,
        client=base_client.client if base_client else None,
    )
    async with client:
        snapshot = await client.get_usage()

    await usage.prime(snapshot)
    log.info("API key validated", tier=snapshot.tier)
    return snapshot
