"""
Free-tier quota gate

The remote service is the source of truth for usage. Its answer is cached
for a few minutes; when it cannot be reached, a local monthly counter
stands in for it.
"""

from datetime import datetime
from typing import Callable, Optional, Tuple

from taxoai.core.cache import CacheBackend, cache_key, get_cache
from taxoai.core.config import settings
from taxoai.core.exceptions import TaxoAIError
from taxoai.core.logging import log
from taxoai.repositories.option import OptionRepository
from taxoai.schemas.usage import FREE_TIER, UsageSnapshot
from taxoai.services.api_client import TaxoAIClient
from taxoai.utils.dates import utc_now


OPTION_USAGE_COUNT = "taxoai_usage_count"
OPTION_USAGE_MONTH = "taxoai_usage_month"

USAGE_CACHE_KEY = cache_key("usage")

Clock = Callable[[], datetime]


class UsageTracker:
    """Decides whether another analysis may run this month"""

    def __init__(
        self,
        client: TaxoAIClient,
        options: OptionRepository,
        cache: Optional[CacheBackend] = None,
        clock: Clock = utc_now,
        free_tier_limit: Optional[int] = None,
        cache_ttl: Optional[int] = None,
    ):
        self.client = client
        self.options = options
        self.cache = cache or get_cache()
        self.clock = clock
        self.free_tier_limit = settings.free_tier_limit if free_tier_limit is None else free_tier_limit
        self.cache_ttl = settings.usage_cache_ttl if cache_ttl is None else cache_ttl

    async def can_analyze(self) -> bool:
        try:
            usage = await self.get_usage()
        except TaxoAIError as e:
            log.warning("Usage lookup failed, using local counter", error=e.detail, code=e.code)
            return await self._can_analyze_local()

        # Paid tiers have no monthly cap
        if not usage.is_free:
            return True

        return usage.products_used_this_month < self.free_tier_limit

    async def increment(self) -> int:
        """Count one completed analysis and drop the cached snapshot"""
        await self._ensure_month_reset()

        count = int(await self.options.get_option(OPTION_USAGE_COUNT, 0) or 0) + 1
        await self.options.update_option(OPTION_USAGE_COUNT, count)

        await self.cache.delete(USAGE_CACHE_KEY)
        return count

    async def get_usage(self, force_refresh: bool = False) -> UsageSnapshot:
        if not force_refresh:
            cached = await self.cached_usage()
            if cached is not None:
                return cached

        usage = await self.client.get_usage()
        await self.prime(usage)
        return usage

    async def cached_usage(self) -> Optional[UsageSnapshot]:
        """Cached snapshot if it is still fresh"""
        entry = await self.cache.get(USAGE_CACHE_KEY)
        if not isinstance(entry, dict) or "snapshot" not in entry:
            return None

        try:
            cached_at = datetime.fromisoformat(entry["cached_at"])
        except (KeyError, TypeError, ValueError):
            return None

        age = (self.clock() - cached_at).total_seconds()
        if age > self.cache_ttl:
            return None

        return UsageSnapshot.model_validate(entry["snapshot"])

    async def prime(self, usage: UsageSnapshot) -> None:
        entry = {"snapshot": usage.model_dump(mode="json"), "cached_at": self.clock().isoformat()}
        await self.cache.set(USAGE_CACHE_KEY, entry, ttl=self.cache_ttl)

    async def get_cached_tier(self) -> str:
        """Tier of the last cached snapshot, fresh or not; free when none"""
        entry = await self.cache.get(USAGE_CACHE_KEY)
        if isinstance(entry, dict) and isinstance(entry.get("snapshot"), dict):
            return entry["snapshot"].get("tier") or FREE_TIER
        return FREE_TIER

    async def local_usage(self) -> Tuple[int, str]:
        """(count, month) of the local fallback counter"""
        await self._ensure_month_reset()
        count = int(await self.options.get_option(OPTION_USAGE_COUNT, 0) or 0)
        return count, await self.options.get_option(OPTION_USAGE_MONTH, "")

    async def _can_analyze_local(self) -> bool:
        await self._ensure_month_reset()

        if await self.get_cached_tier() != FREE_TIER:
            return True

        count = int(await self.options.get_option(OPTION_USAGE_COUNT, 0) or 0)
        return count < self.free_tier_limit

    async def _ensure_month_reset(self) -> None:
        current_month = self.clock().strftime("%Y-%m")
        if await self.options.get_option(OPTION_USAGE_MONTH, "") != current_month:
            await self.options.update_option(OPTION_USAGE_COUNT, 0)
            await self.options.update_option(OPTION_USAGE_MONTH, current_month)
            log.debug("Local usage counter reset", month=current_month)
