"""
Batch job submission and polling

A batch is submitted once; the service answers with a job id and later
returns results in submission order. The position -> product id map is
kept in the cache until the completed job has been applied.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, List, Optional, Union

from taxoai.core.cache import CacheBackend, cache_key, get_cache
from taxoai.core.config import Settings, settings as default_settings
from taxoai.core.exceptions import InvalidInputError, NotConfiguredError
from taxoai.core.logging import log
from taxoai.repositories.product import ProductRepository
from taxoai.schemas.analysis import AnalysisResult
from taxoai.schemas.batch import BatchJob, BatchPollResult, BatchSubmitResult, JobMap, JobStatus
from taxoai.services.api_client import TaxoAIClient
from taxoai.services.product_analyzer import ProductAnalyzer


ProgressCallback = Callable[[BatchPollResult], Union[None, Awaitable[None]]]


def job_map_key(job_id: str) -> str:
    return cache_key("job_map", job_id)


def _positive_ids(product_ids: Iterable) -> List[int]:
    ids = []
    for product_id in product_ids or []:
        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            continue
        if product_id > 0:
            ids.append(product_id)
    return ids


class BatchOrchestrator:
    def __init__(
        self,
        client: TaxoAIClient,
        analyzer: ProductAnalyzer,
        products: ProductRepository,
        cache: Optional[CacheBackend] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.analyzer = analyzer
        self.products = products
        self.cache = cache or get_cache()
        self.settings = settings or default_settings

    async def submit(self, product_ids: Iterable) -> BatchSubmitResult:
        """Submit the resolvable products as one batch job"""
        ids = _positive_ids(product_ids)
        if not ids:
            raise InvalidInputError("No products selected.")

        if not self.client.api_key:
            raise NotConfiguredError()

        payloads = []
        id_map = []
        for product_id in ids:
            product = await self.products.get(product_id)
            if not product:
                log.debug("Skipping unknown product in batch", product_id=product_id)
                continue
            payloads.append(self.analyzer.build_payload(product))
            id_map.append(product.id)

        if not payloads:
            raise InvalidInputError("No valid products found.")

        response = await self.client.submit_batch(payloads)

        if response.job_id:
            job_map = JobMap(job_id=response.job_id, product_ids=id_map)
            await self.cache.set(job_map_key(response.job_id), job_map.model_dump(), ttl=self.settings.job_map_ttl)

        log.info("Batch submitted", job_id=response.job_id, total_products=len(payloads))
        return BatchSubmitResult(
            job_id=response.job_id,
            status=response.status,
            total_products=len(payloads),
            product_ids=id_map,
        )

    async def poll(self, job_id: str) -> BatchPollResult:
        """Fetch job status; a completed job is applied once, then its map is dropped"""
        job_id = (job_id or "").strip()
        if not job_id:
            raise InvalidInputError("Invalid job ID.")

        job = await self.client.get_job(job_id)

        applied: List[int] = []
        if job.status == JobStatus.COMPLETED.value and job.result:
            applied = await self._apply_completed(job_id, job)

        return BatchPollResult(
            status=job.status,
            total_products=job.total_products,
            processed_products=job.processed_products,
            applied_products=applied,
        )

    async def _apply_completed(self, job_id: str, job: BatchJob) -> List[int]:
        entry = await self.cache.get(job_map_key(job_id))
        if not entry:
            return []

        job_map = JobMap.model_validate(entry)
        applied = []
        for index, raw in enumerate(job.result):
            product_id = job_map.product_for(index)
            if product_id is None:
                continue

            result = AnalysisResult.model_validate(raw if isinstance(raw, dict) else {}).keep_body(raw)
            await self.analyzer.store_result(product_id, result)
            if self.settings.batch_apply_integrators:
                await self.analyzer.apply_result(product_id, result)
            applied.append(product_id)

        await self.cache.delete(job_map_key(job_id))
        log.info("Batch results stored", job_id=job_id, products=len(applied), results=len(job.result))
        return applied

    async def wait(
        self,
        job_id: str,
        interval: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchPollResult:
        """Poll until the job completes or fails"""
        interval = self.settings.poll_interval if interval is None else interval

        while True:
            status = await self.poll(job_id)
            if on_progress is not None:
                outcome = on_progress(status)
                if asyncio.iscoroutine(outcome):
                    await outcome
            if status.is_terminal:
                return status
            await asyncio.sleep(interval)
