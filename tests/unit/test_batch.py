"""
Tests for batch submission and polling
"""

import json

import pytest

from taxoai.core.exceptions import InvalidInputError, NotConfiguredError
from taxoai.repositories.product import META_ANALYSIS_RESULT, META_CONFIDENCE
from taxoai.schemas.batch import JobMap
from taxoai.services.batch import job_map_key


def result_item(category, category_id, confidence):
    return {
        "classification": {"google_category": category, "google_category_id": category_id, "confidence": confidence},
        "attributes": {"color": "Red"},
    }


@pytest.fixture
def products_abc(make_product):
    async def create():
        return [
            await make_product(name="Product A"),
            await make_product(name="Product B"),
            await make_product(name="Product C"),
        ]

    return create


class TestSubmit:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("product_ids", [[], None, [0, -1, "x"]])
    async def test_nothing_selected(self, services, fake_api, product_ids):
        with pytest.raises(InvalidInputError) as exc_info:
            await services.batch.submit(product_ids)

        assert exc_info.value.detail == "No products selected."
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_no_resolvable_products(self, services, fake_api):
        with pytest.raises(InvalidInputError) as exc_info:
            await services.batch.submit([998, 999])

        assert exc_info.value.detail == "No valid products found."
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_requires_api_key(self, services, make_product, fake_api):
        product = await make_product()
        services.client.api_key = ""

        with pytest.raises(NotConfiguredError):
            await services.batch.submit([product.id])

        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_submit_stores_map_in_submission_order(self, services, products_abc, fake_api, cache):
        a, b, c = await products_abc()
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1", "status": "processing"})

        submitted = await services.batch.submit([c.id, 999, a.id, b.id])

        assert submitted.job_id == "job-1"
        assert submitted.status == "processing"
        assert submitted.total_products == 3
        assert submitted.product_ids == [c.id, a.id, b.id]

        body = json.loads(fake_api.calls("POST", "/v1/products/batch")[0].content)
        assert [item["name"] for item in body["products"]] == ["Product C", "Product A", "Product B"]

        entry = JobMap.model_validate(await cache.get(job_map_key("job-1")))
        assert entry.product_ids == [c.id, a.id, b.id]

    @pytest.mark.asyncio
    async def test_submit_does_not_check_quota(self, services, make_product, fake_api):
        product = await make_product()
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-2"})

        await services.batch.submit([product.id])

        assert fake_api.calls("GET", "/v1/usage") == []

    @pytest.mark.asyncio
    async def test_missing_job_id_stores_no_map(self, services, make_product, fake_api, cache):
        product = await make_product()
        fake_api.on("POST", "/v1/products/batch", json={})

        submitted = await services.batch.submit([product.id])

        assert submitted.job_id == ""
        assert submitted.status == "pending"
        assert await cache.get(job_map_key("")) is None


class TestPoll:
    @pytest.mark.asyncio
    async def test_blank_job_id(self, services, fake_api):
        with pytest.raises(InvalidInputError):
            await services.batch.poll("   ")

        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_in_progress_job(self, services, fake_api):
        fake_api.on("GET", "/v1/jobs/job-1", json={"status": "processing", "total_products": 3, "processed_products": 1})

        status = await services.batch.poll(" job-1 ")

        assert status.status == "processing"
        assert status.processed_products == 1
        assert status.applied_products == []
        assert status.is_terminal is False

    @pytest.mark.asyncio
    async def test_completed_job_maps_results_by_position(self, services, products_abc, fake_api, cache):
        a, b, c = await products_abc()
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1"})
        fake_api.on(
            "GET",
            "/v1/jobs/job-1",
            json={
                "status": "completed",
                "total_products": 3,
                "processed_products": 3,
                "result": [
                    result_item("Toys", 1239, 0.9),
                    result_item("Shoes", 187, 0.8),
                    result_item("Bags", 100, 0.3),
                ],
            },
        )
        await services.batch.submit([a.id, b.id, c.id])

        status = await services.batch.poll("job-1")

        assert status.is_terminal is True
        assert status.applied_products == [a.id, b.id, c.id]
        stored = [await services.analyzer.stored_analysis(p.id) for p in (a, b, c)]
        assert [s.google_category for s in stored] == ["Toys", "Shoes", "Bags"]
        assert [s.confidence for s in stored] == [pytest.approx(0.9), pytest.approx(0.8), pytest.approx(0.3)]
        assert await cache.get(job_map_key("job-1")) is None

        # Integrators are not run for batch results by default
        assert await services.terms.get_object_terms(a.id, "pa_color") == []

    @pytest.mark.asyncio
    async def test_second_poll_does_not_reapply(self, services, make_product, fake_api):
        product = await make_product()
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1"})
        fake_api.on("GET", "/v1/jobs/job-1", json={"status": "completed", "result": [result_item("Toys", 1, 0.9)]})
        await services.batch.submit([product.id])

        first = await services.batch.poll("job-1")
        await services.products.delete_meta(product.id, META_ANALYSIS_RESULT)
        second = await services.batch.poll("job-1")

        assert first.applied_products == [product.id]
        assert second.applied_products == []
        assert await services.products.get_meta(product.id, META_ANALYSIS_RESULT) is None

    @pytest.mark.asyncio
    async def test_result_item_is_stored_unmodified(self, services, make_product, fake_api):
        product = await make_product()
        item = {
            "classification": {"google_category": "Toys", "google_category_id": 1, "confidence": 0.9},
            "seo": {"meta_title": None, "tags": []},
            "image_analysis": ["blurry"],
        }
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1"})
        fake_api.on("GET", "/v1/jobs/job-1", json={"status": "completed", "result": [item]})
        await services.batch.submit([product.id])

        await services.batch.poll("job-1")

        assert await services.products.get_meta(product.id, META_ANALYSIS_RESULT) == item

    @pytest.mark.asyncio
    async def test_results_beyond_map_are_ignored(self, services, make_product, fake_api):
        product = await make_product()
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1"})
        fake_api.on(
            "GET",
            "/v1/jobs/job-1",
            json={"status": "completed", "result": [result_item("Toys", 1, 0.9), result_item("Extra", 2, 0.9)]},
        )
        await services.batch.submit([product.id])

        status = await services.batch.poll("job-1")

        assert status.applied_products == [product.id]
        assert await services.products.get_meta(product.id, "_taxoai_google_category") == "Toys"

    @pytest.mark.asyncio
    async def test_unknown_job_map_applies_nothing(self, services, fake_api):
        fake_api.on("GET", "/v1/jobs/job-x", json={"status": "completed", "result": [result_item("Toys", 1, 0.9)]})

        status = await services.batch.poll("job-x")

        assert status.applied_products == []

    @pytest.mark.asyncio
    async def test_failed_job_is_terminal(self, services, fake_api, cache):
        await cache.set(job_map_key("job-1"), {"job_id": "job-1", "product_ids": [1]}, ttl=3600)
        fake_api.on("GET", "/v1/jobs/job-1", json={"status": "failed"})

        status = await services.batch.poll("job-1")

        assert status.is_terminal is True
        assert status.applied_products == []
        assert await cache.get(job_map_key("job-1")) is not None

    @pytest.mark.asyncio
    async def test_integrators_when_enabled(self, services_factory, make_product, fake_api):
        services = services_factory(batch_apply_integrators=True)
        high = await make_product(name="High")
        low = await make_product(name="Low")
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1"})
        fake_api.on(
            "GET",
            "/v1/jobs/job-1",
            json={"status": "completed", "result": [result_item("Toys", 1, 0.9), result_item("Toys", 1, 0.2)]},
        )
        await services.batch.submit([high.id, low.id])

        await services.batch.poll("job-1")

        assert [t.name for t in await services.terms.get_object_terms(high.id, "pa_color")] == ["Red"]
        assert await services.terms.get_object_terms(low.id, "pa_color") == []
        assert await services.products.get_meta(low.id, META_CONFIDENCE) == pytest.approx(0.2)


class TestWait:
    @pytest.mark.asyncio
    async def test_polls_until_terminal(self, services, make_product, fake_api):
        product = await make_product()
        fake_api.on("POST", "/v1/products/batch", json={"job_id": "job-1"})
        fake_api.on("GET", "/v1/jobs/job-1", json={"status": "pending", "total_products": 1})
        fake_api.on("GET", "/v1/jobs/job-1", json={"status": "processing", "total_products": 1})
        fake_api.on(
            "GET",
            "/v1/jobs/job-1",
            json={"status": "completed", "total_products": 1, "processed_products": 1, "result": [result_item("Toys", 1, 0.9)]},
        )
        await services.batch.submit([product.id])

        seen = []
        final = await services.batch.wait("job-1", interval=0, on_progress=lambda status: seen.append(status.status))

        assert seen == ["pending", "processing", "completed"]
        assert final.applied_products == [product.id]
        assert len(fake_api.calls("GET", "/v1/jobs/job-1")) == 3

    @pytest.mark.asyncio
    async def test_async_progress_callback(self, services, fake_api):
        fake_api.on("GET", "/v1/jobs/job-2", json={"status": "failed"})
        seen = []

        async def on_progress(status):
            seen.append(status.status)

        final = await services.batch.wait("job-2", interval=0, on_progress=on_progress)

        assert final.status == "failed"
        assert seen == ["failed"]
