"""
Tests for the SEO, category and attribute integrators
"""

import pytest

from taxoai.core.config import SEOPlugin
from taxoai.schemas.analysis import AttributesData, SEOData
from taxoai.services.integrators import AttributeMapper, CategoryMapper, SEOIntegrator
from taxoai.services.integrators.category import leaf_category


@pytest.fixture
def seo_data():
    return SEOData.model_validate(
        {
            "meta_title": "Blue Tee | Shop",
            "meta_description": "A <b>soft</b> blue tee.",
            "optimized_title": "Blue Cotton Crew Neck T-Shirt",
            "optimized_description": '<p onclick="x()">Soft tee</p><script>alert(1)</script>',
            "keywords": [{"keyword": "blue t-shirt", "volume": 5400}, {"keyword": "tee"}],
            "tags": ["cotton", "summer"],
        }
    )


class TestSEOIntegrator:
    @pytest.mark.asyncio
    async def test_yoast_fields(self, services, make_product, seo_data):
        product = await make_product()
        integrator = SEOIntegrator(services.products, services.terms, seo_plugin=SEOPlugin.YOAST)

        await integrator.apply_seo(product.id, seo_data)

        meta = await services.products.get_meta_many(
            product.id, ["_yoast_wpseo_title", "_yoast_wpseo_metadesc", "_yoast_wpseo_focuskw", "_taxoai_seo_title"]
        )
        assert meta == {
            "_yoast_wpseo_title": "Blue Tee | Shop",
            "_yoast_wpseo_metadesc": "A soft blue tee.",
            "_yoast_wpseo_focuskw": "blue t-shirt",
        }

    @pytest.mark.asyncio
    async def test_rank_math_fields(self, services, make_product, seo_data):
        product = await make_product()
        integrator = SEOIntegrator(services.products, services.terms, seo_plugin=SEOPlugin.RANK_MATH)

        await integrator.apply_seo(product.id, seo_data)

        assert await services.products.get_meta(product.id, "rank_math_title") == "Blue Tee | Shop"
        assert await services.products.get_meta(product.id, "rank_math_description") == "A soft blue tee."
        assert await services.products.get_meta(product.id, "rank_math_focus_keyword") == "blue t-shirt"
        assert await services.products.get_meta(product.id, "_yoast_wpseo_title") is None

    @pytest.mark.asyncio
    async def test_fallback_fields(self, services, make_product, seo_data):
        product = await make_product()
        integrator = SEOIntegrator(services.products, services.terms, seo_plugin=SEOPlugin.NONE)

        await integrator.apply_seo(product.id, seo_data)

        assert await services.products.get_meta(product.id, "_taxoai_seo_title") == "Blue Tee | Shop"
        assert await services.products.get_meta(product.id, "_taxoai_seo_meta_description") == "A soft blue tee."

    @pytest.mark.asyncio
    async def test_title_and_description_only_when_enabled(self, services, make_product, seo_data):
        product = await make_product(description="Original")

        await services.seo.apply_seo(product.id, seo_data, update_title=False, update_description=False)
        product = await services.products.get(product.id)
        assert product.name == "Blue Cotton T-Shirt"
        assert product.description == "Original"

        await services.seo.apply_seo(product.id, seo_data, update_title=True, update_description=True)
        product = await services.products.get(product.id)
        assert product.name == "Blue Cotton Crew Neck T-Shirt"
        assert product.description == "<p>Soft tee</p>"

    @pytest.mark.asyncio
    async def test_empty_optimized_values_do_not_overwrite(self, services, make_product):
        product = await make_product(description="Original")

        await services.seo.apply_seo(product.id, SEOData(optimized_title="  "), update_title=True, update_description=True)

        product = await services.products.get(product.id)
        assert product.name == "Blue Cotton T-Shirt"
        assert product.description == "Original"

    @pytest.mark.asyncio
    async def test_tags_are_appended_and_keywords_stored(self, services, make_product, seo_data):
        product = await make_product()
        existing = await services.terms.find_or_create("product_tag", "sale")
        await services.terms.set_object_terms(product.id, [existing.id], "product_tag")

        await services.seo.apply_seo(product.id, seo_data)

        tags = await services.terms.get_object_terms(product.id, "product_tag")
        assert sorted(t.name for t in tags) == ["cotton", "sale", "summer"]
        assert await services.products.get_meta(product.id, "_taxoai_keywords") == [
            {"keyword": "blue t-shirt", "volume": 5400},
            {"keyword": "tee"},
        ]


class TestCategoryMapper:
    def test_leaf_category(self):
        assert leaf_category("Apparel & Accessories > Clothing > Shirts & Tops") == "Shirts & Tops"
        assert leaf_category("Toys") == "Toys"
        assert leaf_category("") == ""

    @pytest.mark.asyncio
    async def test_writes_feed_fields_without_auto_map(self, services, make_product):
        product = await make_product()
        mapper = CategoryMapper(services.products, services.terms, auto_map=False)

        term = await mapper.map(product.id, "Apparel & Accessories > Clothing", 1604)

        assert term is None
        assert await services.products.get_meta(product.id, "_google_product_category") == "Apparel & Accessories > Clothing"
        assert await services.products.get_meta(product.id, "_google_product_category_id") == 1604
        assert await services.terms.get_object_terms(product.id, "product_cat") == []

    @pytest.mark.asyncio
    async def test_zero_id_is_not_written(self, services, make_product):
        product = await make_product()

        await services.category.map(product.id, "Toys", 0)

        assert await services.products.get_meta(product.id, "_google_product_category_id") is None

    @pytest.mark.asyncio
    async def test_auto_map_appends_leaf_category(self, services, make_product):
        product = await make_product()
        mapper = CategoryMapper(services.products, services.terms, auto_map=True)
        existing = await services.terms.find_or_create("product_cat", "Featured")
        await services.terms.set_object_terms(product.id, [existing.id], "product_cat")

        term = await mapper.map(product.id, "Apparel & Accessories > Clothing > Shirts & Tops", 212)

        assert term.name == "Shirts & Tops"
        names = sorted(t.name for t in await services.terms.get_object_terms(product.id, "product_cat"))
        assert names == ["Featured", "Shirts & Tops"]

    @pytest.mark.asyncio
    async def test_auto_map_reuses_term_by_slug(self, services, make_product):
        product = await make_product()
        mapper = CategoryMapper(services.products, services.terms, auto_map=True)
        existing = await services.terms.find_or_create("product_cat", "shirts tops")

        term = await mapper.map(product.id, "Clothing > Shirts Tops", 212)

        assert term.id == existing.id


class TestAttributeMapper:
    @pytest.mark.asyncio
    async def test_creates_taxonomies_terms_and_rows(self, services, make_product):
        product = await make_product()

        assigned = await services.attribute_mapper.map_attributes(
            product.id, AttributesData(color=["Blue", "Navy"], material="Cotton")
        )

        assert set(assigned) == {"pa_color", "pa_material"}
        color = await services.attributes.get_by_name("color")
        assert color.label == "Color"
        assert color.type == "select"

        rows = await services.attributes.get_product_attributes(product.id)
        assert [(r.taxonomy, r.position, r.visible, r.variation) for r in rows] == [
            ("pa_color", 0, True, False),
            ("pa_material", 1, True, False),
        ]
        colors = await services.terms.get_object_terms(product.id, "pa_color")
        assert [t.name for t in colors] == ["Blue", "Navy"]
        assert rows[0].options == [t.id for t in colors]

    @pytest.mark.asyncio
    async def test_replaces_dimension_and_preserves_others(self, services, make_product):
        product = await make_product()
        mapper = AttributeMapper(services.products, services.terms, services.attributes)
        await mapper.map_attributes(product.id, AttributesData(color="Red", style="Casual"))

        await mapper.map_attributes(product.id, AttributesData(color=["Blue"]))

        assert [t.name for t in await services.terms.get_object_terms(product.id, "pa_color")] == ["Blue"]
        assert [t.name for t in await services.terms.get_object_terms(product.id, "pa_style")] == ["Casual"]
        assert len(await services.attributes.get_product_attributes(product.id)) == 2

    @pytest.mark.asyncio
    async def test_empty_values_are_skipped(self, services, make_product):
        product = await make_product()

        assigned = await services.attribute_mapper.map_attributes(
            product.id, AttributesData(color=["", "  "], gender=None, material="<b></b>")
        )

        assert assigned == {}
        assert await services.attributes.get_product_attributes(product.id) == []

    @pytest.mark.asyncio
    async def test_unknown_product_is_ignored(self, services):
        assert await services.attribute_mapper.map_attributes(999, AttributesData(color="Blue")) == {}
