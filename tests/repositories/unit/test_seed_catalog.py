"""
Tests for tools/seed_catalog.py using the bundled sample catalog.
"""

import json
from pathlib import Path

import pytest

from repositories.combo import ComboRepository
from repositories.product import ProductRepository
from tools.seed_catalog import seed_catalog

SAMPLE_CATALOG = Path(__file__).resolve().parents[3] / "tools" / "sample_catalog.json"


@pytest.fixture
def sample_data():
    with open(SAMPLE_CATALOG, encoding="UTF-8") as f:
        return json.load(f)


class TestSeedCatalog:

    @pytest.mark.asyncio
    async def test_seeds_products_and_combos(self, test_session, sample_data):
        products_added, combos_added = await seed_catalog(sample_data, test_session)

        assert (products_added, combos_added) == (6, 2)
        combos = await ComboRepository.get_active(test_session)
        assert [combo.id for combo in combos] == ["combo-no-bung", "combo-ngot-ngao"]
        assert (await ProductRepository.get_by_id("che-thai", test_session)).category == "Tráng miệng"

    @pytest.mark.asyncio
    async def test_rerun_skips_existing(self, test_session, sample_data):
        await seed_catalog(sample_data, test_session)

        assert await seed_catalog(sample_data, test_session) == (0, 0)
