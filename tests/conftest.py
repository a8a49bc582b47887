"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from ckd_food_panel.adapters.dataset_provider import DatasetProvider
from ckd_food_panel.adapters.fdc_client import FdcClient
from ckd_food_panel.config import Settings
from ckd_food_panel.containers import AppContainer
from ckd_food_panel.domain.dataset import DatasetRecord
from ckd_food_panel.domain.panel import NutrientBase
from ckd_food_panel.services.cache import DatasetCache, InMemoryCache
from ckd_food_panel.services.nutrition import NutritionService
from ckd_food_panel.services.resolver import (
    KeywordTemplateSource,
    NutrientResolver,
    build_sources,
)


def make_record(  # noqa: PLR0913
    localized_name: str,
    english_name: str,
    *,
    language: str = "zh-TW",
    source: str = "local-asia",
    protein: float = 1.0,
    phosphorus: float = 30.0,
    potassium: float = 150.0,
    sodium: float = 5.0,
    notes: str | None = None,
    serving_basis: str | None = "100g",
) -> DatasetRecord:
    return DatasetRecord(
        source=source,
        localized_name=localized_name,
        english_name=english_name,
        language=language,
        category="test",
        protein=protein,
        phosphorus=phosphorus,
        potassium=potassium,
        sodium=sodium,
        notes=notes,
        serving_basis=serving_basis,
    )


SAMPLE_RECORDS = [
    make_record(
        "奇異果", "Kiwi", protein=1.1, phosphorus=34, potassium=312, sodium=3
    ),
    make_record(
        "香蕉",
        "Banana",
        protein=1.1,
        phosphorus=22,
        potassium=358,
        sodium=1,
        serving_basis="120g",
    ),
    make_record(
        "",
        "Onion rings",
        language="en",
        source="usda-sr",
        protein=4.5,
        phosphorus=92,
        potassium=127,
        sodium=420,
        notes="fried",
    ),
]


@dataclass
class InMemoryDatasetProvider(DatasetProvider):
    """Dataset provider serving fixed records and counting loads."""

    records: list[DatasetRecord] = field(default_factory=lambda: list(SAMPLE_RECORDS))
    load_calls: int = 0
    error: Exception | None = None

    async def load(self) -> list[DatasetRecord]:
        self.load_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


def fdc_detail(  # noqa: PLR0913
    fdc_id: int = 1001,
    description: str = "Cheese, cheddar",
    *,
    protein: float = 24.9,
    phosphorus: float = 455,
    potassium: float = 76,
    sodium: float = 653,
) -> dict[str, object]:
    return {
        "fdcId": fdc_id,
        "description": description,
        "dataType": "SR Legacy",
        "foodNutrients": [
            {
                "nutrient": {"id": 1003, "number": "203", "name": "Protein"},
                "amount": protein,
            },
            {
                "nutrient": {"id": 1091, "number": "305", "name": "Phosphorus, P"},
                "amount": phosphorus,
            },
            {
                "nutrient": {"id": 1092, "number": "306", "name": "Potassium, K"},
                "amount": potassium,
            },
            {
                "nutrient": {"id": 1093, "number": "307", "name": "Sodium, Na"},
                "amount": sodium,
            },
        ],
    }


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client returning canned payloads."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [{"fdcId": 1001, "description": "Cheese, cheddar"}]
        }
    )
    detail_payload: dict[str, object] = field(default_factory=fdc_detail)
    error: Exception | None = None
    search_calls: int = 0
    food_calls: int = 0

    async def search_foods(self, query: str, page_size: int = 1) -> dict[str, object]:
        self.search_calls += 1
        if self.error is not None:
            raise self.error
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls += 1
        return self.detail_payload


def make_resolver(
    dataset_provider: DatasetProvider | None = None,
    fdc_client: FdcClient | None = None,
) -> NutrientResolver:
    """Build a resolver over fakes; no FDC client means no remote stage."""
    nutrition_service = None
    if fdc_client is not None:
        nutrition_service = NutritionService(
            fdc_client=fdc_client,
            cache=InMemoryCache(),
            retry_delay_seconds=0,
        )
    return NutrientResolver(
        sources=build_sources(
            dataset_provider=dataset_provider or InMemoryDatasetProvider(),
            dataset_cache=DatasetCache(),
            nutrition_service=nutrition_service,
        ),
        fallback=KeywordTemplateSource(),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(fdc_api_key="fdc-key")


@pytest.fixture
def reference_base() -> NutrientBase:
    return NutrientBase(
        name="Test food",
        protein_g=10,
        phosphorus_mg=340,
        potassium_mg=500,
        sodium_mg=50,
    )


@pytest.fixture
def dataset_provider() -> InMemoryDatasetProvider:
    return InMemoryDatasetProvider()


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def container(
    settings: Settings,
    dataset_provider: InMemoryDatasetProvider,
    fdc_client: FakeFdcClient,
) -> AppContainer:
    dataset_cache = DatasetCache()
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )
    resolver = NutrientResolver(
        sources=build_sources(
            dataset_provider=dataset_provider,
            dataset_cache=dataset_cache,
            nutrition_service=nutrition_service,
        ),
        fallback=KeywordTemplateSource(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        resolver=resolver,
        dataset_cache=dataset_cache,
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
