"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from ckd_food_panel.adapters.dataset_provider import PandasDatasetProvider
from ckd_food_panel.adapters.fdc_client import HttpxFdcClient
from ckd_food_panel.config import Settings
from ckd_food_panel.services.cache import DatasetCache, InMemoryCache
from ckd_food_panel.services.nutrition import NutritionService
from ckd_food_panel.services.resolver import (
    KeywordTemplateSource,
    NutrientResolver,
    build_sources,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    resolver: NutrientResolver
    dataset_cache: DatasetCache
    nutrition_service: NutritionService | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    dataset_http_client = httpx.AsyncClient()
    dataset_provider = PandasDatasetProvider(
        location=resolved_settings.dataset_location,
        http_client=dataset_http_client,
    )
    dataset_cache = DatasetCache()

    fdc_client: HttpxFdcClient | None = None
    nutrition_service: NutritionService | None = None
    if resolved_settings.remote_lookup_enabled:
        fdc_client = HttpxFdcClient.create(
            api_key=str(resolved_settings.fdc_api_key),
            base_url=resolved_settings.fdc_base_url,
        )
        nutrition_service = NutritionService(
            fdc_client=fdc_client,
            cache=InMemoryCache(),
            debug=resolved_settings.debug,
        )

    resolver = NutrientResolver(
        sources=build_sources(
            dataset_provider=dataset_provider,
            dataset_cache=dataset_cache,
            nutrition_service=nutrition_service,
            dataset_source_tag=resolved_settings.dataset_source_tag,
        ),
        fallback=KeywordTemplateSource(),
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await dataset_http_client.aclose()
        if fdc_client is not None:
            await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        resolver=resolver,
        dataset_cache=dataset_cache,
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
