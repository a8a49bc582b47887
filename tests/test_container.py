"""Tests for container wiring."""

import asyncio

from ckd_food_panel.config import Settings
from ckd_food_panel.containers import build_container


def test_build_container_with_credential_enables_remote_stage(settings) -> None:
    container = build_container(settings)

    assert container.nutrition_service is not None
    assert [source.name for source in container.resolver.sources] == [
        "dataset",
        "usda-fdc",
    ]
    asyncio.run(container.close_resources())


def test_build_container_without_credential_skips_remote_stage() -> None:
    container = build_container(Settings(fdc_api_key="  "))

    assert container.nutrition_service is None
    assert [source.name for source in container.resolver.sources] == ["dataset"]
    asyncio.run(container.close_resources())


def test_container_resolves_from_packaged_dataset() -> None:
    container = build_container(Settings(fdc_api_key=None))

    resolution = asyncio.run(container.resolver.resolve("白飯", "zh-TW"))

    assert resolution.source_tag == "local-asia"
    assert resolution.base.typical_serving_g == 150
    assert container.dataset_cache.populated
    asyncio.run(container.close_resources())
