"""Nutrient source cascade for free-text food queries."""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from ckd_food_panel.adapters.dataset_provider import DatasetProvider
from ckd_food_panel.domain.dataset import DatasetRecord
from ckd_food_panel.domain.errors import AllSourcesExhausted, SourceMiss
from ckd_food_panel.domain.panel import Confidence, NutrientBase, Resolution
from ckd_food_panel.domain.templates import GENERIC_VEGETABLE, KeywordTemplate, classify
from ckd_food_panel.services.cache import DatasetCache
from ckd_food_panel.services.nutrition import STAGE_NAME as FDC_SOURCE_TAG
from ckd_food_panel.services.nutrition import NutritionService

FALLBACK_SOURCE_TAG = "local-fallback"
DEFAULT_DATASET_SOURCE_TAG = "ckd-foods-master"

_SERVING_GRAMS = re.compile(r"(\d+(?:\.\d+)?)\s*g\b", re.IGNORECASE)

_logger = logging.getLogger(__name__)


class NutrientSource(Protocol):
    """A single stage of the resolution cascade."""

    name: str

    async def try_resolve(self, query: str, locale: str) -> Resolution | None:
        """Return a resolution, or None when this source has no match."""


@dataclass
class DatasetSource(NutrientSource):
    """Matches queries against the curated dataset by name."""

    provider: DatasetProvider
    cache: DatasetCache
    default_source_tag: str = DEFAULT_DATASET_SOURCE_TAG
    name: str = "dataset"

    async def try_resolve(self, query: str, locale: str) -> Resolution | None:
        """Exact localized name, then exact English name, then substring."""
        records = await self.cache.get(self.provider.load)
        needle = query.strip().lower()
        matchers: tuple[Callable[[DatasetRecord], bool], ...] = (
            lambda record: record.localized_name.lower() == needle,
            lambda record: record.english_name.lower() == needle,
            lambda record: needle in record.localized_name.lower()
            or needle in record.english_name.lower(),
        )
        for matcher in matchers:
            candidates = [record for record in records if matcher(record)]
            found = _prefer_locale(candidates, locale)
            if found is not None:
                return Resolution(
                    base=_base_from_record(found),
                    source_tag=found.source or self.default_source_tag,
                    confidence="high",
                )
        return None


@dataclass
class RemoteSource(NutrientSource):
    """Looks up the query in USDA FoodData Central."""

    nutrition_service: NutritionService
    name: str = FDC_SOURCE_TAG

    async def try_resolve(self, query: str, locale: str) -> Resolution | None:
        """Return the top FDC match when it carries any renal nutrient."""
        base = await self.nutrition_service.lookup(query)
        if base is None:
            return None
        return Resolution(base=base, source_tag=FDC_SOURCE_TAG, confidence="high")


@dataclass
class KeywordTemplateSource(NutrientSource):
    """Classifies the query into a category template; always matches."""

    confidence: Confidence = "medium"
    name: str = FALLBACK_SOURCE_TAG

    async def try_resolve(self, query: str, locale: str) -> Resolution | None:
        """Return the first matching template, or the generic vegetable."""
        return self.resolution_for(classify(query))

    def resolution_for(self, template: KeywordTemplate) -> Resolution:
        """Wrap a template as a fallback resolution."""
        return Resolution(
            base=template.base,
            source_tag=FALLBACK_SOURCE_TAG,
            confidence=self.confidence,
        )


@dataclass
class NutrientResolver:
    """Tries each source in order and returns the first resolution.

    Sources run strictly one after another. An exception raised by a
    source is logged and counted as a miss for that source only.
    """

    sources: Sequence[NutrientSource]
    fallback: KeywordTemplateSource
    debug: bool = False

    async def resolve(self, query: str, locale: str) -> Resolution:
        """Resolve a query to a nutrient record, never failing on data errors."""
        if not query.strip():
            return self.fallback.resolution_for(GENERIC_VEGETABLE)

        for source in (*self.sources, self.fallback):
            try:
                resolution = await source.try_resolve(query, locale)
            except SourceMiss as exc:
                _logger.warning("Source %s missed for %r: %s", source.name, query, exc)
                continue
            except Exception as exc:
                _logger.warning(
                    "Source %s failed for %r, trying next source: %s",
                    source.name,
                    query,
                    exc,
                )
                continue
            if resolution is not None:
                if self.debug:
                    _logger.info(
                        "Resolved %r via %s (%s)",
                        query,
                        resolution.source_tag,
                        resolution.confidence,
                    )
                return resolution
        raise AllSourcesExhausted(query)


def build_sources(
    dataset_provider: DatasetProvider,
    dataset_cache: DatasetCache,
    nutrition_service: NutritionService | None,
    dataset_source_tag: str = DEFAULT_DATASET_SOURCE_TAG,
) -> list[NutrientSource]:
    """Assemble the lookup stages in priority order.

    The remote stage is present only when a nutrition service is given,
    which the container does only when an FDC credential is configured.
    """
    sources: list[NutrientSource] = [
        DatasetSource(
            provider=dataset_provider,
            cache=dataset_cache,
            default_source_tag=dataset_source_tag,
        )
    ]
    if nutrition_service is not None:
        sources.append(RemoteSource(nutrition_service))
    return sources


def _prefer_locale(
    candidates: list[DatasetRecord], locale: str
) -> DatasetRecord | None:
    """Pick the first candidate in the caller's language, else the first one."""
    if not candidates:
        return None
    wanted = locale.strip().lower()
    for record in candidates:
        if record.language.lower() == wanted:
            return record
    return candidates[0]


def _base_from_record(record: DatasetRecord) -> NutrientBase:
    return NutrientBase(
        name=record.localized_name or record.english_name or "Unknown",
        protein_g=record.protein,
        phosphorus_mg=record.phosphorus,
        potassium_mg=record.potassium,
        sodium_mg=record.sodium,
        notes=record.notes,
        typical_serving_g=_typical_serving(record.serving_basis),
    )


def _typical_serving(serving_basis: str | None) -> float | None:
    """Parse grams from a serving basis such as ``"150g"``."""
    if not serving_basis:
        return None
    match = _SERVING_GRAMS.search(serving_basis)
    if match is None:
        return None
    grams = float(match.group(1))
    return grams if grams > 0 else None
