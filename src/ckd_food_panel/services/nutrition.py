"""Nutrition service integrating USDA FDC."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ckd_food_panel.adapters.fdc_client import FdcClient
from ckd_food_panel.domain.errors import MalformedUpstreamPayload
from ckd_food_panel.domain.panel import NutrientBase

STAGE_NAME = "usda-fdc"

_FIELDS = ("protein", "phosphorus", "potassium", "sodium")

_NUTRIENT_NUMBERS = {
    "203": "protein",
    "305": "phosphorus",
    "306": "potassium",
    "307": "sodium",
}

_MASS_UNITS = {"g", "grm", "gram", "grams", "ml", "mlt"}

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ckd_food_panel.services.cache import Cache


@dataclass
class NutritionService:
    """Looks up renal nutrients for a free-text query in FDC."""

    fdc_client: FdcClient
    cache: "Cache"
    lookup_ttl_seconds: int = 86400
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def lookup(self, query: str) -> NutrientBase | None:
        """Return per-100 g nutrients for the top FDC match, or None."""
        cache_key = f"fdc:lookup:{query.strip().lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutrientBase):
            return cached

        search = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(query, page_size=1),
            action="search",
        )
        top = _top_search_hit(search)
        if top is None:
            if self.debug:
                _logger.info("Nutrition search FDC: query=%s results=0", query)
            return None

        fdc_id = top["fdcId"]
        detail = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        fallback_name = str(top.get("description") or query)
        base = extract_nutrient_base(detail, fallback_name=fallback_name)
        if base is None:
            if self.debug:
                _logger.info(
                    "Nutrition food FDC: fdc_id=%s has no renal nutrients", fdc_id
                )
            return None

        self.cache.set(cache_key, base, ttl_seconds=self.lookup_ttl_seconds)
        if self.debug:
            _logger.info("Nutrition food FDC: query=%s fdc_id=%s", query, fdc_id)
        return base

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                if self.debug:
                    _logger.warning(
                        "Nutrition %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        status_code,
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _top_search_hit(payload: dict[str, object]) -> dict[str, object] | None:
    """Return the first search hit, validating its shape."""
    foods = payload.get("foods", [])
    if not isinstance(foods, list):
        raise MalformedUpstreamPayload(STAGE_NAME, "search 'foods' is not a list")
    if not foods:
        return None
    top = foods[0]
    if not isinstance(top, dict) or not isinstance(top.get("fdcId"), int):
        raise MalformedUpstreamPayload(STAGE_NAME, "search hit has no integer fdcId")
    return top


def extract_nutrient_base(
    detail: dict[str, object], fallback_name: str
) -> NutrientBase | None:
    """Build a NutrientBase from an FDC food payload.

    Label nutrients (branded foods) are read first and converted from per
    serving to per 100 g when the serving is given in grams or millilitres.
    Fields still at zero are filled from the generic nutrient list, matched
    by nutrient name or by nutrient number. Returns None when every field
    is zero.
    """
    serving_g = _serving_size_g(detail)
    values = dict.fromkeys(_FIELDS, 0.0)

    label_nutrients = detail.get("labelNutrients") or {}
    if not isinstance(label_nutrients, dict):
        raise MalformedUpstreamPayload(STAGE_NAME, "'labelNutrients' is not an object")
    for field_name in _FIELDS:
        entry = label_nutrients.get(field_name)
        amount = _as_float(entry.get("value")) if isinstance(entry, dict) else None
        if amount:
            values[field_name] = amount * 100 / serving_g if serving_g else amount

    food_nutrients = detail.get("foodNutrients") or []
    if not isinstance(food_nutrients, list):
        raise MalformedUpstreamPayload(STAGE_NAME, "'foodNutrients' is not a list")
    for nutrient in food_nutrients:
        if not isinstance(nutrient, dict):
            continue
        field_name = _field_for(nutrient)
        if field_name is None or values[field_name]:
            continue
        amount = _as_float(nutrient.get("amount", nutrient.get("value")))
        if amount:
            values[field_name] = amount

    if not any(values.values()):
        return None

    description = detail.get("description")
    brand_owner = detail.get("brandOwner")
    return NutrientBase(
        name=str(description) if description else fallback_name,
        protein_g=values["protein"],
        phosphorus_mg=values["phosphorus"],
        potassium_mg=values["potassium"],
        sodium_mg=values["sodium"],
        notes=str(brand_owner) if brand_owner else None,
        typical_serving_g=serving_g,
    )


def _field_for(nutrient: dict[str, object]) -> str | None:
    """Map an FDC nutrient entry to one of the renal fields."""
    info = nutrient.get("nutrient")
    if not isinstance(info, dict):
        info = {}
    name = info.get("name") or nutrient.get("nutrientName") or nutrient.get("name")
    if isinstance(name, str):
        head = name.split(",", 1)[0].strip().lower()
        if head in _FIELDS:
            return head
    number = (
        info.get("number") or nutrient.get("nutrientNumber") or nutrient.get("number")
    )
    if number is not None:
        return _NUTRIENT_NUMBERS.get(str(number).strip())
    return None


def _serving_size_g(detail: dict[str, object]) -> float | None:
    size = _as_float(detail.get("servingSize"))
    unit = str(detail.get("servingSizeUnit") or "").strip().lower()
    if size and size > 0 and unit in _MASS_UNITS:
        return size
    return None


def _as_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
