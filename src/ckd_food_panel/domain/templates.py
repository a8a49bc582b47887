"""Keyword templates used when no data source matches a query."""

from dataclasses import dataclass

from ckd_food_panel.domain.panel import NutrientBase


@dataclass(frozen=True)
class KeywordTemplate:
    """A food category recognised by substring keywords."""

    category: str
    keywords: tuple[str, ...]
    base: NutrientBase

    def matches(self, normalized_query: str) -> bool:
        """Return True when any keyword occurs in the lower-cased query."""
        return any(keyword in normalized_query for keyword in self.keywords)


SOY_MILK = KeywordTemplate(
    category="soy_milk",
    keywords=("soy milk", "soymilk", "soya milk", "豆漿", "豆奶"),
    base=NutrientBase(
        name="Soy milk (template)",
        protein_g=2.9,
        phosphorus_mg=52,
        potassium_mg=118,
        sodium_mg=51,
        typical_serving_g=240,
    ),
)

DAIRY_MILK = KeywordTemplate(
    category="dairy_milk",
    keywords=("milk", "牛奶", "鮮奶", "牛乳"),
    base=NutrientBase(
        name="Milk (template)",
        protein_g=3.3,
        phosphorus_mg=93,
        potassium_mg=150,
        sodium_mg=43,
        typical_serving_g=240,
    ),
)

ONION = KeywordTemplate(
    category="onion",
    keywords=("onion", "洋蔥"),
    base=NutrientBase(
        name="Onion (template)",
        protein_g=1.1,
        phosphorus_mg=29,
        potassium_mg=146,
        sodium_mg=4,
        typical_serving_g=110,
    ),
)

RICE = KeywordTemplate(
    category="rice",
    keywords=("rice", "白飯", "米飯", "飯"),
    base=NutrientBase(
        name="White rice, cooked (template)",
        protein_g=2.4,
        phosphorus_mg=43,
        potassium_mg=26,
        sodium_mg=1,
        typical_serving_g=150,
    ),
)

FRUIT = KeywordTemplate(
    category="fruit",
    keywords=("fruit", "apple", "pear", "grape", "berry", "水果", "蘋果"),
    base=NutrientBase(
        name="Fruit (template)",
        protein_g=0.3,
        phosphorus_mg=11,
        potassium_mg=107,
        sodium_mg=1,
        typical_serving_g=120,
    ),
)

GENERIC_VEGETABLE = KeywordTemplate(
    category="vegetable",
    keywords=(),
    base=NutrientBase(
        name="Vegetable, low potassium (template)",
        protein_g=1.3,
        phosphorus_mg=26,
        potassium_mg=170,
        sodium_mg=18,
        typical_serving_g=85,
    ),
)

# Soy milk precedes dairy milk so "soy milk" never falls into the dairy bucket.
TEMPLATE_CHECK_ORDER: tuple[KeywordTemplate, ...] = (
    SOY_MILK,
    DAIRY_MILK,
    ONION,
    RICE,
    FRUIT,
)


def classify(query: str) -> KeywordTemplate:
    """Pick the first template whose keywords occur in the query."""
    normalized = query.strip().lower()
    for template in TEMPLATE_CHECK_ORDER:
        if template.matches(normalized):
            return template
    return GENERIC_VEGETABLE
