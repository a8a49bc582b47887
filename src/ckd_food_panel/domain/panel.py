"""Domain models for nutrient records and CKD metric panels."""

from dataclasses import dataclass, field
from typing import Literal

from ckd_food_panel.domain.flags import Flag, worst_of
from ckd_food_panel.domain.metrics import MetricLabel, validate_label_order

Confidence = Literal["high", "medium", "low"]

REFERENCE_PORTION_G = 100.0


@dataclass(frozen=True)
class NutrientBase:
    """Nutrient amounts per 100 g for a resolved food."""

    name: str
    protein_g: float
    phosphorus_mg: float
    potassium_mg: float
    sodium_mg: float
    notes: str | None = None
    typical_serving_g: float | None = None


@dataclass(frozen=True)
class Resolution:
    """A resolved nutrient record with its provenance."""

    base: NutrientBase
    source_tag: str
    confidence: Confidence


@dataclass(frozen=True)
class Metric:
    """A single flagged metric on a food panel."""

    label: MetricLabel
    value: str
    flag: Flag
    explanation_key: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "label", MetricLabel(self.label))
        object.__setattr__(self, "flag", Flag(self.flag))


@dataclass(frozen=True)
class FoodPanel:
    """The 12-metric CKD panel for a food at a given portion.

    Construction validates the panel against itself: ``serving_size`` must
    render ``portion_grams`` and ``overall_flag`` must be the worst metric
    flag. A panel received from a client is checked the same way as one
    built locally.
    """

    food_name: str
    serving_size: str
    data_source: str
    overall_flag: Flag
    metrics: tuple[Metric, ...]
    source_confidence: Confidence
    portion_grams: float = REFERENCE_PORTION_G
    locale: str = "en"
    notes: str | None = None
    typical_serving_size_grams: float | None = None
    safer_ways_keys: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metrics", tuple(self.metrics))
        object.__setattr__(self, "safer_ways_keys", tuple(self.safer_ways_keys))
        object.__setattr__(self, "overall_flag", Flag(self.overall_flag))
        if self.serving_size != format_portion(self.portion_grams):
            raise ValueError(
                f"Serving size {self.serving_size!r} does not match "
                f"portion of {self.portion_grams:g} g"
            )
        validate_label_order(tuple(metric.label for metric in self.metrics))
        expected = worst_of(metric.flag for metric in self.metrics)
        if self.overall_flag != expected:
            raise ValueError(
                f"Overall flag {self.overall_flag.value} does not match "
                f"worst metric flag {expected.value}"
            )

    @property
    def is_reference(self) -> bool:
        """Return True when the panel is at the 100 g reference portion."""
        return self.portion_grams == REFERENCE_PORTION_G

    def metric(self, label: MetricLabel) -> Metric:
        """Return the metric with the given label."""
        return self.metrics[_LABEL_POSITIONS[label]]


_LABEL_POSITIONS = {label: index for index, label in enumerate(MetricLabel)}


def format_portion(portion_grams: float) -> str:
    """Render a portion as a serving-size string such as ``"50g"``."""
    if float(portion_grams).is_integer():
        return f"{int(portion_grams)}g"
    return f"{portion_grams:g}g"
