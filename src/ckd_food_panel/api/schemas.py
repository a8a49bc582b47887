"""Pydantic models for the panel API."""

from typing import Literal

from pydantic import BaseModel, Field

from ckd_food_panel.domain.flags import Flag
from ckd_food_panel.domain.panel import FoodPanel, Metric


class MetricModel(BaseModel):
    """A flagged metric payload."""

    label: str
    value: str
    flag: Flag
    explanation_key: str


class PanelModel(BaseModel):
    """A CKD panel payload."""

    food_name: str
    serving_size: str
    data_source: str
    overall_flag: Flag
    metrics: list[MetricModel]
    source_confidence: Literal["high", "medium", "low"]
    portion_grams: float = Field(ge=0, allow_inf_nan=False)
    locale: str = "en"
    notes: str | None = None
    typical_serving_size_grams: float | None = None
    safer_ways_keys: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, panel: FoodPanel) -> "PanelModel":
        """Build a payload from a domain panel."""
        return cls(
            food_name=panel.food_name,
            serving_size=panel.serving_size,
            data_source=panel.data_source,
            overall_flag=panel.overall_flag,
            metrics=[
                MetricModel(
                    label=metric.label.value,
                    value=metric.value,
                    flag=metric.flag,
                    explanation_key=metric.explanation_key,
                )
                for metric in panel.metrics
            ],
            source_confidence=panel.source_confidence,
            portion_grams=panel.portion_grams,
            locale=panel.locale,
            notes=panel.notes,
            typical_serving_size_grams=panel.typical_serving_size_grams,
            safer_ways_keys=list(panel.safer_ways_keys),
        )

    def to_domain(self) -> FoodPanel:
        """Convert to a domain panel, raising ValueError on invariant breaks."""
        return FoodPanel(
            food_name=self.food_name,
            serving_size=self.serving_size,
            data_source=self.data_source,
            overall_flag=self.overall_flag,
            metrics=tuple(
                Metric(
                    label=metric.label,
                    value=metric.value,
                    flag=metric.flag,
                    explanation_key=metric.explanation_key,
                )
                for metric in self.metrics
            ),
            source_confidence=self.source_confidence,
            portion_grams=self.portion_grams,
            locale=self.locale,
            notes=self.notes,
            typical_serving_size_grams=self.typical_serving_size_grams,
            safer_ways_keys=tuple(self.safer_ways_keys),
        )


class PanelLookupResponse(BaseModel):
    """Reference panel plus the panel scaled to the requested portion."""

    reference: PanelModel
    panel: PanelModel


class ScaleRequest(BaseModel):
    """Request to rescale a retained reference panel."""

    reference: PanelModel
    portion: float = Field(ge=0, allow_inf_nan=False)
