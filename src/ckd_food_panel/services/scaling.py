"""Rescale a reference CKD panel to another portion size."""

import math
from dataclasses import replace

from ckd_food_panel.domain.flags import worst_of
from ckd_food_panel.domain.metrics import NOT_AVAILABLE, SCALE_SENSITIVE_LABELS
from ckd_food_panel.domain.panel import (
    REFERENCE_PORTION_G,
    FoodPanel,
    Metric,
    format_portion,
)
from ckd_food_panel.services.panel_builder import explanation_key, mineral_metric


def scale_panel(reference: FoodPanel, target_portion: float) -> FoodPanel:
    """Return a new panel for ``target_portion`` grams.

    Only phosphorus, potassium and sodium scale; each is rounded to a whole
    milligram and re-flagged against its threshold at the scaled amount.
    A mineral value that does not parse as a finite number becomes N/A.
    Ratios and descriptive metrics are portion-invariant and pass through.
    Always scale from the retained 100 g reference, never from a panel
    that was itself produced here.
    """
    if not reference.is_reference:
        raise ValueError(
            f"Panels can only be scaled from the {format_portion(REFERENCE_PORTION_G)} "
            f"reference, got {reference.serving_size}"
        )
    if not math.isfinite(target_portion) or target_portion < 0:
        raise ValueError(
            f"Portion must be a finite, non-negative number, got {target_portion}"
        )

    factor = target_portion / REFERENCE_PORTION_G
    metrics = tuple(_scale_metric(metric, factor) for metric in reference.metrics)
    return replace(
        reference,
        serving_size=format_portion(target_portion),
        portion_grams=float(target_portion),
        metrics=metrics,
        overall_flag=worst_of(metric.flag for metric in metrics),
    )


def _scale_metric(metric: Metric, factor: float) -> Metric:
    if metric.label not in SCALE_SENSITIVE_LABELS:
        return metric
    try:
        original = float(metric.value)
    except ValueError:
        original = math.nan
    if not math.isfinite(original):
        return replace(
            metric,
            value=NOT_AVAILABLE,
            explanation_key=explanation_key(metric.label, "unavailable"),
        )
    return mineral_metric(metric.label, original * factor)
