"""The fixed CKD metric vocabulary and its threshold table."""

from collections.abc import Mapping
from enum import Enum
from typing import TypeVar

from ckd_food_panel.domain.flags import Flag, Threshold, flag_against

NOT_AVAILABLE = "N/A"

_V = TypeVar("_V")


class MetricLabel(str, Enum):
    """Metric labels in the order they appear on every panel."""

    PHOSPHORUS = "Phosphorus (mg)"
    PHOSPHORUS_PROTEIN_RATIO = "Phosphorus-to-protein ratio (mg/g)"
    POTASSIUM = "Potassium (mg)"
    SODIUM = "Sodium (mg)"
    PURINE = "Purine content"
    PRAL = "PRAL score"
    DIGESTIBILITY = "Digestibility / NPU"
    NITROGEN_BURDEN = "Nitrogen burden / renal load"
    OXALATE = "Oxalate content"
    FLUID_LOAD = "Fluid / volume load"
    PROCESSING_LEVEL = "Processing level"
    KIDNEY_HANDLING = "Kidney handling"


METRIC_ORDER: tuple[MetricLabel, ...] = tuple(MetricLabel)

SCALE_SENSITIVE_LABELS: frozenset[MetricLabel] = frozenset(
    {MetricLabel.PHOSPHORUS, MetricLabel.POTASSIUM, MetricLabel.SODIUM}
)

# Illustrative cutoffs, not clinical guidance.
THRESHOLDS: Mapping[MetricLabel, Threshold] = {
    MetricLabel.PHOSPHORUS: Threshold(caution=150, limit=250),
    MetricLabel.POTASSIUM: Threshold(caution=250, limit=600),
    MetricLabel.SODIUM: Threshold(caution=200, limit=400),
}

PHOSPHORUS_PROTEIN_RATIO_CAUTION = 15.0
NITROGEN_BURDEN_CAUTION_G = 20.0


def threshold_flag(label: MetricLabel, amount: float) -> Flag:
    """Flag an absolute amount for a metric; labels without cutoffs are OK."""
    return flag_against(THRESHOLDS.get(label), amount)


def require_all_labels(mapping: Mapping[MetricLabel, _V], name: str) -> None:
    """Raise if a per-label mapping does not cover every metric label."""
    missing = [label.value for label in METRIC_ORDER if label not in mapping]
    if missing:
        raise ValueError(f"{name} is missing entries for: {', '.join(missing)}")


def validate_label_order(labels: tuple[MetricLabel, ...]) -> None:
    """Ensure a metric sequence carries exactly the fixed labels in order."""
    if len(labels) != len(METRIC_ORDER):
        raise ValueError(
            f"Expected {len(METRIC_ORDER)} metrics, got {len(labels)}"
        )
    for position, (actual, expected) in enumerate(
        zip(labels, METRIC_ORDER, strict=True)
    ):
        if actual != expected:
            raise ValueError(
                f"Metric {position} should be {expected.value!r}, got {actual.value!r}"
            )


if set(THRESHOLDS) != SCALE_SENSITIVE_LABELS:
    raise ValueError("Threshold table must cover exactly the scale-sensitive metrics")
