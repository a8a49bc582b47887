"""Build the 12-metric CKD panel from a resolved nutrient record."""

import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal

from ckd_food_panel.domain.flags import Flag, worst_of
from ckd_food_panel.domain.metrics import (
    METRIC_ORDER,
    NITROGEN_BURDEN_CAUTION_G,
    NOT_AVAILABLE,
    PHOSPHORUS_PROTEIN_RATIO_CAUTION,
    MetricLabel,
    require_all_labels,
    threshold_flag,
)
from ckd_food_panel.domain.panel import (
    REFERENCE_PORTION_G,
    Confidence,
    FoodPanel,
    Metric,
    NutrientBase,
    format_portion,
)
from ckd_food_panel.services.nutrition import STAGE_NAME as FDC_SOURCE_TAG

EXPLANATION_KEYS: Mapping[MetricLabel, str] = {
    MetricLabel.PHOSPHORUS: "explanations.phosphorus",
    MetricLabel.PHOSPHORUS_PROTEIN_RATIO: "explanations.phosphorus_protein_ratio",
    MetricLabel.POTASSIUM: "explanations.potassium",
    MetricLabel.SODIUM: "explanations.sodium",
    MetricLabel.PURINE: "explanations.purine",
    MetricLabel.PRAL: "explanations.pral",
    MetricLabel.DIGESTIBILITY: "explanations.digestibility",
    MetricLabel.NITROGEN_BURDEN: "explanations.nitrogen_burden",
    MetricLabel.OXALATE: "explanations.oxalate",
    MetricLabel.FLUID_LOAD: "explanations.fluid_load",
    MetricLabel.PROCESSING_LEVEL: "explanations.processing_level",
    MetricLabel.KIDNEY_HANDLING: "explanations.kidney_handling",
}

require_all_labels(EXPLANATION_KEYS, "EXPLANATION_KEYS")

TIP_PORTION_CONTROL = "tips.portion_control"
TIP_MIX_LOW_POTASSIUM = "tips.mix_low_potassium"
TIP_AVOID_STACKING_POTASSIUM = "tips.avoid_stacking_potassium"
TIP_PHOSPHORUS_PORTION = "tips.phosphorus_portion"
TIP_SODIUM_SEASONING = "tips.sodium_seasoning"
TIP_PHOSPHATE_ADDITIVES = "tips.phosphate_additives"


def build_panel(
    base: NutrientBase, locale: str, source_tag: str, confidence: Confidence
) -> FoodPanel:
    """Derive the reference (100 g) CKD panel for a nutrient record."""
    remote = source_tag == FDC_SOURCE_TAG
    metrics = {
        MetricLabel.PHOSPHORUS: _mineral(MetricLabel.PHOSPHORUS, base.phosphorus_mg),
        MetricLabel.PHOSPHORUS_PROTEIN_RATIO: _phosphorus_protein_ratio(base),
        MetricLabel.POTASSIUM: _mineral(MetricLabel.POTASSIUM, base.potassium_mg),
        MetricLabel.SODIUM: _mineral(MetricLabel.SODIUM, base.sodium_mg),
        MetricLabel.PURINE: _metric(
            MetricLabel.PURINE, NOT_AVAILABLE, Flag.CAUTION, "unavailable"
        ),
        MetricLabel.PRAL: _metric(
            MetricLabel.PRAL, NOT_AVAILABLE, Flag.OK, "unavailable"
        ),
        MetricLabel.DIGESTIBILITY: _metric(
            MetricLabel.DIGESTIBILITY, NOT_AVAILABLE, Flag.OK, "unavailable"
        ),
        MetricLabel.NITROGEN_BURDEN: _nitrogen_burden(base.protein_g),
        MetricLabel.OXALATE: _metric(
            MetricLabel.OXALATE, NOT_AVAILABLE, Flag.OK, "unavailable"
        ),
        MetricLabel.FLUID_LOAD: _metric(MetricLabel.FLUID_LOAD, "low", Flag.OK, "low"),
        MetricLabel.PROCESSING_LEVEL: (
            _metric(
                MetricLabel.PROCESSING_LEVEL,
                "processed / check additives",
                Flag.CAUTION,
                "processed",
            )
            if remote
            else _metric(
                MetricLabel.PROCESSING_LEVEL, "fresh / natural", Flag.OK, "fresh"
            )
        ),
        MetricLabel.KIDNEY_HANDLING: (
            _metric(
                MetricLabel.KIDNEY_HANDLING, "check label and portion", Flag.OK, "label"
            )
            if remote
            else _metric(
                MetricLabel.KIDNEY_HANDLING,
                "generally acceptable in small portions",
                Flag.OK,
                "general",
            )
        ),
    }
    ordered = tuple(metrics[label] for label in METRIC_ORDER)

    return FoodPanel(
        food_name=base.name,
        serving_size=format_portion(REFERENCE_PORTION_G),
        data_source=source_tag,
        overall_flag=worst_of(metric.flag for metric in ordered),
        metrics=ordered,
        source_confidence=confidence,
        portion_grams=REFERENCE_PORTION_G,
        locale=locale,
        notes=base.notes,
        typical_serving_size_grams=base.typical_serving_g,
        safer_ways_keys=_safer_ways(metrics),
    )


def format_amount(amount: float, decimals: int = 0) -> str:
    """Render an amount rounded half-up, without trailing zeros."""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(repr(float(amount))).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == rounded.to_integral_value():
        return str(int(rounded))
    return f"{rounded:f}"


def explanation_key(label: MetricLabel, variant: str) -> str:
    """Return the explanation key for a metric in a given state."""
    return f"{EXPLANATION_KEYS[label]}.{variant}"


def _metric(label: MetricLabel, value: str, flag: Flag, variant: str) -> Metric:
    return Metric(
        label=label,
        value=value,
        flag=flag,
        explanation_key=explanation_key(label, variant),
    )


def _mineral(label: MetricLabel, amount_mg: float) -> Metric:
    if not math.isfinite(amount_mg):
        return _metric(label, NOT_AVAILABLE, Flag.CAUTION, "unavailable")
    return mineral_metric(label, amount_mg)


def mineral_metric(label: MetricLabel, amount_mg: float) -> Metric:
    """Whole-milligram mineral value flagged by its threshold.

    The flag is taken from the displayed, rounded value so that equal text
    always carries an equal flag, whether built or scaled.
    """
    value = format_amount(amount_mg)
    flag = threshold_flag(label, float(value))
    return _metric(label, value, flag, flag.value.lower())


def _phosphorus_protein_ratio(base: NutrientBase) -> Metric:
    label = MetricLabel.PHOSPHORUS_PROTEIN_RATIO
    if not base.protein_g > 0:
        return _metric(label, NOT_AVAILABLE, Flag.CAUTION, "unavailable")
    raw_ratio = base.phosphorus_mg / base.protein_g
    if not math.isfinite(raw_ratio):
        return _metric(label, NOT_AVAILABLE, Flag.CAUTION, "unavailable")
    ratio = float(format_amount(raw_ratio, decimals=1))
    flag = Flag.CAUTION if ratio > PHOSPHORUS_PROTEIN_RATIO_CAUTION else Flag.OK
    return _metric(label, f"{ratio:.1f}", flag, flag.value.lower())


def _nitrogen_burden(protein_g: float) -> Metric:
    if not math.isfinite(protein_g):
        return _metric(
            MetricLabel.NITROGEN_BURDEN, NOT_AVAILABLE, Flag.CAUTION, "unavailable"
        )
    flag = Flag.CAUTION if protein_g > NITROGEN_BURDEN_CAUTION_G else Flag.OK
    return _metric(
        MetricLabel.NITROGEN_BURDEN,
        format_amount(protein_g, decimals=1),
        flag,
        flag.value.lower(),
    )


def _safer_ways(metrics: Mapping[MetricLabel, Metric]) -> tuple[str, ...]:
    """Tip keys for the presentation layer, most general first."""
    tips = [TIP_PORTION_CONTROL]
    if metrics[MetricLabel.POTASSIUM].flag != Flag.OK:
        tips.extend([TIP_MIX_LOW_POTASSIUM, TIP_AVOID_STACKING_POTASSIUM])
    if metrics[MetricLabel.PHOSPHORUS].flag != Flag.OK:
        tips.append(TIP_PHOSPHORUS_PORTION)
    if metrics[MetricLabel.SODIUM].flag != Flag.OK:
        tips.append(TIP_SODIUM_SEASONING)
    if metrics[MetricLabel.PROCESSING_LEVEL].flag != Flag.OK:
        tips.append(TIP_PHOSPHATE_ADDITIVES)
    return tuple(tips)
