"""Tests for flag ordering, worst-of reduction and thresholds."""

import itertools

import pytest

from ckd_food_panel.domain.flags import Flag, worst_of
from ckd_food_panel.domain.metrics import (
    METRIC_ORDER,
    MetricLabel,
    require_all_labels,
    threshold_flag,
    validate_label_order,
)


def test_flags_are_totally_ordered() -> None:
    assert Flag.OK < Flag.CAUTION < Flag.LIMIT
    assert max([Flag.CAUTION, Flag.LIMIT, Flag.OK]) is Flag.LIMIT
    assert sorted([Flag.LIMIT, Flag.OK, Flag.CAUTION]) == [
        Flag.OK,
        Flag.CAUTION,
        Flag.LIMIT,
    ]


def test_worst_of_over_all_short_sequences() -> None:
    for length in range(1, 4):
        for flags in itertools.product(list(Flag), repeat=length):
            result = worst_of(flags)
            assert (result is Flag.LIMIT) == (Flag.LIMIT in flags)
            assert (result is Flag.OK) == all(flag is Flag.OK for flag in flags)
            assert result == max(flags)


def test_worst_of_is_order_independent() -> None:
    flags = [Flag.OK, Flag.CAUTION, Flag.OK]
    assert worst_of(flags) == worst_of(reversed(flags)) == Flag.CAUTION


def test_worst_of_rejects_empty_sequence() -> None:
    with pytest.raises(ValueError):
        worst_of([])


@pytest.mark.parametrize(
    ("label", "amount", "expected"),
    [
        (MetricLabel.PHOSPHORUS, 0, Flag.OK),
        (MetricLabel.PHOSPHORUS, 149.9, Flag.OK),
        (MetricLabel.PHOSPHORUS, 150, Flag.CAUTION),
        (MetricLabel.PHOSPHORUS, 249, Flag.CAUTION),
        (MetricLabel.PHOSPHORUS, 250, Flag.LIMIT),
        (MetricLabel.POTASSIUM, 249, Flag.OK),
        (MetricLabel.POTASSIUM, 250, Flag.CAUTION),
        (MetricLabel.POTASSIUM, 500, Flag.CAUTION),
        (MetricLabel.POTASSIUM, 600, Flag.LIMIT),
        (MetricLabel.SODIUM, 199, Flag.OK),
        (MetricLabel.SODIUM, 200, Flag.CAUTION),
        (MetricLabel.SODIUM, 400, Flag.LIMIT),
    ],
)
def test_threshold_flag_is_inclusive(
    label: MetricLabel, amount: float, expected: Flag
) -> None:
    assert threshold_flag(label, amount) is expected


def test_threshold_flag_defaults_to_ok_for_other_metrics() -> None:
    assert threshold_flag(MetricLabel.PHOSPHORUS_PROTEIN_RATIO, 10_000) is Flag.OK
    assert threshold_flag(MetricLabel.PURINE, 10_000) is Flag.OK


def test_require_all_labels_reports_missing_entries() -> None:
    partial = {label: "x" for label in METRIC_ORDER if label is not MetricLabel.OXALATE}

    with pytest.raises(ValueError, match="Oxalate content"):
        require_all_labels(partial, "partial")


def test_validate_label_order_rejects_swaps() -> None:
    labels = list(METRIC_ORDER)
    labels[0], labels[1] = labels[1], labels[0]

    with pytest.raises(ValueError):
        validate_label_order(tuple(labels))
    with pytest.raises(ValueError):
        validate_label_order(METRIC_ORDER[:-1])
    validate_label_order(METRIC_ORDER)
