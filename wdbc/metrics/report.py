"""Scalar metrics derived from a confusion matrix."""

from dataclasses import dataclass, fields
from typing import Dict, Optional, Union


class UndefinedMetric:
    """Marker for a metric whose denominator is zero.

    Not an error: a small or degenerate test partition can leave a row or
    column of the confusion matrix empty, and the metric is reported as
    undefined instead of aborting the run.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'undefined'

    __str__ = __repr__

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (UndefinedMetric, ())


UNDEFINED = UndefinedMetric()

MetricValue = Union[float, UndefinedMetric]


def ratio(numerator: float, denominator: float) -> MetricValue:
    """``numerator / denominator`` or ``UNDEFINED`` when the denominator is zero."""
    if denominator == 0:
        return UNDEFINED
    return numerator / denominator


def is_undefined(value) -> bool:
    return value is UNDEFINED


@dataclass(frozen=True)
class MetricsReport:
    """Metrics of one confusion matrix, for the designated positive class."""
    accuracy: MetricValue
    sensitivity: MetricValue
    specificity: MetricValue
    positive_predictive_value: MetricValue
    negative_predictive_value: MetricValue
    kappa: MetricValue
    balanced_accuracy: MetricValue

    @classmethod
    def from_counts(cls, tp: int, fn: int, fp: int, tn: int) -> 'MetricsReport':
        total = tp + fn + fp + tn
        sensitivity = ratio(tp, tp + fn)
        specificity = ratio(tn, tn + fp)

        if is_undefined(sensitivity) or is_undefined(specificity):
            balanced = UNDEFINED
        else:
            balanced = (sensitivity + specificity) / 2

        return cls(
            accuracy=ratio(tp + tn, total),
            sensitivity=sensitivity,
            specificity=specificity,
            positive_predictive_value=ratio(tp, tp + fp),
            negative_predictive_value=ratio(tn, tn + fn),
            kappa=cohen_kappa(tp, fn, fp, tn),
            balanced_accuracy=balanced,
        )

    def to_dict(self, undefined: Optional[object] = UNDEFINED) -> Dict[str, object]:
        """Field name to value; ``undefined`` replaces the marker (e.g. None for JSON)."""
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = undefined if is_undefined(value) else value
        return out


def cohen_kappa(tp: int, fn: int, fp: int, tn: int) -> MetricValue:
    """Chance-corrected agreement computed from the matrix marginals."""
    total = tp + fn + fp + tn
    if total == 0:
        return UNDEFINED

    observed = (tp + tn) / total
    predicted_pos, predicted_neg = tp + fp, fn + tn
    actual_pos, actual_neg = tp + fn, fp + tn
    expected = (predicted_pos * actual_pos + predicted_neg * actual_neg) / total ** 2
    return ratio(observed - expected, 1 - expected)
