"""Classification metrics."""

from .report import MetricsReport, UNDEFINED, UndefinedMetric, cohen_kappa, is_undefined
from .confusion import ConfusionMatrix
from .metrics_wrapper import MetricsWrapper

__all__ = [
    'ConfusionMatrix',
    'MetricsReport',
    'MetricsWrapper',
    'UNDEFINED',
    'UndefinedMetric',
    'cohen_kappa',
    'is_undefined',
]
