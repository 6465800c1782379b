"""Two-class confusion matrix with a fixed orientation."""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
from sklearn.metrics import confusion_matrix

from ..data.dataset import CLASS_ORDER, Diagnosis
from .report import MetricsReport


@dataclass(frozen=True, eq=False)
class ConfusionMatrix:
    """
    Counts over (benign, malignant).

    Orientation is fixed: rows are the actual class, columns the predicted
    class, both in ``CLASS_ORDER``. ``positive_label`` selects which class the
    TP/FN/FP/TN counts refer to.
    """
    counts: np.ndarray
    positive_label: Diagnosis = Diagnosis.MALIGNANT

    def __post_init__(self):
        counts = np.asarray(self.counts, dtype=int)
        if counts.shape != (2, 2):
            raise ValueError(f"Confusion matrix must be 2x2, got {counts.shape}")
        if (counts < 0).any():
            raise ValueError("Confusion matrix counts must be non-negative")
        object.__setattr__(self, 'counts', counts)

    @classmethod
    def from_predictions(cls, y_true: np.ndarray, y_pred: np.ndarray,
                         positive_label: Diagnosis = Diagnosis.MALIGNANT) -> 'ConfusionMatrix':
        """Build from encoded labels (benign = 0, malignant = 1)."""
        labels = [d.code for d in CLASS_ORDER]
        counts = confusion_matrix(np.asarray(y_true, dtype=int), np.asarray(y_pred, dtype=int), labels=labels)
        return cls(counts=counts, positive_label=positive_label)

    @property
    def _pos(self) -> int:
        return CLASS_ORDER.index(self.positive_label)

    @property
    def _neg(self) -> int:
        return 1 - self._pos

    @property
    def tp(self) -> int:
        return int(self.counts[self._pos, self._pos])

    @property
    def fn(self) -> int:
        return int(self.counts[self._pos, self._neg])

    @property
    def fp(self) -> int:
        return int(self.counts[self._neg, self._pos])

    @property
    def tn(self) -> int:
        return int(self.counts[self._neg, self._neg])

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def metrics(self) -> MetricsReport:
        return MetricsReport.from_counts(tp=self.tp, fn=self.fn, fp=self.fp, tn=self.tn)

    def to_dict(self) -> Dict[str, object]:
        return {
            'orientation': 'rows=actual, columns=predicted',
            'classes': [d.value for d in CLASS_ORDER],
            'positive_label': self.positive_label.value,
            'counts': self.to_list(),
        }

    def to_list(self) -> List[List[int]]:
        return self.counts.tolist()
