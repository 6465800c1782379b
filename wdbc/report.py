"""
Comparison Report
=================

Side-by-side comparison of evaluation results, as a table, a JSON-ready
dictionary or plain text.

"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .data.dataset import CLASS_ORDER
from .evaluation import EvaluationResult
from .metrics import is_undefined

METRIC_LABELS = {
    'accuracy': 'Accuracy',
    'sensitivity': 'Sensitivity',
    'specificity': 'Specificity',
    'positive_predictive_value': 'Pos Pred Value',
    'negative_predictive_value': 'Neg Pred Value',
    'kappa': 'Kappa',
    'balanced_accuracy': 'Balanced Accuracy',
}

EXTRA_LABELS = {
    'f1': 'F1',
    'roc_auc': 'ROC AUC',
    'training_time': 'Training Time (s)',
    'total_parameters': 'Parameters',
}


@dataclass
class ComparisonReport:
    """One EvaluationResult per model, kept in insertion order."""
    results: Dict[str, EvaluationResult]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_results(cls, results: Mapping[str, EvaluationResult],
                     metadata: Optional[Dict[str, Any]] = None) -> 'ComparisonReport':
        return cls(results=dict(results), metadata=dict(metadata or {}))

    @property
    def model_names(self) -> List[str]:
        return list(self.results)

    def to_frame(self) -> pd.DataFrame:
        """Metrics as rows, models as columns. Undefined values are ``None``."""
        columns = {}
        for name, result in self.results.items():
            values = result.metrics.to_dict(undefined=None)
            column = {METRIC_LABELS[k]: values[k] for k in METRIC_LABELS}
            for key, label in EXTRA_LABELS.items():
                if key in result.extras:
                    value = result.extras[key]
                    column[label] = None if is_undefined(value) else value
            columns[name] = column
        return pd.DataFrame(columns, dtype=object)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready structure; undefined metrics become ``None``."""
        models = {}
        for name, result in self.results.items():
            models[name] = {
                'n_samples': result.n_samples,
                'threshold': result.threshold,
                'confusion_matrix': result.confusion.to_dict(),
                'metrics': result.metrics.to_dict(undefined=None),
                'extras': {k: (None if is_undefined(v) else v) for k, v in result.extras.items()},
            }
        return {'metadata': self.metadata, 'models': models}

    def render(self) -> str:
        """Human-readable report."""
        lines = []
        for key, value in self.metadata.items():
            lines.append(f"{key}: {value}")
        if lines:
            lines.append('')

        for name, result in self.results.items():
            lines.append(f"{name}")
            lines.append('-' * len(name))
            lines.append(f"Confusion matrix (rows=actual, columns=predicted, "
                         f"positive={result.confusion.positive_label.value})")
            classes = [d.value for d in CLASS_ORDER]
            matrix = pd.DataFrame(result.confusion.counts,
                                  index=[f"actual {c}" for c in classes],
                                  columns=[f"predicted {c}" for c in classes])
            lines.append(matrix.to_string())
            lines.append('')

        lines.append('Metrics')
        lines.append('-------')
        lines.append(self._format_frame(self.to_frame()).to_string())
        return '\n'.join(lines)

    @staticmethod
    def _format_frame(frame: pd.DataFrame) -> pd.DataFrame:
        def fmt(value):
            if value is None or (isinstance(value, float) and pd.isna(value)):
                return 'undefined'
            if isinstance(value, float):
                return f"{value:.4f}"
            return str(value)
        return frame.astype(object).apply(lambda col: col.map(fmt))

