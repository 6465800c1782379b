import numpy as np
from typing import Union, List, Dict
from sklearn.metrics import (
    accuracy_score, f1_score, roc_auc_score
)

from .report import UNDEFINED


class MetricsWrapper:
    """
    A metrics wrapper for binary classification evaluation.

    Provides a unified interface over scikit-learn metrics, accepting either
    hard predictions or malignancy probabilities. A metric that scikit-learn
    cannot compute for the given labels (e.g. ROC AUC with a single class in
    ``y_true``) is reported as ``UNDEFINED``.
    """

    METRICS = {
        'accuracy': accuracy_score,
        'f1': lambda y_t, y_p: f1_score(y_t, y_p, pos_label=1, zero_division=0),
        'auc': roc_auc_score,
    }

    PROB_METRICS = {'auc'}

    @staticmethod
    def get_eval_metrics(metrics_names: Union[str, List[str]] = None,
                         y_true=None, y_pred=None, prob_thr: float = 0.5) -> Union[Dict, float, None]:
        """
        Compute scores.

        Args:
            metrics_names: Metric name(s) to compute. If None, computes all metrics.
            y_true: True labels (malignant = 1)
            y_pred: Predictions or probabilities of the malignant class
            prob_thr: Probabilities above this are counted as malignant

        Returns:
            Dict of scores, or a single score if one metric name was given

        Examples:
            >>> MetricsWrapper.get_eval_metrics('accuracy', y_true, y_pred)
            >>> MetricsWrapper.get_eval_metrics(['auc', 'f1'], y_true, y_proba)
        """
        if y_true is None:
            return None

        is_single_metric = isinstance(metrics_names, str)
        names = MetricsWrapper.METRICS.keys() if metrics_names is None else (
            [metrics_names] if is_single_metric else metrics_names)
        for name in names:
            if name not in MetricsWrapper.METRICS:
                raise ValueError(f"Metric '{name}' not found. Available metrics: {list(MetricsWrapper.METRICS.keys())}")

        y_true = np.asarray(y_true).astype(int)
        y_pred = np.asarray(y_pred)
        is_proba = np.issubdtype(y_pred.dtype, np.floating) and not np.all(np.isin(y_pred, [0, 1]))
        y_hard = (y_pred > prob_thr).astype(int) if is_proba else y_pred.astype(int)

        results = {}
        for name in names:
            func = MetricsWrapper.METRICS[name]
            if name in MetricsWrapper.PROB_METRICS:
                if len(np.unique(y_true)) < 2:
                    results[name] = UNDEFINED
                    continue
                results[name] = float(func(y_true, y_pred))
            else:
                results[name] = float(func(y_true, y_hard))

        if is_single_metric:
            return results[metrics_names]

        return results
