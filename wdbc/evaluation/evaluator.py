"""Model evaluation on the test side of a partition."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import numpy as np
from loguru import logger

from ..data.dataset import Dataset, Diagnosis
from ..metrics import ConfusionMatrix, MetricsReport, MetricsWrapper, is_undefined
from ..models.base import TrainedModel


@dataclass(eq=False)
class EvaluationResult:
    """Predictions, confusion matrix and metrics of one model on one dataset."""
    model_name: str
    threshold: float
    probabilities: np.ndarray
    predictions: np.ndarray
    actual: np.ndarray
    confusion: ConfusionMatrix
    metrics: MetricsReport
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_samples(self) -> int:
        return len(self.actual)


class Evaluator:
    """
    Scores a trained model.

    The positive class defaults to malignant. A record is predicted positive
    when the model's probability for the positive class is strictly greater
    than ``threshold``.
    """

    def __init__(self, threshold: float = 0.5,
                 positive_label: Union[Diagnosis, str] = Diagnosis.MALIGNANT):
        if not 0.0 <= float(threshold) <= 1.0:
            raise ValueError(f"Decision threshold must be in [0, 1], got {threshold}")
        self.threshold = float(threshold)
        self.positive_label = Diagnosis(positive_label)

    def evaluate(self, model: TrainedModel, test: Dataset,
                 model_name: Optional[str] = None) -> EvaluationResult:
        """
        Predict every test record and derive the confusion matrix and metrics.

        Args:
            model: Fitted model
            test: Preprocessed test dataset (labels must be diagnoses)
            model_name: Label used in reports (defaults to the model class name)

        Returns:
            EvaluationResult; metrics with a zero denominator are UNDEFINED
        """
        name = model_name or model.model_name
        y_true = test.y
        malignant_proba = np.asarray(model.predict_proba(test.X), dtype=float)

        if self.positive_label is Diagnosis.MALIGNANT:
            positive_proba = malignant_proba
            y_pred = (positive_proba > self.threshold).astype(int)
        else:
            positive_proba = 1.0 - malignant_proba
            y_pred = (positive_proba <= self.threshold).astype(int)

        confusion = ConfusionMatrix.from_predictions(y_true, y_pred, positive_label=self.positive_label)
        metrics = confusion.metrics()

        # Library-computed extras, in terms of the positive class
        y_true_pos = (y_true == self.positive_label.code).astype(int)
        y_pred_pos = (y_pred == self.positive_label.code).astype(int)
        extras = {
            'f1': MetricsWrapper.get_eval_metrics('f1', y_true=y_true_pos, y_pred=y_pred_pos),
            'roc_auc': MetricsWrapper.get_eval_metrics('auc', y_true=y_true_pos, y_pred=positive_proba),
        }

        result = EvaluationResult(
            model_name=name,
            threshold=self.threshold,
            probabilities=malignant_proba,
            predictions=y_pred,
            actual=y_true,
            confusion=confusion,
            metrics=metrics,
            extras=extras,
        )
        self._log_result(result)
        return result

    @staticmethod
    def _log_result(result: EvaluationResult) -> None:
        accuracy = result.metrics.accuracy
        kappa = result.metrics.kappa
        logger.info(
            f"{result.model_name}: {result.n_samples} test records | "
            f"accuracy {'undefined' if is_undefined(accuracy) else f'{accuracy:.4f}'} | "
            f"kappa {'undefined' if is_undefined(kappa) else f'{kappa:.4f}'}"
        )
        logger.debug(f"{result.model_name} confusion matrix (rows=actual, cols=predicted): "
                     f"{result.confusion.to_list()}")
