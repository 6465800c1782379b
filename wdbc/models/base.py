"""Base model interface and factory classes.

This module provides the foundation for the classifiers in the pipeline.
It includes the trainer/trained-model abstractions, a factory for creating
trainers by name, and the pieces shared by PyTorch training loops.

Key Components:
    - TrainedModel: Fitted classifier handle consumed by the evaluator
    - ModelTrainer: Abstract trainer producing TrainedModel instances
    - ModelFactory: Factory for trainer creation and registration
    - OptimizerFactory: Factory for creating optimizers
    - EarlyStopping: Convergence monitor for training loops
"""

from abc import ABC, abstractmethod
import copy
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import numpy as np
import torch.nn as nn
import torch.optim as optim
from loguru import logger

from ..data.dataset import Dataset, Diagnosis, Record
from ..data.preprocessor import check_classes


def safe_int(value: Any, default: int) -> int:
    """
    Safely convert value to integer.

    Handles strings with scientific notation, floats, and None values.
    Returns default if conversion fails.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Converted integer value or default
    """
    if value is None:
        return default
    try:
        return int(float(str(value)))
    except (TypeError, ValueError):
        return default


def safe_float(value: Any, default: float) -> float:
    """
    Safely convert value to float.

    Handles strings with scientific notation (YAML reads ``1e-4`` as a
    string), integers, and None values. Returns default if conversion fails.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Converted float value or default
    """
    if value is None:
        return default
    try:
        return float(str(value))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Prediction:
    """Predicted label and malignancy probability for one record."""
    label: Diagnosis
    probability: float


class TrainedModel(ABC):
    """
    Fitted classifier handle.

    Attributes:
        model: The underlying fitted model implementation
        config: Hyperparameters the model was trained with
        model_name: Name of the model class
    """

    def __init__(self, model: Any, config: Optional[Dict[str, Any]] = None):
        self.model = model
        self.config = config or {}
        self.model_name = self.__class__.__name__

    @abstractmethod
    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """
        Probability of the malignant class for each row.

        Args:
            X: Features of shape (n_samples, n_features)

        Returns:
            Probabilities of shape (n_samples,)
        """

    def predict(self, X: np.ndarray, threshold: float = 0.5) -> np.ndarray:
        """Integer labels (malignant = 1) using ``probability > threshold``."""
        return (self.predict_proba(X) > threshold).astype(int)

    def predict_record(self, record: Record, threshold: float = 0.5) -> Prediction:
        """Predict a single record."""
        probability = float(self.predict_proba(record.as_array())[0])
        label = Diagnosis.MALIGNANT if probability > threshold else Diagnosis.BENIGN
        return Prediction(label=label, probability=probability)


class ModelTrainer(ABC):
    """
    Abstract trainer. Subclasses fit one kind of classifier.

    Attributes:
        config: Default hyperparameters, overridden per call to ``fit``
    """

    defaults: Dict[str, Any] = {}

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = {**self.defaults, **(config or {})}
        self.trainer_name = self.__class__.__name__

    def fit(self, train: Dataset, hyperparameters: Optional[Dict[str, Any]] = None) -> TrainedModel:
        """
        Fit a classifier on the training side of a partition.

        Args:
            train: Preprocessed training dataset
            hyperparameters: Per-call overrides of the trainer's config

        Returns:
            Fitted model

        Raises:
            InsufficientClasses: If the training data holds a single label
        """
        check_classes(train.labels, stage='trainer')
        params = {**self.config, **(hyperparameters or {})}
        return self._fit(train.X, train.y, params)

    @abstractmethod
    def _fit(self, X: np.ndarray, y: np.ndarray, params: Dict[str, Any]) -> TrainedModel:
        """Fit on encoded arrays (malignant = 1)."""


# ============================================================================
# FACTORY CLASSES
# ============================================================================

class ModelFactory:
    """
    Factory class for creating trainers by name.

    Trainers must be registered before they can be created.
    """

    _trainers = {}

    @classmethod
    def register_trainer(cls, name: str, trainer_class: type) -> None:
        cls._trainers[name] = trainer_class

    @classmethod
    def create_trainer(cls, name: str, config: Optional[Dict[str, Any]] = None, **kwargs) -> ModelTrainer:
        """
        Create a trainer instance by name.

        Args:
            name: Registered name of the trainer
            config: Hyperparameter dictionary
            **kwargs: Additional keyword arguments merged into config

        Raises:
            ValueError: If the name is not registered
        """
        if name not in cls._trainers:
            raise ValueError(f"Unknown model: {name}. Available: {cls.list_models()}")

        full_config = {**(config or {}), **kwargs}
        return cls._trainers[name](config=full_config)

    @classmethod
    def list_models(cls) -> list:
        return list(cls._trainers.keys())


class OptimizerFactory:
    """Factory for creating PyTorch optimizers."""

    OPTIMIZERS = {
        'Adam': optim.Adam,
        'AdamW': optim.AdamW,
        'SGD': optim.SGD,
        'RMSprop': optim.RMSprop,
    }

    PARAM_TYPES = {
        **{k: 'float' for k in ['lr', 'weight_decay', 'momentum']},
        **{k: 'bool' for k in ['amsgrad', 'nesterov']},
    }

    @classmethod
    def create_optimizer(cls, optimizer_config: Union[str, Dict[str, Any]],
                         parameters, learning_rate: float = None) -> optim.Optimizer:
        """Create optimizer from a name or a ``{'type': ..., **params}`` dict."""
        name = optimizer_config if isinstance(optimizer_config, str) else optimizer_config.get('type', 'Adam')
        params = {} if isinstance(optimizer_config, str) else {k: v for k, v in optimizer_config.items() if k != 'type'}

        if name not in cls.OPTIMIZERS:
            raise ValueError(f"Unknown optimizer: {name}. Available: {list(cls.OPTIMIZERS)}")

        if learning_rate is not None:
            params['lr'] = learning_rate
        elif 'lr' not in params:
            params['lr'] = 0.001
            logger.warning(f"Learning rate is not found in config, setting to {params['lr']}")

        converted = {}
        for key, value in params.items():
            if value is None:
                continue
            if cls.PARAM_TYPES.get(key, 'float') == 'bool':
                converted[key] = bool(value)
            else:
                converted[key] = safe_float(value, 0.001)

        return cls.OPTIMIZERS[name](parameters, **converted)


# ============================================================================
# EARLY STOPPING
# ============================================================================

class EarlyStopping:
    """
    Stops training once the monitored loss stops improving.

    An epoch counts as an improvement when the loss drops by at least
    ``min_delta`` below the best value seen so far. Training stops after
    ``patience`` consecutive epochs without improvement; the best weights are
    restored when ``restore_best`` is set.
    """

    def __init__(self, patience: int = 10, min_delta: float = 1e-4, restore_best: bool = True):
        self.patience = patience
        self.min_delta = min_delta
        self.restore_best = restore_best

        self.counter = 0
        self.best_model = None
        self.best_value = None
        self.best_epoch = None

    def __call__(self, model: nn.Module, value: float, epoch: int) -> bool:
        """
        Record the loss of ``epoch``.

        Returns:
            True if training should stop, False otherwise
        """
        if self.best_value is None:
            self._save_checkpoint(model, value, epoch)
            return False

        if self.best_value - value >= self.min_delta:
            self.counter = 0
            self._save_checkpoint(model, value, epoch)
            return False

        # Track the best weights even when the gain is below min_delta
        if value < self.best_value:
            self._save_checkpoint(model, value, epoch)

        self.counter += 1
        return self.counter >= self.patience

    def restore(self, model: nn.Module) -> None:
        if self.restore_best and self.best_model is not None:
            model.load_state_dict(self.best_model)
            logger.info(f"Restored best model from epoch {self.best_epoch} "
                        f"(loss: {self.best_value:.6f})")

    def _save_checkpoint(self, model: nn.Module, value: float, epoch: int):
        self.best_value = value
        self.best_epoch = epoch
        self.best_model = copy.deepcopy(model.state_dict())
