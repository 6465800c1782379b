"""Models module.

This module provides the two classifiers of the pipeline:
- Feed-forward neural network (PyTorch based)
- Random forest (scikit-learn based)

Importing it registers both trainers with ``ModelFactory``.
"""

# Base classes and factories
from .base import (
    ModelFactory,
    ModelTrainer,
    OptimizerFactory,
    EarlyStopping,
    Prediction,
    TrainedModel,
    safe_int,
    safe_float,
)

# Neural network
from .neural import (
    FeedForwardNet,
    NeuralNetworkModel,
    NeuralNetworkTrainer,
)

# Ensemble
from .forest import (
    RandomForestModel,
    RandomForestTrainer,
)

# Public API
__all__ = [
    # Base classes
    'ModelTrainer',
    'TrainedModel',
    'Prediction',

    # Factories
    'ModelFactory',
    'OptimizerFactory',

    # Utilities
    'EarlyStopping',
    'safe_int',
    'safe_float',

    # Neural network
    'FeedForwardNet',
    'NeuralNetworkModel',
    'NeuralNetworkTrainer',

    # Ensemble
    'RandomForestModel',
    'RandomForestTrainer',
]
