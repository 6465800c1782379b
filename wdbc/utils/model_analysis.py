"""
Model Analysis Utilities
========================

Provides parameter counting for fitted models.

"""

from typing import Any


class ModelAnalyzer:
    """Analyze model complexity and parameters."""

    @staticmethod
    def count_parameters(model: Any) -> int:
        """
        Count total parameters in any model type.

        PyTorch modules count weights and biases; tree ensembles count tree
        nodes. Wrappers exposing a ``model`` attribute are unwrapped.

        Args:
            model: The model to analyze

        Returns:
            Total number of parameters, 0 if unknown
        """
        if hasattr(model, 'parameters') and callable(model.parameters):
            return ModelAnalyzer._count_pytorch_parameters(model)

        if hasattr(model, 'estimators_'):
            return ModelAnalyzer._count_sklearn_tree_nodes(model)

        if hasattr(model, 'model'):
            return ModelAnalyzer.count_parameters(model.model)

        return 0

    @staticmethod
    def _count_pytorch_parameters(model: Any) -> int:
        return int(sum(p.numel() for p in model.parameters()))

    @staticmethod
    def _count_sklearn_tree_nodes(model: Any) -> int:
        return int(sum(est.tree_.node_count for est in model.estimators_ if hasattr(est, 'tree_')))
