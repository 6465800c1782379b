"""Random forest classifier (scikit-learn)."""

from typing import Any, Dict

import numpy as np
from sklearn.ensemble import RandomForestClassifier
from loguru import logger

from .base import ModelFactory, ModelTrainer, TrainedModel, safe_int


class RandomForestModel(TrainedModel):
    """Fitted forest. The probability is the fraction of trees voting malignant."""

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        return self.tree_votes(X).mean(axis=0)

    def tree_votes(self, X: np.ndarray) -> np.ndarray:
        """Malignant votes, shape (n_trees, n_samples), as 0/1."""
        X = np.asarray(X, dtype=float)
        classes = self.model.classes_
        # Trees predict indices into the forest's classes_
        votes = [classes[tree.predict(X).astype(int)] for tree in self.model.estimators_]
        return (np.vstack(votes) == 1).astype(float)


class RandomForestTrainer(ModelTrainer):
    """
    Trains a bagged ensemble of decision trees.

    Each tree sees a bootstrap resample of the training rows and a random
    subset of ``max_features`` features at every split.
    """

    defaults = {
        'n_estimators': 500,
        'max_features': 'sqrt',
        'bootstrap': True,
        'n_jobs': -1,
        'random_state': 42,
    }

    def _fit(self, X: np.ndarray, y: np.ndarray, params: Dict[str, Any]) -> RandomForestModel:
        # Only pass config params the estimator accepts
        accepted = RandomForestClassifier().get_params()
        kwargs = {k: v for k, v in params.items() if k in accepted}
        kwargs['n_estimators'] = safe_int(kwargs.get('n_estimators'), 500)

        forest = RandomForestClassifier(**kwargs)
        forest.fit(X, y)
        logger.info(f"Random forest trained: {forest.n_estimators} trees, max_features={forest.max_features}")
        return RandomForestModel(forest, config=params)


ModelFactory.register_trainer('random_forest', RandomForestTrainer)
