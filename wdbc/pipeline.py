"""Pipeline orchestrator: load, preprocess, split, train, evaluate, report."""

import random
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Tuple

import numpy as np
import torch
from loguru import logger

from .data import DataLoader, DataPreprocessor, Partition, StratifiedSplitter, WDBC_URL
from .data.dataset import Dataset
from .evaluation import EvaluationResult, Evaluator
from .exceptions import PipelineError
from .models import ModelFactory
from .models.base import TrainedModel
from .report import ComparisonReport
from .utils import Config, ModelAnalyzer


class ClassificationPipeline:
    """Runs every stage in order and returns a ComparisonReport.

    Normalization statistics are fitted on the training partition only and
    applied unchanged to the test partition.
    """

    def __init__(self, config: Optional[Config] = None, loader: Optional[DataLoader] = None):
        self.config = config or Config()
        self.loader = loader or DataLoader()

        data_config = self.config.get_data_config()
        self.random_seed = int(data_config.get('random_state', 42))
        self.trained_models: Dict[str, TrainedModel] = {}
        self.results: Dict[str, EvaluationResult] = {}

    def _set_random_seeds(self):
        """Set random seeds for reproducibility."""
        random.seed(self.random_seed)
        np.random.seed(self.random_seed)
        torch.manual_seed(self.random_seed)

    def run(self, dataset: Optional[Dataset] = None) -> ComparisonReport:
        """
        Execute the complete pipeline.

        Args:
            dataset: Already loaded dataset; read from ``data.source`` if omitted

        Raises:
            PipelineError: Any stage failure, with ``stage`` naming the stage
        """
        logger.info("=" * 60)
        logger.info("WDBC CLASSIFICATION PIPELINE")
        logger.info("=" * 60)
        logger.info(f"Random seed: {self.random_seed}")

        try:
            self.validate_config()
            if dataset is None:
                dataset = self.load()
            partition = self.prepare(dataset)
            self.train_and_evaluate(partition)
        except PipelineError as e:
            logger.error(f"Pipeline aborted at stage '{e.stage}': {e.message}")
            raise

        return self.build_report(partition)

    def validate_config(self) -> None:
        """Reject unknown model names and evaluation settings before any data is read."""
        unknown = [name for name in self.config.enabled_models() if name not in ModelFactory.list_models()]
        if unknown:
            raise PipelineError(
                f"Unknown models {unknown}. Available: {ModelFactory.list_models()}", stage='trainer'
            )
        self.build_evaluator()

    def build_evaluator(self) -> Evaluator:
        eval_config = self.config.get_evaluation_config()
        try:
            return Evaluator(
                threshold=eval_config.get('threshold', 0.5),
                positive_label=eval_config.get('positive_label', 'malignant'),
            )
        except (TypeError, ValueError) as e:
            raise PipelineError(f"Invalid evaluation settings: {e}", stage='evaluator') from e

    def load(self) -> Dataset:
        source = self.config.get_data_config().get('source') or WDBC_URL
        logger.info(f"Loading data from {source}")
        return self.loader.load(source)

    def prepare(self, dataset: Dataset) -> Partition:
        """Preprocess, split, and normalize with train-only statistics."""
        data_config = self.config.get_data_config()
        preprocessor = DataPreprocessor(data_config)
        prepared = preprocessor.prepare(dataset)

        splitter = StratifiedSplitter(
            train_fraction=data_config.get('train_fraction', 0.7),
            random_state=self.random_seed,
        )
        partition = splitter.split(prepared)

        preprocessor.fit(partition.train)
        return Partition(
            train=preprocessor.transform(partition.train),
            test=preprocessor.transform(partition.test),
            train_positions=partition.train_positions,
            test_positions=partition.test_positions,
        )

    def train_and_evaluate(self, partition: Partition) -> Dict[str, EvaluationResult]:
        """Train all enabled models; optionally one thread per model."""
        enabled = self.config.enabled_models()
        if not enabled:
            raise PipelineError("No models enabled in config", stage='trainer')

        logger.info(f"Training {len(enabled)} models: {', '.join(enabled)}")
        parallel = bool(self.config.get_training_config().get('parallel', False))

        if parallel and len(enabled) > 1:
            with ThreadPoolExecutor(max_workers=len(enabled)) as executor:
                futures = {
                    name: executor.submit(self._train_single_model, name, cfg, partition)
                    for name, cfg in enabled.items()
                }
                outcomes = {name: future.result() for name, future in futures.items()}
        else:
            outcomes = {}
            for idx, (name, cfg) in enumerate(enabled.items(), 1):
                logger.info(f"[{idx}/{len(enabled)}] Training {name}...")
                self._set_random_seeds()
                outcomes[name] = self._train_single_model(name, cfg, partition)

        for name, (model, result) in outcomes.items():
            self.trained_models[name] = model
            self.results[name] = result
        return self.results

    def _train_single_model(self, model_name: str, config: Dict[str, Any],
                            partition: Partition) -> Tuple[TrainedModel, EvaluationResult]:
        """Train a single model and evaluate it on the test side."""
        config = dict(config)
        config.setdefault('random_state', self.random_seed)

        start_time = time.time()
        trainer = ModelFactory.create_trainer(model_name, config=config)
        try:
            model = trainer.fit(partition.train)
        except ValueError as e:
            raise PipelineError(f"Invalid hyperparameters for {model_name}: {e}", stage='trainer') from e
        training_time = time.time() - start_time

        result = self.build_evaluator().evaluate(model, partition.test, model_name=model_name)
        result.extras['training_time'] = round(training_time, 3)
        result.extras['total_parameters'] = ModelAnalyzer.count_parameters(model)

        logger.info(f"  Complete - {model_name}: training time {training_time:.2f}s, "
                    f"parameters {result.extras['total_parameters']:,}")
        return model, result

    def build_report(self, partition: Partition) -> ComparisonReport:
        data_config = self.config.get_data_config()
        metadata = {
            'source': data_config.get('source') or WDBC_URL,
            'train_fraction': data_config.get('train_fraction', 0.7),
            'random_state': self.random_seed,
            'train_size': len(partition.train),
            'test_size': len(partition.test),
        }
        return ComparisonReport.from_results(self.results, metadata=metadata)
