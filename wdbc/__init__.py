"""Breast cancer (WDBC) classification pipeline."""

from .data import DataLoader, DataPreprocessor, StratifiedSplitter
from .models import ModelFactory
from .evaluation import Evaluator
from .report import ComparisonReport
from .pipeline import ClassificationPipeline
from .utils import Config


__all__ = [
    'DataLoader',
    'DataPreprocessor',
    'StratifiedSplitter',
    'ModelFactory',
    'Evaluator',
    'ComparisonReport',
    'ClassificationPipeline',
    'Config',
]
