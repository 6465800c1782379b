"""Utility modules."""

from .model_analysis import ModelAnalyzer
from .config import Config

__all__ = ['ModelAnalyzer', 'Config']
