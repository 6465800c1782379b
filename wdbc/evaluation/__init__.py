"""Evaluation of trained models."""

from .evaluator import EvaluationResult, Evaluator

__all__ = ['EvaluationResult', 'Evaluator']
