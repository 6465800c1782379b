"""Configuration management for the classification pipeline."""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULTS: Dict[str, Any] = {
    'data': {
        'source': None,
        'train_fraction': 0.7,
        'random_state': 42,
        'label_map': {'B': 'benign', 'M': 'malignant'},
    },
    'models': {
        'neural_network': {'enabled': True},
        'random_forest': {'enabled': True},
    },
    'training': {
        'parallel': False,
    },
    'evaluation': {
        'threshold': 0.5,
        'positive_label': 'malignant',
    },
    'output': {
        'output_dir': None,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class Config:
    """
    YAML configuration with defaults for every section.

    Sections: ``data``, ``models``, ``training``, ``evaluation``, ``output``.
    Keys missing from the file fall back to ``DEFAULTS``.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Load configuration from a YAML file, or defaults only if no path is given."""
        self.config_path = Path(config_path) if config_path else None
        loaded = {}
        if self.config_path is not None:
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
        self.config = _merge(DEFAULTS, loaded)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'Config':
        instance = cls()
        instance.config = _merge(DEFAULTS, config)
        return instance

    def override(self, section: str, **values) -> 'Config':
        """Set keys of ``section``, skipping ``None`` values (unset CLI flags)."""
        for key, value in values.items():
            if value is not None:
                self.config.setdefault(section, {})[key] = value
        return self

    def get_model_config(self, model_name: str) -> Dict[str, Any]:
        """
        Get hyperparameters for one model.

        Raises:
            ValueError: If model not found
        """
        models = self.config.get('models', {})
        if model_name not in models:
            raise ValueError(f"Model '{model_name}' not found")
        config = copy.deepcopy(models[model_name] or {})
        config.pop('enabled', None)
        return config

    def enabled_models(self) -> Dict[str, Dict[str, Any]]:
        """Hyperparameters of every model whose ``enabled`` flag is set, in file order."""
        return {
            name: self.get_model_config(name)
            for name, cfg in self.config.get('models', {}).items()
            if (cfg or {}).get('enabled', False)
        }

    def get_data_config(self) -> Dict[str, Any]:
        return self.config.get('data', {})

    def get_training_config(self) -> Dict[str, Any]:
        return self.config.get('training', {})

    def get_evaluation_config(self) -> Dict[str, Any]:
        return self.config.get('evaluation', {})

    def get_output_config(self) -> Dict[str, Any]:
        return self.config.get('output', {})

    def __getitem__(self, key: str) -> Any:
        return self.config[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)
