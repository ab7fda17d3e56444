"""
Configuration loader for the repeat HMM pipeline.
"""

import copy
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"


class ConfigLoader:
    """Loads and manages configuration from YAML files."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = str(config_path) if config_path else str(DEFAULT_CONFIG_PATH)
        self.config = {}
        self.load_config()

    def load_config(self):
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning(f"Config file {self.config_path} not found. Using defaults.")
            self.config = self._get_default_config()
        except yaml.YAMLError as e:
            logger.warning(f"Error loading config file: {e}. Using defaults.")
            self.config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Return default configuration if YAML file is not found."""
        return {
            'model': {
                'delta': 0.001,
                'epsilon': 0.05,
                'tau': 0.01,
                'eta': 0.01,
                'close_insertions': False
            },
            'alignment': {
                'motif': None,
                'max_read_length': 256
            },
            'io': {
                'reads_file': None,
                'reads_format': 'fastq',
                'output_dir': 'results',
                'logs_dir': 'logs'
            },
            'debug': {
                'log_level': 'INFO',
                'verbose': False,
                'dump_matrices': False
            },
            'performance': {
                'monitor': True,
                'sampling_interval': 0.5
            },
            'validation': {
                'validate_inputs': True,
                'max_invalid_fraction': 0.1
            }
        }

    def get_model_params(self) -> Dict[str, Any]:
        """Get transition model priors."""
        return self.config.get('model', {})

    def get_alignment_params(self) -> Dict[str, Any]:
        """Get alignment parameters."""
        return self.config.get('alignment', {})

    def get_io_params(self) -> Dict[str, Any]:
        """Get input/output parameters."""
        return self.config.get('io', {})

    def get_debug_params(self) -> Dict[str, Any]:
        """Get debug parameters."""
        return self.config.get('debug', {})

    def get_performance_params(self) -> Dict[str, Any]:
        """Get performance parameters."""
        return self.config.get('performance', {})

    def get_validation_params(self) -> Dict[str, Any]:
        """Get validation parameters."""
        return self.config.get('validation', {})

    def as_dict(self) -> Dict[str, Any]:
        """Defaults overlaid with the loaded file, section by section."""
        merged = self._get_default_config()
        return merge_config(merged, self.config)


def merge_config(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge ``overrides`` into a copy of ``base``.

    Dict sections are updated key by key; anything else replaces the value.
    """
    result = copy.deepcopy(base)
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and isinstance(result.get(section), dict):
            result[section].update(values)
        else:
            result[section] = values
    return result


def get_default_config() -> Dict[str, Any]:
    """Defaults from the packaged YAML file."""
    return ConfigLoader().as_dict()
