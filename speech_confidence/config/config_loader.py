"""Configuration loader for the speech confidence engine"""

import copy
import math
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
import os


DEFAULTS: Dict[str, Any] = {
    'decoder': {
        'min_samples': 1000,
    },
    'pitch': {
        'frame_length': 4096,
        'hop_length': 2048,
        'pre_emphasis': 0.97,
        'voicing_threshold': 0.01,
        'min_hz': 50.0,
        'max_hz': 400.0,
        'octave_tolerance': 0.9,
    },
    'consistency': {
        'frame_length': 4096,
        'hop_length': 2048,
        'scale': 5.0,
        'neutral': 0.5,
    },
    'fallback': {
        'volume': 0.5,
        'pitch_variance': 50.0,
        'energy': 0.5,
        'consistency': 0.5,
        'average_pitch': 150.0,
        'pitch_range': 100.0,
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Configuration manager for the speech confidence engine

    Values come from the built-in DEFAULTS, overridden by a YAML file when
    one is found. An explicitly requested file must exist.
    """

    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            env = os.getenv('SPEECH_CONFIDENCE_ENV', 'development')
            # Try environment-specific config first, fall back to default
            env_config = Path(f"config/config.{env}.yaml")
            if env_config.exists():
                self.config_path = env_config
            else:
                self.config_path = Path("config/config.yaml")
            required = False
        else:
            self.config_path = Path(config_path)
            required = True

        self._config = self._load_config(required)

    def _load_config(self, required: bool) -> Dict[str, Any]:
        """Load configuration from YAML file on top of the defaults"""
        if not self.config_path.exists():
            if required:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")
            return copy.deepcopy(DEFAULTS)

        with open(self.config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file must contain a mapping: {self.config_path}")
        return _merge(DEFAULTS, loaded)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., 'pitch.frame_length')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access"""
        return self.get(key)

    def validate(self) -> None:
        """Validate configuration values"""
        for section in ('pitch', 'consistency'):
            frame_length = self.get(f'{section}.frame_length')
            hop_length = self.get(f'{section}.hop_length')
            if frame_length is None or frame_length < 2:
                raise ValueError(f"Invalid {section}.frame_length: {frame_length}")
            if hop_length is None or hop_length < 1:
                raise ValueError(f"Invalid {section}.hop_length: {hop_length}")

        min_hz = self.get('pitch.min_hz')
        max_hz = self.get('pitch.max_hz')
        if not 0 < min_hz < max_hz:
            raise ValueError(f"Invalid pitch bounds: [{min_hz}, {max_hz}]")

        tolerance = self.get('pitch.octave_tolerance')
        if not 0 < tolerance <= 1:
            raise ValueError(f"Invalid octave_tolerance: {tolerance}, must be in (0, 1]")

        min_samples = self.get('decoder.min_samples')
        if min_samples is None or min_samples < 1:
            raise ValueError(f"Invalid decoder.min_samples: {min_samples}")

        fallback = self.get('fallback', {})
        if not isinstance(fallback, dict):
            raise ValueError(f"Invalid fallback section: {fallback!r}")
        for key, value in fallback.items():
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"Invalid fallback.{key}: {value!r}")
        consistency = fallback.get('consistency', 0.5)
        if not 0 <= consistency <= 1:
            raise ValueError(f"Invalid fallback.consistency: {consistency}, must be in [0, 1]")


# Global config instance
config = Config()
