"""Configuration"""

from speech_confidence.config.config_loader import Config, config

__all__ = ['Config', 'config']
