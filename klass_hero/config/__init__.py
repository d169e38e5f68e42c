"""
Configuration package for the Klass Hero enrollment service.
"""

from klass_hero.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
