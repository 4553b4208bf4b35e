"""Profile management."""
from multicommitter.config.loader import ProfileStore, find_profile
from multicommitter.models.config import ConfigValidationError

__all__ = ['ProfileStore', 'find_profile', 'ConfigValidationError']
