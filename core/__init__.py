"""
Video Job Client Core Components

Provides foundational infrastructure for the client:
- Environment-driven configuration
- Persistent key-value storage for client-side state
- Logging setup
"""

from .config import Config, get_config
from .storage import KeyValueStore

__all__ = ["Config", "get_config", "KeyValueStore"]
