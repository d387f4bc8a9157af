"""
Connectors retrieve raw secret values from external sources.
"""

from .base import BaseConnector
from .memory import InMemoryConnector
from .env import EnvConnector
from .file import FileConnector
from .google import GoogleSecretManagerConnector

__all__ = [
    'BaseConnector',
    'InMemoryConnector',
    'EnvConnector',
    'FileConnector',
    'GoogleSecretManagerConnector',
]
