"""Repository package: expose all concrete repositories from one import."""
from .base import BaseRepository
from .payload_repository import DEFAULT_FILE_NAME, PayloadRepository

__all__ = [
    'BaseRepository',
    'DEFAULT_FILE_NAME',
    'PayloadRepository',
]
