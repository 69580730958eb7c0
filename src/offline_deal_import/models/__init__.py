"""Data models for the offline deal import workflow."""

from .deal import Checkpoint, DealRecord, DealRejection

__all__ = [
    'Checkpoint',
    'DealRecord',
    'DealRejection',
]
