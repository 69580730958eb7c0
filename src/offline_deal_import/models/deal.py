"""
Deal service models.

Read-only views of what the deal service returns. Field aliases match the
service's JSON field names.
"""

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class Checkpoint(str, Enum):
    """Position of a deal in its lifecycle, in order."""

    ACCEPTED = 'Accepted'
    TRANSFERRED = 'Transferred'
    PUBLISHED = 'Published'
    PUBLISH_CONFIRMED = 'PublishConfirmed'
    ADDED_PIECE = 'AddedPiece'
    INDEXED_AND_ANNOUNCED = 'IndexedAndAnnounced'
    COMPLETE = 'Complete'

    @classmethod
    def from_wire(cls, value: Any) -> 'Checkpoint':
        """Accept the integer position used on the wire, or the name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            raise ValueError(f'unknown checkpoint position {value}')
        return cls(value)


def _unwrap_cid(value: Any) -> Any:
    """CIDs are encoded as {"/": "<cid>"} in service JSON."""
    if isinstance(value, dict):
        return value.get('/')
    return value


class DealRecord(BaseModel):
    """A deal as stored by the deal service."""

    deal_uuid: UUID = Field(..., alias='DealUuid')
    checkpoint: Checkpoint = Field(..., alias='Checkpoint')
    signed_proposal_cid: str | None = Field(default=None, alias='SignedProposalCid')
    is_offline: bool = Field(default=False, alias='IsOffline')
    inbound_file_path: str = Field(default='', alias='InboundFilePath')
    err: str = Field(default='', alias='Err')

    model_config = {
        'populate_by_name': True,
        'extra': 'ignore',
    }

    @field_validator('checkpoint', mode='before')
    @classmethod
    def _parse_checkpoint(cls, value: Any) -> Checkpoint:
        return Checkpoint.from_wire(value)

    @field_validator('signed_proposal_cid', mode='before')
    @classmethod
    def _parse_proposal_cid(cls, value: Any) -> Any:
        return _unwrap_cid(value)

    @property
    def importable(self) -> bool:
        """True when the deal is waiting for its offline data."""
        return self.checkpoint == Checkpoint.ACCEPTED


class DealRejection(BaseModel):
    """Response to an offline data submission."""

    accepted: bool = Field(default=False, alias='Accepted')
    reason: str = Field(default='', alias='Reason')

    model_config = {
        'populate_by_name': True,
        'extra': 'ignore',
    }
