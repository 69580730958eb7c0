"""
Pytest configuration and shared fixtures.

Key fixtures:
- deal_uuid / proposal_cid: sample identifiers of each kind
- fake_service: in-memory DealService that records every call
- staged_file: a payload already present in a temporary staging directory

No deal service or network is required: HTTP is faked with
httpx.MockTransport and the deal service with FakeDealService.
"""

import sys
from pathlib import Path
from uuid import UUID

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from offline_deal_import.errors import DealNotFoundError
from offline_deal_import.models.deal import Checkpoint, DealRecord, DealRejection


DEAL_UUID = UUID('d5f2c5d0-3b3a-4c8e-9a4f-2f6c1b7e8a90')
PROPOSAL_CID = 'bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi'
PROPOSAL_CID_V0 = 'QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG'


class FakeDealService:
    """
    In-memory DealService test double.

    Records each call in ``calls`` as ``(method, args)``. Behaviour is set
    through attributes; an Exception instance in a ``*_error`` attribute is
    raised by the matching method.
    """

    def __init__(
        self,
        checkpoint: Checkpoint = Checkpoint.ACCEPTED,
        legacy_deal: DealRecord | None = None,
        rejection: DealRejection | None = None,
    ):
        self.checkpoint = checkpoint
        self.legacy_deal = legacy_deal
        self.rejection = rejection
        self.deal_error: Exception | None = None
        self.legacy_lookup_error: Exception | None = None
        self.market_import_error: Exception | None = None
        self.submit_error: Exception | None = None
        self.calls: list[tuple[str, tuple]] = []

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def boost_deal(self, deal_uuid):
        self.calls.append(('boost_deal', (deal_uuid,)))
        if self.deal_error:
            raise self.deal_error
        return DealRecord(deal_uuid=deal_uuid, checkpoint=self.checkpoint)

    def boost_deal_by_signed_proposal_cid(self, proposal_cid):
        self.calls.append(('boost_deal_by_signed_proposal_cid', (proposal_cid,)))
        if self.legacy_lookup_error:
            raise self.legacy_lookup_error
        if self.legacy_deal is None:
            raise DealNotFoundError(f'deal with proposal cid {proposal_cid} not found')
        return self.legacy_deal

    def market_import_deal_data(self, proposal_cid, file_path):
        self.calls.append(('market_import_deal_data', (proposal_cid, file_path)))
        if self.market_import_error:
            raise self.market_import_error

    def boost_offline_deal_with_data(self, deal_uuid, file_path, delete_after_import):
        self.calls.append(
            ('boost_offline_deal_with_data', (deal_uuid, file_path, delete_after_import))
        )
        if self.submit_error:
            raise self.submit_error
        return self.rejection


@pytest.fixture
def deal_uuid() -> UUID:
    """Sample deal UUID."""
    return DEAL_UUID


@pytest.fixture
def proposal_cid() -> str:
    """Sample signed proposal CID (CIDv1, base32)."""
    return PROPOSAL_CID


@pytest.fixture
def fake_service() -> FakeDealService:
    """Deal service with an Accepted deal and no legacy record."""
    return FakeDealService()


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    """Empty staging directory."""
    path = tmp_path / 'staging'
    path.mkdir()
    return path


@pytest.fixture
def staged_file(staging_dir: Path) -> Path:
    """Payload already present in the staging directory."""
    path = staging_dir / 'payload.car'
    path.write_bytes(b'car-bytes')
    return path
