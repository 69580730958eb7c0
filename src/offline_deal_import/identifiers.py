"""
Deal identifier resolution.

A deal is addressed either by its UUID (current deals) or by the CID of its
signed proposal (legacy deals made before deal UUIDs existed). The two forms
are kept apart as an explicit two-variant type so the dispatcher can branch
on the variant rather than on optional fields.
"""

import re
from dataclasses import dataclass
from uuid import UUID

from multiformats import CID

from .errors import InvalidIdentifier

_HEX = r'[0-9a-f]'
_HYPHENATED = rf'{_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}'

# Canonical 8-4-4-4-12, its urn:uuid: and braced forms, or 32 bare hex digits
_UUID_RE = re.compile(
    rf'^(?:{_HYPHENATED}|urn:uuid:{_HYPHENATED}|\{{{_HYPHENATED}\}}|{_HEX}{{32}})$',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class DealUuid:
    """Deal identified by its UUID."""

    uuid: UUID

    def __str__(self) -> str:
        return str(self.uuid)


@dataclass(frozen=True)
class LegacyProposalId:
    """Legacy deal identified by its signed proposal CID."""

    cid: CID
    text: str

    def __str__(self) -> str:
        return self.text


DealIdentifier = DealUuid | LegacyProposalId


def resolve_identifier(token: str) -> DealIdentifier:
    """
    Classify a caller-supplied token as a deal UUID or a proposal CID.

    UUID parsing is tried first and wins outright; CID decoding is only
    attempted when the token is not a UUID.

    Raises:
        InvalidIdentifier: if the token is neither
    """
    token = token.strip()
    if not token:
        raise InvalidIdentifier('deal identifier must not be empty')

    if _UUID_RE.match(token):
        return DealUuid(UUID(token.lower().removeprefix('urn:uuid:').strip('{}')))

    try:
        cid = CID.decode(token)
    except Exception as exc:
        raise InvalidIdentifier(
            f"could not parse '{token}' as deal uuid or proposal cid",
            context={'identifier': token},
        ) from exc
    return LegacyProposalId(cid=cid, text=token)
