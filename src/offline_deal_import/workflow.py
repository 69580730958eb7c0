"""
Offline deal data import workflow.

Takes a deal identifier and a payload file name, stages the payload locally
(downloading it when requested), checks that the deal is waiting for data,
and submits the payload to the deal service for asynchronous execution.

Flow:
1. Resolve the identifier to a deal UUID or a legacy proposal CID
2. Reject option combinations the deal kind cannot honour
3. Resolve the absolute local path
4. Download the payload when no local copy exists and remote fetch is on
5. For UUID deals, check the deal is at the Accepted checkpoint
6. Submit to the offline deal backend, or the legacy markets backend

Every stage is a hard gate: the first error aborts the import.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

import structlog

from .clients.boost_client import DealService
from .errors import (
    AlreadyImportedOrInvalidState,
    BoostApiError,
    DealLookupFailed,
    DealNotFoundError,
    DealRejected,
    LocalFileMissing,
    SubmissionTransportFailed,
    UnsupportedOption,
)
from .fetcher import RemoteFetcher, path_exists
from .identifiers import DealIdentifier, DealUuid, LegacyProposalId, resolve_identifier
from .logging import StageTimer, logging_context
from .paths import resolve_local_path, resolve_remote_url

logger = structlog.get_logger(__name__)


# =============================================================================
# Request / Result Models
# =============================================================================


class ImportRoute(str, Enum):
    """Backend an import was submitted to."""

    OFFLINE_DEAL = 'offline_deal'
    LEGACY_MARKET = 'legacy_market'


@dataclass
class ImportRequest:
    """Caller input for one import."""

    identifier: str
    file_name: str
    local_path: str
    remote_path: str = ''
    remote: bool = True
    delete_after_import: bool = True


@dataclass
class ImportResult:
    """Outcome of a successfully scheduled import."""

    route: ImportRoute
    file_path: str
    deal_uuid: UUID | None = None
    proposal_cid: str | None = None
    fetched: bool = False
    trace_id: str | None = None
    timings: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        """Confirmation line for the operator."""
        if self.route == ImportRoute.LEGACY_MARKET:
            return (
                f'Offline deal import for legacy deal {self.proposal_cid} '
                f'scheduled for execution'
            )
        return f'Offline deal import for deal {self.deal_uuid} scheduled for execution'

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        return {
            'route': self.route.value,
            'file_path': self.file_path,
            'deal_uuid': str(self.deal_uuid) if self.deal_uuid else None,
            'proposal_cid': self.proposal_cid,
            'fetched': self.fetched,
            'trace_id': self.trace_id,
            'timings': self.timings,
        }


# =============================================================================
# OfflineDealImporter
# =============================================================================


class OfflineDealImporter:
    """
    Imports offline deal data through an injected deal service.

    The deal service and fetcher are supplied by the caller so the workflow
    can run against the live API or against test doubles.
    """

    def __init__(
        self,
        deal_service: DealService,
        fetcher: RemoteFetcher | None = None,
    ):
        """
        Args:
            deal_service: Deal lookup and submission backend
            fetcher: Remote payload downloader (defaults to RemoteFetcher())
        """
        self.deal_service = deal_service
        self.fetcher = fetcher or RemoteFetcher()

    def run(self, request: ImportRequest) -> ImportResult:
        """
        Run the full import for one deal.

        Returns:
            ImportResult describing the scheduled import

        Raises:
            OfflineDealImportError: (a subclass) on the first failing stage
        """
        timer = StageTimer()

        with timer.stage('resolve'):
            identifier = resolve_identifier(request.identifier)
            if isinstance(identifier, LegacyProposalId) and request.delete_after_import:
                raise UnsupportedOption(
                    'legacy deal data cannot be automatically deleted after import '
                    '(only new deals)',
                    context={'identifier': str(identifier)},
                )
            file_path = resolve_local_path(request.local_path, request.file_name)

        trace_id = uuid4().hex
        with logging_context(trace_id=trace_id, deal_id=str(identifier)):
            log = logger.bind(file_path=file_path)
            log.info('import.started', remote=request.remote)

            with timer.stage('stage'):
                fetched = self.stage_payload(request, file_path)

            if isinstance(identifier, DealUuid):
                with timer.stage('lookup'):
                    self.check_importable(identifier.uuid)

            with timer.stage('dispatch'):
                result = self.dispatch(identifier, file_path, request.delete_after_import)

            result.fetched = fetched
            result.trace_id = trace_id
            result.timings = timer.summary()
            log.info('import.scheduled', **result.to_dict())
            return result

    def stage_payload(self, request: ImportRequest, file_path: str) -> bool:
        """
        Make sure the payload exists at ``file_path``.

        Returns:
            True when the payload had to be downloaded
        """
        fetched = False
        if not path_exists(file_path):
            if not request.remote:
                raise LocalFileMissing(
                    f'local file {file_path} does not exist',
                    context={'path': file_path},
                )
            url = resolve_remote_url(request.remote_path, request.file_name)
            self.fetcher.fetch(file_path, url)
            fetched = True

        if not os.path.isfile(file_path):
            raise LocalFileMissing(
                f'opening file {file_path}: not a regular file',
                context={'path': file_path},
            )
        return fetched

    def check_importable(self, deal_uuid: UUID) -> None:
        """
        Verify the deal is at the Accepted checkpoint.

        A single unlocked read: a concurrent transition between this check and
        the submission is rejected by the deal service itself.
        """
        try:
            deal = self.deal_service.boost_deal(deal_uuid)
        except BoostApiError as exc:
            raise DealLookupFailed(
                exc.message,
                context={'deal_uuid': str(deal_uuid), **exc.context},
            ) from exc

        if not deal.importable:
            raise AlreadyImportedOrInvalidState(
                f'the deal {deal_uuid} has been imported or is not accepting data '
                f'(checkpoint {deal.checkpoint.value})',
                context={'deal_uuid': str(deal_uuid), 'checkpoint': deal.checkpoint.value},
            )

    def dispatch(
        self,
        identifier: DealIdentifier,
        file_path: str,
        delete_after_import: bool,
    ) -> ImportResult:
        """Submit the staged payload to the backend matching the identifier."""
        if isinstance(identifier, DealUuid):
            return self._import_offline_deal(identifier.uuid, file_path, delete_after_import)
        elif isinstance(identifier, LegacyProposalId):
            return self._import_legacy(identifier, file_path, delete_after_import)
        raise TypeError(f'unsupported deal identifier {identifier!r}')

    def _import_legacy(
        self,
        identifier: LegacyProposalId,
        file_path: str,
        delete_after_import: bool,
    ) -> ImportResult:
        if delete_after_import:
            raise UnsupportedOption(
                'legacy deal data cannot be automatically deleted after import '
                '(only new deals)',
                context={'identifier': identifier.text},
            )

        try:
            deal = self.deal_service.boost_deal_by_signed_proposal_cid(identifier.text)
        except DealNotFoundError:
            # Not tracked by the deal service: hand it to the legacy markets backend
            logger.info('dispatch.legacy_fallback', proposal_cid=identifier.text)
            try:
                self.deal_service.market_import_deal_data(identifier.text, file_path)
            except BoostApiError as exc:
                raise SubmissionTransportFailed(
                    f"couldn't import legacy deal, or find deal: {exc.message}",
                    context={'proposal_cid': identifier.text, **exc.context},
                ) from exc
            return ImportResult(
                route=ImportRoute.LEGACY_MARKET,
                file_path=file_path,
                proposal_cid=identifier.text,
            )
        except BoostApiError as exc:
            raise DealLookupFailed(
                exc.message,
                context={'proposal_cid': identifier.text, **exc.context},
            ) from exc

        result = self._import_offline_deal(deal.deal_uuid, file_path, delete_after_import)
        result.proposal_cid = identifier.text
        return result

    def _import_offline_deal(
        self,
        deal_uuid: UUID,
        file_path: str,
        delete_after_import: bool,
    ) -> ImportResult:
        try:
            rejection = self.deal_service.boost_offline_deal_with_data(
                deal_uuid, file_path, delete_after_import
            )
        except BoostApiError as exc:
            raise SubmissionTransportFailed(
                f'failed to execute offline deal: {exc.message}',
                context={'deal_uuid': str(deal_uuid), **exc.context},
            ) from exc

        # A rejection without a reason counts as accepted. This may hide a
        # genuine rejection that omitted its reason; kept as the service
        # has always been read this way.
        if rejection is not None and rejection.reason:
            raise DealRejected(
                f'offline deal {deal_uuid} rejected: {rejection.reason}',
                context={'deal_uuid': str(deal_uuid), 'reason': rejection.reason},
            )

        return ImportResult(
            route=ImportRoute.OFFLINE_DEAL,
            file_path=file_path,
            deal_uuid=deal_uuid,
        )
