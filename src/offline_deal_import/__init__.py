"""
Offline Deal Import

Imports the data payload of an offline storage deal: stages the file locally
(downloading it when asked), checks the deal is waiting for data, and submits
it to the deal service for asynchronous execution.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .workflow import (
    ImportRequest,
    ImportResult,
    ImportRoute,
    OfflineDealImporter,
)
from .identifiers import DealIdentifier, DealUuid, LegacyProposalId, resolve_identifier
from .clients.boost_client import BoostApiClient, DealService
from .fetcher import RemoteFetcher
from .logging import (
    configure_logging,
    current_context,
    logging_context,
    StageTimer,
)
from .errors import (
    OfflineDealImportError,
    InvalidIdentifier,
    MissingConfiguration,
    InvalidSettings,
    PathResolutionFailed,
    LocalFileMissing,
    RemoteFetchFailed,
    DealLookupFailed,
    AlreadyImportedOrInvalidState,
    UnsupportedOption,
    DealRejected,
    SubmissionTransportFailed,
)

__all__ = [
    # Version
    '__version__',
    # Workflow
    'OfflineDealImporter',
    'ImportRequest',
    'ImportResult',
    'ImportRoute',
    # Identifiers
    'DealIdentifier',
    'DealUuid',
    'LegacyProposalId',
    'resolve_identifier',
    # Clients
    'BoostApiClient',
    'DealService',
    'RemoteFetcher',
    # Logging
    'configure_logging',
    'current_context',
    'logging_context',
    'StageTimer',
    # Errors
    'OfflineDealImportError',
    'InvalidIdentifier',
    'MissingConfiguration',
    'InvalidSettings',
    'PathResolutionFailed',
    'LocalFileMissing',
    'RemoteFetchFailed',
    'DealLookupFailed',
    'AlreadyImportedOrInvalidState',
    'UnsupportedOption',
    'DealRejected',
    'SubmissionTransportFailed',
]
