"""
Custom exceptions and error handling for the offline deal import workflow.

Provides:
- Typed exception hierarchy, one class per fatal workflow condition
- Error context preservation for debugging
- Classification of raw deal-service failures
"""

from typing import Any


class OfflineDealImportError(Exception):
    """Base exception for all offline deal import errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Input and Configuration Errors
# =============================================================================


class InvalidInputError(OfflineDealImportError):
    """Base class for caller input that cannot be interpreted."""

    pass


class InvalidIdentifier(InvalidInputError):
    """Token is neither a deal UUID nor a proposal CID."""

    pass


class ConfigurationError(OfflineDealImportError):
    """Base class for option and settings errors."""

    pass


class MissingConfiguration(ConfigurationError):
    """A required path or connection option was left empty."""

    pass


class InvalidSettings(ConfigurationError):
    """An environment setting could not be parsed."""

    pass


class UnsupportedOption(ConfigurationError):
    """Option combination is not supported for this kind of deal."""

    pass


# =============================================================================
# Staging Errors
# =============================================================================


class StagingError(OfflineDealImportError):
    """Base class for errors while locating or materializing the payload."""

    pass


class PathResolutionFailed(StagingError):
    """Home-directory expansion or absolute-path resolution failed."""

    pass


class LocalFileMissing(StagingError):
    """No payload at the local path and remote fetch not requested."""

    pass


class RemoteFetchFailed(StagingError):
    """Remote download returned non-200 or failed in transport."""

    pass


# =============================================================================
# Deal State and Submission Errors
# =============================================================================


class DealStateError(OfflineDealImportError):
    """Base class for deal lookup and lifecycle errors."""

    pass


class DealLookupFailed(DealStateError):
    """Deal record could not be fetched from the deal service."""

    pass


class AlreadyImportedOrInvalidState(DealStateError):
    """Deal checkpoint does not allow data import."""

    pass


class SubmissionError(OfflineDealImportError):
    """Base class for errors while handing data to the deal service."""

    pass


class DealRejected(SubmissionError):
    """Deal service explicitly rejected the offline data."""

    pass


class SubmissionTransportFailed(SubmissionError):
    """Submission call itself failed (network or service error)."""

    pass


# =============================================================================
# Client Errors
# =============================================================================


class ClientError(OfflineDealImportError):
    """Base class for client-related errors."""

    pass


class BoostApiError(ClientError):
    """Error returned by the deal service API."""

    pass


class BoostConnectionError(BoostApiError):
    """Failed to reach the deal service API."""

    pass


class DealNotFoundError(BoostApiError):
    """Deal service has no record for the requested deal."""

    pass


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_boost_error(exc: Exception, context: dict[str, Any] | None = None) -> BoostApiError:
    """
    Wrap a deal service error reply in our typed error hierarchy.

    Classification is by message text, so only pass errors whose text comes
    from the service itself (JSON-RPC ``error.message``). HTTP status and
    transport failures are typed by the client directly.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        Typed BoostApiError subclass
    """
    error_str = str(exc).lower()
    ctx = context or {}
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    # The service reports missing records only through the message text
    if 'not found' in error_str:
        return DealNotFoundError(str(exc), context=ctx)
    elif 'connection' in error_str or 'connect' in error_str:
        return BoostConnectionError(
            f"Boost API connection failed: {exc}",
            context=ctx,
        )
    else:
        return BoostApiError(str(exc), context=ctx)
