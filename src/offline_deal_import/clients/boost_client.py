"""
Deal service client for the offline deal import workflow.

Handles:
- The DealService interface the workflow depends on
- JSON-RPC 2.0 calls to the Boost API over HTTP
- Mapping service failures into the typed error hierarchy
"""

import itertools
from typing import Any, Protocol, TypeVar
from uuid import UUID

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ..config import ImportSettings
from ..errors import BoostApiError, BoostConnectionError, wrap_boost_error
from ..models.deal import DealRecord, DealRejection

logger = structlog.get_logger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)


class DealService(Protocol):
    """Operations the import workflow needs from the deal service."""

    def boost_deal(self, deal_uuid: UUID) -> DealRecord: ...

    def boost_deal_by_signed_proposal_cid(self, proposal_cid: str) -> DealRecord: ...

    def market_import_deal_data(self, proposal_cid: str, file_path: str) -> None: ...

    def boost_offline_deal_with_data(
        self,
        deal_uuid: UUID,
        file_path: str,
        delete_after_import: bool,
    ) -> DealRejection | None: ...


class BoostApiClient:
    """
    Synchronous JSON-RPC client for the Boost API.

    Configuration via ImportSettings:
    - BOOST_API_INFO: ``<token>:<multiaddr>`` connection string, or
    - BOOST_API_URL / BOOST_API_TOKEN
    - HTTP_TIMEOUT_SECONDS: optional transport timeout
    """

    NAMESPACE = 'Boost'

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            url: JSON-RPC endpoint (e.g., http://127.0.0.1:1288/rpc/v0)
            token: API token sent as a bearer token, if any
            timeout: Transport timeout in seconds (None waits indefinitely)
            transport: Optional httpx transport, used to substitute the network
        """
        if not url:
            raise ValueError('Boost API url is required')

        headers = {'Content-Type': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'

        self.url = url
        self._ids = itertools.count(1)
        self._client = httpx.Client(
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: ImportSettings) -> 'BoostApiClient':
        url, token = settings.api_endpoint()
        return cls(url=url, token=token, timeout=settings.HTTP_TIMEOUT_SECONDS)

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def __enter__(self) -> 'BoostApiClient':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _call(self, method: str, *params: Any) -> Any:
        """
        Execute a JSON-RPC call and return its result.

        Only the RPC error message is classified by text (e.g. "not found");
        HTTP status and transport failures are never read as a missing deal.

        Raises:
            BoostApiError: (or a subclass) for transport and RPC errors
        """
        rpc_method = f'{self.NAMESPACE}.{method}'
        context: dict[str, Any] = {'method': rpc_method, 'url': self.url}
        payload = {
            'jsonrpc': '2.0',
            'id': next(self._ids),
            'method': rpc_method,
            'params': list(params),
        }

        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            context['status_code'] = status
            raise BoostApiError(
                f'Boost API returned HTTP {status} for {rpc_method}',
                context=context,
            ) from exc
        except httpx.TransportError as exc:
            context['error_type'] = type(exc).__name__
            raise BoostConnectionError(
                f'Boost API connection failed: {exc}',
                context=context,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            context['error_type'] = type(exc).__name__
            raise BoostApiError(
                f'invalid response from Boost API for {rpc_method}: {exc}',
                context=context,
            ) from exc

        if not isinstance(body, dict):
            raise BoostApiError(
                f'invalid response from Boost API for {rpc_method}: not a JSON object',
                context=context,
            )

        error = body.get('error')
        if error:
            message = error.get('message') if isinstance(error, dict) else str(error)
            logger.debug('boost.rpc_error', method=rpc_method, error=message)
            raise wrap_boost_error(BoostApiError(message or 'unknown error'), context)

        return body.get('result')

    def _parse(self, model: type[ModelT], method: str, result: Any) -> ModelT:
        """Validate an RPC result, reporting malformed payloads as API errors."""
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise BoostApiError(
                f'malformed {model.__name__} from Boost.{method}: '
                f'{exc.error_count()} validation error(s)',
                context={'method': f'{self.NAMESPACE}.{method}', 'error_type': type(exc).__name__},
            ) from exc

    def boost_deal(self, deal_uuid: UUID) -> DealRecord:
        """Fetch a deal by UUID."""
        return self._parse(DealRecord, 'BoostDeal', self._call('BoostDeal', str(deal_uuid)))

    def boost_deal_by_signed_proposal_cid(self, proposal_cid: str) -> DealRecord:
        """Fetch a deal by the CID of its signed proposal."""
        result = self._call('BoostDealBySignedProposalCid', {'/': proposal_cid})
        return self._parse(DealRecord, 'BoostDealBySignedProposalCid', result)

    def market_import_deal_data(self, proposal_cid: str, file_path: str) -> None:
        """Hand data for a legacy deal to the markets import backend."""
        self._call('MarketImportDealData', {'/': proposal_cid}, file_path)

    def boost_offline_deal_with_data(
        self,
        deal_uuid: UUID,
        file_path: str,
        delete_after_import: bool,
    ) -> DealRejection | None:
        """Submit offline data for a deal; returns the rejection info, if any."""
        result = self._call(
            'BoostOfflineDealWithData',
            str(deal_uuid),
            file_path,
            delete_after_import,
        )
        if result is None:
            return None
        return self._parse(DealRejection, 'BoostOfflineDealWithData', result)
