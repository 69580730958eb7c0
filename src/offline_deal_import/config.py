"""
Configuration management for the offline deal import workflow.

Loads settings from environment variables with sensible defaults.
"""

import re
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from pydantic_settings import BaseSettings

from .errors import InvalidSettings, MissingConfiguration

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)

DEFAULT_API_URL = 'http://127.0.0.1:1288/rpc/v0'

# /ip4/127.0.0.1/tcp/1288/http, /dns/boost.local/tcp/443/https
_MULTIADDR_RE = re.compile(
    r'^/(?P<proto>ip4|ip6|dns|dns4|dns6)/(?P<host>[^/]+)/tcp/(?P<port>\d+)(?:/(?P<scheme>https?|wss?))?/?$'
)


def parse_api_info(info: str) -> tuple[str, str]:
    """
    Parse a ``<token>:<address>`` connection string into ``(url, token)``.

    The address may be a multiaddr (``/ip4/127.0.0.1/tcp/1288/http``) or a
    plain URL. A string without a token is accepted as a bare address.
    """
    info = info.strip()
    if not info:
        raise MissingConfiguration('BOOST_API_INFO is empty')

    if info.startswith(('/', 'http://', 'https://')):
        token, address = '', info
    else:
        token, _, address = info.partition(':')

    if address.startswith(('http://', 'https://')):
        return address, token

    match = _MULTIADDR_RE.match(address)
    if not match:
        raise MissingConfiguration(
            f"could not parse API address '{address}'",
            context={'api_info': address},
        )

    host = match.group('host')
    if match.group('proto') == 'ip6':
        host = f'[{host}]'
    scheme = match.group('scheme') or 'http'
    if scheme.startswith('ws'):
        scheme = 'https' if scheme == 'wss' else 'http'
    return f"{scheme}://{host}:{match.group('port')}/rpc/v0", token


class ImportSettings(BaseSettings):
    """Import workflow settings loaded from environment variables."""

    # Deal service
    BOOST_API_INFO: str = ''
    BOOST_API_URL: str = DEFAULT_API_URL
    BOOST_API_TOKEN: str = ''

    # Unset means the transport waits indefinitely
    HTTP_TIMEOUT_SECONDS: float | None = None

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = False

    def api_endpoint(self) -> tuple[str, str]:
        """Resolve the deal service URL and token, preferring BOOST_API_INFO."""
        if self.BOOST_API_INFO:
            return parse_api_info(self.BOOST_API_INFO)
        if not self.BOOST_API_URL:
            raise MissingConfiguration('BOOST_API_URL is empty')
        return self.BOOST_API_URL, self.BOOST_API_TOKEN


@lru_cache
def get_settings() -> ImportSettings:
    """
    Cached settings singleton.

    Raises:
        InvalidSettings: if an environment value does not parse
    """
    try:
        return ImportSettings()
    except ValidationError as exc:
        fields = sorted({str(err['loc'][0]) for err in exc.errors() if err['loc']})
        names = ', '.join(fields) or exc.title
        raise InvalidSettings(
            f'invalid settings: {names}',
            context={'fields': fields},
        ) from exc
