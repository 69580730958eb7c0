"""Clients for external services."""

from .boost_client import BoostApiClient, DealService

__all__ = ['BoostApiClient', 'DealService']
