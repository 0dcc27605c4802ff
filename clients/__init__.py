"""HTTP clients for the Polar Flow service."""

from .polar_client import PolarFlowClient, format_query_date

__all__ = ['PolarFlowClient', 'format_query_date']
