"""Power BI REST API adapters."""

from .rest_client import PowerBIRestClient, decode_error_response

__all__ = ["PowerBIRestClient", "decode_error_response"]
