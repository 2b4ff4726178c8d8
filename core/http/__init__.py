"""
HTTP Client Module

requests-based transport used by the subgraph adapter.
"""

from .client import HttpClient, HttpError, HttpResponse

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
]
