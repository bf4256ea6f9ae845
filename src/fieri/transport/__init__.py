"""
Transport layer - HTTP client for API communication.

Provides httpx-based transport with:
- Async streaming support
- Multipart uploads
- Proxy configuration
- Timeout management
"""

from fieri.transport.http import HttpTransport

__all__ = [
    "HttpTransport",
]
