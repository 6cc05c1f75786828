"""src/agentry/transport/__init__.py

Transport layer module for Agentry.

This module provides the transport interface used by the user agent and the
default HTTP/1.1 transport over plain TCP and TLS connections.
"""

from .base import ContentSink, Transport
from .connection import Connection
from .http import HTTPTransport

__all__ = ["Transport", "ContentSink", "HTTPTransport", "Connection"]
