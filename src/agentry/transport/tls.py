"""src/agentry/transport/tls.py

TLS configuration for Agentry.
"""

import ssl


def create_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """
    Create a client SSL context with TLS 1.2 minimum.

    Args:
        verify: Check the peer certificate and host name.
    """
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context
