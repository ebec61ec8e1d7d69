# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
TLS configuration for HTTPS requests to the GGST service.
"""

from __future__ import annotations

import ssl
from dataclasses import dataclass
from typing import Optional


@dataclass
class TLSConfig:
    """
    TLS/SSL settings for the HTTP transport.

    Security Levels:
    - Default: System CA store with hostname verification
    - Custom CA: Verify against a private CA (e.g. a local proxy)
    - Insecure: Skip certificate verification (testing/debugging only)

    Examples:
        # System CA certificates
        >>> tls = TLSConfig()

        # Intercepting proxy with its own CA
        >>> tls = TLSConfig(ca_file="/path/to/proxy-ca.pem")

        # Insecure TLS (skip certificate verification)
        >>> tls = TLSConfig(insecure_skip_verify=True)
    """

    ca_file: Optional[str] = None
    """Path to CA certificate file for server verification."""

    insecure_skip_verify: bool = False
    """Skip certificate verification (INSECURE - use only for testing)."""

    def create_context(self) -> ssl.SSLContext:
        """Build an SSL context from these settings."""
        context = ssl.create_default_context()

        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        elif self.ca_file:
            context.load_verify_locations(self.ca_file)

        return context
