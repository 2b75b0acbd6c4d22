# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
import subprocess
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    TRANSPORT_UNAVAILABLE = "TRANSPORT_UNAVAILABLE"
    UNREACHABLE = "UNREACHABLE"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    SSL_ERROR = "SSL_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class NetProbeError(Exception):
    """Base class for errors raised by netprobe."""


class ProbeError(NetProbeError):
    """A probe-level failure with a known category."""

    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR

    def __init__(self, message: str, category: ErrorCategory | None = None):
        super().__init__(message)
        if category is not None:
            self.category = category


class TransportUnavailableError(ProbeError):
    """The probe transport could not be opened (missing binary, privilege)."""

    category = ErrorCategory.TRANSPORT_UNAVAILABLE


class UnreachableError(ProbeError):
    """Every attempt of a method was lost or refused."""

    category = ErrorCategory.UNREACHABLE


class ProbeTimeoutError(ProbeError):
    """The probe did not complete within its deadline."""

    category = ErrorCategory.TIMEOUT


class BatchInputError(NetProbeError, ValueError):
    """Structural batch error detected before any probing starts."""


class InvalidParametersError(NetProbeError, ValueError):
    """Probe parameters are out of range."""


class DiagnosticError(NetProbeError):
    """Traceroute or name lookup could not be performed."""


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, ProbeError):
        return exc.category

    if isinstance(exc, (httpx.TimeoutException, subprocess.TimeoutExpired, TimeoutError, socket.timeout)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorCategory.HTTP_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, PermissionError):
        return ErrorCategory.TRANSPORT_UNAVAILABLE

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def category_from_error_type(error_type: str | None) -> ErrorCategory:
    """Recover a category from an exception class name carried on a response."""
    name = (error_type or "").lower()
    if not name:
        return ErrorCategory.UNKNOWN_ERROR
    if "timeout" in name:
        return ErrorCategory.TIMEOUT
    if "ssl" in name or "certificate" in name:
        return ErrorCategory.SSL_ERROR
    if "gaierror" in name or "herror" in name:
        return ErrorCategory.DNS_ERROR
    if "connect" in name or "network" in name or "protocol" in name or "proxy" in name:
        return ErrorCategory.CONNECTION_ERROR
    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Probe did not complete before its deadline",
        ErrorCategory.TRANSPORT_UNAVAILABLE: "Probe transport unavailable (missing tool or privilege)",
        ErrorCategory.UNREACHABLE: "Target unreachable (all attempts lost)",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.HTTP_ERROR: "Unexpected HTTP response",
        ErrorCategory.UNKNOWN_ERROR: "Network error during probe",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Probe failed due to network error")


__all__ = [
    "BatchInputError",
    "DiagnosticError",
    "ErrorCategory",
    "InvalidParametersError",
    "NetProbeError",
    "ProbeError",
    "ProbeTimeoutError",
    "TransportUnavailableError",
    "UnreachableError",
    "categorize_exception",
    "category_from_error_type",
    "error_category_to_reason",
]
