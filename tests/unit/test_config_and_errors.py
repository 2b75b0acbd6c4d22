# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import importlib
import logging
import socket
import subprocess

import httpx

from netprobe import config
from netprobe.config import DEFAULT_USER_AGENT
from netprobe.errors import (
    BatchInputError,
    ErrorCategory,
    ProbeTimeoutError,
    TransportUnavailableError,
    UnreachableError,
    categorize_exception,
    category_from_error_type,
    error_category_to_reason,
)
from netprobe.log import LOGGER_NAME, resolve_log_level, setup_logging


def test_probe_settings_defaults():
    settings = config.ProbeSettings()
    assert settings.ping_count == 4
    assert settings.bulk_ping_count == 3
    assert settings.timeout == 2.0
    assert settings.http_timeout == 5.0
    assert settings.bulk_ping_concurrency == 25
    assert settings.bulk_http_concurrency == 20
    assert settings.http_max_body_bytes == 200 * 1024
    assert settings.download_duration == 5.0
    assert settings.tcp_fallback_port == 80
    assert settings.tcp_check_port == 443


def test_probe_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("NETPROBE_PING_COUNT", "6")
    monkeypatch.setenv("NETPROBE_TIMEOUT", "0.5")
    monkeypatch.setenv("NETPROBE_BULK_PING_CONCURRENCY", "7")
    monkeypatch.setenv("NETPROBE_HTTP_MAX_BODY_BYTES", "1024")
    monkeypatch.setenv("NETPROBE_TCP_DELAY", "0")

    importlib.reload(config)
    settings = config.load_probe_settings()

    assert settings.ping_count == 6
    assert settings.timeout == 0.5
    assert settings.bulk_ping_concurrency == 7
    assert settings.http_max_body_bytes == 1024
    assert settings.tcp_delay == 0


def test_probe_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("NETPROBE_PING_COUNT", "four")
    monkeypatch.setenv("NETPROBE_BULK_HTTP_CONCURRENCY", "0")
    monkeypatch.setenv("NETPROBE_TIMEOUT", "-1")
    monkeypatch.setenv("NETPROBE_TCP_DELAY", "-0.5")

    importlib.reload(config)
    settings = config.load_probe_settings()

    assert settings.ping_count == config.ProbeSettings.ping_count
    assert settings.bulk_http_concurrency == config.ProbeSettings.bulk_http_concurrency
    assert settings.timeout == config.ProbeSettings.timeout
    assert settings.tcp_delay == config.ProbeSettings.tcp_delay


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("NETPROBE_HTTP_TIMEOUT", "7.5")
    monkeypatch.setenv("NETPROBE_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("NETPROBE_HTTP_REDIRECTS", "false")
    monkeypatch.setenv("NETPROBE_HTTP_VERIFY_SSL", "0")

    importlib.reload(config)
    settings = config.load_http_settings()

    assert settings.timeout == 7.5
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.allow_redirects is False
    assert settings.verify_ssl is False


def test_http_settings_default_user_agent(monkeypatch):
    monkeypatch.delenv("NETPROBE_USER_AGENT", raising=False)
    importlib.reload(config)
    assert DEFAULT_USER_AGENT.startswith("netprobe/")
    assert config.load_http_settings().user_agent.startswith("netprobe/")


def test_load_probe_settings_reads_env_at_call_time(monkeypatch):
    importlib.reload(config)
    monkeypatch.setenv("NETPROBE_BULK_PING_COUNT", "5")
    assert config.load_probe_settings().bulk_ping_count == 5
    monkeypatch.setenv("NETPROBE_BULK_PING_COUNT", "9")
    assert config.load_probe_settings().bulk_ping_count == 9


def test_categorize_exception_covers_network_errors():
    assert categorize_exception(httpx.ReadTimeout("slow")) == ErrorCategory.TIMEOUT
    assert categorize_exception(subprocess.TimeoutExpired(["ping"], 1)) == ErrorCategory.TIMEOUT
    assert categorize_exception(TimeoutError()) == ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused")) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ConnectionRefusedError()) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(socket.gaierror("nope")) == ErrorCategory.DNS_ERROR
    assert categorize_exception(PermissionError("raw socket")) == ErrorCategory.TRANSPORT_UNAVAILABLE
    assert categorize_exception(RuntimeError("boom")) == ErrorCategory.UNKNOWN_ERROR


def test_probe_errors_carry_their_category():
    assert categorize_exception(TransportUnavailableError("no privilege")) == ErrorCategory.TRANSPORT_UNAVAILABLE
    assert categorize_exception(UnreachableError("lost")) == ErrorCategory.UNREACHABLE
    assert categorize_exception(ProbeTimeoutError("late")) == ErrorCategory.TIMEOUT


def test_batch_input_error_is_value_error():
    assert issubclass(BatchInputError, ValueError)


def test_category_from_error_type_names():
    assert category_from_error_type("ReadTimeout") == ErrorCategory.TIMEOUT
    assert category_from_error_type("ConnectError") == ErrorCategory.CONNECTION_ERROR
    assert category_from_error_type("SSLError") == ErrorCategory.SSL_ERROR
    assert category_from_error_type(None) == ErrorCategory.UNKNOWN_ERROR


def test_error_category_to_reason():
    assert "deadline" in error_category_to_reason(ErrorCategory.TIMEOUT)
    assert error_category_to_reason(ErrorCategory.NONE) == ""
    assert error_category_to_reason(None) == ""


def test_log_level_explicit_beats_env(monkeypatch):
    monkeypatch.setenv("NETPROBE_LOG_LEVEL", "error")
    assert resolve_log_level() == logging.ERROR
    assert resolve_log_level("debug") == logging.DEBUG
    assert resolve_log_level(logging.INFO) == logging.INFO

    monkeypatch.delenv("NETPROBE_LOG_LEVEL")
    assert resolve_log_level() == logging.WARNING
    assert resolve_log_level("chatty") == logging.WARNING


def test_setup_logging_sets_package_logger_level(monkeypatch):
    monkeypatch.setenv("NETPROBE_LOG_LEVEL", "ERROR")
    package_logger = logging.getLogger(LOGGER_NAME)
    previous = package_logger.level
    try:
        logger = setup_logging("info")
        assert logger is package_logger
        assert logger.name == "netprobe"
        assert logger.level == logging.INFO
        assert logging.getLogger("netprobe.scan.engine").getEffectiveLevel() == logging.INFO
    finally:
        package_logger.setLevel(previous)
