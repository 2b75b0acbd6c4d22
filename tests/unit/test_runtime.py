import unittest
from unittest.mock import patch

from netprobe.config import ProbeSettings
from netprobe.errors import TransportUnavailableError
from netprobe.http import HttpResponse
from netprobe.http.adapters import StubHttpClient
from netprobe.models import Failure, LatencyStats, Measurement
from netprobe.runtime import NetProbe


class StubEchoBackend:
    def __init__(self, reachable=()):
        self.reachable = set(reachable)

    def echo(self, host, count, timeout):  # noqa: ARG002
        if host not in self.reachable:
            raise TransportUnavailableError("echo unavailable")
        return LatencyStats.from_samples(count, [5.0] * count)


class TestNetProbeRuntime(unittest.TestCase):
    def setUp(self):
        self.client = StubHttpClient(
            {
                "http://localhost/": HttpResponse(ok=True, status_code=200, content=b"<h1>status: healthy</h1>"),
                "http://localhost/file": HttpResponse(
                    ok=True,
                    status_code=200,
                    elapsed=1.0,
                    meta={"body_bytes_read": 125_000, "stopped_by": "eof"},
                ),
            }
        )
        self.settings = ProbeSettings(tcp_delay=0)

    def test_probes_reuse_injected_client_and_close(self):
        with NetProbe(http_client=self.client, echo_backend=StubEchoBackend({"up.local"}), settings=self.settings) as probe:
            fetched = probe.fetch("http://localhost/", keyword="healthy")
            self.assertIsInstance(fetched, Measurement)
            self.assertTrue(fetched.stats.has_keyword)

            speed = probe.speed_test("http://localhost/file", duration=1.0)
            self.assertEqual(speed.stats.throughput_bps, 1_000_000.0)

            batch = probe.bulk_http(["http://localhost/", "http://missing/"], keyword="healthy")
            self.assertEqual(len(batch), 2)
            self.assertIsInstance(batch[1].outcome, Failure)

            pinged = probe.ping("up.local", count=2)
            self.assertEqual(pinged.method, "icmp")
            self.assertEqual(pinged.stats.packets_sent, 2)

        self.assertTrue(self.client.closed)

    def test_tcping_and_bulk_ping_use_tcp(self):
        probe = NetProbe(http_client=self.client, echo_backend=StubEchoBackend(), settings=self.settings)
        with patch("netprobe.probes.tcp.socket.create_connection", side_effect=ConnectionRefusedError("refused")):
            tcp = probe.tcping("db.local", port=5432, count=2)
            bulk = probe.bulk_ping(["a.local", "b.local"], count=1, concurrency=2)
        probe.close()

        self.assertIsInstance(tcp, Failure)
        self.assertIn("db.local:5432", tcp.cause)
        self.assertEqual([entry.outcome.method for entry in bulk], ["tcp-fallback", "tcp-fallback"])
        self.assertEqual(len(bulk[0].outcome.causes), 2)

    def test_diagnostics_delegate_to_helpers(self):
        probe = NetProbe(http_client=self.client, echo_backend=StubEchoBackend(), settings=self.settings)
        with patch("netprobe.runtime.traceroute", return_value="trace") as trace, patch(
            "netprobe.runtime.dns_lookup", return_value="records"
        ) as lookup:
            self.assertEqual(probe.traceroute("example.com"), "trace")
            self.assertEqual(probe.dns("example.com", "MX"), "records")

        trace.assert_called_once_with("example.com", max_hops=30, timeout=3.0)
        lookup.assert_called_once_with("example.com", "MX", timeout=probe.http_settings.timeout)


if __name__ == "__main__":
    unittest.main()
