import struct
import unittest

from bodymetrics.core.measurements import MeasurementVector
from bodymetrics.core.osc import IdentityOscSink
from bodymetrics.models.config import OscConfig


class DummySocket:
    def __init__(self):
        self.sent = []

    def sendto(self, payload, addr):
        self.sent.append((payload, addr))

    def close(self):
        pass


class OscTests(unittest.TestCase):
    def _sink(self):
        sink = IdentityOscSink(OscConfig(host="127.0.0.1", port=9000, address_prefix="/bodymetrics/"))
        sink.sock.close()
        dummy = DummySocket()
        sink.sock = dummy
        return sink, dummy

    def test_send_measurement_packet(self):
        sink, dummy = self._sink()
        sink.send_measurement("101", MeasurementVector(1.9, 0.9, 0.65, 0.4, 0.6))
        self.assertEqual(len(dummy.sent), 1)
        payload, addr = dummy.sent[0]
        self.assertEqual(addr, ("127.0.0.1", 9000))
        self.assertIn(b"/bodymetrics/measurement/101", payload)
        self.assertEqual(len(payload) % 4, 0)
        height = struct.unpack(">f", payload[-20:-16])[0]
        self.assertAlmostEqual(height, 1.9, places=5)

    def test_send_identity_packet(self):
        sink, dummy = self._sink()
        sink.send_identity("101", "recognized", 0.004)
        payload, _ = dummy.sent[0]
        self.assertIn(b"/bodymetrics/identity", payload)
        self.assertIn(b",ssf", payload)
        self.assertIn(b"recognized", payload)
        self.assertAlmostEqual(struct.unpack(">f", payload[-4:])[0], 0.004, places=6)


if __name__ == "__main__":
    unittest.main()
