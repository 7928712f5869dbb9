from __future__ import annotations

import socket
from typing import Optional

import numpy as np

from bodymetrics.core.measurements import MeasurementVector
from bodymetrics.models.config import OscConfig


class IdentityOscSink:
    def __init__(self, cfg: OscConfig):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.addr = (cfg.host, int(cfg.port))
        self.prefix = cfg.address_prefix.rstrip("/")

    @staticmethod
    def _pad4(data: bytes) -> bytes:
        pad = (4 - (len(data) % 4)) % 4
        return data + (b"\x00" * pad)

    def _osc_str(self, value: str) -> bytes:
        return self._pad4(value.encode("utf-8") + b"\x00")

    @staticmethod
    def _osc_float(value: float) -> bytes:
        # OSC is big-endian on the wire.
        return np.array(value, dtype=">f4").tobytes()

    def send_measurement(self, subject: str, vector: MeasurementVector) -> None:
        address = f"{self.prefix}/measurement/{subject}"
        payload = b"".join(
            [
                self._osc_str(address),
                self._osc_str(",fffff"),
                *(self._osc_float(float(value)) for value in vector.as_tuple()),
            ]
        )
        self.sock.sendto(payload, self.addr)

    def send_identity(self, subject: str, status: str, distance: Optional[float]) -> None:
        address = f"{self.prefix}/identity"
        payload = b"".join(
            [
                self._osc_str(address),
                self._osc_str(",ssf"),
                self._osc_str(subject),
                self._osc_str(status),
                self._osc_float(-1.0 if distance is None else float(distance)),
            ]
        )
        self.sock.sendto(payload, self.addr)

    def close(self) -> None:
        self.sock.close()
