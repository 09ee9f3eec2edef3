"""Plain TCP client that sends a payload and collects the reply."""

from __future__ import annotations

import socket
import ssl
from dataclasses import dataclass

from gorplay.settings import debug

READ_CHUNK_SIZE = 64 * 1024
MAX_RESPONSE_SIZE = 1073741824
_DEFAULT_TIMEOUT = 5.0
_DEFAULT_RESPONSE_BUFFER = 100 * 1024


def _split_address(address: str) -> tuple[str, int]:
    host, _, port = address.rpartition(":")
    host = host.strip("[]") or "localhost"
    return host, int(port)


@dataclass
class TCPClientConfig:
    """Client options; timeouts are in seconds."""

    debug: bool = False
    connection_timeout: float = 0.0
    timeout: float = 0.0
    response_buffer_size: int = 0
    secure: bool = False


class TCPClient:
    """Keeps a connection to ``addr`` and reconnects when it was closed."""

    def __init__(self, addr: str, config: TCPClientConfig | None = None) -> None:
        config = config if config is not None else TCPClientConfig()
        if config.timeout == 0:
            config.timeout = _DEFAULT_TIMEOUT
        config.connection_timeout = config.timeout
        if config.response_buffer_size == 0:
            config.response_buffer_size = _DEFAULT_RESPONSE_BUFFER
        self.addr = addr
        self.config = config
        self._conn: socket.socket | None = None

    def connect(self) -> None:
        """Open a fresh connection, dropping any existing one."""
        self.disconnect()
        host, port = _split_address(self.addr)
        conn = socket.create_connection((host, port), timeout=self.config.connection_timeout)
        if self.config.secure:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            try:
                conn = context.wrap_socket(conn, server_hostname=host)
            except OSError:
                conn.close()
                raise
        self._conn = conn

    def disconnect(self) -> None:
        """Close the connection if one is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            debug(1, "[TCPClient] Disconnected: ", self.addr)

    def _is_alive(self) -> bool:
        conn = self._conn
        assert conn is not None
        conn.settimeout(0.001)
        try:
            if isinstance(conn, ssl.SSLSocket):
                data = conn.recv(1)
            else:
                data = conn.recv(1, socket.MSG_PEEK)
        except (TimeoutError, BlockingIOError, ssl.SSLWantReadError):
            return True
        except BrokenPipeError as err:
            debug(1, "Detected broken pipe.", err)
            return False
        except OSError:
            return True
        if not data:
            debug(1, "[TCPClient] connection closed, reconnecting")
            return False
        return True

    def send(self, data: bytes) -> bytes:
        """Send ``data`` and read the reply until the peer closes.

        The reply is cut to ``response_buffer_size`` bytes; reading stops at
        ``MAX_RESPONSE_SIZE``. Connection, write and read errors are raised.
        """
        if self._conn is None or not self._is_alive():
            debug(1, "[TCPClient] Connecting:", self.addr)
            self.connect()
        conn = self._conn
        assert conn is not None

        conn.settimeout(self.config.timeout)
        if self.config.debug:
            debug(1, "[TCPClient] Sending:", data)
        conn.sendall(data)

        limit = self.config.response_buffer_size
        response = bytearray()
        read_bytes = 0
        timeout = self.config.timeout
        while True:
            conn.settimeout(timeout)
            want = limit - len(response) if len(response) < limit else READ_CHUNK_SIZE
            chunk = conn.recv(want)
            if not chunk:
                break
            if len(response) < limit:
                response += chunk
            read_bytes += len(chunk)
            if read_bytes >= MAX_RESPONSE_SIZE:
                debug(1, "[TCPClient] Body is more than the max size", MAX_RESPONSE_SIZE, self.addr)
                break
            # following chunks are expected sooner
            timeout = self.config.timeout / 5

        payload = bytes(response[:limit])
        if self.config.debug:
            debug(1, "[TCPClient] Received:", payload)
        return payload