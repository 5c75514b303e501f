import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class JsonHandler(BaseHTTPRequestHandler):
    def _send(self, status: int, body: bytes, content_type: str = "application/json") -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:
        if self.path == "/ok":
            self._send(200, b'{"a":1}')
        elif self.path == "/list":
            self._send(200, b"[1, 2, 3]")
        elif self.path == "/error":
            self._send(500, b'{"error": "boom"}')
        elif self.path == "/truncated":
            self._send(200, b'{"a":')
        elif self.path == "/latin1":
            self._send(200, '{"name": "café"}'.encode("latin-1"), "application/json; charset=ISO-8859-1")
        elif self.path == "/redirect":
            self.send_response(302)
            self.send_header("Location", "/ok")
            self.send_header("Content-Length", "0")
            self.end_headers()
        elif self.path == "/headers":
            self._send(200, json.dumps(dict(self.headers.items())).encode())
        else:
            self._send(404, b"not found", "text/plain")

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def json_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), JsonHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2.0)


@pytest.fixture
def closed_port_url():
    import socket

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    return f"http://127.0.0.1:{port}/ok"
