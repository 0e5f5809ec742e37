import logging
import os
import socket
import threading
import time
import traceback
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from .pact_request_handler import MockResponse, ObservedRequest, PactRequestHandler

log = logging.getLogger(__name__)


class MockServerError(Exception):
    pass


class Server(PactRequestHandler):
    """Serves the declared interactions over real HTTP on an OS-assigned local port.

    >>> server = Server(interactions)
    >>> server.start()
    >>> requests.get(server.url + '/users/1')
    >>> server.stop()
    >>> server.unmatched_interactions()
    """

    READY_RETRIES = 50
    READY_INTERVAL = 0.1
    STOP_TIMEOUT = 1.0

    def __init__(self, interactions, host_name='localhost', provider_name='provider', log_dir=None):
        super().__init__(interactions)
        self.host_name = host_name
        self.provider_name = provider_name
        self.log_dir = log_dir
        self.port = None
        self.log = logging.getLogger(f'{__name__}.{provider_name}')
        self._log_handler = None
        self._log_level = None
        self._httpd = None
        self._thread = None

    @property
    def url(self):
        if self.port is None:
            return None
        return f'http://{self.host_name}:{self.port}'

    @property
    def running(self):
        return self._httpd is not None

    def start(self):
        if self._httpd is not None:
            raise MockServerError(f'Mock server for {self.provider_name} is already running at {self.url}')
        try:
            httpd = MockHTTPServer(self, (self.host_name, 0))
        except OSError as e:
            raise MockServerError(f'Unable to bind mock server for {self.provider_name} '
                                  f'on {self.host_name}: {e}') from e
        self._httpd = httpd
        self.port = httpd.server_address[1]
        self.open_log()
        self._thread = threading.Thread(target=httpd.serve_forever, name=f'yakusoku-mock-{self.port}',
                                        daemon=True)
        self._thread.start()
        if not self.wait_until_ready():
            self.stop()
            raise MockServerError(f'Mock server for {self.provider_name} was not accepting connections '
                                  f'on port {self.port} after {self.READY_RETRIES} attempts')
        log.info(f'Mock server for {self.provider_name} listening at {self.url}')

    def wait_until_ready(self):
        for _ in range(self.READY_RETRIES):
            try:
                with socket.create_connection((self.host_name, self.port), timeout=self.READY_INTERVAL):
                    return True
            except OSError:
                time.sleep(self.READY_INTERVAL)
        return False

    def stop(self):
        httpd, thread = self._httpd, self._thread
        self._httpd = self._thread = None
        if httpd is None:
            return
        try:
            if thread is not None and thread.is_alive():
                httpd.shutdown()
                thread.join(self.STOP_TIMEOUT)
                if thread.is_alive():
                    log.warning(f'Mock server thread for {self.provider_name} did not finish '
                                f'within {self.STOP_TIMEOUT}s')
            httpd.server_close()
        except Exception:
            log.exception(f'Error stopping mock server for {self.provider_name}')
        finally:
            self.close_log()
        log.info(f'Mock server for {self.provider_name} on port {self.port} stopped')

    def open_log(self):
        if not self.log_dir:
            return
        os.makedirs(self.log_dir, exist_ok=True)
        self._log_handler = logging.FileHandler(os.path.join(self.log_dir, f'{self.provider_name}.log'))
        self.log.addHandler(self._log_handler)
        self._log_level = self.log.level
        self.log.setLevel(logging.DEBUG)

    def close_log(self):
        if self._log_handler is None:
            return
        self.log.removeHandler(self._log_handler)
        self._log_handler.close()
        self.log.setLevel(self._log_level)
        self._log_handler = None
        self._log_level = None


class MockHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, handler, server_address):
        self.handler = handler
        super().__init__(server_address, MockHTTPRequestHandler)


class MockHTTPRequestHandler(BaseHTTPRequestHandler):
    protocol_version = 'HTTP/1.1'

    def read_body(self):
        if self.headers.get('Transfer-Encoding', '').lower() == 'chunked':
            return self.read_chunked_body()
        length = self.headers.get('Content-Length')
        if not length:
            return b''
        return self.rfile.read(int(length))

    def read_chunked_body(self):
        chunks = []
        while True:
            size = int(self.rfile.readline().split(b';', 1)[0].strip(), 16)
            if not size:
                # trailer section ends with an empty line
                while self.rfile.readline() not in (b'\r\n', b'\n', b''):
                    pass
                return b''.join(chunks)
            chunks.append(self.rfile.read(size))
            self.rfile.readline()

    def run_request(self):
        handler = self.server.handler
        url_parts = urllib.parse.urlparse(self.path)
        try:
            body = self.read_body()
            request = ObservedRequest(self.command, url_parts.path, url_parts.query, self.headers, body)
            response = handler.handle(request)
        except Exception as e:
            handler.log.exception(f'Internal error handling {self.command} {url_parts.path}')
            response = MockResponse(500, {'Content-Type': 'text/plain; charset=utf-8'},
                                    f'Internal Error: {e}\n{traceback.format_exc()}'.encode('utf-8'))
            self.close_connection = True
        self.send_response(response.status)
        for header, value in response.headers.items():
            if header.lower() == 'content-length':
                continue
            self.send_header(header, value)
        self.send_header('Content-Length', str(len(response.body)))
        self.end_headers()
        if response.body and self.command != 'HEAD':
            self.wfile.write(response.body)

    def do_DELETE(self):
        self.run_request()

    def do_GET(self):
        self.run_request()

    def do_HEAD(self):
        self.run_request()

    def do_OPTIONS(self):
        self.run_request()

    def do_PATCH(self):
        self.run_request()

    def do_POST(self):
        self.run_request()

    def do_PUT(self):
        self.run_request()

    def log_message(self, format, *args):
        self.server.handler.log.info("MockServer %s" % format % args)
