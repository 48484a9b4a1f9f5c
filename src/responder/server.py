#!/usr/bin/env python3
"""
Static Responder HTTP Server

Binds to a fixed loopback address and answers every request, whatever the
method or path, with the same plain-text body.
"""
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
import sys


HOST = '127.0.0.1'
PORT = 5555
BODY = b"Success!\n"

# Upper bound for a single chunk-size or trailer line.
_MAX_LINE = 65536
_HEX_DIGITS = b"0123456789abcdefABCDEF"


class BindFailure(OSError):
    """The listening socket could not be acquired."""

    def __init__(self, host, port, cause):
        super().__init__(getattr(cause, 'errno', None), str(cause))
        self.host = host
        self.port = port
        self.cause = cause

    def __str__(self):
        reason = getattr(self.cause, 'strerror', None) or str(self.cause)
        return f"listen tcp {self.host}:{self.port}: bind: {reason}"


class StaticHandler(BaseHTTPRequestHandler):
    protocol_version = 'HTTP/1.1'

    def do_GET(self):
        self._respond()

    do_HEAD = do_POST = do_PUT = do_DELETE = do_GET
    do_PATCH = do_OPTIONS = do_TRACE = do_CONNECT = do_GET

    def __getattr__(self, name):
        """
        Dispatch hook for extension methods.

        handle_one_request looks up 'do_' + command; tokens without a do_*
        method of their own get the same response instead of a 501.
        """
        if name.startswith('do_'):
            return self._respond
        raise AttributeError(name)

    def _respond(self):
        """Drain the request body and write the fixed response."""
        self._discard_body()

        self.send_response(200)
        self.send_header('Content-Type', 'text/plain; charset=utf-8')
        self.send_header('Content-Length', str(len(BODY)))
        if self.close_connection:
            self.send_header('Connection', 'close')
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(BODY)

    def _discard_body(self):
        """
        Consume the request body so the next request on a persistent
        connection starts at a request line.

        When the body framing cannot be followed the connection is marked
        for closing after the response instead.
        """
        transfer_encoding = self.headers.get('Transfer-Encoding')
        if transfer_encoding is not None:
            if 'chunked' in transfer_encoding.lower():
                self._discard_chunked()
            else:
                # body runs until the peer closes
                self.close_connection = True
            return

        length = self.headers.get('Content-Length')
        if length is None:
            return
        try:
            remaining = int(length)
        except ValueError:
            self.close_connection = True
            return
        if remaining < 0:
            self.close_connection = True
            return
        self._discard_exactly(remaining)

    def _discard_chunked(self):
        while True:
            line = self._read_line()
            if line is None:
                return
            token = line.split(b';', 1)[0].strip()
            if not token or token.strip(_HEX_DIGITS):
                self.close_connection = True
                return
            size = int(token, 16)

            if size == 0:
                # Trailer section ends at the first empty line
                while True:
                    trailer = self._read_line()
                    if trailer is None:
                        return
                    if trailer in (b'\r\n', b'\n'):
                        return

            if not self._discard_exactly(size):
                return
            if self._read_line() not in (b'\r\n', b'\n'):
                self.close_connection = True
                return

    def _read_line(self):
        line = self.rfile.readline(_MAX_LINE + 1)
        if not line or len(line) > _MAX_LINE:
            self.close_connection = True
            return None
        return line

    def _discard_exactly(self, count):
        while count > 0:
            chunk = self.rfile.read(min(count, 65536))
            if not chunk:
                self.close_connection = True
                return False
            count -= len(chunk)
        return True

    def log_request(self, code='-', size='-'):
        return  # no access log

    def log_message(self, format, *args):
        """Only transport errors reach here once access logging is off."""
        sys.stderr.write(f"{self.address_string()} - {format % args}\n")


class StaticResponderServer(ThreadingHTTPServer):
    """
    Listening server for StaticHandler.

    The socket is bound in the constructor; a failed bind raises BindFailure
    and leaves no socket behind. Each connection is served on its own daemon
    thread.
    """

    daemon_threads = True
    allow_reuse_port = False

    def __init__(self, host=HOST, port=PORT):
        try:
            super().__init__((host, port), StaticHandler)
        except OSError as e:
            raise BindFailure(host, port, e) from e


def start():
    """
    Bind the fixed address and serve until the process is terminated.

    A bind failure is fatal: the error goes to stderr and the process exits
    with status 1.
    """
    try:
        server = StaticResponderServer(HOST, PORT)
    except BindFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Server listening on http://{HOST}:{PORT}", file=sys.stderr)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


def main():
    start()


if __name__ == '__main__':
    main()
