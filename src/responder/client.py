#!/usr/bin/env python3
"""
Static Responder Load Client

Sends requests to a running static responder and checks that every answer
carries the fixed body.
"""
import requests
import time
import json
import sys
import signal
import threading
from typing import List, Dict, Optional, Sequence

from .server import HOST, PORT, BODY


class LoadGenerator:
    def __init__(self, server_url: str, timeout_ms: int = 5000, expected_body: bytes = BODY):
        """
        Initialize the load generator.

        Args:
            server_url: Base URL of the server, without a trailing path
            timeout_ms: Request timeout in milliseconds
            expected_body: Body a successful response must carry
        """
        self.server_url = server_url.rstrip('/')
        self.timeout_s = timeout_ms / 1000.0
        self.expected_body = expected_body
        self.metrics: List[Dict] = []
        self.running = True
        self._lock = threading.Lock()

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        print("\nStopping load generator...", file=sys.stderr)
        self.running = False

    def make_request(self, request_id: int, method: str = 'GET', path: str = '/',
                     data: Optional[bytes] = None) -> Dict:
        """
        Make a single HTTP request and record metrics.

        Args:
            request_id: Unique identifier for this request
            method: HTTP method to send
            path: Request path, appended to the server URL
            data: Optional request body

        Returns:
            Dictionary containing request metrics
        """
        if not path.startswith('/'):
            path = '/' + path
        start_time = time.time()

        metric = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "start_time": start_time,
        }

        try:
            response = requests.request(
                method,
                self.server_url + path,
                data=data,
                timeout=self.timeout_s
            )
        except requests.exceptions.Timeout:
            metric["result"] = "timeout"
            metric["status_code"] = None
        except requests.exceptions.RequestException as e:
            metric["result"] = "error"
            metric["status_code"] = None
            metric["error"] = str(e)
        else:
            expected = b"" if method.upper() == 'HEAD' else self.expected_body
            if response.status_code == 200 and response.content == expected:
                metric["result"] = "success"
            else:
                metric["result"] = "mismatch"
                metric["body"] = response.content.decode('utf-8', errors='replace')
            metric["status_code"] = response.status_code

        end_time = time.time()
        metric["end_time"] = end_time
        metric["latency_ms"] = (end_time - start_time) * 1000

        outcome = metric["result"].upper()
        if metric["status_code"] is not None:
            outcome = f"HTTP {metric['status_code']} {outcome}"
        print(f"Request {request_id:4d}: {metric['latency_ms']:7.2f} ms - {method} {path} - {outcome}",
              file=sys.stderr)

        return metric

    def _record(self, request_id: int, method: str, path: str, data: Optional[bytes]):
        metric = self.make_request(request_id, method, path, data)
        with self._lock:
            self.metrics.append(metric)

    def run(self, num_requests: int = 10, concurrency: int = 1,
            methods: Sequence[str] = ('GET',), paths: Sequence[str] = ('/',),
            data: Optional[bytes] = None) -> List[Dict]:
        """
        Issue requests in batches of concurrent threads.

        Methods and paths are cycled through in order. Bodies are only sent
        with methods other than GET and HEAD.

        Args:
            num_requests: Total number of requests to make
            concurrency: Requests in flight per batch
            methods: HTTP methods to cycle through
            paths: Request paths to cycle through
            data: Optional request body

        Returns:
            Collected metrics ordered by request_id

        Raises:
            ValueError: methods or paths is empty
        """
        if not methods or not paths:
            raise ValueError("methods and paths must be non-empty")
        concurrency = max(1, concurrency)
        request_id = 0

        print(f"Starting load generation to {self.server_url}", file=sys.stderr)
        print(f"Requests: {num_requests}, concurrency: {concurrency}", file=sys.stderr)

        while self.running and request_id < num_requests:
            batch = []
            for _ in range(min(concurrency, num_requests - request_id)):
                method = methods[request_id % len(methods)]
                path = paths[request_id % len(paths)]
                request_id += 1
                body = data if method.upper() not in ('GET', 'HEAD') else None
                batch.append(threading.Thread(
                    target=self._record,
                    args=(request_id, method, path, body)
                ))

            for thread in batch:
                thread.start()
            for thread in batch:
                thread.join()

        self.metrics.sort(key=lambda m: m["request_id"])
        self._print_summary()
        return self.metrics

    def summary(self) -> Dict:
        """Counts per result and latency statistics."""
        total = len(self.metrics)
        stats = {
            "total_requests": total,
            "successful": len([m for m in self.metrics if m["result"] == "success"]),
            "mismatches": len([m for m in self.metrics if m["result"] == "mismatch"]),
            "timeouts": len([m for m in self.metrics if m["result"] == "timeout"]),
            "errors": len([m for m in self.metrics if m["result"] == "error"]),
        }
        if total == 0:
            return stats

        sorted_latencies = sorted(m["latency_ms"] for m in self.metrics)
        stats.update({
            "min_latency_ms": sorted_latencies[0],
            "avg_latency_ms": sum(sorted_latencies) / total,
            "max_latency_ms": sorted_latencies[-1],
            "p50_latency_ms": sorted_latencies[int(total * 0.50)],
            "p95_latency_ms": sorted_latencies[int(total * 0.95)],
            "p99_latency_ms": sorted_latencies[int(total * 0.99)],
        })
        return stats

    def _print_summary(self):
        """Print summary statistics."""
        if not self.metrics:
            return

        stats = self.summary()
        total = stats["total_requests"]

        print("\n=== Load Generation Summary ===", file=sys.stderr)
        print(f"Total requests:    {total}", file=sys.stderr)
        for label, key in (("Successful", "successful"), ("Mismatches", "mismatches"),
                           ("Timeouts", "timeouts"), ("Errors", "errors")):
            print(f"{label + ':':<19}{stats[key]} ({stats[key]/total*100:.1f}%)", file=sys.stderr)
        print("\nLatency Statistics:", file=sys.stderr)
        print(f"  Min:     {stats['min_latency_ms']:7.2f} ms", file=sys.stderr)
        print(f"  Avg:     {stats['avg_latency_ms']:7.2f} ms", file=sys.stderr)
        print(f"  Max:     {stats['max_latency_ms']:7.2f} ms", file=sys.stderr)
        print(f"  P50:     {stats['p50_latency_ms']:7.2f} ms", file=sys.stderr)
        print(f"  P95:     {stats['p95_latency_ms']:7.2f} ms", file=sys.stderr)
        print(f"  P99:     {stats['p99_latency_ms']:7.2f} ms", file=sys.stderr)

    def export_metrics(self, output_path: str = "client_metrics.json"):
        """Export metrics to JSON file."""
        with open(output_path, 'w') as f:
            json.dump(self.metrics, f, indent=2)
        print(f"\nMetrics exported to {output_path}", file=sys.stderr)


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Static Responder Load Client")
    parser.add_argument(
        '--url',
        default=f'http://{HOST}:{PORT}',
        help='Target server URL'
    )
    parser.add_argument(
        '--requests',
        type=int,
        default=10,
        help='Number of requests to make'
    )
    parser.add_argument(
        '--concurrency',
        type=int,
        default=1,
        help='Requests in flight at once'
    )
    parser.add_argument(
        '--method',
        action='append',
        dest='methods',
        help='HTTP method to send (repeatable, default GET)'
    )
    parser.add_argument(
        '--path',
        action='append',
        dest='paths',
        help='Request path (repeatable, default /)'
    )
    parser.add_argument(
        '--data',
        help='Request body for methods other than GET and HEAD'
    )
    parser.add_argument(
        '--timeout',
        type=int,
        default=5000,
        help='Request timeout (milliseconds)'
    )
    parser.add_argument(
        '--output',
        default='client_metrics.json',
        help='Output JSON file'
    )

    args = parser.parse_args(argv)

    generator = LoadGenerator(server_url=args.url, timeout_ms=args.timeout)
    generator.install_signal_handlers()

    try:
        generator.run(
            num_requests=args.requests,
            concurrency=args.concurrency,
            methods=args.methods or ['GET'],
            paths=args.paths or ['/'],
            data=args.data.encode() if args.data is not None else None
        )
    finally:
        generator.export_metrics(args.output)

    if generator.summary()["successful"] != len(generator.metrics):
        sys.exit(1)


if __name__ == '__main__':
    main()
