import json
import socket

import pytest

from responder import client
from responder.client import LoadGenerator


def unused_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(('127.0.0.1', 0))
        return sock.getsockname()[1]


def test_concurrent_mixed_load_all_succeed(responder):
    generator = LoadGenerator(responder.url)
    metrics = generator.run(
        num_requests=40,
        concurrency=10,
        methods=['GET', 'POST', 'PUT', 'HEAD'],
        paths=['/', '/anything/at/all', 'no-slash'],
        data=b"payload",
    )

    assert [m["request_id"] for m in metrics] == list(range(1, 41))
    assert all(m["result"] == "success" for m in metrics)
    assert {m["method"] for m in metrics} == {'GET', 'POST', 'PUT', 'HEAD'}
    assert '/no-slash' in {m["path"] for m in metrics}

    stats = generator.summary()
    assert stats["total_requests"] == 40
    assert stats["successful"] == 40
    assert stats["min_latency_ms"] <= stats["p50_latency_ms"] <= stats["max_latency_ms"]


def test_unexpected_body_is_a_mismatch(responder):
    generator = LoadGenerator(responder.url, expected_body=b"Failure!\n")
    metric = generator.make_request(1)

    assert metric["result"] == "mismatch"
    assert metric["status_code"] == 200
    assert metric["body"] == "Success!\n"


def test_refused_connection_is_an_error():
    generator = LoadGenerator(f"http://127.0.0.1:{unused_port()}", timeout_ms=1000)
    metric = generator.make_request(7)

    assert metric["result"] == "error"
    assert metric["status_code"] is None
    assert "error" in metric


def test_stopped_generator_sends_nothing(responder):
    generator = LoadGenerator(responder.url)
    generator.running = False

    assert generator.run(num_requests=5) == []
    assert generator.summary() == {
        "total_requests": 0,
        "successful": 0,
        "mismatches": 0,
        "timeouts": 0,
        "errors": 0,
    }


def test_main_exports_metrics(responder, tmp_path, monkeypatch):
    monkeypatch.setattr(client.signal, 'signal', lambda *args: None)
    output = tmp_path / "metrics.json"

    client.main([
        '--url', responder.url,
        '--requests', '6',
        '--concurrency', '3',
        '--method', 'GET',
        '--method', 'DELETE',
        '--path', '/x',
        '--output', str(output),
    ])

    metrics = json.loads(output.read_text())
    assert len(metrics) == 6
    assert {m["method"] for m in metrics} == {'GET', 'DELETE'}
    assert all(m["result"] == "success" for m in metrics)


def test_main_exits_nonzero_when_server_is_down(tmp_path, monkeypatch):
    monkeypatch.setattr(client.signal, 'signal', lambda *args: None)
    output = tmp_path / "metrics.json"

    with pytest.raises(SystemExit) as exc_info:
        client.main([
            '--url', f"http://127.0.0.1:{unused_port()}",
            '--requests', '2',
            '--timeout', '1000',
            '--output', str(output),
        ])

    assert exc_info.value.code == 1
    assert [m["result"] for m in json.loads(output.read_text())] == ["error", "error"]


@pytest.mark.parametrize("kwargs", [{"methods": []}, {"paths": ()}])
def test_run_rejects_empty_rotation(responder, kwargs):
    generator = LoadGenerator(responder.url)

    with pytest.raises(ValueError):
        generator.run(num_requests=3, **kwargs)

    assert generator.metrics == []
