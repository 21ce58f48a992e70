import asyncio

import httpx

from load_test import percentile, run_load, summarize


def test_percentile_uses_floor_rank():
    latencies = list(range(1, 101))
    assert percentile(latencies, 0.95) == 95
    assert percentile(latencies, 0.99) == 99
    assert percentile([5.0], 0.95) == 0
    assert percentile([], 0.99) == 0


def test_summarize_counts_statuses_and_errors():
    report = summarize("http://x/", [
        {"status": 200, "ms": 10.0},
        {"status": 200, "ms": 20.0},
        {"status": 503, "ms": 30.0},
        {"error": "refused", "ms": 40.0},
    ])
    assert report["requests"] == 4
    assert report["avgMs"] == 25
    assert report["errors"] == 1
    assert report["statusCounts"] == {"200": 2, "503": 1}


def test_run_load_against_mock_transport():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"status": "OK"})

    report = asyncio.run(run_load("http://local.test/api/health", 20, transport=httpx.MockTransport(handler)))

    assert len(seen) == 20
    assert report["statusCounts"] == {"200": 20}
    assert report["errors"] == 0
