# File: tests/test_frontier.py
import threading

from site_indexer.crawler.frontier import Frontier

THREADS = 32


def test_claim_once():
    frontier = Frontier()
    assert frontier.claim("https://example.com/a") is True
    assert frontier.claim("https://example.com/a") is False
    assert len(frontier) == 1


def test_claim_uses_canonical_form():
    frontier = Frontier()
    assert frontier.claim("http://x/a/")
    assert not frontier.claim("HTTP://X/A")
    assert "http://X/a//" in frontier
    assert frontier.snapshot() == {"http://x/a"}


def test_concurrent_claims_of_colliding_urls_have_one_winner():
    frontier = Frontier()
    variants = ["http://x/a/", "HTTP://X/A", "http://X/a", "http://x/A//"]
    barrier = threading.Barrier(THREADS)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker(i: int) -> None:
        barrier.wait()
        won = frontier.claim(variants[i % len(variants)])
        with results_lock:
            results.append(won)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == THREADS
    assert results.count(True) == 1
    assert len(frontier) == 1


def test_contains_ignores_non_strings():
    frontier = Frontier()
    frontier.claim("http://x")
    assert 42 not in frontier
