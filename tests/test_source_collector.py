"""Tests for concurrent bureau payload collection."""

import threading
import time

import pytest

from pipeline.source_collector import collect_source_payloads
from schemas.source import SOURCE_ORDER, Bureau

from conftest import make_payload


class TestCollectSourcePayloads:

    def test_all_sources_returned_in_order(self):
        fetchers = {source: (lambda s=source: make_payload(score=700)) for source in SOURCE_ORDER}
        results = collect_source_payloads(fetchers, timeout=5)
        assert list(results) == list(SOURCE_ORDER)
        assert all(payload is not None for payload in results.values())

    def test_missing_fetcher_is_unavailable(self):
        results = collect_source_payloads({Bureau.TRANSUNION: make_payload}, timeout=5)
        assert results[Bureau.EXPERIAN] is None
        assert results[Bureau.TRANSUNION] is not None
        assert results[Bureau.EQUIFAX] is None

    def test_no_fetchers(self):
        assert collect_source_payloads({}) == {source: None for source in SOURCE_ORDER}

    def test_exception_isolated_to_its_source(self):
        def broken():
            raise ConnectionError("bureau down")

        results = collect_source_payloads(
            {Bureau.EXPERIAN: broken, Bureau.TRANSUNION: make_payload, Bureau.EQUIFAX: make_payload},
            timeout=5,
        )
        assert results[Bureau.EXPERIAN] is None
        assert results[Bureau.TRANSUNION] is not None
        assert results[Bureau.EQUIFAX] is not None

    @pytest.mark.parametrize("bad", [[], "text", 42])
    def test_non_object_payload_is_unavailable(self, bad):
        results = collect_source_payloads({Bureau.EQUIFAX: lambda: bad}, timeout=5)
        assert results[Bureau.EQUIFAX] is None

    def test_slow_source_times_out_without_blocking_others(self):
        release = threading.Event()

        def slow():
            release.wait(5)
            return make_payload()

        started = time.monotonic()
        try:
            results = collect_source_payloads(
                {Bureau.EXPERIAN: slow, Bureau.TRANSUNION: make_payload},
                timeout=0.2,
            )
        finally:
            release.set()

        assert time.monotonic() - started < 2
        assert results[Bureau.EXPERIAN] is None
        assert results[Bureau.TRANSUNION] is not None
