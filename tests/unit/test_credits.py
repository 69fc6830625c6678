# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the credits feed fetcher."""

from __future__ import annotations

import httpx
import pytest

from pnode_watch.core.credits import CreditsFetcher, parse_credits
from pnode_watch.core.errors import ParseError
from tests.unit.conftest import FakeClock, FakeNetwork


class TestParseCredits:
    def test_basic(self):
        data = {"pods_credits": [{"pod_id": "abc", "credits": 42}, {"pod_id": "def", "credits": 0}]}
        assert parse_credits(data) == {"abc": 42, "def": 0}

    def test_numeric_strings_and_floats(self):
        data = {
            "pods_credits": [
                {"pod_id": "a", "credits": "17"},
                {"pod_id": "b", "credits": "3.0"},
                {"pod_id": "c", "credits": 9.7},
            ]
        }
        assert parse_credits(data) == {"a": 17, "b": 3, "c": 9}

    def test_skips_unusable_entries(self):
        data = {
            "pods_credits": [
                {"credits": 5},
                {"pod_id": "", "credits": 5},
                {"pod_id": "x", "credits": "lots"},
                {"pod_id": "y", "credits": None},
                {"pod_id": "z", "credits": -1},
                "not-an-object",
                {"pod_id": "ok", "credits": 1},
            ]
        }
        assert parse_credits(data) == {"ok": 1}

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "inf", "NaN", "1e400"])
    def test_non_finite_values_skipped(self, value):
        data = {"pods_credits": [{"pod_id": "bad", "credits": value}, {"pod_id": "ok", "credits": 2}]}
        assert parse_credits(data) == {"ok": 2}

    @pytest.mark.parametrize("data", [[], None, "x", {}, {"pods_credits": {"a": 1}}])
    def test_bad_shape_raises(self, data):
        with pytest.raises(ParseError):
            parse_credits(data)


class TestCreditsFetcher:
    @pytest.mark.asyncio
    async def test_fetch_and_cache(
        self, network: FakeNetwork, credits_fetcher: CreditsFetcher, clock: FakeClock
    ):
        network.credits = {"pods_credits": [{"pod_id": "abc", "credits": 42}]}

        lookup = await credits_fetcher.get_credits()

        assert lookup.credits == {"abc": 42}
        assert lookup.info.fetched is True
        assert lookup.info.cached is False
        assert lookup.info.sample == [("abc", 42)]
        assert network.credits_calls == 1

        clock.advance(299)
        again = await credits_fetcher.get_credits()
        assert again.credits == {"abc": 42}
        assert again.info.cached is True
        assert network.credits_calls == 1

    @pytest.mark.asyncio
    async def test_refetches_after_ttl(
        self, network: FakeNetwork, credits_fetcher: CreditsFetcher, clock: FakeClock
    ):
        network.credits = {"pods_credits": [{"pod_id": "abc", "credits": 1}]}
        await credits_fetcher.get_credits()

        network.credits = {"pods_credits": [{"pod_id": "abc", "credits": 2}]}
        clock.advance(300)
        lookup = await credits_fetcher.get_credits()

        assert lookup.credits == {"abc": 2}
        assert network.credits_calls == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "behavior",
        ["timeout", "refused", httpx.Response(502), httpx.Response(200, text="oops"), {"x": 1}],
    )
    async def test_failure_returns_empty_and_does_not_cache(
        self, network: FakeNetwork, credits_fetcher: CreditsFetcher, behavior
    ):
        network.credits = behavior

        lookup = await credits_fetcher.get_credits()

        assert lookup.credits == {}
        assert lookup.info.fetched is False
        assert lookup.info.error
        assert credits_fetcher.cache.entry is None

        # A later request retries immediately.
        network.credits = {"pods_credits": [{"pod_id": "abc", "credits": 5}]}
        retry = await credits_fetcher.get_credits()
        assert retry.credits == {"abc": 5}
        assert network.credits_calls == 2

    @pytest.mark.asyncio
    async def test_empty_feed_is_cached(self, network: FakeNetwork, credits_fetcher: CreditsFetcher):
        network.credits = {"pods_credits": []}
        lookup = await credits_fetcher.get_credits()
        assert lookup.credits == {}
        assert lookup.info.fetched is True
        assert credits_fetcher.cache.get_if_fresh() is not None

    @pytest.mark.asyncio
    async def test_one_shot_client(self, settings, monkeypatch):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"pods_credits": [{"pod_id": "p", "credits": 3}]})
        )
        real_client = httpx.AsyncClient

        def client_factory(**kwargs):
            return real_client(transport=transport, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client_factory)

        fetcher = CreditsFetcher(settings)
        assert await fetcher.fetch() == {"p": 3}

    @pytest.mark.asyncio
    async def test_non_finite_feed_values_from_wire(
        self, network: FakeNetwork, credits_fetcher: CreditsFetcher
    ):
        network.credits = httpx.Response(
            200,
            content=b'{"pods_credits": [{"pod_id": "a", "credits": 1e400},'
            b' {"pod_id": "b", "credits": NaN}, {"pod_id": "c", "credits": Infinity},'
            b' {"pod_id": "d", "credits": 4}]}',
            headers={"Content-Type": "application/json"},
        )

        lookup = await credits_fetcher.get_credits()

        assert lookup.credits == {"d": 4}
        assert lookup.info.fetched is True
