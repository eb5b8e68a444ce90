import asyncio

import pytest

from wallet_assets.application.resolver import MetadataResolver
from wallet_assets.domain.cache import MetadataCache
from wallet_assets.domain.models import AssetRecord, NftFamilyRecord


@pytest.fixture
def caches():
    return MetadataCache(), MetadataCache()


def make_resolver(lookup, caches, **kwargs) -> MetadataResolver:
    assets, families = caches
    return MetadataResolver(lookup, assets, families, **kwargs)


def test_builds_asset_and_family_records(make_lookup, make_description, caches):
    lookup = make_lookup({"A": make_description("AAA", 9), "F": make_description("FAM")})
    resolver = make_resolver(lookup, caches)

    report = asyncio.run(resolver.resolve(["A"], ["F"]))

    assets, families = caches
    assert report.resolved == ("A", "F")
    assert assets.get("A") == AssetRecord(id="A", name="AAA token", symbol="AAA", denomination=9)
    assert families.get("F") == NftFamilyRecord(id="F", name="FAM token", symbol="FAM")
    assert "F" not in assets


def test_one_lookup_per_id_within_a_round(make_lookup, make_description, caches):
    lookup = make_lookup({"A": make_description("AAA")})
    resolver = make_resolver(lookup, caches)

    asyncio.run(resolver.resolve(["A", "A", "A"], ["A"]))

    assets, families = caches
    assert lookup.calls == ["A"]
    assert "A" in assets
    assert "A" in families


def test_known_ids_are_not_looked_up(make_lookup, make_description, caches):
    lookup = make_lookup({"A": make_description("AAA")})
    assets, _ = caches
    assets.insert_if_absent(AssetRecord(id="A", name="cached", symbol="C"))
    resolver = make_resolver(lookup, caches)

    report = asyncio.run(resolver.resolve(["A"]))

    assert lookup.calls == []
    assert report.resolved == ()
    assert assets.get("A").name == "cached"


def test_failed_lookup_does_not_block_siblings(make_lookup, make_description, caches):
    lookup = make_lookup({"A": make_description("AAA"), "C": make_description("CCC")})
    resolver = make_resolver(lookup, caches)

    report = asyncio.run(resolver.resolve(["A", "B", "C"]))

    assets, _ = caches
    assert report.resolved == ("A", "C")
    assert report.failed == ("B",)
    assert report.has_failures()
    assert assets.ids() == ["A", "C"]
    assert resolver.in_flight == frozenset()


def test_failed_id_is_retried_next_round(make_lookup, make_description, caches):
    lookup = make_lookup({})
    resolver = make_resolver(lookup, caches)
    asyncio.run(resolver.resolve(["B"]))

    lookup.descriptions["B"] = make_description("BBB")
    report = asyncio.run(resolver.resolve(["B"]))

    assert lookup.calls == ["B", "B"]
    assert report.resolved == ("B",)


def test_in_flight_ids_are_not_fetched_twice(make_lookup, make_description, caches):
    lookup = make_lookup({"A": make_description("AAA")})
    resolver = make_resolver(lookup, caches)

    async def scenario():
        lookup.gate = asyncio.Event()
        first = asyncio.create_task(resolver.resolve(["A"]))
        await asyncio.sleep(0)
        assert resolver.in_flight == frozenset({"A"})
        second = await resolver.resolve(["A"])
        lookup.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert lookup.calls == ["A"]
    assert first.resolved == ("A",)
    assert second.skipped == ("A",)
    assert second.resolved == ()


def test_results_fetched_before_invalidate_are_dropped(make_lookup, make_description, caches):
    lookup = make_lookup({"A": make_description("AAA")})
    resolver = make_resolver(lookup, caches)

    async def scenario():
        lookup.gate = asyncio.Event()
        pending = asyncio.create_task(resolver.resolve(["A"]))
        await asyncio.sleep(0)
        resolver.invalidate()
        lookup.gate.set()
        return await pending

    report = asyncio.run(scenario())

    assets, _ = caches
    assert "A" not in assets
    assert report.resolved == ()


def test_any_lookup_error_is_a_per_id_failure(make_lookup, make_description, caches):
    class BrokenLookup(type(make_lookup())):
        async def describe(self, asset_id):
            if asset_id == "X":
                raise ConnectionError("explorer down")
            return await super().describe(asset_id)

    lookup = BrokenLookup({"A": make_description("AAA")})
    resolver = make_resolver(lookup, caches)

    report = asyncio.run(resolver.resolve(["X", "A"]))

    assets, _ = caches
    assert report.resolved == ("A",)
    assert report.failed == ("X",)
    assert "A" in assets
    assert "X" not in assets
    assert resolver.in_flight == frozenset()


def test_rejects_non_positive_concurrency(make_lookup, caches):
    with pytest.raises(ValueError):
        make_resolver(make_lookup(), caches, max_concurrent_lookups=0)
