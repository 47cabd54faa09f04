"""Tests for the descriptor store lifecycle and lookups."""

import asyncio

from layerhub.core.descriptor_store import DescriptorStore, StoreState
from layerhub.core.errors import ServicesFetchError
from layerhub.models.descriptor import LayerDescriptor
from tests.services_fixtures import STADTPLAN_MD_ID


def test_register_then_get_where():
    """Test that registered descriptors are found by id."""
    store = DescriptorStore()

    descriptor = store.register({"id": "42", "typ": "WMS", "name": "Registered"})

    assert isinstance(descriptor, LayerDescriptor)
    assert store.get_where({"id": "42"}) is descriptor
    assert store.get_where("42") is descriptor
    assert "42" in store


def test_register_replaces_existing_id():
    """Test last-write-wins for single registrations."""
    store = DescriptorStore()
    store.register({"id": "42", "name": "First"})
    store.register(LayerDescriptor.from_dict({"id": "42", "name": "Second"}))

    assert len(store) == 1
    assert store.get_where("42").name == "Second"


def test_get_where_misses_before_initialization():
    """Test that the synchronous lookup does not wait for the registry."""
    store = DescriptorStore()

    assert store.state is StoreState.UNINITIALIZED
    assert store.get_where({"id": "2001"}) is None


def test_load_skips_entries_without_id(services, caplog):
    """Test that entries that cannot be keyed are skipped."""
    store = DescriptorStore()

    loaded = store.load(services + [{"md_id": STADTPLAN_MD_ID}, "not a mapping"])

    assert len(loaded) == len(services)
    assert len(store) == len(services)
    assert "without id" in caplog.text


def test_initialize_from_list(services):
    """Test that an in-memory registry is ready at once but notifies through the loop."""
    calls = []

    async def scenario():
        store = DescriptorStore()
        future = store.initialize(services, lambda descriptors, error: calls.append((len(descriptors), error)))

        assert store.state is StoreState.READY
        assert calls == []  # never invoked inline

        result = await future
        await asyncio.sleep(0)
        return store, result

    store, result = asyncio.run(scenario())

    assert result.ok
    assert len(result.descriptors) == len(services)
    assert calls == [(len(services), None)]
    assert store.get_where("2001").name == "Stadtplan"


def test_initialize_twice_while_loading_notifies_in_order(services_server, services):
    """Test that concurrent initialize calls share one load and notify FIFO."""
    url = services_server.publish("services.json", services)
    calls = []

    async def scenario():
        store = DescriptorStore()
        first = store.initialize(url, lambda descriptors, error: calls.append(("first", len(descriptors), error)))
        second = store.initialize(
            services_server.url_for("other.json"),
            lambda descriptors, error: calls.append(("second", len(descriptors), error)),
        )

        assert first is second
        assert store.state is StoreState.LOADING
        assert calls == []

        await first
        await asyncio.sleep(0)
        return store

    store = asyncio.run(scenario())

    assert calls == [("first", len(services), None), ("second", len(services), None)]
    assert services_server.requests == ["/services.json"]
    assert store.state is StoreState.READY


def test_initialize_when_ready_still_runs_callback(services):
    """Test that a late initialize call gets its callback without reloading."""
    calls = []

    async def scenario():
        store = DescriptorStore()
        await store.initialize(services)
        store.initialize([{"id": "new"}], lambda descriptors, error: calls.append(len(descriptors)))
        await asyncio.sleep(0)
        return store

    store = asyncio.run(scenario())

    assert calls == [len(services)]
    assert "new" not in store


def test_preseeded_descriptors_survive_load(services):
    """Test that a bulk load does not overwrite ids registered earlier."""

    async def scenario():
        store = DescriptorStore()
        store.register({"id": "2001", "typ": "WMS", "name": "Override"})
        await store.initialize(services)
        return store

    store = asyncio.run(scenario())

    assert store.get_where("2001").name == "Override"
    assert len(store) == len(services)


def test_resolve_all_initializes_store(services_server, services):
    """Test that resolution loads the registry first."""
    url = services_server.publish("services.json", services)

    async def scenario():
        store = DescriptorStore()
        matched = await store.resolve_all({"typ": "WMS"}, url)
        return store, matched

    store, matched = asyncio.run(scenario())

    assert [descriptor.id for descriptor in matched] == ["2001", "453"]
    assert store.is_ready
    assert store.source == url


def test_resolve_all_empty_spec_returns_every_descriptor(services):
    """Test the match-all behaviour of an empty match spec."""

    async def scenario():
        store = DescriptorStore()
        store.initialize(services)
        store.register({"id": "extra", "typ": "WFS"})
        return store, await store.resolve_all({})

    store, matched = asyncio.run(scenario())

    assert matched == store.descriptors
    assert len(matched) == len(services) + 1


def test_resolve_all_dataset_lookup(services):
    """Test that md_id lookups find WMS descriptors through their datasets."""

    async def scenario():
        store = DescriptorStore()
        store.initialize(services)
        return await store.resolve_all({"md_id": STADTPLAN_MD_ID})

    matched = asyncio.run(scenario())

    assert [descriptor.id for descriptor in matched] == ["2001", "453"]


def test_resolve_all_degrades_to_empty_on_network_failure(services_server, caplog):
    """Test that an unavailable registry yields an empty list instead of an error."""
    url = services_server.url_for("missing.json")
    calls = []

    async def scenario():
        store = DescriptorStore()
        store.register({"id": "known", "typ": "WMS"})
        store.initialize(url, lambda descriptors, error: calls.append((descriptors, error)))
        matched = await store.resolve_all({})
        await asyncio.sleep(0)
        return store, matched

    store, matched = asyncio.run(scenario())

    assert matched == []
    assert len(calls) == 1
    assert calls[0][0] == []
    assert isinstance(calls[0][1], ServicesFetchError)
    assert store.state is StoreState.UNINITIALIZED
    assert "known" in store
    assert "missing.json" in caplog.text


def test_initialize_retries_after_failure(services_server, services):
    """Test that a failed load can be retried with a working source."""
    missing = services_server.url_for("missing.json")
    url = services_server.publish("services.json", services)

    async def scenario():
        store = DescriptorStore()
        failed = await store.initialize(missing)
        loaded = await store.initialize(url)
        return failed, loaded

    failed, loaded = asyncio.run(scenario())

    assert not failed.ok
    assert loaded.ok
    assert len(loaded.descriptors) == len(services)
