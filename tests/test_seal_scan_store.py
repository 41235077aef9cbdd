"""Seal scan store: confirmed-only additions, rollback on removal, refresh."""

from __future__ import annotations

import asyncio

import pytest

from trolleyseal.equipment import EquipmentKind
from trolleyseal.errors import PersistFailed, RemoteUnavailable, ValidationFailed
from trolleyseal.services.seal_scans import SealScanStore

FLIGHT_ID = 7


def make_store(scan_repo, feed, kind=None) -> SealScanStore:
    return SealScanStore(scan_repo, feed, FLIGHT_ID, kind, timeout=1)


def test_adds_are_returned_in_confirmation_order(scan_repo, feed):
    store = make_store(scan_repo, feed)
    numbers = ["Z900", "A100", "M500", "B200"]

    async def scenario():
        for number in numbers:
            await store.add(EquipmentKind.HALF_TROLLEY, number, acting_user=1)
        return await store.load_all()

    scans = asyncio.run(scenario())

    assert [scan.seal_number for scan in scans] == numbers
    assert [scan.seal_number for scan in store.scans] == numbers


@pytest.mark.parametrize("blank", ["", "   ", "\t"])
def test_blank_seal_makes_no_remote_call(scan_repo, feed, blank):
    store = make_store(scan_repo, feed)

    result = asyncio.run(store.add(EquipmentKind.FULL_TROLLEY, blank, acting_user=1))

    assert result is None
    assert scan_repo.calls == []
    assert store.scans == ()


def test_seal_number_is_trimmed(scan_repo, feed):
    store = make_store(scan_repo, feed)

    record = asyncio.run(store.add(EquipmentKind.FULL_TROLLEY, "  AA111 ", acting_user=1))

    assert record.seal_number == "AA111"


def test_add_requires_a_signed_in_user(scan_repo, feed):
    store = make_store(scan_repo, feed)

    with pytest.raises(ValidationFailed):
        asyncio.run(store.add(EquipmentKind.FULL_TROLLEY, "AA111", acting_user=None))
    assert scan_repo.calls == []


def test_failed_add_leaves_cache_untouched(scan_repo, feed):
    store = make_store(scan_repo, feed)
    asyncio.run(store.add(EquipmentKind.FULL_TROLLEY, "AA111", acting_user=1))
    scan_repo.fail_writes = True

    with pytest.raises(PersistFailed):
        asyncio.run(store.add(EquipmentKind.FULL_TROLLEY, "AA112", acting_user=1))

    assert [scan.seal_number for scan in store.scans] == ["AA111"]


def test_filtered_store_rejects_other_kinds(scan_repo, feed):
    store = make_store(scan_repo, feed, EquipmentKind.FOOD_CONTAINER)

    with pytest.raises(ValidationFailed):
        asyncio.run(store.add(EquipmentKind.FULL_TROLLEY, "AA111", acting_user=1))


def test_filtered_load_only_returns_matching_kind(scan_repo, feed):
    writer = make_store(scan_repo, feed)
    reader = make_store(scan_repo, feed, EquipmentKind.FOOD_CONTAINER)

    async def scenario():
        await writer.add(EquipmentKind.FULL_TROLLEY, "AA111", acting_user=1)
        await writer.add(EquipmentKind.FOOD_CONTAINER, "BB200", acting_user=1)
        return await reader.load_all()

    scans = asyncio.run(scenario())

    assert [scan.seal_number for scan in scans] == ["BB200"]


def test_failed_load_keeps_previous_state(scan_repo, feed):
    store = make_store(scan_repo, feed)
    asyncio.run(store.add(EquipmentKind.HALF_TROLLEY, "H1", acting_user=1))
    scan_repo.fail_reads = True

    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.load_all())

    assert [scan.seal_number for scan in store.scans] == ["H1"]


def test_remove_deletes_remotely_and_locally(scan_repo, feed):
    store = make_store(scan_repo, feed)

    async def scenario():
        first = await store.add(EquipmentKind.HALF_TROLLEY, "H1", acting_user=1)
        await store.add(EquipmentKind.HALF_TROLLEY, "H2", acting_user=1)
        await store.remove(first.id)
        return await store.load_all()

    scans = asyncio.run(scenario())

    assert [scan.seal_number for scan in scans] == ["H2"]


def test_failed_remove_restores_entry_in_place(scan_repo, feed):
    store = make_store(scan_repo, feed)

    async def scenario():
        await store.add(EquipmentKind.HALF_TROLLEY, "H1", acting_user=1)
        middle = await store.add(EquipmentKind.HALF_TROLLEY, "H2", acting_user=1)
        await store.add(EquipmentKind.HALF_TROLLEY, "H3", acting_user=1)
        scan_repo.fail_writes = True
        await store.remove(middle.id)

    with pytest.raises(PersistFailed):
        asyncio.run(scenario())

    assert [scan.seal_number for scan in store.scans] == ["H1", "H2", "H3"]


def test_removing_missing_seal_is_a_no_op(scan_repo, feed):
    store = make_store(scan_repo, feed)

    asyncio.run(store.remove(999))

    assert scan_repo.calls == ["delete"]


def test_remove_leaves_other_flights_seals_alone(scan_repo, feed):
    store = make_store(scan_repo, feed)
    other_flight = SealScanStore(scan_repo, feed, FLIGHT_ID + 1, timeout=1)

    async def scenario():
        foreign = await other_flight.add(EquipmentKind.HALF_TROLLEY, "X1", acting_user=2)
        await store.remove(foreign.id)
        return await other_flight.load_all()

    assert [scan.seal_number for scan in asyncio.run(scenario())] == ["X1"]


def test_duplicate_submit_while_pending_is_ignored(scan_repo, feed):
    store = make_store(scan_repo, feed)
    original_insert = scan_repo.insert

    async def slow_insert(*args, **kwargs):
        await asyncio.sleep(0.01)
        return await original_insert(*args, **kwargs)

    scan_repo.insert = slow_insert

    async def scenario():
        return await asyncio.gather(
            store.add(EquipmentKind.HALF_TROLLEY, "H1", acting_user=1),
            store.add(EquipmentKind.HALF_TROLLEY, "H1", acting_user=1),
        )

    first, second = asyncio.run(scenario())

    assert first is not None
    assert second is None
    assert len(scan_repo.rows) == 1


def test_subscription_refreshes_on_remote_change(scan_repo, feed):
    watcher = make_store(scan_repo, feed)
    other_device = make_store(scan_repo, feed)
    seen: list[list[str]] = []

    async def scenario():
        refreshed = asyncio.Event()

        def on_change(scans):
            seen.append([scan.seal_number for scan in scans])
            refreshed.set()

        handle = watcher.subscribe(on_change)
        async with handle:
            await other_device.add(EquipmentKind.FULL_TROLLEY, "AA111", acting_user=2)
            await asyncio.wait_for(refreshed.wait(), timeout=1)
        return handle

    handle = asyncio.run(scenario())

    assert seen[-1] == ["AA111"]
    assert [scan.seal_number for scan in watcher.scans] == ["AA111"]
    assert not handle.active
    assert feed.subscriber_count == 0


def test_subscription_ignores_other_flights(scan_repo, feed):
    watcher = make_store(scan_repo, feed)
    elsewhere = SealScanStore(scan_repo, feed, FLIGHT_ID + 1)
    seen = []

    async def scenario():
        handle = watcher.subscribe(seen.append)
        await elsewhere.add(EquipmentKind.FULL_TROLLEY, "X1", acting_user=1)
        await asyncio.sleep(0.01)
        await handle.aclose()

    asyncio.run(scenario())

    assert seen == []
    assert "list" not in scan_repo.calls


def test_refresh_failure_keeps_subscription_alive(scan_repo, feed):
    watcher = make_store(scan_repo, feed)
    writer = make_store(scan_repo, feed)
    seen = []

    async def scenario():
        refreshed = asyncio.Event()

        async def on_change(scans):
            seen.append(len(scans))
            refreshed.set()

        async with watcher.subscribe(on_change):
            scan_repo.fail_reads = True
            await writer.add(EquipmentKind.HALF_TROLLEY, "H1", acting_user=1)
            await asyncio.sleep(0.01)
            scan_repo.fail_reads = False
            await writer.add(EquipmentKind.HALF_TROLLEY, "H2", acting_user=1)
            await asyncio.wait_for(refreshed.wait(), timeout=1)

    asyncio.run(scenario())

    assert seen == [2]
