import asyncio

from trolleyseal.services.change_feed import ChangeEvent, ChangeFeed


def test_events_are_filtered_by_table_and_flight():
    feed = ChangeFeed()

    async def scenario():
        subscription = feed.subscribe("seal_scans", flight_id=7)
        feed.publish(ChangeEvent("flights", "update", 7))
        feed.publish(ChangeEvent("seal_scans", "insert", 8))
        feed.publish(ChangeEvent("seal_scans", "delete", 7))
        event = await asyncio.wait_for(subscription.__anext__(), 1)
        subscription.close()
        rest = [item async for item in subscription]
        return event, rest

    event, rest = asyncio.run(scenario())

    assert (event.table, event.action, event.flight_id) == ("seal_scans", "delete", 7)
    assert rest == []


def test_unfiltered_subscription_sees_every_flight():
    feed = ChangeFeed()

    async def scenario():
        async with feed.subscribe("flights") as subscription:
            feed.publish(ChangeEvent("flights", "insert", 1))
            feed.publish(ChangeEvent("flights", "update", 2))
            return [
                await asyncio.wait_for(subscription.__anext__(), 1),
                await asyncio.wait_for(subscription.__anext__(), 1),
            ]

    events = asyncio.run(scenario())

    assert [event.flight_id for event in events] == [1, 2]
    assert feed.subscriber_count == 0


def test_full_queue_coalesces_instead_of_blocking():
    feed = ChangeFeed(queue_size=2)

    async def scenario():
        subscription = feed.subscribe("seal_scans")
        for flight_id in range(5):
            feed.publish(ChangeEvent("seal_scans", "insert", flight_id))
        kept = [
            await asyncio.wait_for(subscription.__anext__(), 1),
            await asyncio.wait_for(subscription.__anext__(), 1),
        ]
        subscription.close()
        return kept, [event async for event in subscription]

    kept, rest = asyncio.run(scenario())

    assert [event.flight_id for event in kept] == [0, 1]
    assert rest == []


def test_close_is_idempotent_and_stops_delivery():
    feed = ChangeFeed()

    async def scenario():
        subscription = feed.subscribe("seal_scans")
        subscription.close()
        subscription.close()
        feed.publish(ChangeEvent("seal_scans", "insert", 1))
        return subscription, [event async for event in subscription]

    subscription, events = asyncio.run(scenario())

    assert subscription.closed
    assert events == []
    assert feed.subscriber_count == 0


def test_subscription_can_follow_several_tables():
    feed = ChangeFeed()

    async def scenario():
        async with feed.subscribe(("flights", "seal_scans")) as subscription:
            feed.publish(ChangeEvent("profiles", "update", None))
            feed.publish(ChangeEvent("flights", "insert", 1))
            feed.publish(ChangeEvent("seal_scans", "delete", 2))
            return [
                await asyncio.wait_for(subscription.__anext__(), 1),
                await asyncio.wait_for(subscription.__anext__(), 1),
            ]

    events = asyncio.run(scenario())

    assert [(event.table, event.flight_id) for event in events] == [
        ("flights", 1),
        ("seal_scans", 2),
    ]
