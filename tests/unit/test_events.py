from metro_storefront_sdk.events import AUTH_CHANGE, TOKEN_UPDATED, SessionEvents


def test_subscribe_and_unsubscribe() -> None:
    events = SessionEvents()
    seen = []
    unsubscribe = events.subscribe(TOKEN_UPDATED, seen.append)

    events.emit(TOKEN_UPDATED, {"tiers": ["session"]})
    unsubscribe()
    unsubscribe()
    events.emit(TOKEN_UPDATED, {"tiers": []})

    assert seen == [{"tiers": ["session"]}]
    assert events.count(TOKEN_UPDATED) == 2


def test_failing_handler_does_not_block_others(caplog) -> None:
    events = SessionEvents()
    seen = []

    def broken(_payload) -> None:
        raise RuntimeError("boom")

    events.subscribe(AUTH_CHANGE, broken)
    events.subscribe(AUTH_CHANGE, seen.append)

    events.emit(AUTH_CHANGE, {"authenticated": False})

    assert seen == [{"authenticated": False}]
    assert any(record.getMessage() == "session_event_handler_failed" for record in caplog.records)


def test_history_is_bounded() -> None:
    events = SessionEvents(history_size=2)

    for index in range(5):
        events.emit(TOKEN_UPDATED, index)

    assert [entry["payload"] for entry in events.history] == [3, 4]
