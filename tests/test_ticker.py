import threading

from lifeos.ticker import CancellationToken, Ticker


def test_cancellation_token():
    token = CancellationToken()
    assert not token.cancelled
    assert token.wait(0) is False
    token.cancel()
    token.cancel()
    assert token.cancelled
    assert token.wait(0) is True


def test_ticker_calls_back_until_cancelled():
    count = 0
    reached = threading.Event()

    def on_tick(token):
        nonlocal count
        count += 1
        if count >= 3:
            reached.set()

    ticker = Ticker(0.01, on_tick)
    ticker.start()
    assert ticker.running
    assert reached.wait(5)
    ticker.cancel()
    ticker.join(5)
    assert not ticker.running
    stopped_at = count
    reached.clear()
    assert not reached.wait(0.05)
    assert count == stopped_at


def test_start_twice_reuses_token():
    ticker = Ticker(10, lambda token: None)
    first = ticker.start()
    assert ticker.start() is first
    ticker.cancel()
    second = ticker.start()
    assert second is not first
    ticker.cancel()


def test_cancel_before_start_is_safe():
    ticker = Ticker(1, lambda token: None)
    ticker.cancel()
    ticker.cancel()
    assert not ticker.running


def test_failing_callback_stops_ticker():
    calls = []

    def boom(token):
        calls.append(1)
        raise RuntimeError("broken")

    ticker = Ticker(0.01, boom)
    ticker.start()
    ticker.join(5)
    assert calls == [1]
    assert not ticker.running
