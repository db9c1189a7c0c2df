import asyncio

import pytest

from countdown import CountdownController, Display, RunState, tick_while_running


def running(seconds: int) -> CountdownController:
    controller = CountdownController(seconds)
    controller.toggle_run_state()
    return controller


def test_starts_paused_with_default_duration() -> None:
    controller = CountdownController()

    assert controller.duration == 65
    assert controller.run_state is RunState.PAUSED
    assert controller.render() == Display(1, 5, False)


@pytest.mark.parametrize("start,amount", [(0, 1), (3, 5), (10, 10), (10, 11), (59, 1000)])
def test_decrement_never_goes_negative(start: int, amount: int) -> None:
    controller = CountdownController(start)
    controller.decrement(amount)

    assert controller.duration == max(0, start - amount)
    assert controller.duration >= 0


def test_decrement_past_zero_clamps() -> None:
    controller = CountdownController(3)
    controller.decrement(5)

    assert controller.duration == 0


def test_increment_has_no_upper_bound() -> None:
    controller = CountdownController(3595)
    controller.increment(5)
    controller.increment(5000)

    assert controller.duration == 8600
    assert controller.render() == Display(143, 20, False)


def test_negative_increment_is_clamped() -> None:
    controller = CountdownController(2)
    controller.increment(-5)

    assert controller.duration == 0


def test_decrement_then_increment_restores_duration() -> None:
    controller = CountdownController(65)
    controller.decrement(5)
    controller.increment(5)

    assert controller.duration == 65


def test_toggle_twice_restores_run_state() -> None:
    controller = CountdownController()
    controller.toggle_run_state()
    assert controller.run_state is RunState.RUNNING

    controller.toggle_run_state()
    assert controller.run_state is RunState.PAUSED


def test_tick_while_paused_changes_nothing() -> None:
    controller = CountdownController(10)
    seen = []
    controller.subscribe(seen.append)

    for _ in range(5):
        controller.tick()

    assert controller.duration == 10
    assert controller.run_state is RunState.PAUSED
    assert seen == []


def test_tick_at_zero_pauses_without_underflow() -> None:
    controller = running(0)
    controller.tick()

    assert controller.duration == 0
    assert controller.run_state is RunState.PAUSED


def test_tick_counts_down_one_second() -> None:
    controller = running(65)
    controller.tick()

    assert controller.duration == 64
    assert controller.render() == Display(1, 4, True)


def test_full_countdown_stops_at_zero() -> None:
    controller = running(65)

    for _ in range(65):
        controller.tick()

    assert controller.duration == 0
    assert controller.run_state is RunState.PAUSED
    assert controller.render() == Display(0, 0, False)


def test_render_is_pure() -> None:
    controller = running(125)

    assert controller.render() == controller.render()
    assert controller.duration == 125
    assert controller.render() == Display(2, 5, True)


def test_subscribers_see_every_change() -> None:
    controller = CountdownController(6)
    seen = []
    controller.subscribe(seen.append)

    controller.decrement(5)
    controller.toggle_run_state()
    controller.tick()
    controller.increment(5)

    assert seen == [
        Display(0, 1, False),
        Display(0, 1, True),
        Display(0, 0, False),
        Display(0, 5, False),
    ]


def test_unsubscribe_stops_notifications() -> None:
    controller = CountdownController(6)
    seen = []
    unsubscribe = controller.subscribe(seen.append)

    controller.increment(1)
    unsubscribe()
    unsubscribe()
    controller.increment(1)

    assert seen == [Display(0, 7, False)]


def test_callback_may_unsubscribe_itself() -> None:
    controller = CountdownController(6)
    seen = []

    def once(display: Display) -> None:
        seen.append(display)
        unsubscribe()

    unsubscribe = controller.subscribe(once)
    controller.increment(1)
    controller.increment(1)

    assert seen == [Display(0, 7, False)]


@pytest.mark.asyncio
async def test_tick_loop_runs_until_zero() -> None:
    controller = running(3)

    await asyncio.wait_for(tick_while_running(controller, interval=0.001), timeout=5)

    assert controller.duration == 0
    assert controller.run_state is RunState.PAUSED


@pytest.mark.asyncio
async def test_tick_loop_does_nothing_while_paused() -> None:
    controller = CountdownController(3)

    await asyncio.wait_for(tick_while_running(controller, interval=0.001), timeout=5)

    assert controller.duration == 3


@pytest.mark.asyncio
async def test_tick_loop_exits_when_paused_between_ticks() -> None:
    controller = running(100)

    def pause_after_two(display: Display) -> None:
        if display.is_running and controller.duration == 98:
            controller.toggle_run_state()

    controller.subscribe(pause_after_two)
    await asyncio.wait_for(tick_while_running(controller, interval=0.001), timeout=5)

    assert controller.duration == 98
    assert controller.run_state is RunState.PAUSED


@pytest.mark.asyncio
async def test_tick_loop_can_be_cancelled() -> None:
    controller = running(100)
    task = asyncio.ensure_future(tick_while_running(controller, interval=60))
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.duration == 99
    assert controller.is_running
