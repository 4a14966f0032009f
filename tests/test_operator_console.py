import threading

from foxgate.cli.console import OperatorConsole
from foxgate.gateway import (
    ControlChannel,
    ControlIntent,
    Gateway,
    apply_intent,
    run_control_loop,
)

SERVER = "device-secret"


def _running() -> threading.Event:
    event = threading.Event()
    event.set()
    return event


def _scripted(lines: list[str]):  # type: ignore[no-untyped-def]
    pending = list(lines)

    def _read() -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return _read


def test_console_posts_intents_in_order() -> None:
    channel = ControlChannel()
    console = OperatorConsole(
        channel,
        _running(),
        read_line=_scripted(["", "help", "info", "bogus", "clear", "exit", "info"]),
    )
    console.run()
    assert channel.next(timeout=0) is ControlIntent.INFO
    assert channel.next(timeout=0) is ControlIntent.CLEAR_QUEUE
    assert channel.next(timeout=0) is ControlIntent.EXIT
    # Lines after exit are never read.
    assert channel.next(timeout=0) is None


def test_console_treats_eof_as_exit() -> None:
    channel = ControlChannel()
    OperatorConsole(channel, _running(), read_line=_scripted([])).run()
    assert channel.next(timeout=0) is ControlIntent.EXIT


def test_console_stops_when_running_flag_cleared() -> None:
    channel = ControlChannel()
    running = threading.Event()
    OperatorConsole(channel, running, read_line=_scripted(["info"])).run()
    assert channel.next(timeout=0) is None


def test_apply_intent_clears_queue_and_signals_exit() -> None:
    gateway = Gateway(server_password=SERVER, backlog=4)
    session = gateway.new_session(SERVER).value
    gateway.enqueue_tasks(session, [{"type": "SPEED", "speed": 1}, {"type": "SPEED", "speed": 2}])

    assert apply_intent(gateway, ControlIntent.INFO) is True
    assert apply_intent(gateway, ControlIntent.CLEAR_QUEUE) is True
    assert gateway.queue_stats().queued == 0
    assert gateway.queue_stats().total_enqueued == 2
    assert apply_intent(gateway, ControlIntent.EXIT) is False


def test_control_loop_runs_until_exit() -> None:
    gateway = Gateway(server_password=SERVER, backlog=4)
    session = gateway.new_session(SERVER).value
    gateway.enqueue_tasks(session, [{"type": "POWER", "is_on": True}])
    channel = ControlChannel()
    running = _running()
    channel.post(ControlIntent.CLEAR_QUEUE)
    channel.post(ControlIntent.EXIT)

    loop = threading.Thread(
        target=run_control_loop,
        args=(channel, gateway, running),
        kwargs={"poll_interval": 0.05},
    )
    loop.start()
    loop.join(timeout=2)

    assert not loop.is_alive()
    assert not running.is_set()
    assert gateway.queue.snapshot_len() == 0
