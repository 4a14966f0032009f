import threading

from foxgate.gateway import DeviceState, DeviceStateCache, Mode


def test_default_state_is_offline_and_idle() -> None:
    cache = DeviceStateCache()
    assert cache.read() == DeviceState()
    assert cache.is_online is False


def test_replace_is_wholesale() -> None:
    cache = DeviceStateCache()
    state = DeviceState(accepts_commands=True, is_on=True, target_speed=5, actual_speed=4, mode=Mode.DEFAULT)
    cache.replace(state)
    assert cache.read() == state
    cache.replace(DeviceState())
    assert cache.read() == DeviceState()


def test_set_online_reports_change_and_previous() -> None:
    cache = DeviceStateCache()
    assert cache.set_online(True) == (True, False)
    assert cache.set_online(True) == (False, True)
    assert cache.set_online(False) == (True, True)
    assert cache.is_online is False


def test_readers_never_observe_mixed_writes() -> None:
    cache = DeviceStateCache()
    stop = threading.Event()
    torn: list[DeviceState] = []

    def _writer() -> None:
        n = 0
        while not stop.is_set():
            n += 1
            cache.replace(DeviceState(True, n % 2 == 0, n, n, Mode.DEFAULT))

    def _reader() -> None:
        for _ in range(2000):
            state = cache.read()
            if state.target_speed != state.actual_speed:
                torn.append(state)
            if state.target_speed and state.is_on != (state.target_speed % 2 == 0):
                torn.append(state)

    writer = threading.Thread(target=_writer)
    readers = [threading.Thread(target=_reader) for _ in range(4)]
    writer.start()
    for reader in readers:
        reader.start()
    for reader in readers:
        reader.join()
    stop.set()
    writer.join()

    assert torn == []
