from foxgate.config.schema import Config
from foxgate.gateway import (
    DeviceState,
    EnqueueOutcome,
    ErrorKind,
    Gateway,
    Mode,
    OnlineChange,
    SpeedTask,
)

SERVER = "device-secret"


def _gateway(backlog: int = 8) -> Gateway:
    return Gateway(server_password=SERVER, backlog=backlog)


def _open_session(gateway: Gateway) -> str:
    result = gateway.new_session(SERVER)
    assert result.success
    return result.value


def test_authenticate_client() -> None:
    gateway = _gateway()
    assert gateway.authenticate_client("whatever") is False
    password = _open_session(gateway)
    assert gateway.authenticate_client(password) is True
    assert gateway.authenticate_client("") is False
    assert gateway.authenticate_client(SERVER) is False


def test_client_operations_require_session_password() -> None:
    gateway = _gateway()
    result = gateway.get_state("nope")
    assert not result.success and result.error is ErrorKind.AUTH
    result = gateway.enqueue_tasks("nope", [{"type": "POWER", "is_on": True}])
    assert not result.success and result.error is ErrorKind.AUTH
    assert gateway.queue.snapshot_len() == 0


def test_device_operations_require_server_password() -> None:
    gateway = _gateway()
    password = _open_session(gateway)
    for result in (
        gateway.fetch_tasks(password),
        gateway.set_state(password, DeviceState()),
        gateway.set_online(password, True),
    ):
        assert not result.success
        assert result.error is ErrorKind.AUTH
        assert result.message == "Invalid password"
    assert gateway.state.is_online is False


def test_backlog_scenario_reports_partial_acceptance() -> None:
    # Queue-full is a partial success, not an error.
    gateway = _gateway(backlog=2)
    password = _open_session(gateway)
    tasks = [{"type": "SPEED", "speed": n} for n in (10, 20, 30)]

    result = gateway.enqueue_tasks(password, tasks)
    assert result.success
    assert result.value == EnqueueOutcome(accepted=2, total=3)
    assert result.value.complete is False

    fetched = gateway.fetch_tasks(SERVER)
    assert fetched.success
    assert fetched.value == [SpeedTask(speed=10), SpeedTask(speed=20)]
    assert gateway.queue.snapshot_len() == 0
    assert gateway.fetch_tasks(SERVER).value == []


def test_enqueue_rejects_malformed_tasks_without_queueing_any() -> None:
    gateway = _gateway()
    password = _open_session(gateway)
    result = gateway.enqueue_tasks(password, [{"type": "SPEED", "speed": 1}, {"type": "NOPE"}])
    assert not result.success
    assert result.error is ErrorKind.VALIDATION
    assert "index 1" in result.message
    assert gateway.queue.snapshot_len() == 0

    result = gateway.enqueue_tasks(password, None)
    assert result.error is ErrorKind.VALIDATION
    assert result.message == "Missing tasks list"


def test_state_round_trip() -> None:
    gateway = _gateway()
    password = _open_session(gateway)
    state = {
        "accepts_commands": True,
        "is_on": True,
        "target_speed": 7,
        "actual_speed": 6,
        "mode": "DEFAULT",
    }
    assert gateway.set_state(SERVER, state).success
    view = gateway.get_state(password).value
    assert view.state == DeviceState(True, True, 7, 6, Mode.DEFAULT)
    assert view.state.to_dict() == state
    assert view.is_online is False


def test_set_state_validation() -> None:
    gateway = _gateway()
    result = gateway.set_state(SERVER, None)
    assert result.error is ErrorKind.VALIDATION
    assert result.message == "Missing state object"
    result = gateway.set_state(SERVER, {"is_on": True})
    assert result.error is ErrorKind.VALIDATION
    assert gateway.state.read() == DeviceState()


def test_set_online_reports_transitions() -> None:
    gateway = _gateway()
    assert gateway.set_online(SERVER, True).value == OnlineChange(changed=True, previous=False)
    assert gateway.set_online(SERVER, True).value == OnlineChange(changed=False, previous=True)
    result = gateway.set_online(SERVER, "yes")
    assert result.error is ErrorKind.VALIDATION


def test_session_exclusivity_and_reopen_after_offline() -> None:
    gateway = _gateway()
    first = _open_session(gateway)
    result = gateway.new_session(SERVER)
    assert result.error is ErrorKind.SESSION_CONFLICT

    assert gateway.set_online(SERVER, False).success
    assert gateway.authenticate_client(first) is False

    second = gateway.new_session(SERVER)
    assert second.success
    assert gateway.authenticate_client(second.value)


def test_session_conflict_is_reported_before_credentials() -> None:
    gateway = _gateway()
    _open_session(gateway)
    result = gateway.new_session("wrong")
    assert result.error is ErrorKind.SESSION_CONFLICT
    assert result.message == "Session already in progress"


def test_new_session_length_scenarios() -> None:
    gateway = _gateway()
    result = gateway.new_session(SERVER, length=8)
    assert not result.success
    assert result.error is ErrorKind.INVALID_LENGTH
    result = gateway.new_session(SERVER, length=5)
    assert result.error is ErrorKind.INVALID_LENGTH

    result = gateway.new_session(SERVER, length=10**8)
    assert result.error is ErrorKind.INVALID_LENGTH
    assert result.message == "Invalid password length, needs to be at most 256 characters"

    result = gateway.new_session(SERVER, length=12)
    assert result.success
    assert len(result.value) == 12


def test_new_session_argument_validation() -> None:
    gateway = _gateway()
    assert gateway.new_session("wrong").error is ErrorKind.AUTH
    assert gateway.new_session(SERVER, length="12").error is ErrorKind.VALIDATION
    assert gateway.new_session(SERVER, length=True).error is ErrorKind.VALIDATION
    assert gateway.new_session(SERVER, explicit_password=123).error is ErrorKind.VALIDATION
    result = gateway.new_session(SERVER, explicit_password="short")
    assert result.success and result.value == "short"


def test_clear_queue_keeps_counters() -> None:
    gateway = _gateway()
    password = _open_session(gateway)
    gateway.enqueue_tasks(password, [{"type": "POWER", "is_on": True}] * 3)
    assert gateway.clear_queue() == 3
    stats = gateway.queue_stats()
    assert (stats.queued, stats.total_enqueued, stats.total_processed) == (0, 3, 0)


def test_from_config() -> None:
    cfg = Config()
    cfg.server.password = SERVER
    cfg.server.backlog = 3
    cfg.session.default_length = 20
    gateway = Gateway.from_config(cfg)
    assert gateway.queue.backlog == 3
    assert len(gateway.new_session(SERVER).value) == 20
