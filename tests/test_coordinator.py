import itertools
import threading

import pytest
from pydantic import ValidationError

from coordinator import AlarmCoordinator
from models import IDLE, RINGING, STOP_PENDING, AlarmState

OPERATIONS = ("trigger", "request_stop", "acknowledge", "status")

# State each mutating operation leaves behind, whatever came before.
EXPECTED_AFTER = {
    "trigger": RINGING,
    "request_stop": STOP_PENDING,
    "acknowledge": IDLE,
}


def _run(coordinator: AlarmCoordinator, device_id: str, operation: str) -> None:
    getattr(coordinator, operation)(device_id)


def _sequences(max_length: int):
    for length in range(1, max_length + 1):
        yield from itertools.product(OPERATIONS, repeat=length)


def test_unknown_device_is_idle(coordinator):
    state = coordinator.status("never-seen")

    assert state == IDLE
    assert state.phase == "idle"


def test_status_of_unknown_device_leaves_no_record(coordinator):
    coordinator.status("ghost")

    assert "ghost" not in coordinator
    assert len(coordinator) == 0


def test_trigger_then_stop():
    coordinator = AlarmCoordinator()
    coordinator.trigger("dev1")
    coordinator.request_stop("dev1")

    assert coordinator.status("dev1") == AlarmState(ringing=False, stop_requested=True)


def test_stop_without_prior_record():
    coordinator = AlarmCoordinator()
    coordinator.request_stop("dev2")

    assert coordinator.status("dev2") == AlarmState(ringing=False, stop_requested=True)
    assert "dev2" in coordinator


def test_trigger_then_acknowledge():
    coordinator = AlarmCoordinator()
    coordinator.trigger("dev3")
    coordinator.acknowledge("dev3")

    assert coordinator.status("dev3") == AlarmState(ringing=False, stop_requested=False)


def test_new_trigger_discards_pending_stop():
    coordinator = AlarmCoordinator()
    coordinator.request_stop("dev4")
    transition = coordinator.trigger("dev4")

    assert transition.before == STOP_PENDING
    assert coordinator.status("dev4") == AlarmState(ringing=True, stop_requested=False)


def test_repeated_stop_is_idempotent(coordinator):
    coordinator.trigger("dev")
    first = coordinator.request_stop("dev")
    second = coordinator.request_stop("dev")

    assert first.before == RINGING
    assert second.before == STOP_PENDING
    assert second.after == STOP_PENDING


def test_transition_reports_before_and_after(coordinator):
    transition = coordinator.acknowledge("dev")

    assert transition.device_id == "dev"
    assert transition.before == IDLE
    assert transition.after == IDLE


def test_states_are_frozen():
    with pytest.raises(ValidationError):
        RINGING.ringing = False


def test_phase_names():
    assert RINGING.phase == "ringing"
    assert STOP_PENDING.phase == "stop_pending"
    assert IDLE.phase == "idle"


def test_instances_do_not_share_state():
    first = AlarmCoordinator()
    second = AlarmCoordinator()

    first.trigger("dev")

    assert second.status("dev") == IDLE


# ─────────────────────────────────────────────────────────────────
# Every operation sequence up to length 4 (340 sequences)
# ─────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("sequence", list(_sequences(4)), ids="-".join)
def test_sequence_ends_in_state_of_last_mutation(sequence):
    coordinator = AlarmCoordinator()
    expected = IDLE

    for operation in sequence:
        _run(coordinator, "dev", operation)
        if operation in EXPECTED_AFTER:
            expected = EXPECTED_AFTER[operation]

        state = coordinator.status("dev")
        assert not (state.ringing and state.stop_requested)
        assert state == expected


@pytest.mark.parametrize("sequence", list(_sequences(3)), ids="-".join)
def test_other_devices_are_untouched(sequence):
    coordinator = AlarmCoordinator()
    coordinator.trigger("dev5")

    for operation in sequence:
        _run(coordinator, "dev1", operation)

    assert coordinator.status("dev5") == RINGING


# ─────────────────────────────────────────────────────────────────
# Concurrency
# ─────────────────────────────────────────────────────────────────

def test_racing_writers_never_expose_both_flags():
    coordinator = AlarmCoordinator()
    stop = threading.Event()
    seen = []

    def writer(operation):
        while not stop.is_set():
            _run(coordinator, "dev", operation)

    def reader():
        for _ in range(20000):
            state = coordinator.status("dev")
            seen.append((state.ringing, state.stop_requested))
        stop.set()

    threads = [threading.Thread(target=writer, args=(op,)) for op in EXPECTED_AFTER]
    threads.append(threading.Thread(target=reader))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert (True, True) not in seen
    assert coordinator.status("dev") in (IDLE, RINGING, STOP_PENDING)


def test_last_write_wins_between_racing_trigger_and_stop():
    coordinator = AlarmCoordinator()
    barrier = threading.Barrier(2)

    def call(operation):
        barrier.wait()
        _run(coordinator, "dev", operation)

    threads = [threading.Thread(target=call, args=(op,)) for op in ("trigger", "request_stop")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert coordinator.status("dev") in (RINGING, STOP_PENDING)


def test_many_devices_in_parallel():
    coordinator = AlarmCoordinator()
    device_ids = [f"dev-{n}" for n in range(50)]

    def cycle(device_id):
        for _ in range(100):
            coordinator.trigger(device_id)
            coordinator.request_stop(device_id)
        coordinator.acknowledge(device_id)

    threads = [threading.Thread(target=cycle, args=(d,)) for d in device_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(coordinator) == 50
    assert all(coordinator.status(d) == IDLE for d in device_ids)
