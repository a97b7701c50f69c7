from keeper.features.cognitive_offboarding.domain.session_models import WorkflowSession
from keeper.features.cognitive_offboarding.workflow.session_store import InMemorySessionStore


def _session(session_id):
    return WorkflowSession(session_id=session_id, employee_id="user123", triggered_by="hr")


def test_add_and_get():
    store = InMemorySessionStore()
    session = _session("session_a")

    store.add(session)

    assert store.get("session_a") is session
    assert store.get("session_b") is None
    assert len(store) == 1


def test_all_returns_a_snapshot():
    store = InMemorySessionStore()
    store.add(_session("session_a"))

    snapshot = store.all()
    store.add(_session("session_b"))

    assert [s.session_id for s in snapshot] == ["session_a"]
    assert len(store.all()) == 2


def test_phase_lock_is_stable_per_session():
    store = InMemorySessionStore()
    store.add(_session("session_a"))
    store.add(_session("session_b"))

    assert store.lock_for("session_a") is store.lock_for("session_a")
    assert store.lock_for("session_a") is not store.lock_for("session_b")
