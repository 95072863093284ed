import pytest

from agent_wizard.errors import (
    IllegalTransitionError,
    ParseError,
    SessionNotFoundError,
    TransportError,
)
from agent_wizard.llm_config import LLMConfig
from agent_wizard.wizard import (
    InMemorySessionStore,
    WizardState,
    build_agent_creation_service,
    can_transition,
    is_terminal_state,
)

OBJECTIVE = "Investigate a deviation and find its root cause"


# ============================================================================
# Transition table
# ============================================================================

def test_transition_table():
    assert can_transition(WizardState.INITIAL, WizardState.OBJECTIVE_ENTERED)
    assert not can_transition(WizardState.INITIAL, WizardState.AGENT_REVIEWED)
    assert can_transition(WizardState.OBJECTIVE_DECOMPOSED, WizardState.AGENT_REVIEWED)
    assert can_transition(WizardState.OBJECTIVE_DECOMPOSED, WizardState.OBJECTIVE_ENTERED)
    assert can_transition(WizardState.AGENT_REVIEWED, WizardState.COMPLETED)
    assert not can_transition(WizardState.OBJECTIVE_DECOMPOSED, WizardState.COMPLETED)
    assert not can_transition(WizardState.COMPLETED, WizardState.OBJECTIVE_ENTERED)
    assert can_transition(WizardState.COMPLETED, WizardState.ERROR)


def test_terminal_states():
    assert is_terminal_state(WizardState.COMPLETED)
    assert is_terminal_state(WizardState.ERROR)
    assert not is_terminal_state(WizardState.AGENT_REVIEWED)


# ============================================================================
# Happy path
# ============================================================================

def test_full_wizard_flow(make_service, scripted, sample_json):
    service = make_service(scripted(sample_json))

    session_id = service.start_session()
    assert service.get_session(session_id).state is WizardState.INITIAL

    session = service.process_objective(session_id, OBJECTIVE)
    assert session.state is WizardState.OBJECTIVE_DECOMPOSED
    assert session.plan is not None
    assert session.plan.id == session_id
    assert len(session.plan.goals) >= 1

    assert service.review_agent(session_id).state is WizardState.AGENT_REVIEWED

    plan = service.complete_creation(session_id)
    assert plan is session.plan
    assert plan.id == session_id
    assert service.get_session(session_id).is_completed()

    transitions = [(h["from"], h["to"]) for h in session.history]
    assert transitions == [
        ("INITIAL", "OBJECTIVE_ENTERED"),
        ("OBJECTIVE_ENTERED", "OBJECTIVE_DECOMPOSED"),
        ("OBJECTIVE_DECOMPOSED", "AGENT_REVIEWED"),
        ("AGENT_REVIEWED", "COMPLETED"),
    ]


def test_session_ids_are_distinct(make_service, fake_llm):
    service = make_service(fake_llm([]))
    ids = {service.start_session() for _ in range(20)}

    assert len(ids) == 20
    assert service.active_session_count() == 20


def test_redecompose_replaces_plan(make_service, scripted, sample_json):
    service = make_service(scripted(sample_json, sample_json))
    session_id = service.start_session()

    first = service.process_objective(session_id, OBJECTIVE).plan
    service.review_agent(session_id)
    second = service.process_objective(session_id, OBJECTIVE).plan

    assert second is not first
    assert second.id == session_id
    assert service.get_session(session_id).state is WizardState.OBJECTIVE_DECOMPOSED


# ============================================================================
# Illegal steps
# ============================================================================

def test_complete_before_review_is_rejected(make_service, scripted, sample_json):
    service = make_service(scripted(sample_json))
    session_id = service.start_session()
    service.process_objective(session_id, OBJECTIVE)

    with pytest.raises(IllegalTransitionError) as exc_info:
        service.complete_creation(session_id)

    assert "Current state: OBJECTIVE_DECOMPOSED" in str(exc_info.value)
    assert service.get_session(session_id).state is WizardState.OBJECTIVE_DECOMPOSED


def test_review_before_decomposition_is_rejected(make_service, fake_llm):
    service = make_service(fake_llm([]))
    session_id = service.start_session()

    with pytest.raises(IllegalTransitionError):
        service.review_agent(session_id)
    assert service.get_session(session_id).state is WizardState.INITIAL


def test_double_review_is_rejected(make_service, scripted, sample_json):
    service = make_service(scripted(sample_json))
    session_id = service.start_session()
    service.process_objective(session_id, OBJECTIVE)
    service.review_agent(session_id)

    with pytest.raises(IllegalTransitionError):
        service.review_agent(session_id)
    assert service.get_session(session_id).state is WizardState.AGENT_REVIEWED


def test_completed_session_rejects_new_objective(make_service, scripted, sample_json):
    llm = scripted(sample_json)
    service = make_service(llm)
    session_id = service.start_session()
    service.process_objective(session_id, OBJECTIVE)
    service.review_agent(session_id)
    service.complete_creation(session_id)

    with pytest.raises(IllegalTransitionError):
        service.process_objective(session_id, OBJECTIVE)

    session = service.get_session(session_id)
    assert session.state is WizardState.COMPLETED
    assert session.error_message is None
    assert len(llm.calls) == 2


def test_unknown_session(make_service, fake_llm):
    service = make_service(fake_llm([]))

    assert service.get_session("missing") is None
    with pytest.raises(SessionNotFoundError) as exc_info:
        service.process_objective("missing", OBJECTIVE)
    assert str(exc_info.value) == "No session found with ID: missing"
    with pytest.raises(SessionNotFoundError):
        service.review_agent("missing")
    with pytest.raises(SessionNotFoundError):
        service.complete_creation("missing")


# ============================================================================
# Failure path
# ============================================================================

def test_llm_failure_moves_session_to_error(make_service, fake_llm):
    service = make_service(fake_llm([TransportError("network down")]))
    session_id = service.start_session()

    with pytest.raises(TransportError):
        service.process_objective(session_id, OBJECTIVE)

    session = service.get_session(session_id)
    assert session.state is WizardState.ERROR
    assert session.has_error()
    assert session.plan is None
    assert session.error_message == "Error processing objective: network down"


def test_parse_failure_moves_session_to_error(make_service, scripted):
    service = make_service(scripted("definitely not json"))
    session_id = service.start_session()

    with pytest.raises(ParseError):
        service.process_objective(session_id, OBJECTIVE)

    assert service.get_session(session_id).state is WizardState.ERROR


def test_blank_objective_fails_the_session(make_service, fake_llm):
    service = make_service(fake_llm([]))
    session_id = service.start_session()

    with pytest.raises(ValueError):
        service.process_objective(session_id, "  ")
    assert service.get_session(session_id).state is WizardState.ERROR


def test_error_session_is_terminal(make_service, fake_llm):
    service = make_service(fake_llm([TransportError("boom")]))
    session_id = service.start_session()
    with pytest.raises(TransportError):
        service.process_objective(session_id, OBJECTIVE)

    with pytest.raises(IllegalTransitionError):
        service.process_objective(session_id, OBJECTIVE)
    with pytest.raises(IllegalTransitionError):
        service.review_agent(session_id)


# ============================================================================
# Housekeeping
# ============================================================================

def test_remove_session(make_service, fake_llm):
    service = make_service(fake_llm([]))
    session_id = service.start_session()

    assert service.remove_session(session_id)
    assert not service.remove_session(session_id)
    assert service.get_session(session_id) is None
    assert service.active_session_count() == 0


def test_session_to_dict(make_service, scripted, sample_json):
    service = make_service(scripted(sample_json))
    session_id = service.start_session()
    service.process_objective(session_id, OBJECTIVE)

    data = service.get_session(session_id).to_dict()
    assert data["sessionId"] == session_id
    assert data["state"] == "OBJECTIVE_DECOMPOSED"
    assert data["plan"]["id"] == session_id
    assert data["errorMessage"] is None


def test_build_service_with_stub_provider():
    store = InMemorySessionStore()
    service = build_agent_creation_service(LLMConfig(provider="stub"), store=store)

    session_id = service.start_session()
    plan = service.process_objective(session_id, OBJECTIVE).plan

    assert service.store is store
    assert plan.id == session_id
    assert plan.name == f"Agent for {OBJECTIVE}"
