from agent_wizard.models import Action, Goal, Plan, SubGoal


def _plan() -> Plan:
    plan = Plan(name="Investigator", objective="Find root cause", standard_procedure="# SOP")
    goal = Goal(description="Intake")
    subgoal = SubGoal(description="Record: log it")
    subgoal.add_action(Action(description="Open record"))
    subgoal.add_action(Action(description="Attach documents"))
    goal.add_subgoal(subgoal)
    plan.add_goal(goal)
    plan.add_goal(Goal(description="Close"))
    return plan


def test_ids_are_generated_and_unique():
    plan = _plan()
    ids = list(plan.iter_ids())

    assert len(ids) == 6
    assert len(set(ids)) == len(ids)
    assert ids[0] == plan.id


def test_children_keep_insertion_order():
    plan = _plan()

    assert [g.description for g in plan.goals] == ["Intake", "Close"]
    actions = plan.goals[0].subgoals[0].actions
    assert [a.description for a in actions] == ["Open record", "Attach documents"]


def test_add_operations_do_not_chain():
    goal = Goal(description="g")
    assert goal.add_subgoal(SubGoal(description="s")) is None


def test_action_count():
    assert _plan().action_count() == 2
    assert Plan(name="n", objective="o").action_count() == 0


def test_to_dict_uses_wire_names():
    plan = _plan()
    data = plan.to_dict()

    assert set(data) == {"id", "name", "objective", "standardProcedure", "goals"}
    assert data["standardProcedure"] == "# SOP"
    subgoal = data["goals"][0]["subgoals"][0]
    assert subgoal["description"] == "Record: log it"
    assert subgoal["actions"][1] == {
        "id": plan.goals[0].subgoals[0].actions[1].id,
        "description": "Attach documents",
    }
    assert data["goals"][1]["subgoals"] == []


def test_standard_procedure_is_optional():
    assert Plan(name="n", objective="o").to_dict()["standardProcedure"] is None
