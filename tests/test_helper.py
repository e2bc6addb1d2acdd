import random

import pytest

from liftsim.helper import (
    Helper,
    Scenario,
    SimulationError,
    Solver,
    create_auth_string,
    load_scenario,
)
from liftsim.models import ELEVATOR_MAX_CAP, PassengerRequest, TurnChangeRequest


def _scenario_text(elevators, height, passengers, solvers=1):
    last = max((arrival for _, _, arrival in passengers), default=0)
    lines = [str(elevators), str(height), str(solvers), str(last), str(len(passengers))]
    lines += [f"{start} {requested} {arrival}" for start, requested, arrival in passengers]
    return "\n".join(lines)


def _helper(elevators=1, height=3, passengers=((0, 1, 1),), solvers=1):
    scenario = Scenario.parse(_scenario_text(elevators, height, list(passengers), solvers))
    return Helper(scenario, random.Random(1234))


def _crack(solver, elevator, length):
    solver.set_target(elevator)
    candidates = [""]
    for _ in range(length):
        candidates = [prefix + letter for prefix in candidates for letter in "abcdef"]
    return next(candidate for candidate in candidates if solver.guess(candidate))


def test_parse_reads_header_and_requests():
    scenario = Scenario.parse(_scenario_text(2, 5, [(0, 3, 1), (4, 2, 2)], solvers=3))
    assert scenario.elevator_count == 2
    assert scenario.building_height == 5
    assert scenario.solver_count == 3
    assert scenario.last_request_timestamp == 2
    assert scenario.requests == (
        (PassengerRequest(0, 0, 3), 1),
        (PassengerRequest(1, 4, 2), 2),
    )


def test_parse_ignores_trailing_numbers():
    scenario = Scenario.parse(_scenario_text(1, 2, [(0, 1, 1)]) + "\n9 9 9")
    assert len(scenario.requests) == 1


@pytest.mark.parametrize(
    "text",
    ["1 2 3", "1 2 1 1 2 0 1 1", "1 2 x 1 0", "101 2 1 0 0", "1 2 1 0 -1"],
)
def test_parse_rejects_malformed_input(text):
    with pytest.raises(ValueError):
        Scenario.parse(text)


def test_load_scenario_reads_file(tmp_path):
    text = _scenario_text(1, 4, [(2, 0, 3)])
    path = tmp_path / "testcase1.txt"
    path.write_text(text)
    assert load_scenario(path) == Scenario.parse(text)


def test_create_auth_string_uses_six_letters():
    value = create_auth_string(ELEVATOR_MAX_CAP, random.Random(5))
    assert len(value) == ELEVATOR_MAX_CAP
    assert set(value) <= set("abcdef")


def test_create_auth_string_is_reproducible_and_empty_for_zero():
    assert create_auth_string(8, random.Random(9)) == create_auth_string(8, random.Random(9))
    assert create_auth_string(0, random.Random(9)) == ""


def test_solver_checks_target_elevator():
    strings = ["abc", "fed"]
    solver = Solver(strings)
    assert solver.guess("abc") is True
    solver.set_target(1)
    assert solver.guess("abc") is False
    assert solver.guess("fed") is True
    strings[1] = "aaa"
    assert solver.guess("aaa") is True


def test_start_turn_publishes_arrivals_on_their_turn():
    helper = _helper(passengers=[(0, 1, 1), (2, 0, 2)])
    first = helper.start_turn()
    assert first.turn_number == 1
    assert first.new_passenger_request_count == 1
    assert helper.shared.new_passenger_requests == [PassengerRequest(0, 0, 1)]
    helper.shared.elevator_movement_instructions[0] = "s"
    helper.end_turn(TurnChangeRequest())
    second = helper.start_turn()
    assert second.turn_number == 2
    assert helper.shared.new_passenger_requests == [PassengerRequest(1, 2, 0)]


def test_auth_string_matches_exactly_one_guess():
    helper = _helper()
    helper.start_turn()
    helper.shared.picked_up_passengers.append((0, 0))
    helper.shared.elevator_movement_instructions[0] = "u"
    helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))
    helper.start_turn()
    assert helper.shared.elevator_floors == [1]
    solver = helper.solvers[0]
    solver.set_target(0)
    assert sum(solver.guess(letter) for letter in "abcdef") == 1


def test_run_completes_scripted_strategy():
    helper = _helper()
    responses = []

    def strategy(response, shared):
        responses.append(response)
        if response.finished or response.error_occurred:
            return None
        if response.turn_number == 1:
            shared.picked_up_passengers.append((0, 0))
            shared.elevator_movement_instructions[0] = "u"
            return TurnChangeRequest(picked_up_passengers_count=1)
        shared.dropped_passengers.append(0)
        shared.elevator_movement_instructions[0] = "d"
        shared.auth_strings[0] = _crack(helper.solvers[0], 0, 1)
        return TurnChangeRequest(dropped_passengers_count=1)

    result = helper.run(strategy)
    assert result.success is True
    assert result.error is None
    assert result.turns == 2
    assert result.total_elevator_movement == 2
    assert helper.requests_remaining == 0
    assert responses[-1].finished is True
    assert not any(r.error_occurred for r in responses)


def test_run_reports_failure_and_sends_error_then_finish():
    helper = _helper()
    responses = []

    def strategy(response, shared):
        responses.append(response)
        shared.elevator_movement_instructions[0] = "x"
        return TurnChangeRequest()

    result = helper.run(strategy)
    assert result.success is False
    assert "unknown movement command x" in result.error
    assert responses[-2].error_occurred is True and responses[-2].finished is False
    assert responses[-1].error_occurred is True and responses[-1].finished is True
    assert result.turns == helper.turn_number


def _first_turn(helper, instruction="s"):
    helper.start_turn()
    helper.shared.elevator_movement_instructions[0] = instruction


def test_wrong_auth_string_is_rejected():
    helper = _helper()
    _first_turn(helper, "u")
    helper.shared.picked_up_passengers.append((0, 0))
    helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))
    helper.start_turn()
    helper.shared.elevator_movement_instructions[0] = "u"
    helper.shared.auth_strings[0] = "zz"
    with pytest.raises(SimulationError, match="Expected authorization string") as info:
        helper.end_turn(TurnChangeRequest())
    assert info.value.turn == helper.turn_number


def test_drop_outside_elevator_is_rejected():
    helper = _helper()
    _first_turn(helper)
    helper.shared.dropped_passengers.append(0)
    with pytest.raises(SimulationError, match="aren't in any elevator"):
        helper.end_turn(TurnChangeRequest(dropped_passengers_count=1))


def test_pick_up_before_arrival_is_rejected():
    helper = _helper(passengers=[(0, 1, 5)])
    _first_turn(helper)
    helper.shared.picked_up_passengers.append((0, 0))
    with pytest.raises(SimulationError, match="has not arrived yet"):
        helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))


def test_pick_up_into_missing_elevator_is_rejected():
    helper = _helper()
    _first_turn(helper)
    helper.shared.picked_up_passengers.append((0, 1))
    with pytest.raises(SimulationError, match="which does not exist"):
        helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))


def test_pick_up_on_other_floor_is_rejected():
    helper = _helper(passengers=[(2, 0, 1)])
    _first_turn(helper)
    helper.shared.picked_up_passengers.append((0, 0))
    with pytest.raises(SimulationError, match="while the elevator is on floor"):
        helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))


def test_pick_up_twice_is_rejected():
    helper = _helper()
    _first_turn(helper)
    helper.shared.picked_up_passengers.extend([(0, 0), (0, 0)])
    with pytest.raises(SimulationError, match="already in an elevator"):
        helper.end_turn(TurnChangeRequest(picked_up_passengers_count=2))


def test_second_move_in_one_turn_is_rejected():
    helper = _helper()
    _first_turn(helper)
    helper.shared.picked_up_passengers.append((0, 0))
    helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))
    _first_turn(helper)
    helper.shared.dropped_passengers.append(0)
    helper.shared.picked_up_passengers.append((0, 0))
    with pytest.raises(SimulationError, match="already moved this turn"):
        helper.end_turn(
            TurnChangeRequest(dropped_passengers_count=1, picked_up_passengers_count=1)
        )


def test_moving_granted_passenger_is_rejected():
    helper = _helper()
    _first_turn(helper, "u")
    helper.shared.picked_up_passengers.append((0, 0))
    helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))
    _first_turn(helper)
    helper.shared.dropped_passengers.append(0)
    helper.end_turn(TurnChangeRequest(dropped_passengers_count=1))
    assert helper.requests_remaining == 0
    _first_turn(helper)
    helper.shared.picked_up_passengers.append((0, 0))
    with pytest.raises(SimulationError, match="already been fulfilled"):
        helper.end_turn(TurnChangeRequest(picked_up_passengers_count=1))


def test_full_elevator_is_rejected():
    helper = _helper(passengers=[(0, 1, 1)] * (ELEVATOR_MAX_CAP + 1))
    _first_turn(helper)
    helper.shared.picked_up_passengers.extend(
        (request_id, 0) for request_id in range(ELEVATOR_MAX_CAP + 1)
    )
    with pytest.raises(SimulationError, match="already full"):
        helper.end_turn(TurnChangeRequest(picked_up_passengers_count=ELEVATOR_MAX_CAP + 1))


@pytest.mark.parametrize(
    "height, instruction, message",
    [(1, "u", "highest floor"), (3, "d", "lowest floor"), (3, "q", "unknown movement command q")],
)
def test_invalid_elevator_moves_are_rejected(height, instruction, message):
    helper = _helper(height=height)
    _first_turn(helper, instruction)
    with pytest.raises(SimulationError, match=message):
        helper.end_turn(TurnChangeRequest())
    assert helper.total_elevator_movement == 0


def test_count_beyond_written_entries_is_rejected():
    helper = _helper()
    _first_turn(helper)
    with pytest.raises(SimulationError):
        helper.end_turn(TurnChangeRequest(dropped_passengers_count=1))