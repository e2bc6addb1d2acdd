"""The simulator that runs a test case against an elevator-control strategy."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Optional, Sequence

from liftsim.models import (
    AUTH_STRING_UNIQUE_LETTERS,
    ELEVATOR_MAX_CAP,
    MAX_ELEVATORS,
    PassengerRequest,
    SharedState,
    TurnChangeRequest,
    TurnChangeResponse,
)

Strategy = Callable[[TurnChangeResponse, SharedState], Optional[TurnChangeRequest]]


class SimulationError(Exception):
    """Raised when the control program breaks a rule during a turn."""

    def __init__(self, turn: int, reason: str) -> None:
        super().__init__(f"Turn {turn}: {reason}")
        self.turn = turn
        self.reason = reason


@dataclass(frozen=True)
class Scenario:
    """A test case: the building and the passengers with their arrival turns."""

    elevator_count: int
    building_height: int
    solver_count: int
    last_request_timestamp: int
    requests: tuple[tuple[PassengerRequest, int], ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Scenario":
        """Read a test case from whitespace-separated integers."""
        try:
            numbers = [int(token) for token in text.split()]
        except ValueError as exc:
            raise ValueError(f"malformed test case: {exc}") from None
        if len(numbers) < 5:
            raise ValueError("test case header is incomplete")
        elevators, height, solvers, last_request, count = numbers[:5]
        if not 0 <= elevators <= MAX_ELEVATORS:
            raise ValueError(
                f"elevator count must be between 0 and {MAX_ELEVATORS}, got {elevators}"
            )
        if count < 0:
            raise ValueError(f"passenger request count is negative: {count}")
        body = numbers[5 : 5 + 3 * count]
        if len(body) < 3 * count:
            raise ValueError(
                f"test case announces {count} passenger requests "
                f"but holds only {len(body) // 3}"
            )
        triples = zip(*[iter(body)] * 3)
        requests = tuple(
            (PassengerRequest(request_id, start, requested), arrival)
            for request_id, (start, requested, arrival) in enumerate(triples)
        )
        return cls(elevators, height, solvers, last_request, requests)


def load_scenario(path: str | Path) -> Scenario:
    """Read a test case file."""
    return Scenario.parse(Path(path).read_text())


def create_auth_string(length: int, rng: random.Random) -> str:
    """Return a random authorization string of lower-case letters from 'a' on."""
    return "".join(
        chr(ord("a") + rng.randrange(AUTH_STRING_UNIQUE_LETTERS)) for _ in range(length)
    )


class Solver:
    """Answers whether a guess matches a target elevator's authorization string."""

    def __init__(self, auth_strings: Sequence[str]) -> None:
        self._auth_strings = auth_strings
        self._target = 0

    def set_target(self, elevator: int) -> None:
        """Choose the elevator whose string later guesses are checked against."""
        self._target = elevator

    def guess(self, auth_string: str) -> bool:
        """Tell whether the guess is the target elevator's current string."""
        return self._auth_strings[self._target] == auth_string


@dataclass(frozen=True)
class SimulationResult:
    """How a run went."""

    turns: int
    total_elevator_movement: int
    success: bool
    elapsed_seconds: float
    error: Optional[str] = None


@dataclass
class _Passenger:
    request: PassengerRequest
    arrival_time: int
    location: int
    granted: bool = False
    in_elevator: bool = False
    moved_this_turn: bool = False


@dataclass
class _Elevator:
    floor: int = 0
    passengers: list[int] = field(default_factory=list)


class Helper:
    """Keeps the true state of the building and checks every turn."""

    def __init__(self, scenario: Scenario, rng: Optional[random.Random] = None) -> None:
        self.scenario = scenario
        self._rng = rng if rng is not None else random.Random()
        self.shared = SharedState(scenario.elevator_count)
        self._auth_strings = [""] * scenario.elevator_count
        self.solvers = [Solver(self._auth_strings) for _ in range(scenario.solver_count)]
        self._passengers = [
            _Passenger(request, arrival, location=request.start_floor)
            for request, arrival in scenario.requests
        ]
        self._elevators = [_Elevator() for _ in range(scenario.elevator_count)]
        self._upcoming = 0
        self.turn_number = 0
        self.total_elevator_movement = 0
        self.requests_remaining = len(self._passengers)

    def start_turn(self) -> TurnChangeResponse:
        """Advance to the next turn and publish its state."""
        self.turn_number += 1
        self.shared.reset_turn()

        while (
            self._upcoming < len(self._passengers)
            and self._passengers[self._upcoming].arrival_time == self.turn_number
        ):
            self.shared.new_passenger_requests.append(self._passengers[self._upcoming].request)
            self._upcoming += 1

        for index, elevator in enumerate(self._elevators):
            if elevator.passengers:
                self._auth_strings[index] = create_auth_string(
                    len(elevator.passengers), self._rng
                )

        self.shared.elevator_floors[:] = [elevator.floor for elevator in self._elevators]
        return TurnChangeResponse(
            turn_number=self.turn_number,
            new_passenger_request_count=len(self.shared.new_passenger_requests),
        )

    def end_turn(self, request: TurnChangeRequest) -> None:
        """Apply the control program's moves, raising SimulationError on a violation."""
        shared = self.shared
        for index, elevator in enumerate(self._elevators):
            if elevator.passengers and shared.elevator_movement_instructions[index] != "s":
                expected = self._auth_strings[index]
                received = shared.auth_strings[index]
                if received != expected:
                    self._fail(
                        f"Expected authorization string {expected} for elevator {index}, "
                        f"received {received} instead"
                    )

        for passenger in self._passengers[: self._upcoming]:
            passenger.moved_this_turn = False

        for request_id in self._entries(
            shared.dropped_passengers, request.dropped_passengers_count, "dropped"
        ):
            self._drop(request_id)

        for request_id, elevator_number in self._entries(
            shared.picked_up_passengers, request.picked_up_passengers_count, "picked up"
        ):
            self._pick_up(request_id, elevator_number)

        for index, elevator in enumerate(self._elevators):
            self._move(index, elevator, shared.elevator_movement_instructions[index])

    def run(self, strategy: Strategy) -> SimulationResult:
        """Play turns until every request is granted or a rule is broken.

        After the last turn the strategy receives the closing responses
        (an error response if a rule was broken, then a finished one); what
        it returns for those is ignored.
        """
        started = time.perf_counter()
        error: Optional[SimulationError] = None
        response = TurnChangeResponse(turn_number=self.turn_number)

        while self.requests_remaining > 0:
            response = self.start_turn()
            request = strategy(response, self.shared)
            try:
                self.end_turn(request)
            except SimulationError as exc:
                error = exc
                break

        if error is not None:
            response = replace(response, error_occurred=True)
            strategy(response, self.shared)
        strategy(replace(response, finished=True), self.shared)

        return SimulationResult(
            turns=self.turn_number,
            total_elevator_movement=self.total_elevator_movement,
            success=error is None,
            elapsed_seconds=time.perf_counter() - started,
            error=str(error) if error is not None else None,
        )

    def _fail(self, reason: str) -> None:
        raise SimulationError(self.turn_number, reason)

    def _entries(self, entries: list, count: int, what: str) -> list:
        if not 0 <= count <= len(entries):
            self._fail(
                f"Turn change request reports {count} {what} passengers, "
                f"but {len(entries)} were written"
            )
        return entries[:count]

    def _passenger(self, request_id: int) -> _Passenger:
        if not 0 <= request_id < len(self._passengers):
            self._fail(f"Attempted to move passenger {request_id}, which does not exist")
        return self._passengers[request_id]

    def _check_movable(self, request_id: int, passenger: _Passenger) -> None:
        if passenger.granted:
            self._fail(
                f"Attempted to move passenger {request_id} even though their request "
                "has already been fulfilled"
            )
        if passenger.arrival_time > self.turn_number:
            self._fail(
                f"Attempted to move passenger {request_id} even though their request "
                "has not arrived yet"
            )

    def _check_not_moved(self, request_id: int, passenger: _Passenger) -> None:
        if passenger.moved_this_turn:
            self._fail(
                f"Attempted to move passenger {request_id} even though they have "
                "already moved this turn"
            )

    def _drop(self, request_id: int) -> None:
        passenger = self._passenger(request_id)
        self._check_movable(request_id, passenger)
        if not passenger.in_elevator:
            self._fail(
                f"Attempted to drop passenger {request_id} even though they aren't "
                "in any elevator"
            )
        self._check_not_moved(request_id, passenger)

        elevator = self._elevators[passenger.location]
        passenger.in_elevator = False
        passenger.location = elevator.floor
        passenger.moved_this_turn = True
        if passenger.request.requested_floor == passenger.location:
            passenger.granted = True
            self.requests_remaining -= 1
        elevator.passengers.remove(request_id)

    def _pick_up(self, request_id: int, elevator_number: int) -> None:
        count = len(self._elevators)
        if not 0 <= elevator_number < count:
            self._fail(
                f"Attempted to move passenger {request_id} to elevator {elevator_number}, "
                f"which does not exist (There are {count} elevators, "
                f"numbered from 0 to {count - 1})"
            )
        passenger = self._passenger(request_id)
        elevator = self._elevators[elevator_number]
        self._check_movable(request_id, passenger)
        if passenger.in_elevator:
            self._fail(
                f"Attempted to move passenger {request_id} to an elevator even "
                "though they are already in an elevator"
            )
        self._check_not_moved(request_id, passenger)
        if passenger.location != elevator.floor:
            self._fail(
                f"Can't move passenger {request_id} to elevator {elevator_number}, "
                f"as the passenger is on floor {passenger.location} "
                f"while the elevator is on floor {elevator.floor}"
            )
        if len(elevator.passengers) >= ELEVATOR_MAX_CAP:
            self._fail(
                f"Can't move passenger {request_id} to elevator {elevator_number}, "
                "as the elevator is already full"
            )

        passenger.in_elevator = True
        passenger.location = elevator_number
        passenger.moved_this_turn = True
        elevator.passengers.append(request_id)

    def _move(self, index: int, elevator: _Elevator, instruction: str) -> None:
        if instruction == "u":
            if elevator.floor >= self.scenario.building_height - 1:
                self._fail(
                    f"Attempted to move elevator {index} up even though it is "
                    "already on the highest floor"
                )
            elevator.floor += 1
            self.total_elevator_movement += 1
        elif instruction == "d":
            if elevator.floor <= 0:
                self._fail(
                    f"Attempted to move elevator {index} down even though it is "
                    "already on the lowest floor"
                )
            elevator.floor -= 1
            self.total_elevator_movement += 1
        elif instruction != "s":
            self._fail(f"Elevator {index} submitted unknown movement command {instruction}")