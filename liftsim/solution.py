"""An elevator-control strategy that sweeps elevators up and down the building."""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

from liftsim.helper import Solver
from liftsim.models import (
    AUTH_STRING_UNIQUE_LETTERS,
    ELEVATOR_MAX_CAP,
    PassengerRequest,
    SharedState,
    TurnChangeRequest,
    TurnChangeResponse,
)

ALLOWED_PASSENGER_LIMIT = 5
_LETTERS = "abcdef"[:AUTH_STRING_UNIQUE_LETTERS]

log = logging.getLogger(__name__)


def auth_string_guess(index: int, length: int) -> str:
    """Return the ``index``-th candidate authorization string of ``length`` letters.

    Candidates are numbered in base six, most significant letter first, so
    index 0 is all ``a`` and the order is lexicographic.  Digits beyond
    ``length`` are dropped.
    """
    if length < 0:
        raise ValueError(f"length must not be negative, got {length}")
    if index < 0:
        raise ValueError(f"index must not be negative, got {index}")
    base = len(_LETTERS)
    letters = []
    for _ in range(length):
        index, digit = divmod(index, base)
        letters.append(_LETTERS[digit])
    return "".join(reversed(letters))


def crack_auth_string(
    solvers: Sequence[Solver], elevator: int, length: int
) -> Optional[str]:
    """Find an elevator's authorization string by asking the solvers in parallel.

    The candidate space is split into one contiguous range per solver; the
    last solver also takes the remainder.  Returns the string, or ``None``
    if no candidate was accepted.
    """
    if not solvers:
        raise ValueError("at least one solver is needed")
    total = len(_LETTERS) ** length
    range_size = total // len(solvers)
    found = threading.Event()
    lock = threading.Lock()
    result: list[str] = []

    def work(position: int, solver: Solver) -> None:
        start = position * range_size
        stop = total if position == len(solvers) - 1 else (position + 1) * range_size
        solver.set_target(elevator)
        for index in range(start, stop):
            if found.is_set():
                return
            candidate = auth_string_guess(index, length)
            if solver.guess(candidate):
                with lock:
                    if not found.is_set():
                        result.append(candidate[:ELEVATOR_MAX_CAP])
                        found.set()
                return

    with ThreadPoolExecutor(max_workers=len(solvers)) as pool:
        for future in [
            pool.submit(work, position, solver) for position, solver in enumerate(solvers)
        ]:
            future.result()

    return result[0] if result else None


class _Stage(enum.Enum):
    WAITING = "u"
    RIDING = "p"
    DELIVERED = "c"


@dataclass
class _Passenger:
    request: PassengerRequest
    stage: _Stage = _Stage.WAITING
    elevator: Optional[int] = None

    @property
    def direction(self) -> str:
        return "u" if self.request.requested_floor > self.request.start_floor else "d"


class Solution:
    """Controls the elevators turn by turn.

    Until the turn after the last request arrives, elevators stay put and
    new requests are only collected.  From then on each elevator sweeps
    between the ground and top floors, drops riders at their floors, and
    takes waiting passengers travelling its way into the least crowded
    elevator on their floor.
    """

    def __init__(
        self,
        elevator_count: int,
        floor_count: int,
        solvers: Sequence[Solver],
        last_request_turn: int,
    ) -> None:
        self.elevator_count = elevator_count
        self.floor_count = floor_count
        self.solvers = list(solvers)
        self.last_request_turn = last_request_turn
        self.passengers: list[_Passenger] = []
        self.directions = ["s"] * elevator_count
        self.riders = [0] * elevator_count
        self.failed = False
        self.finished = False

    @property
    def all_delivered(self) -> bool:
        return all(p.stage is _Stage.DELIVERED for p in self.passengers)

    def handle_turn(
        self, response: TurnChangeResponse, shared: SharedState
    ) -> Optional[TurnChangeRequest]:
        """Decide this turn's moves; return ``None`` when there is nothing to send."""
        if response.error_occurred:
            log.error("the simulator reported an error")
            self.failed = True
            return None
        if response.finished:
            self.finished = True
            return None

        if response.turn_number <= self.last_request_turn + 1:
            return self._collect(response, shared)
        if self.all_delivered:
            return None
        return self._operate(response, shared)

    def _collect(self, response: TurnChangeResponse, shared: SharedState) -> TurnChangeRequest:
        new_requests = shared.new_passenger_requests[: response.new_passenger_request_count]
        self.passengers.extend(_Passenger(request) for request in new_requests)
        self.directions = ["s"] * self.elevator_count
        shared.elevator_movement_instructions[:] = self.directions
        return TurnChangeRequest()

    def _operate(self, response: TurnChangeResponse, shared: SharedState) -> TurnChangeRequest:
        log.debug("current turn number: %d", response.turn_number)
        initial_riders = list(self.riders)
        floors = list(shared.elevator_floors)
        dropped = 0
        picked_up = 0

        for elevator, floor in enumerate(floors):
            for passenger in self.passengers:
                if (
                    passenger.elevator == elevator
                    and passenger.stage is _Stage.RIDING
                    and passenger.request.requested_floor == floor
                ):
                    passenger.stage = _Stage.DELIVERED
                    passenger.elevator = None
                    self.riders[elevator] -= 1
                    shared.dropped_passengers.append(passenger.request.request_id)
                    dropped += 1
                    log.debug("dropped passenger id: %d", passenger.request.request_id)

        for elevator, floor in enumerate(floors):
            if initial_riders[elevator] > 0:
                auth = crack_auth_string(self.solvers, elevator, initial_riders[elevator])
                if auth is not None:
                    shared.auth_strings[elevator] = auth
            if floor == self.floor_count - 1:
                self.directions[elevator] = "d"
            elif floor == 0:
                self.directions[elevator] = "u"
            shared.elevator_movement_instructions[elevator] = self.directions[elevator]

        for passenger in self.passengers:
            if passenger.stage is not _Stage.WAITING:
                continue
            chosen = self._least_crowded(passenger, floors)
            if chosen is None:
                continue
            passenger.stage = _Stage.RIDING
            passenger.elevator = chosen
            self.riders[chosen] += 1
            shared.picked_up_passengers.append((passenger.request.request_id, chosen))
            picked_up += 1
            log.debug(
                "picked up passenger id: %d by elevator: %d on floor %d",
                passenger.request.request_id,
                chosen,
                floors[chosen],
            )

        return TurnChangeRequest(
            dropped_passengers_count=dropped, picked_up_passengers_count=picked_up
        )

    def _least_crowded(self, passenger: _Passenger, floors: list[int]) -> Optional[int]:
        candidates = [
            elevator
            for elevator, floor in enumerate(floors)
            if self.riders[elevator] < ALLOWED_PASSENGER_LIMIT
            and self.directions[elevator] in (passenger.direction, "s")
            and passenger.request.start_floor == floor
        ]
        return min(candidates, key=lambda e: self.riders[e], default=None)