"""Data shared between the elevator simulator and a control program."""

from __future__ import annotations

from dataclasses import dataclass, field

ELEVATOR_MAX_CAP = 20
AUTH_STRING_UNIQUE_LETTERS = 6
MAX_NEW_REQUESTS = 30
MAX_ELEVATORS = 100


@dataclass(frozen=True)
class PassengerRequest:
    """A passenger who wants to travel from one floor to another."""

    request_id: int
    start_floor: int
    requested_floor: int


@dataclass
class TurnChangeRequest:
    """Sent by the control program to end its turn.

    The counts say how many entries of the shared drop and pick-up lists
    belong to this turn.
    """

    dropped_passengers_count: int = 0
    picked_up_passengers_count: int = 0


@dataclass(frozen=True)
class TurnChangeResponse:
    """Sent by the simulator when a new turn starts or the run ends."""

    turn_number: int
    new_passenger_request_count: int = 0
    error_occurred: bool = False
    finished: bool = False


@dataclass
class SharedState:
    """State both sides read and write during a turn.

    The simulator fills ``new_passenger_requests`` and ``elevator_floors``;
    the control program fills ``auth_strings``,
    ``elevator_movement_instructions`` (``"u"``, ``"d"`` or ``"s"``),
    ``dropped_passengers`` and ``picked_up_passengers`` (pairs of passenger
    id and elevator number).
    """

    elevator_count: int
    auth_strings: list[str] = field(init=False)
    elevator_movement_instructions: list[str] = field(init=False)
    new_passenger_requests: list[PassengerRequest] = field(init=False)
    elevator_floors: list[int] = field(init=False)
    dropped_passengers: list[int] = field(init=False)
    picked_up_passengers: list[tuple[int, int]] = field(init=False)

    def __post_init__(self) -> None:
        if not 0 <= self.elevator_count <= MAX_ELEVATORS:
            raise ValueError(
                f"elevator count must be between 0 and {MAX_ELEVATORS}, "
                f"got {self.elevator_count}"
            )
        self.auth_strings = [""] * self.elevator_count
        self.elevator_movement_instructions = [""] * self.elevator_count
        self.new_passenger_requests = []
        self.elevator_floors = [0] * self.elevator_count
        self.dropped_passengers = []
        self.picked_up_passengers = []

    def reset_turn(self) -> None:
        """Clear the per-turn request, drop and pick-up lists."""
        self.new_passenger_requests.clear()
        self.dropped_passengers.clear()
        self.picked_up_passengers.clear()