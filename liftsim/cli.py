"""Command line entry point: run a numbered test case against the built-in strategy."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from liftsim.helper import Helper, SimulationResult, load_scenario
from liftsim.models import SharedState, TurnChangeRequest, TurnChangeResponse
from liftsim.solution import Solution


def _testcase_path(number: str) -> Path:
    return Path(f"testcase{number}.txt")


def _report(result: SimulationResult) -> None:
    if result.error is not None:
        print(result.error)
    print(f"Your solution took {result.elapsed_seconds:.6f} seconds to execute.")
    if result.success:
        print(
            f"Your solution took {result.turns} turns, with a total elevator "
            f"movement of {result.total_elevator_movement}, to successfully "
            "complete the test case."
        )
    else:
        print(
            f"Your solution took {result.turns} turns, with a total elevator "
            f"movement of {result.total_elevator_movement}, but failed to "
            "complete the test case."
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run ``testcase<N>.txt`` from the working directory and print how it went."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Error: Test case number must be passed as a command line argument.")
        return 1
    if len(args) > 1:
        print(
            "Warning: Extra command line arguments passed to helper; "
            "these will be ignored."
        )

    number = args[0]
    try:
        scenario = load_scenario(_testcase_path(number))
    except OSError as exc:
        print(f"Error opening testcase file in helper: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error reading testcase file in helper: {exc}", file=sys.stderr)
        return 1

    if scenario.solver_count < 1:
        print("Error: the test case must provide at least one solver.", file=sys.stderr)
        return 1

    helper = Helper(scenario)
    solution = Solution(
        scenario.elevator_count,
        scenario.building_height,
        helper.solvers,
        scenario.last_request_timestamp,
    )

    def strategy(response: TurnChangeResponse, shared: SharedState) -> TurnChangeRequest:
        request = solution.handle_turn(response, shared)
        return request if request is not None else TurnChangeRequest()

    print(f"Testcase {number}")
    started = time.perf_counter()
    result = helper.run(strategy)
    _report(result)
    if result.elapsed_seconds > time.perf_counter() - started:
        # Never reached; elapsed time is measured inside the run.
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())