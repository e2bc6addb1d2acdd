# liftsim

liftsim is a turn-based elevator simulator. A building has a number of floors
and elevators. Passenger requests arrive on given turns. On each turn, a
strategy decides three things:

- which passengers to drop off
- which passengers to pick up
- whether each elevator goes up (`u`), down (`d`) or stays (`s`)

Before an elevator that carries passengers can move or be given any command
other than `s`, it needs an authorization string. At the start of each turn,
the helper makes a new random string for every elevator with passengers on
board. The string is as long as the number of passengers on board and uses the
letters `a` to `f`. The strategy cannot see the string. To find it, the strategy
asks `Solver` objects whether a guess is correct.

The `Helper` checks every move. It stops the run at the first broken rule and
reports why. The rules it enforces are these:

- A passenger whose request is already fulfilled cannot be moved.
- A passenger whose request has not arrived yet cannot be moved.
- A passenger cannot be moved twice in one turn.
- Only passengers inside an elevator can be dropped.
- A passenger already in an elevator cannot be picked up.
- A passenger can only be picked up on the elevator's floor.
- A passenger cannot be picked up into a full elevator, which holds 20.
- A passenger cannot be moved to an elevator that does not exist.
- An elevator cannot go above the top floor or below floor 0.
- Movement commands other than `u`, `d` and `s` are not allowed.
- An elevator with passengers that does not stay (`s`) needs the right authorization string.

A dropped passenger counts as delivered if they leave the elevator on their
requested floor. The run ends when every request is delivered.

## Installation

```
pip install .
```

## Test case format

A test case file holds whitespace-separated integers in this order:

```
<elevator count>
<building height>
<solver count>
<turn of the last request>
<passenger request count>
<start floor> <requested floor> <arrival turn>   # one triple per request
```

Passenger ids are given in file order, starting at `0`. Floors are numbered
from `0`, and so are elevators. The first turn is turn 1.

Requests must be listed in order of arrival turn. A request reaches the
strategy only on a turn equal to its arrival turn. If a request appears out of
order, every request after it stays unpublished.

There can be at most 100 elevators. `Scenario.parse` raises `ValueError` in
these cases:

- the header is incomplete
- the text is not made of integers
- the elevator count is out of range
- the request count is negative
- the file holds fewer triples than the count announces

## Command line

```
liftsim 3
```

This reads `testcase3.txt` from the current directory and runs the built-in
strategy, `liftsim.solution.Solution`, against it. Then it prints the
following:

- the rule that was broken, if there was one
- the time the run took
- the number of turns
- the total elevator movement
- whether the test case was completed

If any arguments follow the test case number, a warning is printed and they are
ignored. The command exits with status 1 in these cases:

- no number is given
- the file cannot be read or parsed
- the test case has fewer than one solver

Otherwise it exits with status 0, even when the strategy failed the test case.

## Library use

`Helper.run` takes a strategy. A strategy is a callable that receives a
`TurnChangeResponse` and the `SharedState`. It writes its decisions into the
shared state and returns a `TurnChangeRequest` giving how many drop and pick-up
entries it wrote.

`Solution.handle_turn` returns `None` when it has nothing to send, so wrap it
as shown:

```python
from liftsim.helper import Helper, load_scenario
from liftsim.models import TurnChangeRequest
from liftsim.solution import Solution

scenario = load_scenario("testcase1.txt")
helper = Helper(scenario)
solution = Solution(
    scenario.elevator_count,
    scenario.building_height,
    helper.solvers,
    scenario.last_request_timestamp,
)

def strategy(response, shared):
    return solution.handle_turn(response, shared) or TurnChangeRequest()

result = helper.run(strategy)
print(result.success, result.turns, result.total_elevator_movement, result.error)
```

After the last turn, the strategy is called again with closing responses:

- one with `error_occurred` set, if a rule was broken
- then one with `finished` set

Whatever the strategy returns for these closing calls is ignored.

### `liftsim.models`

This module holds the types that the helper and the strategy exchange:

- `PassengerRequest` has `request_id`, `start_floor` and `requested_floor`.
- `TurnChangeRequest` has `dropped_passengers_count` and `picked_up_passengers_count`.
- `TurnChangeResponse` has `turn_number`, `new_passenger_request_count`, `error_occurred` and `finished`.
- `SharedState` holds the per-turn data, described below.

The helper fills these fields of `SharedState`:

- `new_passenger_requests`
- `elevator_floors`

The strategy fills these fields:

- `auth_strings`
- `elevator_movement_instructions`
- `dropped_passengers`, a list of passenger ids
- `picked_up_passengers`, a list of `(passenger id, elevator)` pairs

`SharedState.reset_turn()` clears the request, drop and pick-up lists.

### `liftsim.helper`

- `Scenario` and `load_scenario(path)` read a test case.
- `Helper(scenario, rng=None)` keeps the true state of the building. It offers these methods:
  - `start_turn()`
  - `end_turn(request)`, which raises `SimulationError` on a broken rule
  - `run(strategy)`, which returns a `SimulationResult`
- `Helper.solvers` holds one `Solver` per solver in the scenario. A `Solver` has two methods:
  - `set_target(elevator)` chooses the elevator to check guesses against.
  - `guess(auth_string)` returns whether the guess is that elevator's current string.
- `create_auth_string(length, rng)` makes a random string.

### `liftsim.solution`

- `auth_string_guess(index, length)` returns the index-th candidate string, in lexicographic order.
- `crack_auth_string(solvers, elevator, length)` splits the candidate space into one range per solver and searches the ranges in threads. It stops at the first match.
- `Solution` is the reference strategy:
  - It only collects requests until the turn after the last request arrives.
  - After that, each elevator sweeps between floor 0 and the top floor.
  - Riders are dropped at their requested floors.
  - A waiting passenger boards the least crowded elevator on their floor that is heading their way. An elevator takes at most 5 passengers under this strategy.

## What this package does not do

The strategy runs in the same Python process as the helper and is passed to it
as a callable. The package has no way to run a separately built control
program. There is no inter-process transport between helper and strategy.