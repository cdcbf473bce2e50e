# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""Helpers for exercising planning contexts in tests and examples."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import threading
import time
from typing import TYPE_CHECKING

from planning_context.spec.enums import AttemptStatus, TerminationReason
from planning_context.spec.types import AttemptResult, Constraints, JointConstraint

if TYPE_CHECKING:
    from planning_context.space.space_information import ProblemDefinition, SpaceInformation
    from planning_context.spec.types import StateVector
    from planning_context.termination import TerminationCondition


def box_constraints(
    lower: float,
    upper: float,
    joints: tuple[str, ...] = ("joint1", "joint2"),
    name: str = "",
) -> Constraints:
    """Constraints keeping every joint in ``joints`` within [lower, upper]."""
    return Constraints(
        joint_constraints=tuple(JointConstraint.from_bounds(j, lower, upper) for j in joints),
        name=name,
    )


def wall_checker(joint_index: int, lower: float, upper: float) -> Callable[[StateVector], bool]:
    """Validity checker rejecting states whose ``joint_index`` lies in [lower, upper]."""

    def is_valid(state: StateVector) -> bool:
        return not (lower <= state[joint_index] <= upper)

    return is_valid


class ScriptedStrategy:
    """SearchStrategy whose attempts follow a script instead of searching.

    Behaviours:
        "abort": sleep ``duration`` then give up
        "block": wait until the termination condition fires
        "succeed": return the start state joined to the first goal state
        "gate": signal ``entered`` and block until ``release`` is set or ``ptc`` fires
    """

    def __init__(
        self,
        si: SpaceInformation,
        name: str,
        behaviour: str = "abort",
        duration: float = 0.0,
    ) -> None:
        self._si = si
        self._name = name
        self._behaviour = behaviour
        self._duration = duration
        self.problem: ProblemDefinition | None = None
        self.attempts = 0
        self.clears = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    @classmethod
    def allocator(
        cls, behaviour: str, duration: float = 0.0, instances: list[ScriptedStrategy] | None = None
    ) -> Callable[[SpaceInformation, str, Mapping[str, str]], ScriptedStrategy]:
        def allocate(si: SpaceInformation, name: str, params: Mapping[str, str]) -> ScriptedStrategy:
            strategy = cls(si, name, behaviour=behaviour, duration=duration)
            if instances is not None:
                instances.append(strategy)
            return strategy

        return allocate

    def get_name(self) -> str:
        return self._name

    def configure(self, problem: ProblemDefinition) -> None:
        self.problem = problem

    def clear(self) -> None:
        self.clears += 1

    def attempt_once(self, ptc: TerminationCondition) -> AttemptResult:
        self.attempts += 1
        if self._behaviour == "abort":
            time.sleep(self._duration)
            return AttemptResult(status=AttemptStatus.ABORTED, message="scripted abort")

        if self._behaviour == "succeed":
            goal = self.problem.goal
            while not goal.has_states():
                if goal.wait_for_goal(0, ptc) or ptc():
                    break
            states = goal.states_since(0)
            if not states:
                return AttemptResult(status=AttemptStatus.TIMEOUT)
            return AttemptResult(
                status=AttemptStatus.EXACT_SOLUTION, path=[self.problem.start_state, states[0]]
            )

        if self._behaviour == "gate":
            self.entered.set()
            while not self.release.is_set() and not ptc.wait(0.01):
                pass
        else:
            while not ptc.wait(0.01):
                pass

        status = {
            TerminationReason.EXTERNAL: AttemptStatus.TERMINATED,
            TerminationReason.DEADLINE: AttemptStatus.TIMEOUT,
        }.get(ptc.reason, AttemptStatus.ABORTED)
        return AttemptResult(status=status)
