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


"""Validity checking and problem definition over a ConfigurationSpace."""

from __future__ import annotations

import math
import threading
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from planning_context.goal_sampling import GoalRegion
    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.protocols import StateSampler, StateValidityChecker
    from planning_context.spec.types import StateVector


class SpaceInformation:
    """ConfigurationSpace plus a validity checker and motion resolution.

    A state is valid when it lies within bounds and the checker (if any)
    accepts it. Motions are validated by checking interpolated states spaced at
    ``longest_valid_segment_fraction`` of the space extent.
    """

    def __init__(
        self,
        space: ConfigurationSpace,
        validity_checker: StateValidityChecker | None = None,
        longest_valid_segment_fraction: float = 0.01,
    ) -> None:
        self._space = space
        self._validity_checker = validity_checker
        self._segment_length = max(
            1e-6, longest_valid_segment_fraction * space.get_maximum_extent()
        )

    @property
    def space(self) -> ConfigurationSpace:
        return self._space

    @property
    def longest_valid_segment_length(self) -> float:
        return self._segment_length

    def set_state_validity_checker(self, checker: StateValidityChecker | None) -> None:
        self._validity_checker = checker

    def alloc_state_sampler(self) -> StateSampler:
        return self._space.alloc_state_sampler()

    def is_valid(self, state: StateVector) -> bool:
        if not self._space.satisfies_bounds(state):
            return False
        if self._validity_checker is None:
            return True
        return bool(self._validity_checker(state))

    def check_motion(self, a: StateVector, b: StateVector) -> bool:
        """True if every interpolated state from ``a`` to ``b`` (inclusive of ``b``) is valid."""
        dist = self._space.distance(a, b)
        steps = max(1, math.ceil(dist / self._segment_length))
        for i in range(1, steps + 1):
            if not self.is_valid(self._space.interpolate(a, b, i / steps)):
                return False
        return True


class ProblemDefinition:
    """Start state, goal region and the solutions found so far."""

    def __init__(
        self,
        si: SpaceInformation,
        start_state: StateVector,
        goal: GoalRegion,
    ) -> None:
        self._si = si
        self._start_state = np.asarray(start_state, dtype=np.float64).copy()
        self._goal = goal
        self._lock = threading.Lock()
        self._solutions: list[list[StateVector]] = []

    @property
    def space_information(self) -> SpaceInformation:
        return self._si

    @property
    def start_state(self) -> StateVector:
        return self._start_state

    def set_start_state(self, state: StateVector) -> None:
        self._start_state = np.asarray(state, dtype=np.float64).copy()

    @property
    def goal(self) -> GoalRegion:
        return self._goal

    def add_solution_path(self, path: list[StateVector]) -> None:
        with self._lock:
            self._solutions.append(list(path))

    def clear_solution_paths(self) -> None:
        with self._lock:
            self._solutions.clear()

    def has_solution(self) -> bool:
        with self._lock:
            return bool(self._solutions)

    def get_solution_path(self) -> list[StateVector] | None:
        """Shortest solution found so far (by joint-space length), or None."""
        with self._lock:
            if not self._solutions:
                return None
            return min(self._solutions, key=self._path_length)

    def _path_length(self, path: list[StateVector]) -> float:
        return sum(self._si.space.distance(a, b) for a, b in zip(path[:-1], path[1:]))
