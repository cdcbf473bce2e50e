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


"""State samplers over a ConfigurationSpace.

- UniformStateSampler: default, ignores path constraints
- ProjectingStateSampler: uniform draw projected online onto a constraint manifold
- ConstraintApproximationStateSampler: draws from a precomputed constraint approximation
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from planning_context.constraints.constraints_library import ConstraintApproximation
    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.protocols import ConstraintSampler
    from planning_context.spec.types import StateVector


def _spawn_rng(space: ConfigurationSpace) -> np.random.Generator:
    # samplers may run on other threads; never share the space's generator
    return np.random.default_rng(space.rng.integers(0, 2**63 - 1))


class UniformStateSampler:
    """Uniform samples within the joint bounds."""

    def __init__(self, space: ConfigurationSpace) -> None:
        self._space = space
        self._rng = _spawn_rng(space)
        self._lower, self._upper = space.bounds

    def sample_uniform(self) -> StateVector:
        return self._rng.uniform(self._lower, self._upper)

    def sample_uniform_near(self, near: StateVector, distance: float) -> StateVector:
        offset = self._rng.uniform(-distance, distance, size=self._space.dimension)
        return self._space.enforce_bounds(np.asarray(near, dtype=np.float64) + offset)


class ProjectingStateSampler:
    """Uniform samples projected onto a constraint manifold at draw time."""

    def __init__(
        self,
        space: ConfigurationSpace,
        constraint_sampler: ConstraintSampler,
        max_attempts: int = 10,
    ) -> None:
        self._space = space
        self._constraint_sampler = constraint_sampler
        self._uniform = UniformStateSampler(space)
        self._max_attempts = max_attempts

    @property
    def constraint_sampler(self) -> ConstraintSampler:
        return self._constraint_sampler

    def sample_uniform(self) -> StateVector:
        for _ in range(self._max_attempts):
            projected = self._constraint_sampler.project(self._uniform.sample_uniform())
            if projected is not None:
                return projected
        # unprojectable draws still make progress; the planner rejects them on validity
        return self._uniform.sample_uniform()

    def sample_uniform_near(self, near: StateVector, distance: float) -> StateVector:
        for _ in range(self._max_attempts):
            projected = self._constraint_sampler.project(
                self._uniform.sample_uniform_near(near, distance)
            )
            if projected is not None:
                return projected
        return np.asarray(near, dtype=np.float64).copy()


class ConstraintApproximationStateSampler:
    """Samples drawn from a cached approximation of the constraint-valid states."""

    def __init__(
        self,
        space: ConfigurationSpace,
        approximation: ConstraintApproximation,
        constraint_sampler: ConstraintSampler,
    ) -> None:
        self._space = space
        self._approximation = approximation
        self._constraint_sampler = constraint_sampler
        self._rng = _spawn_rng(space)
        self._uniform = UniformStateSampler(space)
        self._projecting = ProjectingStateSampler(space, constraint_sampler)

    @property
    def approximation(self) -> ConstraintApproximation:
        return self._approximation

    def sample_uniform(self) -> StateVector:
        states = self._approximation.states
        if len(states) == 0:
            return self._projecting.sample_uniform()
        return states[self._rng.integers(len(states))].copy()

    def sample_uniform_near(self, near: StateVector, distance: float) -> StateVector:
        projected = self._constraint_sampler.project(self._uniform.sample_uniform_near(near, distance))
        if projected is not None:
            return projected
        nearest = self._approximation.nearest(near)
        return nearest if nearest is not None else np.asarray(near, dtype=np.float64).copy()
