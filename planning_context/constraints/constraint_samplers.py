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


"""Constraint samplers and the manager that selects them."""

from __future__ import annotations

from collections.abc import Callable
import math
import threading
from typing import TYPE_CHECKING

import numpy as np

from planning_context.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from planning_context.constraints.kinematic_constraints import ConstraintSet
    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.protocols import ConstraintSampler
    from planning_context.spec.types import StateVector

logger = setup_logger()

_TWO_PI = 2.0 * math.pi

ConstraintSamplerAllocator = Callable[["ConfigurationSpace", "ConstraintSet"], "ConstraintSampler | None"]


class JointConstraintSampler:
    """Samples joint constraints by drawing inside the intersection of constraint and joint bounds.

    Unconstrained joints are drawn uniformly within their limits. Projection
    clamps constrained joints to the nearest admissible value.
    """

    def __init__(
        self,
        space: ConfigurationSpace,
        constraint_set: ConstraintSet,
        seed: int | None = None,
    ) -> None:
        self._space = space
        self._constraint_set = constraint_set
        self._rng = np.random.default_rng(seed)
        self._indices = constraint_set.indices
        self._continuous = space.continuous[self._indices]

        c_lower, c_upper = constraint_set.bounds()
        j_lower, j_upper = space.bounds
        lower = np.where(self._continuous, c_lower, np.maximum(c_lower, j_lower[self._indices]))
        upper = np.where(self._continuous, c_upper, np.minimum(c_upper, j_upper[self._indices]))
        self._lower = lower
        self._upper = upper
        self._feasible = bool(np.all(lower <= upper))

    @property
    def is_feasible(self) -> bool:
        return self._feasible

    @property
    def constraint_set(self) -> ConstraintSet:
        return self._constraint_set

    def sample(self, reference: StateVector, max_attempts: int = 10) -> StateVector | None:
        if not self._feasible:
            return None
        for _ in range(max_attempts):
            state = self._draw_free()
            state[self._indices] = self._rng.uniform(self._lower, self._upper)
            state = self._space.enforce_bounds(state)
            if self._constraint_set.is_satisfied(state):
                return state
        return None

    def project(self, state: StateVector, max_attempts: int = 10) -> StateVector | None:
        if not self._feasible:
            return None
        q = np.asarray(state, dtype=np.float64).copy()
        current = q[self._indices]
        clamped = np.clip(current, self._lower, self._upper)
        if self._continuous.any():
            # clamp the wrapped offset from the constraint center, then restore the absolute angle
            center = 0.5 * (self._lower + self._upper)
            offset = (current - center + math.pi) % _TWO_PI - math.pi
            offset = np.clip(offset, self._lower - center, self._upper - center)
            clamped = np.where(self._continuous, center + offset, clamped)
        q[self._indices] = clamped
        q = self._space.enforce_bounds(q)
        if self._constraint_set.is_satisfied(q):
            return q
        return None

    def _draw_free(self) -> StateVector:
        lower, upper = self._space.bounds
        return self._rng.uniform(lower, upper)


class ConstraintSamplerManager:
    """Picks a constraint sampler for a compiled constraint set.

    Registered allocators are tried in registration order; the built-in
    JointConstraintSampler is the fallback. Returns None when no sampler can
    satisfy the set (e.g. its bounds miss the joint limits entirely).
    """

    def __init__(self, seed: int | None = None) -> None:
        self._allocators: list[ConstraintSamplerAllocator] = []
        self._seed_sequence = np.random.SeedSequence(seed)
        self._seed_lock = threading.Lock()

    def register_sampler_allocator(self, allocator: ConstraintSamplerAllocator) -> None:
        self._allocators.append(allocator)

    def select_sampler(
        self, space: ConfigurationSpace, constraint_set: ConstraintSet
    ) -> ConstraintSampler | None:
        for allocator in self._allocators:
            sampler = allocator(space, constraint_set)
            if sampler is not None:
                return sampler

        # spawn() advances the sequence; samplers are selected from several threads
        with self._seed_lock:
            child = self._seed_sequence.spawn(1)[0]
        seed = int(child.generate_state(1)[0])
        sampler = JointConstraintSampler(space, constraint_set, seed=seed)
        if not sampler.is_feasible:
            logger.debug(
                f"Constraint set {constraint_set.fingerprint[:8]} does not intersect the joint limits"
            )
            return None
        return sampler
