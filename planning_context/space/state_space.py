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


"""Joint-space configuration space for one planning group."""

from __future__ import annotations

from collections.abc import Callable
import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from planning_context.spec.config import StateSpaceSpecification
    from planning_context.spec.protocols import ProjectionEvaluator, StateSampler
    from planning_context.spec.types import GroupName, JointState, StateVector

StateSamplerAllocator = Callable[["ConfigurationSpace"], "StateSampler"]

_TWO_PI = 2.0 * math.pi


class ConfigurationSpace:
    """Bounded joint space of a planning group.

    Bounded joints use Euclidean differences; continuous joints wrap at +-pi
    and always take the shortest way around.
    """

    def __init__(self, spec: StateSpaceSpecification, seed: int | None = None) -> None:
        if not spec.joints:
            raise ValueError(f"Group '{spec.group_name}' has no joints")
        names = spec.joint_names
        if len(set(names)) != len(names):
            raise ValueError(f"Group '{spec.group_name}' has duplicate joint names")

        self._group_name = spec.group_name
        self._joint_names = names
        self._continuous = np.array([j.continuous for j in spec.joints], dtype=bool)
        self._lower = np.array(
            [-math.pi if j.continuous else j.lower for j in spec.joints], dtype=np.float64
        )
        self._upper = np.array(
            [math.pi if j.continuous else j.upper for j in spec.joints], dtype=np.float64
        )
        if np.any(self._lower > self._upper):
            raise ValueError(f"Group '{spec.group_name}' has a joint with lower > upper bound")

        self._rng = np.random.default_rng(seed)
        self._sampler_allocator: StateSamplerAllocator | None = None
        self._default_projection: ProjectionEvaluator | None = None

    # ============= Properties =============

    @property
    def group_name(self) -> GroupName:
        return self._group_name

    @property
    def joint_names(self) -> list[str]:
        return list(self._joint_names)

    @property
    def dimension(self) -> int:
        return len(self._joint_names)

    @property
    def bounds(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        return self._lower.copy(), self._upper.copy()

    @property
    def continuous(self) -> NDArray[np.bool_]:
        return self._continuous.copy()

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def get_maximum_extent(self) -> float:
        return float(np.linalg.norm(self._upper - self._lower))

    def joint_index(self, joint_name: str) -> int:
        """Position of ``joint_name`` in state vectors. Raises KeyError if not in the group."""
        try:
            return self._joint_names.index(joint_name)
        except ValueError:
            raise KeyError(joint_name) from None

    # ============= State Operations =============

    def difference(self, a: StateVector, b: StateVector) -> NDArray[np.float64]:
        """Vector from ``a`` to ``b`` (shortest way around for continuous joints)."""
        diff = np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)
        if self._continuous.any():
            wrapped = (diff + math.pi) % _TWO_PI - math.pi
            diff = np.where(self._continuous, wrapped, diff)
        return diff

    def distance(self, a: StateVector, b: StateVector) -> float:
        return float(np.linalg.norm(self.difference(a, b)))

    def interpolate(self, a: StateVector, b: StateVector, t: float) -> StateVector:
        return self.enforce_bounds(np.asarray(a, dtype=np.float64) + t * self.difference(a, b))

    def satisfies_bounds(self, state: StateVector) -> bool:
        q = np.asarray(state, dtype=np.float64)
        if q.shape != (self.dimension,) or not np.all(np.isfinite(q)):
            return False
        bounded = ~self._continuous
        return bool(
            np.all(q[bounded] >= self._lower[bounded]) and np.all(q[bounded] <= self._upper[bounded])
        )

    def enforce_bounds(self, state: StateVector) -> StateVector:
        q = np.asarray(state, dtype=np.float64)
        clipped = np.clip(q, self._lower, self._upper)
        if self._continuous.any():
            wrapped = (q + math.pi) % _TWO_PI - math.pi
            clipped = np.where(self._continuous, wrapped, clipped)
        return clipped

    def sample_uniform(self) -> StateVector:
        return self._rng.uniform(self._lower, self._upper)

    def sample_uniform_near(self, near: StateVector, distance: float) -> StateVector:
        offset = self._rng.uniform(-distance, distance, size=self.dimension)
        return self.enforce_bounds(np.asarray(near, dtype=np.float64) + offset)

    # ============= Robot State Conversion =============

    def state_from_joint_state(self, joint_state: JointState) -> StateVector:
        """Extract this group's values from a complete robot state. Raises KeyError on missing joints."""
        return joint_state.positions_for(self._joint_names)

    def state_to_joint_state(self, state: StateVector, reference: JointState) -> JointState:
        """Complete robot state: ``reference`` with this group's joints set from ``state``."""
        return reference.with_positions(self._joint_names, state)

    # ============= Samplers & Projections =============

    def set_state_sampler_allocator(self, allocator: StateSamplerAllocator | None) -> None:
        self._sampler_allocator = allocator

    def alloc_default_state_sampler(self) -> StateSampler:
        from planning_context.space.samplers import UniformStateSampler

        return UniformStateSampler(self)

    def alloc_state_sampler(self) -> StateSampler:
        """Sampler from the registered allocator, or the uniform default."""
        if self._sampler_allocator is not None:
            return self._sampler_allocator(self)
        return self.alloc_default_state_sampler()

    def register_default_projection(self, projection: ProjectionEvaluator | None) -> None:
        self._default_projection = projection

    def get_default_projection(self) -> ProjectionEvaluator | None:
        return self._default_projection
