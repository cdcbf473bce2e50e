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


"""Compiled kinematic constraint sets.

A ``Constraints`` record is validated against a ConfigurationSpace and
compiled into a ConstraintSet: vectorized lower/upper bounds over the
constrained coordinates, used by samplers and goal tests.
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import TYPE_CHECKING

import numpy as np

from planning_context.spec.errors import InvalidConstraintsError
from planning_context.spec.types import Constraints, JointConstraint

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.types import Fingerprint, GroupName, StateVector

_TWO_PI = 2.0 * math.pi
_FINGERPRINT_DECIMALS = 9


def validate_constraints(constraints: Constraints, space: ConfigurationSpace) -> str | None:
    """Return a description of why ``constraints`` cannot apply to ``space``, or None if they can."""
    if constraints.is_empty():
        return "constraint specification is empty"
    seen: set[str] = set()
    for jc in constraints.joint_constraints:
        if jc.joint_name not in space.joint_names:
            return f"joint '{jc.joint_name}' is not in group '{space.group_name}'"
        if jc.joint_name in seen:
            return f"joint '{jc.joint_name}' is constrained twice"
        seen.add(jc.joint_name)
        values = (jc.position, jc.tolerance_above, jc.tolerance_below)
        if not all(math.isfinite(v) for v in values):
            return f"joint '{jc.joint_name}' has a non-finite constraint value"
        if jc.tolerance_above < 0.0 or jc.tolerance_below < 0.0:
            return f"joint '{jc.joint_name}' has a negative tolerance"
    return None


def merge_constraints(first: Constraints, second: Constraints | None) -> Constraints:
    """Conjunction of two specifications; bounds on a shared joint are intersected.

    An empty intersection is kept as an inverted interval so the merged set
    compiles as infeasible instead of silently dropping a bound.
    """
    if second is None or second.is_empty():
        return first
    by_joint = {jc.joint_name: jc for jc in first.joint_constraints}
    for jc in second.joint_constraints:
        other = by_joint.get(jc.joint_name)
        if other is None:
            by_joint[jc.joint_name] = jc
            continue
        lower = max(other.lower, jc.lower)
        upper = min(other.upper, jc.upper)
        center = 0.5 * (lower + upper)
        by_joint[jc.joint_name] = JointConstraint(
            joint_name=jc.joint_name,
            position=center,
            tolerance_above=upper - center,
            tolerance_below=center - lower,
            weight=max(other.weight, jc.weight),
        )
    name = "+".join(n for n in (first.name, second.name) if n)
    return Constraints(joint_constraints=tuple(by_joint.values()), name=name)


def constraint_fingerprint(group_name: GroupName, constraints: Constraints) -> Fingerprint:
    """Deterministic key for (group, constraint content). The constraint name is ignored."""
    joints = sorted(
        (
            jc.joint_name,
            round(jc.position, _FINGERPRINT_DECIMALS),
            round(jc.tolerance_above, _FINGERPRINT_DECIMALS),
            round(jc.tolerance_below, _FINGERPRINT_DECIMALS),
            round(jc.weight, _FINGERPRINT_DECIMALS),
        )
        for jc in constraints.joint_constraints
    )
    payload = json.dumps({"group": group_name, "joints": joints}, sort_keys=True)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


class ConstraintSet:
    """Constraints compiled against a ConfigurationSpace."""

    def __init__(self, constraints: Constraints, space: ConfigurationSpace) -> None:
        error = _structural_error(constraints, space)
        if error is not None:
            raise InvalidConstraintsError(f"Invalid constraints for group '{space.group_name}': {error}")

        self._constraints = constraints
        self._space = space
        joint_constraints = constraints.joint_constraints
        self._indices = np.array(
            [space.joint_index(jc.joint_name) for jc in joint_constraints], dtype=np.intp
        )
        self._position = np.array([jc.position for jc in joint_constraints], dtype=np.float64)
        self._below = np.array([jc.tolerance_below for jc in joint_constraints], dtype=np.float64)
        self._above = np.array([jc.tolerance_above for jc in joint_constraints], dtype=np.float64)
        self._continuous = space.continuous[self._indices]
        self._fingerprint = constraint_fingerprint(space.group_name, constraints)

    @property
    def constraints(self) -> Constraints:
        return self._constraints

    @property
    def fingerprint(self) -> Fingerprint:
        return self._fingerprint

    @property
    def indices(self) -> NDArray[np.intp]:
        return self._indices

    def bounds(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Constraint interval per constrained coordinate, relative to 0 for continuous joints."""
        return self._position - self._below, self._position + self._above

    def deviations(self, state: StateVector) -> NDArray[np.float64]:
        """Signed offset of each constrained coordinate from the constraint position."""
        q = np.asarray(state, dtype=np.float64)[self._indices]
        diff = q - self._position
        if self._continuous.any():
            wrapped = (diff + math.pi) % _TWO_PI - math.pi
            diff = np.where(self._continuous, wrapped, diff)
        return diff

    def decide(self, state: StateVector) -> tuple[bool, float]:
        """(satisfied, distance) where distance is the total bound violation."""
        diff = self.deviations(state)
        violation = np.maximum(diff - self._above, 0.0) + np.maximum(-self._below - diff, 0.0)
        distance = float(np.sum(violation))
        return distance <= 1e-12, distance

    def is_satisfied(self, state: StateVector) -> bool:
        return self.decide(state)[0]


def _structural_error(constraints: Constraints, space: ConfigurationSpace) -> str | None:
    if constraints.is_empty():
        return "constraint specification is empty"
    names = [jc.joint_name for jc in constraints.joint_constraints]
    for name in names:
        if name not in space.joint_names:
            return f"joint '{name}' is not in group '{space.group_name}'"
    if len(set(names)) != len(names):
        return "a joint is constrained twice"
    return None
