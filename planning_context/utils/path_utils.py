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


"""
Path Utilities

Stateless post-processing for solution paths expressed as group state vectors.

## Functions

- simplify_path(): Shortcut a path using motion checks (requires SpaceInformation)
- interpolate_path(): Insert states so consecutive states are at most a resolution apart
- compute_path_length(): Total joint-space length
- path_to_joint_states(): Convert to complete robot states
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from planning_context.space.space_information import SpaceInformation
    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.types import JointPath, JointState, StateVector


def simplify_path(
    si: SpaceInformation,
    path: list[StateVector],
    max_steps: int = 100,
    rng: np.random.Generator | None = None,
) -> list[StateVector]:
    """Shorten a path by removing waypoints that can be skipped.

    First greedily drops intermediate waypoints whose neighbours connect
    directly, then tries ``max_steps`` random shortcuts. Endpoints are kept.

    Args:
        si: Space information used for motion validity
        path: Original path (list of group state vectors)
        max_steps: Random shortcutting attempts
        rng: Random generator (a fresh one if None)

    Returns:
        Simplified path, never longer than the input
    """
    if len(path) <= 2:
        return list(path)

    rng = rng or np.random.default_rng()
    simplified = _reduce_vertices(si, list(path))

    for _ in range(max_steps):
        if len(simplified) <= 2:
            break
        i = int(rng.integers(0, len(simplified) - 2))
        j = int(rng.integers(i + 2, len(simplified)))
        if si.check_motion(simplified[i], simplified[j]):
            simplified = simplified[: i + 1] + simplified[j:]

    return simplified


def _reduce_vertices(si: SpaceInformation, path: list[StateVector]) -> list[StateVector]:
    result = [path[0]]
    i = 0
    while i < len(path) - 1:
        # furthest waypoint reachable in a straight line from path[i]
        j = len(path) - 1
        while j > i + 1 and not si.check_motion(path[i], path[j]):
            j -= 1
        result.append(path[j])
        i = j
    return result


def interpolate_path(
    space: ConfigurationSpace,
    path: list[StateVector],
    resolution: float = 0.05,
) -> list[StateVector]:
    """Insert states so that consecutive states are at most ``resolution`` apart.

    Args:
        space: Configuration space (handles continuous joints)
        path: Original path
        resolution: Maximum distance between consecutive states (radians)

    Returns:
        Interpolated path containing every original waypoint
    """
    if len(path) <= 1:
        return [np.asarray(q, dtype=np.float64).copy() for q in path]

    interpolated: list[StateVector] = [np.asarray(path[0], dtype=np.float64).copy()]
    for q_start, q_end in zip(path[:-1], path[1:]):
        dist = space.distance(q_start, q_end)
        steps = max(1, math.ceil(dist / resolution))
        for step in range(1, steps + 1):
            if step == steps:
                interpolated.append(np.asarray(q_end, dtype=np.float64).copy())
            else:
                interpolated.append(space.interpolate(q_start, q_end, step / steps))
    return interpolated


def compute_path_length(space: ConfigurationSpace, path: list[StateVector]) -> float:
    """Sum of joint-space distances between consecutive states."""
    return sum(space.distance(a, b) for a, b in zip(path[:-1], path[1:]))


def path_to_joint_states(
    space: ConfigurationSpace,
    path: list[StateVector],
    reference: JointState,
) -> JointPath:
    """Complete robot states for ``path``; joints outside the group keep ``reference`` values."""
    return [space.state_to_joint_state(q, reference) for q in path]
