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


"""Projection evaluators parsed from string encodings.

Supported encodings:
    joints(shoulder_pan, elbow)   project onto the named group joints
    indices(0, 2)                 project onto state-vector coordinates
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import numpy as np

from planning_context.spec.errors import ProjectionSpecError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.types import StateVector

_ENCODING_RE = re.compile(r"^\s*(joints|indices)\s*\((.*)\)\s*$")
_CELLS_PER_DIMENSION = 20


class JointProjection:
    """Projects states onto a subset of their coordinates."""

    def __init__(self, space: ConfigurationSpace, indices: list[int]) -> None:
        self._indices = np.array(indices, dtype=np.intp)
        lower, upper = space.bounds
        extent = upper[self._indices] - lower[self._indices]
        self._cell_sizes = np.where(extent > 0, extent / _CELLS_PER_DIMENSION, 1.0)

    @property
    def indices(self) -> list[int]:
        return self._indices.tolist()

    @property
    def dimension(self) -> int:
        return len(self._indices)

    @property
    def cell_sizes(self) -> NDArray[np.float64]:
        return self._cell_sizes.copy()

    def project(self, state: StateVector) -> NDArray[np.float64]:
        return np.asarray(state, dtype=np.float64)[self._indices]


def parse_projection_evaluator(encoding: str, space: ConfigurationSpace) -> JointProjection:
    """Build a projection from ``encoding``. Raises ProjectionSpecError if malformed."""
    match = _ENCODING_RE.match(encoding or "")
    if match is None:
        raise ProjectionSpecError(f"Bad projection spec '{encoding}'")
    kind, body = match.groups()
    items = [item.strip() for item in body.split(",") if item.strip()]
    if not items:
        raise ProjectionSpecError(f"Projection spec '{encoding}' names no coordinates")

    if kind == "joints":
        try:
            indices = [space.joint_index(name) for name in items]
        except KeyError as e:
            raise ProjectionSpecError(
                f"Projection spec '{encoding}' names joint {e} not in group '{space.group_name}'"
            ) from None
    else:
        try:
            indices = [int(item) for item in items]
        except ValueError:
            raise ProjectionSpecError(f"Projection spec '{encoding}' has non-integer index") from None
        if any(i < 0 or i >= space.dimension for i in indices):
            raise ProjectionSpecError(
                f"Projection spec '{encoding}' index out of range for dimension {space.dimension}"
            )

    if len(set(indices)) != len(indices):
        raise ProjectionSpecError(f"Projection spec '{encoding}' repeats a coordinate")
    return JointProjection(space, indices)
