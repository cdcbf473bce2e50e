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


"""Shared machinery for tree-based search strategies."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from planning_context.spec.enums import AttemptStatus, PlanningErrorCode, TerminationReason
from planning_context.spec.errors import InvalidSpecificationError, PlanningContextUsageError
from planning_context.spec.types import AttemptResult

if TYPE_CHECKING:
    from planning_context.space.space_information import ProblemDefinition, SpaceInformation
    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.types import StateVector
    from planning_context.termination import TerminationCondition

_DUPLICATE_TOLERANCE = 1e-9


@dataclass(eq=False)
class TreeNode:
    """Node in a search tree."""

    config: StateVector
    parent: TreeNode | None = None
    children: list[TreeNode] = field(default_factory=list)

    def path_to_root(self) -> list[StateVector]:
        """Get path from the root to this node."""
        path = []
        node: TreeNode | None = self
        while node is not None:
            path.append(node.config)
            node = node.parent
        return list(reversed(path))


class SearchTree:
    """Nodes plus a stacked config array for vectorized nearest-neighbour queries."""

    def __init__(self, space: ConfigurationSpace) -> None:
        self._space = space
        self.nodes: list[TreeNode] = []
        self._configs = np.empty((64, space.dimension), dtype=np.float64)

    def __len__(self) -> int:
        return len(self.nodes)

    def add(self, config: StateVector, parent: TreeNode | None = None) -> TreeNode:
        node = TreeNode(config=np.asarray(config, dtype=np.float64).copy(), parent=parent)
        if parent is not None:
            parent.children.append(node)
        if len(self.nodes) == len(self._configs):
            self._configs = np.concatenate([self._configs, np.empty_like(self._configs)])
        self._configs[len(self.nodes)] = node.config
        self.nodes.append(node)
        return node

    def nearest(self, target: StateVector) -> TreeNode:
        diffs = self._space.difference(self._configs[: len(self.nodes)], target)
        return self.nodes[int(np.argmin(np.linalg.norm(diffs, axis=1)))]


class TreePlanner:
    """Base for RRT-family strategies: parameters, problem binding and result helpers.

    Args:
        si: Space information the strategy plans in
        name: Planner instance name
        range: Maximum extension length (0 picks 20% of the space extent)
        max_iterations: Iteration cap per attempt (the attempt is ABORTED when reached)
    """

    def __init__(
        self,
        si: SpaceInformation,
        name: str,
        range: float = 0.0,
        max_iterations: int = 100_000,
    ) -> None:
        if range < 0.0:
            raise _bad_param(f"Planner '{name}': range must be >= 0")
        if max_iterations < 1:
            raise _bad_param(f"Planner '{name}': max_iterations must be >= 1")
        self._si = si
        self._name = name
        self._range = range if range > 0.0 else 0.2 * si.space.get_maximum_extent()
        self._max_iterations = max_iterations
        self._problem: ProblemDefinition | None = None

    def get_name(self) -> str:
        return self._name

    @property
    def range(self) -> float:
        return self._range

    @property
    def space_information(self) -> SpaceInformation:
        return self._si

    def configure(self, problem: ProblemDefinition) -> None:
        self._problem = problem

    def clear(self) -> None:
        """Tree planners keep no state between attempts."""

    def _require_problem(self) -> ProblemDefinition:
        if self._problem is None:
            raise PlanningContextUsageError(f"Planner '{self._name}' has no problem definition")
        return self._problem

    def _steer(self, from_config: StateVector, to_config: StateVector) -> StateVector:
        """Move from ``from_config`` toward ``to_config`` by at most ``range``."""
        dist = self._si.space.distance(from_config, to_config)
        if dist <= self._range:
            return np.asarray(to_config, dtype=np.float64).copy()
        return self._si.space.interpolate(from_config, to_config, self._range / dist)

    def _solved(self, path: list[StateVector], iterations: int) -> AttemptResult:
        path = _drop_duplicates(path)
        self._require_problem().add_solution_path(path)
        return AttemptResult(
            status=AttemptStatus.EXACT_SOLUTION,
            path=path,
            iterations=iterations,
            message="Path found",
        )

    def _stopped(self, ptc: TerminationCondition, iterations: int) -> AttemptResult:
        status = {
            TerminationReason.EXTERNAL: AttemptStatus.TERMINATED,
            TerminationReason.DEADLINE: AttemptStatus.TIMEOUT,
        }.get(ptc.reason, AttemptStatus.ABORTED)
        return AttemptResult(
            status=status,
            iterations=iterations,
            message=f"Stopped ({ptc.reason.name.lower()}) after {iterations} iterations",
        )

    def _exhausted(self, iterations: int) -> AttemptResult:
        return AttemptResult(
            status=AttemptStatus.ABORTED,
            iterations=iterations,
            message=f"No path found after {iterations} iterations",
        )

    def _no_goal(self, iterations: int) -> AttemptResult:
        return AttemptResult(
            status=AttemptStatus.NO_GOAL,
            iterations=iterations,
            message="Goal region has no feasible state",
        )


def _drop_duplicates(path: list[StateVector]) -> list[StateVector]:
    result: list[StateVector] = []
    for q in path:
        if result and np.allclose(result[-1], q, atol=_DUPLICATE_TOLERANCE, rtol=0.0):
            continue
        result.append(q)
    return result


# ============= Parameter Parsing =============


def _bad_param(message: str) -> InvalidSpecificationError:
    return InvalidSpecificationError(message, PlanningErrorCode.PLANNER_ALLOCATION_FAILED)


def float_param(params: Mapping[str, str], key: str, default: float) -> float:
    if key not in params:
        return default
    try:
        return float(params[key])
    except (TypeError, ValueError):
        raise _bad_param(
            f"Planner parameter '{key}' must be a number, got '{params[key]}'"
        ) from None


def int_param(params: Mapping[str, str], key: str, default: int) -> int:
    if key not in params:
        return default
    try:
        return int(float(params[key]))
    except (TypeError, ValueError):
        raise _bad_param(
            f"Planner parameter '{key}' must be an integer, got '{params[key]}'"
        ) from None
