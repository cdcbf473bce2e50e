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


"""RRT variant that expands from the least covered cells of a projection grid."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

import numpy as np

from planning_context.planners.base import SearchTree, TreePlanner
from planning_context.spec.errors import ProjectionSpecError

if TYPE_CHECKING:
    from planning_context.planners.base import TreeNode
    from planning_context.space.space_information import SpaceInformation
    from planning_context.spec.protocols import ProjectionEvaluator
    from planning_context.spec.types import AttemptResult, StateVector
    from planning_context.termination import TerminationCondition


class ProjectionRRTPlanner(TreePlanner):
    """Coverage-guided RRT.

    Tree nodes are binned by the grid cell of their projection. Each iteration
    picks a cell with probability inversely proportional to its occupancy,
    then grows from a random node in it toward a nearby sample. Needs a
    projection evaluator: the one given, else the space's default projection.
    """

    def __init__(
        self,
        si: SpaceInformation,
        name: str = "ProjectionRRT",
        range: float = 0.0,
        goal_bias: float = 0.05,
        max_iterations: int = 100_000,
        projection: ProjectionEvaluator | None = None,
        seed: int | None = None,
    ) -> None:
        super().__init__(si, name, range=range, max_iterations=max_iterations)
        self._goal_bias = min(max(goal_bias, 0.0), 1.0)
        self._projection = projection
        self._rng = np.random.default_rng(seed)

    @property
    def projection(self) -> ProjectionEvaluator:
        projection = self._projection or self._si.space.get_default_projection()
        if projection is None:
            raise ProjectionSpecError(f"Planner '{self._name}' requires a projection evaluator")
        return projection

    def attempt_once(self, ptc: TerminationCondition) -> AttemptResult:
        problem = self._require_problem()
        goal = problem.goal
        projection = self.projection
        sampler = self._si.alloc_state_sampler()

        tree = SearchTree(self._si.space)
        cells: dict[tuple[int, ...], list[TreeNode]] = defaultdict(list)
        root = tree.add(problem.start_state)
        cells[self._cell(projection, root.config)].append(root)
        if goal.is_satisfied(root.config):
            return self._solved([root.config], 0)

        goal_states: list[StateVector] = []
        iterations = 0
        while iterations < self._max_iterations:
            if ptc():
                return self._stopped(ptc, iterations)

            goal_states.extend(goal.states_since(len(goal_states)))
            if not goal_states and goal.is_infeasible():
                return self._no_goal(iterations)

            iterations += 1
            if goal_states and self._rng.random() < self._goal_bias:
                target = goal_states[int(self._rng.integers(len(goal_states)))]
                source = tree.nearest(target)
            else:
                source = self._select_node(cells)
                target = sampler.sample_uniform_near(source.config, self._range)

            new_config = self._steer(source.config, target)
            if not self._si.check_motion(source.config, new_config):
                continue
            node = tree.add(new_config, parent=source)
            cells[self._cell(projection, node.config)].append(node)
            if goal.is_satisfied(node.config):
                return self._solved(node.path_to_root(), iterations)

        return self._exhausted(iterations)

    def _select_node(self, cells: dict[tuple[int, ...], list[TreeNode]]) -> TreeNode:
        occupants = list(cells.values())
        weights = np.array([1.0 / len(nodes) for nodes in occupants], dtype=np.float64)
        chosen = occupants[int(self._rng.choice(len(occupants), p=weights / weights.sum()))]
        return chosen[int(self._rng.integers(len(chosen)))]

    @staticmethod
    def _cell(projection: ProjectionEvaluator, config: StateVector) -> tuple[int, ...]:
        coords = np.floor(projection.project(config) / projection.cell_sizes)
        return tuple(coords.astype(int).tolist())
