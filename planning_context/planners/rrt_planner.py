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


"""RRT-Connect and goal-biased RRT strategies implementing SearchStrategy.

Both consume goal states from the problem's GoalRegion as the background
goal sampler produces them; neither needs the goal constraints directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from planning_context.planners.base import SearchTree, TreePlanner

if TYPE_CHECKING:
    from planning_context.planners.base import TreeNode
    from planning_context.space.space_information import SpaceInformation
    from planning_context.spec.types import AttemptResult, StateVector
    from planning_context.termination import TerminationCondition


class RRTConnectPlanner(TreePlanner):
    """Bi-directional RRT-Connect.

    One tree grows from the start state, the other from every goal state the
    goal region has produced so far; the trees take turns extending toward a
    random sample and greedily connecting to each other.
    """

    def __init__(
        self,
        si: SpaceInformation,
        name: str = "RRTConnect",
        range: float = 0.0,
        max_iterations: int = 100_000,
    ) -> None:
        super().__init__(si, name, range=range, max_iterations=max_iterations)

    def attempt_once(self, ptc: TerminationCondition) -> AttemptResult:
        problem = self._require_problem()
        space = self._si.space
        goal = problem.goal
        sampler = self._si.alloc_state_sampler()

        start_tree = SearchTree(space)
        start_tree.add(problem.start_state)
        goal_tree = SearchTree(space)
        goals_seen = 0
        iterations = 0

        while iterations < self._max_iterations:
            if ptc():
                return self._stopped(ptc, iterations)

            new_goals = goal.states_since(goals_seen)
            goals_seen += len(new_goals)
            for g in new_goals:
                goal_tree.add(g)

            if len(goal_tree) == 0:
                if goal.is_infeasible():
                    return self._no_goal(iterations)
                goal.wait_for_goal(goals_seen, ptc)
                continue

            start_first = iterations % 2 == 0
            iterations += 1
            tree_a, tree_b = (start_tree, goal_tree) if start_first else (goal_tree, start_tree)

            extended = self._extend(tree_a, sampler.sample_uniform())
            if extended is None:
                continue
            connected = self._connect(tree_b, extended.config, ptc)
            if connected is None:
                continue

            start_node, goal_node = (extended, connected) if start_first else (connected, extended)
            path = start_node.path_to_root() + list(reversed(goal_node.path_to_root()))
            return self._solved(path, iterations)

        return self._exhausted(iterations)

    def _extend(self, tree: SearchTree, target: StateVector) -> TreeNode | None:
        """Extend tree toward target, returns new node if the motion is valid."""
        nearest = tree.nearest(target)
        new_config = self._steer(nearest.config, target)
        if self._si.check_motion(nearest.config, new_config):
            return tree.add(new_config, parent=nearest)
        return None

    def _connect(
        self, tree: SearchTree, target: StateVector, ptc: TerminationCondition
    ) -> TreeNode | None:
        """Keep extending toward target; returns the node that reached it, or None."""
        while not ptc():
            node = self._extend(tree, target)
            if node is None:
                return None
            if self._si.space.distance(node.config, target) <= 1e-9:
                return node
        return None


class RRTPlanner(TreePlanner):
    """Single-tree RRT biased toward sampled goal states.

    Args:
        goal_bias: Probability of steering toward a known goal state instead of a random sample
    """

    def __init__(
        self,
        si: SpaceInformation,
        name: str = "RRT",
        range: float = 0.0,
        goal_bias: float = 0.05,
        max_iterations: int = 100_000,
        seed: int | None = None,
    ) -> None:
        super().__init__(si, name, range=range, max_iterations=max_iterations)
        self._goal_bias = min(max(goal_bias, 0.0), 1.0)
        self._rng = np.random.default_rng(seed)

    def attempt_once(self, ptc: TerminationCondition) -> AttemptResult:
        problem = self._require_problem()
        goal = problem.goal
        sampler = self._si.alloc_state_sampler()

        tree = SearchTree(self._si.space)
        tree.add(problem.start_state)
        if goal.is_satisfied(problem.start_state):
            return self._solved([problem.start_state], 0)

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
            else:
                target = sampler.sample_uniform()

            nearest = tree.nearest(target)
            new_config = self._steer(nearest.config, target)
            if not self._si.check_motion(nearest.config, new_config):
                continue
            node = tree.add(new_config, parent=nearest)
            if goal.is_satisfied(node.config):
                return self._solved(node.path_to_root(), iterations)

        return self._exhausted(iterations)
