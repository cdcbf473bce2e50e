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


"""Planner id -> allocator registry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from planning_context.planners.base import float_param, int_param
from planning_context.planners.projection_rrt import ProjectionRRTPlanner
from planning_context.planners.rrt_planner import RRTConnectPlanner, RRTPlanner
from planning_context.spec.errors import UnknownPlannerError

if TYPE_CHECKING:
    from planning_context.space.space_information import SpaceInformation
    from planning_context.spec.protocols import PlannerAllocator, SearchStrategy
    from planning_context.spec.types import PlannerID


class PlannerRegistry:
    """Maps planner ids to allocators. Last registration for an id wins."""

    def __init__(self) -> None:
        self._allocators: dict[PlannerID, PlannerAllocator] = {}

    def register_planner_allocator(self, planner_id: PlannerID, allocator: PlannerAllocator) -> None:
        self._allocators[planner_id] = allocator

    def has_planner(self, planner_id: PlannerID) -> bool:
        return planner_id in self._allocators

    def planner_ids(self) -> list[PlannerID]:
        return sorted(self._allocators)

    def configure_planner(
        self,
        si: SpaceInformation,
        planner_id: PlannerID,
        params: Mapping[str, str] | None = None,
    ) -> SearchStrategy:
        """Build a strategy for ``planner_id``.

        ``params["name"]`` renames the instance; the remaining entries are passed
        to the allocator. Raises UnknownPlannerError (registry untouched) if the
        id is not registered.
        """
        allocator = self._allocators.get(planner_id)
        if allocator is None:
            raise UnknownPlannerError(
                f"Unknown planner: {planner_id}. Available: {self.planner_ids()}"
            )
        params = dict(params or {})
        name = params.pop("name", planner_id)
        return allocator(si, name, params)


# ============= Built-in Allocators =============


def _allocate_rrt_connect(
    si: SpaceInformation, name: str, params: Mapping[str, str]
) -> SearchStrategy:
    return RRTConnectPlanner(
        si,
        name=name,
        range=float_param(params, "range", 0.0),
        max_iterations=int_param(params, "max_iterations", 100_000),
    )


def _allocate_rrt(si: SpaceInformation, name: str, params: Mapping[str, str]) -> SearchStrategy:
    return RRTPlanner(
        si,
        name=name,
        range=float_param(params, "range", 0.0),
        goal_bias=float_param(params, "goal_bias", 0.05),
        max_iterations=int_param(params, "max_iterations", 100_000),
    )


def _allocate_projection_rrt(
    si: SpaceInformation, name: str, params: Mapping[str, str]
) -> SearchStrategy:
    return ProjectionRRTPlanner(
        si,
        name=name,
        range=float_param(params, "range", 0.0),
        goal_bias=float_param(params, "goal_bias", 0.05),
        max_iterations=int_param(params, "max_iterations", 100_000),
    )


def initialize_planner_allocators(registry: PlannerRegistry) -> PlannerRegistry:
    """Register the built-in strategies: rrt_connect, rrt, projection_rrt."""
    registry.register_planner_allocator("rrt_connect", _allocate_rrt_connect)
    registry.register_planner_allocator("rrt", _allocate_rrt)
    registry.register_planner_allocator("projection_rrt", _allocate_projection_rrt)
    return registry
