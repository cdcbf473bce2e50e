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


"""Factory functions for planning context components."""

from __future__ import annotations

from typing import TYPE_CHECKING

from planning_context.planning_context import GeometricPlanningContext
from planning_context.spec.config import PlanningContextSpecification, StateSpaceSpecification

if TYPE_CHECKING:
    from collections.abc import Mapping

    from planning_context.constraints.constraints_library import ConstraintsLibrary
    from planning_context.space.space_information import SpaceInformation
    from planning_context.spec.protocols import SearchStrategy, StateValidityChecker
    from planning_context.spec.types import JointSpec


def create_planning_context(
    group_name: str,
    joints: list[JointSpec],
    config: Mapping[str, str] | None = None,
    state_validity_checker: StateValidityChecker | None = None,
    constraints_library: ConstraintsLibrary | None = None,
    namespace: str = "",
) -> GeometricPlanningContext:
    """Create and initialize a context for one group. ``config`` keys follow PlanningContextSettings."""
    context = GeometricPlanningContext()
    context.initialize(
        namespace,
        PlanningContextSpecification(
            state_space=StateSpaceSpecification(group_name=group_name, joints=list(joints)),
            config=dict(config or {}),
            state_validity_checker=state_validity_checker,
            constraints_library=constraints_library,
        ),
    )
    return context


def create_planner(
    si: SpaceInformation,
    name: str = "rrt_connect",
    params: Mapping[str, str] | None = None,
) -> SearchStrategy:
    """Create a built-in search strategy. name='rrt_connect'|'rrt'|'projection_rrt'."""
    from planning_context.planners.registry import PlannerRegistry, initialize_planner_allocators

    return initialize_planner_allocators(PlannerRegistry()).configure_planner(si, name, params)
