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


"""Specification records used to initialize a planning context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planning_context.constraints.constraint_samplers import ConstraintSamplerManager
    from planning_context.constraints.constraints_library import ConstraintsLibrary
    from planning_context.spec.protocols import StateValidityChecker
    from planning_context.spec.types import GroupName, JointSpec


@dataclass
class StateSpaceSpecification:
    """Joint-space description of one planning group.

    Attributes:
        group_name: Name of the planning group
        joints: Ordered degrees of freedom with bounds/topology
    """

    group_name: GroupName
    joints: list[JointSpec]

    @property
    def joint_names(self) -> list[str]:
        return [j.name for j in self.joints]


@dataclass
class PlanningContextSpecification:
    """Everything ``GeometricPlanningContext.initialize`` needs.

    Attributes:
        state_space: Group and joint bounds to plan over
        config: String-keyed options. Keys matching PlanningContextSettings fields
            (planner_id, simplify_solutions, interpolate, timeout, projection_evaluator, ...)
            override the settings; all other keys are passed to the planner.
        state_validity_checker: Collision/validity callback over group states
            (None accepts every state within bounds)
        constraint_sampler_manager: Chooses constraint samplers (None uses the default manager)
        constraints_library: Shared constraint approximation cache. None gives the
            context its own private library.
    """

    state_space: StateSpaceSpecification
    config: dict[str, str] = field(default_factory=dict)
    state_validity_checker: StateValidityChecker | None = None
    constraint_sampler_manager: ConstraintSamplerManager | None = None
    constraints_library: ConstraintsLibrary | None = None
