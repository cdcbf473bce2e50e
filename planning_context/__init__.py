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
Planning Context

Orchestration layer for sampling-based joint-space motion planning.

## Architecture

- GeometricPlanningContext: owns the configuration space, search strategy and
  constraints; runs the bounded attempt loop with post-processing
- GoalRegionSampler: background thread feeding goal states to the strategy
- TerminationCoordinator: thread-safe external ``terminate()``
- ConstraintsLibrary: cached approximations of path-constraint manifolds
- PlannerRegistry: planner id -> SearchStrategy allocator

## Usage

```python
from planning_context import Constraints, JointConstraint, JointSpec, create_planning_context

context = create_planning_context(
    "arm", [JointSpec("joint1"), JointSpec("joint2")], config={"planner_id": "rrt_connect"}
)
context.set_goal_constraints([
    Constraints(joint_constraints=(
        JointConstraint.from_bounds("joint1", 1.0, 1.1),
        JointConstraint.from_bounds("joint2", 1.0, 1.1),
    ))
])
response = context.solve(timeout=1.0, attempts=5)
```
"""

from planning_context.config import PlanningContextSettings
from planning_context.constraints import ConstraintsLibrary
from planning_context.factory import create_planner, create_planning_context
from planning_context.goal_sampling import GoalRegion, GoalRegionSampler
from planning_context.planning_context import GeometricPlanningContext
from planning_context.spec import (
    Constraints,
    ContextState,
    JointConstraint,
    JointSpec,
    JointState,
    MotionPlanDetailedResponse,
    MotionPlanRequest,
    MotionPlanResponse,
    PlanningContextSpecification,
    PlanningErrorCode,
    SearchStrategy,
    StateSpaceSpecification,
)
from planning_context.termination import TerminationCondition, TerminationCoordinator

__all__ = [
    "Constraints",
    "ConstraintsLibrary",
    "ContextState",
    "GeometricPlanningContext",
    "GoalRegion",
    "GoalRegionSampler",
    "JointConstraint",
    "JointSpec",
    "JointState",
    "MotionPlanDetailedResponse",
    "MotionPlanRequest",
    "MotionPlanResponse",
    "PlanningContextSettings",
    "PlanningContextSpecification",
    "PlanningErrorCode",
    "SearchStrategy",
    "StateSpaceSpecification",
    "TerminationCondition",
    "TerminationCoordinator",
    "create_planner",
    "create_planning_context",
]
