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
Search Strategies

Pluggable tree-based planners consumed by the planning context through the
SearchStrategy protocol and the PlannerRegistry.

## Implementations

- RRTConnectPlanner: Bi-directional RRT-Connect ("rrt_connect")
- RRTPlanner: Goal-biased RRT ("rrt")
- ProjectionRRTPlanner: Projection-grid coverage RRT ("projection_rrt")
"""

from planning_context.planners.projection_rrt import ProjectionRRTPlanner
from planning_context.planners.registry import PlannerRegistry, initialize_planner_allocators
from planning_context.planners.rrt_planner import RRTConnectPlanner, RRTPlanner

__all__ = [
    "PlannerRegistry",
    "ProjectionRRTPlanner",
    "RRTConnectPlanner",
    "RRTPlanner",
    "initialize_planner_allocators",
]
