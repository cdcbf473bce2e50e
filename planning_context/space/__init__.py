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


"""Configuration space, samplers and projections."""

from planning_context.space.projections import JointProjection, parse_projection_evaluator
from planning_context.space.samplers import (
    ConstraintApproximationStateSampler,
    ProjectingStateSampler,
    UniformStateSampler,
)
from planning_context.space.space_information import ProblemDefinition, SpaceInformation
from planning_context.space.state_space import ConfigurationSpace

__all__ = [
    "ConfigurationSpace",
    "ConstraintApproximationStateSampler",
    "JointProjection",
    "ProblemDefinition",
    "ProjectingStateSampler",
    "SpaceInformation",
    "UniformStateSampler",
    "parse_projection_evaluator",
]
