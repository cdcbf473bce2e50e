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


"""Kinematic constraints, constraint samplers and the constraints library."""

from planning_context.constraints.constraint_samplers import (
    ConstraintSamplerManager,
    JointConstraintSampler,
)
from planning_context.constraints.constraints_library import (
    ConstraintApproximation,
    ConstraintsLibrary,
    build_constraint_approximation,
)
from planning_context.constraints.kinematic_constraints import (
    ConstraintSet,
    constraint_fingerprint,
    merge_constraints,
    validate_constraints,
)

__all__ = [
    "ConstraintApproximation",
    "ConstraintSamplerManager",
    "ConstraintSet",
    "ConstraintsLibrary",
    "JointConstraintSampler",
    "build_constraint_approximation",
    "constraint_fingerprint",
    "merge_constraints",
    "validate_constraints",
]
