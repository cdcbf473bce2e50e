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


"""Planning Context Specifications."""

from planning_context.spec.config import PlanningContextSpecification, StateSpaceSpecification
from planning_context.spec.enums import (
    AttemptStatus,
    ContextState,
    PlanningErrorCode,
    TerminationReason,
)
from planning_context.spec.errors import (
    ConstraintApproximationError,
    InvalidConstraintsError,
    InvalidSpecificationError,
    PlanningContextError,
    PlanningContextUsageError,
    ProjectionSpecError,
    UnknownPlannerError,
)
from planning_context.spec.protocols import (
    ConstraintSampler,
    PlannerAllocator,
    ProjectionEvaluator,
    SearchStrategy,
    StateSampler,
    StateValidityChecker,
)
from planning_context.spec.types import (
    AttemptResult,
    BoundedSolveResult,
    Constraints,
    Fingerprint,
    GroupName,
    JointConstraint,
    JointPath,
    JointSpec,
    JointState,
    MotionPlanDetailedResponse,
    MotionPlanRequest,
    MotionPlanResponse,
    PlannerID,
    SolutionStage,
    StateVector,
)

__all__ = [
    "AttemptResult",
    "AttemptStatus",
    "BoundedSolveResult",
    "ConstraintApproximationError",
    "ConstraintSampler",
    "Constraints",
    "ContextState",
    "Fingerprint",
    "GroupName",
    "InvalidConstraintsError",
    "InvalidSpecificationError",
    "JointConstraint",
    "JointPath",
    "JointSpec",
    "JointState",
    "MotionPlanDetailedResponse",
    "MotionPlanRequest",
    "MotionPlanResponse",
    "PlannerAllocator",
    "PlannerID",
    "PlanningContextError",
    "PlanningContextSpecification",
    "PlanningContextUsageError",
    "PlanningErrorCode",
    "ProjectionEvaluator",
    "ProjectionSpecError",
    "SearchStrategy",
    "SolutionStage",
    "StateSampler",
    "StateSpaceSpecification",
    "StateValidityChecker",
    "StateVector",
    "TerminationReason",
    "UnknownPlannerError",
]
