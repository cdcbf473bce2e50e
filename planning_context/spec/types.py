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


"""Data types for the planning context."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING, TypeAlias

import numpy as np

from planning_context.spec.enums import AttemptStatus, PlanningErrorCode

if TYPE_CHECKING:
    from numpy.typing import NDArray

# =============================================================================
# Semantic Types (documentation only, not enforced at runtime)
# =============================================================================

GroupName: TypeAlias = str
"""Name of the planning group (e.g. 'left_arm')"""

PlannerID: TypeAlias = str
"""Registered planner identifier (e.g. 'rrt_connect')"""

Fingerprint: TypeAlias = str
"""Hex digest identifying a (group, constraint content) pair"""

StateVector: TypeAlias = "NDArray[np.float64]"
"""Group joint values in configuration-space order"""

JointPath: TypeAlias = "list[JointState]"
"""List of complete robot states forming a trajectory"""


# =============================================================================
# Robot State
# =============================================================================


@dataclass
class JointState:
    """Complete robot configuration: joint names with matching positions."""

    name: list[str] = field(default_factory=list)
    position: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.name) != len(self.position):
            raise ValueError(
                f"JointState has {len(self.name)} names but {len(self.position)} positions"
            )

    def positions_for(self, joint_names: list[str]) -> StateVector:
        """Extract positions for ``joint_names`` in that order. Raises KeyError if one is missing."""
        index = {n: i for i, n in enumerate(self.name)}
        return np.array([self.position[index[j]] for j in joint_names], dtype=np.float64)

    def with_positions(self, joint_names: list[str], values: StateVector) -> JointState:
        """Copy of this state with ``joint_names`` overwritten (appended if absent)."""
        names = list(self.name)
        positions = list(self.position)
        index = {n: i for i, n in enumerate(names)}
        for joint, value in zip(joint_names, values, strict=True):
            if joint in index:
                positions[index[joint]] = float(value)
            else:
                index[joint] = len(names)
                names.append(joint)
                positions.append(float(value))
        return JointState(name=names, position=positions)


@dataclass(frozen=True)
class JointSpec:
    """One degree of freedom of a planning group.

    Continuous joints wrap at +-pi and ignore ``lower``/``upper``.
    """

    name: str
    lower: float = -math.pi
    upper: float = math.pi
    continuous: bool = False


# =============================================================================
# Constraints
# =============================================================================


@dataclass(frozen=True)
class JointConstraint:
    """Keep ``joint_name`` within [position - tolerance_below, position + tolerance_above]."""

    joint_name: str
    position: float
    tolerance_above: float = 0.0
    tolerance_below: float = 0.0
    weight: float = 1.0

    @classmethod
    def from_bounds(cls, joint_name: str, lower: float, upper: float) -> JointConstraint:
        center = 0.5 * (lower + upper)
        return cls(
            joint_name=joint_name,
            position=center,
            tolerance_above=upper - center,
            tolerance_below=center - lower,
        )

    @property
    def lower(self) -> float:
        return self.position - self.tolerance_below

    @property
    def upper(self) -> float:
        return self.position + self.tolerance_above


@dataclass(frozen=True)
class Constraints:
    """A conjunction of constraints that a single state must satisfy."""

    joint_constraints: tuple[JointConstraint, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "joint_constraints", tuple(self.joint_constraints))

    def is_empty(self) -> bool:
        return not self.joint_constraints


# =============================================================================
# Request / Response
# =============================================================================


@dataclass
class MotionPlanRequest:
    """Everything needed to set up one planning query.

    Attributes:
        group_name: Group to plan for; must match the context's group
        start_state: Complete initial robot state
        goal_constraints: Disjunction of goal constraint specifications
        path_constraints: Constraint that must hold along the whole trajectory
        planner_id: Registered planner id (None keeps the configured planner)
        allowed_planning_time: Total time budget in seconds (None uses the default)
        num_planning_attempts: Number of attempts (None uses the default)
    """

    group_name: GroupName
    start_state: JointState
    goal_constraints: list[Constraints] = field(default_factory=list)
    path_constraints: Constraints | None = None
    planner_id: PlannerID | None = None
    allowed_planning_time: float | None = None
    num_planning_attempts: int | None = None


@dataclass
class MotionPlanResponse:
    """Result of a planning query.

    Attributes:
        error_code: Outcome of the query
        trajectory: Complete robot states from start to goal (empty on failure)
        planning_time: Wall time accumulated over all attempts (seconds)
        group_name: Group that was planned for
        message: Human-readable status
    """

    error_code: PlanningErrorCode
    trajectory: JointPath = field(default_factory=list)
    planning_time: float = 0.0
    group_name: GroupName = ""
    message: str = ""

    def is_success(self) -> bool:
        return self.error_code.is_success()


@dataclass
class MotionPlanDetailedResponse:
    """Planning result with every post-processing stage kept.

    ``trajectories[i]`` was produced by stage ``descriptions[i]`` ("plan",
    "simplify", "interpolate") in ``processing_time[i]`` seconds.
    """

    error_code: PlanningErrorCode
    trajectories: list[JointPath] = field(default_factory=list)
    descriptions: list[str] = field(default_factory=list)
    processing_time: list[float] = field(default_factory=list)
    attempt_times: list[float] = field(default_factory=list)
    planning_time: float = 0.0
    group_name: GroupName = ""
    message: str = ""

    def is_success(self) -> bool:
        return self.error_code.is_success()

    @property
    def trajectory(self) -> JointPath:
        """Final trajectory (the last stage), empty on failure."""
        return self.trajectories[-1] if self.trajectories else []


# =============================================================================
# Internal Results
# =============================================================================


@dataclass
class AttemptResult:
    """Outcome of one search-strategy attempt. ``path`` holds group state vectors."""

    status: AttemptStatus
    path: list[StateVector] = field(default_factory=list)
    iterations: int = 0
    message: str = ""

    def is_success(self) -> bool:
        return self.status == AttemptStatus.EXACT_SOLUTION


@dataclass
class SolutionStage:
    description: str
    path: list[StateVector]
    processing_time: float


@dataclass
class BoundedSolveResult:
    """Outcome of the bounded attempt loop.

    Attributes:
        error_code: Best available code for the whole loop
        total_time: Wall time accumulated across all attempts (seconds)
        attempt_times: Wall time of each attempt that ran
        stages: Solution after planning and each post-processing step
    """

    error_code: PlanningErrorCode
    total_time: float = 0.0
    attempt_times: list[float] = field(default_factory=list)
    stages: list[SolutionStage] = field(default_factory=list)
    message: str = ""

    @property
    def success(self) -> bool:
        return self.error_code.is_success()

    @property
    def solution(self) -> list[StateVector]:
        return self.stages[-1].path if self.stages else []
