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


"""Enumerations for the planning context."""

from enum import Enum, auto


class PlanningErrorCode(Enum):
    """Outcome of a planning-context operation."""

    SUCCESS = auto()
    PLANNING_FAILED = auto()
    INVALID_GROUP_NAME = auto()
    INVALID_GOAL_CONSTRAINTS = auto()
    INVALID_PATH_CONSTRAINTS = auto()
    INVALID_START_STATE = auto()
    INVALID_PROJECTION = auto()
    NO_FEASIBLE_GOAL = auto()
    TIMED_OUT = auto()
    TERMINATED = auto()
    PLANNER_ALLOCATION_FAILED = auto()

    def is_success(self) -> bool:
        return self is PlanningErrorCode.SUCCESS


class ContextState(Enum):
    """Lifecycle of a planning context."""

    UNINITIALIZED = 0
    INITIALIZED = 1
    SOLVING = 2
    SUCCEEDED = 3
    FAILED = 4
    TERMINATED = 5


class AttemptStatus(Enum):
    """Result of a single search-strategy attempt."""

    EXACT_SOLUTION = auto()
    TIMEOUT = auto()
    TERMINATED = auto()
    NO_GOAL = auto()
    ABORTED = auto()


class TerminationReason(Enum):
    """Why a termination condition fired."""

    NONE = auto()
    EXTERNAL = auto()
    DEADLINE = auto()
    PREDICATE = auto()
