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


"""Runtime settings for the planning context."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from planning_context.spec.errors import InvalidSpecificationError


class PlanningContextSettings(BaseSettings):
    planner_id: str = "rrt_connect"
    simplify_solutions: bool = True
    interpolate: bool = True
    max_solution_segment_length: float = Field(default=0.05, gt=0.0)
    simplify_max_steps: int = Field(default=100, ge=0)
    timeout: float = Field(default=5.0, ge=0.0)
    attempts: int = Field(default=1, ge=0)
    projection_evaluator: str | None = None
    longest_valid_segment_fraction: float = Field(default=0.01, gt=0.0, le=1.0)

    # goal sampling
    max_goal_samples: int = Field(default=10, ge=1)
    max_goal_sampling_attempts: int = Field(default=100, ge=1)
    max_goal_sampling_failures: int = Field(default=20, ge=1)

    # constraint approximations
    use_constraints_approximations: bool = True
    constraint_approximation_samples: int = Field(default=1000, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="PLANNING_CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def from_config(
        cls, config: Mapping[str, str]
    ) -> tuple[PlanningContextSettings, dict[str, str]]:
        """Split a string-keyed config map into settings and leftover planner parameters."""
        known = {k: v for k, v in config.items() if k in cls.model_fields}
        planner_params = {k: v for k, v in config.items() if k not in cls.model_fields}
        try:
            settings = cls(**known)
        except ValidationError as e:
            raise InvalidSpecificationError(f"Malformed planning context config: {e}") from e
        return settings, planner_params
