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


from __future__ import annotations

from pydantic import ValidationError
import pytest

from planning_context.config import PlanningContextSettings
from planning_context.spec.enums import PlanningErrorCode
from planning_context.spec.errors import InvalidSpecificationError


class TestPlanningContextSettings:
    def test_defaults(self):
        settings = PlanningContextSettings()
        assert settings.planner_id == "rrt_connect"
        assert settings.simplify_solutions
        assert settings.interpolate
        assert settings.attempts == 1

    def test_from_config_splits_planner_params(self):
        settings, params = PlanningContextSettings.from_config(
            {"planner_id": "rrt", "timeout": "2.5", "range": "0.3", "goal_bias": "0.1"}
        )

        assert settings.planner_id == "rrt"
        assert settings.timeout == 2.5
        assert params == {"range": "0.3", "goal_bias": "0.1"}

    @pytest.mark.parametrize(
        "config",
        [
            {"timeout": "soon"},
            {"attempts": "-1"},
            {"max_solution_segment_length": "0"},
            {"simplify_solutions": "maybe"},
        ],
    )
    def test_malformed_values(self, config):
        with pytest.raises(InvalidSpecificationError) as exc_info:
            PlanningContextSettings.from_config(config)
        assert exc_info.value.code is PlanningErrorCode.INVALID_GROUP_NAME

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PLANNING_CONTEXT_TIMEOUT", "7.5")
        monkeypatch.setenv("PLANNING_CONTEXT_PLANNER_ID", "projection_rrt")

        settings, _ = PlanningContextSettings.from_config({})
        assert settings.timeout == 7.5
        assert settings.planner_id == "projection_rrt"

    def test_config_beats_environment(self, monkeypatch):
        monkeypatch.setenv("PLANNING_CONTEXT_TIMEOUT", "7.5")

        settings, _ = PlanningContextSettings.from_config({"timeout": "1.0"})
        assert settings.timeout == 1.0

    def test_settings_are_frozen(self):
        settings = PlanningContextSettings()
        with pytest.raises(ValidationError):
            settings.timeout = 3.0
