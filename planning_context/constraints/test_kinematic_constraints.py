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

from concurrent.futures import ThreadPoolExecutor
import math

import numpy as np
import pytest

from planning_context.constraints.constraint_samplers import (
    ConstraintSamplerManager,
    JointConstraintSampler,
)
from planning_context.constraints.kinematic_constraints import (
    ConstraintSet,
    constraint_fingerprint,
    merge_constraints,
    validate_constraints,
)
from planning_context.space.state_space import ConfigurationSpace
from planning_context.spec.config import StateSpaceSpecification
from planning_context.spec.errors import InvalidConstraintsError
from planning_context.spec.types import Constraints, JointConstraint, JointSpec
from planning_context.utils.testing import box_constraints


@pytest.fixture
def space(two_joints):
    return ConfigurationSpace(StateSpaceSpecification(group_name="arm", joints=two_joints))


@pytest.fixture
def wrist_space():
    joints = [JointSpec("joint1", -1.0, 1.0), JointSpec("wrist", continuous=True)]
    return ConfigurationSpace(StateSpaceSpecification(group_name="wrist", joints=joints))


# =============================================================================
# Test Validation
# =============================================================================


class TestValidateConstraints:
    def test_valid(self, space):
        assert validate_constraints(box_constraints(0.0, 0.5), space) is None

    @pytest.mark.parametrize(
        "constraints",
        [
            Constraints(),
            Constraints(joint_constraints=(JointConstraint("elbow", 0.0),)),
            Constraints(joint_constraints=(JointConstraint("joint1", 0.0),) * 2),
            Constraints(joint_constraints=(JointConstraint("joint1", math.nan),)),
            Constraints(joint_constraints=(JointConstraint("joint1", 0.0, -0.1, 0.1),)),
        ],
        ids=["empty", "unknown-joint", "duplicate", "nan", "negative-tolerance"],
    )
    def test_invalid(self, space, constraints):
        assert validate_constraints(constraints, space) is not None

    def test_constraint_set_rejects_unknown_joint(self, space):
        with pytest.raises(InvalidConstraintsError):
            ConstraintSet(Constraints(joint_constraints=(JointConstraint("elbow", 0.0),)), space)


# =============================================================================
# Test Merging & Fingerprints
# =============================================================================


class TestMergeConstraints:
    def test_none_returns_first(self):
        first = box_constraints(0.0, 1.0)
        assert merge_constraints(first, None) is first
        assert merge_constraints(first, Constraints()) is first

    def test_shared_joint_is_intersected(self):
        merged = merge_constraints(
            box_constraints(0.0, 1.0, joints=("joint1",), name="goal"),
            box_constraints(0.5, 2.0, joints=("joint1", "joint2"), name="path"),
        )
        by_joint = {jc.joint_name: jc for jc in merged.joint_constraints}

        assert by_joint["joint1"].lower == pytest.approx(0.5)
        assert by_joint["joint1"].upper == pytest.approx(1.0)
        assert by_joint["joint2"].lower == pytest.approx(0.5)
        assert merged.name == "goal+path"

    def test_disjoint_intersection_is_infeasible(self, space):
        merged = merge_constraints(box_constraints(0.0, 0.2), box_constraints(0.5, 0.6))
        cs = ConstraintSet(merged, space)

        assert ConstraintSamplerManager().select_sampler(space, cs) is None
        assert not cs.is_satisfied(np.array([0.1, 0.1]))
        assert not cs.is_satisfied(np.array([0.55, 0.55]))


class TestFingerprint:
    def test_name_and_order_do_not_matter(self):
        a = Constraints(
            joint_constraints=(JointConstraint("joint1", 0.1, 0.2, 0.2), JointConstraint("joint2", 0.3)),
            name="a",
        )
        b = Constraints(
            joint_constraints=(JointConstraint("joint2", 0.3), JointConstraint("joint1", 0.1, 0.2, 0.2)),
            name="b",
        )
        assert constraint_fingerprint("arm", a) == constraint_fingerprint("arm", b)

    def test_content_and_group_matter(self):
        base = box_constraints(0.0, 1.0)
        assert constraint_fingerprint("arm", base) != constraint_fingerprint("leg", base)
        assert constraint_fingerprint("arm", base) != constraint_fingerprint(
            "arm", box_constraints(0.0, 1.1)
        )


# =============================================================================
# Test ConstraintSet & Sampling
# =============================================================================


class TestConstraintSet:
    def test_decide_distance(self, space):
        cs = ConstraintSet(box_constraints(0.0, 1.0), space)

        assert cs.decide(np.array([0.5, 0.5])) == (True, 0.0)
        satisfied, distance = cs.decide(np.array([1.5, -0.25]))
        assert not satisfied
        assert distance == pytest.approx(0.75)

    def test_continuous_joint_wraps(self, wrist_space):
        cs = ConstraintSet(
            Constraints(joint_constraints=(JointConstraint("wrist", math.pi, 0.1, 0.1),)),
            wrist_space,
        )
        assert cs.is_satisfied(np.array([0.0, -math.pi + 0.05]))
        assert not cs.is_satisfied(np.array([0.0, 0.0]))


class TestJointConstraintSampler:
    def test_samples_inside_bounds(self, space):
        cs = ConstraintSet(box_constraints(0.5, 0.6, joints=("joint1",)), space)
        sampler = JointConstraintSampler(space, cs, seed=3)

        for _ in range(50):
            state = sampler.sample(np.zeros(2))
            assert 0.5 <= state[0] <= 0.6
            assert -math.pi <= state[1] <= math.pi

    def test_partially_out_of_limits_is_clipped(self, space):
        cs = ConstraintSet(box_constraints(3.0, 4.0, joints=("joint1",)), space)
        sampler = JointConstraintSampler(space, cs, seed=3)

        assert sampler.is_feasible
        assert 3.0 <= sampler.sample(np.zeros(2))[0] <= math.pi

    def test_project_clamps(self, space):
        cs = ConstraintSet(box_constraints(0.5, 0.6), space)
        sampler = JointConstraintSampler(space, cs)

        projected = sampler.project(np.array([0.0, 1.0]))
        assert projected == pytest.approx([0.5, 0.6])

    def test_project_continuous_takes_short_way(self, wrist_space):
        cs = ConstraintSet(
            Constraints(joint_constraints=(JointConstraint("wrist", math.pi, 0.1, 0.1),)),
            wrist_space,
        )
        sampler = JointConstraintSampler(wrist_space, cs)

        projected = sampler.project(np.array([0.0, -2.8]))
        assert cs.is_satisfied(projected)

    def test_registered_allocator_takes_precedence(self, space):
        cs = ConstraintSet(box_constraints(0.5, 0.6), space)
        sentinel = object()
        manager = ConstraintSamplerManager()
        manager.register_sampler_allocator(lambda s, c: None)
        manager.register_sampler_allocator(lambda s, c: sentinel)

        assert manager.select_sampler(space, cs) is sentinel

    def test_concurrent_selection_gets_distinct_seeds(self, space):
        cs = ConstraintSet(box_constraints(-1.0, 1.0), space)
        manager = ConstraintSamplerManager(seed=11)

        with ThreadPoolExecutor(max_workers=8) as pool:
            samplers = list(pool.map(lambda _: manager.select_sampler(space, cs), range(64)))

        first_draws = {tuple(sampler.sample(np.zeros(2))) for sampler in samplers}
        assert len(first_draws) == 64
