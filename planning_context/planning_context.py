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

"""Geometric planning context - joint-space planning for one robot group.

The context owns the configuration space, the search strategy and the
goal/path constraints, and drives each solve:

    pre-solve (start goal sampling) -> bounded attempt loop -> post-solve
    (stop goal sampling) -> simplify -> interpolate

It is NOT safe for concurrent ``solve`` calls on one instance; ``terminate``
may be called from any thread at any time.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import threading
import time
from typing import TYPE_CHECKING

import numpy as np

from planning_context.config import PlanningContextSettings
from planning_context.constraints.constraint_samplers import ConstraintSamplerManager
from planning_context.constraints.constraints_library import (
    ConstraintsLibrary,
    build_constraint_approximation,
)
from planning_context.constraints.kinematic_constraints import (
    ConstraintSet,
    merge_constraints,
    validate_constraints,
)
from planning_context.goal_sampling import GoalRegion, GoalRegionSampler
from planning_context.planners.registry import PlannerRegistry, initialize_planner_allocators
from planning_context.space.projections import JointProjection, parse_projection_evaluator
from planning_context.space.samplers import (
    ConstraintApproximationStateSampler,
    ProjectingStateSampler,
)
from planning_context.space.space_information import ProblemDefinition, SpaceInformation
from planning_context.space.state_space import ConfigurationSpace
from planning_context.spec.enums import (
    AttemptStatus,
    ContextState,
    PlanningErrorCode,
    TerminationReason,
)
from planning_context.spec.errors import (
    ConstraintApproximationError,
    InvalidSpecificationError,
    PlanningContextError,
    PlanningContextUsageError,
)
from planning_context.spec.types import (
    BoundedSolveResult,
    JointState,
    MotionPlanDetailedResponse,
    MotionPlanResponse,
    SolutionStage,
)
from planning_context.termination import TerminationCondition, TerminationCoordinator
from planning_context.utils.logging_config import setup_logger
from planning_context.utils.path_utils import (
    interpolate_path,
    path_to_joint_states,
    simplify_path,
)

if TYPE_CHECKING:
    from planning_context.constraints.constraints_library import ConstraintApproximation
    from planning_context.spec.config import PlanningContextSpecification
    from planning_context.spec.protocols import (
        ConstraintSampler,
        PlannerAllocator,
        ProjectionEvaluator,
        SearchStrategy,
        StateSampler,
    )
    from planning_context.spec.types import (
        Constraints,
        Fingerprint,
        GroupName,
        MotionPlanRequest,
        PlannerID,
        StateVector,
    )

logger = setup_logger()

_READY_STATES = (
    ContextState.INITIALIZED,
    ContextState.SUCCEEDED,
    ContextState.FAILED,
    ContextState.TERMINATED,
)


class GeometricPlanningContext:
    """Plans in the joint space of a single group. Not thread safe except for ``terminate``."""

    def __init__(self, constraints_library: ConstraintsLibrary | None = None) -> None:
        self._state = ContextState.UNINITIALIZED
        self._state_lock = threading.Lock()

        self._namespace = ""
        self._settings: PlanningContextSettings | None = None
        self._planner_params: dict[str, str] = {}

        self._space: ConfigurationSpace | None = None
        self._si: SpaceInformation | None = None
        self._problem: ProblemDefinition | None = None
        self._planner: SearchStrategy | None = None
        self._planner_id: PlannerID = ""
        self._registry = initialize_planner_allocators(PlannerRegistry())

        self._complete_initial_state: JointState | None = None
        self._goal_constraints: list[ConstraintSet] = []
        self._goal_specs: list[Constraints] = []
        self._goal_region: GoalRegion | None = None
        self._path_constraints: ConstraintSet | None = None
        self._goal_sampler: GoalRegionSampler | None = None
        # fingerprints whose approximation build kept no states
        self._unapproximable: set[Fingerprint] = set()

        self._constraint_sampler_manager = ConstraintSamplerManager()
        self._owns_library = constraints_library is None
        self._constraints_library = constraints_library or ConstraintsLibrary()
        self._termination = TerminationCoordinator()

        self._timeout = 0.0
        self._attempts = 1

    def get_description(self) -> str:
        group = self._space.group_name if self._space is not None else "<none>"
        return f"Geometric planning context (group={group}, planner={self._planner_id or '<none>'})"

    # ============= Lifecycle =============

    def initialize(self, namespace: str, spec: PlanningContextSpecification) -> None:
        """Allocate the configuration space, register planners and reset constraint state.

        Raises:
            PlanningContextUsageError: if already initialized (call ``clear()`` first)
            InvalidSpecificationError: malformed group or config values
            UnknownPlannerError: configured planner id is not registered
            ProjectionSpecError: malformed projection evaluator encoding
        """
        with self._state_lock:
            if self._state is not ContextState.UNINITIALIZED:
                raise PlanningContextUsageError(
                    "initialize() called on an initialized context; call clear() first"
                )

        settings, planner_params = PlanningContextSettings.from_config(spec.config)
        space = self._allocate_state_space(spec)
        si = SpaceInformation(
            space,
            validity_checker=spec.state_validity_checker,
            longest_valid_segment_fraction=settings.longest_valid_segment_fraction,
        )
        space.register_default_projection(
            JointProjection(space, list(range(min(2, space.dimension))))
        )
        if settings.projection_evaluator:
            space.register_default_projection(
                parse_projection_evaluator(settings.projection_evaluator, space)
            )

        planner = self._registry.configure_planner(si, settings.planner_id, planner_params)

        # nothing below can fail; commit
        self._namespace = namespace
        self._settings = settings
        self._planner_params = planner_params
        self._space = space
        self._si = si
        self._planner = planner
        self._planner_id = settings.planner_id
        self._timeout = settings.timeout
        self._attempts = settings.attempts
        if spec.constraint_sampler_manager is not None:
            self._constraint_sampler_manager = spec.constraint_sampler_manager
        if spec.constraints_library is not None:
            self._constraints_library = spec.constraints_library
            self._owns_library = False
        space.set_state_sampler_allocator(self.alloc_path_constrained_sampler)

        self._reset_constraints()
        if self._complete_initial_state is None or not self._covers_group(self._complete_initial_state):
            lower, upper = space.bounds
            default = space.enforce_bounds(np.clip(np.zeros(space.dimension), lower, upper))
            self._complete_initial_state = JointState(
                name=space.joint_names, position=default.tolist()
            )

        with self._state_lock:
            self._state = ContextState.INITIALIZED
        logger.info(
            f"Initialized planning context for group '{space.group_name}' "
            f"({space.dimension} joints, planner '{self._planner_id}')"
        )

    def clear(self) -> None:
        """Drop goal/path constraints and derived state.

        The configuration space, planner registry and constraint approximations
        are kept. The context must be initialized again before the next solve.
        """
        with self._state_lock:
            if self._state is ContextState.SOLVING:
                raise PlanningContextUsageError("clear() called while a solve is in progress")
        self._stop_goal_sampling()
        self._reset_constraints()
        if self._planner is not None:
            self._planner.clear()
        with self._state_lock:
            self._state = ContextState.UNINITIALIZED
        logger.info("Planning context cleared")

    def close(self) -> None:
        """Release everything, including a private constraints library."""
        if self.state is not ContextState.UNINITIALIZED:
            self.clear()
        if self._owns_library:
            self._constraints_library.clear()

    def _allocate_state_space(self, spec: PlanningContextSpecification) -> ConfigurationSpace:
        try:
            return ConfigurationSpace(spec.state_space)
        except ValueError as e:
            raise InvalidSpecificationError(str(e)) from e

    def _reset_constraints(self) -> None:
        self._goal_constraints = []
        self._goal_specs = []
        self._goal_region = None
        self._goal_sampler = None
        self._path_constraints = None
        self._problem = None
        self._unapproximable.clear()

    # ============= Properties =============

    @property
    def state(self) -> ContextState:
        with self._state_lock:
            return self._state

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def group_name(self) -> GroupName:
        return self._require_space().group_name

    @property
    def settings(self) -> PlanningContextSettings | None:
        return self._settings

    @property
    def space(self) -> ConfigurationSpace | None:
        return self._space

    @property
    def space_information(self) -> SpaceInformation | None:
        return self._si

    @property
    def problem_definition(self) -> ProblemDefinition | None:
        return self._problem

    @property
    def planner(self) -> SearchStrategy | None:
        return self._planner

    @property
    def planner_id(self) -> PlannerID:
        return self._planner_id

    @property
    def constraints_library(self) -> ConstraintsLibrary:
        return self._constraints_library

    @property
    def goal_constraints(self) -> list[Constraints]:
        """Goal constraints as given to ``set_goal_constraints`` (before path merging)."""
        return list(self._goal_specs)

    @property
    def path_constraints(self) -> Constraints | None:
        return self._path_constraints.constraints if self._path_constraints is not None else None

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def attempts(self) -> int:
        return self._attempts

    # ============= Problem Setup =============

    def get_complete_initial_state(self) -> JointState:
        if self._complete_initial_state is None:
            raise PlanningContextUsageError("Initial state requested before initialize()")
        return self._complete_initial_state

    def set_complete_initial_state(self, state: JointState) -> None:
        """Overwrite the start state.

        Raises:
            PlanningContextError: INVALID_START_STATE if a group joint is missing
        """
        if self._space is not None and not self._covers_group(state):
            missing = sorted(set(self._space.joint_names) - set(state.name))
            raise PlanningContextError(
                f"Initial state is missing group joints {missing}",
                PlanningErrorCode.INVALID_START_STATE,
            )
        self._complete_initial_state = JointState(
            name=list(state.name), position=list(state.position)
        )

    def set_path_constraints(self, constraints: Constraints | None) -> PlanningErrorCode:
        """Set (or with None/empty, drop) the path constraint.

        Goal constraints already set are not re-merged; set path constraints first.
        """
        space = self._require_space()
        if constraints is None or constraints.is_empty():
            self._path_constraints = None
            return PlanningErrorCode.SUCCESS

        error = validate_constraints(constraints, space)
        if error is not None:
            logger.error(f"Invalid path constraints for group '{space.group_name}': {error}")
            return PlanningErrorCode.INVALID_PATH_CONSTRAINTS
        self._path_constraints = ConstraintSet(constraints, space)
        return PlanningErrorCode.SUCCESS

    def set_goal_constraints(self, goal_constraints: Sequence[Constraints]) -> PlanningErrorCode:
        """Replace the goal constraint set (a disjunction).

        Each entry is merged with the active path constraint. On failure the
        previous goal constraints stay in place and INVALID_GOAL_CONSTRAINTS is returned.
        """
        space = self._require_space()
        if not goal_constraints:
            logger.error(f"Invalid constraints for group '{space.group_name}': no goal constraints")
            return PlanningErrorCode.INVALID_GOAL_CONSTRAINTS

        for constraints in goal_constraints:
            error = validate_constraints(constraints, space)
            if error is not None:
                logger.error(f"Invalid constraints for group '{space.group_name}': {error}")
                return PlanningErrorCode.INVALID_GOAL_CONSTRAINTS

        path = self._path_constraints.constraints if self._path_constraints is not None else None
        compiled = [ConstraintSet(merge_constraints(c, path), space) for c in goal_constraints]

        restart = self._goal_sampler is not None and self._goal_sampler.is_running
        self._stop_goal_sampling()
        self._goal_constraints = compiled
        self._goal_specs = list(goal_constraints)
        self._goal_region = GoalRegion(compiled)
        if restart:
            self._start_goal_sampling()
        return PlanningErrorCode.SUCCESS

    def set_motion_plan_request(self, request: MotionPlanRequest) -> PlanningErrorCode:
        """Apply a request: start state, path constraints, goal constraints, planner, budget."""
        space = self._require_space()
        if request.group_name != space.group_name:
            logger.error(
                f"Request for group '{request.group_name}' sent to context for '{space.group_name}'"
            )
            return PlanningErrorCode.INVALID_GROUP_NAME

        try:
            self.set_complete_initial_state(request.start_state)
        except PlanningContextError as e:
            logger.error(str(e))
            return e.code

        code = self.set_path_constraints(request.path_constraints)
        if not code.is_success():
            return code
        code = self.set_goal_constraints(request.goal_constraints)
        if not code.is_success():
            return code

        if request.planner_id and request.planner_id != self._planner_id:
            try:
                self.set_planner(request.planner_id)
            except PlanningContextError as e:
                logger.error(str(e))
                return e.code

        if request.allowed_planning_time is not None:
            self._timeout = max(0.0, request.allowed_planning_time)
        if request.num_planning_attempts is not None:
            self._attempts = max(0, request.num_planning_attempts)
        return PlanningErrorCode.SUCCESS

    # ============= Planners & Projections =============

    def register_planner_allocator(self, planner_id: PlannerID, allocator: PlannerAllocator) -> None:
        self._registry.register_planner_allocator(planner_id, allocator)

    @property
    def planner_registry(self) -> PlannerRegistry:
        return self._registry

    def configure_planner(
        self, planner_name: PlannerID, params: Mapping[str, str] | None = None
    ) -> SearchStrategy:
        """Build a strategy from the registry. Raises UnknownPlannerError if not registered."""
        if self._si is None:
            raise PlanningContextUsageError("configure_planner() called before initialize()")
        return self._registry.configure_planner(self._si, planner_name, params)

    def set_planner(self, planner_id: PlannerID, params: Mapping[str, str] | None = None) -> None:
        """Replace the search strategy. The current one is kept if allocation fails."""
        with self._state_lock:
            if self._state is ContextState.SOLVING:
                raise PlanningContextUsageError("set_planner() called while a solve is in progress")
        planner = self.configure_planner(
            planner_id, self._planner_params if params is None else params
        )
        self._planner = planner
        self._planner_id = planner_id
        logger.info(f"Planner set to '{planner_id}' ({planner.get_name()})")

    def get_projection_evaluator(self, encoding: str) -> ProjectionEvaluator:
        """Parse ``encoding`` into a projection. Raises ProjectionSpecError if malformed."""
        return parse_projection_evaluator(encoding, self._require_space())

    def set_projection_evaluator(self, encoding: str) -> None:
        """Make ``encoding`` the space's default projection; unchanged if parsing fails."""
        space = self._require_space()
        space.register_default_projection(parse_projection_evaluator(encoding, space))

    # ============= Sampling =============

    def alloc_path_constrained_sampler(self, space: ConfigurationSpace) -> StateSampler:
        """Default sampler without a path constraint, otherwise a constraint-projecting one."""
        path = self._path_constraints
        if path is None:
            return space.alloc_default_state_sampler()

        constraint_sampler = self._constraint_sampler_manager.select_sampler(space, path)
        if constraint_sampler is None:
            logger.warning(
                f"No sampler for path constraint {path.fingerprint[:8]}; using the default sampler"
            )
            return space.alloc_default_state_sampler()

        approximation = self._approximate_path_constraints(constraint_sampler)
        if approximation is None:
            return ProjectingStateSampler(space, constraint_sampler)
        return ConstraintApproximationStateSampler(space, approximation, constraint_sampler)

    def _approximate_path_constraints(
        self,
        constraint_sampler: ConstraintSampler,
        ptc: TerminationCondition | None = None,
    ) -> ConstraintApproximation | None:
        """Cached approximation of the path constraint, built on first use.

        None when approximations are disabled or the build kept no states. An
        interrupted build raises ConstraintApproximationError and is not cached.
        """
        path = self._path_constraints
        settings = self._require_settings()
        if path is None or not settings.use_constraints_approximations:
            return None
        if path.fingerprint in self._unapproximable:
            return None

        space = self._require_space()
        try:
            return self._constraints_library.get_or_build(
                path.fingerprint,
                lambda: build_constraint_approximation(
                    space,
                    path,
                    constraint_sampler,
                    settings.constraint_approximation_samples,
                    is_valid=self._si.is_valid if self._si is not None else None,
                    ptc=ptc,
                ),
            )
        except ConstraintApproximationError as e:
            if ptc is not None and ptc.reason is not TerminationReason.NONE:
                raise
            logger.warning(f"{e}; projecting samples online instead")
            if not e.interrupted:
                self._unapproximable.add(path.fingerprint)
            return None

    def _prepare_path_sampler(self, deadline: float) -> PlanningErrorCode | None:
        """Build the path constraint approximation before the first attempt.

        The build shares the solve's deadline and can be stopped by terminate().
        Returns the error code to report when it was cut short.
        """
        path = self._path_constraints
        if path is None or not self._require_settings().use_constraints_approximations:
            return None
        constraint_sampler = self._constraint_sampler_manager.select_sampler(
            self._require_space(), path
        )
        if constraint_sampler is None:
            return None

        ptc = TerminationCondition(deadline=deadline)
        self._register_termination_condition(ptc)
        try:
            self._approximate_path_constraints(constraint_sampler, ptc)
        except ConstraintApproximationError as e:
            logger.info(str(e))
            if ptc.reason is TerminationReason.EXTERNAL:
                return PlanningErrorCode.TERMINATED
            return PlanningErrorCode.TIMED_OUT
        finally:
            self._unregister_termination_condition()
        return None

    def _start_goal_sampling(self) -> None:
        """Begin the goal sampling thread."""
        if self._goal_region is None:
            raise PlanningContextUsageError("Goal sampling started without goal constraints")
        if self._goal_sampler is not None and self._goal_sampler.is_running:
            return
        settings = self._require_settings()
        space = self._require_space()
        self._goal_sampler = GoalRegionSampler(
            self._goal_region,
            self._si,
            self._constraint_sampler_manager,
            reference_state=space.state_from_joint_state(self.get_complete_initial_state()),
            max_goal_samples=settings.max_goal_samples,
            max_sampling_attempts=settings.max_goal_sampling_attempts,
            max_failures=settings.max_goal_sampling_failures,
        )
        self._goal_sampler.start()

    def _stop_goal_sampling(self) -> None:
        """Stop the goal sampling thread; returns once it has exited."""
        if self._goal_sampler is not None:
            self._goal_sampler.stop()

    # ============= Termination =============

    def terminate(self) -> bool:
        """Stop the running attempt at its next poll. False (no-op) when no attempt is running."""
        terminated = self._termination.terminate()
        if terminated:
            logger.info("Termination requested")
        return terminated

    def _register_termination_condition(self, ptc: TerminationCondition) -> None:
        self._termination.register(ptc)

    def _unregister_termination_condition(self) -> None:
        self._termination.unregister()

    # ============= Solving =============

    def solve(self, timeout: float | None = None, attempts: int | None = None) -> MotionPlanResponse:
        """Plan with the current setup and return the final trajectory.

        Does not clear data structures first; call ``clear()`` for that. Path
        constraints are only used through the path-constrained sampler.
        """
        result = self._run_solve(timeout, attempts)
        trajectory = []
        if result.success:
            trajectory = path_to_joint_states(
                self._require_space(), result.solution, self.get_complete_initial_state()
            )
        return MotionPlanResponse(
            error_code=result.error_code,
            trajectory=trajectory,
            planning_time=result.total_time,
            group_name=self.group_name,
            message=result.message,
        )

    def solve_detailed(
        self, timeout: float | None = None, attempts: int | None = None
    ) -> MotionPlanDetailedResponse:
        """Like ``solve`` but keeps the trajectory after every stage and per-attempt times."""
        result = self._run_solve(timeout, attempts)
        space = self._require_space()
        reference = self.get_complete_initial_state()
        return MotionPlanDetailedResponse(
            error_code=result.error_code,
            trajectories=[path_to_joint_states(space, s.path, reference) for s in result.stages],
            descriptions=[s.description for s in result.stages],
            processing_time=[s.processing_time for s in result.stages],
            attempt_times=list(result.attempt_times),
            planning_time=result.total_time,
            group_name=space.group_name,
            message=result.message,
        )

    def _run_solve(self, timeout: float | None, attempts: int | None) -> BoundedSolveResult:
        self._begin_solving()
        result: BoundedSolveResult | None = None
        try:
            try:
                self._pre_solve()
                result = self._solve(
                    self._timeout if timeout is None else timeout,
                    self._attempts if attempts is None else attempts,
                )
            finally:
                self._post_solve()
        finally:
            self._end_solving(result)

        logger.info(
            f"Solve finished: {result.error_code.name} in {result.total_time:.3f}s "
            f"over {len(result.attempt_times)} attempt(s)"
        )
        return result

    def _begin_solving(self) -> None:
        with self._state_lock:
            if self._state is ContextState.SOLVING:
                raise PlanningContextUsageError("solve() called while another solve is in progress")
            if self._state not in _READY_STATES:
                raise PlanningContextUsageError("solve() called before initialize()")
            if self._goal_region is None:
                raise PlanningContextUsageError("solve() called before set_goal_constraints()")
            self._state = ContextState.SOLVING

    def _end_solving(self, result: BoundedSolveResult | None) -> None:
        if result is None:
            state = ContextState.FAILED
        elif result.success:
            state = ContextState.SUCCEEDED
        elif result.error_code is PlanningErrorCode.TERMINATED:
            state = ContextState.TERMINATED
        else:
            state = ContextState.FAILED
        with self._state_lock:
            self._state = state

    def _pre_solve(self) -> None:
        """Invoked immediately before every solve: bind the problem and start goal sampling."""
        space = self._require_space()
        start = space.state_from_joint_state(self.get_complete_initial_state())
        if self._problem is None or self._problem.goal is not self._goal_region:
            self._problem = ProblemDefinition(self._si, start, self._goal_region)
        else:
            self._problem.set_start_state(start)
            self._problem.clear_solution_paths()
        self._planner.clear()
        self._planner.configure(self._problem)
        self._start_goal_sampling()

    def _post_solve(self) -> None:
        """Invoked immediately after every solve: stop goal sampling."""
        self._stop_goal_sampling()

    def _solve(self, timeout: float, count: int) -> BoundedSolveResult:
        """Run up to ``count`` attempts (at least one) within ``timeout`` seconds in total.

        Stops at the first success, on external termination, when the goal
        region is found infeasible, or when the time budget runs out. A path
        constraint approximation is built first, against the same deadline.
        The solution is then simplified and interpolated if enabled.
        """
        problem = self._problem
        si = self._si
        goal = problem.goal

        if not si.is_valid(problem.start_state):
            return BoundedSolveResult(
                error_code=PlanningErrorCode.INVALID_START_STATE,
                message="Start state is out of bounds or invalid",
            )

        prepare_start = time.monotonic()
        deadline = prepare_start + max(0.0, timeout)
        interrupted = self._prepare_path_sampler(deadline)
        prepare_time = time.monotonic() - prepare_start
        if interrupted is not None:
            return BoundedSolveResult(
                error_code=interrupted,
                total_time=prepare_time,
                message="Interrupted while approximating the path constraint",
            )

        attempt_times: list[float] = []
        code = PlanningErrorCode.PLANNING_FAILED
        message = "No solution found"
        path: list[StateVector] = []

        for attempt in range(max(1, count)):
            if attempt > 0 and time.monotonic() >= deadline:
                code, message = PlanningErrorCode.TIMED_OUT, "Time budget exhausted"
                break

            ptc = TerminationCondition(deadline=deadline, predicates=(goal.is_infeasible,))
            self._register_termination_condition(ptc)
            attempt_start = time.monotonic()
            try:
                self._planner.clear()
                outcome = self._planner.attempt_once(ptc)
            finally:
                self._unregister_termination_condition()
                attempt_times.append(time.monotonic() - attempt_start)

            logger.debug(
                f"Attempt {attempt + 1}: {outcome.status.name} after {outcome.iterations} "
                f"iterations in {attempt_times[-1]:.3f}s"
            )
            message = outcome.message
            if outcome.is_success():
                code = PlanningErrorCode.SUCCESS
                path = problem.get_solution_path() or outcome.path
                break
            if ptc.reason is TerminationReason.EXTERNAL or outcome.status is AttemptStatus.TERMINATED:
                code, message = PlanningErrorCode.TERMINATED, "Terminated externally"
                break
            if outcome.status is AttemptStatus.NO_GOAL or goal.is_infeasible():
                code, message = PlanningErrorCode.NO_FEASIBLE_GOAL, "No feasible goal state found"
                break
            if ptc.reason is TerminationReason.DEADLINE or outcome.status is AttemptStatus.TIMEOUT:
                code, message = PlanningErrorCode.TIMED_OUT, "Time budget exhausted"
                break

        total_time = prepare_time + sum(attempt_times)
        if not code.is_success():
            return BoundedSolveResult(
                error_code=code,
                total_time=total_time,
                attempt_times=attempt_times,
                message=message,
            )
        return BoundedSolveResult(
            error_code=code,
            total_time=total_time,
            attempt_times=attempt_times,
            stages=self._post_process(path, total_time),
            message=message,
        )

    def _post_process(self, path: list[StateVector], plan_time: float) -> list[SolutionStage]:
        """Simplify, then interpolate, keeping every intermediate stage."""
        settings = self._require_settings()
        stages = [SolutionStage("plan", list(path), plan_time)]

        if settings.simplify_solutions:
            start = time.monotonic()
            path = simplify_path(
                self._si, path, max_steps=settings.simplify_max_steps, rng=self._space.rng
            )
            stages.append(SolutionStage("simplify", path, time.monotonic() - start))

        if settings.interpolate:
            start = time.monotonic()
            path = interpolate_path(
                self._space, path, resolution=settings.max_solution_segment_length
            )
            stages.append(SolutionStage("interpolate", path, time.monotonic() - start))

        return stages

    # ============= Helpers =============

    def _require_space(self) -> ConfigurationSpace:
        if self._space is None:
            raise PlanningContextUsageError("Planning context is not initialized")
        return self._space

    def _require_settings(self) -> PlanningContextSettings:
        if self._settings is None:
            raise PlanningContextUsageError("Planning context is not initialized")
        return self._settings

    def _covers_group(self, state: JointState) -> bool:
        return self._space is None or set(self._space.joint_names) <= set(state.name)
