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


"""Goal region and the background worker that fills it.

The GoalRegion is the disjunction of compiled goal constraint sets plus a
thread-safe store of concrete goal states. While a solve runs, a
GoalRegionSampler thread keeps drawing valid states from the constraint sets
and submits them to the region, where goal-biased strategies pick them up.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import threading
from typing import TYPE_CHECKING

import numpy as np

from planning_context.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from planning_context.constraints.constraint_samplers import ConstraintSamplerManager
    from planning_context.constraints.kinematic_constraints import ConstraintSet
    from planning_context.space.space_information import SpaceInformation
    from planning_context.spec.protocols import ConstraintSampler
    from planning_context.spec.types import StateVector
    from planning_context.termination import TerminationCondition

logger = setup_logger()


class GoalRegion:
    """Any-of goal over compiled constraint sets, plus the goal states sampled so far."""

    def __init__(self, constraint_sets: Sequence[ConstraintSet]) -> None:
        if not constraint_sets:
            raise ValueError("GoalRegion needs at least one constraint set")
        self._constraint_sets = tuple(constraint_sets)
        self._cond = threading.Condition()
        self._states: list[StateVector] = []
        self._sampling_done = False

    @property
    def constraint_sets(self) -> tuple[ConstraintSet, ...]:
        return self._constraint_sets

    def is_satisfied(self, state: StateVector) -> bool:
        return any(cs.is_satisfied(state) for cs in self._constraint_sets)

    def distance_goal(self, state: StateVector) -> float:
        return min(cs.decide(state)[1] for cs in self._constraint_sets)

    # ============= Sampled States =============

    def add_state(self, state: StateVector) -> None:
        with self._cond:
            self._states.append(np.asarray(state, dtype=np.float64).copy())
            self._cond.notify_all()

    def states_since(self, index: int) -> list[StateVector]:
        """Goal states added after the first ``index`` ones."""
        with self._cond:
            return list(self._states[index:])

    @property
    def state_count(self) -> int:
        with self._cond:
            return len(self._states)

    def has_states(self) -> bool:
        return self.state_count > 0

    def clear_states(self) -> None:
        with self._cond:
            self._states.clear()

    def wait_for_goal(self, known: int, ptc: TerminationCondition, timeout: float = 0.05) -> bool:
        """Block until more than ``known`` states exist or ``timeout`` passes.

        Returns early when sampling finishes or ``ptc`` fires.

        Returns True if new states are available.
        """
        with self._cond:
            if len(self._states) <= known and not self._sampling_done and not ptc():
                self._cond.wait(timeout)
            return len(self._states) > known

    # ============= Sampling Status =============

    def begin_sampling(self) -> None:
        with self._cond:
            self._sampling_done = False

    def mark_sampling_done(self) -> None:
        with self._cond:
            self._sampling_done = True
            self._cond.notify_all()

    @property
    def sampling_done(self) -> bool:
        with self._cond:
            return self._sampling_done

    def is_infeasible(self) -> bool:
        """True once sampling gave up without producing any goal state."""
        with self._cond:
            return self._sampling_done and not self._states


class GoalRegionSampler:
    """Single background thread feeding valid goal states to a GoalRegion.

    The constraint sets are snapshotted on ``start()``; the context restarts
    the sampler when its goal constraints change. ``stop()`` joins the thread,
    so no ``on_goal_state`` call happens after it returns.

    The worker idles (without spinning) once it produced ``max_goal_samples``
    states, or after ``max_failures`` consecutive draws of
    ``max_sampling_attempts`` samples each found nothing valid; in the second
    case the region is reported infeasible if it holds no state.
    """

    def __init__(
        self,
        goal_region: GoalRegion,
        si: SpaceInformation,
        constraint_sampler_manager: ConstraintSamplerManager,
        reference_state: StateVector,
        max_goal_samples: int = 10,
        max_sampling_attempts: int = 100,
        max_failures: int = 20,
        on_goal_state: Callable[[StateVector], None] | None = None,
    ) -> None:
        self._goal_region = goal_region
        self._si = si
        self._manager = constraint_sampler_manager
        self._reference_state = np.asarray(reference_state, dtype=np.float64).copy()
        self._max_goal_samples = max_goal_samples
        self._max_sampling_attempts = max_sampling_attempts
        self._max_failures = max_failures
        self._on_goal_state = on_goal_state or goal_region.add_state

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._samples_produced = 0

    @property
    def goal_region(self) -> GoalRegion:
        return self._goal_region

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def samples_produced(self) -> int:
        return self._samples_produced

    def start(self) -> None:
        """Spawn the worker. No-op (with a warning) if it is already running."""
        if self._thread is not None:
            logger.warning("Goal sampling thread already running")
            return

        snapshot = tuple(self._goal_region.constraint_sets)
        self._stop_event.clear()
        self._goal_region.begin_sampling()
        self._thread = threading.Thread(
            target=self._sampling_loop,
            args=(snapshot,),
            name="GoalSamplingThread",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Goal sampling thread started")

    def stop(self) -> None:
        """Signal the worker and block until it has exited."""
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        logger.debug(f"Goal sampling thread stopped after {self._samples_produced} samples")

    def _sampling_loop(self, constraint_sets: tuple[ConstraintSet, ...]) -> None:
        """Internal: draw goal states until stopped, saturated or exhausted."""
        try:
            self._run(constraint_sets)
        except Exception:
            logger.exception("Goal sampling failed")
            self._goal_region.mark_sampling_done()

    def _run(self, constraint_sets: tuple[ConstraintSet, ...]) -> None:
        samplers: list[tuple[ConstraintSet, ConstraintSampler]] = []
        for cs in constraint_sets:
            sampler = self._manager.select_sampler(self._si.space, cs)
            if sampler is not None:
                samplers.append((cs, sampler))

        if not samplers:
            logger.warning("No goal constraint set can be sampled; goal region is infeasible")
            self._idle()
            return

        failures = 0
        turn = 0
        while not self._stop_event.is_set():
            if self._goal_region.state_count >= self._max_goal_samples:
                self._idle()
                return
            if failures >= self._max_failures:
                if not self._goal_region.has_states():
                    logger.warning(
                        f"Goal sampling gave up after {failures} failed rounds; "
                        "no feasible goal state found"
                    )
                self._idle()
                return

            cs, sampler = samplers[turn % len(samplers)]
            turn += 1
            state = self._draw(cs, sampler)
            if state is None:
                failures += 1
                continue

            failures = 0
            if self._stop_event.is_set():
                break
            self._on_goal_state(state)
            self._samples_produced += 1

    def _draw(self, cs: ConstraintSet, sampler: ConstraintSampler) -> StateVector | None:
        for _ in range(self._max_sampling_attempts):
            if self._stop_event.is_set():
                return None
            candidate = sampler.sample(self._reference_state)
            if candidate is not None and cs.is_satisfied(candidate) and self._si.is_valid(candidate):
                return candidate
        return None

    def _idle(self) -> None:
        self._goal_region.mark_sampling_done()
        self._stop_event.wait()
