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


"""Precomputed approximations of constraint-valid state distributions.

The library maps a constraint fingerprint to a ConstraintApproximation so
repeated planning requests with the same path constraint sample from stored
states instead of projecting online. Entries are built lazily, at most once
per fingerprint, and live until ``clear()`` or until the library is dropped.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
import threading
import time
from typing import TYPE_CHECKING

import numpy as np

from planning_context.spec.errors import ConstraintApproximationError
from planning_context.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from planning_context.constraints.kinematic_constraints import ConstraintSet
    from planning_context.space.state_space import ConfigurationSpace
    from planning_context.spec.protocols import ConstraintSampler, StateValidityChecker
    from planning_context.spec.types import Constraints, Fingerprint, GroupName, StateVector

logger = setup_logger()


@dataclass(eq=False)
class ConstraintApproximation:
    """Stored sample of states satisfying one constraint specification.

    Attributes:
        fingerprint: Key of the (group, constraint content) pair
        group_name: Planning group the states belong to
        constraints: Constraint specification that was approximated
        states: N x dim array of valid states
        build_time: Seconds spent building the approximation
    """

    fingerprint: Fingerprint
    group_name: GroupName
    constraints: Constraints
    states: NDArray[np.float64]
    build_time: float = 0.0
    created_at: float = field(default_factory=time.time)

    def __len__(self) -> int:
        return len(self.states)

    def nearest(self, state: StateVector) -> StateVector | None:
        if len(self.states) == 0:
            return None
        dists = np.linalg.norm(self.states - np.asarray(state, dtype=np.float64), axis=1)
        return self.states[int(np.argmin(dists))].copy()


def build_constraint_approximation(
    space: ConfigurationSpace,
    constraint_set: ConstraintSet,
    sampler: ConstraintSampler,
    samples: int,
    is_valid: StateValidityChecker | None = None,
    ptc: Callable[[], bool] | None = None,
) -> ConstraintApproximation:
    """Draw up to ``samples`` valid states from ``sampler`` (at most 10x as many draws).

    ``ptc`` is polled before every draw. Raises ConstraintApproximationError when
    it fires or when no valid state was kept, so a partial or empty build never
    reaches the library.
    """
    start_time = time.perf_counter()
    states: list[StateVector] = []
    reference = np.zeros(space.dimension, dtype=np.float64)
    label = constraint_set.fingerprint[:8]
    for _ in range(samples * 10):
        if len(states) >= samples:
            break
        if ptc is not None and ptc():
            raise ConstraintApproximationError(
                f"Constraint approximation {label} interrupted after {len(states)} states",
                interrupted=True,
            )
        state = sampler.sample(reference)
        if state is None:
            continue
        if is_valid is not None and not is_valid(state):
            continue
        states.append(state)

    build_time = time.perf_counter() - start_time
    if not states:
        raise ConstraintApproximationError(
            f"Constraint approximation {label} kept no valid states after {build_time:.3f}s"
        )
    array = np.array(states, dtype=np.float64).reshape(-1, space.dimension)
    logger.info(f"Built constraint approximation {label} with {len(array)} states in {build_time:.3f}s")
    return ConstraintApproximation(
        fingerprint=constraint_set.fingerprint,
        group_name=space.group_name,
        constraints=constraint_set.constraints,
        states=array,
        build_time=build_time,
    )


class ConstraintsLibrary:
    """Thread-safe fingerprint -> ConstraintApproximation cache with single-builder insertion."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[Fingerprint, Future[ConstraintApproximation]] = {}
        self._build_count = 0

    def get_or_build(
        self,
        fingerprint: Fingerprint,
        builder: Callable[[], ConstraintApproximation],
    ) -> ConstraintApproximation:
        """Return the cached approximation, building it if absent.

        Concurrent callers for the same fingerprint wait for the first caller's
        build and all observe the same object. A failed build is evicted and its
        exception is raised to every waiter.
        """
        with self._lock:
            future = self._entries.get(fingerprint)
            owner = future is None
            if owner:
                future = Future()
                self._entries[fingerprint] = future
                self._build_count += 1

        if owner:
            try:
                approximation = builder()
            except BaseException as e:
                with self._lock:
                    self._entries.pop(fingerprint, None)
                future.set_exception(e)
                raise
            future.set_result(approximation)
            return approximation

        return future.result()

    def get(self, fingerprint: Fingerprint) -> ConstraintApproximation | None:
        """Completed approximation for ``fingerprint``; None if absent or still building."""
        with self._lock:
            future = self._entries.get(fingerprint)
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def build_count(self) -> int:
        """Number of builds started since construction."""
        with self._lock:
            return self._build_count

    def fingerprints(self) -> list[Fingerprint]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
