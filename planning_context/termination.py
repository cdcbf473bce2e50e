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


"""Cooperative cancellation for planning attempts.

A TerminationCondition is a token handed by value into each attempt; the
strategy polls it. The TerminationCoordinator owns the single slot through
which an external ``terminate()`` reaches the token of the running attempt.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import threading
import time

from planning_context.spec.enums import TerminationReason


class TerminationCondition:
    """Fires on an external stop request, a monotonic deadline, or any extra predicate."""

    def __init__(
        self,
        deadline: float | None = None,
        predicates: Iterable[Callable[[], bool]] = (),
    ) -> None:
        self._deadline = deadline
        self._predicates = tuple(predicates)
        self._stop_event = threading.Event()
        self._reason = TerminationReason.NONE

    @classmethod
    def timed(
        cls, duration: float, predicates: Iterable[Callable[[], bool]] = ()
    ) -> TerminationCondition:
        return cls(deadline=time.monotonic() + max(0.0, duration), predicates=predicates)

    def __call__(self) -> bool:
        return self.should_terminate()

    def should_terminate(self) -> bool:
        if self._stop_event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._latch(TerminationReason.DEADLINE)
            return True
        for predicate in self._predicates:
            if predicate():
                self._latch(TerminationReason.PREDICATE)
                return True
        return False

    def terminate(self) -> None:
        """Request a stop at the next poll."""
        self._latch(TerminationReason.EXTERNAL)

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on an external stop.

        Returns should_terminate() after waking.
        """
        if self._deadline is not None:
            timeout = min(timeout, max(0.0, self._deadline - time.monotonic()))
        self._stop_event.wait(timeout)
        return self.should_terminate()

    @property
    def reason(self) -> TerminationReason:
        return self._reason

    @property
    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def _latch(self, reason: TerminationReason) -> None:
        # first reason wins
        if self._reason is TerminationReason.NONE:
            self._reason = reason
        self._stop_event.set()


class TerminationCoordinator:
    """Mutex-guarded slot holding the termination condition of the running attempt."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ptc: TerminationCondition | None = None

    def register(self, ptc: TerminationCondition) -> None:
        with self._lock:
            self._ptc = ptc

    def unregister(self) -> None:
        with self._lock:
            self._ptc = None

    def terminate(self) -> bool:
        """Signal the registered condition. Returns False (no-op) when nothing is registered."""
        with self._lock:
            if self._ptc is None:
                return False
            self._ptc.terminate()
            return True

    @property
    def active(self) -> bool:
        with self._lock:
            return self._ptc is not None
