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


import math
import threading

import pytest

from planning_context.spec.types import JointSpec

_seen_threads: set[int | None] = set()
_seen_threads_lock = threading.RLock()


@pytest.fixture(autouse=True)
def monitor_threads(request):
    """Fail a test that leaves a non-main thread running."""
    if request.node.get_closest_marker("allow_threads"):
        yield
        return

    yield

    threads = [t for t in threading.enumerate() if t is not threading.main_thread()]
    if not threads:
        return

    with _seen_threads_lock:
        new_leaks = [t for t in threads if t.ident not in _seen_threads]
        for t in threads:
            _seen_threads.add(t.ident)

    if not new_leaks:
        return

    pytest.fail(
        f"Non-closed threads before or during this test: {[t.name for t in new_leaks]}. "
        "Please look at the first test that fails and fix that."
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "allow_threads: skip the leaked-thread check")


@pytest.fixture
def two_joints():
    """2-joint group with bounds [-pi, pi]^2."""
    return [
        JointSpec("joint1", -math.pi, math.pi),
        JointSpec("joint2", -math.pi, math.pi),
    ]

