# Copyright 2026 Firefly Software Solutions Inc.
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
"""Shared fixtures: every test gets its own interceptor, resolver and diagnostics sink."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from hookfly.diagnostics import CapturingSink, install_sink
from hookfly.interceptor import MethodInterceptor, set_interceptor
from hookfly.resolver import TypeResolver, set_resolver


@pytest.fixture(autouse=True)
def interceptor() -> Iterator[MethodInterceptor]:
    fresh = MethodInterceptor()
    previous = set_interceptor(fresh)
    yield fresh
    fresh.uninstall_all()
    set_interceptor(previous)


@pytest.fixture(autouse=True)
def resolver() -> Iterator[TypeResolver]:
    fresh = TypeResolver()
    previous = set_resolver(fresh)
    yield fresh
    set_resolver(previous)


@pytest.fixture(autouse=True)
def diagnostics() -> Iterator[CapturingSink]:
    sink = CapturingSink()
    previous = install_sink(sink)
    yield sink
    install_sink(previous)
