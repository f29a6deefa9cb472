# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

import pytest

from genro_statetree import scheduling


@pytest.fixture(autouse=True)
def drain_deferred_callbacks():
    """Keep notifications queued outside an event loop from leaking between tests."""
    scheduling.flush()
    yield
    scheduling.flush()
