# SPDX-FileCopyrightText: 2024-present Marc Love <copyright@marclove.com>
#
# SPDX-License-Identifier: MIT

import os

import pytest


def pytest_collection_modifyitems(config, items):
    if os.getenv("ADN_SMOKE_TEST_TOKEN"):
        return

    skip_smoke = pytest.mark.skip(reason="ADN_SMOKE_TEST_TOKEN is not set")
    for item in items:
        if "smoke" in item.keywords:
            item.add_marker(skip_smoke)
