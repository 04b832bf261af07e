# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for SSRS SDK tests.

This module provides common test fixtures that can be used across all test modules.
"""

import pytest


@pytest.fixture
def sample_guid():
    """Sample GUID for testing."""
    return "11111111-2222-3333-4444-555555555555"
