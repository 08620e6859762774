"""Shared test fixtures for az-sub-inventory tests."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def _mock_credential():
    """Prevent real Azure credential calls in every test."""
    mock_token = MagicMock()
    mock_token.token = "fake-token"
    with patch("az_sub_inventory.azure_api._auth.credential") as cred:
        cred.get_token.return_value = mock_token
        yield cred


@pytest.fixture(autouse=True)
def _reset_request_timeout():
    """Restore the default request timeout after tests that change it."""
    from az_sub_inventory.azure_api import configure

    yield
    configure()


@pytest.fixture(autouse=True)
def _reset_app_logger():
    """Drop handlers the CLI installs so later tests do not log to closed streams."""
    yield
    app_logger = logging.getLogger("az_sub_inventory")
    app_logger.handlers = []
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def mock_api():
    """Replace ``azure_api`` in the services with one mock returning empty data.

    Tests override individual return values / side effects as needed.
    """
    api = MagicMock()
    api.get_subscription_details.return_value = {}
    api.get_billing_hierarchy.return_value = {}
    api.list_classic_administrators.return_value = []
    api.list_billing_role_assignments.return_value = []
    api.list_role_assignments.return_value = []
    with (
        patch("az_sub_inventory.services.report_builder.azure_api", api),
        patch("az_sub_inventory.services.ownership.azure_api", api),
    ):
        yield api

