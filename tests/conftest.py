"""Shared fixtures for the sleep dashboard tests."""

import pytest

from core.data import build_dataset, load_dashboard_data, prepare_context
from core.filters import DashboardFilters


@pytest.fixture(scope="session")
def dataset():
    return build_dataset()


@pytest.fixture
def data_ctx(dataset):
    return load_dashboard_data(dataset)


@pytest.fixture
def ctx(data_ctx):
    return prepare_context(DashboardFilters(), data_ctx)


@pytest.fixture
def sleep_df(data_ctx):
    return data_ctx["sleep"]
