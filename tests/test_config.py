"""Tests for settings-driven policy and logging setup."""

import logging
from datetime import timedelta

import pytest

from unisphere.core.config import Settings
from unisphere.core.logging import HANDLER_NAME, configure_logging
from unisphere.services.activity_service import ActivityPolicy, DEFAULT_POLICY


def test_default_policy_matches_default_settings():
    assert ActivityPolicy.from_settings(Settings()) == DEFAULT_POLICY


def test_policy_from_environment(monkeypatch):
    monkeypatch.setenv("HIGHLY_ACTIVE_WINDOW_DAYS", "14")
    monkeypatch.setenv("NEEDS_ATTENTION_LIMIT", "20")
    monkeypatch.setenv("TOP_JOBS_LIMIT", "3")

    policy = ActivityPolicy.from_settings(Settings())

    assert policy.highly_active_window == timedelta(days=14)
    assert policy.low_activity_window == timedelta(days=60)
    assert policy.needs_attention_limit == 20
    assert policy.top_jobs_limit == 3
    assert policy.top_companies_limit == 5


def _app_handlers(logger):
    return [h for h in logger.handlers if h.get_name() == HANDLER_NAME]


@pytest.fixture
def unisphere_logger():
    logger = logging.getLogger("unisphere")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers, logger.level, logger.propagate = saved


def test_configure_logging_is_idempotent(unisphere_logger):
    logger = configure_logging(Settings(debug=True))
    configure_logging(Settings(debug=True))

    assert logger is unisphere_logger
    assert logger.level == logging.DEBUG
    assert len(_app_handlers(logger)) == 1


def test_configure_logging_with_foreign_handler_attached(unisphere_logger):
    unisphere_logger.handlers = [logging.NullHandler()]

    configure_logging(Settings(log_level="warning"))

    assert unisphere_logger.level == logging.WARNING
    assert len(_app_handlers(unisphere_logger)) == 1
    assert len(unisphere_logger.handlers) == 2
