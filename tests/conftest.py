"""Shared test fixtures for dependents-engine."""

import logging

import pytest

from dependents_engine.models import ProjectRecord


def record(name, deps=None, owner="alice", version="1.0.0", url=None):
    latest = {"version": version}
    if deps is not None:
        latest["dependencies"] = {d: "*" for d in deps}
    return ProjectRecord.from_dict({
        "name": name,
        "url": url if url is not None else f"git://github.com/{owner}/{name}.git",
        "latest": latest,
    })


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def chain():
    """a <- b <- c, with c owned by bob."""
    return [
        record("a", deps=[]),
        record("b", deps=["a"]),
        record("c", deps=["b"], owner="bob"),
    ]


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("dependents")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
