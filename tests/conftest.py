"""Shared test fixtures: in-memory stand-ins for the two store handles."""

from contextlib import asynccontextmanager

import pytest

from core.db import StorageError


class RecordingStore:
    """Records every statement; optionally fails on a given SQL prefix."""

    def __init__(self, name, rows=1, fail_on=None):
        self.name = name
        self.rows = rows
        self.fail_on = fail_on
        self.calls = []
        self.events = []

    def _maybe_fail(self, sql):
        if self.fail_on and sql.strip().startswith(self.fail_on):
            raise StorageError(self.name, "simulated failure")

    async def execute(self, sql, *args):
        self._maybe_fail(sql)
        self.calls.append(("execute", sql, args))

    async def update(self, sql, *args):
        self._maybe_fail(sql)
        self.calls.append(("update", sql, args))
        return self.rows

    @asynccontextmanager
    async def transaction(self):
        self.events.append("begin")
        try:
            yield self
        except BaseException:
            self.events.append("rollback")
            raise
        self.events.append("commit")

    def updates(self):
        return [(sql, args) for (kind, sql, args) in self.calls if kind == "update"]


@pytest.fixture
def recording_store():
    """Factory for store stand-ins: recording_store("card", fail_on="INSERT")."""
    return RecordingStore


@pytest.fixture
def card_store():
    return RecordingStore("card")


@pytest.fixture
def operations_store():
    return RecordingStore("operations")
