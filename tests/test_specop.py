"""Tests for gsprovider.spec and gsprovider.specop."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from gsprovider.context import Context
from gsprovider.spec import Specification, _resource_registry, resource
from gsprovider.specop import STRATEGIES, Absent, Ensure, Present


class FakeProject(BaseModel):
    name: str = "test"


class FakeResource(Specification["FakeProject"]):
    """Records calls; existence and equality are configured per instance."""

    def __init__(self, *, exists: bool, equal: bool) -> None:
        self._exists = exists
        self._equal = equal
        self.applied = False
        self.removed = False

    def __str__(self) -> str:
        return "fake 'thing'"

    def equals(self, ctx: Context[FakeProject]) -> bool:
        return self._equal

    def exists(self, ctx: Context[FakeProject]) -> bool:
        return self._exists

    def apply(self, ctx: Context[FakeProject]) -> None:
        self.applied = True

    def remove(self, ctx: Context[FakeProject]) -> None:
        self.removed = True


class OnlyEquals(Specification["FakeProject"]):
    def equals(self, ctx: Context[FakeProject]) -> bool:
        return True

    def apply(self, ctx: Context[FakeProject]) -> None:
        pass

    def remove(self, ctx: Context[FakeProject]) -> None:
        pass


def _ctx(dry_run: bool = False) -> Context[FakeProject]:
    return Context(target=FakeProject(), dry_run=dry_run)


class TestSpecification:
    def test_exists_defaults_to_equals(self):
        assert OnlyEquals().exists(_ctx()) is True


class TestPresent:
    def test_skips_when_exists(self):
        r = FakeResource(exists=True, equal=False)
        Present(r)(_ctx())
        assert r.applied is False

    def test_creates_when_missing(self):
        r = FakeResource(exists=False, equal=False)
        Present(r)(_ctx())
        assert r.applied is True

    def test_dry_run(self, caplog):
        r = FakeResource(exists=False, equal=False)
        with caplog.at_level(logging.INFO, logger="gsprovider.specop"):
            Present(r)(_ctx(dry_run=True))
        assert r.applied is False
        assert "[DRY RUN] Would create fake 'thing'" in caplog.text


class TestEnsure:
    def test_skips_when_equal(self, caplog):
        r = FakeResource(exists=True, equal=True)
        with caplog.at_level(logging.DEBUG, logger="gsprovider.specop"):
            Ensure(r)(_ctx())
        assert r.applied is False
        assert "up to date" in caplog.text

    def test_applies_when_different(self):
        r = FakeResource(exists=True, equal=False)
        Ensure(r)(_ctx())
        assert r.applied is True

    def test_dry_run(self):
        r = FakeResource(exists=True, equal=False)
        Ensure(r)(_ctx(dry_run=True))
        assert r.applied is False


class TestAbsent:
    def test_removes_when_exists(self):
        r = FakeResource(exists=True, equal=False)
        Absent(r)(_ctx())
        assert r.removed is True

    def test_skips_when_missing(self, caplog):
        r = FakeResource(exists=False, equal=False)
        with caplog.at_level(logging.DEBUG, logger="gsprovider.specop"):
            Absent(r)(_ctx())
        assert r.removed is False
        assert "not present" in caplog.text

    def test_dry_run(self):
        r = FakeResource(exists=True, equal=True)
        Absent(r)(_ctx(dry_run=True))
        assert r.removed is False


class TestRegistry:
    def test_strategies_by_name(self):
        assert STRATEGIES == {"present": Present, "ensure": Ensure, "absent": Absent}

    def test_resource_decorator_registers(self):
        saved = _resource_registry.copy()
        try:

            @resource("gridscale_fake")
            class Fake(OnlyEquals):
                pass

            assert _resource_registry["gridscale_fake"] is Fake
            assert Fake.__name__ == "Fake"
        finally:
            _resource_registry.clear()
            _resource_registry.update(saved)

    def test_builtin_types_registered(self):
        import gsprovider  # noqa: F401

        assert "gridscale_template" in _resource_registry
        assert "gridscale_k8s" in _resource_registry

    def test_op_repr(self):
        assert repr(Ensure(FakeResource(exists=True, equal=True))) == "Ensure(fake 'thing')"
