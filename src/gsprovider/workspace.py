"""Workspace - a typed collection of projects parsed from HCL files."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any, overload

from . import hcl
from .blueprints import Blueprint
from .projects import Project
from .spec import _resource_registry
from .specop import STRATEGIES, SpecOp

logger = logging.getLogger(__name__)


def _decode_resource(type_name: str, attrs: dict[str, Any]) -> Any:
    """Decode a resource block into a Specification instance using the registry."""
    if type_name not in _resource_registry:
        raise ValueError(f"Unknown resource type: '{type_name}'")
    resource_cls = _resource_registry[type_name]
    logger.debug("Decoding resource '%s' -> %s", type_name, resource_cls.__name__)
    return resource_cls(**hcl.interpolate(attrs))


def _parse_ops(block_data: dict[str, Any]) -> list[SpecOp]:
    """Parse strategy blocks (present/ensure/absent) in declaration order per strategy.

    HCL2 structure for strategy blocks:
        {"ensure": [{"gridscale_template": {"name": "base"}}, ...], ...}
    """
    ops: list[SpecOp] = []
    for strategy_name, strategy_cls in STRATEGIES.items():
        for block in block_data.get(strategy_name, []):
            for type_name, attrs in block.items():
                ops.append(strategy_cls(_decode_resource(type_name, dict(attrs))))
    return ops


def _resolve_blueprint(
    name: str,
    pending: dict[str, dict[str, Any]],
    resolved: dict[str, Blueprint],
    resolving: set[str],
) -> Blueprint:
    """Recursively resolve a single blueprint, handling includes."""
    if name in resolved:
        return resolved[name]
    if name in resolving:
        raise ValueError(f"Circular include detected: '{name}'")
    if name not in pending:
        raise ValueError(f"Unknown blueprint: '{name}'")
    resolving.add(name)

    data = pending[name]
    ops: list[SpecOp] = []
    for include_name in data.get("include", []):
        logger.debug("Blueprint '%s' includes '%s'", name, include_name)
        ops.extend(_resolve_blueprint(include_name, pending, resolved, resolving).ops)
    ops.extend(_parse_ops(data))

    bp = Blueprint(name=name, ops=ops)
    resolved[name] = bp
    resolving.discard(name)
    return bp


def _build_project[P: Project](
    name: str,
    data: dict[str, Any],
    blueprints: dict[str, Blueprint],
    project_type: type[P],
) -> P:
    """Build a single Project instance from parsed data."""
    proj_blueprints: list[Blueprint] = []
    for bp_name in data.get("use", []):
        if bp_name not in blueprints:
            raise ValueError(f"Project '{name}' references unknown blueprint: '{bp_name}'")
        proj_blueprints.append(blueprints[bp_name])

    inline_ops = _parse_ops(data)
    if inline_ops:
        proj_blueprints.append(Blueprint(name=f"{name}:inline", ops=inline_ops))

    # everything that is not structural becomes a project field
    skip_keys = {"use", "include"} | set(STRATEGIES)
    proj_kwargs: dict[str, Any] = {
        k: hcl.interpolate(v) for k, v in data.items() if k not in skip_keys
    }
    proj_kwargs.update(name=name, blueprints=proj_blueprints)
    return project_type(**proj_kwargs)


class Workspace[P: Project](Mapping[str, P]):
    """Accumulates parsed HCL data and resolves projects on access."""

    def __init__(
        self,
        project_type: type[P] = Project,  # type: ignore[assignment]
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._project_type = project_type
        self._context = context
        self._pending_blueprints: dict[str, dict[str, Any]] = {}
        self._pending_projects: dict[str, dict[str, Any]] = {}

    def load(self, file: str | Path) -> None:
        """Parse one HCL file into the workspace."""
        self.add(hcl.load(Path(file), context=self._context))

    def scan(self, path: str | Path, *, recurse: bool = True) -> None:
        """Load every .hcl file under ``path`` in sorted order."""
        root = Path(path)
        if not root.is_dir():
            logger.debug("Nothing to scan at %s", root)
            return
        pattern = "**/*.hcl" if recurse else "*.hcl"
        for file in sorted(root.glob(pattern)):
            self.load(file)

    def add(self, data: dict[str, Any]) -> None:
        """Extract blueprint and project blocks from a parsed data dict.

        Raises ValueError if any blueprint or project name is already loaded.
        """
        for block in data.get("blueprint", []):
            for bp_name, bp_data in block.items():
                if bp_name in self._pending_blueprints:
                    raise ValueError(f"Duplicate blueprint: '{bp_name}'")
                logger.debug("Found blueprint '%s'", bp_name)
                self._pending_blueprints[bp_name] = bp_data

        for block in data.get("project", []):
            for proj_name, proj_data in block.items():
                if proj_name in self._pending_projects:
                    raise ValueError(f"Duplicate project: '{proj_name}'")
                logger.debug("Found project '%s'", proj_name)
                self._pending_projects[proj_name] = proj_data

    def _resolve(self) -> dict[str, P]:
        resolved_bps: dict[str, Blueprint] = {}
        for name in self._pending_blueprints:
            _resolve_blueprint(name, self._pending_blueprints, resolved_bps, set())

        return {
            name: _build_project(name, data, resolved_bps, self._project_type)
            for name, data in self._pending_projects.items()
        }

    def __getitem__(self, name: str) -> P:
        return self._resolve()[name]

    def __contains__(self, name: object) -> bool:
        return name in self._pending_projects

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending_projects)

    def __len__(self) -> int:
        return len(self._pending_projects)

    @overload
    def get(self, name: str) -> P | None: ...
    @overload
    def get(self, name: str, default: P) -> P: ...
    def get(self, name: str, default: Any = None) -> P | None:
        return self._resolve().get(name, default)

    def filter(self, names: Iterable[str]) -> list[P]:
        """Return projects matching the given names, preserving input order."""
        resolved = self._resolve()
        return [p for n in names if (p := resolved.get(n)) is not None]

    def __repr__(self) -> str:
        return (
            f"Workspace(project_type={self._project_type.__name__}, "
            f"blueprints={len(self._pending_blueprints)}, "
            f"projects={len(self._pending_projects)})"
        )
