"""Locate and instantiate the policy for a run.

A policy is named either by a ``module:Class`` import path or by the name of
an entry point in the ``specir.policies`` group. Third-party packages
register policies in their ``pyproject.toml``::

    [project.entry-points."specir.policies"]
    my-policy = "my_package.policy:MyPolicy"
"""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
from typing import Any, Optional

from specir.exceptions import PolicyError
from specir.policy.base import Policy

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "specir.policies"
"""The entry-point group name used for policy discovery."""


def load_policy(name: Optional[str] = None) -> Policy:
    """Return an instance of the policy called *name*.

    Args:
        name: ``module:Class`` path, entry-point name, or ``None`` for the
            default :class:`~specir.policy.base.Policy`.

    Returns:
        A fresh policy instance.

    Raises:
        PolicyError: If the policy cannot be found, imported, or
            instantiated, or is not a :class:`~specir.policy.base.Policy`.
    """
    if not name:
        return Policy()

    if ":" in name:
        policy_cls = _import_path(name)
    else:
        policy_cls = _load_entry_point(name)

    if not (isinstance(policy_cls, type) and issubclass(policy_cls, Policy)):
        raise PolicyError(f"Policy '{name}' is not a subclass of specir.policy.Policy")

    try:
        policy = policy_cls()
    except Exception as exc:
        raise PolicyError(f"Failed to instantiate policy '{name}': {exc}") from exc

    logger.info("Using policy '%s' (%s)", policy.name, name)
    return policy


def available_policies() -> list[str]:
    """Return the names of all policies registered as entry points, sorted."""
    return sorted(ep.name for ep in _entry_points())


def _import_path(path: str) -> Any:
    module_name, _, attr = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise PolicyError(f"Cannot import policy module '{module_name}': {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError:
        raise PolicyError(f"Module '{module_name}' has no attribute '{attr}'") from None


def _load_entry_point(name: str) -> Any:
    for ep in _entry_points():
        if ep.name == name:
            try:
                return ep.load()
            except Exception as exc:
                raise PolicyError(f"Failed to load policy '{name}': {exc}") from exc
    raise PolicyError(
        f"No policy named '{name}' in entry-point group '{ENTRY_POINT_GROUP}'"
    )


def _entry_points() -> list[importlib.metadata.EntryPoint]:
    entry_points = importlib.metadata.entry_points()
    # Python 3.10+ returns EntryPoints; older versions return a dict.
    if hasattr(entry_points, "select"):
        return list(entry_points.select(group=ENTRY_POINT_GROUP))
    return list(entry_points.get(ENTRY_POINT_GROUP, []))  # type: ignore[union-attr]
