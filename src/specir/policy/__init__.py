"""Policies -- the pluggable decisions consulted by the processor.

Key names:

* :class:`Policy` -- default policy; subclass it to customise naming,
  filtering, or body extraction.
* :func:`load_policy` -- resolve a policy by ``module:Class`` path or
  ``specir.policies`` entry-point name.

The default behaviour lives in :mod:`~specir.policy.naming`,
:mod:`~specir.policy.ignore` and :mod:`~specir.policy.operation`.
"""

from specir.policy.base import Policy
from specir.policy.manager import load_policy

__all__ = ["Policy", "load_policy"]
