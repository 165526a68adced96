"""
Data-driven scoping rules: who may see and change which records.

The rule table lives in YAML (see `config/scoping_policy.yaml`); this package
loads it and evaluates it. It has no dependency on the web or storage layers.
"""

from .evaluator import Decision, Effect, Ownership, ScopeFilter, ScopingPolicy
from .rules import Operation, PolicyConfigError, ResourceType, load_policy_config

__all__ = [
    "Decision",
    "Effect",
    "Operation",
    "Ownership",
    "PolicyConfigError",
    "ResourceType",
    "ScopeFilter",
    "ScopingPolicy",
    "load_policy_config",
]
