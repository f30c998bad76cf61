# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""The exception-flow engine: scope stack and tree traversal."""

from throwflow.flow.scope import CandidateThrow, PropagationScopeStack
from throwflow.flow.traversal import ThrowFlowTraversal

__all__ = ["CandidateThrow", "PropagationScopeStack", "ThrowFlowTraversal"]
