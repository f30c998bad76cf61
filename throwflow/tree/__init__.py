# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Typed tree node shapes (see `throwflow.tree.nodes`)."""

from throwflow.tree.nodes import *  # noqa: F401,F403
from throwflow.tree.nodes import __all__  # noqa: F401
