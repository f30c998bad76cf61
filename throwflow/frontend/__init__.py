# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Textual host language: lark grammar, lowering to the typed tree, entry points."""

from throwflow.frontend.lower import FrontendError
from throwflow.frontend.program import HostProgram, check_source, parse_source, verify_source

__all__ = ["FrontendError", "HostProgram", "check_source", "parse_source", "verify_source"]
