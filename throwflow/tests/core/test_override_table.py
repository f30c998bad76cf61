# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from throwflow.core.types_protocol import NO_OVERRIDES, OverrideTable
from throwflow.tree.nodes import Symbol, SymbolKind


def test_override_table_keeps_insertion_order_without_duplicates():
	impl = Symbol("Impl.run", SymbolKind.METHOD)
	base = Symbol("Base.run", SymbolKind.METHOD)
	trait = Symbol("Trait.run", SymbolKind.METHOD)
	table = OverrideTable()
	table.add(impl, base)
	table.add(impl, trait)
	table.add(impl, base)
	assert list(table.overridden(impl)) == [base, trait]
	assert list(table.overridden(base)) == []
	assert len(table) == 1


def test_override_table_from_mapping():
	impl = Symbol("Impl.run", SymbolKind.METHOD)
	base = Symbol("Base.run", SymbolKind.METHOD)
	table = OverrideTable({impl: [base]})
	assert list(table.overridden(impl)) == [base]


def test_no_overrides():
	assert list(NO_OVERRIDES.overridden(Symbol("f"))) == []
