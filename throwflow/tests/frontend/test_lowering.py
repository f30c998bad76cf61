# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lowering of source into the typed tree: symbols, markers, override links,
call resolution and the front-end errors for untypeable source.
"""

from __future__ import annotations

import pytest

from throwflow.frontend import FrontendError, parse_source
from throwflow.tree.nodes import (
	Call,
	ClassDef,
	ClassLiteral,
	ConstArg,
	ExtractorPattern,
	FuncDef,
	New,
	Raise,
	SymbolKind,
	Try,
	TypePattern,
)


def test_exceptions_register_in_dependency_order():
	program = parse_source("exception Leaf extends Mid\nexception Mid extends IOException\nexception Plain")
	h = program.hierarchy
	assert h.is_subtype(h.get("Leaf"), h.get("IOException"))
	assert h.parent_of(h.get("Plain")) == h.get("Exception")


def test_unknown_exception_parent_is_rejected():
	with pytest.raises(FrontendError) as info:
		parse_source("exception A extends Missing", file="x.src")
	assert info.value.span.file == "x.src"
	assert info.value.span.line == 1


def test_markers_are_lowered_raw():
	program = parse_source(
		"""
		exception IOErr
		@throws[IOErr]("cause") @throws(classOf[Nope]) @other(3, name) def f() { }
		"""
	)
	markers = program.symbols["f"].markers
	io_err = program.hierarchy.get("IOErr")
	assert markers[0].name == "throws"
	assert markers[0].type_args == (io_err,)
	assert markers[0].args == (ConstArg("cause"),)
	assert markers[1].args == (ClassLiteral("Nope"),)
	assert markers[2].args == (ConstArg(3), ConstArg("name"))
	assert markers[0].span.line == 3


def test_class_symbols_and_constructor_markers():
	program = parse_source(
		"""
		exception IOErr
		@unchecked class Res(path: String) @throws[IOErr] {
			def this() { this("x") }
			def close() { }
		}
		"""
	)
	syms = program.symbols
	assert syms["Res"].kind is SymbolKind.CLASS
	assert [m.name for m in syms["Res"].markers] == ["unchecked"]
	assert syms["Res.<init>"].kind is SymbolKind.CONSTRUCTOR
	assert [m.name for m in syms["Res.<init>"].markers] == ["throws"]
	assert syms["Res.<init>#1"].kind is SymbolKind.CONSTRUCTOR
	assert syms["Res.close"].kind is SymbolKind.METHOD

	clazz = program.unit.body[0]
	assert isinstance(clazz, ClassDef)
	aux, close = clazz.body
	assert isinstance(aux, FuncDef) and aux.is_constructor
	assert isinstance(aux.body[0], Call) and aux.body[0].symbol == syms["Res.<init>"]
	assert close.symbol == syms["Res.close"]


def test_overrides_follow_transitive_ancestors_nearest_first():
	program = parse_source(
		"""
		class Root { def run() { } }
		class Mixin { def run() { } }
		class Base extends Root { def run() { } }
		class Impl extends Base with Mixin { def run() { } def own() { } }
		"""
	)
	s = program.symbols
	assert list(program.overrides.overridden(s["Impl.run"])) == [s["Base.run"], s["Mixin.run"], s["Root.run"]]
	assert list(program.overrides.overridden(s["Base.run"])) == [s["Root.run"]]
	assert list(program.overrides.overridden(s["Impl.own"])) == []


def test_unknown_parent_class_is_rejected():
	with pytest.raises(FrontendError):
		parse_source("class A extends Missing { }")


def test_call_resolution():
	program = parse_source(
		"""
		exception IOErr
		def helper() { }
		class Box {
			def get() { helper() put() }
			def put() { }
		}
		def main() {
			let b = new Box()
			b.get()
			Box.put()
			raise IOErr()
		}
		"""
	)
	s = program.symbols
	box, main = program.unit.body[1], program.unit.body[2]
	get_body = box.body[0].body
	assert [c.symbol for c in get_body] == [s["helper"], s["Box.put"]]
	let_stmt, method_call, static_call, raise_stmt = main.body
	assert isinstance(let_stmt.value, New) and let_stmt.value.symbol == s["Box.<init>"]
	assert method_call.symbol == s["Box.get"]
	assert static_call.symbol == s["Box.put"]
	assert isinstance(raise_stmt, Raise)
	assert raise_stmt.raised_type == program.hierarchy.get("IOErr")


def test_aux_constructor_chosen_by_arity():
	program = parse_source(
		"""
		class P(a: Int) { def this() { this(1) } }
		def main() { let x = new P() let y = new P(2) }
		"""
	)
	let_x, let_y = program.unit.body[1].body
	assert let_x.value.symbol.qualname == "P.<init>#1"
	assert let_y.value.symbol.qualname == "P.<init>"


def test_this_call_chosen_by_arity():
	program = parse_source(
		"""
		class C(a: Int, b: Int) {
			def this(a: Int) { this(a, 1) }
			def this() { this(1) }
		}
		"""
	)
	one, none = program.unit.body[0].body
	assert one.body[0].symbol.qualname == "C.<init>"
	assert none.body[0].symbol.qualname == "C.<init>#1"


def test_function_result_type_types_raise():
	program = parse_source(
		"""
		exception IOErr
		def mk(): IOErr { return IOErr() }
		def f() { raise mk() }
		def g() { let e = mk() raise e }
		"""
	)
	io_err = program.hierarchy.get("IOErr")
	f, g = program.unit.body[1], program.unit.body[2]
	assert f.body[0].raised_type == io_err
	assert g.body[1].raised_type == io_err
	assert g.body[1].tpe == io_err


def test_catch_patterns():
	program = parse_source(
		"""
		exception IOErr
		def NonFatal(t: Throwable) { }
		try { } catch (e: IOErr) { raise e } catch (t) { } catch (NonFatal(x)) { } catch (Other(_)) { }
		"""
	)
	h = program.hierarchy
	tried = program.unit.body[1]
	assert isinstance(tried, Try)
	typed, bound, extractor, unresolved = [c.pattern for c in tried.catches]
	assert isinstance(typed, TypePattern) and typed.tpe == h.get("IOErr") and typed.binder == "e"
	assert tried.catches[0].body.stmts[0].raised_type == h.get("IOErr")
	assert isinstance(bound, TypePattern) and bound.tpe == h.get("Throwable")
	assert isinstance(extractor, ExtractorPattern) and extractor.call.symbol == program.symbols["NonFatal"]
	assert isinstance(unresolved, ExtractorPattern) and unresolved.call is None
	assert unresolved.args[0].binder is None


@pytest.mark.parametrize(
	"source,fragment",
	[
		("def f() { nothing() }", "cannot resolve call to 'nothing'"),
		("def f() { raise 3 }", "no static exception type"),
		("def f(x: String) { raise x }", "no static exception type"),
		("def f() { let v = new Missing() }", "unknown class 'Missing'"),
		("class C { } def f() { let c = new C() c.nope() }", "has no method 'nope'"),
		("def f(x: String) { x.length() }", "receiver has no known class"),
		("try { } catch (e: Missing) { }", "unknown exception type 'Missing'"),
		("def f() { } def f() { }", "duplicate definition"),
		("def f() { this() }", "outside of a class"),
	],
)
def test_frontend_errors(source, fragment):
	with pytest.raises(FrontendError) as info:
		parse_source(source, file="bad.src")
	assert fragment in str(info.value)
	assert info.value.span.file == "bad.src"
