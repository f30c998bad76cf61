# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Grammar-level checks: the lark parser accepts the host language and rejects junk."""

from __future__ import annotations

import pytest
from lark.exceptions import UnexpectedInput

from throwflow.frontend.parser import node_name, parse_tree, span_of, subtrees


def test_parses_all_item_kinds():
	tree = parse_tree(
		"""
		// comment
		exception IOErr extends Exception
		@throws[IOErr]("why") def read(path: String): String { return path }
		class Res(path: String) @throws(classOf[IOErr]) extends Base with Other {
			let data: String = read(path)
			def this() { this("default") }
			def size() { return 1 }
		}
		try { read("x") } catch (e: IOErr if e == e) { } catch (NonFatal(e)) { } catch (e) { } finally { }
		"""
	)
	kinds = [node_name(c) for c in tree.children]
	assert kinds == ["exception_decl", "func_def", "class_def", "try_stmt"]


def test_expressions_and_control_flow():
	tree = parse_tree(
		"""
		def f(flag: Boolean) {
			let r = new Impl()
			r.run(1, "two", true, false)
			if (flag && r.ok()) { x = 1 + 2 } else if (false) { } else { }
			while (flag) { raise IOErr() }
		}
		"""
	)
	func = tree.children[0]
	assert node_name(func) == "func_def"
	block = subtrees(func, "block")[0]
	assert [node_name(s) for s in block.children] == ["let_stmt", "expr_stmt", "if_stmt", "while_stmt"]


def test_span_of_tree_and_token():
	tree = parse_tree("exception IOErr\n  def f() { }")
	func = tree.children[1]
	span = span_of(func, "a.src")
	assert (span.file, span.line, span.column) == ("a.src", 2, 3)
	assert span_of(None, "a.src").line is None


@pytest.mark.parametrize(
	"source",
	[
		"def f( { }",
		"class { }",
		"try { } catch e { }",
		"raise",
		"@throws[ def f() { }",
	],
)
def test_syntax_errors_raise_unexpected_input(source):
	with pytest.raises(UnexpectedInput):
		parse_tree(source)
