from __future__ import annotations

import ast
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import override

from sprinkle.javascript.errors import JSCompilationError

ALLOWED_BINOPS: dict[type[ast.operator], str] = {
	ast.Add: "+",
	ast.Sub: "-",
	ast.Mult: "*",
	ast.Div: "/",
	ast.Mod: "%",
	ast.Pow: "**",
}

ALLOWED_UNOPS: dict[type[ast.unaryop], str] = {
	ast.UAdd: "+",
	ast.USub: "-",
	ast.Not: "!",
}

ALLOWED_CMPOPS: dict[type[ast.cmpop], str] = {
	ast.Eq: "===",
	ast.NotEq: "!==",
	ast.Lt: "<",
	ast.LtE: "<=",
	ast.Gt: ">",
	ast.GtE: ">=",
}

# Sequences that would end or re-enter the script data state of an inline
# <script> element. Matched case-insensitively.
_SCRIPT_BREAKOUT = re.compile(r"<(?=/|!--|script)", re.IGNORECASE)


def escape_script_text(text: str) -> str:
	"""Escape `<` where it starts `</`, `<!--` or `<script` inside a literal.

	`\\x3C` is the same character once the literal is evaluated, so the value
	seen by the browser is unchanged.
	"""
	return _SCRIPT_BREAKOUT.sub(r"\\x3C", text)


###############################################################################
# JS AST
###############################################################################


class JSNode(ABC):
	@abstractmethod
	def emit(self) -> str:
		raise NotImplementedError


class JSExpr(JSNode, ABC):
	"""Base class for JavaScript expressions.

	`is_primary` marks expressions that never need parentheses (identifiers,
	literals, containers). It drives the precedence helpers below.
	"""

	is_primary: bool = False


class JSStmt(JSNode, ABC):
	pass


@dataclass
class JSIdentifier(JSExpr):
	name: str
	is_primary: bool = True

	@override
	def emit(self) -> str:
		return self.name


@dataclass
class JSString(JSExpr):
	value: str
	is_primary: bool = True

	@override
	def emit(self) -> str:
		s = self.value
		# Escape for single-quoted JS string literals
		s = (
			s.replace("\\", "\\\\")
			.replace("'", "\\'")
			.replace("\n", "\\n")
			.replace("\r", "\\r")
			.replace("\t", "\\t")
			.replace("\b", "\\b")
			.replace("\f", "\\f")
			.replace("\v", "\\v")
			.replace("\x00", "\\x00")
			.replace("\u2028", "\\u2028")
			.replace("\u2029", "\\u2029")
		)
		return f"'{escape_script_text(s)}'"


@dataclass
class JSNumber(JSExpr):
	value: int | float
	is_primary: bool = True

	@override
	def emit(self) -> str:
		if isinstance(self.value, float) and not math.isfinite(self.value):
			raise JSCompilationError(f"Non-finite number literal: {self.value}")
		return repr(self.value)


@dataclass
class JSBoolean(JSExpr):
	value: bool
	is_primary: bool = True

	@override
	def emit(self) -> str:
		return "true" if self.value else "false"


@dataclass
class JSNull(JSExpr):
	is_primary: bool = True

	@override
	def emit(self) -> str:
		return "null"


@dataclass
class JSArray(JSExpr):
	elements: Sequence[JSExpr]
	is_primary: bool = True

	@override
	def emit(self) -> str:
		inner = ", ".join(e.emit() for e in self.elements)
		return f"[{inner}]"


@dataclass
class JSSpread(JSExpr):
	expr: JSExpr

	@override
	def emit(self) -> str:
		return f"...{_emit_child_for_primary(self.expr)}"


@dataclass
class JSProp(JSExpr):
	key: JSString
	value: JSExpr

	@override
	def emit(self) -> str:
		return f"{self.key.emit()}: {self.value.emit()}"


@dataclass
class JSComputedProp(JSExpr):
	key: JSExpr
	value: JSExpr

	@override
	def emit(self) -> str:
		return f"[{self.key.emit()}]: {self.value.emit()}"


@dataclass
class JSObjectExpr(JSExpr):
	props: Sequence[JSProp | JSComputedProp | JSSpread]
	is_primary: bool = True

	@override
	def emit(self) -> str:
		inner = ", ".join(p.emit() for p in self.props)
		return "{" + inner + "}"


@dataclass
class JSUnary(JSExpr):
	op: str  # '-', '+', '!', 'typeof'
	operand: JSExpr

	@override
	def emit(self) -> str:
		operand_code = _emit_child_for_binary_like(
			self.operand, parent_op=_unary_tag(self.op), side="unary"
		)
		if self.op == "typeof":
			return f"typeof {operand_code}"
		# `- -x` would read as the `--` decrement operator
		if self.op in {"-", "+"} and operand_code.startswith(("-", "+")):
			operand_code = f"({operand_code})"
		return f"{self.op}{operand_code}"


@dataclass
class JSBinary(JSExpr):
	left: JSExpr
	op: str
	right: JSExpr

	@override
	def emit(self) -> str:
		# Left operand of ** cannot be a unary +/- without parentheses
		force_left_paren = (
			self.op == "**"
			and isinstance(self.left, JSUnary)
			and self.left.op in {"-", "+"}
		)
		left_code = _emit_child_for_binary_like(
			self.left,
			parent_op=self.op,
			side="left",
			force_paren=force_left_paren,
		)
		right_code = _emit_child_for_binary_like(
			self.right, parent_op=self.op, side="right"
		)
		return f"{left_code} {self.op} {right_code}"


@dataclass
class JSLogicalChain(JSExpr):
	op: str  # '&&' or '||'
	values: Sequence[JSExpr]

	@override
	def emit(self) -> str:
		if len(self.values) == 1:
			return self.values[0].emit()
		parts = [
			_emit_child_for_binary_like(v, parent_op=self.op, side="chain")
			for v in self.values
		]
		return f" {self.op} ".join(parts)


@dataclass
class JSTertiary(JSExpr):
	test: JSExpr
	if_true: JSExpr
	if_false: JSExpr

	@override
	def emit(self) -> str:
		test = _emit_child_for_binary_like(self.test, parent_op="?:", side="left")
		return f"{test} ? {self.if_true.emit()} : {self.if_false.emit()}"


@dataclass
class JSFunctionDef(JSExpr):
	params: Sequence[str]
	body: Sequence[JSStmt]
	name: str | None = None

	@override
	def emit(self) -> str:
		params = ", ".join(self.params)
		body_code = "\n".join(s.emit() for s in self.body)
		head = f"function {self.name}" if self.name else "function"
		if not body_code:
			return f"{head}({params}){{}}"
		return f"{head}({params}){{\n{body_code}\n}}"


@dataclass
class JSArrowFunction(JSExpr):
	params: Sequence[str]
	body: JSExpr | JSBlock

	@override
	def emit(self) -> str:
		if len(self.params) == 1:
			params_code = self.params[0]
		else:
			params_code = f"({', '.join(self.params)})"
		# An object literal body would parse as a block
		if isinstance(self.body, JSObjectExpr):
			return f"{params_code} => ({self.body.emit()})"
		return f"{params_code} => {self.body.emit()}"


@dataclass
class JSTemplate(JSExpr):
	# parts are either raw strings (literal text) or JSExpr instances which are
	# emitted inside ${...}
	parts: Sequence[str | JSExpr]
	is_primary: bool = True

	@override
	def emit(self) -> str:
		out: list[str] = ["`"]
		for p in self.parts:
			if isinstance(p, str):
				text = (
					p.replace("\\", "\\\\")
					.replace("`", "\\`")
					.replace("${", "\\${")
					.replace("\r", "\\r")
					.replace("\x00", "\\x00")
					.replace("\u2028", "\\u2028")
					.replace("\u2029", "\\u2029")
				)
				out.append(escape_script_text(text))
			else:
				out.append("${" + p.emit() + "}")
		out.append("`")
		return "".join(out)


@dataclass
class JSMember(JSExpr):
	obj: JSExpr
	prop: str

	@override
	def emit(self) -> str:
		obj_code = _emit_child_for_primary(self.obj)
		return f"{obj_code}.{self.prop}"


@dataclass
class JSSubscript(JSExpr):
	obj: JSExpr
	index: JSExpr

	@override
	def emit(self) -> str:
		obj_code = _emit_child_for_primary(self.obj)
		return f"{obj_code}[{self.index.emit()}]"


@dataclass
class JSCall(JSExpr):
	callee: JSExpr
	args: Sequence[JSExpr]

	@override
	def emit(self) -> str:
		fn = _emit_child_for_primary(self.callee)
		return f"{fn}({', '.join(a.emit() for a in self.args)})"


@dataclass
class JSMemberCall(JSExpr):
	obj: JSExpr
	method: str
	args: Sequence[JSExpr]

	@override
	def emit(self) -> str:
		obj_code = _emit_child_for_primary(self.obj)
		return f"{obj_code}.{self.method}({', '.join(a.emit() for a in self.args)})"


###############################################################################
# Statements
###############################################################################


@dataclass
class JSReturn(JSStmt):
	value: JSExpr | None = None

	@override
	def emit(self) -> str:
		if self.value is None:
			return "return;"
		return f"return {self.value.emit()};"


@dataclass
class JSAssign(JSStmt):
	name: str
	value: JSExpr
	declare: bool = False  # when True emit 'let name = ...'

	@override
	def emit(self) -> str:
		if self.declare:
			return f"let {self.name} = {self.value.emit()};"
		return f"{self.name} = {self.value.emit()};"


@dataclass
class JSTargetAssign(JSStmt):
	"""Assignment to a member or subscript: `obj.prop = v`, `obj[k] += v`."""

	target: JSMember | JSSubscript
	value: JSExpr
	op: str = ""

	@override
	def emit(self) -> str:
		return f"{self.target.emit()} {self.op}= {self.value.emit()};"


@dataclass
class JSAugAssign(JSStmt):
	name: str
	op: str
	value: JSExpr

	@override
	def emit(self) -> str:
		return f"{self.name} {self.op}= {self.value.emit()};"


@dataclass
class JSConstAssign(JSStmt):
	name: str
	value: JSExpr

	@override
	def emit(self) -> str:
		return f"const {self.name} = {self.value.emit()};"


@dataclass
class JSLetDeclare(JSStmt):
	names: Sequence[str]

	@override
	def emit(self) -> str:
		return f"let {', '.join(self.names)};"


@dataclass
class JSSingleStmt(JSStmt):
	expr: JSExpr

	@override
	def emit(self) -> str:
		code = self.expr.emit()
		# A leading `function` or `{` would start a declaration or a block
		if isinstance(self.expr, (JSFunctionDef, JSObjectExpr)):
			code = f"({code})"
		return f"{code};"


@dataclass
class JSMultiStmt(JSStmt):
	stmts: Sequence[JSStmt]

	@override
	def emit(self) -> str:
		return "\n".join(s.emit() for s in self.stmts)


@dataclass
class JSFunctionDecl(JSStmt):
	fn: JSFunctionDef

	@override
	def emit(self) -> str:
		return self.fn.emit()


@dataclass
class JSBlock(JSStmt):
	body: Sequence[JSStmt]

	@override
	def emit(self) -> str:
		body_code = "\n".join(s.emit() for s in self.body)
		return f"{{\n{body_code}\n}}"


@dataclass
class JSIf(JSStmt):
	test: JSExpr
	body: Sequence[JSStmt]
	orelse: Sequence[JSStmt]

	@override
	def emit(self) -> str:
		body_code = "\n".join(s.emit() for s in self.body)
		if not self.orelse:
			return f"if ({self.test.emit()}){{\n{body_code}\n}}"
		# Collapse `else { if ... }` into `else if ...`
		if len(self.orelse) == 1 and isinstance(self.orelse[0], JSIf):
			return f"if ({self.test.emit()}){{\n{body_code}\n}} else {self.orelse[0].emit()}"
		else_code = "\n".join(s.emit() for s in self.orelse)
		return f"if ({self.test.emit()}){{\n{body_code}\n}} else {{\n{else_code}\n}}"


@dataclass
class JSForOf(JSStmt):
	target: str | list[str]
	iter_expr: JSExpr
	body: Sequence[JSStmt]

	@override
	def emit(self) -> str:
		body_code = "\n".join(s.emit() for s in self.body)
		target = self.target
		if not isinstance(target, str):
			target = f"[{', '.join(target)}]"
		return f"for (const {target} of {self.iter_expr.emit()}){{\n{body_code}\n}}"


@dataclass
class JSWhile(JSStmt):
	test: JSExpr
	body: Sequence[JSStmt]

	@override
	def emit(self) -> str:
		body_code = "\n".join(s.emit() for s in self.body)
		return f"while ({self.test.emit()}){{\n{body_code}\n}}"


class JSBreak(JSStmt):
	@override
	def emit(self) -> str:
		return "break;"


class JSContinue(JSStmt):
	@override
	def emit(self) -> str:
		return "continue;"


# -----------------------------
# Precedence helpers
# -----------------------------

PRIMARY_PRECEDENCE = 20


def op_precedence(op: str) -> int:
	# Higher number = binds tighter
	if op in {".", "[]", "()"}:  # pseudo ops for primary contexts
		return PRIMARY_PRECEDENCE
	if op in {"!", "+u", "-u", "typeof"}:
		return 17
	if op == "**":
		return 16
	if op in {"*", "/", "%"}:
		return 15
	if op in {"+", "-"}:
		return 14
	if op in {"<", "<=", ">", ">=", "instanceof", "in"}:
		return 12
	if op in {"==", "!=", "===", "!=="}:
		return 11
	if op == "&&":
		return 7
	if op in {"||", "??"}:
		return 6
	if op == "?:":
		return 4
	if op == ",":
		return 1
	return 0


def _unary_tag(op: str) -> str:
	# Distinguish unary + and - from their binary counterparts
	return {"+": "+u", "-": "-u"}.get(op, op)


def op_is_right_associative(op: str) -> bool:
	return op == "**"


def expr_precedence(e: JSExpr) -> int:
	if isinstance(e, JSBinary):
		return op_precedence(e.op)
	if isinstance(e, JSUnary):
		return op_precedence(_unary_tag(e.op))
	if isinstance(e, JSTertiary):
		return op_precedence("?:")
	if isinstance(e, JSLogicalChain):
		if len(e.values) == 1:
			return expr_precedence(e.values[0])
		return op_precedence(e.op)
	if isinstance(e, (JSMember, JSSubscript, JSCall, JSMemberCall)):
		return op_precedence(".")
	if e.is_primary:
		return PRIMARY_PRECEDENCE
	return 0


def _emit_child_for_binary_like(
	child: JSExpr, parent_op: str, side: str, force_paren: bool = False
) -> str:
	# side is one of: 'left', 'right', 'unary', 'chain'
	code = child.emit()
	if force_paren:
		return f"({code})"
	if isinstance(child, JSTertiary):
		return f"({code})"
	# ?? cannot be mixed with && / || without parentheses
	if parent_op in {"&&", "||"} and isinstance(child, JSBinary) and child.op == "??":
		return f"({code})"
	child_prec = expr_precedence(child)
	parent_prec = op_precedence(parent_op)
	if child_prec < parent_prec:
		return f"({code})"
	if child_prec == parent_prec and isinstance(child, JSBinary):
		if op_is_right_associative(parent_op):
			if side == "left":
				return f"({code})"
		elif side == "right":
			return f"({code})"
	return code


def _emit_child_for_primary(expr: JSExpr) -> str:
	code = expr.emit()
	if expr_precedence(expr) < PRIMARY_PRECEDENCE:
		return f"({code})"
	return code


def to_js_expr(value: object) -> JSExpr:
	"""Convert a JSON-like Python value to a JS literal expression.

	- JSExpr: returned as-is
	- str / bool / int / float / None: literals
	- list / tuple: JSArray
	- dict with string keys: JSObjectExpr
	"""
	if isinstance(value, JSExpr):
		return value
	if isinstance(value, str):
		return JSString(value)
	if isinstance(value, bool):  # Must check before int since bool is subclass of int
		return JSBoolean(value)
	if isinstance(value, (int, float)):
		return JSNumber(value)
	if value is None:
		return JSNull()
	if isinstance(value, (list, tuple)):
		return JSArray([to_js_expr(v) for v in value])  # pyright: ignore[reportUnknownArgumentType]
	if isinstance(value, dict):
		props: list[JSProp | JSComputedProp | JSSpread] = []
		for k, v in value.items():  # pyright: ignore[reportUnknownVariableType]
			if not isinstance(k, str):
				raise JSCompilationError(
					f"Only string keys are supported in constant dicts, got {type(k).__name__}"  # pyright: ignore[reportUnknownArgumentType]
				)
			props.append(JSProp(JSString(k), to_js_expr(v)))
		return JSObjectExpr(props)
	raise JSCompilationError(f"Cannot convert {type(value).__name__} to JavaScript")
