"""Python builtins with a direct JavaScript counterpart.

Each entry receives the already-translated positional arguments and returns
the replacement expression.
"""

from __future__ import annotations

from collections.abc import Callable

from sprinkle.javascript.errors import JSCompilationError
from sprinkle.javascript.nodes import (
	JSCall,
	JSExpr,
	JSIdentifier,
	JSMember,
	JSMemberCall,
	JSNumber,
	JSString,
)

Builtin = Callable[..., JSExpr]


def _arity(name: str, args: tuple[JSExpr, ...], *allowed: int) -> None:
	if len(args) not in allowed:
		expected = " or ".join(str(n) for n in allowed)
		raise JSCompilationError(
			f"{name}() expects {expected} argument(s), got {len(args)}"
		)


def emit_print(*args: JSExpr) -> JSExpr:
	return JSMemberCall(JSIdentifier("console"), "log", list(args))


def emit_len(*args: JSExpr) -> JSExpr:
	_arity("len", args, 1)
	return JSMember(args[0], "length")


def emit_str(*args: JSExpr) -> JSExpr:
	_arity("str", args, 0, 1)
	if not args:
		return JSString("")
	return JSCall(JSIdentifier("String"), [args[0]])


def emit_int(*args: JSExpr) -> JSExpr:
	_arity("int", args, 0, 1, 2)
	if not args:
		return JSNumber(0)
	base = args[1] if len(args) == 2 else JSNumber(10)
	return JSCall(JSIdentifier("parseInt"), [args[0], base])


def emit_float(*args: JSExpr) -> JSExpr:
	_arity("float", args, 0, 1)
	if not args:
		return JSNumber(0.0)
	return JSCall(JSIdentifier("parseFloat"), [args[0]])


def emit_abs(*args: JSExpr) -> JSExpr:
	_arity("abs", args, 1)
	return JSMemberCall(JSIdentifier("Math"), "abs", [args[0]])


def emit_round(*args: JSExpr) -> JSExpr:
	# round(x, ndigits) has no single-call JS equivalent
	_arity("round", args, 1)
	return JSMemberCall(JSIdentifier("Math"), "round", [args[0]])


def _variadic_math(name: str) -> Builtin:
	def emit(*args: JSExpr) -> JSExpr:
		if not args:
			raise JSCompilationError(f"{name}() expects at least one argument")
		return JSMemberCall(JSIdentifier("Math"), name, list(args))

	return emit


BUILTINS: dict[str, Builtin] = {
	"print": emit_print,
	"len": emit_len,
	"str": emit_str,
	"int": emit_int,
	"float": emit_float,
	"abs": emit_abs,
	"round": emit_round,
	"min": _variadic_math("min"),
	"max": _variadic_math("max"),
}
