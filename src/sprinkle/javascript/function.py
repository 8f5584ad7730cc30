from __future__ import annotations

import ast
import inspect
import re
import textwrap
import types as pytypes
from collections.abc import Callable, Iterator
from typing import (
	Any,
	Generic,
	Protocol,
	TypeAlias,
	TypeVar,
	TypeVarTuple,
	runtime_checkable,
)

from sprinkle.javascript.errors import JSCompilationError
from sprinkle.javascript.nodes import JSExpr, JSIdentifier, to_js_expr
from sprinkle.javascript.transpiler import (
	FunctionNode,
	JsTranspiler,
	check_plain_signature,
)

Args = TypeVarTuple("Args")
R = TypeVar("R")

AnyJsFunction: TypeAlias = "JsFunction[*tuple[Any, ...], Any]"

# Module-level functions only. Closures capture values that can differ between
# two calls of the enclosing function, so they are compiled per object.
FUNCTION_CACHE: dict[Callable[..., object], AnyJsFunction] = {}

# Parsed definitions keyed by code object, shared by every closure built from
# the same `def` or `lambda`.
_AST_CACHE: dict[pytypes.CodeType, FunctionNode] = {}

_MISSING = object()


@runtime_checkable
class JsCallable(Protocol):
	"""Anything that can be placed on a page as a JavaScript function.

	`name` is the declared function name (None when anonymous), `n_args` the
	number of declared parameters (None when it cannot be determined) and
	`emit()` returns the function definition as source text.
	"""

	@property
	def name(self) -> str | None: ...

	@property
	def n_args(self) -> int | None: ...

	def emit(self) -> str: ...


class JsFunction(Generic[*Args, R]):
	"""A Python function translated to a JavaScript function definition.

	Free names are resolved when the function is first emitted, and their
	values are copied into the output: the browser never sees the Python
	closure.
	"""

	fn: Callable[[*Args], R]
	deps: dict[str, JSExpr]
	_code: str | None

	def __init__(self, fn: Callable[[*Args], R]) -> None:
		if not inspect.isfunction(fn):
			raise JSCompilationError(
				f"Only plain functions can be transpiled, got {type(fn).__name__}"
			)
		self.fn = fn
		self.deps = {}
		self._code = None

	@property
	def name(self) -> str | None:
		if self.fn.__name__ == "<lambda>":
			return None
		return self.fn.__name__

	@property
	def n_args(self) -> int:
		return self.fn.__code__.co_argcount

	def emit(self) -> str:
		if self._code is None:
			node = _parse_function(self.fn)
			args = [arg.arg for arg in node.args.args]
			transpiler = JsTranspiler(node, args=args, resolve=self._resolve)
			self._code = transpiler.transpile(name=self.name).emit()
		return self._code

	def _resolve(self, name: str) -> JSExpr | None:
		value = _lookup(self.fn, name)
		if value is _MISSING:
			return None
		expr = self._value_to_js(name, value)
		self.deps[name] = expr
		return expr

	def _value_to_js(self, name: str, value: object) -> JSExpr:
		if isinstance(value, JSExpr):
			return value
		if value is self.fn or value is self:
			# Recursion through the function's own global name
			if self.name is None:
				raise JSCompilationError("Anonymous functions cannot refer to themselves")
			return JSIdentifier(self.name)
		if isinstance(value, JsFunction):
			if value.name is None:
				raise JSCompilationError(
					f"'{name}' refers to an anonymous function, which has no name in JavaScript"
				)
			return JSIdentifier(value.name)
		if isinstance(value, JsSource):
			if value.name is None:
				raise JSCompilationError(
					f"'{name}' refers to an anonymous JavaScript source"
				)
			return JSIdentifier(value.name)
		if inspect.ismodule(value):
			raise JSCompilationError(
				f"Module '{name}' is not available in the browser"
			)
		if inspect.isfunction(value):
			raise JSCompilationError(
				f"'{name}' is a Python function. Decorate it with @javascript and place it on the page to call it from JavaScript."
			)
		if callable(value):
			raise JSCompilationError(
				f"Callable object '{name}' (type: {type(value).__name__}) is not supported"
			)
		try:
			return to_js_expr(value)
		except JSCompilationError as e:
			raise JSCompilationError(
				f"Cannot capture '{name}' by value: {e}"
			) from e

	def __call__(self, *args: *Args) -> R:
		return self.fn(*args)

	def __repr__(self) -> str:
		return f"JsFunction({self.fn.__qualname__})"


def _lookup(fn: pytypes.FunctionType, name: str) -> object:
	"""Value of a free name as seen by `fn`: closure cell first, then globals."""
	code = fn.__code__
	if fn.__closure__ is not None and name in code.co_freevars:
		cell = fn.__closure__[code.co_freevars.index(name)]
		try:
			return cell.cell_contents
		except ValueError as e:
			raise JSCompilationError(
				f"Free variable '{name}' is referenced before assignment"
			) from e
	return fn.__globals__.get(name, _MISSING)


###############################################################################
# Source extraction
###############################################################################


def _parse_function(fn: pytypes.FunctionType) -> FunctionNode:
	code = fn.__code__
	cached = _AST_CACHE.get(code)
	if cached is not None:
		return cached

	try:
		src = inspect.getsource(fn)
	except (OSError, TypeError) as e:
		raise JSCompilationError(f"Cannot retrieve source for {fn}: {e}") from e
	src = textwrap.dedent(src)

	if fn.__name__ == "<lambda>":
		node: FunctionNode = _find_lambda(src, code)
	else:
		node = _find_def(src, fn.__name__)

	_AST_CACHE[code] = node
	return node


def _find_def(src: str, name: str) -> ast.FunctionDef:
	try:
		module = ast.parse(src)
	except SyntaxError as e:
		raise JSCompilationError(f"Cannot parse source of '{name}': {e}") from e
	for n in module.body:
		if isinstance(n, ast.AsyncFunctionDef) and n.name == name:
			raise JSCompilationError(f"Async function '{name}' is not supported")
	fndefs = [
		n for n in module.body if isinstance(n, ast.FunctionDef) and n.name == name
	]
	if not fndefs:
		raise JSCompilationError(f"No definition of '{name}' found in source")
	fndef = fndefs[-1]
	check_plain_signature(fndef)
	return fndef


def _find_lambda(src: str, code: pytypes.CodeType) -> ast.Lambda:
	"""Locate the lambda compiled to `code` inside the lines returned by
	`inspect.getsource`, which usually hold surrounding code as well.

	Each `lambda` keyword is tried as a start position, and the tail is
	shortened until it parses as a single lambda expression. Candidates are
	matched against the code object's parameter names and the number of
	lambdas nested directly inside it.
	"""
	params = list(code.co_varnames[: code.co_argcount])
	nested = sum(1 for c in code.co_consts if isinstance(c, pytypes.CodeType))
	matches: list[ast.Lambda] = []
	for m in re.finditer(r"\blambda\b", src):
		node = _parse_lambda_at(src[m.start() :])
		if node is None:
			continue
		if [a.arg for a in node.args.args] != params:
			continue
		if _count_direct_lambdas(node) != nested:
			continue
		matches.append(node)
	if not matches:
		raise JSCompilationError("Could not locate the lambda's source")
	if len(matches) > 1:
		raise JSCompilationError(
			"Ambiguous lambda source: several lambdas with the same signature on one line. Use a named function instead."
		)
	check_plain_signature(matches[0])
	return matches[0]


def _parse_lambda_at(tail: str) -> ast.Lambda | None:
	end = len(tail)
	while end > len("lambda:"):
		candidate = tail[:end].strip()
		try:
			expr = ast.parse(candidate, mode="eval").body
		except SyntaxError:
			end -= 1
			continue
		if isinstance(expr, ast.Lambda):
			return expr
		end -= 1
	return None


def _count_direct_lambdas(node: ast.Lambda) -> int:
	count = 0
	stack: list[ast.AST] = list(ast.iter_child_nodes(node))
	while stack:
		child = stack.pop()
		if isinstance(child, ast.Lambda):
			count += 1
			continue
		stack.extend(ast.iter_child_nodes(child))
	return count


###############################################################################
# Public helpers
###############################################################################


def javascript(fn: Callable[[*Args], R]) -> JsFunction[*Args, R]:
	"""Decorator that marks a Python function for translation to JavaScript.

	The function keeps its Python name in the generated code and can still be
	called from Python. Translation happens on first emit.

	Usage:
	    @javascript
	    def greet():
	        console.log("hello")
	"""
	if isinstance(fn, JsFunction):
		return fn
	cacheable = _is_module_level(fn)
	if cacheable:
		cached = FUNCTION_CACHE.get(fn)
		if cached is not None:
			return cached
	jsfn = JsFunction(fn)
	if cacheable:
		FUNCTION_CACHE[fn] = jsfn
	return jsfn


def _is_module_level(fn: Callable[..., object]) -> bool:
	# Functions created inside another function are new objects on every call
	if getattr(fn, "__closure__", None) is not None:
		return False
	return "<locals>" not in getattr(fn, "__qualname__", "<locals>")


def clear_function_cache() -> None:
	FUNCTION_CACHE.clear()
	_AST_CACHE.clear()


_FUNCTION_HEAD = re.compile(
	r"^\s*(?:async\s+)?function\b\s*\*?\s*([A-Za-z_$][\w$]*)?\s*\(([^)]*)\)"
)
_ARROW_HEAD = re.compile(
	r"^\s*(?:async\s+)?(?:\(([^)]*)\)|([A-Za-z_$][\w$]*))\s*=>"
)


class JsSource:
	"""A JavaScript function definition given as literal source text.

	The text is emitted as-is. Its name and parameter count are read from the
	function head: `function name(a, b) {...}` or an arrow function.
	"""

	source: str
	name: str | None
	n_args: int | None

	def __init__(self, source: str) -> None:
		source = source.strip().rstrip(";").rstrip()
		if not source:
			raise JSCompilationError("Empty JavaScript source")
		self.source = source
		if m := _FUNCTION_HEAD.match(source):
			self.name = m.group(1)
			self.n_args = _count_params(m.group(2))
			_check_block_body(source, m.end())
		elif m := _ARROW_HEAD.match(source):
			self.name = None
			self.n_args = 1 if m.group(2) else _count_params(m.group(1))
			body_start = _skip_space(source, m.end())
			if source.startswith("{", body_start):
				_check_block_body(source, body_start)
			else:
				_check_expression_body(source, body_start)
		else:
			raise JSCompilationError(
				"JavaScript source must be a function definition or an arrow function"
			)

	def emit(self) -> str:
		return self.source

	def __repr__(self) -> str:
		return f"JsSource(name={self.name!r})"


def _count_params(params: str) -> int | None:
	params = params.strip()
	if not params:
		return 0
	# Defaults and destructuring can hide commas or parentheses
	if any(c in params for c in "=[{"):
		return None
	return len([p for p in params.split(",") if p.strip()])


def _skip_space(source: str, pos: int) -> int:
	while pos < len(source) and source[pos].isspace():
		pos += 1
	return pos


def _code_chars(source: str, start: int) -> Iterator[tuple[int, str]]:
	"""Characters of `source` from `start` that are outside string literals
	and comments. Regular expression literals are not recognized."""
	i = start
	n = len(source)
	while i < n:
		ch = source[i]
		if ch in "'\"`":
			i += 1
			while i < n and source[i] != ch:
				i += 2 if source[i] == "\\" else 1
			i += 1
			continue
		if source.startswith("//", i):
			end = source.find("\n", i)
			i = n if end == -1 else end + 1
			continue
		if source.startswith("/*", i):
			end = source.find("*/", i + 2)
			i = n if end == -1 else end + 2
			continue
		yield i, ch
		i += 1


def _check_block_body(source: str, pos: int) -> None:
	"""The function body must start at `pos` and its closing brace must be
	the last character of the source."""
	pos = _skip_space(source, pos)
	if not source.startswith("{", pos):
		raise JSCompilationError("JavaScript function body must be a { ... } block")
	depth = 0
	for i, ch in _code_chars(source, pos):
		if ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
			if depth == 0:
				if source[i + 1 :].strip():
					raise JSCompilationError(
						f"Unexpected text after the function body: {source[i + 1 :].strip()[:40]!r}"
					)
				return
	raise JSCompilationError("Unbalanced braces in JavaScript function body")


def _check_expression_body(source: str, pos: int) -> None:
	"""An arrow function's expression body must be a single expression."""
	depth = 0
	for _, ch in _code_chars(source, pos):
		if ch in "([{":
			depth += 1
		elif ch in ")]}":
			depth -= 1
			if depth < 0:
				raise JSCompilationError("Unbalanced brackets in arrow function body")
		elif depth == 0 and ch in ";,":
			raise JSCompilationError(
				"Arrow function body must be a single expression. Use a { ... } block for several statements."
			)
	if depth != 0:
		raise JSCompilationError("Unbalanced brackets in arrow function body")


def js_source(source: str) -> JsSource:
	return JsSource(textwrap.dedent(source))
