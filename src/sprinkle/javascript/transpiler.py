"""
Minimal AST-to-JS transpiler for the restricted Python subset used to describe
browser-side behavior.

The goal is to translate small, self-contained Python functions (DOM wiring,
event handlers, animations) into JavaScript function definitions that can be
inlined in a server-rendered page.

The subset of the language supported is:
- Primitives (int, float, str, bool, None)
- Lists, tuples and dicts (dicts become plain JS objects)
- Core statements: return, if, elif, else, for, while, break, continue, pass
- Assignments to names, attributes and subscripts, augmented assignments
- Nested `def` (emitted as inner function declarations) and `lambda`
- Unary, binary and boolean operations, chained comparisons, `in`, `is None`
- F-strings without format specifications
- A handful of builtins (print, len, str, int, float, abs, min, max, round)

Names that are neither local nor resolved by the caller are rejected: the
emitted code runs in the browser with no access to the Python closure.
"""

from __future__ import annotations

import ast
from collections.abc import Callable
from typing import cast

from sprinkle.javascript.builtins import BUILTINS
from sprinkle.javascript.errors import JSCompilationError
from sprinkle.javascript.nodes import (
	ALLOWED_BINOPS,
	ALLOWED_CMPOPS,
	ALLOWED_UNOPS,
	JSArray,
	JSArrowFunction,
	JSAssign,
	JSAugAssign,
	JSBinary,
	JSBoolean,
	JSBreak,
	JSCall,
	JSComputedProp,
	JSConstAssign,
	JSContinue,
	JSExpr,
	JSForOf,
	JSFunctionDecl,
	JSFunctionDef,
	JSIdentifier,
	JSIf,
	JSLetDeclare,
	JSLogicalChain,
	JSMember,
	JSMemberCall,
	JSMultiStmt,
	JSNull,
	JSNumber,
	JSObjectExpr,
	JSProp,
	JSReturn,
	JSSingleStmt,
	JSSpread,
	JSStmt,
	JSString,
	JSSubscript,
	JSTargetAssign,
	JSTemplate,
	JSTertiary,
	JSUnary,
	JSWhile,
)

# Resolves a free name to a JS expression, or None when the name is unknown.
Resolver = Callable[[str], JSExpr | None]

FunctionNode = ast.FunctionDef | ast.Lambda


###############################################################################
# Scope analysis
###############################################################################


class _ScopeScanner(ast.NodeVisitor):
	"""Collect the names bound in one function scope.

	Nested functions and lambdas are not entered: they form their own scope.
	`nested` holds names whose first binding happens inside a compound
	statement, which must be declared at the top of the function because JS
	`let` is block scoped.
	"""

	def __init__(self) -> None:
		self.bound: set[str] = set()
		self.nested: set[str] = set()
		self.nonlocals: set[str] = set()
		self._depth = 0

	def scan(self, body: list[ast.stmt]) -> None:
		for stmt in body:
			self.visit(stmt)

	def _bind(self, name: str) -> None:
		if name not in self.bound and self._depth > 0:
			self.nested.add(name)
		self.bound.add(name)

	def _bind_target(self, target: ast.expr) -> None:
		if isinstance(target, ast.Name):
			self._bind(target.id)
		elif isinstance(target, (ast.Tuple, ast.List)):
			for elt in target.elts:
				self._bind_target(elt)
		elif isinstance(target, ast.Starred):
			self._bind_target(target.value)

	def visit_Assign(self, node: ast.Assign) -> None:
		for target in node.targets:
			self._bind_target(target)

	def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
		self._bind_target(node.target)

	def visit_AugAssign(self, node: ast.AugAssign) -> None:
		self._bind_target(node.target)

	def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
		# Function declarations are hoisted in JS, no `let` needed
		self.bound.add(node.name)

	def visit_Lambda(self, node: ast.Lambda) -> None:
		return

	def visit_Nonlocal(self, node: ast.Nonlocal) -> None:
		self.nonlocals.update(node.names)

	def visit_Global(self, node: ast.Global) -> None:
		raise JSCompilationError("`global` statements are not supported")

	def _visit_block(self, stmts: list[ast.stmt]) -> None:
		self._depth += 1
		for stmt in stmts:
			self.visit(stmt)
		self._depth -= 1

	def visit_If(self, node: ast.If) -> None:
		self._visit_block(node.body)
		self._visit_block(node.orelse)

	def visit_While(self, node: ast.While) -> None:
		self._visit_block(node.body)
		self._visit_block(node.orelse)

	def visit_For(self, node: ast.For) -> None:
		# The loop target is a per-iteration `const`, never hoisted
		for target in ast.walk(node.target):
			if isinstance(target, ast.Name):
				self.bound.add(target.id)
		self._visit_block(node.body)
		self._visit_block(node.orelse)


###############################################################################
# Python AST -> JS AST
###############################################################################


class JsTranspiler:
	"""Builds a JS AST from a restricted Python function.

	- args: parameter names, treated as locals from the start.
	- resolve: callback mapping free (non-local) names to JS expressions.
	- parent: the enclosing transpiler for nested functions; its locals are
	  visible by name since JS closures capture them natively.
	"""

	def __init__(
		self,
		fndef: FunctionNode,
		args: list[str],
		resolve: Resolver,
		parent: JsTranspiler | None = None,
	) -> None:
		self.fndef = fndef
		self.args = args
		self.resolve = resolve
		self.parent = parent

		self._hoisted: list[str] = []
		self.locals: set[str] = set(args)
		self.declared: set[str] = set(args)
		self._temp_counter = parent._temp_counter if parent is not None else 0

		if isinstance(fndef, ast.FunctionDef):
			scanner = _ScopeScanner()
			scanner.scan(fndef.body)
			bound = scanner.bound - scanner.nonlocals
			self.locals |= bound
			self._hoisted = sorted((scanner.nested & bound) - set(args))
			self.declared |= set(self._hoisted)
			for name in scanner.nonlocals:
				if parent is None or not parent.is_visible(name):
					raise JSCompilationError(f"No binding for nonlocal '{name}' found")

	# --- Entrypoints ---------------------------------------------------------
	def transpile(self, name: str | None = None) -> JSFunctionDef | JSArrowFunction:
		if isinstance(self.fndef, ast.Lambda):
			return JSArrowFunction(self.args, self.emit_expr(self.fndef.body))
		stmts: list[JSStmt] = []
		if self._hoisted:
			stmts.append(JSLetDeclare(self._hoisted))
		stmts.extend(self.emit_body(self.fndef.body))
		return JSFunctionDef(self.args, stmts, name=name)

	def is_visible(self, name: str) -> bool:
		if name in self.locals:
			return True
		return self.parent is not None and self.parent.is_visible(name)

	# --- Statements ----------------------------------------------------------
	def emit_body(self, body: list[ast.stmt]) -> list[JSStmt]:
		out: list[JSStmt] = []
		for stmt in body:
			s = self.emit_stmt(stmt)
			if s is not None:
				out.append(s)
		return out

	def emit_stmt(self, node: ast.stmt) -> JSStmt | None:
		"""Supported statements:
		- return, break, continue, pass
		- assign (regular, annotated and augmented)
		- if, elif, else
		- for (iterables only), while
		- nested def
		- expression statements (docstrings are dropped)
		"""
		if isinstance(node, ast.Return):
			if node.value is None:
				return JSReturn()
			return JSReturn(self.emit_expr(node.value))
		if isinstance(node, ast.Break):
			return JSBreak()
		if isinstance(node, ast.Continue):
			return JSContinue()
		if isinstance(node, (ast.Pass, ast.Nonlocal)):
			return None
		if isinstance(node, ast.AugAssign):
			op_type = type(node.op)
			if op_type not in ALLOWED_BINOPS:
				raise JSCompilationError(
					f"Augmented assignment operator not allowed: {op_type.__name__}"
				)
			value_expr = self.emit_expr(node.value)
			if isinstance(node.target, ast.Name):
				return JSAugAssign(node.target.id, ALLOWED_BINOPS[op_type], value_expr)
			target = self._emit_target(node.target)
			return JSTargetAssign(target, value_expr, op=ALLOWED_BINOPS[op_type])
		if isinstance(node, ast.Assign):
			if len(node.targets) != 1:
				raise JSCompilationError(
					"Multiple assignment targets are not supported"
				)
			return self._emit_assign(node.targets[0], self.emit_expr(node.value))
		if isinstance(node, ast.AnnAssign):
			value = JSNull() if node.value is None else self.emit_expr(node.value)
			return self._emit_assign(node.target, value)
		if isinstance(node, ast.If):
			test = self.emit_expr(node.test)
			body = self.emit_body(node.body)
			orelse = self.emit_body(node.orelse)
			return JSIf(test, body, orelse)
		if isinstance(node, ast.Expr):
			# Docstrings and bare string statements
			if isinstance(node.value, ast.Constant) and isinstance(
				node.value.value, str
			):
				return None
			return JSSingleStmt(self.emit_expr(node.value))
		if isinstance(node, ast.While):
			if node.orelse:
				raise JSCompilationError("while/else is not supported")
			test = self.emit_expr(node.test)
			return JSWhile(test, self.emit_body(node.body))
		if isinstance(node, ast.For):
			if node.orelse:
				raise JSCompilationError("for/else is not supported")
			target: str | list[str]
			if isinstance(node.target, ast.Name):
				target = node.target.id
			elif isinstance(node.target, ast.Tuple) and all(
				isinstance(e, ast.Name) for e in node.target.elts
			):
				target = [cast(ast.Name, e).id for e in node.target.elts]
			else:
				raise JSCompilationError(
					"Only name or flat tuple targets are supported in for-loops"
				)
			iter_expr = self.emit_expr(node.iter)
			return JSForOf(target, iter_expr, self.emit_body(node.body))
		if isinstance(node, ast.FunctionDef):
			return JSFunctionDecl(self._emit_nested_function(node))
		raise JSCompilationError(
			f"Unsupported statement: {ast.dump(node, include_attributes=False)}"
		)

	def _emit_assign(self, target_node: ast.expr, value_expr: JSExpr) -> JSStmt:
		# Tuple/list unpacking of flat names only
		if isinstance(target_node, (ast.Tuple, ast.List)):
			elements = target_node.elts
			if not elements or not all(isinstance(e, ast.Name) for e in elements):
				raise JSCompilationError(
					"Unpacking is supported only for simple variables. Example: `a, b = pair`."
				)
			tmp_name = f"$tmp{self._temp_counter}"
			self._temp_counter += 1
			stmts: list[JSStmt] = [JSConstAssign(tmp_name, value_expr)]
			for idx, e in enumerate(elements):
				name = cast(ast.Name, e).id
				sub = JSSubscript(JSIdentifier(tmp_name), JSNumber(idx))
				stmts.append(self._assign_name(name, sub))
			return JSMultiStmt(stmts)
		if isinstance(target_node, ast.Name):
			return self._assign_name(target_node.id, value_expr)
		if isinstance(target_node, (ast.Attribute, ast.Subscript)):
			return JSTargetAssign(self._emit_target(target_node), value_expr)
		raise JSCompilationError(
			f"Unsupported assignment target: {ast.dump(target_node, include_attributes=False)}"
		)

	def _assign_name(self, name: str, value: JSExpr) -> JSAssign:
		# Use 'let' only on first assignment to a local name
		if name in self.declared or name not in self.locals:
			return JSAssign(name, value, declare=False)
		self.declared.add(name)
		return JSAssign(name, value, declare=True)

	def _emit_target(self, node: ast.expr) -> JSMember | JSSubscript:
		target = self.emit_expr(node)
		if not isinstance(target, (JSMember, JSSubscript)):
			raise JSCompilationError(
				f"Unsupported assignment target: {ast.dump(node, include_attributes=False)}"
			)
		return target

	def _emit_nested_function(self, node: ast.FunctionDef) -> JSFunctionDef:
		check_plain_signature(node)
		if node.decorator_list:
			raise JSCompilationError(
				f"Decorators are not supported on nested function '{node.name}'"
			)
		args = [arg.arg for arg in node.args.args]
		child = JsTranspiler(node, args=args, resolve=self.resolve, parent=self)
		fn = cast(JSFunctionDef, child.transpile(name=node.name))
		self._temp_counter = child._temp_counter
		return fn

	# --- Expressions ---------------------------------------------------------
	def emit_expr(self, node: ast.expr | None) -> JSExpr:
		"""Supported expressions:
		- Constants and names
		- Tuples, lists and dicts
		- Binary, unary and boolean operations
		- Comparisons (chained), membership, identity with None
		- If expressions
		- Function and method calls
		- Attribute access and subscripts (including slices)
		- Lambdas
		- f-strings
		"""
		if node is None:
			return JSNull()

		if isinstance(node, ast.Constant):
			v = node.value
			if isinstance(v, str):
				return JSString(v)
			if v is None:
				return JSNull()
			if isinstance(v, bool):
				return JSBoolean(v)
			if isinstance(v, (int, float)):
				return JSNumber(v)
			raise JSCompilationError(f"Unsupported constant: {v!r}")
		if isinstance(node, ast.Name):
			return self._emit_name(node.id)
		if isinstance(node, (ast.List, ast.Tuple)):
			parts: list[JSExpr] = []
			for e in node.elts:
				if isinstance(e, ast.Starred):
					parts.append(JSSpread(self.emit_expr(e.value)))
				else:
					parts.append(self.emit_expr(e))
			return JSArray(parts)
		if isinstance(node, ast.Dict):
			props: list[JSProp | JSComputedProp | JSSpread] = []
			for k, v in zip(node.keys, node.values, strict=True):
				if k is None:
					props.append(JSSpread(self.emit_expr(v)))
				elif isinstance(k, ast.Constant) and isinstance(k.value, str):
					props.append(JSProp(JSString(k.value), self.emit_expr(v)))
				else:
					props.append(JSComputedProp(self.emit_expr(k), self.emit_expr(v)))
			return JSObjectExpr(props)
		if isinstance(node, ast.BinOp):
			left = self.emit_expr(node.left)
			right = self.emit_expr(node.right)
			if isinstance(node.op, ast.FloorDiv):
				return JSMemberCall(
					JSIdentifier("Math"), "floor", [JSBinary(left, "/", right)]
				)
			op = type(node.op)
			if op not in ALLOWED_BINOPS:
				raise JSCompilationError(f"Operator not allowed: {op.__name__}")
			return JSBinary(left, ALLOWED_BINOPS[op], right)
		if isinstance(node, ast.UnaryOp):
			op = type(node.op)
			if op not in ALLOWED_UNOPS:
				raise JSCompilationError(f"Unsupported unary operator: {op.__name__}")
			return JSUnary(ALLOWED_UNOPS[op], self.emit_expr(node.operand))
		if isinstance(node, ast.BoolOp):
			op = "&&" if isinstance(node.op, ast.And) else "||"
			return JSLogicalChain(op, [self.emit_expr(v) for v in node.values])
		if isinstance(node, ast.Compare):
			operands: list[ast.expr] = [node.left, *node.comparators]
			exprs = [self.emit_expr(e) for e in operands]
			cmp_parts = [
				_build_comparison(exprs[i], operands[i], op, exprs[i + 1], operands[i + 1])
				for i, op in enumerate(node.ops)
			]
			return JSLogicalChain("&&", cmp_parts)
		if isinstance(node, ast.IfExp):
			return JSTertiary(
				self.emit_expr(node.test),
				self.emit_expr(node.body),
				self.emit_expr(node.orelse),
			)
		if isinstance(node, ast.Call):
			return self._build_call(node)
		if isinstance(node, ast.Attribute):
			return JSMember(self.emit_expr(node.value), node.attr)
		if isinstance(node, ast.Subscript):
			return self._build_subscript(node)
		if isinstance(node, ast.Lambda):
			check_plain_signature(node)
			args = [arg.arg for arg in node.args.args]
			child = JsTranspiler(node, args=args, resolve=self.resolve, parent=self)
			return child.transpile()
		if isinstance(node, ast.JoinedStr):
			template_parts: list[str | JSExpr] = []
			for part in node.values:
				if isinstance(part, ast.Constant) and isinstance(part.value, str):
					template_parts.append(part.value)
				elif isinstance(part, ast.FormattedValue):
					if part.format_spec is not None:
						raise JSCompilationError(
							"Format specifications in f-strings are not supported"
						)
					if part.conversion not in (-1, ord("s")):
						raise JSCompilationError(
							"Only !s conversions are supported in f-strings"
						)
					template_parts.append(self.emit_expr(part.value))
				else:
					raise JSCompilationError(
						f"Unsupported f-string component: {ast.dump(part, include_attributes=False)}"
					)
			return JSTemplate(template_parts)
		raise JSCompilationError(
			f"Unsupported expression: {ast.dump(node, include_attributes=False)}"
		)

	def _emit_name(self, ident: str) -> JSExpr:
		if self.is_visible(ident):
			return JSIdentifier(ident)
		resolved = self.resolve(ident)
		if resolved is not None:
			return resolved
		if ident in BUILTINS:
			raise JSCompilationError(
				f"Builtin '{ident}' can only be called, not referenced"
			)
		raise JSCompilationError(f"Unbound name referenced: {ident}.")

	def _build_call(self, node: ast.Call) -> JSExpr:
		if node.keywords:
			raise JSCompilationError(
				"Keyword arguments are not supported in function calls"
			)
		args: list[JSExpr] = []
		for a in node.args:
			if isinstance(a, ast.Starred):
				args.append(JSSpread(self.emit_expr(a.value)))
			else:
				args.append(self.emit_expr(a))
		if isinstance(node.func, ast.Attribute):
			obj = self.emit_expr(node.func.value)
			return JSMemberCall(obj, node.func.attr, args)
		if isinstance(node.func, ast.Name):
			ident = node.func.id
			# Locals and resolved globals take precedence over builtins
			if not self.is_visible(ident):
				resolved = self.resolve(ident)
				if resolved is not None:
					return JSCall(resolved, args)
				if ident in BUILTINS:
					return BUILTINS[ident](*args)
		return JSCall(self.emit_expr(node.func), args)

	def _build_subscript(self, node: ast.Subscript) -> JSExpr:
		value = self.emit_expr(node.value)
		if isinstance(node.slice, ast.Tuple):
			raise JSCompilationError("Subscripts with multiple indices are not supported")
		if isinstance(node.slice, ast.Slice):
			if node.slice.step is not None:
				raise JSCompilationError("Slice steps are not supported")
			lower = node.slice.lower
			upper = node.slice.upper
			if lower is None and upper is None:
				return JSMemberCall(value, "slice", [])
			start = JSNumber(0) if lower is None else self.emit_expr(lower)
			if upper is None:
				return JSMemberCall(value, "slice", [start])
			return JSMemberCall(value, "slice", [start, self.emit_expr(upper)])
		# Negative index -> at()
		if isinstance(node.slice, ast.UnaryOp) and isinstance(node.slice.op, ast.USub):
			idx_expr = self.emit_expr(node.slice.operand)
			return JSMemberCall(value, "at", [JSUnary("-", idx_expr)])
		return JSSubscript(value, self.emit_expr(node.slice))


def check_plain_signature(node: FunctionNode) -> None:
	args = node.args
	if args.vararg or args.kwarg or args.kwonlyargs or args.posonlyargs:
		raise JSCompilationError(
			"Only plain positional parameters are supported (no *args, **kwargs, keyword-only or positional-only)"
		)
	if args.defaults:
		raise JSCompilationError("Default parameter values are not supported")


def _build_comparison(
	left_expr: JSExpr,
	left_node: ast.expr,
	op: ast.cmpop,
	right_expr: JSExpr,
	right_node: ast.expr,
) -> JSExpr:
	# Identity with None: loose equality matches both null and undefined
	if isinstance(op, (ast.Is, ast.IsNot)):
		is_not = isinstance(op, ast.IsNot)
		right_is_none = isinstance(right_node, ast.Constant) and right_node.value is None
		left_is_none = isinstance(left_node, ast.Constant) and left_node.value is None
		if right_is_none or left_is_none:
			expr = left_expr if right_is_none else right_expr
			return JSBinary(expr, "!=" if is_not else "==", JSNull())
		return JSBinary(left_expr, "!==" if is_not else "===", right_expr)
	# Membership: arrays and strings
	if isinstance(op, (ast.In, ast.NotIn)):
		membership = JSMemberCall(right_expr, "includes", [left_expr])
		if isinstance(op, ast.NotIn):
			return JSUnary("!", membership)
		return membership
	op_type = type(op)
	if op_type not in ALLOWED_CMPOPS:
		raise JSCompilationError(f"Comparison not allowed: {op_type.__name__}")
	return JSBinary(left_expr, ALLOWED_CMPOPS[op_type], right_expr)
