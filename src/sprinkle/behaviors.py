"""
Browser behavior described as data.

A `Behavior` is a list of listeners (`On`) and actions compiled to a single
JavaScript function. Every element lookup in the generated code is checked
before use: when an element id is absent from the page, the listener or action
that needs it is skipped and nothing is thrown.

Usage:
    Behavior(
        On("popoverTrigger", "click", ToggleStyle("popover", "display", "block", "none")),
    )

Actions without a target apply to the element of the enclosing `On`.
"""

import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from sprinkle.html import UNITLESS_PROPERTIES
from sprinkle.javascript.errors import JSCompilationError
from sprinkle.javascript.nodes import (
	JSArrowFunction,
	JSBinary,
	JSBlock,
	JSConstAssign,
	JSExpr,
	JSFunctionDef,
	JSIdentifier,
	JSIf,
	JSMember,
	JSMemberCall,
	JSSingleStmt,
	JSStmt,
	JSString,
	JSTargetAssign,
	JSTertiary,
	to_js_expr,
)

StyleValue = str | int | float

_JS_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


class Action(Protocol):
	def compile(self, ctx: "_Compiler", current: JSExpr | None) -> list[JSStmt]: ...


class _Compiler:
	"""Allocates element variables and emits guarded lookups."""

	def __init__(self) -> None:
		self._counter = 0

	def fresh(self, base: str) -> str:
		name = f"{base}{self._counter}"
		self._counter += 1
		return name

	def with_element(
		self,
		target: str | None,
		current: JSExpr | None,
		build: Callable[[JSExpr], list[JSStmt]],
	) -> list[JSStmt]:
		if target is None:
			if current is None:
				raise JSCompilationError(
					"Actions outside of an On(...) listener need an explicit target id"
				)
			return build(current)
		var = self.fresh("el")
		lookup = JSMemberCall(
			JSIdentifier("document"), "getElementById", [JSString(target)]
		)
		ref = JSIdentifier(var)
		return [JSConstAssign(var, lookup), JSIf(ref, build(ref), [])]


def _check_id(target: str | None) -> None:
	if target is not None and not target.strip():
		raise ValueError("Element ids cannot be empty")


def _check_style(prop: str, *values: StyleValue) -> None:
	if not _JS_IDENTIFIER.match(prop):
		raise ValueError(
			f"Style property {prop!r} must be a camelCase name such as 'backgroundColor'"
		)
	for value in values:
		if isinstance(value, bool) or not isinstance(value, (str, int, float)):
			raise ValueError(f"Invalid value for style property '{prop}': {value!r}")
		if isinstance(value, float) and not math.isfinite(value):
			raise ValueError(f"Invalid value for style property '{prop}': {value!r}")


def _style(el: JSExpr, prop: str) -> JSMember:
	return JSMember(JSMember(el, "style"), prop)


def _style_value(prop: str, value: StyleValue) -> JSExpr:
	if isinstance(value, (int, float)):
		if value != 0 and prop not in UNITLESS_PROPERTIES:
			return JSString(f"{value}px")
		return JSString(str(value))
	return JSString(value)


###############################################################################
# Actions
###############################################################################


@dataclass(frozen=True)
class SetStyle:
	"""`el.style[prop] = value`, with `prop` in camelCase (`boxShadow`)."""

	target: str | None
	prop: str
	value: StyleValue

	def __post_init__(self) -> None:
		_check_id(self.target)
		_check_style(self.prop, self.value)

	def compile(self, ctx: _Compiler, current: JSExpr | None) -> list[JSStmt]:
		value = _style_value(self.prop, self.value)
		return ctx.with_element(
			self.target,
			current,
			lambda el: [JSTargetAssign(_style(el, self.prop), value)],
		)


@dataclass(frozen=True)
class ToggleStyle:
	"""Switch a style property between `on` and `off`.

	Any value other than `on` counts as off, so the first toggle sets `on`.
	"""

	target: str | None
	prop: str
	on: StyleValue
	off: StyleValue

	def __post_init__(self) -> None:
		_check_id(self.target)
		_check_style(self.prop, self.on, self.off)

	def compile(self, ctx: _Compiler, current: JSExpr | None) -> list[JSStmt]:
		def build(el: JSExpr) -> list[JSStmt]:
			on = _style_value(self.prop, self.on)
			off = _style_value(self.prop, self.off)
			test = JSBinary(_style(el, self.prop), "===", on)
			return [JSTargetAssign(_style(el, self.prop), JSTertiary(test, off, on))]

		return ctx.with_element(self.target, current, build)


@dataclass(frozen=True)
class Animate:
	"""Web Animations API call: `el.animate(keyframes, options)`."""

	target: str | None
	keyframes: Sequence[Mapping[str, StyleValue]]
	options: Mapping[str, object] | int = field(default_factory=dict)

	def __post_init__(self) -> None:
		_check_id(self.target)
		if not self.keyframes:
			raise ValueError("Animate needs at least one keyframe")

	def compile(self, ctx: _Compiler, current: JSExpr | None) -> list[JSStmt]:
		keyframes = to_js_expr([dict(k) for k in self.keyframes])
		options = to_js_expr(
			self.options if isinstance(self.options, int) else dict(self.options)
		)
		return ctx.with_element(
			self.target,
			current,
			lambda el: [JSSingleStmt(JSMemberCall(el, "animate", [keyframes, options]))],
		)


@dataclass(frozen=True)
class AppendElement:
	"""Create a `tag` element holding `text` and append it to `parent`."""

	parent: str | None
	tag: str
	text: str = ""
	style: Mapping[str, StyleValue] = field(default_factory=dict)

	def __post_init__(self) -> None:
		_check_id(self.parent)
		for prop, value in self.style.items():
			_check_style(prop, value)

	def compile(self, ctx: _Compiler, current: JSExpr | None) -> list[JSStmt]:
		def build(el: JSExpr) -> list[JSStmt]:
			var = ctx.fresh("node")
			node = JSIdentifier(var)
			create = JSMemberCall(
				JSIdentifier("document"), "createElement", [JSString(self.tag)]
			)
			stmts: list[JSStmt] = [JSConstAssign(var, create)]
			if self.text:
				stmts.append(
					JSTargetAssign(JSMember(node, "textContent"), JSString(self.text))
				)
			for prop, value in self.style.items():
				stmts.append(JSTargetAssign(_style(node, prop), _style_value(prop, value)))
			stmts.append(JSSingleStmt(JSMemberCall(el, "appendChild", [node])))
			return stmts

		return ctx.with_element(self.parent, current, build)


@dataclass(frozen=True)
class Log:
	"""`console.<level>(message)`."""

	message: str
	level: str = "log"

	def __post_init__(self) -> None:
		if self.level not in ("log", "info", "warn", "error", "debug"):
			raise ValueError(f"Unknown console level: {self.level}")

	def compile(self, ctx: _Compiler, current: JSExpr | None) -> list[JSStmt]:
		call = JSMemberCall(JSIdentifier("console"), self.level, [JSString(self.message)])
		return [JSSingleStmt(call)]


###############################################################################
# Listeners and programs
###############################################################################


@dataclass(frozen=True, init=False)
class On:
	"""Attach `actions` to the `event` of element `target`."""

	target: str
	event: str
	actions: tuple[Action, ...]

	def __init__(self, target: str, event: str, *actions: Action) -> None:
		_check_id(target)
		if not event:
			raise ValueError("Event name cannot be empty")
		object.__setattr__(self, "target", target)
		object.__setattr__(self, "event", event)
		object.__setattr__(self, "actions", actions)

	def compile(self, ctx: _Compiler, current: JSExpr | None) -> list[JSStmt]:
		def build(el: JSExpr) -> list[JSStmt]:
			body: list[JSStmt] = []
			for action in self.actions:
				body.extend(action.compile(ctx, el))
			handler = JSArrowFunction([], JSBlock(body))
			listen = JSMemberCall(
				el, "addEventListener", [JSString(self.event), handler]
			)
			return [JSSingleStmt(listen)]

		return ctx.with_element(self.target, current, build)


class Behavior:
	"""A JavaScript function built from listeners and actions.

	Top-level actions run when the function is called, listeners are attached
	at the same time. Pass `name` to place it on the page as a named function.
	"""

	steps: tuple[Action, ...]
	name: str | None
	n_args: int = 0

	def __init__(self, *steps: Action, name: str | None = None) -> None:
		if not steps:
			raise ValueError("A Behavior needs at least one listener or action")
		if name is not None and not _JS_IDENTIFIER.match(name):
			raise ValueError(f"Invalid JavaScript function name: {name!r}")
		self.steps = steps
		self.name = name
		self._code: str | None = None

	def emit(self) -> str:
		if self._code is None:
			ctx = _Compiler()
			body: list[JSStmt] = []
			for step in self.steps:
				body.extend(step.compile(ctx, None))
			self._code = JSFunctionDef([], body, name=self.name).emit()
		return self._code

	def __repr__(self) -> str:
		return f"Behavior(name={self.name!r}, steps={len(self.steps)})"
