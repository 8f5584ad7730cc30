"""
Inline `<script>` payloads built from JavaScript callables.

A callable is placed on the page in one of two modes:
- execute (default): `(FUNCTION)();`, run once when the browser parses the tag.
  The parenthesized function is an expression, so its name is not bound
  globally.
- define: the function declaration as-is, callable later by its name from
  other scripts or inline event handlers.

Usage:
    @javascript
    def wire():
        console.log("ready")

    div(id="root")[Script(wire)]
"""

import inspect
import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from sprinkle.html import HTMLElement, Markup, script
from sprinkle.javascript.errors import JSCompilationError
from sprinkle.javascript.function import JsCallable, JsSource, javascript

logger = logging.getLogger(__name__)

# Would end or re-enter the script data state of the enclosing element
_INJECTION_HAZARD = re.compile(r"</script|<!--|<script", re.IGNORECASE)


class MarshalError(Exception):
	"""Base class for errors raised while turning a callable into a script."""


class InvalidCallable(MarshalError):
	"""The callable cannot be serialized to usable JavaScript source."""


class AnonymousDefinition(InvalidCallable):
	"""A define-only script was requested for a function without a name."""


class InjectionHazard(MarshalError):
	"""The serialized text could terminate its enclosing script element."""


class ScriptPayload(NamedTuple):
	code: str
	execute: bool
	name: str | None


MarshalTarget = JsCallable | Callable[..., object] | str


def _coerce(fn: MarshalTarget) -> JsCallable:
	if isinstance(fn, str):
		return JsSource(fn)
	if isinstance(fn, JsCallable):
		return fn
	if inspect.isfunction(fn):
		return javascript(fn)
	raise InvalidCallable(
		f"Cannot place {type(fn).__name__} on the page. Expected a @javascript function, a plain function, a Behavior or JavaScript source."
	)


def build_payload(fn: MarshalTarget, execute: bool = True) -> ScriptPayload:
	"""Serialize `fn` and wrap it for the requested mode.

	Raises `InvalidCallable` when the callable cannot be serialized (or takes
	parameters in execute mode), `AnonymousDefinition` when a define-only
	script has no name and `InjectionHazard` when the text could close the
	script element early.
	"""
	try:
		callable_ = _coerce(fn)
		text = callable_.emit()
	except JSCompilationError as e:
		raise InvalidCallable(f"Cannot serialize {fn!r}: {e}") from e

	if not text or not text.strip():
		raise InvalidCallable(f"{fn!r} serialized to empty source")

	name = callable_.name
	if execute:
		n_args = callable_.n_args
		if n_args:
			raise InvalidCallable(
				f"{callable_!r} declares {n_args} parameter(s) and cannot be invoked on load"
			)
		code = f"({text})();"
	else:
		if name is None:
			raise AnonymousDefinition(
				f"{callable_!r} has no name: a define-only script would be unreachable"
			)
		code = text

	if m := _INJECTION_HAZARD.search(code):
		raise InjectionHazard(
			f"{callable_!r} contains {m.group(0)!r}, which would break out of its <script> element"
		)

	logger.debug(
		"Marshaled %r (%s, %d chars)",
		callable_,
		"execute" if execute else "define",
		len(code),
	)
	return ScriptPayload(code=code, execute=execute, name=name)


def marshal(fn: MarshalTarget, execute: bool = True) -> str:
	"""Return the inline script text for `fn`. See `build_payload`."""
	return build_payload(fn, execute).code


def Script(fn: MarshalTarget, execute: bool = True) -> HTMLElement:
	"""`<script>` element running (or defining) `fn`."""
	payload = build_payload(fn, execute)
	return script(Markup(payload.code))
