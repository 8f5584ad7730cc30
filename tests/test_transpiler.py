"""Tests for the Python -> JavaScript transpiler."""

import pytest
from sprinkle.javascript import JSCompilationError, javascript
from sprinkle.js import Math, console, document

GREETING = "hello"
LIMITS = {"min": 0, "max": 10}


@javascript
def helper():
	return 42


@javascript
def uses_helper():
	return helper() + 1


def plain_python():
	return 1


# =============================================================================
# Statements
# =============================================================================


class TestStatements:
	"""Test statement transpilation."""

	def test_function_keeps_python_name(self):
		@javascript
		def my_function():
			return 1

		code = my_function.emit()
		assert code.startswith("function my_function(){")
		assert "return 1;" in code

	def test_parameters(self):
		@javascript
		def add(a, b):
			return a + b

		assert add.emit() == "function add(a, b){\nreturn a + b;\n}"

	def test_empty_body(self):
		@javascript
		def noop():
			pass

		assert noop.emit() == "function noop(){}"

	def test_docstring_dropped(self):
		@javascript
		def f():
			"""Not emitted."""
			return 1

		assert "Not emitted" not in f.emit()

	def test_bare_return(self):
		@javascript
		def f(x):
			if x:
				return
			console.log(x)

		code = f.emit()
		assert "return;" in code

	def test_if_else_statement(self):
		@javascript
		def f(x):
			if x > 0:
				return 1
			else:
				return 2

		code = f.emit()
		assert "if (x > 0)" in code
		assert "return 1" in code
		assert "else" in code
		assert "return 2" in code

	def test_elif_collapses(self):
		@javascript
		def f(x):
			if x > 0:
				return 1
			elif x < 0:
				return -1
			else:
				return 0

		assert "} else if (x < 0)" in f.emit()

	def test_let_on_first_assignment_only(self):
		@javascript
		def f():
			x = 1
			x = x + 1
			return x

		code = f.emit()
		assert "let x = 1;" in code
		assert "x = x + 1;" in code
		assert code.count("let x") == 1

	def test_block_assignment_is_hoisted(self):
		@javascript
		def f(flag):
			if flag:
				label = "on"
			else:
				label = "off"
			return label

		code = f.emit()
		assert "let label;" in code
		assert "label = 'on';" in code
		assert "let label =" not in code

	def test_annotated_assignment(self):
		@javascript
		def f():
			count: int = 3
			return count

		assert "let count = 3;" in f.emit()

	def test_augmented_assignment(self):
		@javascript
		def f(el):
			total = 0
			total += 2
			el.width *= 2
			return total

		code = f.emit()
		assert "total += 2;" in code
		assert "el.width *= 2;" in code

	def test_attribute_and_subscript_assignment(self):
		@javascript
		def f(el, items):
			el.style.color = "red"
			items[0] = 1

		code = f.emit()
		assert "el.style.color = 'red';" in code
		assert "items[0] = 1;" in code

	def test_unpack_tuple_assignment(self):
		@javascript
		def f(t):
			a, b = t
			return a + b

		code = f.emit()
		assert "$tmp" in code
		assert "[0]" in code
		assert "[1]" in code
		assert "a + b" in code

	def test_for_loop(self):
		@javascript
		def f(items):
			total = 0
			for item in items:
				total += item
			return total

		code = f.emit()
		assert "for (const item of items){" in code
		assert "total += item;" in code

	def test_for_loop_tuple_target(self):
		@javascript
		def f(pairs):
			for key, value in pairs:
				console.log(key, value)

		assert "for (const [key, value] of pairs)" in f.emit()

	def test_while_break_continue(self):
		@javascript
		def f():
			i = 0
			while i < 10:
				i += 1
				if i == 2:
					continue
				if i > 5:
					break
			return i

		code = f.emit()
		assert "while (i < 10){" in code
		assert "continue;" in code
		assert "break;" in code

	def test_nested_function_declaration(self):
		@javascript
		def f():
			el = document.getElementById("box")

			def on_click():
				el.style.color = "blue"

			el.addEventListener("click", on_click)

		code = f.emit()
		assert "function on_click(){\nel.style.color = 'blue';\n}" in code
		assert "el.addEventListener('click', on_click);" in code

	def test_nonlocal_in_nested_function(self):
		@javascript
		def f():
			count = 0

			def bump():
				nonlocal count
				count += 1

			bump()
			return count

		code = f.emit()
		assert "count += 1;" in code
		assert code.count("let count") == 1

	def test_while_else_rejected(self):
		@javascript
		def f(x):
			while x:
				x -= 1
			else:
				return 0

		with pytest.raises(JSCompilationError, match="while/else"):
			f.emit()

	def test_try_rejected(self):
		@javascript
		def f():
			try:
				return 1
			except ValueError:
				return 2

		with pytest.raises(JSCompilationError, match="Unsupported statement"):
			f.emit()

	def test_global_rejected(self):
		@javascript
		def f():
			global GREETING
			GREETING = "bye"

		with pytest.raises(JSCompilationError, match="global"):
			f.emit()


# =============================================================================
# Expressions
# =============================================================================


class TestExpressions:
	def test_constants(self):
		@javascript
		def f():
			return [1, 2.5, True, False, None, "x"]

		assert "[1, 2.5, true, false, null, 'x']" in f.emit()

	def test_string_quotes_and_escapes(self):
		@javascript
		def f():
			return "it's\n"

		assert "'it\\'s\\n'" in f.emit()

	def test_conditional_expression(self):
		@javascript
		def f(x):
			return 1 if x > 0 else 2

		assert "x > 0 ? 1 : 2" in f.emit()

	def test_boolean_precedence_or(self):
		@javascript
		def f(a, b, c):
			return (a and b) or c

		assert "a && b || c" in f.emit()

	def test_not(self):
		@javascript
		def f(a, b):
			return not a or not b

		assert "!a || !b" in f.emit()

	def test_arithmetic_precedence(self):
		@javascript
		def f(a, b, c):
			return (a + b) * c

		assert "(a + b) * c" in f.emit()

	def test_negated_sum_keeps_parentheses(self):
		@javascript
		def f(a, b):
			return -(a + b)

		assert "return -(a + b);" in f.emit()

	def test_negated_difference_keeps_parentheses(self):
		@javascript
		def f(a, b):
			return -(a - b)

		assert "return -(a - b);" in f.emit()

	def test_negated_power(self):
		@javascript
		def f(x):
			return -x**2

		assert "return -(x ** 2);" in f.emit()

	def test_power_of_negation(self):
		@javascript
		def f(x):
			return (-x) ** 2

		assert "return (-x) ** 2;" in f.emit()

	def test_double_negation(self):
		@javascript
		def f(x):
			return -(-x)

		assert "return -(-x);" in f.emit()

	def test_floor_division(self):
		@javascript
		def f(a, b):
			return a // b

		assert "Math.floor(a / b)" in f.emit()

	def test_chained_comparison(self):
		@javascript
		def f(x):
			return 0 < x <= 10

		assert "0 < x && x <= 10" in f.emit()

	def test_equality_is_strict(self):
		@javascript
		def f(a, b):
			return a == b or a != b

		assert "a === b || a !== b" in f.emit()

	def test_is_none(self):
		@javascript
		def f(x):
			return x is None

		assert "x == null" in f.emit()

	def test_is_not_none(self):
		@javascript
		def f(x):
			return x is not None

		assert "x != null" in f.emit()

	def test_in_operator(self):
		@javascript
		def f(x, items):
			return x in items

		assert "items.includes(x)" in f.emit()

	def test_not_in_operator(self):
		@javascript
		def f(x, items):
			return x not in items

		assert "!items.includes(x)" in f.emit()

	def test_dict_literal_is_object(self):
		@javascript
		def f(x):
			return {"duration": 300, "value": x}

		assert "{'duration': 300, 'value': x}" in f.emit()

	def test_negative_index(self):
		@javascript
		def f(items):
			return items[-1]

		assert "items.at(-1)" in f.emit()

	def test_slices(self):
		@javascript
		def f(items):
			return [items[1:], items[:2], items[1:3]]

		code = f.emit()
		assert "items.slice(1)" in code
		assert "items.slice(0, 2)" in code
		assert "items.slice(1, 3)" in code

	def test_fstring(self):
		@javascript
		def f(name):
			return f"Hello {name}!"

		assert "`Hello ${name}!`" in f.emit()

	def test_fstring_format_spec_rejected(self):
		@javascript
		def f(x):
			return f"{x:.2f}"

		with pytest.raises(JSCompilationError, match="Format specifications"):
			f.emit()

	def test_lambda_becomes_arrow(self):
		@javascript
		def f(items):
			return items.map(lambda x: x * 2)

		assert "items.map(x => x * 2)" in f.emit()

	def test_zero_arg_lambda(self):
		@javascript
		def f(el):
			el.addEventListener("click", lambda: console.log("hi"))

		assert "el.addEventListener('click', () => console.log('hi'))" in f.emit()

	def test_method_call_on_member(self):
		@javascript
		def f():
			return document.body.querySelector("p")

		assert "document.body.querySelector('p')" in f.emit()

	def test_keyword_arguments_rejected(self):
		@javascript
		def f(el):
			el.scrollIntoView(behavior="smooth")

		with pytest.raises(JSCompilationError, match="Keyword arguments"):
			f.emit()


class TestBuiltins:
	def test_print(self):
		@javascript
		def f(x):
			print("value", x)

		assert "console.log('value', x);" in f.emit()

	def test_len(self):
		@javascript
		def f(items):
			return len(items)

		assert "items.length" in f.emit()

	def test_conversions(self):
		@javascript
		def f(x):
			return [str(x), int(x), float(x)]

		assert "[String(x), parseInt(x, 10), parseFloat(x)]" in f.emit()

	def test_math(self):
		@javascript
		def f(a, b):
			return [abs(a), min(a, b), max(a, b), round(a)]

		code = f.emit()
		assert "Math.abs(a)" in code
		assert "Math.min(a, b)" in code
		assert "Math.max(a, b)" in code
		assert "Math.round(a)" in code

	def test_local_shadows_builtin(self):
		@javascript
		def f(len):
			return len(1)

		assert "return len(1);" in f.emit()

	def test_builtin_arity_checked(self):
		@javascript
		def f(a, b):
			return len(a, b)

		with pytest.raises(JSCompilationError, match="len"):
			f.emit()

	def test_builtin_reference_rejected(self):
		@javascript
		def f(items):
			return items.map(str)

		with pytest.raises(JSCompilationError, match="can only be called"):
			f.emit()


# =============================================================================
# Name resolution
# =============================================================================


class TestNameResolution:
	def test_browser_globals(self):
		@javascript
		def f():
			return Math.max(document.body.clientWidth, 10)

		assert "Math.max(document.body.clientWidth, 10)" in f.emit()

	def test_global_constant_inlined(self):
		@javascript
		def f():
			return GREETING

		assert "return 'hello';" in f.emit()

	def test_global_dict_inlined_as_object(self):
		@javascript
		def f():
			return LIMITS

		assert "{'min': 0, 'max': 10}" in f.emit()

	def test_closure_captured_by_value(self):
		color = "#00ff00"

		@javascript
		def f(el):
			el.style.color = color

		code = f.emit()
		assert "el.style.color = '#00ff00';" in code
		assert "color" not in code.replace("style.color", "")
		assert set(f.deps) == {"color"}

	def test_closures_compiled_per_function_object(self):
		def make(value):
			@javascript
			def f():
				return value

			return f

		assert "return 1;" in make(1).emit()
		assert "return 2;" in make(2).emit()

	def test_global_js_function_referenced_by_name(self):
		code = uses_helper.emit()
		assert "return helper() + 1;" in code
		assert "function helper" not in code

	def test_plain_python_function_rejected(self):
		@javascript
		def f():
			return plain_python()

		with pytest.raises(JSCompilationError, match="@javascript"):
			f.emit()

	def test_module_rejected(self):
		import os

		@javascript
		def f():
			return os.getcwd()

		with pytest.raises(JSCompilationError, match="Module"):
			f.emit()

	def test_unbound_name(self):
		@javascript
		def f():
			return undefined_name  # noqa: F821  # pyright: ignore[reportUndefinedVariable]

		with pytest.raises(JSCompilationError, match="Unbound name"):
			f.emit()

	def test_unsupported_constant(self):
		data = {1, 2}

		@javascript
		def f():
			return data

		with pytest.raises(JSCompilationError, match="Cannot capture 'data'"):
			f.emit()


# =============================================================================
# Functions and caching
# =============================================================================


class TestJsFunction:
	def test_name_and_arity(self):
		@javascript
		def f(a, b):
			return a

		assert f.name == "f"
		assert f.n_args == 2

	def test_callable_from_python(self):
		@javascript
		def add(a, b):
			return a + b

		assert add(1, 2) == 3

	def test_decorator_is_cached(self):
		def f():
			return 1

		assert javascript(f) is javascript(f)

	def test_emit_is_deterministic(self):
		@javascript
		def f(x):
			return {"a": x, "b": [1, 2]}

		assert f.emit() == f.emit()

	def test_lambda(self):
		f = javascript(lambda: console.log("loaded"))
		assert f.name is None
		assert f.n_args == 0
		assert f.emit() == "() => console.log('loaded')"

	def test_lambda_with_params(self):
		f = javascript(lambda a, b: a + b)
		assert f.emit() == "(a, b) => a + b"

	def test_default_parameters_rejected(self):
		@javascript
		def f(a=1):
			return a

		with pytest.raises(JSCompilationError, match="Default parameter"):
			f.emit()

	def test_varargs_rejected(self):
		@javascript
		def f(*args):
			return args

		with pytest.raises(JSCompilationError, match="positional"):
			f.emit()

	def test_non_function_rejected(self):
		with pytest.raises(JSCompilationError):
			javascript(len)  # pyright: ignore[reportArgumentType]
