"""
Translation of a restricted subset of Python to JavaScript, used to describe
browser-side behavior next to the server code that renders the page.

The `@javascript` decorator wraps a Python function in a `JsFunction`, which is
translated on first emit. `JsSource` wraps a function definition already
written in JavaScript.
"""

from sprinkle.javascript.errors import JSCompilationError as JSCompilationError
from sprinkle.javascript.function import FUNCTION_CACHE as FUNCTION_CACHE
from sprinkle.javascript.function import JsCallable as JsCallable
from sprinkle.javascript.function import JsFunction as JsFunction
from sprinkle.javascript.function import JsSource as JsSource
from sprinkle.javascript.function import (
	clear_function_cache as clear_function_cache,
)
from sprinkle.javascript.function import javascript as javascript
from sprinkle.javascript.function import js_source as js_source
