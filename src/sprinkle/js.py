"""Browser globals for use in @javascript functions.

Usage:
    from sprinkle.js import document, console

    @javascript
    def hello():
        el = document.getElementById("greeting")
        if el:
            console.log(el.textContent)  # -> console.log(el.textContent)

Each name resolves to the JavaScript identifier of the same name. They are
placeholders for the transpiler and have no behavior in Python.
"""

from sprinkle.javascript.nodes import JSIdentifier

document = JSIdentifier("document")
window = JSIdentifier("window")
console = JSIdentifier("console")
navigator = JSIdentifier("navigator")
localStorage = JSIdentifier("localStorage")

Math = JSIdentifier("Math")
JSON = JSIdentifier("JSON")
Date = JSIdentifier("Date")
Number = JSIdentifier("Number")
Object = JSIdentifier("Object")
Array = JSIdentifier("Array")

setTimeout = JSIdentifier("setTimeout")
clearTimeout = JSIdentifier("clearTimeout")
setInterval = JSIdentifier("setInterval")
clearInterval = JSIdentifier("clearInterval")
requestAnimationFrame = JSIdentifier("requestAnimationFrame")
fetch = JSIdentifier("fetch")
alert = JSIdentifier("alert")

undefined = JSIdentifier("undefined")

__all__ = [
	"Array",
	"Date",
	"JSON",
	"Math",
	"Number",
	"Object",
	"alert",
	"clearInterval",
	"clearTimeout",
	"console",
	"document",
	"fetch",
	"localStorage",
	"navigator",
	"requestAnimationFrame",
	"setInterval",
	"setTimeout",
	"undefined",
	"window",
]
