"""
Demo page: a few interactive widgets rendered on the server, each shipping its
own inline script.
"""

from sprinkle.behaviors import Behavior, On, ToggleStyle
from sprinkle.html import HTMLElement, body, button, div, h1, head, html, title
from sprinkle.javascript import javascript
from sprinkle.js import console, document
from sprinkle.script import Script

PAGE_TITLE = "Sprinkle SSR Demo"

GLOW_SHADOW = "0 0 10px #00ff00"


@javascript
def wire_glow_button():
	button = document.getElementById("glowButton")
	if not button:
		return

	def glow():
		button.style.boxShadow = GLOW_SHADOW

	def unglow():
		button.style.boxShadow = "none"

	button.addEventListener("mouseover", glow)
	button.addEventListener("mouseout", unglow)


def glowing_button() -> HTMLElement:
	button_style = {
		"padding": "10px 20px",
		"fontSize": 16,
		"border": "none",
		"borderRadius": 5,
		"cursor": "pointer",
		"transition": "box-shadow 0.3s ease",
	}
	return div(
		button("Glow Me", id="glowButton", style=button_style),
		Script(wire_glow_button),
	)


@javascript
def wire_animated_element():
	element = document.getElementById("animatedElement")
	if not element:
		return
	element.addEventListener(
		"click",
		lambda: element.animate(
			[
				{"transform": "scale(1)"},
				{"transform": "scale(1.1)"},
				{"transform": "scale(1)"},
			],
			{"duration": 300, "iterations": 1},
		),
	)


def animated_element() -> HTMLElement:
	element_style = {
		"padding": 20,
		"backgroundColor": "#f0f0f0",
		"cursor": "pointer",
		"display": "inline-block",
	}
	return div(
		div("Click to Animate", id="animatedElement", style=element_style),
		Script(wire_animated_element),
	)


toggle_popover = Behavior(
	On("popoverTrigger", "click", ToggleStyle("popover", "display", "block", "none")),
)


def popover() -> HTMLElement:
	button_style = {"padding": "10px 20px", "fontSize": 16, "cursor": "pointer"}
	popover_style = {
		"display": "none",
		"position": "absolute",
		"backgroundColor": "#f9f9f9",
		"border": "1px solid #ccc",
		"padding": 10,
		"zIndex": 1000,
	}
	return div(style={"position": "relative"})[
		button("Show Popover", id="popoverTrigger", style=button_style),
		div("This is a popover!", id="popover", style=popover_style),
		Script(toggle_popover),
	]


@javascript
def wire_example_component():
	button = document.getElementById("myButton")
	container = document.getElementById("exampleComponent")
	if not button or not container:
		console.error("Button or container not found!")
		return

	def on_click():
		console.log("Button clicked!")
		new_element = document.createElement("p")
		new_element.textContent = "Button was clicked!"
		new_element.style.color = "#007bff"
		container.appendChild(new_element)

	button.addEventListener("click", on_click)


@javascript
def myHelperFunction():
	console.log("Helper function called")


def example_component() -> HTMLElement:
	return div(
		id="exampleComponent",
		style={"padding": 20, "fontFamily": "Arial, sans-serif"},
	)[
		h1("My Component", style={"color": "#333"}),
		button("Click me", id="myButton", style={"marginBottom": 20}),
		Script(wire_example_component),
		glowing_button(),
		animated_element(),
		popover(),
		Script(myHelperFunction, execute=False),
	]


def app_page() -> HTMLElement:
	return html(
		head(title(PAGE_TITLE)),
		body(style={"margin": 0, "padding": 0, "backgroundColor": "#f4f4f4"})[
			example_component()
		],
	)


def create_app():
	"""The demo application, serving `app_page` at `/`."""
	from sprinkle.app import App, Route

	return App(routes=[Route("/", app_page)])
