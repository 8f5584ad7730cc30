import re
from collections.abc import Mapping
from typing import NamedTuple, Self, Union, overload

__all__ = [
	# Core types and functions
	"HTMLElement",
	"Markup",
	"define_tag",
	"define_self_closing_tag",
	"render",
	"style_to_css",
	# Standard tags
	"a",
	"body",
	"button",
	"div",
	"footer",
	"h1",
	"h2",
	"h3",
	"head",
	"header",
	"html",
	"label",
	"li",
	"main",
	"nav",
	"ol",
	"p",
	"pre",
	"script",
	"section",
	"span",
	"style",
	"textarea",
	"title",
	"ul",
	# Self-closing tags
	"br",
	"hr",
	"img",
	"input",
	"link",
	"meta",
]


class Markup(str):
	"""Text that is already valid HTML and is rendered without escaping."""

	def __repr__(self) -> str:
		return f"Markup({str.__repr__(self)})"


AttrValue = str | int | float | bool | None | Mapping[str, object]
Child = Union["HTMLElement", str]


class HTMLElement(NamedTuple):
	"""
	A lightweight representation of an HTML node:
	  - tag: the element's tag name (e.g. "div", "span", "html")
	  - attributes: mapping of attribute name to its value
	  - children: other HTMLElements or string content (`Markup` is not escaped)
	"""

	tag: str
	attributes: Mapping[str, AttrValue]
	children: tuple[Child, ...]
	whitespace_sensitive: bool = False
	self_closing: bool = False

	def __getitem__(self, children: Child | tuple[Child, ...]) -> "HTMLElement":  # pyright: ignore[reportIncompatibleMethodOverride]
		if self.self_closing:
			raise ValueError("Self-closing tags cannot have children")
		if len(self.children) > 0:
			raise ValueError(f"Multiple calls with children for <{self.tag}>")

		# Handle single child or tuple of children
		if isinstance(children, (tuple, list)) and not isinstance(
			children, HTMLElement
		):
			child_tuple = tuple(children)
		else:
			child_tuple = (children,)

		return HTMLElement(
			self.tag,
			self.attributes,
			child_tuple,
			self.whitespace_sensitive,
			self.self_closing,
		)

	def __repr__(self) -> str:
		return f"HTMLElement(tag={self.tag!r}, attributes={dict(self.attributes)!r}, children={self.children!r})"


def define_tag(
	name: str,
	default_attrs: dict[str, AttrValue] | None = None,
	whitespace_sensitive: bool = False,
):
	"""
	Defines a standard tag (non-self-closing) with optional default attributes.

	The returned function can be called in these ways:
	1. tag() -> empty element (children can be added by indexing)
	2. tag(**attrs) -> empty element (children can be added by indexing)
	3. tag(*children, **attrs) -> element with children
	4. tag(**attrs)[children] -> element with children
	"""

	defaults: dict[str, AttrValue] = default_attrs or {}

	@overload
	def create_element(**attrs: AttrValue) -> HTMLElement: ...

	@overload
	def create_element(*children: Child, **attrs: AttrValue) -> HTMLElement: ...

	def create_element(*children: Child, **attrs: AttrValue) -> HTMLElement:
		return HTMLElement(
			tag=name,
			attributes=defaults | attrs,
			children=children,
			whitespace_sensitive=whitespace_sensitive,
		)

	return create_element


def define_self_closing_tag(
	name: str, default_attrs: dict[str, AttrValue] | None = None
):
	"""
	Defines a self-closing tag (e.g. <br />, <img />, <meta />, etc.)
	Self-closing tags cannot have children and do not support indexing.
	"""
	defaults: dict[str, AttrValue] = default_attrs or {}

	def create_element(**attrs: AttrValue) -> HTMLElement:
		return HTMLElement(
			tag=name,
			attributes=defaults | attrs,
			children=(),
			self_closing=True,
		)

	return create_element


def render(
	elt: HTMLElement,
	indent: int = 2,
	level: int = 0,
) -> str:
	"""Render the element with optional indentation.

	An `html` element is prefixed with `<!DOCTYPE html>`. Use `indent=0` for
	compact output.
	"""
	lines: list[str] = []
	_render_into(elt, lines, " " * indent, level)
	separator = "\n" if indent > 0 else ""
	return separator.join(lines)


def _render_into(
	elt: HTMLElement, lines: list[str], indent: str = " ", level: int = 0
) -> None:
	offset = indent * level

	# Add doctype for html tag
	if elt.tag == "html":
		lines.append(offset + "<!DOCTYPE html>")

	open_tag = _build_open_tag(elt)

	if elt.self_closing:
		lines.append(offset + open_tag)
		return

	closing_tag = f"</{elt.tag}>"
	if len(elt.children) == 0:
		lines.append(offset + open_tag + closing_tag)
		return

	# Whitespace-sensitive tags are rendered onto a single "line" (which may
	# contain newlines, but is never re-indented)
	if elt.whitespace_sensitive:
		content = _render_children_inline(elt)
		lines.append(offset + open_tag + content + closing_tag)
	else:
		lines.append(offset + open_tag)
		_render_children_into(elt, lines, indent, level + 1)
		lines.append(offset + closing_tag)


def _build_open_tag(elt: HTMLElement) -> str:
	tag = f"<{elt.tag}"
	for key, val in elt.attributes.items():
		if val is None or val is False:
			continue
		key = attrs_map.get(key, key)
		key = key.replace("_", "-")
		if val is True:
			tag += f" {key}"
			continue
		if isinstance(val, Mapping):
			val = style_to_css(val)
		tag += f' {key}="{_escape(str(val))}"'
	tag += " />" if elt.self_closing else ">"
	return tag


def _render_child(child: str) -> str:
	if isinstance(child, Markup):
		return str(child)
	return _escape(child)


def _render_children_inline(elt: HTMLElement) -> str:
	parts: list[str] = []
	for child in elt.children:
		if isinstance(child, str):
			parts.append(_render_child(child))
		else:
			_render_into(child, parts, "", 0)
	return "".join(parts)


def _render_children_into(
	elt: HTMLElement, lines: list[str], indent: str, level: int
) -> None:
	for child in elt.children:
		if isinstance(child, str):
			lines.append((indent * level) + _render_child(child))
		else:
			_render_into(child, lines, indent, level)


# Special attribute names, applied before the '_' -> '-' replacement
attrs_map = {
	"classname": "class",
	"className": "class",
	"class_": "class",
	"htmlFor": "for",
	"for_": "for",
}


def _escape(text: str) -> str:
	return (
		text.replace("&", "&amp;")
		.replace("<", "&lt;")
		.replace(">", "&gt;")
		.replace('"', "&quot;")
		.replace("'", "&#x27;")
	)


###############################################################################
# Inline styles
###############################################################################

# Numeric values for these properties are emitted without a `px` suffix
UNITLESS_PROPERTIES = frozenset(
	{
		"animationIterationCount",
		"columnCount",
		"flex",
		"flexGrow",
		"flexShrink",
		"fontWeight",
		"gridColumn",
		"gridRow",
		"lineHeight",
		"opacity",
		"order",
		"orphans",
		"tabSize",
		"widows",
		"zIndex",
		"zoom",
	}
)

_UPPER = re.compile(r"([A-Z])")


def style_to_css(style: Mapping[str, object]) -> str:
	"""Serialize a camelCase style mapping to a CSS declaration list.

	`{"fontSize": 16, "zIndex": 1000}` -> `font-size:16px;z-index:1000`.
	None values are skipped. Custom properties (`--name`) are kept as-is.
	"""
	parts: list[str] = []
	for prop, value in style.items():
		if value is None:
			continue
		if isinstance(value, bool):
			raise ValueError(f"Invalid value for style property '{prop}': {value}")
		if isinstance(value, (int, float)):
			if value != 0 and prop not in UNITLESS_PROPERTIES:
				value = f"{value}px"
		name = prop if prop.startswith("--") else _UPPER.sub(r"-\1", prop).lower()
		parts.append(f"{name}:{value}")
	return ";".join(parts)


html = define_tag("html")

# Standard HTML tags
a = define_tag("a")
body = define_tag("body")
button = define_tag("button")
div = define_tag("div")
footer = define_tag("footer")
h1 = define_tag("h1")
h2 = define_tag("h2")
h3 = define_tag("h3")
head = define_tag("head")
header = define_tag("header")
label = define_tag("label")
li = define_tag("li")
main = define_tag("main")
nav = define_tag("nav")
ol = define_tag("ol")
p = define_tag("p")
pre = define_tag("pre", whitespace_sensitive=True)
script = define_tag("script", whitespace_sensitive=True)
section = define_tag("section")
span = define_tag("span")
style = define_tag("style", whitespace_sensitive=True)
textarea = define_tag("textarea", whitespace_sensitive=True)
title = define_tag("title")
ul = define_tag("ul")

# Self-closing tags
br = define_self_closing_tag("br")
hr = define_self_closing_tag("hr")
img = define_self_closing_tag("img")
input = define_self_closing_tag("input")
link = define_self_closing_tag("link")
meta = define_self_closing_tag("meta")
