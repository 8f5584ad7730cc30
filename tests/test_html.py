import pytest
from sprinkle.html import (
	Markup,
	body,
	br,
	button,
	div,
	head,
	html,
	input,
	p,
	render,
	script,
	style_to_css,
	title,
)


class TestRender:
	def test_compact(self):
		assert render(div(p("hi"), id="root"), indent=0) == '<div id="root"><p>hi</p></div>'

	def test_indented(self):
		assert render(div(p("hi"))) == "<div>\n  <p>\n    hi\n  </p>\n</div>"

	def test_empty_element(self):
		assert render(div(), indent=0) == "<div></div>"

	def test_html_gets_doctype(self):
		doc = html(head(title("T")), body(p("x")))
		out = render(doc, indent=0)
		assert out.startswith("<!DOCTYPE html><html><head><title>T</title></head>")

	def test_indexing_adds_children(self):
		el = div(id="a")[p("one"), p("two")]
		assert render(el, indent=0) == '<div id="a"><p>one</p><p>two</p></div>'

	def test_children_only_once(self):
		with pytest.raises(ValueError):
			div(p("x"))[p("y")]

	def test_self_closing(self):
		assert render(br(), indent=0) == "<br />"
		with pytest.raises(ValueError):
			br()["x"]


class TestEscaping:
	def test_text_is_escaped(self):
		assert render(p("<b>&</b>"), indent=0) == "<p>&lt;b&gt;&amp;&lt;/b&gt;</p>"

	def test_attribute_is_escaped(self):
		assert render(div(title='"x"'), indent=0) == '<div title="&quot;x&quot;"></div>'

	def test_markup_is_raw(self):
		out = render(div(Markup("<b>bold</b>")), indent=0)
		assert out == "<div><b>bold</b></div>"

	def test_script_content(self):
		out = render(script(Markup("if (a && b < c) {}")), indent=0)
		assert out == "<script>if (a && b < c) {}</script>"


class TestAttributes:
	def test_boolean_attributes(self):
		out = render(input(disabled=True, checked=False, value=None), indent=0)
		assert out == "<input disabled />"

	def test_numbers(self):
		assert render(input(maxlength=3), indent=0) == '<input maxlength="3" />'

	def test_renamed_attributes(self):
		out = render(div(className="box", data_id="1"), indent=0)
		assert out == '<div class="box" data-id="1"></div>'

	def test_style_mapping(self):
		out = render(button("Go", style={"fontSize": 16, "zIndex": 10}), indent=0)
		assert out == '<button style="font-size:16px;z-index:10">Go</button>'


class TestStyleToCss:
	def test_kebab_case(self):
		assert style_to_css({"backgroundColor": "#fff"}) == "background-color:#fff"

	def test_units(self):
		assert style_to_css({"padding": 20, "margin": 0, "opacity": 0.5}) == (
			"padding:20px;margin:0;opacity:0.5"
		)

	def test_none_skipped(self):
		assert style_to_css({"color": None, "display": "block"}) == "display:block"

	def test_custom_property(self):
		assert style_to_css({"--accentColor": "red"}) == "--accentColor:red"

	def test_bool_rejected(self):
		with pytest.raises(ValueError):
			style_to_css({"display": True})
