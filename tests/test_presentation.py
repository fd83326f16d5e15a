"""Tests for plantcache.presentation."""

from plantcache.presentation import HtmlPresenter, Presenter, Target, retarget_map

PLANTUML_MAP = (
    '<map id="plantuml_map" name="plantuml_map">\n'
    '<area shape="rect" id="id1" href="https://example.com" coords="0,0,10,10"/>\n'
    "</map>\n"
)


class TestProtocols:
    def test_html_presenter_is_presenter(self):
        assert isinstance(HtmlPresenter(), Presenter)

    def test_list_is_target(self):
        assert isinstance([], Target)


class TestRetargetMap:
    def test_renames_map(self):
        out = retarget_map(PLANTUML_MAP, "KEY123")
        assert out.startswith('<map id="KEY123" name="KEY123">')
        assert "plantuml_map" not in out

    def test_area_ids_untouched(self):
        assert 'id="id1"' in retarget_map(PLANTUML_MAP, "KEY123")

    def test_no_map_element_unchanged(self):
        assert retarget_map("", "KEY") == ""


class TestHtmlPresenter:
    def test_ascii_escaped_in_pre(self):
        target: list[str] = []
        HtmlPresenter().present_ascii(target, "A -> <B>")
        assert target == ['<pre class="plantuml-ascii">A -&gt; &lt;B&gt;</pre>']

    def test_svg_inline_without_xml_declaration(self):
        target: list[str] = []
        HtmlPresenter().present_svg(target, '<?xml version="1.0" encoding="UTF-8"?><svg></svg>')
        assert target == ["<svg></svg>"]

    def test_svg_without_declaration_unchanged(self):
        target: list[str] = []
        HtmlPresenter().present_svg(target, "<svg></svg>")
        assert target == ["<svg></svg>"]

    def test_image_with_map(self):
        target: list[str] = []
        HtmlPresenter().present_image_with_map(target, "aW1n", PLANTUML_MAP, "KEY")
        assert target[0] == '<img src="data:image/png;base64,aW1n" usemap="#KEY">'
        assert target[1].startswith('<map id="KEY" name="KEY">')

    def test_image_with_blank_map(self):
        target: list[str] = []
        HtmlPresenter().present_image_with_map(target, "aW1n", "\n", "KEY")
        assert target == ['<img src="data:image/png;base64,aW1n">']
