from public_info_mcp_server.core.renderer import decode_entities, render_html


def test_script_and_style_blocks_are_removed_with_their_content():
    html = (
        "<html><head><style>body { color: red; }</style>"
        "<script type='text/javascript'>var secret = '<p>leak</p>';</script></head>"
        "<body><p>Visible</p></body></html>"
    )
    text = render_html(html)
    assert text == "Visible"
    assert "secret" not in text
    assert "leak" not in text
    assert "color" not in text


def test_script_removal_is_case_insensitive_and_spans_lines():
    html = "<p>before</p><SCRIPT>\nalert('x');\n</SCRIPT><p>after</p>"
    assert render_html(html) == "before\n\nafter"


def test_unterminated_script_drops_the_rest():
    assert render_html("<p>kept</p><script>document.write('gone')") == "kept"


def test_paragraphs_become_blank_lines_and_breaks_newlines():
    html = "<p>One</p><p>Two<br>Three<br/>Four</p>"
    assert render_html(html) == "One\n\nTwo\nThree\nFour"


def test_list_items_become_bullets():
    html = "<ul><li>alpha</li><li>beta</li></ul>"
    assert render_html(html) == "- alpha\n- beta"


def test_entities_are_decoded():
    html = "<p>Tom&nbsp;&amp;&nbsp;Jerry &lt;3 &quot;cheese&quot; &#39;n&#x27; crackers</p>"
    assert render_html(html) == "Tom & Jerry <3 \"cheese\" 'n' crackers"


def test_double_escaped_ampersand_decodes_once():
    assert decode_entities("&amp;lt;") == "&lt;"


def test_whitespace_is_collapsed_and_trimmed():
    html = "\n\n   <div>  lots    of\tspace  </div>\n\n\n\n<div>next</div>   "
    assert render_html(html) == "lots of space\n\nnext"


def test_comments_are_stripped():
    assert render_html("a<!-- hidden -->b") == "ab"


def test_empty_input_gives_empty_string():
    assert render_html("") == ""
    assert render_html("<div><span></span></div>") == ""


def test_render_is_idempotent_on_plain_text():
    samples = [
        "Plain sentence.",
        "  leading and trailing  ",
        "line one\n\n\n\nline two\t\ttabbed",
        "- bullet\n- another",
    ]
    for sample in samples:
        once = render_html(sample)
        assert render_html(once) == once
