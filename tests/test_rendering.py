from arduinolab.rendering import (
    Bold,
    CodeBlock,
    Italic,
    Link,
    TextRun,
    TokenKind,
    Underline,
    render,
    render_to_dicts,
    split_fences,
    tokenize,
)


def test_empty_string_renders_nothing():
    assert render("") == []


def test_plain_text():
    assert render("plain text") == [TextRun("plain text")]


def test_bold():
    assert render("**bold**") == [Bold([TextRun("bold")])]


def test_italic_nested_in_bold():
    nodes = render("**bold with *italic* inside**")
    assert nodes == [Bold([
        TextRun("bold with "),
        Italic([TextRun("italic")]),
        TextRun(" inside"),
    ])]


def test_underline_nested_in_bold():
    assert render("**a __b__**") == [Bold([TextRun("a "), Underline([TextRun("b")])])]


def test_bold_resolved_before_italic():
    assert render("**bold** and *italic*") == [
        Bold([TextRun("bold")]),
        TextRun(" and "),
        Italic([TextRun("italic")]),
    ]


def test_every_bold_span_is_found():
    assert render("**a** x **b**") == [
        Bold([TextRun("a")]),
        TextRun(" x "),
        Bold([TextRun("b")]),
    ]


def test_underline_before_italic_on_same_segment():
    assert render("*a __b__ c*") == [
        TextRun("*a "),
        Underline([TextRun("b")]),
        TextRun(" c*"),
    ]


def test_code_block_between_prose():
    nodes = render("before ```code here``` after")
    assert nodes == [TextRun("before "), CodeBlock("code here"), TextRun(" after")]


def test_code_block_contents_are_not_styled():
    nodes = render("```\nif (a **b** __c__) { x = *p; }\n```")
    assert nodes == [CodeBlock("if (a **b** __c__) { x = *p; }")]


def test_link():
    assert render("[click](http://x)") == [Link("click", "http://x")]


def test_link_label_is_literal():
    assert render("[**not bold**](http://x)") == [Link("**not bold**", "http://x")]


def test_text_around_links_is_styled_separately():
    nodes = render("**see** [docs](https://arduino.cc) and *try*")
    assert nodes == [
        Bold([TextRun("see")]),
        TextRun(" "),
        Link("docs", "https://arduino.cc"),
        TextRun(" and "),
        Italic([TextRun("try")]),
    ]


def test_markers_do_not_pair_across_a_link():
    nodes = render("**[a](u)**")
    assert nodes == [TextRun("**"), Link("a", "u"), TextRun("**")]


def test_unterminated_fence_stays_literal():
    nodes = render("look ```int x = 1;")
    assert nodes == [TextRun("look ```int x = 1;")]


def test_odd_number_of_fences_pairs_left_to_right():
    nodes = render("a ```one``` b ```two")
    assert nodes == [TextRun("a "), CodeBlock("one"), TextRun(" b ```two")]


def test_unbalanced_markers_degrade_to_text():
    assert render("2 ** 3 and __init") == [TextRun("2 ** 3 and __init")]
    assert render("*lonely") == [TextRun("*lonely")]


def test_markers_do_not_span_lines():
    assert render("**start\nend**") == [TextRun("**start\nend**")]


def test_rendering_is_repeatable():
    content = "**a *b*** ```c``` [d](e) __f__"
    assert render(content) == render(content)


def test_split_fences_segments():
    assert list(split_fences("x```y```z")) == [(False, "x"), (True, "y"), (False, "z")]


def test_tokenize_kinds():
    kinds = [t.kind for t in tokenize("**a** __b__ *c* [d](e)")]
    assert kinds == [
        TokenKind.BOLD_MARK, TokenKind.TEXT, TokenKind.BOLD_MARK, TokenKind.TEXT,
        TokenKind.UNDERLINE_MARK, TokenKind.TEXT, TokenKind.UNDERLINE_MARK, TokenKind.TEXT,
        TokenKind.ITALIC_MARK, TokenKind.TEXT, TokenKind.ITALIC_MARK, TokenKind.TEXT,
        TokenKind.LINK,
    ]


def test_render_to_dicts():
    assert render_to_dicts("**hi** ```x```") == [
        {'type': 'bold', 'children': [{'type': 'text', 'text': 'hi'}]},
        {'type': 'text', 'text': ' '},
        {'type': 'code_block', 'code': 'x'},
    ]
