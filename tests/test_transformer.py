"""Tests for the markdown → node tree transformer."""

import json

import pytest
from markdown_it.token import Token
from markdown_it.tree import SyntaxTreeNode

from stepguide.errors import (
    InvalidAlertSeverity,
    MalformedShellBlock,
    NestingTooDeep,
    ShellBlockRule,
    UnsupportedToken,
)
from stepguide.models import ParseOptions
from stepguide.parser.transformer import (
    parse_markdown_content,
    parse_raw_markdown,
    transform,
)


def _text(nodes) -> str:
    """Concatenate the plain text under *nodes*."""
    out = []
    for node in nodes:
        if isinstance(node, str):
            out.append(node)
        else:
            out.append(_text(node.get("subnodes", [])))
    return "".join(out)


class TestEmpty:
    def test_empty_string(self):
        assert parse_raw_markdown("") == []

    def test_whitespace_only(self):
        assert parse_raw_markdown("  \n\t\r\n\n") == []


class TestCodeBlocks:
    def test_javascript_block_is_highlighted(self):
        nodes = parse_raw_markdown('~~~js\nconsole.log("Hello, world!");\n~~~')
        assert len(nodes) == 1
        code = nodes[0]
        assert code["kind"] == "code"
        assert code["language"] == "js"
        assert _text(code["subnodes"]) == 'console.log("Hello, world!");'
        assert {"kind": "literal.string.double", "subnodes": ['"Hello, world!"']} in code["subnodes"]

    def test_shell_block_uses_transcript_parser(self):
        nodes = parse_raw_markdown("```sh\n# List pwd\nls -la\n# total 123\n# ...\n```")
        code = nodes[0]
        assert code["kind"] == "code"
        assert code["language"] == "sh"
        description, command, output = code["subnodes"]
        assert description == {"kind": "description", "lines": ["List pwd"]}
        assert command["kind"] == "command"
        assert _text(command["subnodes"]) == "ls -la"
        assert output == {"kind": "output", "lines": ["total 123", "..."]}

    def test_multi_line_command_is_highlighted_as_one(self):
        nodes = parse_raw_markdown("```bash\n# Say hi\necho \\\n  hi\n# hi\n```")
        command = nodes[0]["subnodes"][1]
        assert _text(command["subnodes"]) == "echo \\\n  hi"
        assert command["subnodes"][0] == {"kind": "name.builtin", "subnodes": ["echo"]}

    def test_every_shell_language(self):
        for language in ("bash", "console", "fish", "shell", "sh", "zsh"):
            nodes = parse_raw_markdown(f"```{language}\n# d\nls\n# o\n```")
            kinds = [sub["kind"] for sub in nodes[0]["subnodes"]]
            assert kinds == ["description", "command", "output"], language

    def test_empty_shell_block(self):
        assert parse_raw_markdown("```sh\n```") == [
            {"kind": "code", "language": "sh", "subnodes": []},
        ]

    def test_malformed_shell_block_aborts_parse(self):
        with pytest.raises(MalformedShellBlock) as exc_info:
            parse_raw_markdown("# Guide\n\n```sh\nls\n```\n")
        assert exc_info.value.rule is ShellBlockRule.MISSING_LEADING_COMMENT

    def test_indented_code_block(self):
        assert parse_raw_markdown("    Indented\n    code\n    block") == [
            {"kind": "code", "language": "plaintext", "subnodes": ["Indented\ncode\nblock"]},
        ]

    def test_fence_without_language(self):
        assert parse_raw_markdown("```\nplain text\n```") == [
            {"kind": "code", "language": "plaintext", "subnodes": ["plain text"]},
        ]

    def test_unknown_language_falls_back_to_plain_text(self):
        assert parse_raw_markdown("```no-such-language\nsome text\n```") == [
            {"kind": "code", "language": "no-such-language", "subnodes": ["some text"]},
        ]

    def test_custom_shell_languages(self):
        options = ParseOptions(shell_languages=frozenset({"powershell"}))
        nodes = parse_raw_markdown("```powershell\n# d\nGet-Item .\n# o\n```", options)
        assert [sub["kind"] for sub in nodes[0]["subnodes"]] == ["description", "command", "output"]
        # sh is no longer a transcript, so no grammar is enforced
        nodes = parse_raw_markdown("```sh\nls\n```", options)
        assert _text(nodes[0]["subnodes"]) == "ls"


class TestHeadings:
    def test_setext_h1(self):
        assert parse_raw_markdown("H1\n==") == [{"kind": "heading", "depth": 1, "subnodes": ["H1"]}]

    def test_setext_h2(self):
        assert parse_raw_markdown("H2\n--") == [{"kind": "heading", "depth": 2, "subnodes": ["H2"]}]

    def test_atx_levels(self):
        nodes = parse_raw_markdown("# H1\n## H2\n### H3\n#### H4\n##### H5\n###### H6")
        assert nodes == [
            {"kind": "heading", "depth": depth, "subnodes": [f"H{depth}"]}
            for depth in range(1, 7)
        ]

    def test_inline_markup_in_heading(self):
        assert parse_raw_markdown("# How to use `some-command`") == [
            {"kind": "heading", "depth": 1, "subnodes": [
                "How to use ", {"kind": "codespan", "subnodes": ["some-command"]},
            ]},
        ]


class TestInline:
    def test_single_paragraph(self):
        assert parse_raw_markdown("Hello") == [{"kind": "paragraph", "subnodes": ["Hello"]}]

    def test_hard_line_break(self):
        assert parse_raw_markdown("One  \nTwo") == [
            {"kind": "paragraph", "subnodes": ["One", {"kind": "br"}, "Two"]},
        ]

    def test_soft_line_break_stays_in_text(self):
        assert parse_raw_markdown("one\ntwo") == [{"kind": "paragraph", "subnodes": ["one\ntwo"]}]

    def test_codespan(self):
        assert parse_raw_markdown("`someVar`") == [
            {"kind": "paragraph", "subnodes": [{"kind": "codespan", "subnodes": ["someVar"]}]},
        ]

    def test_strikethrough(self):
        assert parse_raw_markdown("~~double~~") == [
            {"kind": "paragraph", "subnodes": [{"kind": "del", "subnodes": ["double"]}]},
        ]

    def test_emphasis(self):
        assert parse_raw_markdown("*asterisk* and _underscore_") == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "em", "subnodes": ["asterisk"]},
                " and ",
                {"kind": "em", "subnodes": ["underscore"]},
            ]},
        ]

    def test_strong(self):
        assert parse_raw_markdown("__underscore__ and **asterisk**") == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "strong", "subnodes": ["underscore"]},
                " and ",
                {"kind": "strong", "subnodes": ["asterisk"]},
            ]},
        ]


class TestBlockquotesAndAlerts:
    def test_empty_blockquote(self):
        assert parse_raw_markdown(">") == [{"kind": "blockquote", "subnodes": []}]

    def test_regular_blockquote(self):
        assert parse_raw_markdown("> block...\n> ...quote") == [
            {"kind": "blockquote", "subnodes": [
                {"kind": "paragraph", "subnodes": ["block...\n...quote"]},
            ]},
        ]

    def test_note_alert(self):
        assert parse_raw_markdown("> [!NOTE]\n> This is a note") == [
            {"kind": "alert", "severity": "note", "subnodes": [
                {"kind": "paragraph", "subnodes": ["This is a note"]},
            ]},
        ]

    def test_all_severities(self):
        doc = """
# Example

> [!NOTE]
> Highlights information that users should take into account, even when skimming.

> [!TIP]  
> Optional information to help a user be more successful.
>
> This has two spaces after the [!TIP] which prevents ESLint from running lines together.

> [!IMPORTANT]
> Crucial information necessary for users to succeed.

> [!WARNING]
> Critical content demanding immediate user attention due to potential risks.

> [!CAUTION]
> Negative potential consequences of an action.
"""
        assert parse_raw_markdown(doc) == [
            {"kind": "heading", "depth": 1, "subnodes": ["Example"]},
            {"kind": "alert", "severity": "note", "subnodes": [
                {"kind": "paragraph", "subnodes": [
                    "Highlights information that users should take into account, even when skimming.",
                ]},
            ]},
            {"kind": "alert", "severity": "tip", "subnodes": [
                {"kind": "paragraph", "subnodes": [
                    "Optional information to help a user be more successful.",
                ]},
                {"kind": "paragraph", "subnodes": [
                    "This has two spaces after the [!TIP] which prevents ESLint from running lines together.",
                ]},
            ]},
            {"kind": "alert", "severity": "important", "subnodes": [
                {"kind": "paragraph", "subnodes": ["Crucial information necessary for users to succeed."]},
            ]},
            {"kind": "alert", "severity": "warning", "subnodes": [
                {"kind": "paragraph", "subnodes": [
                    "Critical content demanding immediate user attention due to potential risks.",
                ]},
            ]},
            {"kind": "alert", "severity": "caution", "subnodes": [
                {"kind": "paragraph", "subnodes": ["Negative potential consequences of an action."]},
            ]},
        ]

    def test_marker_alone_in_first_paragraph(self):
        assert parse_raw_markdown("> [!WARNING]\n>\n> Second paragraph") == [
            {"kind": "alert", "severity": "warning", "subnodes": [
                {"kind": "paragraph", "subnodes": []},
                {"kind": "paragraph", "subnodes": ["Second paragraph"]},
            ]},
        ]

    def test_marker_only_alert_keeps_empty_paragraph(self):
        assert parse_raw_markdown("> [!NOTE]\n") == [
            {"kind": "alert", "severity": "note", "subnodes": [
                {"kind": "paragraph", "subnodes": []},
            ]},
        ]

    def test_line_break_after_marker_is_dropped_before_markup(self):
        assert parse_raw_markdown("> [!NOTE]\n> **b** rest") == [
            {"kind": "alert", "severity": "note", "subnodes": [
                {"kind": "paragraph", "subnodes": [
                    {"kind": "strong", "subnodes": ["b"]}, " rest",
                ]},
            ]},
        ]

    def test_empty_label_raises(self):
        with pytest.raises(InvalidAlertSeverity) as exc_info:
            parse_raw_markdown("> [!]\n> No label")
        assert exc_info.value.label == ""

    def test_escaped_marker_stays_blockquote(self):
        assert parse_raw_markdown("> \\[!NOTE]\n> Literal") == [
            {"kind": "blockquote", "subnodes": [
                {"kind": "paragraph", "subnodes": ["[!NOTE]\nLiteral"]},
            ]},
        ]

    def test_alert_keeps_inline_markup(self):
        assert parse_raw_markdown("> [!TIP]\n> Use *this*") == [
            {"kind": "alert", "severity": "tip", "subnodes": [
                {"kind": "paragraph", "subnodes": ["Use ", {"kind": "em", "subnodes": ["this"]}]},
            ]},
        ]

    def test_unknown_severity_raises(self):
        with pytest.raises(InvalidAlertSeverity) as exc_info:
            parse_raw_markdown("> [!DANGER]\n> Not a GitHub alert type")
        assert exc_info.value.label == "DANGER"

    def test_lowercase_label_is_case_sensitive_by_default(self):
        with pytest.raises(InvalidAlertSeverity):
            parse_raw_markdown("> [!note]\n> lowercase")

    def test_lowercase_label_when_case_insensitive(self):
        options = ParseOptions(alert_case_sensitive=False)
        assert parse_raw_markdown("> [!note]\n> lowercase", options) == [
            {"kind": "alert", "severity": "note", "subnodes": [
                {"kind": "paragraph", "subnodes": ["lowercase"]},
            ]},
        ]

    def test_marker_followed_by_text_on_same_line_stays_blockquote(self):
        nodes = parse_raw_markdown("> [!NOTE] same line")
        assert nodes[0]["kind"] == "blockquote"

    def test_first_child_not_paragraph_stays_blockquote(self):
        nodes = parse_raw_markdown("> - [!NOTE]\n> - item")
        assert nodes[0]["kind"] == "blockquote"
        assert nodes[0]["subnodes"][0]["kind"] == "list"

    def test_nested_blockquote_alert(self):
        nodes = parse_raw_markdown("> outer\n>\n> > [!TIP]\n> > inner")
        outer = nodes[0]
        assert outer["kind"] == "blockquote"
        assert outer["subnodes"][1] == {"kind": "alert", "severity": "tip", "subnodes": [
            {"kind": "paragraph", "subnodes": ["inner"]},
        ]}


class TestLists:
    def test_ordered(self):
        assert parse_raw_markdown("1. One\n2. Two") == [
            {"kind": "list", "ordered": True, "subnodes": [
                {"kind": "list_item", "subnodes": ["One"]},
                {"kind": "list_item", "subnodes": ["Two"]},
            ]},
        ]

    def test_unordered(self):
        assert parse_raw_markdown("- One\n- Two") == [
            {"kind": "list", "ordered": False, "subnodes": [
                {"kind": "list_item", "subnodes": ["One"]},
                {"kind": "list_item", "subnodes": ["Two"]},
            ]},
        ]

    def test_loose_list_keeps_paragraphs(self):
        assert parse_raw_markdown("- One\n\n- Two") == [
            {"kind": "list", "ordered": False, "subnodes": [
                {"kind": "list_item", "subnodes": [{"kind": "paragraph", "subnodes": ["One"]}]},
                {"kind": "list_item", "subnodes": [{"kind": "paragraph", "subnodes": ["Two"]}]},
            ]},
        ]


class TestHorizontalRule:
    def test_hr(self):
        assert parse_raw_markdown("---\n") == [{"kind": "hr"}]


class TestHtml:
    def test_comment(self):
        assert parse_raw_markdown("<!-- comment -->") == [{"kind": "comment", "subnodes": ["comment"]}]

    def test_div(self):
        assert parse_raw_markdown("<div>Block text</div>") == [
            {"kind": "html", "block": True, "pre": False, "subnodes": ["<div>Block text</div>"]},
        ]

    def test_pre(self):
        assert parse_raw_markdown("<pre>Preformatted</pre>") == [
            {"kind": "html", "block": True, "pre": True, "subnodes": ["<pre>Preformatted</pre>"]},
        ]

    def test_inline_span(self):
        assert parse_raw_markdown("<span>Inline text</span>") == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "html", "block": False, "subnodes": ["<span>"]},
                "Inline text",
                {"kind": "html", "block": False, "subnodes": ["</span>"]},
            ]},
        ]

    def test_custom_tag(self):
        assert parse_raw_markdown("<not-recognised />") == [
            {"kind": "html", "block": True, "pre": False, "subnodes": ["<not-recognised />"]},
        ]


class TestImagesAndLinks:
    def test_image_without_title(self):
        assert parse_raw_markdown("![Alt text but no title](https://example.com/image.png)") == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "image", "href": "https://example.com/image.png",
                 "subnodes": ["Alt text but no title"]},
            ]},
        ]

    def test_image_with_title(self):
        assert parse_raw_markdown('![Alt text with title](https://example.com/image.png "Title")') == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "image", "href": "https://example.com/image.png", "title": "Title",
                 "subnodes": ["Alt text with title"]},
            ]},
        ]

    def test_image_via_label(self):
        doc = '![Labelled image with title][label]\n\n[label]: https://example.com/image.png "Title"'
        assert parse_raw_markdown(doc) == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "image", "href": "https://example.com/image.png", "title": "Title",
                 "subnodes": ["Labelled image with title"]},
            ]},
        ]

    def test_link_without_title(self):
        assert parse_raw_markdown("[Link with no title](https://example.com)") == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "link", "href": "https://example.com", "subnodes": ["Link with no title"]},
            ]},
        ]

    def test_link_with_title(self):
        assert parse_raw_markdown('[Link with text and title](https://example.com "Title")') == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "link", "href": "https://example.com", "title": "Title",
                 "subnodes": ["Link with text and title"]},
            ]},
        ]

    def test_angle_bracket_autolink(self):
        assert parse_raw_markdown("<https://example.com>") == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "link", "href": "https://example.com", "subnodes": ["https://example.com"]},
            ]},
        ]

    def test_shared_label(self):
        doc = "[Linked via a label][label]\n\n[Also linked via a label][label]\n\n[label]: https://example.com"
        assert parse_raw_markdown(doc) == [
            {"kind": "paragraph", "subnodes": [
                {"kind": "link", "href": "https://example.com", "subnodes": ["Linked via a label"]},
            ]},
            {"kind": "paragraph", "subnodes": [
                {"kind": "link", "href": "https://example.com", "subnodes": ["Also linked via a label"]},
            ]},
        ]


class TestTables:
    def test_simple_table(self):
        doc = "| Header 1 | Header 2 |\n| --: | :-: |\n| Cell 1 | Cell 2 |\n| Cell 3 | Cell 4 |"
        assert parse_raw_markdown(doc) == [{
            "kind": "table",
            "align": ["right", "center"],
            "subnodes": [
                {"kind": "table_header", "subnodes": [
                    {"kind": "table_cell", "subnodes": ["Header 1"]},
                    {"kind": "table_cell", "subnodes": ["Header 2"]},
                ]},
                {"kind": "table_row", "subnodes": [
                    {"kind": "table_cell", "subnodes": ["Cell 1"]},
                    {"kind": "table_cell", "subnodes": ["Cell 2"]},
                ]},
                {"kind": "table_row", "subnodes": [
                    {"kind": "table_cell", "subnodes": ["Cell 3"]},
                    {"kind": "table_cell", "subnodes": ["Cell 4"]},
                ]},
            ],
        }]

    def test_unaligned_columns_are_none(self):
        nodes = parse_raw_markdown("| a | b |\n| :-- | --- |\n| 1 | 2 |")
        assert nodes[0]["align"] == ["left", None]


class TestFrontmatter:
    def test_frontmatter_node_first(self):
        assert parse_raw_markdown("---\ntitle: My Title\n---\n# Heading") == [
            {"kind": "frontmatter", "data": {"title": "My Title"}},
            {"kind": "heading", "depth": 1, "subnodes": ["Heading"]},
        ]

    def test_empty_frontmatter_adds_nothing(self):
        assert parse_raw_markdown("---\n---\n# Heading") == [
            {"kind": "heading", "depth": 1, "subnodes": ["Heading"]},
        ]

    def test_parse_markdown_content_with_attributes(self):
        assert parse_markdown_content("Hi", {"author": "me"}) == [
            {"kind": "frontmatter", "data": {"author": "me"}},
            {"kind": "paragraph", "subnodes": ["Hi"]},
        ]

    def test_parse_markdown_content_without_attributes(self):
        assert parse_markdown_content("Hi", {}) == [{"kind": "paragraph", "subnodes": ["Hi"]}]


class TestUnsupportedTokens:
    def test_unknown_kind_raises(self):
        token = SyntaxTreeNode([Token("bogus", "", 0)]).children[0]
        with pytest.raises(UnsupportedToken) as exc_info:
            transform(token)
        assert exc_info.value.kind == "bogus"
        assert "bogus" in str(exc_info.value)


class TestNesting:
    def test_unbounded_by_default(self):
        nodes = parse_raw_markdown("> " * 10 + "deep")
        assert nodes[0]["kind"] == "blockquote"

    def test_max_depth_exceeded(self):
        with pytest.raises(NestingTooDeep):
            parse_raw_markdown("> > > deep", ParseOptions(max_depth=2))

    def test_max_depth_not_exceeded(self):
        assert parse_raw_markdown("Hello", ParseOptions(max_depth=2)) == [
            {"kind": "paragraph", "subnodes": ["Hello"]},
        ]


class TestWholeDocument:
    def test_module_docstring_example(self):
        doc = "# Heading\n\n> This is a *blockquote.*\n\n## Subheading\n\nSome  \ntext\nhere.\n"
        assert parse_raw_markdown(doc) == [
            {"kind": "heading", "depth": 1, "subnodes": ["Heading"]},
            {"kind": "blockquote", "subnodes": [
                {"kind": "paragraph", "subnodes": [
                    "This is a ", {"kind": "em", "subnodes": ["blockquote."]},
                ]},
            ]},
            {"kind": "heading", "depth": 2, "subnodes": ["Subheading"]},
            {"kind": "paragraph", "subnodes": ["Some", {"kind": "br"}, "text\nhere."]},
        ]

    def test_tree_is_json_serialisable(self):
        doc = "---\ntitle: T\ndate: 2024-01-01\n1: one\n---\n# T\n\n```sh\n# d\nls\n# o\n```\n\n> [!NOTE]\n> n\n"
        nodes = parse_raw_markdown(doc)
        assert nodes[0]["data"] == {"title": "T", "date": "2024-01-01", "1": "one"}
        assert json.loads(json.dumps(nodes)) == nodes
