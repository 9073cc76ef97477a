"""Tests for tree-sitter backed identifier discovery."""

from tree_sitter import Parser

from twoslash.core.identifiers import get_identifier_text_spans


def test_sample_parses_cleanly(typescript_parser: Parser) -> None:
    tree = typescript_parser.parse(b"const value = foo.bar\n")
    assert not tree.root_node.has_error


def test_identifiers_in_document_order() -> None:
    spans = get_identifier_text_spans("const value = foo.bar\n", "ts")
    assert spans == [(6, 11, "value"), (14, 17, "foo"), (18, 21, "bar")]


def test_offsets_are_shifted_by_file_offset() -> None:
    spans = get_identifier_text_spans("let a\n", "ts", file_offset=10)
    assert spans == [(14, 15, "a")]


def test_type_and_property_identifiers() -> None:
    spans = get_identifier_text_spans("type A = { b: string }\n", "ts")
    assert [text for _, _, text in spans] == ["A", "b"]


def test_keywords_and_literals_are_skipped() -> None:
    spans = get_identifier_text_spans("const x = 'hello' + 42\n", "ts")
    assert [text for _, _, text in spans] == ["x"]


def test_javascript_grammar() -> None:
    spans = get_identifier_text_spans("function greet(name) { return name }\n", "js")
    assert [text for _, _, text in spans] == ["greet", "name", "name"]


def test_tsx_expression_identifier() -> None:
    spans = get_identifier_text_spans("const el = <div title={caption} />\n", "tsx")
    texts = [text for _, _, text in spans]
    assert texts[0] == "el"
    assert "caption" in texts


def test_offsets_are_character_indices_for_non_ascii_source() -> None:
    code = "const s = 'é'; const x = 1\n"
    spans = get_identifier_text_spans(code, "ts")
    assert [text for _, _, text in spans] == ["s", "x"]
    start, end, _ = spans[1]
    assert code[start:end] == "x"


def test_unsupported_extension_yields_nothing() -> None:
    assert get_identifier_text_spans("body { color: red }", "css") == []


def test_json_has_no_identifiers() -> None:
    assert get_identifier_text_spans('{"a": 1}', "json") == []
