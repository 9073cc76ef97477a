from collections.abc import Callable
from typing import cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from twoslash.core.languages import grammar_for_extension

IdentifierSpan = tuple[int, int, str]

_IDENTIFIER_TYPES = frozenset(
    {
        "identifier",
        "private_property_identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
        "statement_identifier",
        "type_identifier",
    }
)


def _byte_to_char_index(content: str) -> Callable[[int], int]:
    if content.isascii():
        return lambda index: index
    table: list[int] = []
    for i, char in enumerate(content):
        table.extend([i] * len(char.encode("utf-8")))
    table.append(len(content))
    return table.__getitem__


def get_identifier_text_spans(content: str, extension: str, file_offset: int = 0) -> list[IdentifierSpan]:
    """Return ``(start, end, text)`` for every identifier in ``content``, in source order.

    Offsets are character indices shifted by ``file_offset`` so they line up with
    the blob the virtual file was cut from.
    """
    grammar = grammar_for_extension(extension)
    if grammar is None:
        return []

    parser = get_parser(cast(SupportedLanguage, grammar))
    tree = parser.parse(content.encode("utf-8"))
    to_index = _byte_to_char_index(content)

    spans: list[IdentifierSpan] = []
    stack: list[Node] = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type in _IDENTIFIER_TYPES:
            start = to_index(node.start_byte)
            end = to_index(node.end_byte)
            if end > start:
                spans.append((start + file_offset, end + file_offset, content[start:end]))
            continue
        stack.extend(reversed(node.children))
    return spans
