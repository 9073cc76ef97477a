import re

from twoslash.models import Position

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+$")


class PositionConverter:
    """Converts between absolute indices and line/character positions of one code block."""

    def __init__(self, code: str) -> None:
        self.lines: list[str] = _LINE_RE.findall(code)
        if not self.lines or self.lines[-1].endswith("\n"):
            self.lines.append("")

    def index_to_position(self, index: int) -> Position:
        character = index
        line = 0
        for line_text in self.lines:
            if character < len(line_text):
                break
            if line == len(self.lines) - 1:
                break
            character -= len(line_text)
            line += 1
        return Position(line=line, character=character)

    def position_to_index(self, line: int, character: int) -> int:
        return sum(len(text) for text in self.lines[:line]) + character

    def index_of_line_above(self, index: int) -> int:
        pos = self.index_to_position(index)
        return self.position_to_index(max(pos.line - 1, 0), pos.character)
