import re

from twoslash.core.languages import get_extension
from twoslash.models import VirtualFile

_RE_FILENAME_MARKERS = re.compile(r"^//[ \t]?@filename: (.+)$", re.MULTILINE)

RESERVED_DEFAULT_FILENAME = "__index__.ts"


def split_files(code: str, default_filename: str, root: str) -> list[VirtualFile]:
    """Split ``code`` into virtual files at each ``// @filename:`` line.

    Text before the first filename line belongs to ``default_filename``, unless
    that name is declared explicitly later on.
    """
    matches = list(_RE_FILENAME_MARKERS.finditer(code))
    all_filenames = {m.group(1).rstrip() for m in matches}
    current = RESERVED_DEFAULT_FILENAME if default_filename in all_filenames else default_filename

    files: list[VirtualFile] = []
    index = 0
    for match in matches:
        offset = match.start()
        content = code[index:offset]
        if content:
            files.append(_make_file(index, current, root, content))
        current = match.group(1).rstrip()
        index = offset

    if index < len(code):
        files.append(_make_file(index, current, root, code[index:]))

    return files


def _make_file(offset: int, filename: str, root: str, content: str) -> VirtualFile:
    return VirtualFile(
        offset=offset,
        filename=filename,
        filepath=root + filename,
        content=content,
        extension=get_extension(filename),
    )
