"""Tests for splitting a code blob into virtual files."""

from twoslash.core.files import RESERVED_DEFAULT_FILENAME, split_files


def test_single_file_uses_default_name() -> None:
    [file] = split_files("const a = 1\n", "index.ts", "/")
    assert (file.offset, file.filename, file.filepath, file.extension) == (0, "index.ts", "/index.ts", "ts")
    assert file.content == "const a = 1\n"


def test_filename_line_starts_a_new_file() -> None:
    code = "const a = 1\n// @filename: b.ts\nconst b = 2\n"
    first, second = split_files(code, "index.ts", "/")

    assert (first.filename, first.offset, first.content) == ("index.ts", 0, "const a = 1\n")
    assert (second.filename, second.offset) == ("b.ts", 12)
    assert second.content == "// @filename: b.ts\nconst b = 2\n"
    assert second.filepath == "/b.ts"


def test_contents_concatenate_to_the_input() -> None:
    code = "x\n// @filename: a.js\nlet a\n// @filename: b.json\n{}\n"
    files = split_files(code, "index.ts", "/")
    assert "".join(f.content for f in files) == code
    assert [f.extension for f in files] == ["ts", "js", "json"]
    assert all(code[f.offset : f.offset + len(f.content)] == f.content for f in files)


def test_leading_filename_produces_no_empty_default_file() -> None:
    code = "// @filename: a.ts\nexport const a = 1\n"
    [file] = split_files(code, "index.ts", "/")
    assert file.filename == "a.ts"


def test_explicit_default_name_reserves_a_different_leading_name() -> None:
    code = "x\n// @filename: index.ts\nconst a = 1\n"
    first, second = split_files(code, "index.ts", "/")
    assert first.filename == RESERVED_DEFAULT_FILENAME
    assert second.filename == "index.ts"


def test_trailing_whitespace_in_filename_is_ignored() -> None:
    [file] = split_files("// @filename: a.ts  \nlet a\n", "index.ts", "/")
    assert file.filename == "a.ts"


def test_root_prefixes_filepath() -> None:
    [file] = split_files("let a\n", "index.ts", "/project/")
    assert file.filepath == "/project/index.ts"


def test_empty_code() -> None:
    assert split_files("", "index.ts", "/") == []
