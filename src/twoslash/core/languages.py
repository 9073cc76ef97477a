from twoslash.errors import UnknownExtension

_LANGUAGE_ALIASES = {
    "cjs": "js",
    "cts": "ts",
    "javascript": "js",
    "js": "js",
    "jsn": "json",
    "json": "json",
    "jsx": "jsx",
    "map": "json",
    "mjs": "js",
    "mts": "ts",
    "ts": "ts",
    "tsx": "tsx",
    "typescript": "ts",
}

# Grammar used by tree-sitter for each extension
_EXTENSION_GRAMMAR_MAP = {
    "js": "javascript",
    "jsx": "javascript",
    "json": "json",
    "ts": "typescript",
    "tsx": "tsx",
}

SUPPORTED_EXTENSIONS = frozenset({"js", "jsx", "ts", "tsx"})


def types_to_extension(language: str) -> str:
    """Normalise a code-fence language tag to a file extension."""
    resolved = _LANGUAGE_ALIASES.get(language.strip().lower())
    if resolved is None:
        raise UnknownExtension(
            "Unknown TypeScript extension given to Twoslash",
            f"Received {language} but Twoslash only accepts: {', '.join(_LANGUAGE_ALIASES)}",
        )
    return resolved


def grammar_for_extension(extension: str) -> str | None:
    return _EXTENSION_GRAMMAR_MAP.get(extension.lower())


def get_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1]


def remove_ts_extension(filename: str) -> str:
    """Strip the extension, mapping ``.d.ts`` and ``.map`` outputs back to their source name."""
    if filename.endswith(".d.ts"):
        filename = filename[: -len(".d.ts")] + ".ts"
    if filename.endswith(".map"):
        filename = filename[: -len(".map")]
    head, sep, tail = filename.rpartition(".")
    if not sep or not tail or "/" in tail:
        return filename
    return head
