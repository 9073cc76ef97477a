import logging
from collections.abc import Sequence

from twoslash.errors import UndocumentedError
from twoslash.models import ErrorNode, HandbookOptions

logger = logging.getLogger(__name__)


def _render_diagnostics(title: str, errors: Sequence[ErrorNode]) -> str:
    lines = [f"[{e.code}] {e.start} - {e.text}" for e in errors]
    return title + "\n  " + "\n  ".join(lines)


def validate_code_for_errors(errors: Sequence[ErrorNode], handbook_options: HandbookOptions, vfs_root: str) -> None:
    """Check that every reported error code was declared with ``// @errors``."""
    expected = handbook_options.errors
    unspecified = [e for e in errors if e.code and e.code not in expected]

    missing = sorted(set(expected) - {e.code for e in errors})
    if missing:
        logger.warning("Expected error codes were not reported: %s", " ".join(map(str, missing)))

    if not unspecified:
        return

    found = list(dict.fromkeys(e.code for e in unspecified))
    all_codes = list(dict.fromkeys(e.code for e in errors))
    if expected:
        hint = "The existing annotation specified " + " ".join(map(str, expected))
    else:
        hint = "Expected: // @errors: " + " ".join(map(str, all_codes))

    by_file: dict[str, list[ErrorNode]] = {}
    for error in errors:
        by_file.setdefault(error.filename, []).append(error)
    rendered = "\n\n".join(_render_diagnostics(vfs_root + name, errs) for name, errs in by_file.items())

    raise UndocumentedError(
        found,
        f"These errors were not marked as being expected: {' '.join(map(str, found))}.\n{hint}",
        f"Compiler Errors:\n\n{rendered}",
    )
