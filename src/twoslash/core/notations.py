import math
import re
from collections.abc import Callable, Sequence
from typing import Any

from pydantic.alias_generators import to_camel

from twoslash.errors import InvalidOptionValue, MismatchedCutMarkers
from twoslash.models import CompilerOptionDeclaration, FlagNotation, HandbookOptions, Range, TwoslashMeta

_RE_CONFIG_BOOLEAN = re.compile(r"^//[ \t]?@(\w+)\r?$", re.MULTILINE)
_RE_CONFIG_VALUE = re.compile(r"^//[ \t]?@(\w+):[ \t]?(.+?)\r?$", re.MULTILINE)
_RE_ANNOTATE_MARKERS = re.compile(r"^[ \t]*//[ \t]*\^(\?|\||\^+)( .*)?\r?$", re.MULTILINE)
_RE_CUT_BEFORE = re.compile(r"^[\t\v\f ]*//[ \t]?---cut(?:-before)?---\r?$", re.MULTILINE)
_RE_CUT_AFTER = re.compile(r"^[\t\v\f ]*//[ \t]?---cut-after---\r?$", re.MULTILINE)
_RE_CUT_START = re.compile(r"^[\t\v\f ]*//[ \t]?---cut-start---\r?$", re.MULTILINE)
_RE_CUT_END = re.compile(r"^[\t\v\f ]*//[ \t]?---cut-end---\r?$", re.MULTILINE)

# Directive spelling (camelCase) -> HandbookOptions field name
HANDBOOK_OPTION_FIELDS = {to_camel(name): name for name in HandbookOptions.model_fields}


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def _parse_number(text: str) -> int | float | None:
    # plain decimal literals only, no digit separators or nan/inf
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_primitive(name: str, value: Any, kind: str) -> Any:
    if kind == "boolean":
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in ("", "true"):
            return True
        if lowered == "false":
            return False
    elif kind == "number":
        if isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value):
            return value
        number = _parse_number(str(value).strip())
        if number is not None:
            return number
    elif kind == "string":
        if isinstance(value, str):
            return value
    else:
        raise InvalidOptionValue(
            name,
            value,
            f"The only recognized primitives are number, string and boolean. Got {kind} with {value}.",
            "This is likely a typo.",
        )
    raise InvalidOptionValue(name, value, f"Got {value} for {name} but it is not a valid {kind}.")


def get_option_value_from_map(name: str, key: Any, option_map: dict[str, Any]) -> Any:
    result = option_map.get(str(key).strip().lower()) if isinstance(key, str) else None
    if result is None:
        raise InvalidOptionValue(
            name,
            key,
            f"Got {key} for {name} but it is not a supported value by the TS compiler.",
            f"Allowed values: {','.join(option_map)}",
        )
    return result


def _parse_compiler_option(decl: CompilerOptionDeclaration, value: Any) -> Any:
    if isinstance(decl.type, dict):
        return get_option_value_from_map(decl.name, value, decl.type)
    if decl.type != "list":
        return parse_primitive(decl.name, value, decl.type)

    if not isinstance(value, str) or decl.element is None:
        raise InvalidOptionValue(
            decl.name, value, f"Got {value} for {decl.name} but it expects a comma separated list."
        )
    element_type = decl.element.type
    items = [item.strip() for item in value.split(",")]
    if isinstance(element_type, dict):
        return [get_option_value_from_map(decl.name, item, element_type) for item in items]
    return [parse_primitive(decl.name, item, element_type) for item in items]


def _parse_code_list(name: str, value: str) -> list[int]:
    try:
        return [int(code) for code in value.split()]
    except ValueError:
        raise InvalidOptionValue(
            name, value, f"Got {value} for {name} but it expects space separated error codes."
        ) from None


def _parse_handbook_option(name: str, value: Any) -> Any:
    field = HandbookOptions.model_fields[HANDBOOK_OPTION_FIELDS[name]]
    if not isinstance(value, str):
        # a bare directive only makes sense for switches
        if field.annotation is bool or name == "noErrors":
            return value
        raise InvalidOptionValue(name, value, f"{name} expects a value, e.g. `// @{name}: ...`.")
    if name == "errors":
        return _parse_code_list(name, value)
    if name == "noErrors":
        if value.strip() in ("true", "false"):
            return value.strip() == "true"
        return _parse_code_list(name, value)
    if field.annotation is bool:
        return parse_primitive(name, value, "boolean")
    return value


# ---------------------------------------------------------------------------
# Flags
# ---------------------------------------------------------------------------


def parse_flag(
    name: str,
    value: Any,
    start: int,
    end: int,
    custom_tags: Sequence[str],
    option_declarations: Sequence[CompilerOptionDeclaration],
) -> FlagNotation:
    if name in custom_tags:
        return FlagNotation(type="tag", name=name, value=value, start=start, end=end)

    lowered = name.lower()
    decl = next((d for d in option_declarations if d.name.lower() == lowered), None)
    if decl is not None:
        return FlagNotation(
            type="compilerOptions", name=decl.name, value=_parse_compiler_option(decl, value), start=start, end=end
        )

    if name in HANDBOOK_OPTION_FIELDS:
        return FlagNotation(
            type="handbookOptions", name=name, value=_parse_handbook_option(name, value), start=start, end=end
        )

    return FlagNotation(type="unknown", name=name, value=value, start=start, end=end)


def find_flag_notations(
    code: str,
    custom_tags: Sequence[str],
    option_declarations: Sequence[CompilerOptionDeclaration],
) -> list[FlagNotation]:
    """Find ``// @name`` and ``// @name: value`` directives, ordered by position."""
    notations: list[FlagNotation] = []

    for match in _RE_CONFIG_BOOLEAN.finditer(code):
        notations.append(
            parse_flag(match.group(1), True, match.start(), match.end() + 1, custom_tags, option_declarations)
        )

    for match in _RE_CONFIG_VALUE.finditer(code):
        name = match.group(1)
        if name == "filename":
            continue
        notations.append(
            parse_flag(name, match.group(2).strip(), match.start(), match.end() + 1, custom_tags, option_declarations)
        )

    notations.sort(key=lambda n: n.start)
    return notations


# ---------------------------------------------------------------------------
# Cuts
# ---------------------------------------------------------------------------


def find_cut_notations(code: str) -> list[Range]:
    removals: list[Range] = []

    cut_before = list(_RE_CUT_BEFORE.finditer(code))
    cut_after = list(_RE_CUT_AFTER.finditer(code))
    cut_start = list(_RE_CUT_START.finditer(code))
    cut_end = list(_RE_CUT_END.finditer(code))

    if cut_before:
        removals.append((0, cut_before[-1].end() + 1))
    if cut_after:
        removals.append((cut_after[0].start(), len(code)))

    if len(cut_start) != len(cut_end):
        raise MismatchedCutMarkers(f"You have {len(cut_start)} cut-starts and {len(cut_end)} cut-ends")

    for start, end in zip(cut_start, cut_end, strict=True):
        if start.start() > end.start():
            raise MismatchedCutMarkers(
                f"You have a cut-start at {start.start()} which is after the cut-end at {end.start()}"
            )
        removals.append((start.start(), end.end() + 1))

    return removals


# ---------------------------------------------------------------------------
# Position markers
# ---------------------------------------------------------------------------


def find_query_markers(code: str, meta: TwoslashMeta, index_of_line_above: Callable[[int], int]) -> TwoslashMeta:
    """Collect ``^?``, ``^|`` and ``^^^`` markers into ``meta``.

    A marker points at the same column on the line above it; the marker line
    itself is scheduled for removal.
    """
    if "//" not in code:
        return meta

    for match in _RE_ANNOTATE_MARKERS.finditer(code):
        kind = match.group(1)
        index = match.start()
        meta.removals.append((index, match.end() + 1))

        marker_index = match.group(0).index("^")
        target = index_of_line_above(index + marker_index)
        if kind == "?":
            meta.position_queries.append(target)
        elif kind == "|":
            meta.position_completions.append(target)
        else:
            label = match.group(2).strip() if match.group(2) else None
            meta.position_highlights.append((target, target + len(kind) + 1, label or None))

    return meta
