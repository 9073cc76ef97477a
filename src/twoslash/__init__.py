from twoslash.backend import BackendCache, DiagnosticRule, InMemoryBackend
from twoslash.core.ports.backend import BackendFactory, TypeInfoBackend
from twoslash.core.positions import PositionConverter
from twoslash.core.ranges import merge_ranges, remove_code_ranges, resolve_node_positions
from twoslash.core.twoslasher import Twoslasher, create_twoslasher, twoslasher
from twoslash.errors import (
    IncompatibleOptions,
    InvalidOptionValue,
    MismatchedCutMarkers,
    MissingEmitTarget,
    TwoslashError,
    UndocumentedError,
    UnknownExtension,
    UnknownFlag,
    UnresolvedMarker,
)
from twoslash.models import (
    CompletionEntry,
    CompletionNode,
    Diagnostic,
    ErrorNode,
    HandbookOptions,
    HighlightNode,
    HoverNode,
    OutputFile,
    QueryNode,
    QuickInfo,
    TagNode,
    TwoslashMeta,
    TwoslashNode,
    TwoslashReturn,
    VirtualFile,
)

__all__ = [
    "BackendCache",
    "BackendFactory",
    "CompletionEntry",
    "CompletionNode",
    "Diagnostic",
    "DiagnosticRule",
    "ErrorNode",
    "HandbookOptions",
    "HighlightNode",
    "HoverNode",
    "InMemoryBackend",
    "IncompatibleOptions",
    "InvalidOptionValue",
    "MismatchedCutMarkers",
    "MissingEmitTarget",
    "OutputFile",
    "PositionConverter",
    "QueryNode",
    "QuickInfo",
    "TagNode",
    "TwoslashError",
    "TwoslashMeta",
    "TwoslashNode",
    "TwoslashReturn",
    "Twoslasher",
    "TypeInfoBackend",
    "UndocumentedError",
    "UnknownExtension",
    "UnknownFlag",
    "UnresolvedMarker",
    "VirtualFile",
    "create_twoslasher",
    "merge_ranges",
    "remove_code_ranges",
    "resolve_node_positions",
    "twoslasher",
]
