from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Range = tuple[int, int]
HighlightRange = tuple[int, int, str | None]


class Position(BaseModel):
    line: int
    character: int


class VirtualFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: int
    filename: str
    filepath: str
    content: str
    extension: str


class CompilerOptionDeclaration(BaseModel):
    """Schema entry for one compiler option.

    ``type`` is either a primitive kind name or an enum map from the lower-cased
    spelling accepted in a directive to the value handed to the backend.
    """

    name: str
    type: Literal["number", "string", "boolean", "list"] | dict[str, Any]
    element: "CompilerOptionDeclaration | None" = None


CompilerOptionDeclaration.model_rebuild()  # necessary for recursive types


FlagType = Literal["compilerOptions", "handbookOptions", "tag", "unknown"]


class FlagNotation(BaseModel):
    type: FlagType
    name: str
    value: Any
    start: int
    end: int


# ---------------------------------------------------------------------------
# Backend payloads
# ---------------------------------------------------------------------------


class QuickInfo(BaseModel):
    text: str
    docs: str | None = None


class CompletionEntry(BaseModel):
    name: str
    kind: str = ""
    sort_text: str = ""


class Diagnostic(BaseModel):
    filepath: str
    start: int
    length: int
    code: int
    category: int = 1
    message: str


class OutputFile(BaseModel):
    name: str
    text: str


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class _NodeBase(BaseModel):
    start: int = Field(ge=-1)
    length: int
    line: int | None = None
    character: int | None = None


class _InfoNode(_NodeBase):
    text: str
    docs: str | None = None
    target: str


class HoverNode(_InfoNode):
    type: Literal["hover"] = "hover"


class QueryNode(_InfoNode):
    type: Literal["query"] = "query"


class HighlightNode(_InfoNode):
    type: Literal["highlight"] = "highlight"
    label: str | None = None


class CompletionNode(_NodeBase):
    type: Literal["completion"] = "completion"
    completions: list[CompletionEntry]
    completions_prefix: str


class ErrorNode(_NodeBase):
    type: Literal["error"] = "error"
    code: int
    filename: str
    id: str
    text: str
    level: int


class TagNode(_NodeBase):
    type: Literal["tag"] = "tag"
    name: str
    text: str | None = None


TwoslashNode = Annotated[
    HoverNode | QueryNode | HighlightNode | CompletionNode | ErrorNode | TagNode,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Options, run state and result
# ---------------------------------------------------------------------------


class HandbookOptions(BaseModel):
    """Behaviour options; directives use the camelCase alias (``// @noErrors``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    errors: list[int] = Field(default_factory=list)
    no_errors: bool | list[int] = False
    no_errors_cutted: bool = False
    no_error_validation: bool = False
    no_static_semantic_info: bool = False
    show_emit: bool = False
    show_emitted_file: str | None = None
    keep_notations: bool = False


class TwoslashMeta(BaseModel):
    extension: str
    compiler_options: dict[str, Any]
    handbook_options: HandbookOptions
    removals: list[Range] = Field(default_factory=list)
    flag_notations: list[FlagNotation] = Field(default_factory=list)
    virtual_files: list[VirtualFile] = Field(default_factory=list)
    position_queries: list[int] = Field(default_factory=list)
    position_completions: list[int] = Field(default_factory=list)
    position_highlights: list[HighlightRange] = Field(default_factory=list)


class TwoslashReturn(BaseModel):
    code: str
    nodes: list[TwoslashNode]
    meta: TwoslashMeta

    @property
    def extension(self) -> str:
        return self.meta.extension

    @property
    def queries(self) -> list[QueryNode]:
        return [n for n in self.nodes if isinstance(n, QueryNode)]

    @property
    def completions(self) -> list[CompletionNode]:
        return [n for n in self.nodes if isinstance(n, CompletionNode)]

    @property
    def errors(self) -> list[ErrorNode]:
        return [n for n in self.nodes if isinstance(n, ErrorNode)]

    @property
    def highlights(self) -> list[HighlightNode]:
        return [n for n in self.nodes if isinstance(n, HighlightNode)]

    @property
    def hovers(self) -> list[HoverNode]:
        return [n for n in self.nodes if isinstance(n, HoverNode)]

    @property
    def tags(self) -> list[TagNode]:
        return [n for n in self.nodes if isinstance(n, TagNode)]
