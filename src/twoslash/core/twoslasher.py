import logging
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Literal

from twoslash.backend.cache import BackendCache
from twoslash.config import get_vfs_root
from twoslash.core.defaults import DEFAULT_COMPILER_OPTIONS, DEFAULT_OPTION_DECLARATIONS, JSX_PRESERVE
from twoslash.core.files import split_files
from twoslash.core.identifiers import IdentifierSpan, get_identifier_text_spans
from twoslash.core.languages import SUPPORTED_EXTENSIONS, get_extension, remove_ts_extension, types_to_extension
from twoslash.core.notations import HANDBOOK_OPTION_FIELDS, find_cut_notations, find_flag_notations, find_query_markers
from twoslash.core.ports.backend import BackendFactory, TypeInfoBackend
from twoslash.core.positions import PositionConverter
from twoslash.core.ranges import (
    is_in_range,
    merge_ranges,
    ranges_intersect,
    remove_code_ranges,
    resolve_node_positions,
)
from twoslash.core.validation import validate_code_for_errors
from twoslash.errors import IncompatibleOptions, MissingEmitTarget, UnknownFlag, UnresolvedMarker
from twoslash.models import (
    CompilerOptionDeclaration,
    CompletionNode,
    ErrorNode,
    HandbookOptions,
    HighlightNode,
    HighlightRange,
    HoverNode,
    QueryNode,
    QuickInfo,
    TagNode,
    TwoslashMeta,
    TwoslashNode,
    TwoslashReturn,
    VirtualFile,
)

logger = logging.getLogger(__name__)

ShouldGetHoverInfo = Callable[[str, int, str], bool]
NodeFilter = Callable[[TwoslashNode], bool]
HandbookInput = HandbookOptions | Mapping[str, Any]

_RE_TRAILING_WORD = re.compile(r"\S+$")


def _handbook_dict(options: HandbookInput | None) -> dict[str, Any]:
    if options is None:
        return {}
    if isinstance(options, HandbookOptions):
        return options.model_dump(exclude_unset=True)
    return {HANDBOOK_OPTION_FIELDS.get(key, key): value for key, value in options.items()}


def _always(_target: str, _start: int, _filename: str) -> bool:
    return True


class Twoslasher:
    """Runs samples through the directive pipeline against backends built by ``backend_factory``.

    Backends are cached per effective compiler options in ``cache``; pass an
    existing :class:`BackendCache` to share it between instances or ``False`` to
    build a fresh backend on every call.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        *,
        compiler_options: Mapping[str, Any] | None = None,
        handbook_options: HandbookInput | None = None,
        custom_tags: Sequence[str] = (),
        option_declarations: Sequence[CompilerOptionDeclaration] | None = None,
        should_get_hover_info: ShouldGetHoverInfo | None = None,
        filter_node: NodeFilter | None = None,
        vfs_root: str | None = None,
        cache: BackendCache | Literal[False] | None = None,
    ) -> None:
        self.backend_factory = backend_factory
        self.compiler_options = dict(compiler_options or {})
        self.handbook_options = _handbook_dict(handbook_options)
        self.custom_tags = list(custom_tags)
        if option_declarations is None:
            option_declarations = DEFAULT_OPTION_DECLARATIONS
        self.option_declarations = list(option_declarations)
        self.should_get_hover_info = should_get_hover_info or _always
        self.filter_node = filter_node
        root = (vfs_root or get_vfs_root()).replace("\\", "/")
        self.vfs_root = root if root.endswith("/") else root + "/"
        self.cache: BackendCache | None
        if cache is None:
            self.cache = BackendCache()
        elif cache is False:
            self.cache = None
        else:
            self.cache = cache

    def get_backend(self, compiler_options: Mapping[str, Any]) -> TypeInfoBackend:
        if self.cache is None:
            return self.backend_factory(dict(compiler_options))
        return self.cache.get_or_create(compiler_options, self.backend_factory)

    def __call__(
        self,
        code: str,
        extension: str = "ts",
        *,
        compiler_options: Mapping[str, Any] | None = None,
        handbook_options: HandbookInput | None = None,
        custom_tags: Sequence[str] | None = None,
        should_get_hover_info: ShouldGetHoverInfo | None = None,
        filter_node: NodeFilter | None = None,
        position_queries: Sequence[int] = (),
        position_completions: Sequence[int] = (),
        position_highlights: Sequence[HighlightRange] = (),
    ) -> TwoslashReturn:
        meta = TwoslashMeta(
            extension=types_to_extension(extension),
            compiler_options={**DEFAULT_COMPILER_OPTIONS, **self.compiler_options, **(compiler_options or {})},
            handbook_options=HandbookOptions.model_validate(
                {**self.handbook_options, **_handbook_dict(handbook_options)}
            ),
            position_queries=list(position_queries),
            position_completions=list(position_completions),
            position_highlights=list(position_highlights),
        )
        run = _TwoslashRun(
            self,
            code,
            meta,
            custom_tags=self.custom_tags if custom_tags is None else list(custom_tags),
            should_get_hover_info=should_get_hover_info or self.should_get_hover_info,
            filter_node=filter_node or self.filter_node,
        )
        return run.execute()


class _TwoslashRun:
    """State of one invocation: scan, split, populate, diagnose, emit, erase, resolve."""

    def __init__(
        self,
        owner: Twoslasher,
        code: str,
        meta: TwoslashMeta,
        *,
        custom_tags: list[str],
        should_get_hover_info: ShouldGetHoverInfo,
        filter_node: NodeFilter | None,
    ) -> None:
        self.owner = owner
        self.code = code
        self.meta = meta
        self.custom_tags = custom_tags
        self.should_get_hover_info = should_get_hover_info
        self.filter_node = filter_node
        self.root = owner.vfs_root
        self.default_filename = f"index.{meta.extension}"
        self.converter = PositionConverter(code)
        self.nodes: list[TwoslashNode] = []
        self.registered: set[str] = set()
        self._backend: TypeInfoBackend | None = None

    @property
    def backend(self) -> TypeInfoBackend:
        if self._backend is None:
            self._backend = self.owner.get_backend(self.meta.compiler_options)
        return self._backend

    def execute(self) -> TwoslashReturn:
        self._scan()
        self._split()
        self._populate()
        self._diagnose()
        code = self._emit()
        code = self._erase(code)
        return self._resolve(code)

    # -----------------------------------------------------------------------
    # Stages
    # -----------------------------------------------------------------------

    def _scan(self) -> None:
        meta = self.meta
        meta.flag_notations = find_flag_notations(self.code, self.custom_tags, self.owner.option_declarations)

        for flag in meta.flag_notations:
            if flag.type == "compilerOptions":
                meta.compiler_options[flag.name] = flag.value
            elif flag.type == "handbookOptions":
                setattr(meta.handbook_options, HANDBOOK_OPTION_FIELDS[flag.name], flag.value)
            elif flag.type == "tag":
                text = flag.value if isinstance(flag.value, str) else None
                self.nodes.append(TagNode(name=flag.name, start=flag.end, length=0, text=text))
            meta.removals.append((flag.start, flag.end))

        options = meta.handbook_options
        if not options.no_error_validation:
            unknown = [flag.name for flag in meta.flag_notations if flag.type == "unknown"]
            if unknown:
                raise UnknownFlag(unknown)

        if options.show_emit and options.keep_notations:
            raise IncompatibleOptions(
                "Option 'showEmit' cannot be used with 'keepNotations'",
                "With `showEmit` enabled, the output will always be the emitted code",
                "Remove either option to continue",
            )

        meta.removals.extend(find_cut_notations(self.code))
        find_query_markers(self.code, meta, self.converter.index_of_line_above)

    def _split(self) -> None:
        self.meta.virtual_files = split_files(self.code, self.default_filename, self.root)

    def _populate(self) -> None:
        for file in self.meta.virtual_files:
            if file.extension == "json":
                if not self.meta.compiler_options.get("resolveJsonModule"):
                    continue
            elif file.extension not in SUPPORTED_EXTENSIONS:
                continue

            self.backend.create_file(file.filepath, file.content)
            self.registered.add(file.filepath)
            logger.debug("Registered %s (%d chars at offset %d)", file.filepath, len(file.content), file.offset)

            if not self.meta.handbook_options.show_emit:
                self._collect_file_nodes(file)

    def _diagnose(self) -> None:
        options = self.meta.handbook_options
        errors: list[ErrorNode] = []

        if options.no_errors is not True:
            ignores = options.no_errors if isinstance(options.no_errors, list) else []
            for file in self.meta.virtual_files:
                if file.extension not in SUPPORTED_EXTENSIONS:
                    continue
                for diagnostic in self.backend.get_diagnostics(file.filepath):
                    if diagnostic.filepath != file.filepath or diagnostic.code in ignores:
                        continue
                    start = diagnostic.start + file.offset
                    if options.no_errors_cutted and self._is_in_removal(start):
                        continue
                    errors.append(
                        ErrorNode(
                            start=start,
                            length=diagnostic.length,
                            code=diagnostic.code,
                            filename=file.filename,
                            id=f"err-{diagnostic.code}-{start}-{diagnostic.length}",
                            text=diagnostic.message,
                            level=diagnostic.category,
                        )
                    )

        if self.filter_node is not None:
            self.nodes = [n for n in self.nodes if self.filter_node(n)]
            errors = [e for e in errors if self.filter_node(e)]
        self.nodes.extend(errors)

        if not options.no_error_validation and options.no_errors is not True:
            validate_code_for_errors(errors, options, self.root)

    def _emit(self) -> str:
        meta = self.meta
        options = meta.handbook_options
        if not options.show_emit:
            return self.code

        removed_code, _, _ = remove_code_ranges(self.code, meta.removals)
        for file in split_files(removed_code, self.default_filename, self.root):
            if file.filepath in self.registered:
                self.backend.update_file(file.filepath, file.content)

        if options.show_emitted_file:
            emit_filename = options.show_emitted_file
        elif meta.compiler_options.get("jsx") == JSX_PRESERVE:
            emit_filename = "index.jsx"
        else:
            emit_filename = "index.js"

        out_file = meta.compiler_options.get("outFile")
        all_files = ", ".join(f.filename for f in meta.virtual_files)
        emit_source = next(
            (
                f.filename
                for f in meta.virtual_files
                if remove_ts_extension(f.filename) == remove_ts_extension(emit_filename)
            ),
            None,
        )
        if out_file and meta.virtual_files:
            emit_source = meta.virtual_files[0].filename
        if emit_source is None:
            raise MissingEmitTarget(
                "Could not find source file to show the emit for",
                f"Cannot find the corresponding **source** file: '{emit_filename}'",
                f"Looked for: {emit_filename} in the vfs - which contains: {all_files}",
            )

        outputs = self.backend.get_emit_output(self.root + emit_source)
        output = next((o for o in outputs if o.name in (self.root + emit_filename, emit_filename)), None)
        if output is None:
            raise MissingEmitTarget(
                "Cannot find the output file in the Twoslash VFS",
                f"Looking for {emit_filename} in the Twoslash vfs after compiling",
                f"Looked for {self.root + emit_filename} in the vfs - which contains "
                + ", ".join(o.name for o in outputs),
            )

        logger.debug("Showing emit of %s as %s", emit_source, output.name)
        meta.extension = get_extension(output.name)
        meta.removals.clear()
        self.nodes.clear()
        return output.text

    def _erase(self, code: str) -> str:
        if self.meta.handbook_options.keep_notations:
            return code
        self._anchor_tags()
        code, ranges, self.nodes = remove_code_ranges(code, self.meta.removals, self.nodes)
        self.meta.removals = ranges
        logger.debug("Removed %d range(s), %d node(s) left", len(ranges), sum(1 for n in self.nodes if n.start >= 0))
        return code

    def _resolve(self, code: str) -> TwoslashReturn:
        converter = self.converter if code == self.code else PositionConverter(code)
        nodes = resolve_node_positions(self.nodes, converter.index_to_position)
        return TwoslashReturn(code=code, nodes=nodes, meta=self.meta)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _collect_file_nodes(self, file: VirtualFile) -> None:
        meta = self.meta
        file_end = file.offset + len(file.content)

        def in_file(index: int) -> bool:
            return file.offset <= index < file_end

        queries = [q for q in meta.position_queries if in_file(q)]
        highlights = [h for h in meta.position_highlights if in_file(h[0])]
        completions = [c for c in meta.position_completions if in_file(c)]
        hover = not meta.handbook_options.no_static_semantic_info

        identifiers: list[IdentifierSpan] = []
        if hover or queries or highlights:
            identifiers = get_identifier_text_spans(file.content, file.extension, file.offset)

        if hover:
            for start, _end, target in identifiers:
                if self._is_in_removal(start):
                    continue
                if not self.should_get_hover_info(target, start, file.filename):
                    continue
                info = self._quick_info(file, start)
                if info is not None:
                    self.nodes.append(
                        HoverNode(start=start, length=len(target), target=target, text=info.text, docs=info.docs)
                    )

        for query in queries:
            span = next((i for i in identifiers if is_in_range(query, i)), None)
            info = self._quick_info(file, query) if span is not None else None
            if span is None or info is None:
                raise UnresolvedMarker("quick info", "^?", self._marker_line(query), file.filename)
            self.nodes.append(
                QueryNode(start=query, length=len(span[2]), target=span[2], text=info.text, docs=info.docs)
            )

        for start, end, label in highlights:
            matched = 0
            for id_start, id_end, target in identifiers:
                if not ranges_intersect((id_start, id_end), (start, end)):
                    continue
                info = self._quick_info(file, id_start)
                if info is None:
                    continue
                matched += 1
                self.nodes.append(
                    HighlightNode(
                        start=id_start, length=len(target), target=target, text=info.text, docs=info.docs, label=label
                    )
                )
            if not matched:
                raise UnresolvedMarker("highlight", "^^^", self._marker_line(start), file.filename)

        for target in completions:
            if self._is_in_removal(target):
                continue
            entries = self.backend.get_completions(file.filepath, target - file.offset)
            if entries is None and not meta.handbook_options.no_error_validation:
                raise UnresolvedMarker("completions", "^|", self._marker_line(target), file.filename)
            prefix = self._completion_prefix(target)
            self.nodes.append(
                CompletionNode(
                    start=target,
                    length=0,
                    completions=[e for e in entries or [] if e.name.startswith(prefix)],
                    completions_prefix=prefix,
                )
            )

    def _anchor_tags(self) -> None:
        """Move tags off adjacent directive lines so erasure keeps them.

        A tag sits at the end of its directive, which is inside the merged removal
        when another directive follows. Tags covered by a cut or marker removal are
        left where they are and get invalidated with the rest of that text.
        """
        flag_spans = {(flag.start, flag.end) for flag in self.meta.flag_notations}
        other = [r for r in self.meta.removals if r not in flag_spans]
        merged = merge_ranges(self.meta.removals)
        for node in self.nodes:
            if not isinstance(node, TagNode):
                continue
            if any(start < node.start < end for start, end in other):
                continue
            node.start = next((end for start, end in merged if start < node.start < end), node.start)

    def _quick_info(self, file: VirtualFile, index: int) -> QuickInfo | None:
        return self.backend.get_quick_info(file.filepath, index - file.offset)

    def _is_in_removal(self, index: int) -> bool:
        # removal ends are exclusive: text starting right after a directive line survives
        return any(start <= index < end for start, end in self.meta.removals)

    def _marker_line(self, target: int) -> int:
        # 1-based line of the marker, which sits one line below its target
        return self.converter.index_to_position(target).line + 2

    def _completion_prefix(self, target: int) -> str:
        match = _RE_TRAILING_WORD.search(self.code[:target])
        return match.group(0).split(".")[-1] if match else ""


def create_twoslasher(backend_factory: BackendFactory, **options: Any) -> Twoslasher:
    """Create a :class:`Twoslasher` whose backends are cached per compiler options."""
    return Twoslasher(backend_factory, **options)


def twoslasher(code: str, extension: str = "ts", *, backend_factory: BackendFactory, **options: Any) -> TwoslashReturn:
    """Run one sample without caching backends.

    Prefer :func:`create_twoslasher` when annotating many samples.
    """
    return Twoslasher(backend_factory, cache=False, **options)(code, extension)
