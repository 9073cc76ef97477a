import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from twoslash.core.defaults import JSX_PRESERVE
from twoslash.core.languages import SUPPORTED_EXTENSIONS, get_extension, remove_ts_extension
from twoslash.models import CompletionEntry, Diagnostic, OutputFile, QuickInfo

_RE_WORD = re.compile(r"[A-Za-z_$][\w$]*")


@dataclass(frozen=True)
class DiagnosticRule:
    """Report ``code``/``message`` at every occurrence of ``pattern``."""

    pattern: str
    code: int
    message: str
    category: int = 1


class InMemoryBackend:
    """Scripted type-info backend over an in-memory file map.

    Implements the ``TypeInfoBackend`` protocol. Hover text is looked up by the
    identifier under the cursor, diagnostics come from substring rules, and the
    emitter passes sources through under their output names.
    """

    def __init__(
        self,
        compiler_options: Mapping[str, Any] | None = None,
        *,
        quick_info: Mapping[str, QuickInfo | str] | None = None,
        diagnostics: Sequence[DiagnosticRule] = (),
        completions: Sequence[CompletionEntry] | None = None,
    ) -> None:
        self.compiler_options: dict[str, Any] = dict(compiler_options or {})
        self.files: dict[str, str] = {}
        self.quick_info: dict[str, QuickInfo] = {
            name: QuickInfo(text=info) if isinstance(info, str) else info for name, info in (quick_info or {}).items()
        }
        self.diagnostic_rules = list(diagnostics)
        self.completions = list(completions) if completions is not None else None
        self.quick_info_requests: list[tuple[str, int]] = []

    def create_file(self, filepath: str, content: str) -> None:
        self.files[filepath] = content

    def update_file(self, filepath: str, content: str) -> None:
        if filepath not in self.files:
            raise KeyError(f"File not registered: {filepath}")
        self.files[filepath] = content

    def get_quick_info(self, filepath: str, offset: int) -> QuickInfo | None:
        self.quick_info_requests.append((filepath, offset))
        for match in _RE_WORD.finditer(self.files[filepath]):
            if match.start() > offset:
                break
            if offset <= match.end():
                return self.quick_info.get(match.group(0))
        return None

    def get_completions(self, filepath: str, offset: int) -> list[CompletionEntry] | None:
        if filepath not in self.files or self.completions is None:
            return None
        return list(self.completions)

    def get_diagnostics(self, filepath: str) -> list[Diagnostic]:
        content = self.files[filepath]
        diagnostics: list[Diagnostic] = []
        for rule in self.diagnostic_rules:
            for match in re.finditer(re.escape(rule.pattern), content):
                diagnostics.append(
                    Diagnostic(
                        filepath=filepath,
                        start=match.start(),
                        length=len(rule.pattern),
                        code=rule.code,
                        category=rule.category,
                        message=rule.message,
                    )
                )
        return sorted(diagnostics, key=lambda d: d.start)

    def get_emit_output(self, filepath: str) -> list[OutputFile]:
        out_file = self.compiler_options.get("outFile")
        if out_file:
            sources = [text for path, text in self.files.items() if get_extension(path) in SUPPORTED_EXTENSIONS]
            return [OutputFile(name=out_file, text="".join(sources))]

        content = self.files[filepath]
        stem = remove_ts_extension(filepath)
        extension = get_extension(filepath)
        preserve_jsx = extension in ("jsx", "tsx") and self.compiler_options.get("jsx") == JSX_PRESERVE
        outputs = [OutputFile(name=f"{stem}.{'jsx' if preserve_jsx else 'js'}", text=content)]
        if self.compiler_options.get("declaration") and extension in ("ts", "tsx"):
            outputs.append(OutputFile(name=f"{stem}.d.ts", text=content))
        return outputs
