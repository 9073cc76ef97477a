from collections.abc import Callable
from typing import Any, Protocol

from twoslash.models import CompletionEntry, Diagnostic, OutputFile, QuickInfo


class TypeInfoBackend(Protocol):
    def create_file(self, filepath: str, content: str) -> None: ...

    def update_file(self, filepath: str, content: str) -> None: ...

    def get_quick_info(self, filepath: str, offset: int) -> QuickInfo | None: ...

    def get_completions(self, filepath: str, offset: int) -> list[CompletionEntry] | None: ...

    def get_diagnostics(self, filepath: str) -> list[Diagnostic]: ...

    def get_emit_output(self, filepath: str) -> list[OutputFile]: ...


BackendFactory = Callable[[dict[str, Any]], TypeInfoBackend]
