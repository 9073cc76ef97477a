class TwoslashError(Exception):
    """Base error: a short title, what went wrong, and how to fix it."""

    def __init__(self, title: str, description: str, recommendation: str = "") -> None:
        self.title = title
        self.description = description
        self.recommendation = recommendation
        super().__init__(f"\n## {title}\n\n{description}\n{recommendation}\n")


class UnknownFlag(TwoslashError):
    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(
            "Unknown inline compiler flags",
            "The following flags are neither valid compiler options nor handbook options:\n"
            + ", ".join(f"@{name}" for name in names),
            "This is likely a typo, check the compiler option reference or the handbook options.",
        )


class InvalidOptionValue(TwoslashError):
    def __init__(self, name: str, value: object, description: str, recommendation: str = "") -> None:
        self.name = name
        self.value = value
        super().__init__("Invalid inline compiler value", description, recommendation)


class MismatchedCutMarkers(TwoslashError):
    def __init__(self, description: str) -> None:
        super().__init__("Mismatched cut markers", description, "Make sure you have a matching pair for each.")


class UnresolvedMarker(TwoslashError):
    def __init__(self, kind: str, marker: str, line: int, filename: str) -> None:
        self.kind = kind
        self.line = line
        self.filename = filename
        super().__init__(
            f"Invalid {kind} query",
            f"The request on line {line} in {filename} for {kind} via {marker} returned nothing from the compiler.",
            "This is likely that the positioning is off.",
        )


class IncompatibleOptions(TwoslashError):
    pass


class MissingEmitTarget(TwoslashError):
    pass


class UndocumentedError(TwoslashError):
    def __init__(self, codes: list[int], description: str, recommendation: str) -> None:
        self.codes = codes
        super().__init__(
            "Errors were thrown in the sample, but not included in an error tag",
            description,
            recommendation,
        )


class UnknownExtension(TwoslashError):
    pass
