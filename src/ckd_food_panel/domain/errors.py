"""Errors raised while resolving nutrient data."""


class SourceMiss(Exception):
    """A single resolution stage could not produce nutrient data."""

    def __init__(self, stage: str, reason: str) -> None:
        super().__init__(f"{stage}: {reason}")
        self.stage = stage
        self.reason = reason


class MalformedUpstreamPayload(SourceMiss):
    """A remote payload parsed but did not have the expected shape."""


class AllSourcesExhausted(RuntimeError):
    """No resolution stage produced a nutrient record for a query."""

    def __init__(self, query: str) -> None:
        super().__init__(f"No nutrient source could resolve {query!r}")
        self.query = query
