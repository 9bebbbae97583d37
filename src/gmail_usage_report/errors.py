"""Error kinds raised by a report run."""


class UsageReportError(Exception):
    """Base class for fatal report-run failures."""


class SourceUnavailable(UsageReportError):
    """The thread source failed while fetching a page."""

    def __init__(self, query: str, offset: int, message: str = "") -> None:
        self.query = query
        self.offset = offset
        super().__init__(
            f"Thread source failed at offset {offset} for query {query!r}"
            + (f": {message}" if message else "")
        )


class SinkWriteFailed(UsageReportError):
    """The report sink could not write a table."""

    def __init__(self, title: str, message: str = "") -> None:
        self.title = title
        super().__init__(
            f"Could not write table {title!r}" + (f": {message}" if message else "")
        )
