"""Exceptions raised by the cluster_graph core.

- DecodeError: malformed or out-of-domain bitmap input
- MissingColumnError: a statistics column is absent (or null) in a cluster table
- FilterError: a selection predicate failed while building a subset view
- ClusterNotFoundError: a cluster label is not part of a view or clustering
"""


class DecodeError(ValueError):
    """Raised when an encoded bitmap cannot be decoded or holds out-of-domain values."""


class MissingColumnError(KeyError):
    """Raised when a required column is missing from a cluster table.

    Attributes:
        column: Name of the column that was required
        rows: Row positions holding nulls, if the column exists but is incomplete
    """

    def __init__(self, column: str, rows=None) -> None:
        self.column = column
        self.rows = list(rows) if rows is not None else None
        if self.rows:
            preview = ", ".join(str(r) for r in self.rows[:5])
            more = "..." if len(self.rows) > 5 else ""
            message = f"Column '{column}' has missing values at rows [{preview}{more}]"
        else:
            message = f"Required column '{column}' not found in table"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class FilterError(RuntimeError):
    """Raised when a cluster filter predicate fails.

    Attributes:
        label: Label of the cluster being evaluated, or None for the singleton probe
    """

    def __init__(self, label, cause: BaseException) -> None:
        self.label = label
        target = "singleton probe" if label is None else f"cluster {label}"
        super().__init__(f"Filter predicate failed on {target}: {cause!r}")


class ClusterNotFoundError(KeyError):
    """Raised when a cluster label is not found.

    Attributes:
        label: The label that was requested
    """

    def __init__(self, label) -> None:
        self.label = label
        super().__init__(f"Cluster {label!r} not found")

    def __str__(self) -> str:
        return self.args[0]
