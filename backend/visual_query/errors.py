"""
Custom exceptions for query editing and document import.
"""


class QueryEditError(Exception):
    """Base exception for invalid edits to a query tree."""
    pass


class UnknownEntityError(QueryEditError):
    """Referenced pair, condition, join, order-by or subquery not found."""
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"No {kind} with id '{entity_id}'")
        self.kind = kind
        self.entity_id = entity_id


class SubqueryDepthError(QueryEditError):
    """Attaching a subquery would exceed the nesting limit."""
    def __init__(self, depth: int, max_depth: int):
        super().__init__(
            f"Cannot nest a subquery at depth {depth} (max depth is {max_depth})"
        )
        self.depth = depth
        self.max_depth = max_depth


class DocumentImportError(Exception):
    """Imported file is not a valid visual query document."""
    pass
