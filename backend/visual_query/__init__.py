"""Visual query document model and SQL compiler for the query builder."""

from .query_types import (
    QueryNode,
    Condition,
    JoinClause,
    OrderByClause,
    ColumnValuePair,
    DocumentMeta,
    VisualQueryDocument,
    Operator,
    LogicGate,
    SQLOperation,
    OPERATORS,
    SUBQUERY_OPERATORS,
    SCHEMA_ID,
    gen_id,
    make_empty_node,
)
from .compiler import build_sql
from .errors import (
    QueryEditError,
    UnknownEntityError,
    SubqueryDepthError,
    DocumentImportError,
)
from .editor import MAX_DEPTH, count_subqueries, edit_at_path
from .document import (
    load_document,
    export_document,
    document_to_dict,
    dumps_document,
    export_filename,
    is_valid_schema,
)

__all__ = [
    "QueryNode",
    "Condition",
    "JoinClause",
    "OrderByClause",
    "ColumnValuePair",
    "DocumentMeta",
    "VisualQueryDocument",
    "Operator",
    "LogicGate",
    "SQLOperation",
    "OPERATORS",
    "SUBQUERY_OPERATORS",
    "SCHEMA_ID",
    "gen_id",
    "make_empty_node",
    "build_sql",
    "QueryEditError",
    "UnknownEntityError",
    "SubqueryDepthError",
    "DocumentImportError",
    "MAX_DEPTH",
    "count_subqueries",
    "edit_at_path",
    "load_document",
    "export_document",
    "document_to_dict",
    "dumps_document",
    "export_filename",
    "is_valid_schema",
]
