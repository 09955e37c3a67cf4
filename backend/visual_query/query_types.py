"""Pydantic models for the visual query document."""

import secrets
import string
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List, Optional, Literal

Operator = Literal[
    '=', '!=', '>', '<', '>=', '<=',
    'LIKE', 'IN', 'NOT IN',
    'IS NULL', 'IS NOT NULL',
    'EXISTS', 'NOT EXISTS',
]
LogicGate = Literal['AND', 'OR']
SQLOperation = Literal['SELECT', 'INSERT', 'UPDATE', 'DELETE']
JoinType = Literal['INNER', 'LEFT', 'RIGHT', 'FULL OUTER']
SortDirection = Literal['ASC', 'DESC']

OPERATORS = (
    '=', '!=', '>', '<', '>=', '<=',
    'LIKE', 'IN', 'NOT IN',
    'IS NULL', 'IS NOT NULL',
    'EXISTS', 'NOT EXISTS',
)
SUBQUERY_OPERATORS = ('IN', 'NOT IN', 'EXISTS', 'NOT EXISTS')
NULL_OPERATORS = ('IS NULL', 'IS NOT NULL')
EXISTS_OPERATORS = ('EXISTS', 'NOT EXISTS')

SCHEMA_ID = 'sql-forge/visual-query/v1'

_ID_ALPHABET = string.digits + string.ascii_lowercase


def gen_id(length: int = 7) -> str:
    """Short random id, unique enough within one document."""
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class ColumnValuePair(BaseModel):
    """A column/value pair used by INSERT and UPDATE."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=gen_id)
    column: str = ''
    value: str = ''


class Condition(BaseModel):
    """One WHERE term; the operand is a literal or a subquery referenced by id."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=gen_id)
    column: str = ''  # Ignored for EXISTS / NOT EXISTS
    operator: Operator = '='
    value: str = ''
    logic: LogicGate = 'AND'  # Ignored for the first condition
    sub_query_id: Optional[str] = Field(default=None, alias='subQueryId')


class JoinClause(BaseModel):
    """Represents an equality JOIN."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=gen_id)
    type: JoinType = 'INNER'
    table: str = ''
    on_left: str = Field(default='', alias='onLeft')
    on_right: str = Field(default='', alias='onRight')


class OrderByClause(BaseModel):
    """Represents an ORDER BY entry."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=gen_id)
    column: str = ''
    direction: SortDirection = 'ASC'


class QueryNode(BaseModel):
    """
    A full query: the main query or a subquery nested under a condition.

    Child nodes live in sub_queries keyed by id and are referenced from
    exactly one condition of this node through Condition.sub_query_id.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=gen_id)
    operation: SQLOperation = 'SELECT'
    table: str = ''
    select_columns: str = Field(default='*', alias='selectColumns')
    pairs: List[ColumnValuePair] = Field(default_factory=list)
    conditions: List[Condition] = Field(default_factory=list)
    joins: List[JoinClause] = Field(default_factory=list)
    order_by: List[OrderByClause] = Field(default_factory=list, alias='orderBy')
    limit: str = ''
    sub_queries: Dict[str, 'QueryNode'] = Field(default_factory=dict, alias='subQueries')


class DocumentMeta(BaseModel):
    """Display name and timestamps of a saved query."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = 'my_query'
    created_at: str = Field(default='', alias='createdAt')
    updated_at: str = Field(default='', alias='updatedAt')


class VisualQueryDocument(BaseModel):
    """Persisted envelope around a root QueryNode."""
    model_config = ConfigDict(populate_by_name=True)

    schema_id: Literal['sql-forge/visual-query/v1'] = Field(default=SCHEMA_ID, alias='$schema')
    meta: DocumentMeta = Field(default_factory=DocumentMeta)
    root: QueryNode


def make_empty_node(operation: SQLOperation = 'SELECT') -> QueryNode:
    """Fresh node with one blank pair and nothing else filled in."""
    return QueryNode(
        operation=operation,
        select_columns='*',
        pairs=[ColumnValuePair()],
    )
