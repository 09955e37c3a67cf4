"""
Copy-on-write edit operations over QueryNode trees.

Every function returns a new node and leaves its input untouched; children
that an edit does not touch are shared by identity with the previous tree.
"""

import logging
from typing import Callable, Dict, List, Sequence, TypeVar

from pydantic import BaseModel

from .errors import QueryEditError, SubqueryDepthError, UnknownEntityError
from .query_types import (
    ColumnValuePair,
    Condition,
    JoinClause,
    Operator,
    OrderByClause,
    QueryNode,
    SUBQUERY_OPERATORS,
    make_empty_node,
)

logger = logging.getLogger(__name__)

# Levels 0..3: the root plus three levels of subqueries
MAX_DEPTH = 3

# Fields set_fields may replace; collections go through their own operations
NODE_SCALAR_FIELDS = ('operation', 'table', 'select_columns', 'limit')

M = TypeVar('M', bound=BaseModel)


def _replace(model: M, **changes) -> M:
    """
    Validated copy of a frozen model with some fields replaced.

    Nested model instances are passed through as-is, so untouched subtrees
    keep their identity.
    """
    fields = type(model).model_fields
    unknown = set(changes) - set(fields)
    if unknown:
        raise QueryEditError(
            f"Unknown {type(model).__name__} field(s): {', '.join(sorted(unknown))}"
        )
    data = {name: getattr(model, name) for name in fields}
    data.update(changes)
    return type(model).model_validate(data)


def _replace_item(items: Sequence[M], kind: str, item_id: str, changes: Dict) -> List[M]:
    if 'id' in changes:
        raise QueryEditError(f"Cannot change the id of a {kind}")
    found = False
    result = []
    for item in items:
        if item.id == item_id:
            found = True
            item = _replace(item, **changes)
        result.append(item)
    if not found:
        raise UnknownEntityError(kind, item_id)
    return result


def _remove_item(items: Sequence[M], kind: str, item_id: str) -> List[M]:
    result = [item for item in items if item.id != item_id]
    if len(result) == len(items):
        raise UnknownEntityError(kind, item_id)
    return result


def _find_condition(node: QueryNode, cond_id: str) -> Condition:
    for cond in node.conditions:
        if cond.id == cond_id:
            return cond
    raise UnknownEntityError('condition', cond_id)


def set_fields(node: QueryNode, **changes) -> QueryNode:
    """Replace scalar fields (operation, table, select_columns, limit)."""
    not_scalar = set(changes) - set(NODE_SCALAR_FIELDS)
    if not_scalar:
        raise QueryEditError(
            f"Cannot set {', '.join(sorted(not_scalar))} directly"
        )
    return _replace(node, **changes)


# Column/value pairs

def add_pair(node: QueryNode) -> QueryNode:
    return _replace(node, pairs=[*node.pairs, ColumnValuePair()])


def update_pair(node: QueryNode, pair_id: str, **changes) -> QueryNode:
    return _replace(node, pairs=_replace_item(node.pairs, 'pair', pair_id, changes))


def remove_pair(node: QueryNode, pair_id: str) -> QueryNode:
    return _replace(node, pairs=_remove_item(node.pairs, 'pair', pair_id))


# Conditions

def add_condition(node: QueryNode) -> QueryNode:
    return _replace(node, conditions=[*node.conditions, Condition()])


def update_condition(node: QueryNode, cond_id: str, **changes) -> QueryNode:
    """Edit column, operator, value or logic of one condition."""
    if 'sub_query_id' in changes:
        raise QueryEditError("Use attach_subquery / detach_subquery to change sub_query_id")
    return _replace(
        node, conditions=_replace_item(node.conditions, 'condition', cond_id, changes)
    )


def remove_condition(node: QueryNode, cond_id: str) -> QueryNode:
    """Remove a condition together with the subquery it owns, if any."""
    cond = _find_condition(node, cond_id)
    conditions = _remove_item(node.conditions, 'condition', cond_id)
    sub_queries = node.sub_queries
    if cond.sub_query_id:
        sub_queries = {k: v for k, v in node.sub_queries.items() if k != cond.sub_query_id}
    return _replace(node, conditions=conditions, sub_queries=sub_queries)


def set_condition_operator(
    node: QueryNode, cond_id: str, operator: Operator, depth: int
) -> QueryNode:
    """
    Change a condition's operator.

    Switching to IN / NOT IN / EXISTS / NOT EXISTS attaches an empty
    subquery when the condition has none and nesting is still allowed.
    """
    cond = _find_condition(node, cond_id)
    updated = update_condition(node, cond_id, operator=operator)
    if operator in SUBQUERY_OPERATORS and depth < MAX_DEPTH and not cond.sub_query_id:
        updated = attach_subquery(updated, cond_id, depth)
    return updated


# Subqueries

def attach_subquery(node: QueryNode, cond_id: str, depth: int) -> QueryNode:
    """
    Attach a new empty SELECT subquery to a condition.

    depth is the nesting level of `node` itself (0 for the main query).
    """
    if depth >= MAX_DEPTH:
        raise SubqueryDepthError(depth, MAX_DEPTH)
    cond = _find_condition(node, cond_id)
    if cond.sub_query_id:
        raise QueryEditError(f"Condition '{cond_id}' already has a subquery")

    sub_query = make_empty_node('SELECT')
    conditions = [
        c.model_copy(update={'sub_query_id': sub_query.id}) if c.id == cond_id else c
        for c in node.conditions
    ]
    logger.debug(f"[editor] Attached subquery {sub_query.id} to condition {cond_id} at depth {depth}")
    return _replace(
        node,
        conditions=conditions,
        sub_queries={**node.sub_queries, sub_query.id: sub_query},
    )


def detach_subquery(node: QueryNode, cond_id: str) -> QueryNode:
    """
    Drop a condition's subquery and clear its operand.

    The child's own subqueries go with it since they are only reachable
    through the child.
    """
    cond = _find_condition(node, cond_id)
    if not cond.sub_query_id:
        raise QueryEditError(f"Condition '{cond_id}' has no subquery")

    conditions = [
        c.model_copy(update={'sub_query_id': None, 'value': ''}) if c.id == cond_id else c
        for c in node.conditions
    ]
    sub_queries = {k: v for k, v in node.sub_queries.items() if k != cond.sub_query_id}
    logger.debug(f"[editor] Detached subquery {cond.sub_query_id} from condition {cond_id}")
    return _replace(node, conditions=conditions, sub_queries=sub_queries)


def update_subquery(node: QueryNode, sq_id: str, updated: QueryNode) -> QueryNode:
    if sq_id not in node.sub_queries:
        raise UnknownEntityError('subquery', sq_id)
    if updated.id != sq_id:
        raise QueryEditError(
            f"Subquery '{sq_id}' cannot be replaced by node '{updated.id}'"
        )
    return _replace(node, sub_queries={**node.sub_queries, sq_id: updated})


def edit_at_path(
    root: QueryNode, path: Sequence[str], edit: Callable[[QueryNode], QueryNode]
) -> QueryNode:
    """
    Apply `edit` to the node reached by following subquery ids from root.

    Only the nodes along the path are rebuilt.
    """
    if not path:
        return edit(root)
    head, rest = path[0], path[1:]
    child = root.sub_queries.get(head)
    if child is None:
        raise UnknownEntityError('subquery', head)
    return update_subquery(root, head, edit_at_path(child, rest, edit))


def count_subqueries(node: QueryNode) -> int:
    """Number of nested query nodes below `node`."""
    return sum(1 + count_subqueries(sq) for sq in node.sub_queries.values())


# Joins

def add_join(node: QueryNode) -> QueryNode:
    return _replace(node, joins=[*node.joins, JoinClause()])


def update_join(node: QueryNode, join_id: str, **changes) -> QueryNode:
    return _replace(node, joins=_replace_item(node.joins, 'join', join_id, changes))


def remove_join(node: QueryNode, join_id: str) -> QueryNode:
    return _replace(node, joins=_remove_item(node.joins, 'join', join_id))


# ORDER BY

def add_order_by(node: QueryNode) -> QueryNode:
    return _replace(node, order_by=[*node.order_by, OrderByClause()])


def update_order_by(node: QueryNode, order_id: str, **changes) -> QueryNode:
    return _replace(
        node, order_by=_replace_item(node.order_by, 'order-by entry', order_id, changes)
    )


def remove_order_by(node: QueryNode, order_id: str) -> QueryNode:
    return _replace(node, order_by=_remove_item(node.order_by, 'order-by entry', order_id))
