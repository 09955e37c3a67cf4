"""
SQL Compiler - Renders a QueryNode tree as indented SQL text.

Pure and stateless: the editor calls build_sql on every change to refresh the
preview. Incomplete queries render as SQL comment placeholders, never errors.
"""

from typing import Dict, List

from .query_types import (
    QueryNode,
    Condition,
    NULL_OPERATORS,
    EXISTS_OPERATORS,
)

INDENT = "  "

TABLE_PLACEHOLDER = "-- Please fill in the table name"
INSERT_COLUMNS_PLACEHOLDER = "-- Add at least one column"
UPDATE_COLUMNS_PLACEHOLDER = "-- Add at least one SET column"


def build_sql(node: QueryNode, depth: int = 0) -> str:
    """
    Convert a QueryNode to SQL text.

    depth is the nesting level used for indentation: clause keywords get
    `depth` indent units and continuation lines `depth + 1`.
    """
    indent = INDENT * depth
    inner = INDENT * (depth + 1)

    if node.operation == "INSERT":
        return generate_insert(node)
    if node.operation == "UPDATE":
        return generate_update(node, depth, indent, inner)
    if node.operation == "DELETE":
        return generate_delete(node, depth, indent, inner)
    return generate_select(node, depth, indent, inner)


def generate_select(node: QueryNode, depth: int, indent: str, inner: str) -> str:
    """Generate a SELECT statement."""
    if not node.table:
        return f"{indent}{TABLE_PLACEHOLDER}"

    cols = node.select_columns.strip() or "*"
    sql = f"SELECT {cols}\n{indent}FROM {node.table}"

    # Joins missing any of table / ON columns are skipped
    for join in node.joins:
        if join.table and join.on_left and join.on_right:
            sql += f"\n{indent}{join.type} JOIN {join.table} ON {join.on_left} = {join.on_right}"

    sql += generate_where_clause(node.conditions, node.sub_queries, depth, indent, inner)

    order_parts = [f"{o.column} {o.direction}" for o in node.order_by if o.column]
    if order_parts:
        sql += f"\n{indent}ORDER BY " + ", ".join(order_parts)

    if node.limit:
        sql += f"\n{indent}LIMIT {node.limit}"

    return sql + ";"


def generate_insert(node: QueryNode) -> str:
    """Generate an INSERT statement. INSERT is never nested, so it takes no indent."""
    if not node.table:
        return TABLE_PLACEHOLDER

    filled = [p for p in node.pairs if p.column]
    if not filled:
        return INSERT_COLUMNS_PLACEHOLDER

    cols = ", ".join(p.column for p in filled)
    vals = ", ".join(format_value(p.value) for p in filled)
    return f"INSERT INTO {node.table} ({cols})\nVALUES ({vals});"


def generate_update(node: QueryNode, depth: int, indent: str, inner: str) -> str:
    """Generate an UPDATE statement with one SET assignment per line."""
    if not node.table:
        return f"{indent}{TABLE_PLACEHOLDER}"

    filled = [p for p in node.pairs if p.column]
    if not filled:
        return f"{indent}{UPDATE_COLUMNS_PLACEHOLDER}"

    sets = ",\n".join(f"{inner}{p.column} = {format_value(p.value)}" for p in filled)
    sql = f"UPDATE {node.table}\n{indent}SET\n{sets}"
    sql += generate_where_clause(node.conditions, node.sub_queries, depth, indent, inner)
    return sql + ";"


def generate_delete(node: QueryNode, depth: int, indent: str, inner: str) -> str:
    """Generate a DELETE statement."""
    if not node.table:
        return f"{indent}{TABLE_PLACEHOLDER}"

    sql = f"DELETE FROM {node.table}"
    sql += generate_where_clause(node.conditions, node.sub_queries, depth, indent, inner)
    return sql + ";"


def generate_where_clause(
    conditions: List[Condition],
    sub_queries: Dict[str, QueryNode],
    depth: int,
    indent: str,
    inner: str,
) -> str:
    """
    Generate the WHERE clause, including its leading newline.

    Conditions form a flat chain: the first one anchors the chain and its
    logic gate is ignored, every following one goes on its own line.
    """
    if not conditions:
        return ""

    parts = []
    for i, cond in enumerate(conditions):
        clause = generate_condition(cond, sub_queries, depth)
        parts.append(clause if i == 0 else f"{cond.logic} {clause}")

    return f"\n{indent}WHERE " + f"\n{inner}".join(parts)


def generate_condition(cond: Condition, sub_queries: Dict[str, QueryNode], depth: int) -> str:
    """Generate a single predicate."""
    column = cond.column or "column"

    if cond.operator in EXISTS_OPERATORS:
        return f"{cond.operator} {resolve_operand(cond, sub_queries, depth)}"

    if cond.operator in NULL_OPERATORS:
        return f"{column} {cond.operator}"

    if cond.sub_query_id:
        return f"{column} {cond.operator} {resolve_operand(cond, sub_queries, depth)}"

    return f"{column} {cond.operator} {format_value(cond.value)}"


def resolve_operand(cond: Condition, sub_queries: Dict[str, QueryNode], depth: int) -> str:
    """Subquery text when the condition's subquery resolves, else the quoted literal."""
    sub_query = sub_queries.get(cond.sub_query_id) if cond.sub_query_id else None
    if sub_query is None:
        return format_value(cond.value)
    return generate_subquery(sub_query, depth)


def generate_subquery(sub_query: QueryNode, depth: int) -> str:
    """
    Render a nested query wrapped in parentheses.

    The child is compiled two levels deeper (one for the WHERE clause, one
    for the parentheses) and its first line is indented to match the rest,
    so the whole body sits one level inside the closing parenthesis.
    """
    sub_sql = build_sql(sub_query, depth + 2)
    if sub_sql.endswith(";"):
        sub_sql = sub_sql[:-1]

    lines = sub_sql.split("\n")
    lines[0] = INDENT * (depth + 2) + lines[0].lstrip()
    body = "\n".join(lines)
    return f"(\n{body}\n{INDENT * (depth + 1)})"


def format_value(value: str) -> str:
    """
    Quote a literal for SQL.

    Values are wrapped verbatim; embedded single quotes are not escaped.
    """
    return f"'{value}'"
