"""Check whether generated SQL is a complete statement."""

from sqlglot import parse
from sqlglot.errors import ParseError, TokenError

from config import SQL_DIALECT


def is_complete_sql(sql: str, dialect: str = SQL_DIALECT) -> bool:
    """
    Report whether compiled SQL is ready to run.

    - Placeholder comments (table or columns still missing) are incomplete,
      including ones rendered inside a subquery
    - Otherwise the text must parse into at least one statement

    Values are spliced in unescaped, so a value containing a single quote
    shows up here as a tokenizer error.

    Examples:
        >>> is_complete_sql("SELECT *\\nFROM users;")
        True

        >>> is_complete_sql("-- Please fill in the table name")
        False
    """
    text = sql.strip()
    if not text:
        return False

    # Placeholders can sit inside a subquery, where sqlglot would drop them
    if any(line.lstrip().startswith("--") for line in text.splitlines()):
        return False

    try:
        statements = parse(text, read=dialect)
    except (ParseError, TokenError):
        return False

    return any(statement is not None for statement in statements)
