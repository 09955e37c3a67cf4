"""SQL helpers applied to compiled query text."""
