"""
Centralized environment configuration

Values come from the process environment; main.py loads a .env file first
when one is present.
"""

import os
from typing import Optional

def _get_optional(value: Optional[str], default: str) -> str:
    return value if value else default

# Frontend origin allowed by CORS
FRONTEND_URL = _get_optional(os.getenv('FRONTEND_URL'), 'http://localhost:3000')

# Dialect used by sqlglot when checking generated SQL
SQL_DIALECT = _get_optional(os.getenv('SQL_DIALECT'), 'postgres')

# Name given to documents saved without one
DEFAULT_QUERY_NAME = _get_optional(os.getenv('DEFAULT_QUERY_NAME'), 'my_query')
