"""
Schema introspection used to expand the ``["*"]`` column policy.
"""
from django.db import DEFAULT_DB_ALIAS, connections


def list_columns(table_name, using=DEFAULT_DB_ALIAS):
    """Return the column names of ``table_name`` in table order."""
    connection = connections[using]
    with connection.cursor() as cursor:
        description = connection.introspection.get_table_description(cursor, table_name)
    return [column.name for column in description]
