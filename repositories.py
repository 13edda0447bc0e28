"""
Repository layer for database operations

CatalogRepository: lists candidate objects in the scanned schema and fetches
their details (the catalog client used by discovery)
ObjectRepository: reads views and calls functions on behalf of tools
"""

import logging
from typing import Any, Dict, List, Optional

from database import DatabaseConnection, quote_ident
from models import ObjectKind

logger = logging.getLogger(__name__)


# Routines never exposed as tools: system/extension helpers and the
# helpers installed by earlier setup scripts.
EXCLUDED_ROUTINE_PREFIXES = ("pg_", "handle_", "supabase_", "graphql_", "extension_")
EXCLUDED_ROUTINES = ("rpc_get_schema_objects", "rpc_get_object_details")


LIST_OBJECTS_QUERY = """
    SELECT COALESCE(jsonb_agg(obj), '[]'::jsonb)
    FROM (
        SELECT jsonb_build_object(
            'object_name', v.table_name,
            'object_type', 'VIEW',
            'comment', obj_description(
                (quote_ident(v.table_schema) || '.' || quote_ident(v.table_name))::regclass,
                'pg_class'
            )
        ) AS obj
        FROM information_schema.views v
        WHERE v.table_schema = $1

        UNION ALL

        SELECT jsonb_build_object(
            'object_name', r.routine_name,
            'object_type', 'FUNCTION',
            'comment', obj_description(p.oid, 'pg_proc')
        ) AS obj
        FROM information_schema.routines r
        JOIN pg_catalog.pg_proc p ON r.specific_name = p.proname || '_' || p.oid
        WHERE r.routine_schema = $1
          AND r.routine_type = 'FUNCTION'
          AND p.prokind = 'f'
          AND NOT (r.routine_name LIKE ANY ($2::text[]))
          AND NOT (r.routine_name = ANY ($3::text[]))
    ) AS objects
"""

VIEW_DETAILS_QUERY = """
    SELECT jsonb_build_object(
        'object_name', v.table_name,
        'object_type', 'VIEW',
        'comment', obj_description(
            (quote_ident(v.table_schema) || '.' || quote_ident(v.table_name))::regclass,
            'pg_class'
        ),
        'columns', COALESCE(
            jsonb_agg(
                jsonb_build_object(
                    'column_name', c.column_name,
                    'data_type', c.udt_name,
                    'is_nullable', c.is_nullable = 'YES',
                    'comment', col_description(
                        (quote_ident(c.table_schema) || '.' || quote_ident(c.table_name))::regclass,
                        c.ordinal_position::int
                    )
                ) ORDER BY c.ordinal_position
            ) FILTER (WHERE c.column_name IS NOT NULL),
            '[]'::jsonb
        )
    )
    FROM information_schema.views v
    LEFT JOIN information_schema.columns c
        ON v.table_schema = c.table_schema AND v.table_name = c.table_name
    WHERE v.table_schema = $1 AND v.table_name = $2
    GROUP BY v.table_name, v.table_schema
"""

# Overloaded routines are not disambiguated: the first match wins.
# Parameter positions count IN and INOUT parameters only; OUT parameters are skipped.
FUNCTION_DETAILS_QUERY = """
    WITH target AS (
        SELECT r.specific_name, p.oid, p.prorettype, p.proretset
        FROM information_schema.routines r
        JOIN pg_catalog.pg_proc p ON r.specific_name = p.proname || '_' || p.oid
        WHERE r.routine_schema = $1
          AND r.routine_name = $2
          AND r.routine_type = 'FUNCTION'
        ORDER BY p.oid
        LIMIT 1
    )
    SELECT jsonb_build_object(
        'object_name', $2::text,
        'object_type', 'FUNCTION',
        'comment', obj_description(t.oid, 'pg_proc'),
        'parameters', COALESCE((
            SELECT jsonb_agg(
                jsonb_build_object(
                    'parameter_name', param.parameter_name,
                    'data_type', param.udt_name,
                    'position', param.position
                ) ORDER BY param.position
            )
            FROM (
                SELECT p.parameter_name, p.udt_name,
                       row_number() OVER (ORDER BY p.ordinal_position) AS position
                FROM information_schema.parameters p
                WHERE p.specific_schema = $1
                  AND p.specific_name = t.specific_name
                  AND p.parameter_mode IN ('IN', 'INOUT')
            ) param
        ), '[]'::jsonb),
        'return_type', (SELECT pt.typname FROM pg_catalog.pg_type pt WHERE pt.oid = t.prorettype),
        'returns_set', t.proretset
    )
    FROM target t
"""


class BaseRepository:
    """Base repository bound to one schema"""

    def __init__(self, db: DatabaseConnection, schema: str):
        self.db = db
        self.schema = schema

    def qualified(self, name: str) -> str:
        return f"{quote_ident(self.schema)}.{quote_ident(name)}"


class CatalogRepository(BaseRepository):
    """Catalog metadata for the scanned schema. Owns no state beyond the schema name."""

    async def list_objects(self) -> Any:
        """
        List views and functions in the schema.

        Returns the raw decoded JSON payload (a list of
        {object_name, object_type, comment}); validation is the caller's job.
        """
        patterns = [f"{prefix}%" for prefix in EXCLUDED_ROUTINE_PREFIXES]
        result = await self.db.fetchval(
            LIST_OBJECTS_QUERY, self.schema, patterns, list(EXCLUDED_ROUTINES)
        )
        logger.debug(f"Catalog listing for schema {self.schema}: {result!r}")
        return result

    async def fetch_details(self, name: str, kind: ObjectKind) -> Optional[Any]:
        """
        Fetch the VIEW- or FUNCTION-shaped detail payload for one object.

        Returns None when the object no longer exists.
        """
        if kind is ObjectKind.VIEW:
            return await self.db.fetchval(VIEW_DETAILS_QUERY, self.schema, name)
        if kind is ObjectKind.FUNCTION:
            return await self.db.fetchval(FUNCTION_DETAILS_QUERY, self.schema, name)
        raise ValueError(f"Unknown object kind: {kind}")


class ObjectRepository(BaseRepository):
    """Reads views and calls functions in the scanned schema"""

    async def read_all(self, view_name: str) -> List[Dict[str, Any]]:
        """Unfiltered, unordered read of every row of a view"""
        rows = await self.db.fetch(f"SELECT * FROM {self.qualified(view_name)}")
        return [dict(row) for row in rows]

    async def call(
        self,
        function_name: str,
        arguments: Dict[str, Any],
        returns_set: bool = False,
    ) -> Any:
        """
        Call a function using named-argument notation.

        Args:
            function_name: Catalog name of the function
            arguments: Values keyed by catalog parameter name
            returns_set: SETOF functions are read as rows, others as a single value

        Returns:
            A list of row dicts for set-returning functions, otherwise the scalar value
        """
        names = list(arguments)
        placeholders = ", ".join(
            f"{quote_ident(name)} => ${index}" for index, name in enumerate(names, start=1)
        )
        call_expr = f"{self.qualified(function_name)}({placeholders})"
        values = [arguments[name] for name in names]

        if returns_set:
            rows = await self.db.fetch(f"SELECT * FROM {call_expr}", *values)
            return [dict(row) for row in rows]
        return await self.db.fetchval(f"SELECT {call_expr}", *values)
