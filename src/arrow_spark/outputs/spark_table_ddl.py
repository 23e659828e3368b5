from typing import Iterable, List, Optional

from arrow_spark.canonical.logical_type import Field
from arrow_spark.config import RenderOptions, TableSettings
from arrow_spark.pipeline.spark_ddl import get_spark_ddl


class SparkTableDDLGenerator:
    """
    Generates a Spark SQL CREATE TABLE statement around the column list.

    Responsibilities:
    - Table reference (optionally database-qualified)
    - Column list via get_spark_ddl
    - USING / PARTITIONED BY / COMMENT clauses when provided
    """

    def __init__(self, fields: Iterable[Field], options: Optional[RenderOptions] = None):
        self.fields: List[Field] = list(fields)
        self.options = options or RenderOptions()

    def _table_ref(self, table: str, database: Optional[str]) -> str:
        if database:
            return f"`{database}`.`{table}`"
        return f"`{table}`"

    # --------------------------------------------------
    # PARTITIONING & COMMENT HELPERS
    # --------------------------------------------------
    def _build_partition_clause(self, partitioned_by: Optional[List[str]]) -> str:
        if not partitioned_by:
            return ""

        known = {f.name for f in self.fields}
        missing = [c for c in partitioned_by if c not in known]
        if missing:
            raise ValueError(f"Partition columns not in schema: {', '.join(missing)}")

        cols = ", ".join(f"`{c}`" for c in partitioned_by)
        return f"\nPARTITIONED BY ({cols})"

    def _build_comment_clause(self, comment: Optional[str]) -> str:
        if not comment:
            return ""
        escaped = comment.replace("\\", "\\\\").replace("'", "\\'")
        return f"\nCOMMENT '{escaped}'"

    # --------------------------------------------------
    # TABLE DDL
    # --------------------------------------------------
    def generate(
        self,
        table: str,
        database: Optional[str] = None,
        if_not_exists: bool = True,
        using: Optional[str] = "DELTA",
        comment: Optional[str] = None,
        partitioned_by: Optional[List[str]] = None,
    ) -> str:
        if not table:
            raise ValueError("Table name must not be empty")

        columns = get_spark_ddl(self.fields, self.options)
        ine = "IF NOT EXISTS " if if_not_exists else ""
        using_clause = f"\nUSING {using}" if using else ""

        return (
            f"CREATE TABLE {ine}{self._table_ref(table, database)} ({columns})"
            f"{using_clause}"
            f"{self._build_partition_clause(partitioned_by)}"
            f"{self._build_comment_clause(comment)};"
        )

    def generate_from_settings(self, settings: TableSettings) -> str:
        return self.generate(
            table=settings.name,
            database=settings.database,
            if_not_exists=settings.if_not_exists,
            using=settings.using,
            comment=settings.comment,
            partitioned_by=settings.partitioned_by,
        )
