import os
from typing import List

import pyarrow.parquet as pq

from arrow_spark.adapters.arrow_adapter import from_arrow_schema
from arrow_spark.canonical.logical_type import Field


class ParquetAdapter:
    """
    Reads the Arrow schema stored in a Parquet footer.

    Responsibilities:
    - Read Parquet schema (no row data)
    - Convert it to canonical fields, order preserved

    DOES NOT:
    - Normalize types
    - Map to Spark
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    def parse(self) -> List[Field]:
        if not os.path.exists(self.file_path):
            raise FileNotFoundError(f"Parquet file not found: {self.file_path}")

        schema = pq.read_schema(self.file_path)
        return from_arrow_schema(schema)
