from typing import Iterable, List, Optional

import pyarrow as pa

from arrow_spark.adapters.arrow_adapter import to_arrow_schema
from arrow_spark.canonical.logical_type import Field
from arrow_spark.config import RenderOptions
from arrow_spark.inference.record_inference import infer_schema
from arrow_spark.outputs.record_batch import to_record_batch
from arrow_spark.pipeline.normalizer import normalize_schema
from arrow_spark.pipeline.spark_ddl import get_spark_ddl


class HasArrowSparkSchema:
    """
    Mixin for dataclass records that can describe themselves to Spark.

        @dataclass
        class Event(HasArrowSparkSchema):
            name: str
            scores: List[int]

        Event.get_spark_ddl()   # "`name` STRING, `scores` ARRAY<BIGINT>"
    """

    @classmethod
    def get_schema(cls) -> List[Field]:
        """Normalized canonical fields, in declaration order."""
        return normalize_schema(infer_schema(cls))

    @classmethod
    def get_arrow_schema(cls) -> pa.Schema:
        return to_arrow_schema(cls.get_schema())

    @classmethod
    def get_spark_ddl(cls, options: Optional[RenderOptions] = None) -> str:
        return get_spark_ddl(infer_schema(cls), options)

    @classmethod
    def to_record_batch(cls, records: Iterable["HasArrowSparkSchema"]) -> pa.RecordBatch:
        return to_record_batch(records, cls.get_schema())
