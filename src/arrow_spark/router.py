import importlib
from typing import Any, Dict, List, Optional

from arrow_spark.adapters.parquet_adapter import ParquetAdapter
from arrow_spark.canonical.logical_type import Field
from arrow_spark.config import RenderOptions, Settings
from arrow_spark.inference.record_inference import infer_fields
from arrow_spark.observability.logger import RequestTimer, generate_request_id, log_event
from arrow_spark.outputs.spark_table_ddl import SparkTableDDLGenerator
from arrow_spark.pipeline.normalizer import normalize_schema
from arrow_spark.pipeline.spark_ddl import field_to_spark, get_spark_ddl


def import_record(path: str) -> type:
    """
    Resolve "package.module:ClassName" to the class object.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Record path must look like 'module:Class', got {path!r}")

    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ValueError(f"{module_name} has no attribute {attr!r}") from None


def load_fields(payload: Dict[str, Any], settings: Settings) -> List[Field]:
    """
    Source dispatch: Parquet footer or dataclass record.
    """
    file_path = payload.get("file_path") or settings.source_file
    record = payload.get("record")

    if record:
        return infer_fields(import_record(record))
    if file_path:
        return ParquetAdapter(file_path).parse()

    raise ValueError("Either 'file_path' or 'record' is required")


def _render_options(payload: Dict[str, Any], settings: Settings) -> RenderOptions:
    return RenderOptions.from_dict({
        "max_depth": payload.get("max_depth", settings.render.max_depth),
        "strict_field_names": payload.get(
            "strict_field_names", settings.render.strict_field_names
        ),
    })


# ==========================================================
# ROUTER
# ==========================================================
def route(payload: Dict[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Flow:
    Source -> Canonical fields -> Normalization -> Spark DDL
    """
    settings = settings or Settings()
    request_id = generate_request_id()
    timer = RequestTimer()
    source = payload.get("record") or payload.get("file_path") or settings.source_file

    log_event("SPARK_DDL_STARTED", {
        "request_id": request_id,
        "source": source,
    })

    try:
        options = _render_options(payload, settings)
        fields = normalize_schema(load_fields(payload, settings), options.max_depth)

        fragment = get_spark_ddl(fields, options)

        response: Dict[str, Any] = {
            "status": "SUCCESS",
            "request_id": request_id,
            "columns": [
                {
                    "name": f.name,
                    "type": field_to_spark(f, options),
                    "nullable": f.nullable,
                }
                for f in fields
            ],
            "ddl_fragment": fragment,
        }

        table = payload.get("table") or settings.table.name
        if table:
            response["table_ddl"] = SparkTableDDLGenerator(fields, options).generate(
                table=table,
                database=payload.get("database", settings.table.database),
                if_not_exists=payload.get("if_not_exists", settings.table.if_not_exists),
                using=payload.get("using", settings.table.using),
                comment=payload.get("comment", settings.table.comment),
                partitioned_by=payload.get("partitioned_by", settings.table.partitioned_by),
            )

        log_event("SPARK_DDL_COMPLETED", {
            "request_id": request_id,
            "source": source,
            "column_count": len(fields),
            "duration_seconds": timer.duration(),
        })
        return response

    except Exception as e:
        log_event("SPARK_DDL_FAILED", {
            "request_id": request_id,
            "source": source,
            "error_type": type(e).__name__,
            "error": str(e),
            "field_path": getattr(e, "field_path", None),
        })
        raise
