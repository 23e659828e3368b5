import os

from fastapi import FastAPI, HTTPException

from arrow_spark.config import load_settings
from arrow_spark.router import route
from arrow_spark.utils.exceptions import SparkSchemaError

settings = load_settings(os.getenv("ARROW_SPARK_CONFIG"))

app = FastAPI(
    title="Arrow Spark Schema",
    version="1.0.0"
)


def _error_detail(e: Exception) -> dict:
    return {
        "status": "ERROR",
        "error_type": type(e).__name__,
        "message": str(e),
        "field_path": getattr(e, "field_path", None),
    }


@app.post("/spark-ddl")
def spark_ddl(payload: dict):
    try:
        return route(payload, settings)
    except SparkSchemaError as e:
        # Schema cannot be expressed in Spark: the input is at fault
        raise HTTPException(status_code=422, detail=_error_detail(e))
    except (ValueError, FileNotFoundError, ImportError) as e:
        raise HTTPException(status_code=400, detail=_error_detail(e))
