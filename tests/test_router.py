import textwrap

import pyarrow as pa
import pyarrow.parquet as pq
import pytest
from fastapi.testclient import TestClient

from arrow_spark import main as api
from arrow_spark import router
from arrow_spark.canonical import logical_type as lt
from arrow_spark.canonical.logical_type import Field
from arrow_spark.config import RenderOptions, Settings, TableSettings
from arrow_spark.router import import_record, route
from arrow_spark.utils.exceptions import NestingTooDeepError, UnsupportedTypeError


@pytest.fixture
def events(monkeypatch):
    captured = []
    monkeypatch.setattr(router, "log_event", lambda event_type, payload: captured.append((event_type, payload)))
    return captured


@pytest.fixture
def parquet_file(tmp_path):
    table = pa.table({
        "name": pa.array(["a"], pa.large_string()),
        "scores": pa.array([[1, 2]], pa.list_(pa.int32())),
    })
    path = tmp_path / "scores.parquet"
    pq.write_table(table, path)
    return str(path)


@pytest.fixture
def bad_parquet_file(tmp_path):
    table = pa.table({"at": pa.array([0], pa.timestamp("us"))})
    path = tmp_path / "times.parquet"
    pq.write_table(table, path)
    return str(path)


@pytest.fixture
def record_module(tmp_path, monkeypatch):
    (tmp_path / "sample_records.py").write_text(textwrap.dedent("""
        from dataclasses import dataclass
        from typing import List

        @dataclass
        class Sample:
            name: str
            scores: List[int]
    """), encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "sample_records:Sample"


def test_route_parquet(parquet_file, events):
    response = route({"file_path": parquet_file})

    assert response["status"] == "SUCCESS"
    assert response["ddl_fragment"] == "`name` STRING, `scores` ARRAY<INT>"
    assert response["columns"] == [
        {"name": "name", "type": "STRING", "nullable": True},
        {"name": "scores", "type": "ARRAY<INT>", "nullable": True},
    ]
    assert "table_ddl" not in response
    assert [e for e, _ in events] == ["SPARK_DDL_STARTED", "SPARK_DDL_COMPLETED"]


def test_route_record_with_table(record_module, events):
    response = route({"record": record_module, "table": "samples", "database": "db"})

    assert response["ddl_fragment"] == "`name` STRING, `scores` ARRAY<BIGINT>"
    assert response["table_ddl"].startswith("CREATE TABLE IF NOT EXISTS `db`.`samples` (")


def test_route_uses_settings(parquet_file, events):
    settings = Settings(
        render=RenderOptions(),
        table=TableSettings(name="scores", using="PARQUET"),
        source_file=parquet_file,
    )
    response = route({}, settings)
    assert response["table_ddl"].endswith("USING PARQUET;")


def test_route_failure_is_logged_and_raised(bad_parquet_file, events):
    with pytest.raises(UnsupportedTypeError):
        route({"file_path": bad_parquet_file})

    event_type, payload = events[-1]
    assert event_type == "SPARK_DDL_FAILED"
    assert payload["error_type"] == "UnsupportedTypeError"
    assert payload["field_path"] == "at"


def test_route_requires_source(events):
    with pytest.raises(ValueError, match="file_path"):
        route({})


@pytest.fixture
def deep_fields(monkeypatch):
    nested = lt.large_text()
    for _ in range(2000):
        nested = lt.large_list(nested)
    monkeypatch.setattr(router, "load_fields", lambda payload, settings: [Field("deep", nested)])


def test_route_deep_schema_raises_nesting_error(deep_fields, events):
    with pytest.raises(NestingTooDeepError):
        route({"file_path": "deep.parquet"})

    event_type, payload = events[-1]
    assert event_type == "SPARK_DDL_FAILED"
    assert payload["error_type"] == "NestingTooDeepError"


@pytest.mark.parametrize("path", ["no_colon", ":Cls", "module:"])
def test_import_record_bad_path(path):
    with pytest.raises(ValueError):
        import_record(path)


def test_import_record_missing_attribute():
    with pytest.raises(ValueError, match="no attribute"):
        import_record("arrow_spark.router:Missing")


# --------------------------------------------------
# HTTP surface
# --------------------------------------------------
@pytest.fixture
def client(events, monkeypatch):
    monkeypatch.setattr(api, "settings", Settings())
    return TestClient(api.app)


def test_api_success(client, parquet_file):
    response = client.post("/spark-ddl", json={"file_path": parquet_file, "table": "scores"})
    assert response.status_code == 200
    body = response.json()
    assert body["ddl_fragment"] == "`name` STRING, `scores` ARRAY<INT>"
    assert "table_ddl" in body


def test_api_unsupported_type(client, bad_parquet_file):
    response = client.post("/spark-ddl", json={"file_path": bad_parquet_file})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error_type"] == "UnsupportedTypeError"
    assert detail["field_path"] == "at"


def test_api_bad_request(client, tmp_path):
    response = client.post("/spark-ddl", json={"file_path": str(tmp_path / "missing.parquet")})
    assert response.status_code == 400
    assert response.json()["detail"]["error_type"] == "FileNotFoundError"


def test_api_deep_schema_is_unprocessable(client, deep_fields):
    response = client.post("/spark-ddl", json={"file_path": "deep.parquet"})
    assert response.status_code == 422
    assert response.json()["detail"]["error_type"] == "NestingTooDeepError"
