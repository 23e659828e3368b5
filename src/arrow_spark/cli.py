import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from arrow_spark.config import load_settings
from arrow_spark.router import route


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"


def _use_color() -> bool:
    return os.getenv("LOG_COLOR", "0") == "1" and sys.stdout.isatty()


def cprint(text: str, color: str = C.RESET, bold: bool = False):
    if not _use_color():
        print(text)
        return
    prefix = (C.BOLD if bold else "") + color
    print(f"{prefix}{text}{C.RESET}")


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arrow-spark",
        description="Derive Spark SQL DDL from a Parquet schema or a dataclass record",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", help="Parquet file whose schema is described")
    source.add_argument("--record", help="Dataclass record as 'package.module:Class'")

    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--table", help="Emit a CREATE TABLE statement for this table")
    parser.add_argument("--database", help="Database qualifying the table")
    parser.add_argument("--using", help="Table format (default from config, DELTA)")
    parser.add_argument(
        "--strict-field-names",
        action="store_true",
        default=None,
        help="Fail on column names that cannot be backtick-quoted as-is",
    )
    parser.add_argument("--max-depth", type=int, help="Maximum type nesting depth")
    parser.add_argument("--output-dir", help="Also write create_table.sql / columns.sql here")
    return parser


def _build_payload_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    payload = {
        "file_path": args.file,
        "record": args.record,
        "table": args.table,
        "database": args.database,
        "using": args.using,
        "strict_field_names": args.strict_field_names,
        "max_depth": args.max_depth,
    }
    # Unset flags fall back to the config file
    return {k: v for k, v in payload.items() if v is not None}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
        payload = _build_payload_from_args(args)
        response = route(payload, settings)
    except Exception as e:
        cprint("[FAILED] Spark DDL generation failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        return 1

    output = response.get("table_ddl") or response["ddl_fragment"]
    print(output)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        name = "create_table.sql" if "table_ddl" in response else "columns.sql"
        path = os.path.join(args.output_dir, name)
        _write_text(path, output + "\n")
        cprint(f"[DONE] Written to: {path}", C.GREEN, bold=True)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
