"""
Run one talk CSV import from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from app.schemas.talk_import import ImportRunResponse
from app.services.import_orchestrator_service import get_import_orchestrator_service


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import TED talks from a CSV file.")
    parser.add_argument("csv_path", help="Path to a CSV with title,author,date,views,likes,link columns.")
    parser.add_argument(
        "--show-errors",
        action="store_true",
        help="Include every row validation error in the output.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level for the import run (default: INFO).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    path = Path(args.csv_path)
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    orchestrator = get_import_orchestrator_service()
    run = orchestrator.run_import_file(str(path))

    payload = ImportRunResponse.from_run(run).model_dump(mode="json")
    if args.show_errors:
        payload["validation_errors"] = [
            error.to_dict() for error in run.statistics.all_validation_errors()
        ]
    print(json.dumps(payload, indent=2))
    return 1 if run.status.value == "FAILED" else 0


if __name__ == "__main__":
    raise SystemExit(main())
