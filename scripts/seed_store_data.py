"""Utility script to load sample store records into the DynamoDB table."""

from __future__ import annotations

import argparse
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List
from uuid import uuid4

import boto3

from store_data import CUSTOMER, ORDER, PRODUCT, item_key, to_dynamodb

SECTIONS = {"products": PRODUCT, "orders": ORDER, "customers": CUSTOMER}
TIMESTAMP_FIELDS = ("created_at", "first_seen")


def _epoch(value: Any) -> Any:
    """Accept epoch seconds or ISO-8601 strings for timestamp fields."""
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())
    return value


def _items(store_id: str, fixture: Dict[str, List[Dict[str, Any]]]) -> Iterable[Dict[str, Any]]:
    for section, kind in SECTIONS.items():
        for record in fixture.get(section, []):
            record = dict(record)
            record_id = str(record.pop("id", None) or uuid4().hex)
            for field in TIMESTAMP_FIELDS:
                if field in record:
                    record[field] = _epoch(record[field])
            yield {**item_key(store_id, kind, record_id), "id": record_id, **to_dynamodb(record)}


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed products, orders and customers for one store")
    parser.add_argument("fixture_path", help="JSON file with 'products', 'orders' and 'customers' lists")
    parser.add_argument("--store-id", required=True)
    parser.add_argument("--table", dest="table_name", default=os.getenv("DDB_TABLE"))
    parser.add_argument("--region", default=os.getenv("AWS_REGION"))
    args = parser.parse_args()

    if not args.table_name:
        raise SystemExit("Provide --table or set DDB_TABLE")
    if not args.region:
        raise SystemExit("Provide --region or set AWS_REGION")

    fixture = json.loads(Path(args.fixture_path).read_text(encoding="utf-8"))
    table = boto3.session.Session(region_name=args.region).resource("dynamodb").Table(args.table_name)

    count = 0
    with table.batch_writer() as batch:
        for item in _items(args.store_id, fixture):
            batch.put_item(Item=item)
            count += 1

    print(f"Seeded {count} records for store {args.store_id} into {args.table_name}")


if __name__ == "__main__":
    main()
