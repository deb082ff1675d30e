"""
Data Export Script

Exports all student records tables and the rated student views to JSON.
Usage: python -m app.scripts.data_export --output data.json.gz
"""
import asyncio
import json
import gzip
import argparse
from datetime import datetime
from pathlib import Path
from sqlalchemy import text

from app.database import AsyncSessionLocal
from app.services.record_store import RecordStore
from app.services.rating_calculator import get_rating_calculator
from app.services.student_aggregator import aggregate_student_rows


TABLES_TO_EXPORT = [
    "students",
    "courses",
    "grades",
    "attendance",
]


async def export_table(table_name: str) -> list:
    """
    Export all records from a table.

    Args:
        table_name: Name of table to export

    Returns:
        list: All records as dictionaries
    """
    async with AsyncSessionLocal() as session:
        query = text(f"SELECT * FROM {table_name} ORDER BY id")
        result = await session.execute(query)

        columns = result.keys()
        records = []
        for row in result.fetchall():
            record = {}
            for col, val in zip(columns, row):
                # Convert non-JSON-serializable types
                if isinstance(val, datetime):
                    record[col] = val.isoformat()
                else:
                    record[col] = val
            records.append(record)

        return records


async def export_ratings() -> list:
    """Rated student views, ranked highest first"""
    async with AsyncSessionLocal() as session:
        rows = await RecordStore(session).fetch_student_rows()

    ranked = get_rating_calculator().rank_students(aggregate_student_rows(rows))
    return [student.model_dump() for student in ranked]


async def export_all_data(output_file: str, compress: bool = True):
    """
    Export all data to JSON file.

    Args:
        output_file: Path to output file
        compress: Whether to compress with gzip (default True)
    """
    print(f"Starting data export to {output_file}...")

    data = {}
    total_records = 0

    for table in TABLES_TO_EXPORT:
        print(f"Exporting {table}...", end=" ")
        records = await export_table(table)
        data[table] = records
        total_records += len(records)
        print(f"{len(records)} records")

    ratings = await export_ratings()
    print(f"Exporting ratings... {len(ratings)} students")

    export_data = {
        "metadata": {
            "export_time": datetime.utcnow().isoformat(),
            "version": "1.0",
            "tables": TABLES_TO_EXPORT,
            "total_records": total_records
        },
        "data": data,
        "ratings": ratings
    }

    json_str = json.dumps(export_data, indent=2, ensure_ascii=False)

    if compress and output_file.endswith(".gz"):
        with gzip.open(output_file, 'wt', encoding='utf-8') as f:
            f.write(json_str)
        print(f"\n✓ Export complete: {output_file} (compressed)")
    else:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(json_str)
        print(f"\n✓ Export complete: {output_file}")

    file_size = Path(output_file).stat().st_size / 1024  # KB
    print(f"  File size: {file_size:.2f} KB")
    print(f"  Total records: {total_records}")


def main():
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="Export student records database to JSON")
    parser.add_argument(
        "--output",
        "-o",
        default="students_export.json.gz",
        help="Output file path (default: students_export.json.gz)"
    )
    parser.add_argument(
        "--no-compress",
        action="store_true",
        help="Disable gzip compression"
    )

    args = parser.parse_args()

    asyncio.run(export_all_data(args.output, compress=not args.no_compress))


if __name__ == "__main__":
    main()
