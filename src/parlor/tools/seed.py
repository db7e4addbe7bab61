from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy import Engine, inspect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from parlor.domain.table.entities import TableCategory, TableStatus
from parlor.infrastructure.db.models.table import TableModel
from parlor.infrastructure.db.session import get_engine


@dataclass(frozen=True)
class TableSeed:
    table_id: int
    category: TableCategory
    hourly_rate: int


DEFAULT_TABLES = [
    *(TableSeed(table_id, TableCategory.ENGLISH, 300) for table_id in range(1, 5)),
    *(TableSeed(table_id, TableCategory.FRENCH, 200) for table_id in range(5, 9)),
]


def parse_table_specs(raw: str) -> list[TableSeed]:
    """Parse "1:ENGLISH:300,5:FRENCH:200" into seeds."""
    seeds: list[TableSeed] = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        table_id, category, hourly_rate = item.split(":")
        seeds.append(
            TableSeed(
                table_id=int(table_id),
                category=TableCategory(category.strip().upper()),
                hourly_rate=int(hourly_rate),
            )
        )
    return seeds


def seed_tables(engine: Engine, seeds: list[TableSeed]) -> int:
    insert = postgresql.insert if engine.dialect.name == "postgresql" else sqlite.insert
    with Session(engine) as session:
        for seed in seeds:
            statement = insert(TableModel).values(
                id=seed.table_id,
                category=seed.category.value,
                hourly_rate=seed.hourly_rate,
                status=TableStatus.AVAILABLE.value,
                light_on=False,
            )
            session.execute(
                statement.on_conflict_do_update(
                    index_elements=[TableModel.id],
                    set_={"category": seed.category.value, "hourly_rate": seed.hourly_rate},
                )
            )
        session.commit()
    return len(seeds)


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    if TableModel.__tablename__ not in set(inspect(engine).get_table_names()):
        print("no schema yet")
        return

    raw_specs = os.getenv("SEED_TABLES")
    seeds = parse_table_specs(raw_specs) if raw_specs else DEFAULT_TABLES
    count = seed_tables(engine, seeds)
    print(f"seed complete: {count} tables")


if __name__ == "__main__":
    main()
