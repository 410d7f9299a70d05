#!/usr/bin/env python3
"""Seed the lesson catalog and the default challenge.

Creates the tables if needed and inserts the default lessons, or the lessons
listed in a JSON file, when the catalog is empty. The default challenge is
added when no challenge exists.
Run with: python scripts/seed_lessons.py [lessons.json]

Each JSON entry needs a title and may set track, content, order and is_active.
"""
import asyncio
import json
import sys
from pathlib import Path

# Add parent so we can import
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


async def seed(lessons_file: Path | None) -> int:
    from promptcademy.db import create_tables, dispose_engine, init_database, session_scope
    from promptcademy.services.challenges import seed_challenges
    from promptcademy.services.lessons import seed_lessons

    lessons = None
    if lessons_file:
        lessons = json.loads(lessons_file.read_text(encoding="utf-8"))

    init_database()
    await create_tables()
    try:
        async with session_scope() as session:
            inserted = await seed_lessons(session, lessons)
            await seed_challenges(session)
            return inserted
    finally:
        await dispose_engine()


def main():
    lessons_file = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    inserted = asyncio.run(seed(lessons_file))
    if inserted:
        print(f"✓ Seeded {inserted} lessons.")
    else:
        print("Catalog already has lessons, nothing to do.")


if __name__ == "__main__":
    main()
