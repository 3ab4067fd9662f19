# scripts/setup/init_db.py
"""
Initialize database — creates all tables and the occupancy config row.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--capacity 100]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.services.occupancy_service import read_occupancy, set_capacity
from sqlalchemy import text, inspect


def main():
    parser = argparse.ArgumentParser(description="Create tables and seed occupancy config")
    parser.add_argument("--capacity", type=int, default=None,
                        help=f"Max capacity (default: keep existing or {settings.MAX_CAPACITY})")
    args = parser.parse_args()

    print("🗄️  Occupancy DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"✅ Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    db = SessionLocal()
    try:
        state = set_capacity(db, args.capacity) if args.capacity else read_occupancy(db)
        print(f"\n👥 Occupancy: {state.current_occupancy}/{state.max_capacity}")
    finally:
        db.close()

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
