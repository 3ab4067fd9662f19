# scripts/setup/reset_data.py
"""
Reset scan data — deletes every entry/exit log and sets occupancy to 0.
Max capacity is kept. Run with the backend stopped or idle.
Usage: python scripts/setup/reset_data.py [--yes]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal
from app.services.entry_exit_service import count_logs
from app.services.occupancy_service import read_occupancy
from app.services.maintenance_service import reset_data


def main():
    parser = argparse.ArgumentParser(description="Clear entry/exit logs and zero occupancy")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        state = read_occupancy(db)
        print("🧹 Data reset")
        print("=" * 40)
        print(f"  - Entry/Exit logs:   {count_logs(db)}")
        print(f"  - Current occupancy: {state.current_occupancy}")
        print(f"  - Max capacity:      {state.max_capacity}")

        if not args.yes and input("\nDelete all logs and reset occupancy? [y/N] ").lower() != "y":
            print("Aborted.")
            return

        summary = reset_data(db)
        print(f"\n✅ Deleted {summary.deleted_logs} entry/exit logs")
        print(f"✅ Occupancy {summary.previous_occupancy} → {summary.current_occupancy} "
              f"(capacity {summary.max_capacity})")
    except Exception as e:
        print(f"💥 Reset failed: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
