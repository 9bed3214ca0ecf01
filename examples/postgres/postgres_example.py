"""Example: Using the PostgreSQL timer store with duracron.

Requirements:
    pip install duracron[postgres]

PostgreSQL Server:
    docker run -d -p 5432:5432 -e POSTGRES_PASSWORD=postgres postgres:16
"""

import time

import psycopg2

from duracron import DurableCronScheduler, TaskRegistry
from duracron.contrib.storage import PostgreSQLTimerStore

registry = TaskRegistry()


@registry.task("rollup-usage", "*/5 * * * *")
def rollup_usage():
    print(f"[{time.strftime('%H:%M:%S')}] Rolling up usage...")


def main():
    """Run the example."""
    print("=== duracron PostgreSQL Example ===\n")

    conn = psycopg2.connect(
        host="localhost", port=5432, user="postgres", password="postgres", dbname="postgres"
    )
    store = PostgreSQLTimerStore(conn, namespace="example")

    scheduler = DurableCronScheduler(registry.snapshot(), store, name="postgres-example")
    print(f"Problems: {scheduler.check_consistency() or 'none'}")
    print(f"Status: {scheduler.get_status()}\n")

    scheduler.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        scheduler.stop()
        conn.close()


if __name__ == "__main__":
    main()
