"""duracron Quick Start Example."""

import time
from datetime import datetime

from duracron import DurableCronScheduler, InMemoryTimerStore, TaskRegistry

registry = TaskRegistry()


@registry.task("check-usage", "* * * * *")
def check_usage():
    """Runs every minute."""
    print(f"[{datetime.now()}] Checking usage...")


@registry.task("clean-mail", "0 0 * * *", timeout_seconds=60)
def clean_mail():
    """Runs daily at midnight."""
    print(f"[{datetime.now()}] Cleaning mail...")


def main():
    """Main function to demonstrate duracron usage."""
    print("=== duracron Quick Start ===\n")

    # 1. Freeze the registered tasks into a snapshot
    task_set = registry.snapshot()
    print(f"1. Task set v{task_set.version}: {task_set.names()}")

    # 2. Create scheduler (reconciles persisted state before returning)
    store = InMemoryTimerStore()
    scheduler = DurableCronScheduler(task_set, store, name="quickstart")

    status = scheduler.get_status()
    print(f"2. Next fire: {status['pending_task']} at {status['fire_at']}\n")

    # 3. Deliver alarms from a background thread
    scheduler.start()
    print("3. Scheduler running (Ctrl+C to stop)...\n")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping...")
        print(f"   {scheduler.stop()}")


if __name__ == "__main__":
    main()
