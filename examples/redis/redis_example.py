"""Example: Using the Redis timer store with duracron.

The pending fire survives restarts: stop this script, wait past the next
fire time, start it again and the missed occurrence runs once.

Requirements:
    pip install duracron[redis]

Redis Server:
    docker run -d -p 6379:6379 redis:latest
"""

import time

import redis

from duracron import DurableCronScheduler, TaskSet
from duracron.contrib.storage import RedisTimerStore


def check_usage():
    print(f"[{time.strftime('%H:%M:%S')}] Checking usage...")


def send_digest():
    print(f"[{time.strftime('%H:%M:%S')}] Sending digest...")


def main():
    """Run the example."""
    print("=== duracron Redis Example ===\n")

    redis_client = redis.Redis(host="localhost", port=6379, db=0, decode_responses=True)
    try:
        redis_client.ping()
    except redis.ConnectionError:
        print("   ✗ Redis connection failed")
        print("   Please start Redis: docker run -d -p 6379:6379 redis:latest")
        return

    task_set = TaskSet.from_mapping(
        {"check-usage": "* * * * *", "send-digest": "*/15 * * * *"},
        {"check-usage": check_usage, "send-digest": send_digest},
    )
    store = RedisTimerStore(redis_client, key_prefix="duracron:example:")

    scheduler = DurableCronScheduler(task_set, store, name="redis-example")
    print(f"Status: {scheduler.get_status()}\n")

    scheduler.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        scheduler.stop()
        print("\nStopped; schedule remains in Redis.")


if __name__ == "__main__":
    main()
