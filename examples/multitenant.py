"""Example: one scheduler per user behind a single entry point.

Each user gets an isolated store and task set; requests are routed by name.
"""

import time

from duracron import InMemoryTimerStore, SchedulerNamespace, TaskSet

PLAN_TASKS = {
    "free": {"check-usage": "*/5 * * * *"},
    "pro": {"check-usage": "* * * * *", "clean-mail": "0 0 * * *"},
}
USER_PLANS = {"jonny-alexander": "pro", "sam-lee": "free"}


def make_handler(user: str, task: str):
    def handler():
        print(f"[{time.strftime('%H:%M:%S')}] {user}: {task}")

    return handler


def task_set_for(user: str) -> TaskSet:
    patterns = PLAN_TASKS[USER_PLANS[user]]
    return TaskSet.from_mapping(patterns, {name: make_handler(user, name) for name in patterns})


def main():
    namespace = SchedulerNamespace(
        task_set_factory=task_set_for,
        store_factory=lambda user: InMemoryTimerStore(),
        start_dispatchers=True,
    )

    for user in USER_PLANS:
        print(namespace.fetch(user, {"path": "/"}))
        print(f"   {namespace.get(user).get_status()['pending_task']}")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        namespace.shutdown()


if __name__ == "__main__":
    main()
