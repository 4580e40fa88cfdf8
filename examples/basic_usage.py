"""Basic usage example for cronkit.

This example shows:
1. Running a single job with cron() and stopping it with a CancellationToken
2. Structured schedules and their canonical cron strings
3. A Cronkit app with decorated jobs and retry backoff
"""

import asyncio
import logging

from cronkit import CancellationToken, Cronkit, CronOptions, Schedule, Step, cron


async def main():
    """Run a job every minute until it has fired twice."""
    print("cronkit Basic Usage Example")
    print("=" * 60)

    token = CancellationToken()
    runs = []

    async def heartbeat():
        runs.append(1)
        print(f"  heartbeat #{len(runs)}")
        if len(runs) == 2:
            token.cancel()

    schedule = {"minute": {"start": 0, "every": 1}}
    print(f"\n1. Schedule {schedule} -> '{Schedule.from_dict(schedule)}'")

    job = cron("heartbeat", schedule, heartbeat, CronOptions(signal=token))

    print("\n2. Waiting for two ticks (up to two minutes)...")
    await job

    print("\n" + "=" * 60)
    print("Job cancelled after two runs")


async def example_with_app():
    """Example using the Cronkit application."""
    print("\n\ncronkit App Example")
    print("=" * 60)

    app = Cronkit()

    @app.job(Schedule(minute=Step(0, 5)))
    async def poll_feeds():
        print("  polling feeds")

    @app.job("0 3 * * *", name="nightly-cleanup", backoff_schedule=[10, 60, 300])
    def cleanup():
        print("  cleaning up")

    print(f"Jobs: {app.list_jobs()}")

    async with app:
        await asyncio.sleep(1)

    print("App stopped")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
    asyncio.run(example_with_app())
