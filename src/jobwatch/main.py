# main.py
import argparse
import asyncio
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from jobwatch.core.exceptions import JobWatchError
from jobwatch.core.logging_config import configure_logging
from jobwatch.core.models.job import Job, JobStatus
from jobwatch.core.settings import app_settings, logger
from jobwatch.engine import JobWatchEngine, create_engine


# main lives at the outermost layer (not in core)
# Builds the engine from settings
# Renders store and telemetry state to the console
# Runs the requested operator command

STATUS_STYLES = {
    JobStatus.PENDING: "yellow",
    JobStatus.RUNNING: "cyan",
    JobStatus.SUCCESS: "green",
    JobStatus.FAILED: "red",
}

console = Console()


def render_jobs(engine: JobWatchEngine) -> Table:
    table = Table(title=f"Recent jobs ({len(engine.store)})")
    table.add_column("ID", overflow="fold")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Attempts", justify="right")
    table.add_column("Created")
    for job in engine.store.list():
        style = STATUS_STYLES.get(job.status, "")
        table.add_row(
            job.id,
            job.type,
            f"[{style}]{job.status}[/{style}]",
            f"{job.attempts} / {job.max_attempts}",
            job.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    return table


def render_counts(engine: JobWatchEngine) -> Table:
    table = Table(title="Status")
    counts = engine.store.status_counts()
    for status in JobStatus:
        table.add_column(status.value.title(), justify="right", style=STATUS_STYLES[status])
    table.add_row(*(str(counts[status]) for status in JobStatus))
    return table


def render_calls(engine: JobWatchEngine) -> Table:
    calls = engine.telemetry.snapshot()
    table = Table(title=f"Recent API calls ({len(calls)})")
    table.add_column("Method")
    table.add_column("Path", overflow="fold")
    table.add_column("Status", justify="right")
    table.add_column("Duration", justify="right")
    # Newest first for display
    for call in reversed(calls):
        status = str(call.status) if call.status is not None else "ERR"
        style = "green" if call.is_success() else "red"
        table.add_row(call.method, call.path, f"[{style}]{status}[/{style}]", f"{call.duration}ms")
    return table


def render_job(job: Job) -> Table:
    table = Table(title="Job detail", show_header=False)
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    for field, value in job.to_wire().items():
        table.add_row(field, str(value))
    return table


async def watch_until_done(engine: JobWatchEngine, job_id: str) -> None:
    """Poll job_id and print each observed status change until polling ends."""
    last = {"status": None}

    def on_change() -> None:
        job = engine.store.get(job_id)
        if job is not None and job.status != last["status"]:
            last["status"] = job.status
            console.print(f"{job_id}: [{STATUS_STYLES[job.status]}]{job.status}[/]")

    unsubscribe = engine.store.subscribe(on_change)
    try:
        if not engine.jobs.watch(job_id):
            return
        while engine.polling.is_polling(job_id):
            await asyncio.sleep(engine.polling.interval / 2)
    finally:
        unsubscribe()
        engine.jobs.unwatch(job_id)


async def run(args: argparse.Namespace) -> int:
    async with create_engine() as engine:
        try:
            if args.command == "health":
                healthy = await engine.health.check()
                console.print("[green]healthy[/]" if healthy else "[red]unhealthy[/]")
                return 0 if healthy else 1

            if args.command == "create":
                job = await engine.jobs.submit(
                    args.type,
                    args.payload,
                    max_attempts=args.max_attempts,
                    idempotency_key=args.key,
                    auto_key=args.auto_key,
                )
                console.print(f"Job created: [bold]{job.id}[/]")
                if args.watch:
                    await watch_until_done(engine, job.id)
                console.print(render_job(engine.store.get(job.id) or job))

            elif args.command == "get":
                job = await engine.jobs.refresh(args.job_id)
                if job is None:
                    console.print("[yellow]Optimistic records cannot be fetched.[/]")
                    return 1
                if args.watch:
                    await watch_until_done(engine, job.id)
                console.print(render_job(engine.store.get(job.id) or job))

            else:
                console.print(render_counts(engine))
                console.print(render_jobs(engine))
                console.print(render_calls(engine))

        except JobWatchError as exc:
            console.print(f"[red]Error:[/] {exc.message}")
            return 1
        finally:
            # The jobs view already ends with the call table
            if args.show_calls and args.command not in (None, "jobs"):
                console.print(render_calls(engine))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobwatch", description="Create and watch scheduler jobs.")
    parser.add_argument("--show-calls", action="store_true", help="print the recent API calls on exit")
    parser.add_argument("--print-settings", action="store_true", help="dump the effective settings first")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("jobs", help="show cached recent jobs")
    sub.add_parser("health", help="probe scheduler liveness")

    create = sub.add_parser("create", help="create a job")
    create.add_argument("--type", default="demo")
    create.add_argument("--payload", default='{ "msg": "hello" }', help="JSON payload")
    create.add_argument("--max-attempts", type=int, default=3)
    key_group = create.add_mutually_exclusive_group()
    key_group.add_argument("--key", help="idempotency key")
    key_group.add_argument("--auto-key", action="store_true", help="generate a random idempotency key")
    create.add_argument("--watch", action="store_true", help="poll until the job finishes")

    get = sub.add_parser("get", help="fetch one job")
    get.add_argument("job_id")
    get.add_argument("--watch", action="store_true", help="poll until the job finishes")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(app_settings.JOBWATCH_LOG_LEVEL)
    if args.print_settings:
        app_settings.print_settings(logger)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
