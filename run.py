"""
TalentFlow — hiring pipeline manager
CLI entry point driving the client stores against the simulated API.
"""

import argparse
import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.context import AppContext
from config.settings import settings
from models.errors import StorageUnavailableError, TalentFlowError
from tools.mentions import NoteComposer


def print_jobs(ctx: AppContext) -> None:
    page = ctx.jobs.visible_page()
    print(f"Showing {len(page.jobs)} of {page.visible_count} jobs "
          f"(page {ctx.jobs.current_page}/{max(page.total_pages, 1)})")
    for job in page.jobs:
        flag = " [archived]" if job.archived else ""
        print(f"  {job.order:>3}  {job.id:<10} {job.title} — {job.company} "
              f"({job.type}, {job.status}){flag}")


def print_candidates(ctx: AppContext) -> None:
    p = ctx.candidates.pagination
    if p:
        print(f"Page {p.page}/{p.total_pages} — {p.total} candidates")
    for c in ctx.candidates.candidates:
        print(f"  {c.id:<15} {c.name:<25} {c.email:<35} {c.status}")


async def run_command(ctx: AppContext, args) -> None:
    if args.command == "seed":
        print(f"Jobs: {ctx.db.jobs.count()}  Assessments: {ctx.db.assessments.count()}")

    elif args.command == "jobs":
        if args.archived:
            ctx.jobs.toggle_show_archived()
        for key in ("search", "status", "type"):
            value = getattr(args, key)
            if value:
                ctx.jobs.set_filter(key, value)
        await ctx.jobs.fetch_jobs()
        ctx.jobs.set_page(args.page)
        print_jobs(ctx)

    elif args.command == "reorder":
        await ctx.jobs.fetch_jobs()
        result = await ctx.jobs.reorder_jobs(args.source, args.destination)
        print("Reordered." if result.success else f"Reorder failed: {result.message}")
        print_jobs(ctx)

    elif args.command == "archive":
        job = await (ctx.jobs.unarchive_job(args.job_id) if args.undo else ctx.jobs.archive_job(args.job_id))
        print(f"{job.title}: archived={job.archived}")

    elif args.command == "candidates":
        ctx.candidates.set_search(args.search or "")
        ctx.candidates.set_status_filter(args.status or "all")
        await ctx.candidates.fetch_candidates(args.page)
        if args.kanban:
            for status, column in ctx.candidates.kanban_columns().items():
                print(f"{status:<10} {len(column)}")
        else:
            print_candidates(ctx)

    elif args.command == "status":
        candidate = await ctx.candidates.update_candidate_status(args.candidate_id, args.status)
        print(f"{candidate.name}: {candidate.status}")

    elif args.command == "note":
        composer = NoteComposer()
        composer.set_text(args.text)
        submitted = composer.submit()
        if submitted is None:
            print("Empty note, nothing to add.")
            return
        text, mentions = submitted
        note = await ctx.candidates.add_note(args.candidate_id, text, mentions)
        print(f"Note {note.id} added" + (f", mentioning {', '.join(mentions)}" if mentions else ""))

    elif args.command == "history":
        for change in await ctx.candidates.fetch_status_history(args.candidate_id):
            print(f"  {change.timestamp}  {change.from_status or '—'} → {change.to}  by {change.changed_by}")

    elif args.command == "assessments":
        await ctx.assessments.fetch_assessments()
        for a in ctx.assessments.assessments:
            print(f"  {a.id:<38} job {a.job_id:<38} {a.title} ({len(a.questions)} questions)")


async def main_async(args) -> int:
    config = settings
    if args.latency_ms is not None:
        config.api_latency_ms = args.latency_ms
    if args.failure_rate is not None:
        config.api_failure_rate = args.failure_rate

    try:
        ctx = AppContext.create(config)
    except StorageUnavailableError as e:
        print(f"❌ {e}")
        return 2

    async with ctx:
        try:
            await run_command(ctx, args)
        except TalentFlowError as e:
            print(f"❌ {e}")

        if ctx.ui.global_error and args.retry:
            print(f"⚠️  {ctx.ui.global_error} — retrying...")
            await ctx.retry_all()
            if args.command in ("jobs", "reorder"):
                print_jobs(ctx)
            elif args.command == "candidates":
                print_candidates(ctx)

        if ctx.ui.global_error:
            print(f"⚠️  {ctx.ui.global_error}")
            return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TalentFlow — hiring pipeline manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py jobs --search react --type full-time
  python run.py reorder 0 3
  python run.py candidates --status interview --page 2
  python run.py note candidate-7 "Great call, looping in @Alice Johnson"
        """,
    )
    parser.add_argument("--latency-ms", type=int, default=None, help="Override simulated API latency")
    parser.add_argument("--failure-rate", type=float, default=None, help="Override injected failure rate (0-1)")
    parser.add_argument("--retry", action="store_true", help="Replay the last action once if it failed")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("seed", help="Open and seed the database, then show counts")

    jobs = sub.add_parser("jobs", help="List jobs")
    jobs.add_argument("--search")
    jobs.add_argument("--status", choices=["all", "open", "closed"])
    jobs.add_argument("--type", choices=["all", "full-time", "part-time", "contract"])
    jobs.add_argument("--archived", action="store_true", help="Show archived jobs instead")
    jobs.add_argument("--page", type=int, default=1)

    reorder = sub.add_parser("reorder", help="Move a job from one position to another")
    reorder.add_argument("source", type=int)
    reorder.add_argument("destination", type=int)

    archive = sub.add_parser("archive", help="Archive (or --undo to unarchive) a job")
    archive.add_argument("job_id")
    archive.add_argument("--undo", action="store_true")

    candidates = sub.add_parser("candidates", help="List candidates")
    candidates.add_argument("--search")
    candidates.add_argument("--status")
    candidates.add_argument("--page", type=int, default=1)
    candidates.add_argument("--kanban", action="store_true", help="Show counts per status column")

    status = sub.add_parser("status", help="Change a candidate's status")
    status.add_argument("candidate_id")
    status.add_argument("status", choices=["new", "screening", "interview", "offer", "rejected"])

    note = sub.add_parser("note", help="Add a note to a candidate")
    note.add_argument("candidate_id")
    note.add_argument("text")

    history = sub.add_parser("history", help="Show a candidate's status history")
    history.add_argument("candidate_id")

    sub.add_parser("assessments", help="List assessments")

    return parser


def main():
    """Main entry point for the TalentFlow CLI."""
    args = build_parser().parse_args()
    try:
        sys.exit(asyncio.run(main_async(args)))
    except KeyboardInterrupt:
        print("\n\n⛔ Interrupted by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
