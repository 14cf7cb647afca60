import logging
import signal
import sys
import json
import argparse
import threading
from datetime import datetime
from dataclasses import asdict

from sqlalchemy.exc import OperationalError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from core.app_context import AppContext
from core.config_loader import load_config
from core.exceptions import MatchingError
from core.scorer.models import MatchResult
from database import database
from database.uow import matching_uow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Set on SIGINT/SIGTERM; a running batch stops before its next worker
stop_event = threading.Event()


def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    stop_event.set()


@retry(
    stop=stop_after_attempt(5),
    wait=wait_fixed(2),
    retry=retry_if_exception_type(OperationalError),
    reraise=True
)
def wait_for_db():
    """Create tables, retrying while the database is unreachable."""
    database.init_db()
    logger.info("Database ready")


def _result_row(result: MatchResult) -> dict:
    return {
        'job_id': result.job_id,
        'worker_id': result.worker_id,
        'score': round(result.aggregate_score, 4),
        'status': result.status.value,
        'breakdown': {k: round(v, 4) for k, v in result.breakdown.as_dict().items()},
        'gated_by': sorted(result.gated_by),
    }


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_match_job(ctx: AppContext, args) -> int:
    worker_filter = {}
    if args.skills:
        worker_filter['skills'] = args.skills
    if args.workers:
        worker_filter['worker_ids'] = args.workers

    with matching_uow() as repo:
        batch = ctx.service_for(repo).match_job(
            args.job_id,
            threshold=args.threshold,
            worker_filter=worker_filter or None,
            weights=args.profile,
            stop_event=stop_event,
            persist=not args.dry_run
        )

    logger.info(
        f"Job {batch.job_id}: {len(batch.matches)} matches, {len(batch.skipped)} skipped, "
        f"{batch.evaluated} evaluated{' (cancelled)' if batch.cancelled else ''}"
    )
    _print_json({
        'job_id': batch.job_id,
        'threshold': batch.threshold,
        'weight_profile': batch.weight_profile,
        'cancelled': batch.cancelled,
        'matches': [_result_row(m) for m in batch.matches],
        'skipped': [asdict(s) for s in batch.skipped],
    })
    return 0


def cmd_match_jobs(ctx: AppContext, args) -> int:
    with matching_uow() as repo:
        batches = ctx.service_for(repo).match_jobs(
            args.job_ids,
            threshold=args.threshold,
            weights=args.profile,
            stop_event=stop_event,
            persist=not args.dry_run
        )

    _print_json({
        job_id: {
            'error': batch.error,
            'cancelled': batch.cancelled,
            'matches': [_result_row(m) for m in batch.matches],
        }
        for job_id, batch in batches.items()
    })
    return 0


def cmd_match_worker(ctx: AppContext, args) -> int:
    with matching_uow() as repo:
        results = ctx.service_for(repo).match_worker(args.worker_id, threshold=args.threshold, weights=args.profile)
    _print_json([_result_row(r) for r in results])
    return 0


def cmd_insights(ctx: AppContext, args) -> int:
    with matching_uow() as repo:
        insights = ctx.service_for(repo).job_insights(args.job_id)
    _print_json(asdict(insights))
    return 0


def cmd_check_conflict(ctx: AppContext, args) -> int:
    with matching_uow() as repo:
        conflicts = ctx.service_for(repo).check_conflicts(args.worker_id, args.start, args.end)
    _print_json([
        {
            'availability_id': c.availability.id,
            'title': c.availability.title,
            'type': c.availability.type.value,
            'first_conflict_date': c.first_conflict_date,
        }
        for c in conflicts
    ])
    return 1 if conflicts else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Worker-job matching engine')
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('match-job', help='Score the worker pool against a job')
    p.add_argument('job_id')
    p.add_argument('--threshold', type=float, default=None)
    p.add_argument('--profile', default=None, help='Weight profile name')
    p.add_argument('--skills', nargs='+', help='Only workers with any of these skills')
    p.add_argument('--workers', nargs='+', help='Only these worker ids')
    p.add_argument('--dry-run', action='store_true', help='Score without saving or notifying')
    p.set_defaults(func=cmd_match_job)

    p = sub.add_parser('match-jobs', help='Score the worker pool against several jobs')
    p.add_argument('job_ids', nargs='+')
    p.add_argument('--threshold', type=float, default=None)
    p.add_argument('--profile', default=None, help='Weight profile name')
    p.add_argument('--dry-run', action='store_true', help='Score without saving or notifying')
    p.set_defaults(func=cmd_match_jobs)

    p = sub.add_parser('match-worker', help='Rank active jobs for a worker')
    p.add_argument('worker_id')
    p.add_argument('--threshold', type=float, default=None)
    p.add_argument('--profile', default=None, help='Weight profile name')
    p.set_defaults(func=cmd_match_worker)

    p = sub.add_parser('insights', help='Summarise the stored matches of a job')
    p.add_argument('job_id')
    p.set_defaults(func=cmd_insights)

    p = sub.add_parser('check-conflict', help='List entries blocking a proposed window')
    p.add_argument('worker_id')
    p.add_argument('start', type=datetime.fromisoformat)
    p.add_argument('end', type=datetime.fromisoformat)
    p.set_defaults(func=cmd_check_conflict)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    config = load_config(args.config)
    if config.database.url != database.DATABASE_URL:
        database.configure(config.database.url)

    if not config.matching.enabled and args.command in ('match-job', 'match-jobs', 'match-worker'):
        logger.info("Matching disabled in config")
        return 0

    try:
        ctx = AppContext.build(config)
        wait_for_db()
        return args.func(ctx, args)
    except MatchingError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
