from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from pydantic import BaseModel

from .adapters.base import EmailSender
from .adapters.log import LogEmailSender
from .adapters.resend import ResendEmailSender
from .config import Settings, load_settings
from .core.storage import JSONStorage
from .errors import MentorMatchError
from .logging_config import setup_logging
from .onboarding import Onboarding
from .service import MatchService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mentor-match", description="Mentor matching admin tool")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="Generate matches for an organization")
    p.add_argument("organization_id", type=int)

    p = sub.add_parser("top-matches", help="Best mentors for one mentee")
    p.add_argument("mentee_id", type=int)
    p.add_argument("--save", action="store_true", help="Persist the suggested matches")

    p = sub.add_parser("list", help="List matches of an organization")
    p.add_argument("organization_id", type=int)
    p.add_argument("--status", choices=["pending", "approved", "rejected", "completed"])

    for name in ("approve", "reject"):
        p = sub.add_parser(name, help=f"{name.capitalize()} a match")
        p.add_argument("match_id", type=int)
        p.add_argument("--admin", required=True, help="Id of the approving administrator")

    p = sub.add_parser("follow-up", help="Send the follow-up email for a match")
    p.add_argument("match_id", type=int)

    p = sub.add_parser("request-feedback", help="Ask both sides of a session for feedback")
    p.add_argument("session_id", type=int)

    p = sub.add_parser("approve-mentor", help="Approve a mentor and send the welcome email")
    p.add_argument("mentor_id", type=int)

    p = sub.add_parser("approve-mentee", help="Approve a mentee and send the welcome email")
    p.add_argument("mentee_id", type=int)

    p = sub.add_parser("analytics", help="Summary figures for an organization")
    p.add_argument("organization_id", type=int)
    return parser


def build_sender(settings: Settings) -> EmailSender:
    if settings.resend_api_key:
        return ResendEmailSender(
            settings.resend_api_key, settings.email_from, sandbox=settings.email_sandbox
        )
    return LogEmailSender()


def _emit(result: BaseModel | list[BaseModel]) -> None:
    if isinstance(result, list):
        print(json.dumps([r.model_dump(mode="json") for r in result], indent=2))
    else:
        print(result.model_dump_json(indent=2))


def run(args: argparse.Namespace, service: MatchService, onboarding: Onboarding) -> None:
    lifecycle = service.lifecycle
    if args.command == "generate":
        _emit(service.generate_for_organization(args.organization_id))
    elif args.command == "top-matches":
        _emit(service.top_matches_for_mentee(args.mentee_id, persist=args.save))
    elif args.command == "list":
        _emit(service.list_matches(args.organization_id, args.status))
    elif args.command == "approve":
        _emit(lifecycle.approve(args.match_id, args.admin))
    elif args.command == "reject":
        _emit(lifecycle.reject(args.match_id, args.admin))
    elif args.command == "follow-up":
        _emit(lifecycle.send_follow_up(args.match_id))
    elif args.command == "request-feedback":
        _emit(lifecycle.request_feedback(args.session_id))
    elif args.command == "approve-mentor":
        _emit(onboarding.approve_mentor(args.mentor_id))
    elif args.command == "approve-mentee":
        _emit(onboarding.approve_mentee(args.mentee_id))
    elif args.command == "analytics":
        _emit(service.analytics(args.organization_id))


def main(argv: Sequence[str] | None = None) -> int:
    log = setup_logging()
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        log.error("Invalid configuration: %s", exc)
        return 2
    if not settings.resend_api_key:
        log.warning("RESEND_API_KEY is not set; emails will only be logged.")
    storage = JSONStorage(settings.data_path)
    sender = build_sender(settings)
    try:
        run(args, MatchService(storage, sender, settings), Onboarding(storage, sender))
    except MentorMatchError as exc:
        log.error("%s", exc)
        return 1
    finally:
        sender.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
