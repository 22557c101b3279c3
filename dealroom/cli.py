import argparse
import json
import sys
import time

from . import keymanager
from .challenge import SessionParams
from .config import get_settings
from .deals import DealController
from .errors import DealRoomError
from .ledger import HttpLedger
from .logging import configure_logging
from .reveal import RevealFlow
from .store import RecordStore


def _controller(args) -> DealController:
    ledger = HttpLedger(args.server, timeout=args.settings.request_timeout)
    return DealController(RecordStore(ledger))


def _account(args):
    return keymanager.load_account(args.account, base_dir=args.keys_dir)


def _print_banner(controller: DealController) -> None:
    banner = controller.status_board.current()
    if banner is not None:
        print(f"[{banner.status}] {banner.message}")


def cmd_generate_account(args):
    data = keymanager.generate_account(args.name, base_dir=args.keys_dir)
    print(f"Generated account {data['name']} ({data['address']}) in {args.keys_dir}")


def cmd_create(args):
    controller = _controller(args)
    account = _account(args)
    draft = {
        "companyName": args.company,
        "valuation": args.valuation,
        "revenue": args.revenue,
        "employees": args.employees,
        "dueDiligence": args.notes,
    }
    try:
        deal_id = controller.create_deal(draft, creator=account.get_connected_address())
    finally:
        _print_banner(controller)
    print(f"Created deal {deal_id}")


def cmd_list(args):
    controller = _controller(args)
    deals = controller.list_deals(args.search or "")
    print(json.dumps([d.model_dump(mode="json", by_alias=True) for d in deals], indent=2))


def cmd_stats(args):
    print(json.dumps(_controller(args).stats().as_dict(), indent=2))


def _decide(args, status):
    controller = _controller(args)
    account = _account(args)
    try:
        controller.set_status(args.deal_id, status, requester=account.get_connected_address())
    finally:
        _print_banner(controller)


def cmd_approve(args):
    _decide(args, "approved")


def cmd_reject(args):
    _decide(args, "rejected")


def cmd_reveal(args):
    controller = _controller(args)
    account = _account(args)
    record = controller.get_deal(args.deal_id)
    session = SessionParams.start(
        contract_address=controller.store.ledger.get_address(),
        chain_id=args.settings.chain_id,
        now=time.time(),
        duration_days=args.settings.duration_days,
    )
    flow = RevealFlow(account, session, delay=args.settings.reveal_delay_seconds)
    result = flow.reveal_financials(record)
    if not result.shown:
        states = {name: req.state.value for name, req in result.requests.items()}
        raise DealRoomError(f"Financials not revealed: {states}")
    print(json.dumps({"id": record.id, "companyName": record.company_name, **result.view.as_dict()}, indent=2))


def build_parser(settings=None):
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(prog="dealroom", description="Confidential M&A deal room CLI")
    parser.add_argument("--keys-dir", default=settings.keys_dir, help="Directory for account key files")
    parser.add_argument("--server", default=settings.ledger_url, help="Ledger service base URL")
    parser.set_defaults(settings=settings)
    sub = parser.add_subparsers(dest="command", required=True)

    p_gen = sub.add_parser("generate-account", help="Generate a signing account")
    p_gen.add_argument("name")
    p_gen.set_defaults(func=cmd_generate_account)

    p_create = sub.add_parser("create", help="Submit a new encrypted deal")
    p_create.add_argument("account", help="Account name of the buyer (keys must exist)")
    p_create.add_argument("--company", required=True, help="Target company name")
    p_create.add_argument("--valuation", required=True, help="Valuation, encrypted before storage")
    p_create.add_argument("--revenue", required=True, help="Revenue, encrypted before storage")
    p_create.add_argument("--employees", required=True, help="Headcount, encrypted before storage")
    p_create.add_argument("--notes", default="", help="Due diligence notes")
    p_create.set_defaults(func=cmd_create)

    p_list = sub.add_parser("list", help="List deals, newest first")
    p_list.add_argument("--search", help="Case-insensitive match on company name or notes")
    p_list.set_defaults(func=cmd_list)

    p_stats = sub.add_parser("stats", help="Count deals by status")
    p_stats.set_defaults(func=cmd_stats)

    for name, func, help_text in (
        ("approve", cmd_approve, "Approve a pending deal (buyer only)"),
        ("reject", cmd_reject, "Reject a pending deal (buyer only)"),
        ("reveal", cmd_reveal, "Sign a viewing challenge and reveal a deal's financials"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("deal_id")
        p.add_argument("account", help="Account name (keys must exist)")
        p.set_defaults(func=func)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.settings.log_level, json_logs=args.settings.json_logs)
    try:
        args.func(args)
    except (DealRoomError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
