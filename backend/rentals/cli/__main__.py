# backend/rentals/cli/__main__.py
from __future__ import annotations

import argparse

from rentals.cli.seed_demo import seed_demo
from rentals.logging_config import configure_logging


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m rentals.cli")
    sub = p.add_subparsers(dest="command", required=True)

    seed = sub.add_parser("seed", help="seed demo properties, leads and an admin role")
    seed.add_argument("--admin-email", default="admin@demo.local")
    seed.add_argument("--admin-user-id", default="00000000-0000-0000-0000-000000000001")
    seed.add_argument("--create-tables", action="store_true", help="create tables without alembic (sqlite dev)")
    seed.add_argument("--no-leads", action="store_true")
    args = p.parse_args()

    configure_logging()

    if args.command == "seed":
        out = seed_demo(
            admin_email=args.admin_email,
            admin_user_id=args.admin_user_id,
            create_tables=args.create_tables,
            with_leads=(not args.no_leads),
        )
        print(
            {
                "ok": True,
                "admin_email": out.admin_email,
                "property_ids": out.property_ids,
                "lead_ids": out.lead_ids,
                "assignment_id": out.assignment_id,
            }
        )


if __name__ == "__main__":
    main()
