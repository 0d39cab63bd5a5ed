"""
Create the first administrator account.

Does nothing when an account already uses the email.

Run from project root:
  python -m localiz.scripts.seed_admin --email admin@example.com --password '...'

ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_USERNAME are used when the
options are omitted.
"""

import argparse
import logging
import os
import sys

from psycopg_pool import ConnectionPool

from localiz.adapters.repository import PostgresUserRepository, run_migrations
from localiz.adapters.smtp.console import ConsoleEmailSender
from localiz.adapters.smtp.templates import EmailComposer
from localiz.adapters.tokens.jwt_tokens import JwtTokenIssuer
from localiz.config.logging import configure_logging
from localiz.config.settings import get_settings
from localiz.domain.accounts import AccountService
from localiz.domain.models import Profile

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the Localiz admin account")
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL", ""))
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD", ""))
    parser.add_argument("--username", default=os.environ.get("ADMIN_USERNAME", "admin"))
    parser.add_argument("--birthday", default=os.environ.get("ADMIN_BIRTHDAY", "1995-07-02"))
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="Localiz")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if not args.email or not args.password:
        logger.error("An admin email and password are required (options or ADMIN_EMAIL/ADMIN_PASSWORD)")
        return 2

    with ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=1) as pool:
        run_migrations(pool)
        accounts = AccountService(
            users=PostgresUserRepository(pool),
            tokens=JwtTokenIssuer(secret=settings.secret_key, algorithm=settings.jwt_algorithm),
            email_sender=ConsoleEmailSender(
                EmailComposer(front_url=settings.front_url, support_email=settings.support_email)
            ),
            bcrypt_cost=settings.bcrypt_cost,
        )
        admin = accounts.seed_admin(
            username=args.username,
            email=args.email,
            password=args.password,
            birthday=args.birthday,
            profile=Profile(first_name=args.first_name, last_name=args.last_name),
        )

    if admin is None:
        logger.info("Admin already exists: %s", args.email)
    else:
        logger.info("Admin account created: %s", admin.email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
