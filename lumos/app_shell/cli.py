import argparse
import logging
import sys
from datetime import timedelta
from uuid import UUID

from lumos.adapters.auth.session import SessionTokens
from lumos.adapters.clock import SystemClock
from lumos.adapters.sqlite.migrator import SQLiteMigrator
from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.app_shell.config import Settings, validate_settings
from lumos.components.subscriptions import normalize_email
from lumos.components.tokens import TokenClaims, TokenCodec, TokenConfig, build_action_url
from lumos.domain.entities import User
from lumos.ports.repo import DuplicateKeyError
from lumos.rules.loader import load_rules
from lumos.rules.models import Rules

logger = logging.getLogger("cli")


def load_context() -> tuple[Settings, Rules]:
    settings = Settings()
    try:
        validate_settings(settings)
        rules = load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    return settings, rules


def handle_migrate(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    print(f"Applied {len(applied)} migrations to {settings.db_path}.")


def handle_create_user(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    email = normalize_email(args.email)
    if email is None:
        logger.error(f"Invalid email address: {args.email}")
        sys.exit(1)

    with SQLiteUnitOfWork(settings.db_path) as uow:
        try:
            user = uow.users.add(User(email=email, name=args.name))
        except DuplicateKeyError:
            logger.error(f"User {email} already exists.")
            sys.exit(1)
        uow.commit()
    print(f"User created: {user.id}")


def handle_session_token(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    with SQLiteUnitOfWork(settings.db_path) as uow:
        user = uow.users.get_by_email(args.email)
    if user is None:
        logger.error(f"User {args.email} not found.")
        sys.exit(1)

    ttl = timedelta(minutes=args.minutes or rules.tokens.session_ttl_minutes)
    print(SessionTokens(settings.secret_key).create(user.id, ttl))


def handle_unsubscribe_link(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    codec = TokenCodec(TokenConfig(settings.secret_key, rules.tokens.algorithm), SystemClock())
    token = codec.issue(
        TokenClaims(email=args.email.strip().lower(), publication_id=args.publication_id),
        timedelta(minutes=rules.tokens.unsubscribe_ttl_minutes),
    )
    print(build_action_url(settings.base_url, rules.paths.unsubscribe_page, token))


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Lumos CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")

    user_parser = subparsers.add_parser("create-user", help="Create a user")
    user_parser.add_argument("email")
    user_parser.add_argument("--name", default=None)

    session_parser = subparsers.add_parser("session-token", help="Mint a session token for a user")
    session_parser.add_argument("email")
    session_parser.add_argument("--minutes", type=int, default=None)

    link_parser = subparsers.add_parser("unsubscribe-link", help="Mint an unsubscribe link")
    link_parser.add_argument("email")
    link_parser.add_argument("publication_id", type=UUID)

    args = parser.parse_args(argv)

    settings, rules = load_context()

    handlers = {
        "migrate": handle_migrate,
        "create-user": handle_create_user,
        "session-token": handle_session_token,
        "unsubscribe-link": handle_unsubscribe_link,
    }
    handlers[args.command](settings, rules, args)


if __name__ == "__main__":
    main()
