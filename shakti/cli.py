### Description ###
# Shakti - Loan Recovery Management Platform
# - Command Line Interface -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Shakti - Command Line Interface

Commands:
- init-db:          Create the database tables
- create-operator:  Create a platform operator (SuperAdmin)
- login:            Authenticate and remember the session locally
- logout:           Forget the local session
- whoami:           Show the local session
- serve:            Run the API server
"""

import argparse
import getpass
import sys

import uvicorn

from shakti import __version__
from shakti.config import get_api_settings, get_auth_settings, get_domain_settings
from shakti.database import SessionLocal, get_migration_revisions, init_db
from shakti.errors import ShaktiError
from shakti.services import principals
from shakti.services.authenticator import Authenticator, LockoutPolicy
from shakti.services.sessions import SessionStore, issue_session_token


def _read_password(args: argparse.Namespace, prompt: str = "Password: ") -> str:
    if args.password:
        return args.password
    return getpass.getpass(prompt)


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    print("Database tables created")

    current, head = get_migration_revisions()
    if current is None:
        print(f"Not stamped by Alembic. Run: alembic stamp {head}")
    elif current != head:
        print(f"Schema at {current}, latest is {head}. Run: alembic upgrade head")
    return 0


def cmd_create_operator(args: argparse.Namespace) -> int:
    password = _read_password(args)
    init_db()
    db = SessionLocal()
    try:
        operator = principals.create_platform_operator(
            db,
            args.username,
            password=password,
            min_password_length=get_auth_settings().min_password_length,
        )
    finally:
        db.close()
    print(f"Created platform operator '{operator.username}' (id {operator.id})")
    return 0


def cmd_login(args: argparse.Namespace) -> int:
    password = _read_password(args)
    domain = get_domain_settings()
    host = args.host or domain.base_domain

    db = SessionLocal()
    try:
        authenticator = Authenticator(
            db,
            lockout=LockoutPolicy.from_settings(get_auth_settings()),
            dev_suffix=domain.dev_suffix,
        )
        identity = authenticator.authenticate(args.identifier, password, args.role, host)
    finally:
        db.close()

    token, _ = issue_session_token(identity)
    SessionStore(args.session_file).save(identity, token)
    print(f"Logged in as {identity.name} ({identity.role})")
    return 0


def cmd_logout(args: argparse.Namespace) -> int:
    if SessionStore(args.session_file).clear():
        print("Logged out")
    else:
        print("No active session")
    return 0


def cmd_whoami(args: argparse.Namespace) -> int:
    stored = SessionStore(args.session_file).load()
    if stored is None:
        print("Not logged in")
        return 1

    identity, _ = stored
    print(f"Name:      {identity.name}")
    print(f"Role:      {identity.role}")
    print(f"Principal: {identity.principal_id}")
    if identity.tenant_id is not None:
        print(f"Tenant:    {identity.tenant_id}")
    if identity.username:
        print(f"Username:  {identity.username}")
    if identity.email:
        print(f"Email:     {identity.email}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    settings = get_api_settings()
    uvicorn.run(
        "shakti.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shakti",
        description="Shakti - Loan Recovery Management Platform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shakti init-db
  shakti create-operator ops
  shakti login bob --role CompanyAdmin --host acme.yourapp.com
  shakti whoami
  shakti serve --port 8000
""",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"Shakti {__version__}",
    )
    parser.add_argument(
        "--session-file",
        help="Where the local session is kept (default: data/session.json)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create database tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("create-operator", help="Create a platform operator")
    p.add_argument("username")
    p.add_argument("--password", help="Password (prompted when omitted)")
    p.set_defaults(func=cmd_create_operator)

    p = sub.add_parser("login", help="Log in and remember the session")
    p.add_argument("identifier", help="Username, mobile number or employee code")
    p.add_argument(
        "--role",
        default="SuperAdmin",
        choices=["SuperAdmin", "CompanyAdmin", "TeamIncharge", "Telecaller"],
    )
    p.add_argument("--host", help="Host name to resolve the tenant from (default: base domain)")
    p.add_argument("--password", help="Password (prompted when omitted)")
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("logout", help="Forget the local session")
    p.set_defaults(func=cmd_logout)

    p = sub.add_parser("whoami", help="Show the local session")
    p.set_defaults(func=cmd_whoami)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", help="Host to bind to (default: from settings)")
    p.add_argument("--port", "-p", type=int, help="Port to listen on (default: from settings)")
    p.add_argument("--reload", action="store_true", help="Reload on code changes")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ShaktiError as e:
        print(f"Error: {e.to_public()}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
