# Overview: Flask CLI command groups for bootstrap, seeding and ledger maintenance.

# backend/sutradhar/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables, the default admin and the launch offers.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users create --email admin@sutradhar.local --password "Password123" --role admin
#   Create an account with a profile (prompts if options are omitted).
#
# Offers:
# - python -m flask offers list [--active-only]
# - python -m flask offers create --code TEXTILE20 --type percent --value 20 [--min-cart 1000] [--expires 2026-12-31T00:00:00Z]
#
# Rewards:
# - python -m flask rewards reconcile [--user-id 7]
#   Reset profile point counters to the ledger sum (all profiles if no id given).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Profile
from .models.auth import ROLES, ROLE_ADMIN
from .models.offers import OFFER_PERCENT, OFFER_FIXED
from .services.auth_service import sign_up, PasswordValidationError, SignUpError
from .services import offers_service
from .services import rewards_service
from .services.offers_service import OfferError
from .time_utils import parse_iso_datetime

DEFAULT_ADMIN_EMAIL = "admin@sutradhar.local"
DEFAULT_PASSWORD = "Password123"

LAUNCH_OFFERS = [
    {"code": "TEXTILE20", "type": OFFER_PERCENT, "value": 20},
    {"code": "WELCOME100", "type": OFFER_FIXED, "value": 100, "first_order_only": True},
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create tables, a default admin account and the launch offers.

    Safe to run more than once; existing rows are left alone.

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing Sutradhar...")
    db.create_all()
    click.echo("PASS Tables ready")

    if db.session.query(User).filter_by(email=DEFAULT_ADMIN_EMAIL).first():
        click.echo(f"WARN  User '{DEFAULT_ADMIN_EMAIL}' already exists, skipping...")
    else:
        sign_up(DEFAULT_ADMIN_EMAIL, DEFAULT_PASSWORD, display_name="Admin", role=ROLE_ADMIN)
        click.echo(f"PASS Created admin: {DEFAULT_ADMIN_EMAIL} / {DEFAULT_PASSWORD}")

    for data in LAUNCH_OFFERS:
        try:
            offers_service.create_offer(data)
            click.echo(f"PASS Created offer {data['code']}")
        except OfferError as e:
            click.echo(f"WARN  {e}, skipping...")

    click.echo("DONE Sutradhar initialized")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), default='buyer', show_default=True, help='Role')
@click.option('--display-name', default=None, help='Name shown in the storefront')
@with_appcontext
def create_user_cli(email, password, role, display_name):
    """
    Create an account and its profile.

    Password must be 8+ characters with at least one letter and one digit.
    """
    try:
        user = sign_up(email, password, display_name=display_name, role=role)
    except (PasswordValidationError, SignUpError) as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created user: {user.email} (ID: {user.id}) with role '{role}'")


@click.group('offers')
def offers_group():
    """Promo code management."""


@offers_group.command('list')
@click.option('--active-only', is_flag=True, help='Hide inactive offers')
@with_appcontext
def list_offers_cli(active_only):
    offers = offers_service.list_offers(active_only=active_only)
    if not offers:
        click.echo("No offers found")
        return
    for o in offers:
        flags = []
        if not o["active"]:
            flags.append("inactive")
        if o["first_order_only"]:
            flags.append("first order")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(
            f"{o['code']:<14} {o['type']:<8} {o['value']:>8g}"
            f"  min={o['min_cart_amount'] or '-'}  expires={o['expires_at'] or '-'}{suffix}"
        )


@offers_group.command('create')
@click.option('--code', required=True, help='Promo code (stored upper-case)')
@click.option('--type', 'offer_type', type=click.Choice([OFFER_PERCENT, OFFER_FIXED]), required=True)
@click.option('--value', type=float, required=True, help='Percent off or rupees off')
@click.option('--min-cart', type=float, default=None, help='Minimum cart subtotal in rupees')
@click.option('--expires', default=None, help='ISO-8601 expiry timestamp')
@click.option('--first-order-only', is_flag=True)
@with_appcontext
def create_offer_cli(code, offer_type, value, min_cart, expires, first_order_only):
    expires_at = None
    if expires:
        try:
            expires_at = parse_iso_datetime(expires)
        except ValueError:
            click.echo(f"FAIL Could not parse --expires '{expires}'")
            return

    try:
        offer = offers_service.create_offer({
            "code": code,
            "type": offer_type,
            "value": value,
            "min_cart_amount": min_cart,
            "expires_at": expires_at,
            "first_order_only": first_order_only,
        })
    except OfferError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created offer {offer['code']} (ID: {offer['id']})")


@click.group('rewards')
def rewards_group():
    """Points ledger maintenance."""


@rewards_group.command('reconcile')
@click.option('--user-id', type=int, default=None, help='Only this user')
@with_appcontext
def reconcile_cli(user_id):
    """Set each profile's point counter to the sum of its ledger entries."""
    if user_id is not None:
        user_ids = [user_id]
    else:
        user_ids = [row.user_id for row in db.session.query(Profile.user_id).all()]

    changed = 0
    for uid in user_ids:
        try:
            result = rewards_service.reconcile_balance(uid)
        except rewards_service.RewardsError as e:
            click.echo(f"FAIL user {uid}: {e}")
            continue
        if result["changed"]:
            changed += 1
            click.echo(f"FIX  user {uid}: {result['before']} -> {result['after']}")

    click.echo(f"DONE Reconciled {len(user_ids)} profile(s), {changed} corrected")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(offers_group)
    app.cli.add_command(rewards_group)
