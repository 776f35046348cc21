# Overview: Flask CLI command groups for bootstrap, seeding, and user management.

# backend/armory/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables (idempotent). Prefer `flask db upgrade` once migrations are in use.
# - python -m flask system seed [--seed 42] [--yes]
#   DEV/DEMO only: wipe all data, then load bases, assets, users, stock and sample history.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and home base.
# - python -m flask users create --name "Colonel Mike Johnson" --email commander@fortbragg.mil --password "commander123" --role commander --base-id 1
#   Create a user (prompts if options are omitted).

import random
import click
from datetime import timedelta
from flask.cli import with_appcontext

from .extensions import db
from .models import (
    Asset,
    Assignment,
    AuditLog,
    Base,
    Purchase,
    ROLES,
    Stock,
    Transfer,
    User,
)
from .services.auth_service import create_user, hash_password, PasswordValidationError
from .time_utils import utcnow
from .validation import ConflictError, ValidationError


SEED_BASES = [
    ("Fort Bragg", "North Carolina, USA"),
    ("Camp Pendleton", "California, USA"),
    ("Norfolk Naval Base", "Virginia, USA"),
]

SEED_ASSETS = [
    ("weapons", "M4A1 Carbine"),
    ("weapons", "M249 SAW"),
    ("weapons", "M240B Machine Gun"),
    ("vehicles", "HUMVEE M1165"),
    ("vehicles", "M1A2 Abrams Tank"),
    ("vehicles", "CH-47 Chinook"),
    ("ammunition", "5.56mm NATO"),
    ("ammunition", "7.62mm NATO"),
    ("ammunition", "120mm APFSDS"),
    ("equipment", "Night Vision Goggles"),
    ("equipment", "Body Armor Vest"),
    ("equipment", "Radio Communication Set"),
]

# (name, email, password, role, index into SEED_BASES or None)
SEED_USERS = [
    ("General John Smith", "admin@military.gov", "admin123", "admin", None),
    ("Colonel Mike Johnson", "commander@fortbragg.mil", "commander123", "commander", 0),
    ("Major Sarah Wilson", "logistics@pendleton.mil", "logistics123", "logistics", 1),
]

SEED_PERSONNEL = [
    "Alpha Company", "Bravo Company", "Charlie Squad", "Delta Team",
    "Sgt. Johnson", "Lt. Williams", "Cpl. Davis", "Pvt. Miller",
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create every table that does not exist yet."""
    click.echo("START Initializing database schema...")
    db.create_all()
    click.echo("PASS Tables ready")


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
    click.echo("PASS Database reset")


def _wipe_all_data() -> None:
    # Children first so foreign keys never dangle
    for model in (AuditLog, Assignment, Transfer, Purchase, Stock, Asset, User, Base):
        db.session.query(model).delete()
    db.session.flush()


@system_group.command('seed')
@click.option('--seed', 'seed_value', type=int, default=None, help='Random seed for reproducible demo data')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def seed_demo_data(seed_value, yes):
    """
    Load a demo dataset: 3 bases, 12 assets, one user per role, a stock
    row for every base/asset pair and a month of sample history.

    Existing data is wiped first. Sample history is inserted as-is and is
    not replayed through the stock ledger, so balances are illustrative.
    """
    if not yes:
        click.confirm("WARN Seeding replaces ALL existing data. Continue?", abort=True)

    rng = random.Random(seed_value)
    now = utcnow()

    try:
        _wipe_all_data()

        bases = [Base(name=name, location=location) for name, location in SEED_BASES]
        assets = [Asset(type=asset_type, description=desc) for asset_type, desc in SEED_ASSETS]
        db.session.add_all(bases + assets)
        db.session.flush()
        click.echo(f"PASS Created {len(bases)} bases and {len(assets)} assets")

        users = []
        for name, email, password, role, base_index in SEED_USERS:
            user = User(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role=role,
                base_id=bases[base_index].id if base_index is not None else None,
            )
            db.session.add(user)
            users.append(user)
        db.session.flush()
        click.echo(f"PASS Created {len(users)} users")

        stock_count = 0
        for base in bases:
            for asset in assets:
                opening = rng.randint(50, 549)
                db.session.add(Stock(
                    base_id=base.id,
                    asset_id=asset.id,
                    opening_balance=opening,
                    closing_balance=max(0, opening + rng.randint(-25, 74)),
                    assigned=int(opening * 0.3),
                    expended=int(opening * 0.1),
                ))
                stock_count += 1
        click.echo(f"PASS Created {stock_count} stock rows")

        for _ in range(15):
            db.session.add(Purchase(
                asset_id=rng.choice(assets).id,
                base_id=rng.choice(bases).id,
                quantity=rng.randint(5, 54),
                purchase_date=now - timedelta(days=rng.randint(0, 29)),
                created_by=rng.choice(users).id,
            ))

        for _ in range(10):
            from_base, to_base = rng.sample(bases, 2)
            db.session.add(Transfer(
                asset_id=rng.choice(assets).id,
                from_base_id=from_base.id,
                to_base_id=to_base.id,
                quantity=rng.randint(1, 20),
                transfer_date=now - timedelta(days=rng.randint(0, 19)),
                initiated_by=rng.choice(users).id,
                status="completed" if rng.random() > 0.3 else "pending",
            ))

        for _ in range(12):
            db.session.add(Assignment(
                asset_id=rng.choice(assets).id,
                base_id=rng.choice(bases).id,
                assigned_to=rng.choice(SEED_PERSONNEL),
                personnel_id=f"USM{rng.randint(100000, 999999)}",
                quantity=rng.randint(1, 10),
                assigned_date=now - timedelta(days=rng.randint(0, 14)),
                status="assigned" if rng.random() > 0.2 else "expended",
                reason="Operational deployment",
                created_by=rng.choice(users).id,
            ))

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    click.echo("PASS Created 15 purchases, 10 transfers, 12 assignments")
    click.echo("\nLogin credentials:")
    for _name, email, password, role, _base_index in SEED_USERS:
        click.echo(f"  {role:<10} {email} / {password}")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address (login identifier)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@click.option('--base-id', type=int, default=None, help='Home base (commanders and logistics)')
@with_appcontext
def create_user_cli(name, email, password, role, base_id):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    """
    try:
        user = create_user(name=name, email=email, password=password, role=role, base_id=base_id)
        db.session.commit()
    except PasswordValidationError as e:
        db.session.rollback()
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, at least one letter and one digit")
        return
    except (ValidationError, ConflictError) as e:
        db.session.rollback()
        click.echo(f"FAIL Failed to create user: {str(e)}")
        return

    click.echo(f"PASS Created user: {user.name} ({user.email}) with role '{user.role}'")
    if user.base_id is not None:
        click.echo(f"     Home base ID: {user.base_id}")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role and home base."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Role':<12} {'Base'}")
    click.echo("="*100)

    for user in users:
        base_str = user.base.name if user.base else "-"
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<35} {user.role:<12} {base_str}")

    click.echo("="*100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
