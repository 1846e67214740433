"""
Flask CLI commands.

    flask --app api create-super-admin --phone 9876543210 --email owner@example.com
"""
from __future__ import annotations

import click
from flask import current_app

from models.admin_profile import AdminProfile
from models.enums import AdminPermission, UserRole, UserStatus
from models.user import User


def create_super_admin(
    storage,
    phone: str,
    country_code: str = "+91",
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    designation: str | None = None,
    department: str | None = None,
) -> tuple[User, bool]:
    """
    Create or promote the user with this phone to SUPER_ADMIN with an active,
    all-permission admin profile. Returns (user, updated).
    """
    permissions = [p.value for p in AdminPermission]
    with storage.transaction() as session:
        user = session.query(User).filter(User.phone == phone).first()
        updated = user is not None
        if user is None:
            user = User(phone=phone, country_code=country_code)
            session.add(user)
        if email:
            user.email = email
        if first_name:
            user.first_name = first_name
        if last_name:
            user.last_name = last_name
        user.role = UserRole.SUPER_ADMIN.value
        user.status = UserStatus.ACTIVE.value
        user.phone_verified = True

        profile = user.admin_profile
        if profile is None:
            profile = AdminProfile()
            user.admin_profile = profile
        profile.designation = designation
        profile.department = department
        profile.permissions = permissions
        profile.is_active = True
    return user, updated


def register_commands(app):
    @app.cli.command("create-super-admin")
    @click.option("--phone", required=True, help="Phone number without country code.")
    @click.option("--country-code", default="+91", show_default=True)
    @click.option("--email", default=None)
    @click.option("--first-name", default=None)
    @click.option("--last-name", default=None)
    @click.option("--designation", default="Platform Owner", show_default=True)
    @click.option("--department", default="Management", show_default=True)
    def create_super_admin_command(phone, country_code, email, first_name, last_name, designation, department):
        """Create or promote a SUPER_ADMIN user."""
        storage = current_app.extensions["auth_services"].storage
        user, updated = create_super_admin(
            storage,
            phone=phone,
            country_code=country_code,
            email=email,
            first_name=first_name,
            last_name=last_name,
            designation=designation,
            department=department,
        )
        action = "updated" if updated else "created"
        click.echo(f"Super admin {action}: {user.id} ({user.phone})")
