from models import storage
from models.admin_profile import AdminProfile
from models.enums import AdminPermission, UserRole, UserStatus
from models.user import User


def _user(phone):
    session = storage.get_session()
    session.expire_all()
    return session.query(User).filter_by(phone=phone).one()


def test_create_super_admin(app):
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["create-super-admin", "--phone", "9876543210", "--email", "owner@example.com", "--first-name", "Asha"]
    )

    assert result.exit_code == 0, result.output
    assert "Super admin created" in result.output
    user = _user("9876543210")
    assert user.role == UserRole.SUPER_ADMIN.value
    assert user.status == UserStatus.ACTIVE.value
    assert user.phone_verified is True
    assert user.email == "owner@example.com"
    assert user.country_code == "+91"
    profile = user.admin_profile
    assert profile.is_active is True
    assert profile.designation == "Platform Owner"
    assert profile.department == "Management"
    assert sorted(profile.permissions) == sorted(p.value for p in AdminPermission)


def test_promotes_existing_user(app, make_user):
    existing = make_user(phone="9876543210")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-super-admin", "--phone", "9876543210", "--designation", "CTO"])

    assert result.exit_code == 0, result.output
    assert f"Super admin updated: {existing.id}" in result.output
    user = _user("9876543210")
    assert user.role == UserRole.SUPER_ADMIN.value
    assert user.admin_profile.designation == "CTO"
    assert storage.count(User) == 1
    assert storage.count(AdminProfile) == 1


def test_rerun_keeps_a_single_profile(app):
    runner = app.test_cli_runner()
    runner.invoke(args=["create-super-admin", "--phone", "9876543210"])
    result = runner.invoke(args=["create-super-admin", "--phone", "9876543210", "--department", "Board"])

    assert result.exit_code == 0, result.output
    assert storage.count(AdminProfile) == 1
    assert _user("9876543210").admin_profile.department == "Board"


def test_phone_is_required(app):
    result = app.test_cli_runner().invoke(args=["create-super-admin"])
    assert result.exit_code != 0
    assert "--phone" in result.output
