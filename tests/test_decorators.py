from datetime import timedelta

import pytest
from flask import Blueprint, jsonify

from models import storage
from models.admin_profile import AdminProfile
from models.enums import AdminPermission, UserRole
from services.token_issuer import TokenIssuer
from utils.decorators import admin_required, jwt_required, permission_required, roles_required

guarded = Blueprint("guarded", __name__)


@guarded.get("/any")
@jwt_required()
def any_user(auth):
    return jsonify({"sub": auth.sub})


@guarded.get("/vendors")
@roles_required(UserRole.VENDOR, UserRole.ADMIN)
def vendors_only(auth):
    return jsonify({"role": auth.role})


@guarded.get("/admin")
@admin_required()
def admin_only(auth, admin):
    return jsonify({"sub": auth.sub, "designation": admin.designation})


@guarded.get("/refunds")
@permission_required(AdminPermission.MANAGE_REFUNDS)
def refunds(auth, admin):
    return jsonify({"ok": True})


@pytest.fixture
def guarded_client(app):
    app.register_blueprint(guarded, url_prefix="/guarded")
    return app.test_client()


@pytest.fixture
def bearer(services):
    def _bearer(user):
        token = services.issuer.sign_access_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def make_admin(make_user):
    def _make(phone, role=UserRole.ADMIN.value, permissions=(), is_active=True):
        user = make_user(phone=phone, role=role)
        with storage.transaction() as session:
            session.add(
                AdminProfile(
                    user_id=user.id,
                    designation="Ops",
                    permissions=[p.value for p in permissions],
                    is_active=is_active,
                )
            )
        return user

    return _make


def test_jwt_required_passes_identity(guarded_client, make_user, bearer):
    user = make_user()
    resp = guarded_client.get("/guarded/any", headers=bearer(user))
    assert resp.status_code == 200
    assert resp.get_json() == {"sub": user.id}


@pytest.mark.parametrize(
    "header",
    ["", "Bearer", "Bearer ", "Token abc", "Bearer not-a-jwt"],
)
def test_jwt_required_rejects_bad_headers(guarded_client, header):
    resp = guarded_client.get("/guarded/any", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Unauthorized"


def test_expired_and_forged_tokens_look_the_same(guarded_client, app, make_user):
    user = make_user()
    config = app.config
    expired = TokenIssuer(
        config["JWT_ACCESS_SECRET"], config["JWT_REFRESH_SECRET"], access_ttl=timedelta(seconds=-5)
    ).sign_access_token(user.id, user.role)
    forged = TokenIssuer("x" * 40, "y" * 40).sign_access_token(user.id, user.role)

    bodies = [
        guarded_client.get("/guarded/any", headers={"Authorization": f"Bearer {token}"}).get_json()
        for token in (expired, forged)
    ]

    assert bodies[0] == bodies[1]
    assert bodies[0]["status"] == 401


def test_roles_required(guarded_client, make_user, bearer):
    vendor = make_user(phone="9000000001", role=UserRole.VENDOR.value)
    customer = make_user(phone="9000000002")

    assert guarded_client.get("/guarded/vendors", headers=bearer(vendor)).status_code == 200
    resp = guarded_client.get("/guarded/vendors", headers=bearer(customer))
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "FORBIDDEN"


def test_admin_required_with_active_profile(guarded_client, make_admin, bearer):
    admin = make_admin("9000000001")
    resp = guarded_client.get("/guarded/admin", headers=bearer(admin))
    assert resp.status_code == 200
    assert resp.get_json() == {"sub": admin.id, "designation": "Ops"}


def test_admin_required_rejects_non_admin(guarded_client, make_user, bearer):
    resp = guarded_client.get("/guarded/admin", headers=bearer(make_user()))
    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Forbidden: Admins only"


def test_admin_required_rejects_inactive_profile(guarded_client, make_admin, make_user, bearer):
    inactive = make_admin("9000000001", is_active=False)
    no_profile = make_user(phone="9000000002", role=UserRole.ADMIN.value)

    for user in (inactive, no_profile):
        resp = guarded_client.get("/guarded/admin", headers=bearer(user))
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Forbidden: Inactive admin account"


def test_permission_required(guarded_client, make_admin, bearer):
    allowed = make_admin("9000000001", permissions=[AdminPermission.MANAGE_REFUNDS])
    denied = make_admin("9000000002", permissions=[AdminPermission.VIEW_ANALYTICS])

    assert guarded_client.get("/guarded/refunds", headers=bearer(allowed)).status_code == 200
    resp = guarded_client.get("/guarded/refunds", headers=bearer(denied))
    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Forbidden: Insufficient permissions"


def test_super_admin_bypasses_permissions(guarded_client, make_admin, bearer):
    owner = make_admin("9000000001", role=UserRole.SUPER_ADMIN.value)
    assert guarded_client.get("/guarded/refunds", headers=bearer(owner)).status_code == 200
