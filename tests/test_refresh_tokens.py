import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from api import create_app
from models import storage
from models.base_model import utcnow
from models.refresh_token import RefreshToken
from services.errors import InvalidRefreshTokenError
from services.token_codec import hash_token


def _row(raw):
    session = storage.get_session()
    session.expire_all()
    return session.query(RefreshToken).filter_by(token_hash=hash_token(raw)).one()


def test_store_persists_only_the_hash(services, make_user):
    user = make_user()
    raw = services.issuer.sign_refresh_token(user.id, "tid-1")

    services.refresh_tokens.store_refresh_token(user.id, raw, ip="10.0.0.1", user_agent="pytest")

    row = _row(raw)
    assert row.token_hash == hash_token(raw)
    assert row.token_hash != raw
    assert row.is_revoked is False
    assert row.revoked_at is None
    assert row.ip_address == "10.0.0.1"
    assert row.user_agent == "pytest"
    assert storage.get_session().query(RefreshToken).filter(RefreshToken.token_hash == raw).count() == 0


def test_rotate_succeeds_exactly_once(services, make_user):
    user = make_user()
    raw = services.refresh_tokens.issue_refresh_token(user.id)

    new_raw = services.refresh_tokens.rotate_refresh_token(raw, user.id)

    assert new_raw != raw
    assert services.issuer.verify_refresh_token(new_raw).sub == user.id
    old = _row(raw)
    assert old.is_revoked is True
    assert old.revoked_at is not None
    assert _row(new_raw).is_revoked is False

    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.rotate_refresh_token(raw, user.id)


def test_replayed_token_does_not_mint(services, make_user):
    user = make_user()
    raw = services.refresh_tokens.issue_refresh_token(user.id)
    services.refresh_tokens.rotate_refresh_token(raw, user.id)
    total = storage.count(RefreshToken)

    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.rotate_refresh_token(raw, user.id)

    assert storage.count(RefreshToken) == total
    assert _row(raw).is_revoked is True


def test_rotate_requires_matching_user(services, make_user):
    alice = make_user(phone="9000000001")
    bob = make_user(phone="9000000002")
    raw = services.refresh_tokens.issue_refresh_token(alice.id)

    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.rotate_refresh_token(raw, bob.id)
    assert _row(raw).is_revoked is False


def test_rotate_unknown_token(services, make_user):
    user = make_user()
    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.rotate_refresh_token("never-issued", user.id)


def test_expired_row_cannot_rotate(services, make_user):
    user = make_user()
    raw = services.refresh_tokens.issue_refresh_token(user.id)
    with storage.transaction() as session:
        session.query(RefreshToken).filter_by(token_hash=hash_token(raw)).update(
            {"expires_at": utcnow() - timedelta(seconds=1)}
        )

    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.rotate_refresh_token(raw, user.id)


def test_revoke_then_revoke_again_fails(services, make_user):
    user = make_user()
    raw = services.refresh_tokens.issue_refresh_token(user.id)

    services.refresh_tokens.revoke_refresh_token(raw)
    assert _row(raw).is_revoked is True

    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.revoke_refresh_token(raw)


def test_revoked_token_cannot_rotate(services, make_user):
    user = make_user()
    raw = services.refresh_tokens.issue_refresh_token(user.id)
    services.refresh_tokens.revoke_refresh_token(raw)

    with pytest.raises(InvalidRefreshTokenError):
        services.refresh_tokens.rotate_refresh_token(raw, user.id)


def test_multiple_sessions_per_user(services, make_user):
    user = make_user()
    first = services.refresh_tokens.issue_refresh_token(user.id)
    second = services.refresh_tokens.issue_refresh_token(user.id)

    assert len(services.refresh_tokens.active_tokens(user.id)) == 2

    services.refresh_tokens.revoke_refresh_token(first)
    active = services.refresh_tokens.active_tokens(user.id)
    assert [t.token_hash for t in active] == [hash_token(second)]


def test_concurrent_rotation_has_one_winner(tmp_path, otp_provider, make_user):
    app = create_app(
        "test",
        overrides={"DATABASE_URL": f"sqlite:///{tmp_path / 'race.db'}"},
        otp_transport=otp_provider.transport(),
    )
    services = app.extensions["auth_services"]
    user = make_user()
    raw = services.refresh_tokens.issue_refresh_token(user.id)
    storage.close()

    barrier = threading.Barrier(2)

    def attempt(_):
        barrier.wait()
        try:
            return services.refresh_tokens.rotate_refresh_token(raw, user.id)
        except InvalidRefreshTokenError:
            return None
        finally:
            storage.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, range(2)))

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    active = services.refresh_tokens.active_tokens(user.id)
    assert [t.token_hash for t in active] == [hash_token(winners[0])]
    assert _row(raw).is_revoked is True
    storage.close()
