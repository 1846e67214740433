import httpx
import pytest

from api import create_app
from models import storage
from models.enums import UserRole, UserStatus
from models.user import User


class FakeOtpProvider:
    """Stands in for the SMS OTP provider behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.send_status = 200
        self.send_body = {"data": {"verificationId": "abc123", "timeout": 60}}
        self.validate_status = 200
        self.verification_status = "VERIFICATION_COMPLETED"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/send"):
            return httpx.Response(self.send_status, json=self.send_body)
        return httpx.Response(
            self.validate_status,
            json={"data": {"verificationStatus": self.verification_status}},
        )

    def transport(self):
        return httpx.MockTransport(self.handler)


@pytest.fixture
def otp_provider():
    return FakeOtpProvider()


@pytest.fixture
def app(otp_provider):
    app = create_app("test", otp_transport=otp_provider.transport())
    yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["auth_services"]


@pytest.fixture
def make_user():
    def _make(phone="9876543210", role=UserRole.CUSTOMER.value, status=UserStatus.ACTIVE.value, phone_verified=True):
        user = User(phone=phone, country_code="91", role=role, status=status, phone_verified=phone_verified)
        with storage.transaction() as session:
            session.add(user)
        return user

    return _make
