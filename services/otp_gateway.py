"""
OTP gateway: talks to the SMS OTP provider over HTTP (httpx) and keeps the
local OtpVerification ledger in step with it.

Verification state machine: PENDING -> VERIFIED | FAILED. A record leaves
PENDING exactly once; the transition is a conditional UPDATE so two racing
validations cannot both move it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict

import httpx
from sqlalchemy import update

from models.base_model import as_utc, utcnow
from models.enums import OtpPurpose, OtpStatus
from models.otp_verification import OtpVerification
from services.errors import UpstreamProviderError

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "91"
DEFAULT_TIMEOUT_SECONDS = 60
VERIFICATION_COMPLETED = "VERIFICATION_COMPLETED"
EXPIRED = "EXPIRED"


def mask_phone(phone: str) -> str:
    """Keep the last 4 digits for log lines."""
    return f"***{phone[-4:]}" if phone else ""


@dataclass
class OtpChallenge:
    verification_id: str
    timeout_seconds: int
    record_id: str


@dataclass
class OtpValidation:
    ok: bool
    status: str
    raw: Dict[str, Any] = field(default_factory=dict)


class OtpGateway:
    def __init__(
        self,
        storage,
        send_url: str,
        validate_url: str,
        customer_id: str,
        auth_token: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.storage = storage
        self.send_url = send_url
        self.validate_url = validate_url
        self.customer_id = customer_id
        self.auth_token = auth_token
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            transport=self.transport,
            headers={"authToken": self.auth_token or ""},
        )

    def _call(self, method: str, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        """
        Perform one provider call and return its `data` object.
        Any transport or HTTP failure becomes UpstreamProviderError; nothing is retried.
        """
        if not url:
            raise UpstreamProviderError("OTP provider URL is not configured")
        try:
            with self._client() as client:
                resp = client.request(method, url, params=params)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            message = _provider_message(exc.response) or f"OTP provider returned {status}"
            logger.warning("OTP provider %s %s failed with %s", method, url, status)
            raise UpstreamProviderError(message, status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.warning("OTP provider %s %s unreachable: %s", method, url, exc)
            raise UpstreamProviderError() from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamProviderError("OTP provider returned a non-JSON response") from exc
        data = body.get("data") if isinstance(body, dict) else None
        return data if isinstance(data, dict) else {}

    def send_otp(self, phone: str, country_code: str = DEFAULT_COUNTRY_CODE, purpose: str = OtpPurpose.LOGIN.value) -> OtpChallenge:
        """Trigger an SMS challenge and record it locally as PENDING."""
        country_code = str(country_code or DEFAULT_COUNTRY_CODE)
        data = self._call(
            "POST",
            self.send_url,
            {
                "countryCode": country_code,
                "customerId": self.customer_id,
                "flowType": "SMS",
                "mobileNumber": phone,
            },
        )

        verification_id = str(data.get("verificationId") or "")
        if not verification_id:
            raise UpstreamProviderError("OTP provider did not return a verificationId", status_code=502)
        try:
            timeout_seconds = int(data.get("timeout") or DEFAULT_TIMEOUT_SECONDS)
        except (TypeError, ValueError):
            timeout_seconds = DEFAULT_TIMEOUT_SECONDS

        record = OtpVerification(
            phone=phone,
            country_code=country_code,
            verification_id=verification_id,
            status=OtpStatus.PENDING.value,
            purpose=str(getattr(purpose, "value", purpose)),
            attempts=0,
            expires_at=utcnow() + timedelta(seconds=timeout_seconds),
        )
        with self.storage.transaction() as session:
            session.add(record)

        logger.info("OTP sent to %s (verification %s, purpose %s)", mask_phone(phone), verification_id, record.purpose)
        return OtpChallenge(verification_id=verification_id, timeout_seconds=timeout_seconds, record_id=record.id)

    def validate_otp(self, phone: str, country_code: str, verification_id: str, code: str) -> OtpValidation:
        """
        Check a code with the provider and settle the local record.

        A verification without a PENDING local record fails closed: the provider
        is not consulted and ok is False. A PENDING record past its expiry is
        settled as FAILED locally, also without a provider call.

        No database transaction is held open across the provider call.
        """
        country_code = str(country_code or DEFAULT_COUNTRY_CODE)
        with self.storage.transaction() as session:
            local = (
                session.query(OtpVerification)
                .filter(
                    OtpVerification.verification_id == verification_id,
                    OtpVerification.phone == phone,
                    OtpVerification.status == OtpStatus.PENDING.value,
                )
                .first()
            )
            if local is not None and as_utc(local.expires_at) <= utcnow():
                self._settle(session, local.id, ok=False)
                logger.info("OTP verification %s for %s expired", verification_id, mask_phone(phone))
                return OtpValidation(ok=False, status=EXPIRED)
        if local is None:
            logger.info("No pending OTP verification %s for %s", verification_id, mask_phone(phone))
            return OtpValidation(ok=False, status="NOT_FOUND")
        local_id = local.id

        data = self._call(
            "GET",
            self.validate_url,
            {
                "countryCode": country_code,
                "mobileNumber": phone,
                "verificationId": verification_id,
                "customerId": self.customer_id,
                "code": code,
            },
        )
        status = str(data.get("verificationStatus") or "").upper()
        ok = status == VERIFICATION_COMPLETED

        with self.storage.transaction() as session:
            settled = self._settle(session, local_id, ok=ok)
        if not settled:
            # Another request settled this verification first
            logger.info("OTP verification %s already settled", verification_id)
            return OtpValidation(ok=False, status=status, raw=data)

        logger.info("OTP verification %s for %s: %s", verification_id, mask_phone(phone), status or "UNKNOWN")
        return OtpValidation(ok=ok, status=status, raw=data)

    @staticmethod
    def _settle(session, record_id: str, ok: bool) -> bool:
        """Move a PENDING record to VERIFIED/FAILED; False if it already left PENDING."""
        result = session.execute(
            update(OtpVerification)
            .where(
                OtpVerification.id == record_id,
                OtpVerification.status == OtpStatus.PENDING.value,
            )
            .values(
                status=OtpStatus.VERIFIED.value if ok else OtpStatus.FAILED.value,
                verified_at=utcnow() if ok else None,
                attempts=OtpVerification.attempts + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


def _provider_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    if not message and isinstance(body.get("data"), dict):
        message = body["data"].get("message")
    return str(message) if message else None
