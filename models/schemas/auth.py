from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.enums import OtpPurpose


def _norm_phone(v):
    return v.strip() if isinstance(v, str) else v


class _PhoneSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    phone = fields.String(
        required=True,
        validate=[
            validate.Length(min=10, max=15),
            validate.Regexp(r"^\d+$", error="Phone must contain digits only."),
        ],
    )
    countryCode = fields.Integer(
        load_default=91,
        strict=False,
        validate=validate.Range(min=1, max=999),
        attribute="country_code",
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "phone" in data:
            data = dict(data)
            data["phone"] = _norm_phone(data["phone"])
        return data


class SendOtpSchema(_PhoneSchema):
    purpose = fields.String(
        required=True,
        validate=validate.OneOf([p.value for p in OtpPurpose]),
    )


class VerifyOtpSchema(_PhoneSchema):
    verificationId = fields.String(
        required=True,
        validate=validate.Length(min=2, max=100),
        attribute="verification_id",
    )
    code = fields.String(required=True, validate=validate.Length(min=4, max=8))


class UserSummarySchema(Schema):
    id = fields.String()
    phone = fields.String()
    role = fields.String()
