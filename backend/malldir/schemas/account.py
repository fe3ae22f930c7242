"""Account Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from .common import PASSWORD_MAX_LENGTH


class AccountSchema(Schema):
    """Serialize accounts (from :class:`AccountOut`) for API responses."""

    id = fields.Int(dump_only=True)
    username = fields.String(dump_only=True)
    email = fields.Email(dump_only=True)
    role = fields.Function(lambda obj: getattr(obj.role, "value", obj.role), dump_only=True)
    status = fields.String(dump_only=True)
    last_login_at = fields.DateTime(dump_only=True, data_key="lastLoginAt")
    created_at = fields.DateTime(dump_only=True, data_key="createdAt")


class AccountUpdateSchema(Schema):
    """Partial profile update. ``role`` and ``status`` are not accepted."""

    username = fields.String(validate=validate.Length(min=3, max=50))
    email = fields.Email(validate=validate.Length(max=254))
    password = fields.String(validate=validate.Length(min=8, max=PASSWORD_MAX_LENGTH))

    @validates_schema
    def _not_empty(self, data, **_):
        if not data:
            raise ValidationError("At least one field is required.")
