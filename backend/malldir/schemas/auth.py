"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .account import AccountSchema
from .common import PASSWORD_MAX_LENGTH


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True, validate=validate.Length(min=8, max=PASSWORD_MAX_LENGTH)
    )


class LoginSchema(Schema):
    """Input payload for authenticating an account.

    No minimum length on ``password``: a short password is a credential
    failure (401), not a validation error.
    """

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True, validate=validate.Length(min=1, max=PASSWORD_MAX_LENGTH)
    )


class SessionResponseSchema(Schema):
    """Body returned by register/login/refresh."""

    message = fields.String(required=True)
    access_token = fields.String(required=True, data_key="accessToken")
    user = fields.Nested(AccountSchema)


class StatusResponseSchema(Schema):
    """Body returned by the status check."""

    status = fields.Boolean(required=True)
    message = fields.String(required=True)
    user = fields.Nested(AccountSchema, allow_none=True)
