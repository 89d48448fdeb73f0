"""
WTForms form definitions.

Each form reports a single message to the user: the first error in
field declaration order, which gives the checking order of the signup
and login flows (required fields first, then formats, then password
length). Password fields render without their value, so a re-rendered
form never carries the submitted password.
"""

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import EmailField, FloatField, PasswordField, SelectField, StringField
from wtforms.validators import (
    DataRequired,
    Email,
    Length,
    NumberRange,
    Optional,
    StopValidation,
)

from houseofplants.boroughs import borough_choices

REQUIRED_FIELDS_MESSAGE = 'Please fill in all required fields.'
PASSWORD_TOO_LONG_MESSAGE = 'Password is too long.'
LOGIN_MISSING_BOTH_MESSAGE = 'Please provide your username and password.'
LOCATION_INCOMPLETE_MESSAGE = 'Please provide both latitude and longitude, or neither.'


def strip_filter(value):
    return value.strip() if isinstance(value, str) else value


def lower_filter(value):
    return value.lower() if isinstance(value, str) else value


class PasswordLength:
    """
    Minimum password length from PASSWORD_MIN_LENGTH.

    With a config_switch, the check only applies while that config
    value is true.
    """

    def __init__(self, config_switch=None):
        self.config_switch = config_switch

    def __call__(self, form, field):
        config = current_app.config
        if self.config_switch and not config.get(self.config_switch, True):
            return
        minimum = config.get('PASSWORD_MIN_LENGTH', 8)
        if len(field.data or '') < minimum:
            raise StopValidation(
                f'Your password needs to be at least {minimum} characters long.'
            )


class SingleMessageForm(FlaskForm):
    """Form exposing its first validation error as error_message."""

    error_message = None

    def first_error(self):
        for field in self:
            if field.name == 'csrf_token':
                continue
            if field.errors:
                return field.errors[0]
        return None

    def validate(self, extra_validators=None):
        valid = super().validate(extra_validators)
        if not valid:
            self.error_message = self.first_error()
        return valid


class LocationMixin:
    """Latitude/longitude pair, both given or both empty."""

    def location_complete(self) -> bool:
        return (self.latitude.data is None) == (self.longitude.data is None)

    def validate_location_pair(self) -> bool:
        if not self.location_complete():
            self.error_message = LOCATION_INCOMPLETE_MESSAGE
            return False
        return True


class SignupForm(LocationMixin, SingleMessageForm):
    """Account creation."""

    username = StringField(
        'Username',
        filters=[strip_filter],
        validators=[
            DataRequired(message=REQUIRED_FIELDS_MESSAGE),
            Length(max=64, message='Username is too long.'),
        ],
    )

    name = StringField(
        'Name',
        filters=[strip_filter],
        validators=[
            DataRequired(message=REQUIRED_FIELDS_MESSAGE),
            Length(max=100, message='Name is too long.'),
        ],
    )

    email = EmailField(
        'Email address',
        filters=[strip_filter, lower_filter],
        validators=[
            DataRequired(message=REQUIRED_FIELDS_MESSAGE),
            Email(message='Please enter a valid email address.'),
            # RFC 5321 limit
            Length(max=254, message='Email address is too long.'),
        ],
    )

    password = PasswordField(
        'Password',
        validators=[
            PasswordLength(),
            # Pre-hashed before bcrypt; bound input size anyway.
            Length(max=128, message=PASSWORD_TOO_LONG_MESSAGE),
        ],
    )

    borough = SelectField('Borough', choices=borough_choices(), default='')

    latitude = FloatField(
        'Latitude',
        validators=[
            Optional(),
            NumberRange(min=-90, max=90, message='Latitude must be between -90 and 90.'),
        ],
    )

    longitude = FloatField(
        'Longitude',
        validators=[
            Optional(),
            NumberRange(min=-180, max=180, message='Longitude must be between -180 and 180.'),
        ],
    )

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        return self.validate_location_pair()


class LoginForm(SingleMessageForm):
    """Username/password login."""

    username = StringField(
        'Username',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Please provide your username.'),
            Length(max=64, message='Username is too long.'),
        ],
    )

    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message='Please provide your password.'),
            PasswordLength(config_switch='LOGIN_ENFORCE_PASSWORD_LENGTH'),
            Length(max=128, message=PASSWORD_TOO_LONG_MESSAGE),
        ],
    )

    def validate(self, extra_validators=None):
        valid = super().validate(extra_validators)
        if not valid and not self.username.data and not self.password.data:
            self.error_message = LOGIN_MISSING_BOTH_MESSAGE
        return valid


class ProfileForm(LocationMixin, SingleMessageForm):
    """Profile edits. Username and email stay fixed."""

    name = StringField(
        'Name',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Please provide your name.'),
            Length(max=100, message='Name is too long.'),
        ],
    )

    borough = SelectField('Borough', choices=borough_choices(), default='')

    latitude = FloatField(
        'Latitude',
        validators=[
            Optional(),
            NumberRange(min=-90, max=90, message='Latitude must be between -90 and 90.'),
        ],
    )

    longitude = FloatField(
        'Longitude',
        validators=[
            Optional(),
            NumberRange(min=-180, max=180, message='Longitude must be between -180 and 180.'),
        ],
    )

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        return self.validate_location_pair()
