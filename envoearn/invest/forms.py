from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import StringField, SubmitField
from wtforms.validators import DataRequired, Length, Optional

from envoearn.services.storage import ALLOWED_IMAGE_EXTENSIONS


class PaymentForm(FlaskForm):
    account_name = StringField("Account Name", validators=[
        DataRequired(), Length(min=2, message="Account name must be at least 2 characters.")
    ])
    account_number = StringField("Phone Number", validators=[DataRequired()])
    payment_platform = StringField("Payment Platform", validators=[DataRequired()])
    plan_id = StringField("Plan", validators=[DataRequired()])
    ref = StringField("Referrer", validators=[Optional()])
    screenshot = FileField("Payment Screenshot", validators=[
        FileRequired(message="A screenshot is required."),
        FileAllowed(sorted(ALLOWED_IMAGE_EXTENSIONS), "Screenshot must be an image."),
    ])
    submit = SubmitField("Submit Payment")
