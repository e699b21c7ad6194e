from flask_wtf import FlaskForm
from wtforms import DecimalField, SelectField, SubmitField
from wtforms.validators import DataRequired, InputRequired, NumberRange

DECISIONS = [("approved", "Approve"), ("rejected", "Reject")]


class DecisionForm(FlaskForm):
    status = SelectField("Decision", choices=DECISIONS, validators=[DataRequired()])
    submit = SubmitField("Save")


class BalanceForm(FlaskForm):
    balance = DecimalField("New Balance (PKR)", places=2, validators=[
        InputRequired(), NumberRange(min=0, message="Balance cannot be negative.")
    ])
    submit = SubmitField("Update Balance")
