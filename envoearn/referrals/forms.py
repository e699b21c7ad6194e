from flask_wtf import FlaskForm
from wtforms import DecimalField, StringField, SubmitField
from wtforms.validators import DataRequired, InputRequired


class WithdrawalMethodForm(FlaskForm):
    method = StringField("Platform", validators=[DataRequired(message="Please select a platform.")])
    account_name = StringField("Account Name", validators=[DataRequired()])
    account_number = StringField("Account Number", validators=[DataRequired()])
    submit = SubmitField("Save Method")


class WithdrawalForm(FlaskForm):
    amount = DecimalField("Amount (PKR)", places=2, validators=[
        InputRequired(message="Enter a valid withdrawal amount.")
    ])
    submit = SubmitField("Withdraw")
