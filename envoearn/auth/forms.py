from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SubmitField
from wtforms.validators import DataRequired, Email, Length


class RegisterForm(FlaskForm):
    username = StringField('Username', validators=[
        DataRequired(), Length(3, 20, message="Username must be 3 to 20 characters.")
    ])
    email = StringField('Email', validators=[DataRequired(), Email(message="Please enter a valid email.")])
    password = PasswordField('Password', validators=[
        DataRequired(), Length(min=8, message="Password must be at least 8 characters.")
    ])
    # the number the payment was sent from; ties the account to its approval
    phone = StringField('Phone', validators=[
        DataRequired(), Length(min=11, message="Valid phone number is required for verification.")
    ])
    submit = SubmitField('Register')


class LoginForm(FlaskForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired()])
    submit = SubmitField('Login')
