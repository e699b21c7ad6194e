# envoearn/services/email.py
import logging

from flask import current_app
from flask_mail import Message
from markupsafe import escape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from envoearn.extensions import mail

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to ENVO EARN - Your Account is Ready!"


def render_welcome_html(username: str) -> str:
    daily = current_app.config.get("DAILY_EARNING_AMOUNT")
    dashboard_url = f"{(current_app.config.get('APP_BASE_URL') or '').rstrip('/')}/dashboard"
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <body style="background-color:#f5f5f5; margin:0; padding:0; font-family: Arial, sans-serif;">
      <table align="center" width="100%" cellpadding="0" cellspacing="0"
             style="max-width: 600px; margin: auto; background-color: #ffffff; border-radius: 10px;">
        <tr>
          <td style="background-color: #004d4d; padding: 20px; text-align:center;">
            <h1 style="color:#ffffff; margin:10px 0;">Welcome to ENVO EARN</h1>
          </td>
        </tr>
        <tr>
          <td style="padding: 30px; text-align: center; color: #333333;">
            <h2>Congratulations, your account is ready!</h2>
            <p style="font-size: 16px; line-height: 1.6;">
              Hi <strong>{escape(username)}</strong>,<br/><br/>
              Your ENVO EARN account is now active and your daily earning of
              <strong>{daily:,.0f} PKR</strong> has started.
              Check your dashboard to view your investment and earnings.
            </p>
            <a href="{dashboard_url}"
               style="display:inline-block; margin-top:20px; background-color:#004d4d; color:#ffffff;
                      text-decoration:none; padding:12px 24px; border-radius:6px; font-weight:bold;">
              Go to Dashboard
            </a>
          </td>
        </tr>
      </table>
    </body>
    </html>
    """


def _send_with_sendgrid(to_email: str, html: str) -> None:
    message = Mail(
        from_email=current_app.config["MAIL_DEFAULT_SENDER"],
        to_emails=to_email,
        subject=WELCOME_SUBJECT,
        html_content=html,
    )

    sg = SendGridAPIClient(api_key=current_app.config["SENDGRID_API_KEY"])
    resp = sg.send(message)

    # SendGrid typically returns 202 on success
    if resp.status_code not in (200, 202):
        logger.error("SendGrid failed. Status=%s Body=%s", resp.status_code, resp.body)
        raise RuntimeError(f"SendGrid rejected email. status={resp.status_code}")


def _send_with_smtp(to_email: str, html: str) -> None:
    msg = Message(
        subject=WELCOME_SUBJECT,
        recipients=[to_email],
        html=html,
        sender=current_app.config["MAIL_DEFAULT_SENDER"],
    )
    mail.send(msg)


def send_welcome_email(email: str, username: str) -> dict:
    """Send the welcome mail. Never raises; failures come back as {"success": False, "error"}."""
    try:
        html = render_welcome_html(username)

        if current_app.config.get("SENDGRID_API_KEY"):
            _send_with_sendgrid(email, html)
        elif current_app.config.get("MAIL_SERVER"):
            _send_with_smtp(email, html)
        else:
            return {"success": False, "error": "Email delivery is not configured."}

    except Exception as e:
        # SendGrid exceptions carry the API's error details in .body
        body = getattr(e, "body", None)
        logger.exception("Welcome email to %s failed: body=%s error=%s", email, body, e)
        return {"success": False, "error": str(e) or "An unexpected error occurred during email sending."}

    current_app.logger.info("Welcome email sent to %s", email)
    return {"success": True}
