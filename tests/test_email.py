"""Tests for the welcome email collaborator."""

from unittest.mock import MagicMock, patch

from envoearn.services.email import WELCOME_SUBJECT, render_welcome_html, send_welcome_email


class TestSendWelcomeEmail:

    def test_unconfigured_transport_reports_failure(self, app):
        result = send_welcome_email("newbie@example.com", "newbie")

        assert result == {"success": False, "error": "Email delivery is not configured."}

    def test_sendgrid_success(self, app):
        app.config["SENDGRID_API_KEY"] = "SG.test"
        client = MagicMock()
        client.send.return_value = MagicMock(status_code=202)

        with patch("envoearn.services.email.SendGridAPIClient", return_value=client) as factory:
            result = send_welcome_email("newbie@example.com", "newbie")

        assert result == {"success": True}
        factory.assert_called_once_with(api_key="SG.test")
        client.send.assert_called_once()

    def test_sendgrid_rejection_never_raises(self, app):
        app.config["SENDGRID_API_KEY"] = "SG.test"
        client = MagicMock()
        client.send.return_value = MagicMock(status_code=401, body=b"unauthorized")

        with patch("envoearn.services.email.SendGridAPIClient", return_value=client):
            result = send_welcome_email("newbie@example.com", "newbie")

        assert result["success"] is False
        assert "401" in result["error"]

    def test_transport_exception_never_raises(self, app):
        app.config["SENDGRID_API_KEY"] = "SG.test"

        with patch("envoearn.services.email.SendGridAPIClient", side_effect=ConnectionError("down")):
            result = send_welcome_email("newbie@example.com", "newbie")

        assert result == {"success": False, "error": "down"}

    def test_smtp_fallback(self, app):
        app.config["MAIL_SERVER"] = "smtp.example.com"

        with patch("envoearn.services.email.mail") as mail:
            result = send_welcome_email("newbie@example.com", "newbie")

        assert result == {"success": True}
        message = mail.send.call_args[0][0]
        assert message.subject == WELCOME_SUBJECT
        assert message.recipients == ["newbie@example.com"]

    def test_body_mentions_user_and_dashboard(self, app):
        html = render_welcome_html("newbie")

        assert "newbie" in html
        assert "200 PKR" in html
        assert "http://testserver/dashboard" in html

    def test_username_is_escaped(self, app):
        html = render_welcome_html("<script>alert(1)</script>")

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
