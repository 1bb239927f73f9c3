# Overview: Outbound email through the Resend HTTP API.

"""
Mailer

Constructed once in extensions.py and bound to the app with init_app(),
the same way db and migrate are.

Delivery failures are logged and reported as False; they never abort the
request that triggered the email. Without RESEND_API_KEY nothing is sent
and the message is only logged (local development).
"""

from __future__ import annotations

import httpx
from flask import current_app


RESET_EMAIL_SUBJECT = "Reset your password"

RESET_EMAIL_HTML = """\
<!DOCTYPE html>
<html>
<body style="margin:0;padding:0;font-family:Helvetica,Arial,sans-serif;background-color:#f3f4f6;">
  <div style="max-width:600px;margin:40px auto;background:#ffffff;border-radius:8px;padding:40px;color:#334155;">
    <h2 style="margin-top:0;color:#0f172a;">Password Reset Request</h2>
    <p>We received a request to reset the password for your account.
       If you made this request, use the button below:</p>
    <p style="text-align:center;margin:30px 0;">
      <a href="{reset_url}" style="background:#2563eb;color:#ffffff;padding:14px 28px;border-radius:6px;text-decoration:none;font-weight:bold;">Reset Password</a>
    </p>
    <p style="font-size:14px;color:#64748b;">This link will expire in <strong>{ttl_minutes} minutes</strong>.</p>
    <p style="font-size:13px;color:#64748b;">If you didn't request a password reset, you can ignore this email.</p>
    <p style="font-size:12px;color:#94a3b8;">Button not working? Paste this link into your browser:<br>
      <a href="{reset_url}">{reset_url}</a></p>
  </div>
</body>
</html>
"""


class Mailer:
    def __init__(self):
        self.api_key: str | None = None
        self.api_url: str = "https://api.resend.com/emails"
        self.sender: str = ""
        self.timeout: float = 10.0

    def init_app(self, app) -> None:
        self.api_key = app.config.get("RESEND_API_KEY")
        self.api_url = app.config.get("RESEND_API_URL", self.api_url)
        self.sender = app.config.get("MAIL_FROM", "")
        self.timeout = float(app.config.get("MAIL_TIMEOUT_SECONDS", self.timeout))
        app.extensions["mailer"] = self

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def send(self, *, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            current_app.logger.info("Mail disabled (no RESEND_API_KEY); not sending %r to %s", subject, to)
            return False

        try:
            response = httpx.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError:
            current_app.logger.warning("Failed to send %r to %s", subject, to, exc_info=True)
            return False

        return True

    def send_password_reset(self, *, to: str, reset_url: str, ttl_minutes: int) -> bool:
        if not self.enabled:
            current_app.logger.info("Password reset link for %s: %s", to, reset_url)
        html = RESET_EMAIL_HTML.format(reset_url=reset_url, ttl_minutes=ttl_minutes)
        return self.send(to=to, subject=RESET_EMAIL_SUBJECT, html=html)
