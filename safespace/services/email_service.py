"""
safespace.services.email_service — Outbound Email Notices
==========================================================

Plain HTTP calls to whichever transactional email provider has a key
configured, checked in this order: Brevo, Resend, SendGrid.

:meth:`EmailSender.send` never raises.  A missing key or a provider
failure is logged and reported back as ``{"sent": False, "reason": ...}``;
there are no retries.
"""

from __future__ import annotations

import html as html_lib
import logging

import httpx

from safespace.config import SafeSpaceConfig

logger = logging.getLogger(__name__)

BREVO_URL = "https://api.brevo.com/v3/smtp/email"
RESEND_URL = "https://api.resend.com/emails"
SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"

REQUEST_TIMEOUT = 10.0


def default_html(text: str) -> str:
    escaped = html_lib.escape(text)
    return (
        '<pre style="font-family:ui-monospace,SFMono-Regular,Menlo,monospace">'
        f"{escaped}</pre>"
    )


class EmailSender:
    """Sends one message through the first configured provider.

    Pass *client* to reuse a connection pool (or a mock transport in tests);
    otherwise a short-lived :class:`httpx.Client` is opened per message.
    """

    def __init__(self, config: SafeSpaceConfig, client: httpx.Client | None = None) -> None:
        self.keys = config.email_keys
        self.sender = config.email_from
        self._client = client

    def _post(self, url: str, headers: dict[str, str], payload: dict) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, headers=headers, json=payload)
        with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
            return client.post(url, headers=headers, json=payload)

    def _request(self, to: str, subject: str, text: str, body_html: str):
        if self.keys.brevo:
            return "brevo", BREVO_URL, {"api-key": self.keys.brevo}, {
                "sender": {"email": self.sender},
                "to": [{"email": to}],
                "subject": subject,
                "textContent": text,
                "htmlContent": body_html,
            }
        if self.keys.resend:
            return "resend", RESEND_URL, {"Authorization": f"Bearer {self.keys.resend}"}, {
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "text": text,
                "html": body_html,
            }
        if self.keys.sendgrid:
            return "sendgrid", SENDGRID_URL, {"Authorization": f"Bearer {self.keys.sendgrid}"}, {
                "personalizations": [{"to": [{"email": to}]}],
                "from": {"email": self.sender},
                "subject": subject,
                "content": [
                    {"type": "text/plain", "value": text},
                    {"type": "text/html", "value": body_html},
                ],
            }
        return None

    def send(self, to: str, subject: str, text: str, html: str | None = None) -> dict:
        """Deliver a message; returns ``{"sent": True, "provider": name}`` or
        ``{"sent": False, "reason": "missing_api_key" | "exception"}``."""
        request = self._request(to, subject, text, html or default_html(text))
        if request is None:
            logger.warning("Email to %s not sent: no provider API key configured", to)
            return {"sent": False, "reason": "missing_api_key"}

        provider, url, headers, payload = request
        try:
            resp = self._post(url, headers, payload)
            resp.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Email to %s via %s failed", to, provider)
            return {"sent": False, "reason": "exception"}

        logger.info("Email '%s' sent to %s via %s", subject, to, provider)
        return {"sent": True, "provider": provider}
