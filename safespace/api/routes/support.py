"""
safespace.api.routes.support — Outbound support email
======================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from safespace.api.deps import get_email_sender, require_identity
from safespace.services.email_service import EmailSender

router = APIRouter(prefix="/support", tags=["support"])


class EmailBody(BaseModel):
    to: str
    subject: str
    text: str
    html: str | None = None


@router.post("/email")
def send_email(
    body: EmailBody,
    _caller: str = Depends(require_identity),
    sender: EmailSender = Depends(get_email_sender),
):
    # Delivery failures come back in the payload, never as an HTTP error.
    return sender.send(body.to, body.subject, body.text, body.html)
