"""
Email background tasks.

Invitation emails, sent through Resend.
"""

from __future__ import annotations

import logging
from datetime import datetime

from eventdesk.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def role_label(role: str) -> str:
    """``"super-admin"`` -> ``"Super Admin"``."""
    return " ".join(word.capitalize() for word in role.split("-"))


def render_invitation_email(
    tenant_name: str,
    inviter_name: str,
    role: str,
    accept_url: str,
    expires_at: str,
) -> tuple[str, str]:
    """Return (subject, html) for an invitation email."""
    expires_on = datetime.fromisoformat(expires_at).strftime("%B %d, %Y")
    subject = f"You've been invited to join {tenant_name}"
    html = f"""
        <h2>You're invited!</h2>
        <p><strong>{inviter_name}</strong> has invited you to join
        <strong>{tenant_name}</strong>.</p>
        <p>
            <strong>Tenant:</strong> {tenant_name}<br>
            <strong>Role:</strong> {role_label(role)}<br>
            <strong>Expires:</strong> {expires_on}
        </p>
        <p>
            <a href="{accept_url}"
               style="background:#0066cc;color:#fff;padding:12px 24px;
                      border-radius:6px;text-decoration:none;display:inline-block;">
                Accept Invitation
            </a>
        </p>
        <p>This invitation will expire in 7 days.</p>
        <p>If the button doesn't work, copy and paste this link into your browser:<br>
        {accept_url}</p>
    """
    return subject, html


@celery_app.task(name="eventdesk.workers.email_tasks.send_invitation_email", bind=True, max_retries=3)
def send_invitation_email(
    self,  # type: ignore[no-untyped-def]
    to_email: str,
    tenant_name: str,
    inviter_name: str,
    role: str,
    invitation_token: str,
    expires_at: str,
    frontend_url: str,
) -> dict[str, str]:
    """
    Send an invitation email via Resend.

    Args:
        to_email: Recipient email address.
        tenant_name: Organization or team display name.
        inviter_name: Display name of the person who sent the invite.
        role: Role being granted (owner/editor/viewer).
        invitation_token: Token for the accept link.
        expires_at: ISO-8601 expiry timestamp.
        frontend_url: Frontend base URL for constructing the accept link.

    Returns:
        Dict with status and message_id.
    """
    try:
        import resend

        from eventdesk.core.config import settings

        resend.api_key = settings.RESEND_API_KEY

        accept_url = f"{frontend_url}/accept-invitation?token={invitation_token}"
        subject, html = render_invitation_email(
            tenant_name, inviter_name, role, accept_url, expires_at
        )

        params: resend.Emails.SendParams = {
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html,
        }

        response = resend.Emails.send(params)
        logger.info("Invitation email sent to %s", to_email)
        return {"status": "sent", "message_id": response["id"]}

    except Exception as exc:
        logger.warning("Invitation email to %s failed, retrying: %s", to_email, exc)
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
