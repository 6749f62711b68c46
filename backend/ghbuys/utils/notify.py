from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from flask import render_template

from ghbuys.extensions import db
from ghbuys.models import EmailOutbox


def queue_email(
    to: str,
    subject: str,
    template: str,
    context: Optional[Dict[str, Any]] = None,
    *,
    cc: str | None = None,
    reference: str = "",
) -> EmailOutbox:
    """Render `emails/<template>.html` and add it to the outbox (caller commits)."""
    html = render_template(f"emails/{template}.html", **(context or {}))
    e = EmailOutbox(
        to=(to or "").strip(),
        cc=(cc or "").strip() or None,
        subject=subject[:255] if subject else "",
        html=html,
        template=template,
        status="queued",
        reference=reference or None,
    )
    db.session.add(e)
    return e


def mark_sent(e: EmailOutbox) -> None:
    e.status = "sent"
    e.sent_at = datetime.utcnow()
    db.session.add(e)


def mark_failed(e: EmailOutbox) -> None:
    e.status = "failed"
    db.session.add(e)
