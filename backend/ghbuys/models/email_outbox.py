from datetime import datetime

from ghbuys.extensions import db


class EmailOutbox(db.Model):
    __tablename__ = "email_outbox"

    id = db.Column(db.Integer, primary_key=True)

    to = db.Column(db.String(255), nullable=False)
    cc = db.Column(db.String(255), nullable=True)
    subject = db.Column(db.String(255), nullable=False)
    html = db.Column(db.Text, nullable=False)
    template = db.Column(db.String(64), nullable=False)

    # queued -> sent / failed
    status = db.Column(db.String(16), nullable=False, default="queued")
    reference = db.Column(db.String(128), nullable=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    sent_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            "id": int(self.id),
            "to": self.to,
            "cc": self.cc or "",
            "subject": self.subject,
            "template": self.template,
            "status": self.status,
            "reference": self.reference or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
        }
