import enum
from datetime import date, datetime

from flask_login import UserMixin
from sqlalchemy.orm import relationship

from entinvoicing import db


class UserRole(enum.Enum):
    MANAGER = "manager"
    CLERK = "clerk"


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(UserRole), nullable=False, default=UserRole.CLERK
    )
    active = db.Column(db.Boolean, default=False, nullable=False)
    invoices = db.relationship("Invoice", backref="creator", lazy=True)

    @property
    def is_manager(self):
        return self.role == UserRole.MANAGER


class Invoice(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    payer = db.Column(db.String(120), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(500))
    date_issued = db.Column(db.Date, nullable=False, default=date.today)
    date_due = db.Column(db.Date, nullable=True)
    paid = db.Column(
        db.Boolean, default=False, nullable=False, server_default="0"
    )
    date_paid = db.Column(db.DateTime, nullable=True)
    date_created = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow
    )
    # Invoices may be entered without logging in, so the creator is optional.
    created_by_id = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=True
    )

    __table_args__ = (
        db.Index("ix_invoice_paid_issued", "paid", "date_issued"),
    )

    def __repr__(self):
        return f"<Invoice {self.id} {self.payer} {self.amount}>"


class ActivityLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True)
    activity = db.Column(db.String(255), nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", backref="activity_logs")
