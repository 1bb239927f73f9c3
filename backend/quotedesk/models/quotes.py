from __future__ import annotations

from ..extensions import db
from quotedesk.time_utils import to_utc_z, utcnow


DOCUMENT_STATUSES = ("pending", "approved", "rejected")

WINDOW_TYPES = (
    "normal",
    "slider",
    "fixed-left",
    "fixed-right",
    "fixed-partition-door",
    "fixed-sliding",
    "four-track-sliding",
    "bathroom-with-vent",
)

# Free-text window specification columns, copied as-is into snapshots
WINDOW_SPEC_FIELDS = (
    "profile_system",
    "design",
    "glass_type",
    "locking",
    "grill",
    "hardware",
    "mesh",
    "make",
)


class Quote(db.Model):
    """
    Window quote aggregate.

    Owns its window lines, tax configuration, computed totals and version
    history. Totals are always derived by services.pricing_service; the
    columns hold the last computed values.

    INVARIANT: grand_total == subtotal + first_tax_amount + second_tax_amount
    + packing_charge, with both tax amounts 0 when apply_tax is False.

    The code ("Q-0001") is assigned once at creation and never rewritten.
    """
    __tablename__ = "quotes"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_quotes_code"),
        # Owner-scoped listing, newest first
        db.Index("ix_quotes_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Client details
    client_name = db.Column(db.String(255), nullable=False, default="")
    project = db.Column(db.String(255), nullable=False, default="")
    finish = db.Column(db.String(255), nullable=False, default="")

    # Tax configuration
    apply_tax = db.Column(db.Boolean, nullable=False, default=True)
    first_tax_percent = db.Column(db.Float, nullable=False, default=9.0)
    second_tax_percent = db.Column(db.Float, nullable=False, default=9.0)
    packing_charge = db.Column(db.Float, nullable=False, default=0.0)

    # Computed totals
    subtotal = db.Column(db.Float, nullable=False, default=0.0)
    first_tax_amount = db.Column(db.Float, nullable=False, default=0.0)
    second_tax_amount = db.Column(db.Float, nullable=False, default=0.0)
    grand_total = db.Column(db.Float, nullable=False, default=0.0)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("quotes", lazy=True))
    windows = db.relationship(
        "QuoteWindow",
        back_populates="quote",
        order_by="QuoteWindow.position",
        cascade="all, delete-orphan",
        lazy=True,
    )
    versions = db.relationship(
        "QuoteVersion",
        back_populates="quote",
        order_by="QuoteVersion.version_number",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def snapshot(self) -> dict:
        """Financial and client state captured into version history."""
        return {
            "windows": [w.to_line_dict() for w in self.windows],
            "subtotal": self.subtotal,
            "first_tax_amount": self.first_tax_amount,
            "second_tax_amount": self.second_tax_amount,
            "grand_total": self.grand_total,
            "status": self.status,
            "client_name": self.client_name,
            "project": self.project,
            "finish": self.finish,
            "apply_tax": self.apply_tax,
            "first_tax_percent": self.first_tax_percent,
            "second_tax_percent": self.second_tax_percent,
            "packing_charge": self.packing_charge,
        }

    def to_summary_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "client_name": self.client_name,
            "status": self.status,
            "subtotal": self.subtotal,
            "grand_total": self.grand_total,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_dict(self, include_versions: bool = False) -> dict:
        data = {
            "id": self.id,
            "code": self.code,
            "user_id": self.user_id,
            "client_name": self.client_name,
            "project": self.project,
            "finish": self.finish,
            "apply_tax": self.apply_tax,
            "first_tax_percent": self.first_tax_percent,
            "second_tax_percent": self.second_tax_percent,
            "packing_charge": self.packing_charge,
            "windows": [w.to_dict() for w in self.windows],
            "subtotal": self.subtotal,
            "first_tax_amount": self.first_tax_amount,
            "second_tax_amount": self.second_tax_amount,
            "grand_total": self.grand_total,
            "status": self.status,
            "version_count": len(self.versions),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_versions:
            data["versions"] = [v.to_dict() for v in self.versions]
        return data


class QuoteWindow(db.Model):
    """One priced window configuration on a quote."""
    __tablename__ = "quote_windows"
    __table_args__ = (
        db.Index("ix_quote_windows_quote_position", "quote_id", "position"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    window_type = db.Column(db.String(32), nullable=False, default="normal")
    width = db.Column(db.Float, nullable=False)   # inches
    height = db.Column(db.Float, nullable=False)  # inches

    profile_system = db.Column(db.String(255), nullable=False, default="")
    design = db.Column(db.String(255), nullable=False, default="")
    glass_type = db.Column(db.String(255), nullable=False, default="")
    locking = db.Column(db.String(255), nullable=False, default="")
    grill = db.Column(db.String(255), nullable=False, default="")
    hardware = db.Column(db.String(255), nullable=False, default="")
    mesh = db.Column(db.String(255), nullable=False, default="")
    make = db.Column(db.String(255), nullable=False, default="")

    quantity = db.Column(db.Integer, nullable=False)
    price_per_sqft = db.Column(db.Float, nullable=False)

    # Derived at pricing time, rounded to 2 decimals
    sq_ft = db.Column(db.Float, nullable=False)
    amount = db.Column(db.Float, nullable=False)

    quote = db.relationship("Quote", back_populates="windows")

    def to_line_dict(self) -> dict:
        data = {
            "window_type": self.window_type,
            "width": self.width,
            "height": self.height,
            "quantity": self.quantity,
            "price_per_sqft": self.price_per_sqft,
            "sq_ft": self.sq_ft,
            "amount": self.amount,
        }
        for field in WINDOW_SPEC_FIELDS:
            data[field] = getattr(self, field)
        return data

    def to_dict(self) -> dict:
        return {"id": self.id, "position": self.position, **self.to_line_dict()}


class QuoteVersion(db.Model):
    """
    Append-only history entry holding a quote's state before an update.

    Rows are only ever inserted; they go away with their quote.
    """
    __tablename__ = "quote_versions"
    __table_args__ = (
        db.UniqueConstraint("quote_id", "version_number", name="uq_quote_versions_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    version_number = db.Column(db.Integer, nullable=False)
    snapshot = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    quote = db.relationship("Quote", back_populates="versions")

    def to_dict(self) -> dict:
        return {
            "version_number": self.version_number,
            "timestamp": to_utc_z(self.created_at),
            "previous": self.snapshot,
        }
