from __future__ import annotations

from ..extensions import db
from quotedesk.time_utils import to_utc_z, utcnow


MATERIAL_UNITS = ("pcs", "sqft", "m", "kg")

RECIPIENT_FIELDS = ("to_name", "company", "address", "reference")


class MaterialQuote(db.Model):
    """
    Material quote aggregate: a priced list of material lines for a recipient.

    No tax configuration; total_value is the plain sum of line amounts.
    Keeps the same version history as Quote so that every financial edit
    can be audited.
    """
    __tablename__ = "material_quotes"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_material_quotes_code"),
        db.Index("ix_material_quotes_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    # "MAT-" + 6 random uppercase alphanumerics
    code = db.Column(db.String(16), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Recipient
    to_name = db.Column(db.String(255), nullable=False, default="")
    company = db.Column(db.String(255), nullable=False, default="")
    address = db.Column(db.Text, nullable=False, default="")
    reference = db.Column(db.String(255), nullable=False, default="")

    total_value = db.Column(db.Float, nullable=False, default=0.0)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("material_quotes", lazy=True))
    materials = db.relationship(
        "MaterialLine",
        back_populates="material_quote",
        order_by="MaterialLine.position",
        cascade="all, delete-orphan",
        lazy=True,
    )
    versions = db.relationship(
        "MaterialQuoteVersion",
        back_populates="material_quote",
        order_by="MaterialQuoteVersion.version_number",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def recipient_info(self) -> dict:
        return {field: getattr(self, field) for field in RECIPIENT_FIELDS}

    def snapshot(self) -> dict:
        return {
            "materials": [m.to_line_dict() for m in self.materials],
            "total_value": self.total_value,
            "status": self.status,
            "recipient_info": self.recipient_info,
        }

    def to_summary_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "recipient_info": self.recipient_info,
            "status": self.status,
            "total_value": self.total_value,
            "line_count": len(self.materials),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_dict(self, include_versions: bool = False) -> dict:
        data = {
            "id": self.id,
            "code": self.code,
            "user_id": self.user_id,
            "recipient_info": self.recipient_info,
            "materials": [m.to_dict() for m in self.materials],
            "total_value": self.total_value,
            "status": self.status,
            "version_count": len(self.versions),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_versions:
            data["versions"] = [v.to_dict() for v in self.versions]
        return data


class MaterialLine(db.Model):
    """Individual material entry on a material quote."""
    __tablename__ = "material_lines"
    __table_args__ = (
        db.Index("ix_material_lines_quote_position", "material_quote_id", "position"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    material_quote_id = db.Column(
        db.Integer, db.ForeignKey("material_quotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = db.Column(db.Integer, nullable=False)

    description = db.Column(db.String(500), nullable=False)
    unit = db.Column(db.String(8), nullable=False, default="pcs")
    qty = db.Column(db.Float, nullable=False)
    rate = db.Column(db.Float, nullable=False)
    amount = db.Column(db.Float, nullable=False)  # qty * rate, 2 decimals
    notes = db.Column(db.Text, nullable=True)

    material_quote = db.relationship("MaterialQuote", back_populates="materials")

    def to_line_dict(self) -> dict:
        return {
            "description": self.description,
            "unit": self.unit,
            "qty": self.qty,
            "rate": self.rate,
            "amount": self.amount,
            "notes": self.notes,
        }

    def to_dict(self) -> dict:
        return {"id": self.id, "position": self.position, **self.to_line_dict()}


class MaterialQuoteVersion(db.Model):
    """Append-only pre-update snapshot of a material quote."""
    __tablename__ = "material_quote_versions"
    __table_args__ = (
        db.UniqueConstraint("material_quote_id", "version_number", name="uq_material_quote_versions_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    material_quote_id = db.Column(
        db.Integer, db.ForeignKey("material_quotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_number = db.Column(db.Integer, nullable=False)
    snapshot = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    material_quote = db.relationship("MaterialQuote", back_populates="versions")

    def to_dict(self) -> dict:
        return {
            "version_number": self.version_number,
            "timestamp": to_utc_z(self.created_at),
            "previous": self.snapshot,
        }
