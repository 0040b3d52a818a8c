from __future__ import annotations

from ..extensions import db

class Pharmacy(db.Model):
    """
    Multi-tenant root: every tenant is a Pharmacy.

    All products, sales and sale items carry pharmacy_id and every
    service-layer query filters on it. No data may cross pharmacy boundaries.
    """
    __tablename__ = "pharmacies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    location = db.Column(db.String(255), nullable=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Pharmacy id={self.id} name={self.name!r}>"
