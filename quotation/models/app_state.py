from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from quotation.extensions import db

# JSONB on Postgres, plain JSON elsewhere (sqlite for local/testing)
JsonBlob = JSON().with_variant(JSONB(), "postgresql")

class AppState(db.Model):
    """
    Key/value blob store. One row per key:
      - "projects":  {"projects": [...], "lastProjectId": ...}
      - "workspace": {"currentProjectId": ..., "data": ProjectData}
    """
    __tablename__ = "app_state"

    key = db.Column(db.String(64), primary_key=True)
    payload = db.Column(JsonBlob, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<AppState key={self.key!r}>"

    def to_dict(self):
        return dict(
            key=self.key,
            payload=self.payload or {},
            created_at=self.created_at.isoformat() if self.created_at else None,
            updated_at=self.updated_at.isoformat() if self.updated_at else None,
        )
