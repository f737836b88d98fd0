from siteforge.extensions import db
from siteforge.domain.status import PageStatus
from .base import BaseModel
from .tenant_mixin import TenantMixin


class Page(BaseModel, TenantMixin):
    """One version row of a logical page, identified by (project_id, path)."""

    __tablename__ = "website_pages"

    project_id = db.Column(
        db.String(36), db.ForeignKey("website_projects.id"), nullable=False
    )
    path = db.Column(db.String(255), nullable=False)
    version = db.Column(db.Integer, nullable=False)
    status = db.Column(
        db.String(20), nullable=False, default=PageStatus.DRAFT.value, index=True
    )
    # draft | published | inactive

    sections = db.Column(db.JSON, nullable=False, default=list)
    edit_chat_history = db.Column(db.JSON, nullable=True)

    project = db.relationship("Project", back_populates="pages")

    __table_args__ = (
        db.UniqueConstraint("project_id", "path", "version", name="uq_page_path_version"),
        db.Index("idx_page_project_path", "project_id", "path"),
    )


class PageSequence(db.Model):
    """
    Hands out version numbers per (project_id, path).

    Kept when every version of a path is deleted, so numbers are never reused.
    """

    __tablename__ = "page_version_sequences"

    project_id = db.Column(
        db.String(36), db.ForeignKey("website_projects.id"), primary_key=True
    )
    path = db.Column(db.String(255), primary_key=True)
    last_version = db.Column(db.Integer, nullable=False, default=0)
