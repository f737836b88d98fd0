from siteforge.extensions import db
from siteforge.domain.status import ProjectStatus
from .base import BaseModel
from .tenant_mixin import TenantMixin


class Project(BaseModel, TenantMixin):
    __tablename__ = "website_projects"

    generated_hostname = db.Column(db.String(255), unique=True, nullable=False)
    status = db.Column(
        db.String(32), nullable=False, default=ProjectStatus.CREATED.value, index=True
    )

    # Captured once, on CREATED -> GBP_SELECTED
    selected_place_id = db.Column(db.String(255), nullable=True)
    selected_website_url = db.Column(db.String(512), nullable=True)
    template_id = db.Column(db.String(36), db.ForeignKey("templates.id"), nullable=True)
    primary_color = db.Column(db.String(32), nullable=True)
    accent_color = db.Column(db.String(32), nullable=True)
    step_gbp_scrape = db.Column(db.JSON, nullable=True)

    # Opaque payloads reported by the worker, keyed by stage
    stage_artifacts = db.Column(db.JSON, nullable=False, default=dict)

    pages = db.relationship(
        "Page",
        back_populates="project",
        order_by="Page.version",
        cascade="all, delete-orphan",
    )
