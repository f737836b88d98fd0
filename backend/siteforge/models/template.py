from siteforge.extensions import db
from .base import BaseModel


class Template(BaseModel):
    __tablename__ = "templates"

    name = db.Column(db.String(200), nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    pages = db.relationship(
        "TemplatePage",
        back_populates="template",
        order_by="TemplatePage.path",
        cascade="all, delete-orphan",
    )


class TemplatePage(BaseModel):
    __tablename__ = "template_pages"

    template_id = db.Column(db.String(36), db.ForeignKey("templates.id"), nullable=False)
    path = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    sections = db.Column(db.JSON, nullable=False, default=list)

    template = db.relationship("Template", back_populates="pages")

    __table_args__ = (
        db.UniqueConstraint("template_id", "path", name="uq_template_page_path"),
    )
