from siteforge.extensions import db
from siteforge.domain.status import SkillStatus
from .base import BaseModel
from .tenant_mixin import TenantMixin


class Skill(BaseModel, TenantMixin):
    __tablename__ = "skills"

    name = db.Column(db.String(200), nullable=False)
    status = db.Column(
        db.String(20), nullable=False, default=SkillStatus.DRAFT.value, index=True
    )
    # draft | generating | ready | failed

    definition = db.Column(db.JSON, nullable=False, default=dict)
    artifact = db.Column(db.JSON, nullable=True)
    error = db.Column(db.Text, nullable=True)
