from enum import Enum


class _StatusEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class ProjectStatus(_StatusEnum):
    """Pipeline stages, in the order the external worker reaches them."""

    CREATED = "CREATED"
    GBP_SELECTED = "GBP_SELECTED"
    GBP_SCRAPED = "GBP_SCRAPED"
    WEBSITE_SCRAPED = "WEBSITE_SCRAPED"
    IMAGES_ANALYZED = "IMAGES_ANALYZED"
    HTML_GENERATED = "HTML_GENERATED"
    READY = "READY"

    @property
    def rank(self) -> int:
        return PIPELINE_STAGES.index(self)


PIPELINE_STAGES = tuple(ProjectStatus)

# Nothing to observe: waiting on the user, or finished
NON_POLLING_STATUSES = frozenset({ProjectStatus.CREATED, ProjectStatus.READY})


class PageStatus(_StatusEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    INACTIVE = "inactive"


class SkillStatus(_StatusEnum):
    DRAFT = "draft"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


SKILL_TERMINAL_STATUSES = frozenset({SkillStatus.READY, SkillStatus.FAILED})
