from siteforge.domain.status import PageStatus
from .exceptions import (
    CannotDeletePublished,
    ElementNotEditable,
    InvariantViolation,
    NoPublishedVersion,
    SoleVersion,
)


def normalize_path(path):
    """`about`, `/about/` and `/about` all name the same page."""
    if not path or not path.strip():
        raise ValueError("path is required")

    return "/" + path.strip().strip("/")


def assert_sections(sections, publish=False):
    if not isinstance(sections, list):
        raise InvariantViolation("Sections must be a list.")

    if publish and not sections:
        raise InvariantViolation("Cannot publish page without sections.")

    names = []
    for section in sections:
        if not isinstance(section, dict) or not section.get("name"):
            raise InvariantViolation(f"Section must have a name: {section!r}")
        if not isinstance(section.get("content", ""), str):
            raise InvariantViolation(
                f"Section '{section['name']}' content must be an HTML string."
            )
        names.append(section["name"])

    if len(names) != len(set(names)):
        raise InvariantViolation(f"Section names are not unique: {names}")


def assert_single_published(versions):
    """At most one published row per (project, path)."""
    published = [v for v in versions if v.status == PageStatus.PUBLISHED]
    if len(published) > 1:
        raise InvariantViolation(
            f"Path has {len(published)} published versions: "
            f"{sorted(v.version for v in published)}"
        )


def require_published(versions):
    for version in versions:
        if version.status == PageStatus.PUBLISHED:
            return version
    raise NoPublishedVersion("Path has no published version to draft from.")


def latest_draft(versions):
    drafts = [v for v in versions if v.status == PageStatus.DRAFT]
    return max(drafts, key=lambda v: v.version) if drafts else None


def assert_deletable(page, siblings):
    """
    `siblings` is every row for the page's path, the page included.
    """
    if page.status == PageStatus.PUBLISHED:
        raise CannotDeletePublished(
            f"Version {page.version} of '{page.path}' is published."
        )

    if len(siblings) <= 1:
        raise SoleVersion(
            f"Version {page.version} is the only version of '{page.path}'."
        )


SECTION_MARKER = "-section-"


def assert_editable(css_class):
    """Header and footer live on the project wrapper, not on the page."""
    if not css_class or SECTION_MARKER not in css_class:
        raise ElementNotEditable(
            f"Element '{css_class}' is not part of a page section."
        )
