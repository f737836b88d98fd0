# siteforge/client/records.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from siteforge.domain.status import PageStatus, ProjectStatus, SkillStatus


@dataclass
class ProjectSnapshot:
    id: str
    status: ProjectStatus
    generated_hostname: Optional[str] = None
    template_id: Optional[str] = None
    selected_place_id: Optional[str] = None
    selected_website_url: Optional[str] = None
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    stage_artifacts: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectSnapshot":
        return cls(
            id=data["id"],
            status=ProjectStatus(data["status"]),
            generated_hostname=data.get("generated_hostname"),
            template_id=data.get("template_id"),
            selected_place_id=data.get("selected_place_id"),
            selected_website_url=data.get("selected_website_url"),
            primary_color=data.get("primary_color"),
            accent_color=data.get("accent_color"),
            stage_artifacts=data.get("stage_artifacts") or {},
        )


@dataclass
class Place:
    """A business profile candidate picked by the user."""

    place_id: str
    name: str
    website_url: Optional[str] = None
    formatted_address: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    category: Optional[str] = None

    def business(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "formattedAddress": self.formatted_address,
            "phone": self.phone,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "category": self.category,
        }


@dataclass
class PipelineConfig:
    """Configuration captured once, when a place is confirmed."""

    place_id: str
    template_id: str
    website_url: Optional[str] = None
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    business: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_place(cls, place: Place, template_id: str, **colors) -> "PipelineConfig":
        return cls(
            place_id=place.place_id,
            template_id=template_id,
            website_url=place.website_url,
            primary_color=colors.get("primary_color"),
            accent_color=colors.get("accent_color"),
            business=place.business(),
        )

    @classmethod
    def from_project(cls, project: ProjectSnapshot) -> "PipelineConfig":
        return cls(
            place_id=project.selected_place_id,
            template_id=project.template_id,
            website_url=project.selected_website_url,
            primary_color=project.primary_color,
            accent_color=project.accent_color,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TemplateSnapshot:
    id: str
    name: str
    pages: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateSnapshot":
        return cls(id=data["id"], name=data.get("name", ""), pages=data.get("pages") or [])


@dataclass
class Section:
    name: str
    content: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Section":
        return cls(name=data["name"], content=data.get("content", ""))

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "content": self.content}


@dataclass
class PageVersion:
    id: str
    project_id: str
    path: str
    version: int
    status: PageStatus
    sections: List[Section] = field(default_factory=list)
    edit_chat_history: Optional[Dict[str, Any]] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageVersion":
        return cls(
            id=data["id"],
            project_id=data["project_id"],
            path=data["path"],
            version=int(data["version"]),
            status=PageStatus(data["status"]),
            sections=[Section.from_dict(s) for s in data.get("sections") or []],
            edit_chat_history=data.get("edit_chat_history"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class EditRequest:
    selector: str
    current_html: str
    instruction: str
    chat_history: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DebugInfo:
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    messages: List[Dict[str, Any]] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DebugInfo":
        data = data or {}
        return cls(
            model=data.get("model"),
            system_prompt=data.get("system_prompt"),
            messages=data.get("messages") or [],
            input_tokens=data.get("input_tokens") or 0,
            output_tokens=data.get("output_tokens") or 0,
        )


@dataclass
class EditResult:
    """Either edited HTML or a rejection; a rejection is not an error."""

    rejected: bool
    message: str
    edited_html: Optional[str] = None
    debug: DebugInfo = field(default_factory=DebugInfo)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditResult":
        return cls(
            rejected=bool(data.get("rejected")),
            message=data.get("message") or "",
            edited_html=data.get("edited_html"),
            debug=DebugInfo.from_dict(data.get("debug")),
        )


@dataclass
class SkillSnapshot:
    id: str
    status: SkillStatus
    artifact: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SkillSnapshot":
        return cls(
            id=data["id"],
            status=SkillStatus(data["status"]),
            artifact=data.get("artifact"),
            error=data.get("error"),
        )
