# siteforge/client/editing.py
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from siteforge.config import ClientConfig
from siteforge.domain.invariants.exceptions import IllegalTransition
from siteforge.domain.invariants.page import assert_editable, latest_draft
from . import markup
from .backend import WebsiteBackend
from .records import DebugInfo, EditRequest, EditResult, PageVersion, Section
from .versions import PageVersionManager

logger = logging.getLogger(__name__)


class EditState(str, Enum):
    DISABLED = "disabled"
    IDLE = "idle"
    EDITING = "editing"


@dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    is_error: bool = False
    failed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(
            role=data["role"],
            content=data.get("content", ""),
            timestamp=data.get("timestamp") or datetime.now(timezone.utc).isoformat(),
            is_error=bool(data.get("is_error")),
            failed=bool(data.get("failed")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
            "is_error": self.is_error,
            "failed": self.failed,
        }


@dataclass
class SelectedElement:
    css_class: str
    section: str
    tag: Optional[str]
    kind: str
    outer_html: str


class EditSession:
    """
    LLM-assisted editing of one draft, one selected element at a time.

    Edits change the in-memory sections only; `save()` and `publish()` go
    through the PageVersionManager. The chat log and the undo snapshot are
    kept apart: undo never rewrites history.
    """

    def __init__(
        self,
        backend: WebsiteBackend,
        versions: PageVersionManager,
        draft: PageVersion,
        *,
        max_chat_messages: Optional[int] = None,
    ):
        self.backend = backend
        self.versions = versions
        self.max_chat_messages = max_chat_messages or ClientConfig.MAX_CHAT_MESSAGES_PER_ELEMENT

        self.selected: Optional[SelectedElement] = None
        self.pending_edit = False
        self.last_debug_info: Optional[DebugInfo] = None
        self._load(draft)

    def _load(self, draft: PageVersion) -> None:
        self.draft = draft
        self.sections: List[Section] = copy.deepcopy(draft.sections)
        self.chat_history: Dict[str, List[ChatMessage]] = {
            element: [ChatMessage.from_dict(m) for m in messages]
            for element, messages in (draft.edit_chat_history or {}).items()
        }
        self._undo: Optional[List[Section]] = None
        self.dirty = False

    @classmethod
    async def open(cls, backend: WebsiteBackend, versions: PageVersionManager, path: str, **kwargs):
        """
        Start editing a path: reuse its draft or copy the published version.
        A page that was never published is edited on its newest draft.
        """
        await versions.load(path)
        draft = None
        if versions.published(path) is None:
            draft = latest_draft(versions.versions(path))
        if draft is None:
            draft = await versions.create_draft_from_published(path)
        draft = await versions.fetch(draft.id)
        return cls(backend, versions, draft, **kwargs)

    @property
    def state(self) -> EditState:
        if self.selected is None:
            return EditState.DISABLED
        return EditState.EDITING if self.pending_edit else EditState.IDLE

    @property
    def can_undo(self) -> bool:
        return self._undo is not None

    # ------------------------
    # Selection
    # ------------------------

    def _locate(self, css_class: str):
        for section in self.sections:
            html = markup.outer_html(section.content, css_class)
            if html is not None:
                return section, html
        return None, None

    def select_element(self, css_class: str) -> SelectedElement:
        if self.pending_edit:
            raise IllegalTransition("Cannot change element while an edit is pending")

        assert_editable(css_class)

        section, html = self._locate(css_class)
        if section is None:
            raise LookupError(f"No element with class '{css_class}' on this page")

        tag = markup.root_tag(html)
        self.selected = SelectedElement(
            css_class=css_class,
            section=section.name,
            tag=tag,
            kind=markup.classify(tag),
            outer_html=html,
        )
        return self.selected

    def deselect(self) -> None:
        if self.pending_edit:
            raise IllegalTransition("Cannot change element while an edit is pending")
        self.selected = None

    def history(self, css_class: Optional[str] = None) -> List[ChatMessage]:
        css_class = css_class or (self.selected.css_class if self.selected else None)
        return list(self.chat_history.get(css_class, []))

    # ------------------------
    # Editing
    # ------------------------

    async def submit(self, instruction: str, media: Optional[List[str]] = None) -> Optional[EditResult]:
        """
        Run one edit against the selected element.

        Returns None without doing anything while another edit is pending.
        Failures are recorded in the chat log and re-raised.
        """
        if self.pending_edit:
            return None

        if self.selected is None:
            raise IllegalTransition("No element selected")

        instruction = (instruction or "").strip()
        if not instruction:
            raise ValueError("instruction is required")

        element = self.selected
        log = self.chat_history.setdefault(element.css_class, [])
        prior = [
            {"role": m.role, "content": m.content} for m in log if not m.failed
        ]
        log.append(ChatMessage(role="user", content=instruction))

        prompt = instruction
        if media:
            prompt += "\n\nAttached media:\n" + "\n".join(f"- {url}" for url in media)

        self.pending_edit = True
        try:
            section, current_html = self._locate(element.css_class)
            if section is None:
                raise LookupError(f"Element '{element.css_class}' is no longer on the page")

            result = await self.backend.edit_element(
                self.draft.id,
                EditRequest(
                    selector=element.css_class,
                    current_html=current_html,
                    instruction=prompt,
                    chat_history=prior,
                ),
            )
            self.last_debug_info = result.debug

            if result.rejected:
                log.append(ChatMessage(role="assistant", content=result.message, is_error=True))
                return result

            self._apply(element, section.name, markup.validate_fragment(result.edited_html))
            log.append(ChatMessage(role="assistant", content=result.message))
            return result
        except Exception as exc:
            logger.warning("Edit of %s failed: %s", element.css_class, exc)
            log.append(ChatMessage(role="assistant", content=f"Edit failed: {exc}", is_error=True, failed=True))
            raise
        finally:
            self.pending_edit = False

    def _apply(self, element: SelectedElement, section_name: str, html: str) -> None:
        updated = copy.deepcopy(self.sections)
        for section in updated:
            if section.name == section_name:
                section.content = markup.replace_element(section.content, element.css_class, html)

        self._undo = self.sections
        self.sections = updated
        self.dirty = True

        tag = markup.root_tag(html)
        element.outer_html = html
        element.tag = tag
        element.kind = markup.classify(tag)

    def undo(self) -> bool:
        """Revert the most recent successful edit. Single level, no redo."""
        if self.pending_edit or self._undo is None:
            return False

        self.sections = self._undo
        self._undo = None
        self.dirty = True

        if self.selected is not None:
            _, html = self._locate(self.selected.css_class)
            if html is not None:
                self.selected.outer_html = html
        return True

    # ------------------------
    # Persistence
    # ------------------------

    def persisted_history(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            element: [m.to_dict() for m in messages[-self.max_chat_messages:]]
            for element, messages in self.chat_history.items()
            if messages
        }

    async def save(self) -> PageVersion:
        saved = await self.versions.save_draft(
            self.draft.id,
            self.sections,
            chat_history=self.persisted_history(),
        )
        self.draft = saved
        self.dirty = False
        return saved

    async def publish(self) -> PageVersion:
        """
        Publish the draft and continue on a fresh draft of the new live
        version. Chat history starts over.
        """
        if self.pending_edit:
            raise IllegalTransition("Cannot publish while an edit is pending")

        if self.dirty:
            await self.save()

        published = await self.versions.publish(self.draft.id)

        draft = await self.versions.create_draft_from_published(published.path)
        draft = await self.versions.fetch(draft.id)

        self._load(draft)
        self.chat_history = {}
        self.selected = None
        self.last_debug_info = None
        return published
