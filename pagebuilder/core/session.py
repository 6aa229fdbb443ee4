"""Editor lifecycle: one live editing session per host.

The Qt dialog is a view over :class:`EditorSession`. Collaborator calls are
split into ``begin_*`` and ``complete_*`` halves so a worker thread can run
the awaitable while results are applied on the GUI thread; ``save`` and
``regenerate`` combine both halves for callers with an event loop.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, FrozenSet, Optional

from .drafts import DraftState, DraftStore
from .errors import DraftStateError, PageBuilderError, RegenerationPendingError, ValidationError, user_message
from .forms import Catalogs, EditForm, FormCollaborators
from .images import image_slots
from .models import MediaFile, Page, Section
from .preview import preview_document
from .regeneration import RegenerateFn, RegenerationGateway, RegenerationRequest, validate_instruction
from .registry import label_for, render_edit_form, render_preview
from .storage import DraftSnapshotStore

logger = logging.getLogger(__name__)

ZOOM_MIN = 25
ZOOM_MAX = 100
ZOOM_DEFAULT = 50

SAVE_FAILED = "Failed to save changes."
SAVE_WHILE_REGENERATING = "Wait for the AI update to finish before saving."
UPLOAD_FAILED = "Upload failed."
UPLOAD_UNAVAILABLE = "Uploading is not available."

SaveFn = Callable[[str, Section], Awaitable[None]]
UploadFn = Callable[[str], Awaitable[MediaFile]]


class Tab(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


class ActionStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    IGNORED = "ignored"


@dataclass
class ActionResult:
    status: ActionStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ActionStatus.SUCCESS


@dataclass
class EditorCollaborators:
    save: SaveFn
    regenerate: RegenerateFn
    catalogs: Catalogs = field(default_factory=Catalogs)
    upload: Optional[UploadFn] = None
    # Records an uploaded file in the media library; defaults to appending to catalogs.media.
    add_media: Optional[Callable[[MediaFile], None]] = None
    snapshots: Optional[DraftSnapshotStore] = None


@dataclass
class SaveTicket:
    epoch: int
    snapshot: Section


@dataclass
class RegenerationTicket:
    epoch: int
    request: RegenerationRequest


@dataclass
class UploadTicket:
    epoch: int
    path: str


def clamp_zoom(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"zoom must be a finite number, got {value!r}")
    return int(min(ZOOM_MAX, max(ZOOM_MIN, round(value))))


class EditorHost:
    """Owns the committed page view and at most one open editor."""

    def __init__(
        self,
        page: Callable[[], Page],
        collaborators: EditorCollaborators,
        default_zoom: int = ZOOM_DEFAULT,
    ) -> None:
        self._page = page
        self.collaborators = collaborators
        self.default_zoom = clamp_zoom(default_zoom)
        self.active: Optional[EditorSession] = None

    @property
    def page(self) -> Page:
        return self._page()

    def open(self, section_key: str) -> "EditorSession":
        """Start editing ``section_key``; any previous session is discarded."""
        section = self.page.section(section_key)
        if section is None:
            raise DraftStateError(f"No section named {section_key!r}")
        if self.active is not None:
            self.active.cancel()
        session = EditorSession(self, section_key, section)
        self.active = session
        logger.info("Opened editor for %s (%s)", section_key, session.kind)
        return session

    def is_live(self, session: "EditorSession") -> bool:
        return session is self.active and not session.closed

    def _release(self, session: "EditorSession") -> None:
        if self.active is session:
            self.active = None


class EditorSession:
    def __init__(self, host: EditorHost, section_key: str, section: Section) -> None:
        self.host = host
        self.section_key = section_key
        self.store = DraftStore()
        self.store.seed(section)
        self.gateway = RegenerationGateway(host.collaborators.regenerate)
        self.tab = Tab.EDIT
        self.zoom = host.default_zoom
        self.closed = False
        self._media_target: Optional[Callable[[str], None]] = None

    # ---- state --------------------------------------------------------
    @property
    def kind(self) -> str:
        return self.store.kind

    @property
    def draft(self) -> Optional[Section]:
        return self.store.draft

    @property
    def error(self) -> Optional[str]:
        return self.store.error

    @property
    def catalogs(self) -> Catalogs:
        return self.host.collaborators.catalogs

    @property
    def title(self) -> str:
        return f"Edit {label_for(self.kind)} Section"

    def can_regenerate(self, instruction: str) -> bool:
        return (
            not self.closed
            and not self.gateway.pending
            and self.store.state == DraftState.EDITING
            and bool((instruction or "").strip())
        )

    def can_save(self) -> bool:
        return not self.closed and self.store.state == DraftState.EDITING

    def is_dirty(self) -> bool:
        """True when the draft differs from the committed section."""
        return self.draft is not None and self.draft != self.host.page.section(self.section_key)

    def regenerating_slots(self) -> FrozenSet[str]:
        """Image slots of the committed section while an AI update for it is pending."""
        section = self.host.page.section(self.section_key)
        if not self.gateway.pending or self.closed or section is None:
            return frozenset()
        return frozenset(key for key, _ in image_slots(section))

    def dismiss_error(self) -> None:
        self.store.clear_error()

    # ---- view state ---------------------------------------------------
    def show_tab(self, tab: Tab | str) -> Tab:
        self.tab = Tab(tab)
        return self.tab

    def set_zoom(self, value: object) -> int:
        self.zoom = clamp_zoom(value)
        return self.zoom

    # ---- close --------------------------------------------------------
    def cancel(self) -> None:
        if self.closed:
            return
        self.store.discard()
        self._close()
        logger.info("Closed editor for %s without saving", self.section_key)

    def handle_key(self, key: str) -> bool:
        if key == "Escape":
            self.cancel()
            return True
        return False

    def backdrop_clicked(self) -> None:
        self.cancel()

    def _close(self) -> None:
        self.closed = True
        self._media_target = None
        self.host._release(self)

    # ---- rendering ----------------------------------------------------
    def form_collaborators(self) -> FormCollaborators:
        return FormCollaborators(catalogs=self.catalogs, pick_media=self.open_media_library)

    def edit_form(self) -> EditForm:
        return render_edit_form(self.kind, self.draft, self.store, self.form_collaborators())

    def preview_fragment(self) -> str:
        if self.draft is None:
            return ""
        page = self.host.page
        return render_preview(self.kind, self.draft, page.images, page.theme, self.catalogs)

    def preview_html(self) -> str:
        return preview_document(self.preview_fragment(), self.host.page.theme, title=self.title)

    # ---- media --------------------------------------------------------
    def open_media_library(self, apply: Callable[[str], None]) -> None:
        """Remember which image field the next media selection writes to."""
        self._media_target = apply

    @property
    def media_target_open(self) -> bool:
        return self._media_target is not None

    def select_media(self, media: MediaFile) -> bool:
        target, self._media_target = self._media_target, None
        if target is None or self.closed:
            return False
        target(media.url)
        return True

    def close_media_library(self) -> None:
        self._media_target = None

    def begin_upload(self, path: str) -> Optional[UploadTicket]:
        if self.closed:
            return None
        if self.host.collaborators.upload is None:
            self.store.fail(UPLOAD_UNAVAILABLE)
            return None
        return UploadTicket(self.store.epoch, path)

    def complete_upload(
        self, ticket: UploadTicket, media: Optional[MediaFile] = None, exc: Optional[BaseException] = None
    ) -> ActionResult:
        """Record an uploaded file; runs on the thread that owns the session."""
        if exc is not None or media is None:
            message = user_message(exc, UPLOAD_FAILED) if exc is not None else UPLOAD_FAILED
            logger.warning("Upload of %s failed: %s", ticket.path, message)
            if not self.host.is_live(self) or ticket.epoch != self.store.epoch:
                return ActionResult(ActionStatus.IGNORED)
            self.store.fail(message)
            return ActionResult(ActionStatus.FAILURE, message)
        add_media = self.host.collaborators.add_media
        if add_media is not None:
            add_media(media)
        elif media not in self.catalogs.media:
            self.catalogs.media.append(media)
        logger.info("Uploaded %s", media.name)
        return ActionResult(ActionStatus.SUCCESS)

    async def upload(self, path: str) -> ActionResult:
        ticket = self.begin_upload(path)
        if ticket is None:
            return ActionResult(ActionStatus.FAILURE if not self.closed else ActionStatus.IGNORED, self.error)
        try:
            media = await self.host.collaborators.upload(path)
        except Exception as exc:  # noqa: BLE001
            return self.complete_upload(ticket, exc=exc)
        return self.complete_upload(ticket, media=media)

    # ---- draft stash --------------------------------------------------
    def has_stash(self) -> bool:
        snapshots = self.host.collaborators.snapshots
        if snapshots is None:
            return False
        stashed = snapshots.load(self.section_key)
        return stashed is not None and stashed.section_kind == self.kind

    def stash_draft(self) -> bool:
        snapshots = self.host.collaborators.snapshots
        if snapshots is None or self.draft is None:
            return False
        snapshots.save(self.section_key, self.draft)
        return True

    def restore_stash(self) -> bool:
        """Replace the draft with the stashed copy, when one of the same kind exists."""
        snapshots = self.host.collaborators.snapshots
        if snapshots is None or not self.store.editable:
            return False
        stashed = snapshots.load(self.section_key)
        if stashed is None or stashed.section_kind != self.kind:
            return False
        self.store.replace(stashed)
        return True

    # ---- regenerate ---------------------------------------------------
    def begin_regenerate(self, instruction: str) -> Optional[RegenerationTicket]:
        """Validate and mark the request pending.

        Returns ``None`` and records ``error`` when the request cannot be sent.
        """
        try:
            text = validate_instruction(instruction)
            if self.closed:
                raise DraftStateError("The editor is closed.")
            if self.gateway.pending:
                raise RegenerationPendingError("A regeneration is already in progress.")
            if self.store.state != DraftState.EDITING:
                raise DraftStateError(f"Cannot regenerate while {self.store.state.value}.")
            page = self.host.page
            request = RegenerationRequest(
                section_key=self.section_key,
                kind=self.kind,
                draft=self.store.draft,
                instruction=text,
                base_prompt=page.generation.base_prompt,
                tone=page.generation.tone,
                palette=page.generation.palette,
                media=list(self.catalogs.media),
            )
            self.gateway.begin(request)
        except PageBuilderError as exc:
            if not self.closed:
                self.store.fail(user_message(exc, "Cannot regenerate now."))
            return None
        self.store.begin_regeneration()
        return RegenerationTicket(self.store.epoch, request)

    def complete_regenerate(
        self, ticket: RegenerationTicket, response: object = None, exc: Optional[BaseException] = None
    ) -> ActionResult:
        result = self.gateway.finish(ticket.request, response=response, exc=exc)
        if not self.host.is_live(self) or ticket.epoch != self.store.epoch:
            logger.info("Ignoring late regeneration result for %s", self.section_key)
            return ActionResult(ActionStatus.IGNORED)
        if result.ok:
            self.store.end_regeneration(result.section)
            return ActionResult(ActionStatus.SUCCESS)
        self.store.end_regeneration(error=result.error)
        return ActionResult(ActionStatus.FAILURE, result.error)

    async def regenerate(self, instruction: str) -> ActionResult:
        ticket = self.begin_regenerate(instruction)
        if ticket is None:
            return ActionResult(ActionStatus.FAILURE, self.error)
        try:
            response = await self.gateway.call(ticket.request)
        except Exception as exc:  # noqa: BLE001
            return self.complete_regenerate(ticket, exc=exc)
        return self.complete_regenerate(ticket, response=response)

    # ---- save ---------------------------------------------------------
    def begin_save(self) -> Optional[SaveTicket]:
        if self.closed:
            return None
        if self.store.state == DraftState.REGENERATING:
            self.store.fail(SAVE_WHILE_REGENERATING)
            return None
        try:
            snapshot = self.store.begin_save()
        except DraftStateError as exc:
            self.store.fail(user_message(exc, SAVE_FAILED))
            return None
        logger.info("Saving section %s", self.section_key)
        return SaveTicket(self.store.epoch, snapshot)

    def complete_save(self, ticket: SaveTicket, exc: Optional[BaseException] = None) -> ActionResult:
        if not self.host.is_live(self) or ticket.epoch != self.store.epoch:
            logger.info("Ignoring late save result for %s", self.section_key)
            return ActionResult(ActionStatus.IGNORED)
        if exc is not None:
            message = user_message(exc, SAVE_FAILED)
            logger.warning("Saving %s failed: %s", self.section_key, message)
            self.store.end_save(error=message)
            return ActionResult(ActionStatus.FAILURE, message)
        self.store.end_save()
        snapshots = self.host.collaborators.snapshots
        if snapshots is not None:
            snapshots.clear(self.section_key)
        self._close()
        logger.info("Saved section %s", self.section_key)
        return ActionResult(ActionStatus.SUCCESS)

    async def save(self) -> ActionResult:
        ticket = self.begin_save()
        if ticket is None:
            return ActionResult(ActionStatus.FAILURE if not self.closed else ActionStatus.IGNORED, self.error)
        try:
            await self.host.collaborators.save(self.section_key, ticket.snapshot)
        except Exception as exc:  # noqa: BLE001
            return self.complete_save(ticket, exc=exc)
        return self.complete_save(ticket)

