# -*- coding: utf-8 -*-
"""Edit commit flow + edit modal state machine.

Commit: validate locally -> write to the Metadata Store -> on success clear all
caches and force a full reload. A failed write leaves caches untouched and
triggers no reload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .catalog import CatalogItem
from .errors import FetchError, ValidationError
from .notices import Notifier
from .synchronizer import CatalogSynchronizer

logger = logging.getLogger(__name__)

MSG_REQUIRED = "Please fill in both name and category"
MSG_SAVED = "Saved"
MSG_SAVE_FAILED = "Save failed"

CLOSED = "closed"
EDITING = "editing"


def validate_edit(name: str, category: str) -> Tuple[str, str]:
    nm = (name or "").strip()
    cat = (category or "").strip()
    if not nm or not cat:
        raise ValidationError(MSG_REQUIRED)
    return nm, cat


@dataclass(frozen=True)
class CommitResult:
    texture_id: str
    name: str
    category: str
    ok: bool
    validation_failed: bool = False
    error: Optional[str] = None
    reloaded: bool = False


class CommitFlow:
    def __init__(self, client: Any, synchronizer: CatalogSynchronizer, notifier: Notifier):
        self.client = client
        self.synchronizer = synchronizer
        self.notifier = notifier

    def commit(self, texture_id: str, name: str, category: str) -> CommitResult:
        try:
            nm, cat = validate_edit(name, category)
        except ValidationError as e:
            self.notifier.warning(str(e))
            return CommitResult(texture_id, name, category, ok=False, validation_failed=True, error=str(e))

        try:
            self.client.save(texture_id, nm, cat)
        except FetchError as e:
            logger.error("Error saving texture %s: %s", texture_id, e)
            self.notifier.error(MSG_SAVE_FAILED)
            return CommitResult(texture_id, nm, cat, ok=False, error=str(e))

        # the forced load clears all three caches before it reads anything
        reloaded = self.synchronizer.load(force_refresh=True, trigger="edit")
        self.notifier.success(MSG_SAVED)
        return CommitResult(texture_id, nm, cat, ok=True, reloaded=reloaded)


@dataclass(frozen=True)
class EditDraft:
    texture_id: str
    name: str = ""
    category: str = ""
    new_category: str = ""
    use_new_category: bool = False

    @property
    def effective_category(self) -> str:
        return self.new_category if self.use_new_category else self.category

    def to_dict(self) -> Dict[str, Any]:
        return {
            "textureId": self.texture_id,
            "name": self.name,
            "category": self.category,
            "newCategory": self.new_category,
            "useNewCategory": self.use_new_category,
        }


class EditModal:
    """closed -> editing (open) -> closed (save or close).

    save() closes the modal as soon as the commit is issued; the outcome is
    reported through the notifier. The submitted draft is kept so a failed
    commit can be retried without re-entering data.
    """

    def __init__(self, flow: CommitFlow):
        self.flow = flow
        self.draft: Optional[EditDraft] = None
        self.last_submitted: Optional[EditDraft] = None
        self.last_result: Optional[CommitResult] = None

    @property
    def state(self) -> str:
        return EDITING if self.draft is not None else CLOSED

    def open(self, item: CatalogItem) -> EditDraft:
        self.draft = EditDraft(texture_id=item.id, name=item.name, category=item.category)
        return self.draft

    def close(self) -> None:
        self.draft = None

    def _require_draft(self) -> EditDraft:
        if self.draft is None:
            raise ValidationError("no texture selected")
        return self.draft

    def set_name(self, name: str) -> None:
        d = self._require_draft()
        self.draft = EditDraft(d.texture_id, name, d.category, d.new_category, d.use_new_category)

    def choose_existing(self, category: str) -> None:
        d = self._require_draft()
        self.draft = EditDraft(d.texture_id, d.name, category, d.new_category, False)

    def choose_new(self, label: str) -> None:
        d = self._require_draft()
        self.draft = EditDraft(d.texture_id, d.name, d.category, label, True)

    def save(self) -> Optional[CommitResult]:
        """Returns None when local validation kept the modal open."""
        d = self._require_draft()
        try:
            nm, cat = validate_edit(d.name, d.effective_category)
        except ValidationError as e:
            self.flow.notifier.warning(str(e))
            return None
        self.last_submitted = d
        self.close()
        self.last_result = self.flow.commit(d.texture_id, nm, cat)
        return self.last_result

    def retry(self) -> Optional[EditDraft]:
        """Reopen with the last submitted values after a failed commit."""
        if self.last_submitted is None or self.last_result is None or self.last_result.ok:
            return None
        self.draft = self.last_submitted
        return self.draft
