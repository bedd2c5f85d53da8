# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .catalog import CatalogLoader, decode_items, encode_items
from .editing import CommitFlow, CommitResult, EditDraft, EditModal
from .errors import ValidationError
from .notices import Notifier
from .synchronizer import CatalogSynchronizer
from .texture_source import TextureSource
from .tiered_cache import CacheSet
from .view import PAGE_SIZE, PageView, ViewState, project

logger = logging.getLogger(__name__)

MSG_CACHE_CLEARED = "Cache cleared"


class AdminSession:
    """State of one admin page: published catalog, view state, edit modal.

    ViewState only changes through set_search / set_category / set_page.
    """

    def __init__(
        self,
        source: TextureSource,
        client: Any,
        cache_dir: Path,
        *,
        image_prefix: str = "/textures",
        page_size: int = PAGE_SIZE,
        notifier: Optional[Notifier] = None,
    ):
        self.caches = CacheSet.open(cache_dir, encode_catalog=encode_items, decode_catalog=decode_items)
        self.notifier = notifier or Notifier()
        self.synchronizer = CatalogSynchronizer(
            CatalogLoader(source, client, self.caches, image_prefix=image_prefix)
        )
        self.flow = CommitFlow(client, self.synchronizer, self.notifier)
        self.modal = EditModal(self.flow)
        self.page_size = int(page_size)
        self._lock = threading.RLock()
        self._state = ViewState()

    # ----------------- lifecycle -----------------
    def mount(self) -> bool:
        return self.synchronizer.load(force_refresh=False, trigger="mount")

    def reload(self) -> bool:
        return self.synchronizer.load(force_refresh=True, trigger="reload")

    def clear_cache(self) -> bool:
        logger.info("Clearing all caches (operator request)")
        self.synchronizer.clear_caches()
        self.notifier.success(MSG_CACHE_CLEARED)
        return self.synchronizer.load(force_refresh=True, trigger="clear-cache")

    # ----------------- view state -----------------
    @property
    def state(self) -> ViewState:
        with self._lock:
            return self._state

    def set_search(self, term: str) -> ViewState:
        with self._lock:
            if term != self._state.search_term:
                self._state = self._state.set_search(term)
            return self._state

    def set_category(self, category: str) -> ViewState:
        with self._lock:
            if category != self._state.selected_category:
                self._state = self._state.set_category(category)
            return self._state

    def set_page(self, page: int) -> ViewState:
        with self._lock:
            self._state = self._state.set_page(page)
            return self._state

    def view(self) -> PageView:
        return project(self.synchronizer.snapshot.items, self.state, self.page_size)

    # ----------------- editing -----------------
    def edit(self, texture_id: str, name: str, category: str, *, new_category: bool = False) -> Optional[CommitResult]:
        """Open the modal on one texture, apply the draft and save it."""
        item = self.synchronizer.snapshot.get(texture_id)
        if item is None:
            raise ValidationError(f"unknown texture: {texture_id}")
        with self._lock:
            self.modal.open(item)
            self.modal.set_name(name)
            if new_category:
                self.modal.choose_new(category)
            else:
                self.modal.choose_existing(category)
            result = self.modal.save()
            if result is None:
                self.modal.close()
            return result

    def retry_edit(self) -> Optional[EditDraft]:
        """Reopen the modal with the last submitted draft if that commit failed."""
        with self._lock:
            return self.modal.retry()

    # ----------------- diagnostics -----------------
    def cache_status(self) -> Dict[str, Any]:
        info = self.synchronizer.refresh_cache_info()
        return {
            "catalog": info.to_public_dict(),
            "caches": self.synchronizer.diagnostics(),
            "lastError": self.synchronizer.last_error,
        }
