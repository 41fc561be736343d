"""Deferred texture assignments awaiting the asynchronous import subsystem."""

from dataclasses import dataclass
from enum import Enum
import logging
import threading
from typing import List, Optional

from .catalog import Channel, Colorspace
from .interfaces import AssetKind, AssetStore
from .paths import paths_match
from .target_material import TargetMaterial, TextureResource, apply_slot_keywords


logger = logging.getLogger(__name__)


class PendingState(Enum):
    PENDING = "pending"
    READY_TO_APPLY = "ready_to_apply"
    APPLIED = "applied"


@dataclass(eq=False)
class ResolvedTextureAssignment:
    """A texture destined for one slot of one target material.

    Attributes:
        material: Owning target material.
        target_slot: Texture slot on the target material.
        source_property: Catalog property the texture came from.
        resolved_path: Project path of the texture.
        resolved_channel: Channel the catalog reads from the texture.
        resolved_colorspace: Colorspace of the source image, when known.
        state: Position in the pending lifecycle.
        resource: Imported resource when available at resolution time.
    """

    material: TargetMaterial
    target_slot: str
    source_property: str
    resolved_path: Optional[str]
    resolved_channel: Optional[Channel] = None
    resolved_colorspace: Optional[Colorspace] = None
    state: PendingState = PendingState.PENDING
    resource: Optional[TextureResource] = None

    @property
    def is_satisfied(self) -> bool:
        return self.resource is not None


class PendingResourceQueue:
    """Track texture requests until their import completes.

    Entries move ``PENDING -> READY_TO_APPLY -> APPLIED`` and are evicted once
    applied. At most one entry exists per (material, slot) pair. Every
    operation holds the queue lock, so registration, transitions and
    eviction never interleave.
    """

    def __init__(self) -> None:
        self._entries: List[ResolvedTextureAssignment] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _find(
        self, material: TargetMaterial, slot: str
    ) -> Optional[ResolvedTextureAssignment]:
        for entry in self._entries:
            if entry.material is material and entry.target_slot == slot:
                return entry
        return None

    def register(self, assignment: ResolvedTextureAssignment, force: bool = False) -> bool:
        """Add a pending request for the assignment's (material, slot).

        Args:
            assignment: Request to add; its state is reset to PENDING.
            force: Overwrite the path of an existing entry in place.

        Returns:
            bool: True if the request was added or an existing entry updated.
        """
        with self._lock:
            existing = self._find(assignment.material, assignment.target_slot)
            if existing is None:
                assignment.state = PendingState.PENDING
                self._entries.append(assignment)
                return True
            if force:
                existing.resolved_path = assignment.resolved_path
                return True
            return False

    def entry_for(
        self, material: TargetMaterial, slot: str
    ) -> Optional[ResolvedTextureAssignment]:
        with self._lock:
            return self._find(material, slot)

    def entries_for_path(self, path: str) -> List[ResolvedTextureAssignment]:
        with self._lock:
            return [
                entry
                for entry in self._entries
                if paths_match(entry.resolved_path, path)
            ]

    def entries_for_material(
        self, material: TargetMaterial
    ) -> List[ResolvedTextureAssignment]:
        with self._lock:
            return [entry for entry in self._entries if entry.material is material]

    def snapshot(self) -> List[ResolvedTextureAssignment]:
        with self._lock:
            return list(self._entries)

    def complete(self, path: str) -> int:
        """Mark pending entries for ``path`` ready to apply.

        Args:
            path: Project path whose import finished.

        Returns:
            int: Number of entries that transitioned.
        """
        transitioned = 0
        with self._lock:
            for entry in self._entries:
                if entry.state is not PendingState.PENDING:
                    continue
                if paths_match(entry.resolved_path, path):
                    entry.state = PendingState.READY_TO_APPLY
                    transitioned += 1
        if transitioned:
            logger.debug("%d pending texture(s) ready for %s", transitioned, path)
        return transitioned

    def apply_ready(self, store: AssetStore) -> List[ResolvedTextureAssignment]:
        """Assign every ready texture to its material and evict it.

        A resource that is still unavailable is marked applied anyway so
        the queue never retries indefinitely.

        Returns:
            List[ResolvedTextureAssignment]: Entries processed by this sweep.
        """
        with self._lock:
            ready = [
                entry
                for entry in self._entries
                if entry.state is PendingState.READY_TO_APPLY
            ]
            for entry in ready:
                texture = store.find_asset(entry.resolved_path, AssetKind.TEXTURE)
                if texture is not None:
                    entry.resource = texture
                    entry.material.set_texture(entry.target_slot, texture)
                    apply_slot_keywords(entry.material, entry.target_slot)
                    logger.debug(
                        "Applied %s to %s.%s",
                        entry.resolved_path,
                        entry.material.name,
                        entry.target_slot,
                    )
                else:
                    logger.warning(
                        "Imported texture %s is unavailable; leaving %s.%s unset.",
                        entry.resolved_path,
                        entry.material.name,
                        entry.target_slot,
                    )
                entry.state = PendingState.APPLIED
            self._entries = [
                entry
                for entry in self._entries
                if entry.state is not PendingState.APPLIED
            ]

        if ready:
            store.refresh()
        return ready

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
