from __future__ import annotations

from typing import Optional, Protocol


class DirectoryRepository(Protocol):
    """Read-only view over subject and teacher records owned by the school directory."""

    def subject_name(self, *, tenant_id: str, subject_id: str) -> Optional[str]:
        raise NotImplementedError

    def teacher_name(self, *, tenant_id: str, teacher_id: str) -> Optional[str]:
        raise NotImplementedError
