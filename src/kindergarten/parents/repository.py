from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Parent, ParentChild


class ParentRepository(Protocol):
    def create_profile(self, *, user_id: int, name: str, relationship: str) -> int:
        raise NotImplementedError

    def get_profile(self, user_id: int) -> Optional[Parent]:
        raise NotImplementedError

    def list_children(self, user_id: int) -> Sequence[ParentChild]:
        raise NotImplementedError

    def link_exists(self, user_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def add_link(self, *, user_id: int, name: str, student_id: int, relationship: str) -> int:
        raise NotImplementedError

    def remove_link(self, user_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[Parent]:
        raise NotImplementedError

    def update_contact(self, *, user_id: int, phone: Optional[str], email: Optional[str]) -> bool:
        raise NotImplementedError
