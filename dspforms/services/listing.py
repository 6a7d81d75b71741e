"""Search and category filtering for the public forms listing."""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar

from sqlmodel import Session, select

from dspforms.models import FormDefinition

ALL_CATEGORIES = "all"


class Listable(Protocol):
    title: str
    description: str | None
    category: str


T = TypeVar("T", bound=Listable)


def matches_search(form: Listable, search: str) -> bool:
    needle = search.lower()
    if needle in form.title.lower():
        return True
    return form.description is not None and needle in form.description.lower()


def matches_category(form: Listable, category: str) -> bool:
    return category == ALL_CATEGORIES or form.category == category


def filter_forms(forms: Iterable[T], search: str = "", category: str = ALL_CATEGORIES) -> list[T]:
    """Keep forms matching both the search text and the category, in input order."""
    return [f for f in forms if matches_search(f, search) and matches_category(f, category)]


def category_chips(forms: Iterable[Listable]) -> list[str]:
    """``all`` followed by each category present, in first-seen order."""
    chips = [ALL_CATEGORIES]
    for form in forms:
        if form.category not in chips:
            chips.append(form.category)
    return chips


def list_public_forms(session: Session) -> Sequence[FormDefinition]:
    """Public forms, newest first."""
    return session.exec(
        select(FormDefinition)
        .where(FormDefinition.is_public.is_(True))
        .order_by(FormDefinition.created_at.desc())
    ).all()


__all__ = [
    "ALL_CATEGORIES",
    "category_chips",
    "filter_forms",
    "list_public_forms",
    "matches_category",
    "matches_search",
]
