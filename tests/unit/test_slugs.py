"""Unit tests for slug helpers."""

import itertools

import pytest

from backend.app.db.slugs import display_slug, slug_candidates, slugify


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Intro to Python", "intro-to-python"),
        ("  Leading & trailing!  ", "leading-trailing"),
        ("Café Déjà Vu", "cafe-deja-vu"),
        ("already-a-slug", "already-a-slug"),
        ("", ""),
    ],
)
def test_slugify(value: str, expected: str) -> None:
    assert slugify(value) == expected


def test_candidates_for_environment_row() -> None:
    candidates = list(itertools.islice(slug_candidates("Onboarding", 7), 3))

    assert candidates == ["onboarding-7", "onboarding-7-1", "onboarding-7-2"]


def test_candidates_for_global_row() -> None:
    candidates = list(itertools.islice(slug_candidates("Onboarding", None), 2))

    assert candidates == ["onboarding", "onboarding-1"]


@pytest.mark.parametrize(
    ("slug", "environment_id", "expected"),
    [
        ("onboarding-7", 7, "onboarding"),
        ("onboarding-7-2", 7, "onboarding"),
        ("onboarding-7", 8, "onboarding-7"),
        ("onboarding-1", None, "onboarding-1"),
        (None, 7, ""),
    ],
)
def test_display_slug(slug: str | None, environment_id: int | None, expected: str) -> None:
    assert display_slug(slug, environment_id) == expected
