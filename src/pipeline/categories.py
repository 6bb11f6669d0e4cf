"""Category catalog: post-type mapping, lookup fallbacks and default seeding."""

import logging

from src.core.repository import ContentRepository
from src.core.schemas import Category, PostType

logger = logging.getLogger(__name__)

CATEGORY_SLUG_BY_POST_TYPE: dict[PostType, str] = {
    PostType.RECRUITMENT: "latest-jobs",
    PostType.RESULT: "result",
    PostType.ADMIT_CARD: "admit-card",
    PostType.SYLLABUS: "syllabus",
    PostType.ANSWER_KEY: "answer-key",
}

# (name, slug) in display order.
DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Latest Jobs", "latest-jobs"),
    ("Result", "result"),
    ("Admit Card", "admit-card"),
    ("Syllabus", "syllabus"),
    ("Answer Key", "answer-key"),
]


class CategoryCatalog:
    """Snapshot of the category table, loaded once per run.

    Lookup order for a slug hint: exact slug, then a case-insensitive name
    containing the hint (dashes read as spaces), then the first category.
    """

    def __init__(self, categories: list[Category]) -> None:
        self._categories = list(categories)

    @classmethod
    def load(cls, repo: ContentRepository) -> "CategoryCatalog":
        categories = repo.list_categories()
        if not categories:
            logger.warning("No categories found in the database")
        return cls(categories)

    def __len__(self) -> int:
        return len(self._categories)

    def resolve(self, slug_hint: str | None) -> Category | None:
        if not self._categories:
            return None
        if slug_hint:
            for category in self._categories:
                if category.slug == slug_hint:
                    return category
            name_fragment = slug_hint.replace("-", " ").lower()
            for category in self._categories:
                if name_fragment in category.name.lower():
                    return category
        return self._categories[0]

    def for_post_type(self, post_type: PostType) -> Category | None:
        return self.resolve(CATEGORY_SLUG_BY_POST_TYPE[post_type])


def resolve_category_by_name(repo: ContentRepository, name: str | None) -> Category | None:
    """Find a category by (partial) name, defaulting to Latest Jobs, then the first one."""
    for fragment in (name, "Latest Jobs"):
        if fragment and fragment.strip():
            matches = repo.find_categories_by_name(fragment.strip())
            if matches:
                return matches[0]
    categories = repo.list_categories()
    return categories[0] if categories else None


def seed_default_categories(repo: ContentRepository) -> int:
    """Insert the default catalog. Existing entries are left alone.

    Returns the number of categories created.
    """
    created = 0
    for order, (name, slug) in enumerate(DEFAULT_CATEGORIES):
        if repo.add_category(name, slug, display_order=order):
            created += 1
            logger.info("Created category %s (%s)", name, slug)
    return created
