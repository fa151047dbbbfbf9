"""SQLModel table models. Import here so metadata is populated."""

from investment_tracker.models.investment import Investment  # noqa: F401
