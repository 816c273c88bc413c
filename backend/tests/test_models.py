"""
Tests for database models.
"""

import pytest


class TestSearchLogModel:
    """Test the SearchLog model."""

    def test_create_search_log(self, db_session):
        """Test creating a search log entry."""
        from api.database import SearchLog

        entry = SearchLog(
            query="Dune",
            book_url="https://www.amazon.com/dp/0441172717",
            store_type="amazon"
        )
        db_session.add(entry)
        db_session.commit()

        assert entry.id is not None
        assert entry.created_at is not None

    def test_to_dict(self, db_session):
        """Test the JSON shape of a search log entry."""
        from api.database import record_search

        entry = record_search(db_session, "Dune", "https://www.amazon.com/dp/1", "amazon")
        data = entry.to_dict()

        assert data["query"] == "Dune"
        assert data["bookUrl"] == "https://www.amazon.com/dp/1"
        assert data["storeType"] == "amazon"
        assert data["timestamp"] is not None

    def test_record_search_trims_old_entries(self, db_session):
        """Test that only the newest entries are kept."""
        from api.database import SearchLog, record_search, get_recent_searches

        for i in range(5):
            record_search(db_session, f"Book {i}", f"https://www.amazon.com/dp/{i}", "amazon", keep=3)

        assert db_session.query(SearchLog).count() == 3
        recent = get_recent_searches(db_session)
        assert [e.query for e in recent] == ["Book 4", "Book 3", "Book 2"]

    def test_get_recent_searches_limit(self, db_session):
        from api.database import record_search, get_recent_searches

        for i in range(4):
            record_search(db_session, f"Book {i}", f"https://www.amazon.com/dp/{i}", "amazon")

        assert len(get_recent_searches(db_session, limit=2)) == 2


class TestSearchErrorModel:
    """Test the SearchError model."""

    def test_record_error(self, db_session):
        """Test recording a search failure."""
        from api.database import record_error, get_recent_errors

        record_error(db_session, "Dune", "Failed to load https://www.google.com/search?q=Dune: timeout")

        errors = get_recent_errors(db_session)
        assert len(errors) == 1
        assert errors[0].to_dict()["error"].startswith("Failed to load")

    def test_record_error_trims_old_entries(self, db_session):
        from api.database import SearchError, record_error

        for i in range(25):
            record_error(db_session, f"Book {i}", "boom")

        assert db_session.query(SearchError).count() == 20
