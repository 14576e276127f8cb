import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from studyplan import create_app
from studyplan.config import TestingConfig
from studyplan.extensions import db
from studyplan.models import BusySlot, Profile, Task, TaskFeedback

"""
Shared fixtures for the scheduler and API tests.
"""

# 2024-01-01 is a Monday
MONDAY = datetime(2024, 1, 1)
USER_ID = TestingConfig.DEFAULT_USER_ID


def at(day_offset, hour, minute=0):
    """Naive datetime ``day_offset`` days after Monday 2024-01-01."""
    return MONDAY + timedelta(days=day_offset, hours=hour, minutes=minute)


@pytest.fixture
def app():
    """Create and configure a Flask app for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        # Clean up after tests
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def test_db(app):
    """Set up the database for testing and clean it after tests."""
    with app.app_context():
        TaskFeedback.query.delete()
        Task.query.delete()
        BusySlot.query.delete()
        Profile.query.delete()
        db.session.commit()

        yield db

        db.session.rollback()
        TaskFeedback.query.delete()
        Task.query.delete()
        BusySlot.query.delete()
        Profile.query.delete()
        db.session.commit()


@pytest.fixture
def create_task_factory(test_db):
    """Factory to create tasks with different configurations"""

    def _create_task(
        title="Task",
        deadline=None,
        status="pending",
        category="assignment",
        priority="medium",
        user_id=USER_ID,
        **kwargs,
    ):
        task = Task(
            title=title,
            deadline=deadline or at(7, 12),
            status=status,
            category=category,
            priority=priority,
            user_id=user_id,
            **kwargs,
        )
        test_db.session.add(task)
        test_db.session.commit()
        return task

    return _create_task


@pytest.fixture
def create_busy_slot_factory(test_db):
    """Factory to create busy slots"""

    def _create_slot(day_of_week, start_hour, end_hour, title="Class", user_id=USER_ID):
        slot = BusySlot(
            user_id=user_id,
            day_of_week=day_of_week,
            start_hour=start_hour,
            end_hour=end_hour,
            title=title,
        )
        test_db.session.add(slot)
        test_db.session.commit()
        return slot

    return _create_slot


@pytest.fixture
def create_profile_factory(test_db):
    """Factory to create a profile"""

    def _create_profile(
        chronotype="balanced",
        preferred_session_mins=60,
        timezone=None,
        user_id=USER_ID,
    ):
        profile = Profile(
            user_id=user_id,
            chronotype=chronotype,
            preferred_session_mins=preferred_session_mins,
            timezone=timezone,
        )
        test_db.session.add(profile)
        test_db.session.commit()
        return profile

    return _create_profile
