"""
Tests for the event tracking system.
"""

import dataclasses
import threading
from unittest.mock import Mock

import pytest
import requests

from tracking_core.event_tracking import (
    ActivityCategory,
    ActivityType,
    Event,
    EventDispatcher,
    EventKind,
    EventPayload,
    EventTracker,
    IngestionClient,
)
from tracking_core.event_tracking.factory import create_event_tracking_module
from tracking_core.event_tracking.models import freeze_details
from tracking_core.session import SessionManager, SessionState


class RecordingDispatcher:
    """Synchronous stand-in for EventDispatcher."""

    def __init__(self):
        self.events = []

    def dispatch(self, event):
        self.events.append(event)


class FakeMonotonic:
    def __init__(self):
        self.value = 100.0

    def __call__(self):
        return self.value


@pytest.fixture
def session_manager():
    return SessionManager()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def monotonic():
    return FakeMonotonic()


@pytest.fixture
def tracker(session_manager, dispatcher, monotonic):
    return EventTracker(session_manager, dispatcher, monotonic=monotonic)


def _page_views(dispatcher):
    return [e for e in dispatcher.events if e.kind is EventKind.PAGE_VIEW]


class TestEventTypes:
    """Test event type validation."""

    def test_event_kinds(self):
        """The three event kinds are the only valid ones."""
        assert EventKind.get_allowed_types() == {"page_view", "interaction", "custom_activity"}
        assert EventKind.is_valid("page_view")
        assert not EventKind.is_valid("login")
        assert not EventKind.is_valid("")

    def test_activity_vocabularies(self):
        """Predefined activity types and categories."""
        assert ActivityType.is_valid("rsvp_submit")
        assert ActivityCategory.is_valid("engagement")
        assert "navigation" in ActivityCategory.get_allowed_types()


class TestPageViewTracking:
    """Test page view deduplication."""

    def test_repeated_path_tracked_once(self, tracker, dispatcher):
        """/home -> /home dispatches one page view."""
        assert tracker.track_page_view("/home", "Home")
        assert not tracker.track_page_view("/home", "Home")
        assert len(_page_views(dispatcher)) == 1

    def test_distinct_then_repeated(self, tracker, dispatcher):
        """/home -> /about -> /about dispatches two page views."""
        tracker.track_page_view("/home")
        tracker.track_page_view("/about")
        tracker.track_page_view("/about")
        assert [e.value for e in _page_views(dispatcher)] == ["/home", "/about"]

    def test_distinct_consecutive_paths(self, tracker, dispatcher):
        """N distinct consecutive paths dispatch N page views."""
        paths = ["/a", "/b", "/a", "/c", "/a?tab=1", "/a"]
        for path in paths:
            tracker.track_page_view(path)
        assert [e.value for e in _page_views(dispatcher)] == paths

    def test_runs_of_identical_paths(self, tracker, dispatcher):
        """Each run of identical paths counts once."""
        for path in ["/x"] * 5 + ["/y"] * 3 + ["/x"] * 2:
            tracker.track_page_view(path)
        assert [e.value for e in _page_views(dispatcher)] == ["/x", "/y", "/x"]

    def test_last_path_updated_before_dispatch(self, session_manager):
        """The remembered path is set before the event is handed off."""
        seen = []

        class Probe:
            def dispatch(self, event):
                seen.append(tracker.last_path)

        tracker = EventTracker(session_manager, Probe())
        tracker.track_page_view("/gallery")
        assert seen == ["/gallery"]

    def test_page_view_details(self, tracker, dispatcher, monotonic, session_manager):
        """Page views carry path, title and time spent on the previous page."""
        tracker.track_page_view("/home", "Home")
        monotonic.value += 42.7
        tracker.track_page_view("/rsvp", "RSVP")

        first, second = _page_views(dispatcher)
        assert first.details["path"] == "/home"
        assert first.details["title"] == "Home"
        assert "previous_path" not in first.details
        assert second.details["previous_path"] == "/home"
        assert second.details["time_on_previous_page_seconds"] == 42
        assert second.category == "navigation"
        assert second.action_type == "page_view"
        assert session_manager.snapshot()["pages_viewed"] == 2

    def test_missing_title(self, tracker, dispatcher):
        tracker.track_page_view("/about")
        assert dispatcher.events[0].details["title"] == "Untitled Page"

    def test_reset_page_path(self, tracker, dispatcher):
        """After a reset the same path counts again."""
        tracker.track_page_view("/home")
        tracker.reset_page_path()
        tracker.track_page_view("/home")
        assert len(_page_views(dispatcher)) == 2


class TestEventRecording:
    """Test custom events and interactions."""

    def test_track_event(self, tracker, dispatcher, session_manager):
        """Custom events carry the current session id."""
        assert tracker.track_event("rsvp_submit", "engagement", {"num_guests": 2})

        event = dispatcher.events[0]
        assert event.kind is EventKind.CUSTOM_ACTIVITY
        assert event.session_id == session_manager.session_id
        assert event.action_type == "rsvp_submit"
        assert event.category == "engagement"
        assert event.details == {"num_guests": 2}
        assert session_manager.snapshot()["actions_taken"] == 1

    def test_track_activity_default_category(self, tracker, dispatcher):
        tracker.track_activity("hunt_completed", details={"total_points": 30})
        assert dispatcher.events[0].category == "engagement"

    def test_track_interaction(self, tracker, dispatcher):
        """Interactions carry content id and value."""
        assert tracker.track_interaction("photo", 17, "favorite", "add")

        event = dispatcher.events[0]
        assert event.kind is EventKind.INTERACTION
        assert event.category == "photo"
        assert event.interaction_type == "favorite"
        assert event.details == {"content_id": "17"}
        assert event.value == "add"

    def test_first_call_creates_session(self, tracker, session_manager):
        """Tracking lazily creates the session."""
        assert session_manager.current is None
        tracker.track_event("photo_like", "interaction")
        assert session_manager.is_active

    def test_session_id_captured_by_value(self, tracker, dispatcher, session_manager):
        """Events keep the id of the session active when they were created."""
        tracker.track_event("a", "engagement")
        session_manager.clear_session()
        tracker.track_event("b", "engagement")

        first, second = dispatcher.events
        assert first.session_id != second.session_id
        assert session_manager.session_id == second.session_id
        assert session_manager.current.state is SessionState.ACTIVE

    def test_events_keep_call_order(self, tracker, dispatcher):
        for i in range(10):
            tracker.track_event(f"action_{i}", "engagement")
        assert [e.action_type for e in dispatcher.events] == [f"action_{i}" for i in range(10)]

    def test_disabled_tracker_is_silent(self, session_manager, dispatcher):
        """A disabled tracker records nothing and creates no session."""
        tracker = EventTracker(session_manager, dispatcher, enabled=False)
        assert not tracker.track_page_view("/home")
        assert not tracker.track_event("a", "b")
        assert not tracker.track_interaction("photo", "1", "view")
        assert dispatcher.events == []
        assert session_manager.current is None

    def test_dispatch_failure_never_raises(self, session_manager):
        """A raising dispatcher turns into a False return."""
        broken = Mock()
        broken.dispatch.side_effect = RuntimeError("queue gone")
        tracker = EventTracker(session_manager, broken)

        assert not tracker.track_event("a", "b")
        assert not tracker.track_interaction("photo", "1", "view")
        assert not tracker.track_page_view("/home")

    def test_session_failure_never_raises(self, dispatcher):
        broken = Mock()
        broken.touch_activity.side_effect = RuntimeError("broken")
        tracker = EventTracker(broken, dispatcher)
        assert not tracker.track_event("a", "b")
        assert dispatcher.events == []


class TestEventModels:
    """Test event data models."""

    def test_event_is_immutable(self):
        """Events cannot be changed after creation."""
        event = Event(
            session_id="s1",
            kind=EventKind.CUSTOM_ACTIVITY,
            category="engagement",
            timestamp="2025-01-01T00:00:00+00:00",
            action_type="rsvp_submit",
            details=freeze_details({"k": "v"})
        )
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.session_id = "s2"
        with pytest.raises(TypeError):
            event.details["k"] = "other"

    def test_freeze_details_coerces_non_scalars(self):
        source = {"count": 3, "ratio": 0.5, "flag": True, "none": None, "tags": ["a", "b"]}
        frozen = freeze_details(source)
        assert frozen["tags"] == "['a', 'b']"
        assert frozen["count"] == 3
        source["count"] = 99
        assert frozen["count"] == 3

    def test_wire_format(self):
        """Interactions send interaction_type, other kinds send action_type."""
        interaction = Event(
            session_id="s1",
            kind=EventKind.INTERACTION,
            category="photo",
            timestamp="t",
            interaction_type="view",
            details=freeze_details({"content_id": "9"})
        )
        data = interaction.to_dict()
        assert data == {
            "session_id": "s1",
            "kind": "interaction",
            "category": "photo",
            "interaction_type": "view",
            "details": {"content_id": "9"},
            "value": None,
            "timestamp": "t",
        }

        activity = Event(session_id="s1", kind=EventKind.PAGE_VIEW, category="navigation",
                         timestamp="t", action_type="page_view", value="/home")
        assert "interaction_type" not in activity.to_dict()
        assert Event.from_dict(activity.to_dict()) == activity

    def test_event_payload_validation(self):
        """EventPayload accepts well-formed events only."""
        valid = EventPayload(session_id="s1", kind="custom_activity", category="engagement",
                             timestamp="t", action_type="rsvp_submit")
        assert valid.validate()

        assert not EventPayload(session_id="", kind="custom_activity", category="c",
                                timestamp="t", action_type="a").validate()
        assert not EventPayload(session_id="s1", kind="login", category="c",
                                timestamp="t", action_type="a").validate()
        assert not EventPayload(session_id="s1", kind="interaction", category="photo",
                                timestamp="t", action_type="view").validate()
        assert not EventPayload(session_id="s1", kind="custom_activity", category="c",
                                timestamp="t", action_type="a", value=3).validate()


class TestEventDispatcher:
    """Test background delivery."""

    def test_preserves_submission_order(self):
        """One worker delivers events in the order they were dispatched."""
        delivered = []
        dispatcher = EventDispatcher(lambda event: delivered.append(event.action_type))
        for i in range(50):
            dispatcher.dispatch(Event(session_id="s", kind=EventKind.CUSTOM_ACTIVITY,
                                      category="c", timestamp="t", action_type=str(i)))
        dispatcher.shutdown(wait=True)
        assert delivered == [str(i) for i in range(50)]

    def test_does_not_block_caller(self):
        """dispatch returns while the send is still running."""
        release = threading.Event()
        dispatcher = EventDispatcher(lambda event: release.wait(5))
        future = dispatcher.dispatch(Event(session_id="s", kind=EventKind.CUSTOM_ACTIVITY,
                                           category="c", timestamp="t", action_type="a"))
        assert not future.done()
        release.set()
        dispatcher.shutdown(wait=True)
        assert future.result() is True

    def test_failures_are_dropped(self):
        """A failing send is swallowed and later events still go out."""
        delivered = []

        def send(event):
            if event.action_type == "bad":
                raise requests.ConnectionError("down")
            delivered.append(event.action_type)

        dispatcher = EventDispatcher(send)
        for name in ["bad", "good"]:
            dispatcher.dispatch(Event(session_id="s", kind=EventKind.CUSTOM_ACTIVITY,
                                      category="c", timestamp="t", action_type=name))
        dispatcher.shutdown(wait=True)
        assert delivered == ["good"]

    def test_dispatch_after_shutdown_is_noop(self):
        dispatcher = EventDispatcher(Mock())
        dispatcher.shutdown()
        assert dispatcher.dispatch(Mock()) is None
        assert dispatcher.submit(Mock()) is None
        assert dispatcher.is_closed


class TestIngestionClient:
    """Test the ingestion HTTP client."""

    def test_send_event_posts_json(self):
        session = Mock()
        client = IngestionClient("http://ingest.test/api/", timeout=2.5, session=session)
        event = Event(session_id="s1", kind=EventKind.PAGE_VIEW, category="navigation",
                      timestamp="t", action_type="page_view", value="/home")

        client.send_event(event)

        session.post.assert_called_once_with(
            "http://ingest.test/api/events", json=event.to_dict(), timeout=2.5
        )
        session.post.return_value.raise_for_status.assert_called_once()

    def test_send_session_includes_transition(self):
        session = Mock()
        client = IngestionClient("http://ingest.test", session=session)
        client.send_session("cleared", {"id": "s1", "state": "cleared"})

        url = session.post.call_args.args[0]
        body = session.post.call_args.kwargs["json"]
        assert url == "http://ingest.test/sessions"
        assert body == {"id": "s1", "state": "cleared", "transition": "cleared"}

    def test_http_errors_propagate_to_dispatcher(self):
        session = Mock()
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        client = IngestionClient("http://ingest.test", session=session)
        with pytest.raises(requests.HTTPError):
            client.send_session("started", {"id": "s1"})


class TestEventTrackingFactory:
    """Test the module factory."""

    def test_without_ingestion_url_tracking_is_disabled(self):
        module = create_event_tracking_module(SessionManager(), ingestion_url="")
        assert module["client"] is None
        assert not module["service"].enabled
        module["dispatcher"].shutdown()

    def test_end_to_end_delivery(self):
        """Deduplicated page views reach the backend once each."""
        http_session = Mock()
        module = create_event_tracking_module(
            SessionManager(),
            ingestion_url="http://ingest.test",
            http_session=http_session
        )
        tracker = module["service"]
        tracker.track_page_view("/home")
        tracker.track_page_view("/home")
        tracker.track_page_view("/about")
        module["dispatcher"].shutdown(wait=True)

        bodies = [c.kwargs["json"] for c in http_session.post.call_args_list]
        assert [b["value"] for b in bodies] == ["/home", "/about"]
        assert all(b["kind"] == "page_view" for b in bodies)
