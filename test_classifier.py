"""
Tests for the `Type:` tag classifier.
"""
from conftest import make_event
from bot.events import classify_text, get_event_type


def test_extracts_lowercased_token():
    assert classify_text("Details...\nType: MGE\nmore") == "mge"
    assert classify_text("type:goldhead") == "goldhead"


def test_hyphenated_and_underscored_tokens():
    assert classify_text("Type: registration-window") == "registration-window"
    assert classify_text("Type: ark_registration") == "ark_registration"


def test_missing_or_malformed_text_yields_none():
    assert classify_text("") is None
    assert classify_text(None) is None
    assert classify_text(42) is None
    assert classify_text("Kind: mge") is None
    assert classify_text("Type:   ") is None


def test_description_wins_over_summary_and_location():
    event = make_event(description="Type: mge", summary="Type: goldhead", location="Type: other")
    assert get_event_type(event) == "mge"


def test_falls_back_to_summary_then_location():
    assert get_event_type(make_event(description="", summary="Type: goldhead")) == "goldhead"
    assert get_event_type(make_event(description="no tag", summary="none", location="Type: mge")) == "mge"


def test_untagged_event_has_no_type():
    assert get_event_type(make_event(description="just a meeting", summary="Sync")) is None


def test_objects_without_text_fields_are_handled():
    class Bare:
        pass
    assert get_event_type(Bare()) is None
