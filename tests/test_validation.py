from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.modules.contact import InboundSubmission
from app.modules.contact.validation import (
    build_quick_submission,
    build_submission,
    is_quick_spam,
    is_spam,
    is_valid_email,
    is_valid_phone,
    sanitize_input,
    validate_quick_submission,
    validate_submission,
)


def make_submission(fields, **kwargs):
    inbound = InboundSubmission(method="POST", client_ip="203.0.113.7", fields=fields, **kwargs)
    return build_submission(inbound, now=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc))


def test_sanitize_trims_strips_tags_and_escapes():
    assert sanitize_input("  <b>Ada</b> & Co  ") == "Ada &amp; Co"
    assert sanitize_input('say "hi"') == "say &quot;hi&quot;"
    assert sanitize_input("<script>alert(1)</script>") == "alert(1)"
    assert sanitize_input(None) == ""


@pytest.mark.parametrize(
    "value,expected",
    [
        ("ada@example.com", True),
        ("ada.lovelace+engines@mail.example.co.uk", True),
        ("ada@", False),
        ("ada@example", False),
        ("not an email", False),
        ("", False),
    ],
)
def test_email_format(value, expected):
    assert is_valid_email(value) is expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("+44 (20) 7946-0958", True),
        ("020 7946 0958", True),
        ("12345", False),
        ("call me maybe", False),
    ],
)
def test_phone_format(value, expected):
    assert is_valid_phone(value) is expected


def test_build_submission_maps_form_fields(ada):
    submission = make_submission(ada, user_agent="pytest")
    assert submission.first_name == "Ada"
    assert submission.full_name == "Ada Lovelace"
    assert submission.consent is True
    assert submission.newsletter is False
    assert submission.timestamp == "2026-10-18 09:30:00"
    assert submission.client_ip == "203.0.113.7"
    assert submission.user_agent == "pytest"


def test_consent_must_be_affirmative(ada):
    ada["consent"] = "false"
    assert "Consent is required" in validate_submission(make_submission(ada))
    del ada["consent"]
    assert "Consent is required" in validate_submission(make_submission(ada))


def test_valid_submission_has_no_errors(ada):
    assert validate_submission(make_submission(ada)) == []


def test_every_missing_field_is_reported():
    errors = validate_submission(make_submission({}))
    assert errors == [
        "First name is required",
        "Last name is required",
        "Valid email is required",
        "Company is required",
        "Country is required",
        "Purpose is required",
        "Message is required",
        "Consent is required",
    ]


def test_optional_phone_is_checked_only_when_present(ada):
    ada["phone"] = "12ab"
    assert validate_submission(make_submission(ada)) == ["Invalid phone number format"]


def test_honeypot_marks_spam_even_when_valid(ada):
    ada["website"] = "http://spam.example"
    submission = make_submission(ada)
    assert validate_submission(submission) == []
    assert is_spam(submission)


@pytest.mark.parametrize(
    "message",
    [
        "Cheap VIAGRA for your team",
        "You can Make Money fast",
        "Click here to claim your prize",
        "Best mortgage rates",
    ],
)
def test_spam_phrases_are_case_insensitive(ada, message):
    ada["message"] = message
    assert is_spam(make_submission(ada))


def test_spam_phrases_match_whole_words_only(ada):
    ada["message"] = "We need help with our loaner laptop inventory system."
    assert not is_spam(make_submission(ada))


def test_spam_phrases_checked_in_company_name(ada):
    ada["company"] = "Casino Royale Ltd"
    assert is_spam(make_submission(ada))


def test_quick_form_requires_minimum_message_length():
    inbound = InboundSubmission(
        method="POST",
        client_ip="198.51.100.1",
        fields={"name": "Ada", "email": "ada@example.com", "message": "Hi there"},
    )
    submission = build_quick_submission(inbound)
    assert submission.subject == "General Inquiry"
    assert validate_quick_submission(submission, 10) == ["Message is too short"]


def test_quick_form_collects_all_errors():
    submission = build_quick_submission(InboundSubmission(method="POST", client_ip="x", fields={}))
    assert validate_quick_submission(submission, 10) == [
        "Name is required",
        "Valid email is required",
        "Message is required",
    ]


def test_quick_form_honeypot():
    inbound = InboundSubmission(
        method="POST",
        client_ip="198.51.100.1",
        fields={"name": "Bot", "email": "bot@example.com", "message": "Totally legit message", "website": "x"},
    )
    assert is_quick_spam(build_quick_submission(inbound))
