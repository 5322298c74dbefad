"""
Unit tests for outbound email models.
Tests recipient normalisation, request validation and MessageRecord creation.
"""

import pytest
from pydantic import ValidationError

from campaign_mailer.models.email import MessageRecord, SendRequest, SendResult


class TestSendRequest:
    """SendRequest normalises recipients and rejects bad input before any I/O."""

    def test_single_recipient_is_wrapped_in_list(self):
        request = SendRequest(to="mp@example.org", subject="S", text="T")
        assert request.to == ["mp@example.org"]

    def test_single_cc_and_bcc_are_wrapped_in_lists(self):
        request = SendRequest(
            to=["a@example.com"], cc="cc@example.com", bcc="bcc@example.com",
            subject="S", text="T",
        )
        assert request.cc == ["cc@example.com"]
        assert request.bcc == ["bcc@example.com"]

    def test_cc_and_bcc_default_to_none(self):
        request = SendRequest(to="a@example.com", subject="S", text="T")
        assert request.cc is None
        assert request.bcc is None

    def test_recipient_order_is_preserved(self):
        request = SendRequest(to=["z@example.com", "a@example.com"], subject="S", text="T")
        assert request.to == ["z@example.com", "a@example.com"]

    def test_accepts_wire_names_for_sender(self):
        request = SendRequest.model_validate({
            "to": "a@example.com",
            "subject": "S",
            "text": "T",
            "from": "campaign@example.org",
            "fromName": "Campaign",
        })
        assert request.from_email == "campaign@example.org"
        assert request.from_name == "Campaign"

    def test_empty_to_list_is_rejected(self):
        with pytest.raises(ValidationError):
            SendRequest(to=[], subject="S", text="T")

    def test_blank_recipient_is_rejected(self):
        with pytest.raises(ValidationError):
            SendRequest(to=["  "], subject="S", text="T")

    def test_empty_subject_is_rejected(self):
        with pytest.raises(ValidationError):
            SendRequest(to="a@example.com", subject="", text="T")

    def test_empty_text_is_rejected(self):
        with pytest.raises(ValidationError):
            SendRequest(to="a@example.com", subject="S", text="")

    @pytest.mark.parametrize("field", ["subject", "text"])
    def test_whitespace_only_content_is_rejected(self, field):
        fields = {"to": "a@example.com", "subject": "S", "text": "T", field: "   "}
        with pytest.raises(ValidationError):
            SendRequest(**fields)


class TestSendResult:

    def test_ok_carries_message_id(self):
        result = SendResult.ok("abc")
        assert result.success is True
        assert result.message_id == "abc"
        assert result.error is None

    def test_failure_carries_error(self):
        result = SendResult.failure("boom")
        assert result.success is False
        assert result.error == "boom"
        assert result.message_id is None

    def test_failure_with_empty_message_still_has_error(self):
        assert SendResult.failure("").error == "Unknown error"

    def test_serialises_with_camel_case_message_id(self):
        assert SendResult.ok("abc").model_dump(by_alias=True) == {
            "success": True,
            "messageId": "abc",
            "error": None,
        }


class TestMessageRecord:
    """MessageRecord.from_request resolves defaults and stamps id/createdAt."""

    def test_uses_default_sender_when_request_has_none(self):
        request = SendRequest(to="a@example.com", subject="S", text="T")
        record = MessageRecord.from_request(request, "noreply@example.com", "Pressure Campaign")
        assert record.from_email == "noreply@example.com"
        assert record.from_name == "Pressure Campaign"

    def test_request_sender_overrides_default(self):
        request = SendRequest(
            to="a@example.com", subject="S", text="T",
            from_email="me@example.org", from_name="Me",
        )
        record = MessageRecord.from_request(request, "noreply@example.com", "Pressure Campaign")
        assert record.from_email == "me@example.org"
        assert record.from_name == "Me"

    def test_ids_are_unique(self):
        request = SendRequest(to="a@example.com", subject="S", text="T")
        ids = {MessageRecord.from_request(request, "f@example.com", "F").id for _ in range(200)}
        assert len(ids) == 200

    def test_created_at_is_epoch_milliseconds(self):
        request = SendRequest(to="a@example.com", subject="S", text="T")
        record = MessageRecord.from_request(request, "f@example.com", "F")
        # Milliseconds since 1970 are 13 digits until the year 2286
        assert len(str(record.created_at)) == 13

    def test_json_dict_uses_wire_names_and_omits_unset_fields(self):
        request = SendRequest(to="a@example.com", subject="S", text="T")
        record = MessageRecord.from_request(request, "f@example.com", "F")

        data = record.to_json_dict()

        assert set(data) == {"id", "to", "subject", "text", "from", "fromName", "createdAt"}
        assert data["from"] == "f@example.com"
        assert data["fromName"] == "F"

    def test_json_dict_round_trips(self):
        request = SendRequest(
            to=["a@example.com"], cc=["c@example.com"], subject="S", text="T", html="<p>T</p>",
        )
        record = MessageRecord.from_request(request, "f@example.com", "F")

        assert MessageRecord.model_validate(record.to_json_dict()) == record

    def test_record_is_immutable(self):
        request = SendRequest(to="a@example.com", subject="S", text="T")
        record = MessageRecord.from_request(request, "f@example.com", "F")

        with pytest.raises(ValidationError):
            record.subject = "changed"
