"""
Integration tests for contact qualification
"""
import pytest

from campaign_engine.exceptions import ContactCampaignMismatchError, InvalidTransitionError, NotFoundError


@pytest.fixture
def leased(lease_queue, import_phones, campaign, qualifications):
    """A contact of camp-1 already leased (status called)"""
    import_phones(campaign.id, "0611")
    return lease_queue.lease_next_contact(campaign.id).contact


class TestQualifyContact:

    def test_contact_becomes_qualified_with_one_history_record(self, recorder, editor, leased, qualifications):
        recorder.qualify_contact(leased.id, qualifications["positive"], leased.campaign_id, "agent-a")

        assert editor.get_contact(leased.id).status == "qualified"
        history = editor.get_contact_history(leased.id)
        assert len(history) == 1

        record = history[0]
        assert record.qualification_id == "q-sale"
        assert record.agent_id == "agent-a"
        assert record.campaign_id == leased.campaign_id
        assert record.source == "alice"
        assert record.destination == "0611"
        assert record.direction == "outbound"
        assert record.call_status == "answered"
        assert record.duration == record.billable_duration == 0
        assert record.start_time == record.end_time

    def test_requalification_appends_history(self, recorder, editor, leased, qualifications):
        recorder.qualify_contact(leased.id, qualifications["negative"], leased.campaign_id, "agent-a")
        recorder.qualify_contact(leased.id, qualifications["positive"], leased.campaign_id, "agent-b")

        history = editor.get_contact_history(leased.id)
        assert len(history) == 2
        assert editor.get_contact(leased.id).status == "qualified"
        assert {r.qualification_id for r in history} == {"q-sale", "q-refused"}

    def test_pending_contact_cannot_be_qualified(self, recorder, editor, import_phones, campaign, qualifications):
        contact = import_phones(campaign.id, "0611").accepted[0]

        with pytest.raises(InvalidTransitionError):
            recorder.qualify_contact(contact.id, qualifications["positive"], campaign.id, "agent-a")

        assert editor.get_contact(contact.id).status == "pending"
        assert editor.get_contact_history(contact.id) == []

    def test_unknown_contact(self, recorder, campaign, qualifications):
        with pytest.raises(NotFoundError) as excinfo:
            recorder.qualify_contact("missing", qualifications["positive"], campaign.id, "agent-a")
        assert excinfo.value.entity == "Contact"

    def test_campaign_must_own_the_contact(self, recorder, editor, campaign_store, leased, qualifications):
        other = campaign_store.save_campaign({"name": "Other"})

        with pytest.raises(ContactCampaignMismatchError):
            recorder.qualify_contact(leased.id, qualifications["positive"], other.id, "agent-a")

        assert editor.get_contact(leased.id).status == "called"
        assert editor.get_contact_history(leased.id) == []

    def test_unknown_agent_changes_nothing(self, recorder, editor, leased, qualifications):
        with pytest.raises(NotFoundError) as excinfo:
            recorder.qualify_contact(leased.id, qualifications["positive"], leased.campaign_id, "nobody")

        assert excinfo.value.entity == "Agent"
        assert editor.get_contact(leased.id).status == "called"
        assert editor.get_contact_history(leased.id) == []
