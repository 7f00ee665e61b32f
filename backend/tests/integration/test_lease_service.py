"""
Integration tests for the contact lease queue
"""
import pytest

from campaign_engine.exceptions import NotFoundError, OperationNotPermittedError
from campaign_engine.services import ContactLeaseQueue, OperationKind


class DenyLeases:
    def is_operation_permitted(self, kind):
        return kind != OperationKind.LEASE_CONTACT


class TestLeaseNextContact:
    """Leasing by campaign id"""

    def test_leased_contact_moves_to_called(self, lease_queue, import_phones, campaign_store, campaign):
        import_phones(campaign.id, "0611")

        result = lease_queue.lease_next_contact(campaign.id)

        assert result.contact.phone_number == "0611"
        assert result.contact.status == "called"
        assert campaign_store.list_contacts(campaign.id, status="called")[0].id == result.contact.id

    def test_result_carries_campaign_snapshot(self, lease_queue, import_phones, campaign):
        import_phones(campaign.id, "0611")

        result = lease_queue.lease_next_contact(campaign.id)

        assert result.campaign.id == campaign.id
        assert result.campaign.assigned_user_ids == ["agent-a"]
        api = result.to_api()
        assert api["campaign"]["assignedUserIds"] == ["agent-a"]
        assert "contacts" not in api["campaign"]

    def test_fifo_order_across_imports(self, lease_queue, import_phones, campaign):
        import_phones(campaign.id, "0611", "0622")
        import_phones(campaign.id, "0633")

        phones = [lease_queue.lease_next_contact(campaign.id).contact.phone_number for _ in range(3)]

        assert phones == ["0611", "0622", "0633"]

    def test_successive_leases_never_repeat(self, lease_queue, import_phones, campaign):
        import_phones(campaign.id, *[f"06{i:02d}" for i in range(10)])

        ids = [lease_queue.lease_next_contact(campaign.id).contact.id for _ in range(10)]

        assert len(set(ids)) == 10

    def test_exhausted_queue_returns_empty_then_recovers(self, lease_queue, import_phones, campaign):
        import_phones(campaign.id, "0611")
        lease_queue.lease_next_contact(campaign.id)

        miss = lease_queue.lease_next_contact(campaign.id)
        assert miss.is_empty
        assert miss.campaign is None

        import_phones(campaign.id, "0622")
        assert lease_queue.lease_next_contact(campaign.id).contact.phone_number == "0622"

    def test_unknown_campaign(self, lease_queue, agents):
        with pytest.raises(NotFoundError):
            lease_queue.lease_next_contact("missing")

    def test_denied_lease(self, store, import_phones, campaign_store, campaign):
        import_phones(campaign.id, "0611")

        with pytest.raises(OperationNotPermittedError):
            ContactLeaseQueue(store, capabilities=DenyLeases()).lease_next_contact(campaign.id)
        assert campaign_store.list_contacts(campaign.id)[0].status == "pending"


class TestLeaseForAgent:
    """Leasing across the campaigns assigned to an agent"""

    def test_highest_priority_campaign_first(self, lease_queue, import_phones, campaign_store, agents):
        low = campaign_store.save_campaign({"name": "Low", "priority": 2, "assignedUserIds": ["agent-b"]})
        high = campaign_store.save_campaign({"name": "High", "priority": 9, "assignedUserIds": ["agent-b"]})
        import_phones(low.id, "0100")
        import_phones(high.id, "0900")

        first = lease_queue.lease_next_contact_for_agent("agent-b")
        second = lease_queue.lease_next_contact_for_agent("agent-b")

        assert (first.campaign.id, first.contact.phone_number) == (high.id, "0900")
        assert (second.campaign.id, second.contact.phone_number) == (low.id, "0100")
        assert lease_queue.lease_next_contact_for_agent("agent-b").is_empty

    def test_inactive_and_unassigned_campaigns_are_skipped(self, lease_queue, import_phones, campaign_store, agents):
        paused = campaign_store.save_campaign({"name": "Paused", "isActive": False, "assignedUserIds": ["agent-b"]})
        other = campaign_store.save_campaign({"name": "Other", "assignedUserIds": ["agent-c"]})
        import_phones(paused.id, "0611")
        import_phones(other.id, "0622")

        assert lease_queue.lease_next_contact_for_agent("agent-b").is_empty

    def test_agent_without_campaigns(self, lease_queue, agents):
        assert lease_queue.lease_next_contact_for_agent("agent-c").is_empty

    def test_filter_rules_skip_contacts(self, lease_queue, importer, campaign_store, agents):
        campaign = campaign_store.save_campaign({
            "name": "Paris only",
            "assignedUserIds": ["agent-b"],
            "filterRules": [
                {"id": "f1", "type": "include", "contactField": "postalCode", "operator": "starts_with", "value": "75"},
                {"id": "f2", "type": "exclude", "contactField": "segment", "operator": "equals", "value": "churned"},
            ],
        })
        importer.import_contacts(campaign.id, [
            {"phoneNumber": "0100", "postalCode": "69001"},
            {"phoneNumber": "0200", "postalCode": "75002", "customFields": {"segment": "churned"}},
            {"phoneNumber": "0300", "postalCode": "75003"},
        ])

        result = lease_queue.lease_next_contact_for_agent("agent-b")

        assert result.contact.phone_number == "0300"
        assert lease_queue.lease_next_contact_for_agent("agent-b").is_empty

    def test_full_quota_segment_is_held_back(self, lease_queue, importer, recorder, campaign_store,
                                            agents, qualifications):
        campaign = campaign_store.save_campaign({
            "name": "Quota",
            "qualificationGroupId": "group-sales",
            "assignedUserIds": ["agent-b"],
            "quotaRules": [
                {"id": "paris", "contactField": "postalCode", "operator": "starts_with", "value": "75", "limit": 1},
            ],
        })
        importer.import_contacts(campaign.id, [
            {"phoneNumber": "0100", "postalCode": "75001"},
            {"phoneNumber": "0200", "postalCode": "75001"},
            {"phoneNumber": "0300", "postalCode": "69001"},
        ])

        first = lease_queue.lease_next_contact_for_agent("agent-b")
        assert first.contact.phone_number == "0100"
        recorder.qualify_contact(first.contact.id, qualifications["positive"], campaign.id, "agent-b")

        second = lease_queue.lease_next_contact_for_agent("agent-b")
        assert second.contact.phone_number == "0300"
        assert lease_queue.lease_next_contact_for_agent("agent-b").is_empty

    def test_negative_qualifications_do_not_count_toward_quota(self, lease_queue, import_phones, recorder,
                                                              campaign_store, agents, qualifications):
        campaign = campaign_store.save_campaign({
            "name": "Quota",
            "qualificationGroupId": "group-sales",
            "assignedUserIds": ["agent-b"],
            "quotaRules": [
                {"id": "all", "contactField": "phoneNumber", "operator": "is_not_empty", "limit": 1},
            ],
        })
        import_phones(campaign.id, "0100", "0200")

        first = lease_queue.lease_next_contact_for_agent("agent-b")
        recorder.qualify_contact(first.contact.id, qualifications["negative"], campaign.id, "agent-b")

        assert lease_queue.lease_next_contact_for_agent("agent-b").contact.phone_number == "0200"
