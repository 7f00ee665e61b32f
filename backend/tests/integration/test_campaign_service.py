"""
Integration tests for campaign persistence and agent assignments
"""
import pytest
from sqlalchemy.exc import IntegrityError

from campaign_engine.exceptions import NotFoundError


class TestSaveCampaign:
    """Insert and update with assignment replacement"""

    def test_insert_applies_defaults(self, campaign_store, agents):
        saved = campaign_store.save_campaign({"name": "Defaults"})

        assert saved.id
        assert saved.priority == 5
        assert saved.wrap_up_time == 15
        assert saved.dialing_mode == "PROGRESSIVE"
        assert saved.is_active is True
        assert saved.assigned_user_ids == []

    def test_caller_supplied_id_is_kept(self, campaign):
        assert campaign.id == "camp-1"
        assert campaign.assigned_user_ids == ["agent-a"]

    def test_update_replaces_assignment_set(self, campaign_store, campaign):
        campaign_store.save_campaign(
            {"name": campaign.name, "assignedUserIds": ["agent-b", "agent-c", "agent-b"]},
            existing_id=campaign.id,
        )

        stored = campaign_store.get_campaign(campaign.id)
        assert sorted(stored.assigned_user_ids) == ["agent-b", "agent-c"]

    def test_overlapping_update_keeps_shared_agent_once(self, campaign_store, campaign):
        campaign_store.save_campaign({"name": campaign.name, "assignedUserIds": ["agent-a", "agent-b"]},
                                     existing_id=campaign.id)

        campaign_store.save_campaign({"name": campaign.name, "assignedUserIds": ["agent-b", "agent-c"]},
                                     existing_id=campaign.id)

        assert campaign_store.get_campaign(campaign.id).assigned_user_ids == ["agent-b", "agent-c"]
        listed = {c.id: c for c in campaign_store.list_campaigns()}
        assert listed[campaign.id].assigned_user_ids == ["agent-b", "agent-c"]

    def test_update_with_empty_set_removes_all_assignments(self, campaign_store, campaign):
        campaign_store.save_campaign({"name": campaign.name, "assignedUserIds": []}, existing_id=campaign.id)

        assert campaign_store.get_campaign(campaign.id).assigned_user_ids == []

    def test_update_changes_fields(self, campaign_store, campaign):
        updated = campaign_store.save_campaign(
            {"name": "Renamed", "priority": 8, "wrapUpTime": 0, "isActive": False},
            existing_id=campaign.id,
        )

        assert (updated.name, updated.priority, updated.wrap_up_time, updated.is_active) == ("Renamed", 8, 0, False)

    def test_update_of_missing_campaign(self, campaign_store, agents):
        with pytest.raises(NotFoundError):
            campaign_store.save_campaign({"name": "Ghost"}, existing_id="missing")
        assert campaign_store.get_campaign("missing") is None

    def test_unknown_agent_rolls_back_the_whole_save(self, campaign_store, campaign):
        with pytest.raises(IntegrityError):
            campaign_store.save_campaign(
                {"name": "Renamed", "assignedUserIds": ["agent-b", "nobody"]},
                existing_id=campaign.id,
            )

        stored = campaign_store.get_campaign(campaign.id)
        assert stored.name == "Spring renewals"
        assert stored.assigned_user_ids == ["agent-a"]

    def test_rules_round_trip(self, campaign_store, agents):
        saved = campaign_store.save_campaign({
            "name": "Rules",
            "filterRules": [{"id": "f", "type": "exclude", "contactField": "segment", "operator": "equals",
                             "value": "vip"}],
            "quotaRules": [{"id": "q", "contactField": "postalCode", "operator": "starts_with", "value": "13",
                            "limit": 4}],
        })

        stored = campaign_store.get_campaign(saved.id)
        assert stored.filter_rules[0].value == "vip"
        assert stored.quota_rules[0].limit == 4
        assert stored.to_api()["quotaRules"][0]["contactField"] == "postalCode"


class TestReadAndDelete:

    def test_list_campaigns_by_name(self, campaign_store, campaign):
        campaign_store.save_campaign({"name": "Autumn push", "assignedUserIds": ["agent-b"]})

        campaigns = campaign_store.list_campaigns()

        assert [c.name for c in campaigns] == ["Autumn push", "Spring renewals"]
        assert [c.assigned_user_ids for c in campaigns] == [["agent-b"], ["agent-a"]]

    def test_get_missing_campaign(self, campaign_store, agents):
        assert campaign_store.get_campaign("missing") is None

    def test_delete_removes_contacts_and_assignments(self, campaign_store, import_phones, lease_queue, campaign):
        import_phones(campaign.id, "0611")

        assert campaign_store.delete_campaign(campaign.id) is True
        assert campaign_store.get_campaign(campaign.id) is None
        assert campaign_store.list_contacts(campaign.id) == []
        assert lease_queue.lease_next_contact_for_agent("agent-a").is_empty

    def test_delete_missing_campaign(self, campaign_store, agents):
        assert campaign_store.delete_campaign("missing") is False
