"""
Shared fixtures: an in-memory SQLite row store with agents and qualifications.
"""
import pytest

from campaign_engine.config import Settings
from campaign_engine.database import RowStore, init_db
from campaign_engine.models import Qualification, QualificationType, User
from campaign_engine.services import (
    CampaignStore,
    ContactEditor,
    ContactImporter,
    ContactLeaseQueue,
    QualificationRecorder,
)

AGENT_IDS = ("agent-a", "agent-b", "agent-c")
QUALIFICATION_GROUP_ID = "group-sales"


@pytest.fixture
def settings():
    """Settings isolated from any local .env file"""
    return Settings(_env_file=None, database_url="sqlite://", debug=False)


@pytest.fixture
def store(settings):
    """Fresh in-memory database per test"""
    row_store = RowStore.from_settings(settings)
    init_db(row_store)
    yield row_store
    row_store.dispose()


@pytest.fixture
def agents(store):
    """Three agent accounts: agent-a (alice), agent-b (bob), agent-c (carol)"""
    logins = dict(zip(AGENT_IDS, ("alice", "bob", "carol")))
    with store.transaction("seed_agents") as db:
        for agent_id, login in logins.items():
            db.add(User(id=agent_id, login_id=login, first_name=login.title()))
    return logins


@pytest.fixture
def qualifications(store):
    """One positive and one negative qualification in the sales group"""
    with store.transaction("seed_qualifications") as db:
        db.add(Qualification(id="q-sale", group_id=QUALIFICATION_GROUP_ID, code="SALE",
                             type=QualificationType.POSITIVE.value))
        db.add(Qualification(id="q-refused", group_id=QUALIFICATION_GROUP_ID, code="REFUSED",
                             type=QualificationType.NEGATIVE.value))
    return {"positive": "q-sale", "negative": "q-refused"}


@pytest.fixture
def campaign_store(store):
    return CampaignStore(store)


@pytest.fixture
def importer(store):
    return ContactImporter(store)


@pytest.fixture
def import_phones(importer):
    """Import one bare contact per phone number, in order"""
    def _import(campaign_id, *phones):
        return importer.import_contacts(campaign_id, [{"phoneNumber": phone} for phone in phones])
    return _import


@pytest.fixture
def lease_queue(store):
    return ContactLeaseQueue(store)


@pytest.fixture
def recorder(store):
    return QualificationRecorder(store)


@pytest.fixture
def editor(store):
    return ContactEditor(store)


@pytest.fixture
def campaign(campaign_store, agents):
    """An active campaign with agent-a assigned"""
    return campaign_store.save_campaign({
        "id": "camp-1",
        "name": "Spring renewals",
        "qualificationGroupId": QUALIFICATION_GROUP_ID,
        "assignedUserIds": ["agent-a"],
    })
