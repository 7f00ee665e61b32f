"""
Error types raised by the campaign engine.

Import rejections and lease misses are not errors: they are returned as data.
Row store failures (sqlalchemy.exc.SQLAlchemyError) propagate unchanged.
"""


class CampaignEngineError(Exception):
    """Base class for engine errors."""


class NotFoundError(CampaignEngineError):
    """A caller-supplied identifier does not reference an existing row."""

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class InvalidTransitionError(CampaignEngineError):
    """A contact status change that the lifecycle does not allow."""

    def __init__(self, contact_id: str, current: str, target: str):
        self.contact_id = contact_id
        self.current = current
        self.target = target
        super().__init__(f"Contact {contact_id} cannot move from '{current}' to '{target}'")


class OperationNotPermittedError(CampaignEngineError):
    """The capability check collaborator denied the operation."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Operation not permitted: {kind}")


class InvalidContactFieldError(CampaignEngineError, ValueError):
    """A contact field edit carried a malformed value."""


class ContactFileError(CampaignEngineError, ValueError):
    """An uploaded contact file could not be parsed."""


class ContactCampaignMismatchError(CampaignEngineError, ValueError):
    """A contact was addressed through a campaign it does not belong to."""

    def __init__(self, contact_id: str, campaign_id: str):
        self.contact_id = contact_id
        self.campaign_id = campaign_id
        super().__init__(f"Contact {contact_id} does not belong to campaign {campaign_id}")
