"""Application ports: interfaces to infrastructure and collaborators."""

from movement.application.ports.key_value_store import KeyValueStorePort
from movement.application.ports.message_delivery import MessageDeliveryPort
from movement.application.ports.read_model import (
    CampaignActivity,
    CampaignWriteOutcome,
    ReadModelPort,
    UpdateWriteOutcome,
)
from movement.application.ports.replay_index import ReplayIndexPort, ReplayRecord
from movement.application.ports.representative_lookup import RepresentativeLookupPort
from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.ports.token_custody import RefundOutcome, TokenCustodyPort

__all__: list[str] = [
    "CampaignActivity",
    "CampaignWriteOutcome",
    "KeyValueStorePort",
    "MessageDeliveryPort",
    "ReadModelPort",
    "RefundOutcome",
    "ReplayIndexPort",
    "ReplayRecord",
    "RepresentativeLookupPort",
    "TimeAuthorityProtocol",
    "TokenCustodyPort",
    "UpdateWriteOutcome",
]
