from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any

ROOM_ID_ALIASES = AliasChoices("roomId", "sessionId")


class InboundFrame(BaseModel):
    """One client message: ``{"event": "...", "data": ...}``."""

    event: str
    data: Any = None


class JoinRequest(BaseModel):
    room_id: str = Field(validation_alias=ROOM_ID_ALIASES)


class SessionDescription(BaseModel):
    """Payload of ``offer`` and ``answer``."""

    model_config = ConfigDict(extra="ignore")

    room_id: str = Field(validation_alias=ROOM_ID_ALIASES)
    sdp: Any = None
    type: Any = None

    def relay_payload(self) -> dict[str, Any]:
        return {"sdp": self.sdp, "type": self.type}


class IceCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    room_id: str = Field(validation_alias=ROOM_ID_ALIASES)
    candidate: Any = None

    def relay_payload(self) -> dict[str, Any]:
        return {"candidate": self.candidate}


RELAY_MODELS = {
    "offer": SessionDescription,
    "answer": SessionDescription,
    "ice_candidate": IceCandidate,
}
