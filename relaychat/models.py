"""Wire and domain models shared by the relay components.

Field names are snake_case in Python and camelCase on the wire, as the
browser client sends and expects them.
"""
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

SIGNAL_EVENTS = ("offer", "answer", "ice-candidate")


def new_id() -> str:
    """128-bit random identifier, hex encoded."""
    return secrets.token_hex(16)


def now_ms() -> int:
    return int(time.time() * 1000)


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class UserInfo(WireModel):
    id: str
    username: str


class RoomInfo(WireModel):
    id: str
    name: str
    members: List[str] = []


class Message(WireModel):
    """A relayed message. Immutable once the server has stamped it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    sender: str = Field(alias="from")
    message: str = ""
    is_file: bool = Field(False, alias="isFile")
    is_encrypted: bool = Field(False, alias="isEncrypted")
    file_content: Optional[str] = Field(None, alias="fileContent")
    timestamp: int


# --- client -> server events ---

class MessageBody(WireModel):
    message: str = ""
    is_file: bool = Field(False, alias="isFile")
    is_encrypted: bool = Field(False, alias="isEncrypted")
    file_content: Optional[str] = Field(None, alias="fileContent")


class PrivateMessageIn(MessageBody):
    to: str


class RoomMessageIn(MessageBody):
    room_id: str = Field(alias="roomId")


class CreateRoomIn(WireModel):
    name: str


class RoomRef(WireModel):
    room_id: str = Field(alias="roomId")


class SignalIn(WireModel):
    """Peer negotiation payload; everything except ``to`` is relayed untouched."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    to: str

    def payload(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


# --- server -> client ---

@dataclass(frozen=True)
class Delivery:
    """One outbound event and who should receive it.

    Exactly one target kind is used: a single connection, a set of user ids
    (resolved through the registry when sent), or every live connection.
    """
    event: str
    data: Dict[str, Any]
    connection: Any = None
    user_ids: Tuple[str, ...] = ()
    everyone: bool = False
    exclude: Any = None

    @classmethod
    def to_connection(cls, connection, event, data):
        return cls(event, data, connection=connection)

    @classmethod
    def to_users(cls, user_ids, event, data):
        return cls(event, data, user_ids=tuple(user_ids))

    @classmethod
    def to_everyone(cls, event, data, exclude=None):
        return cls(event, data, everyone=True, exclude=exclude)

    def frame(self) -> Dict[str, Any]:
        return {"type": self.event, **self.data}
