from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class Subscription:
    chat_id: int
    latitude: float = 0.0
    longitude: float = 0.0
    send_time: str = "09:00"

    @property
    def is_configured(self) -> bool:
        # (0, 0) marks a record that never received a location
        return not (self.latitude == 0.0 and self.longitude == 0.0)

    def with_send_time(self, send_time: str) -> "Subscription":
        return replace(self, send_time=send_time)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        return cls(
            chat_id=int(data["chat_id"]),
            latitude=float(data.get("latitude") or 0.0),
            longitude=float(data.get("longitude") or 0.0),
            send_time=str(data.get("send_time") or "09:00"),
        )
