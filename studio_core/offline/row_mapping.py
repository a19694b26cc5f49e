# =============================================================================
# studio_core/offline/row_mapping.py
# Translation between local records and remote rows
# =============================================================================
"""
Local and remote shapes only diverge for community messages:

    local            remote
    -----            ------
    user             user_name
    audioUrl         audio_url
    imageUrl         image_url
    date/timestamp   created_at (stamped by the server)

Posts and categories are sent and received unchanged.
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Mapping

from studio_core.errors import RecordValidationError
from studio_core.models import CommunityMessage

# Human-readable form used for CommunityMessage.date
DISPLAY_DATE_FORMAT = "%d/%m/%Y, %H:%M:%S"


def message_to_row(message: CommunityMessage) -> Dict[str, Any]:
    """Remote row for a message; the server stamps created_at itself."""
    return {
        "id": message.id,
        "user_name": message.user,
        "type": message.type.value,
        "message": message.message,
        "audio_url": message.audio_url,
        "image_url": message.image_url,
    }


def _parse_created_at(value: Any) -> datetime:
    if not isinstance(value, str):
        raise RecordValidationError(
            "created_at is missing or not a string",
            record_type="community_messages",
            field="created_at",
        )
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise RecordValidationError(
            f"created_at is not ISO-8601: {value!r}",
            record_type="community_messages",
            field="created_at",
        ) from e


def row_to_message(row: Mapping[str, Any]) -> CommunityMessage:
    """
    Local message for a remote row.

    Raises:
        RecordValidationError: If the row lacks a required column
    """
    if not isinstance(row, Mapping):
        raise RecordValidationError(
            "Row must be an object",
            record_type="community_messages",
        )

    created = _parse_created_at(row.get("created_at"))
    local_view = {
        "id": row.get("id"),
        "user": row.get("user_name"),
        "type": row.get("type"),
        "message": row.get("message"),
        "audioUrl": row.get("audio_url"),
        "imageUrl": row.get("image_url"),
        "date": created.astimezone().strftime(DISPLAY_DATE_FORMAT),
        "timestamp": int(created.timestamp() * 1000),
    }
    if isinstance(local_view["id"], int) and not isinstance(local_view["id"], bool):
        local_view["id"] = str(local_view["id"])
    return CommunityMessage.from_dict(local_view)


def rows_to_messages(rows: List[Mapping[str, Any]]) -> List[CommunityMessage]:
    return [row_to_message(row) for row in rows]
