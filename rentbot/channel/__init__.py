"""
Messaging channel sessions and their supervision.
"""
from .base import ChannelSession, DisconnectReason, PresenceState
from .supervisor import SessionSupervisor
from .whatsapp_cloud import WhatsAppCloudSession

__all__ = [
    "ChannelSession",
    "DisconnectReason",
    "PresenceState",
    "SessionSupervisor",
    "WhatsAppCloudSession",
]
