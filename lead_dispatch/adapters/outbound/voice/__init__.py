"""Voice call client adapters."""

from lead_dispatch.adapters.outbound.voice.http_voice_call_client import HttpVoiceCallClient
from lead_dispatch.adapters.outbound.voice.noop_voice_call_client import NoOpVoiceCallClient

__all__ = [
    "HttpVoiceCallClient",
    "NoOpVoiceCallClient",
]
