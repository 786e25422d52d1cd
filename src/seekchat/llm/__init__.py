from .base import ChatTransport
from .factory import create_transport
from .models import ChatMessage, ChatRequest, DecodedReply, StreamDelta
from .providers import DeepSeekTransport
from .stream import StreamDecoder, decode_complete, first_chunk_within

__all__ = [
    "ChatTransport",
    "create_transport",
    "ChatMessage",
    "ChatRequest",
    "DecodedReply",
    "DeepSeekTransport",
    "StreamDecoder",
    "StreamDelta",
    "decode_complete",
    "first_chunk_within",
]
