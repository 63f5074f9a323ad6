"""Real-time protocol constants: event names and frame keys.

Pure data module, safe to import from anywhere in the chat package.
"""

# Frame layout: {"event": ..., "data": ..., "ack": ...}
FRAME_EVENT = "event"
FRAME_DATA = "data"
FRAME_ACK = "ack"

# Client -> Server
EVT_GET_MESSAGE_HISTORY = "getMessageHistory"
EVT_SEND_MESSAGE = "sendMessage"
EVT_TYPING = "typing"

# Server -> Client
EVT_ACK = "ack"
EVT_MESSAGE = "message"
EVT_MESSAGE_HISTORY = "messageHistory"
EVT_ERROR = "error"

STATUS_OK = "ok"
STATUS_ERROR = "error"

AUTH_FAILURE_REASON = "Authentication error"
