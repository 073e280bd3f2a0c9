"""Various handlers for performing custom actions on chat events.

Examples include:

- Displaying streamed text to the user
- Forwarding events to several handlers at once
"""

from .callback_handler import CompositeCallbackHandler, PrintingCallbackHandler, null_callback_handler

__all__ = ["CompositeCallbackHandler", "null_callback_handler", "PrintingCallbackHandler"]
