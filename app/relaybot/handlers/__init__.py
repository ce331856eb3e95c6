# -*- coding: utf-8 -*-

from .message_handler import handle_message, to_inbound_message

__all__ = ["handle_message", "to_inbound_message"]
