from fbexp.core.base.agent import MAX_REPLY_LEN, Agent
from fbexp.core.base.message import Message, Result
from fbexp.core.base.terminal import Terminal, handles

__all__ = ["Agent", "MAX_REPLY_LEN", "Message", "Result", "Terminal", "handles"]
