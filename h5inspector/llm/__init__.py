from h5inspector.llm.client import chat_completion, get_client

__all__ = ["chat_completion", "get_client"]
