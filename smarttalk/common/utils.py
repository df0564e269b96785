import json as json_lib


SSE_DONE = "data: [DONE]\n\n"


def format_sse_chunk(chunk_data: dict) -> str:
    """Formats a dictionary as a Server-Sent Event (SSE) data chunk.

    Args:
        chunk_data: The dictionary containing the data to be sent.

    Returns:
        A string formatted as an SSE data line.
    """
    json_data = json_lib.dumps(chunk_data, ensure_ascii=False)
    return f"data: {json_data}\n\n"


def generate_title(message: str, max_words: int = 6) -> str:
    """Builds a session title from the first words of a message.

    An ellipsis is appended when the message was truncated.
    """
    words = " ".join(message.split(" ")[:max_words])
    return f"{words}..." if len(words) < len(message) else words
