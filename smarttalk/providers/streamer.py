import asyncio
from typing import AsyncIterator, List


class ChunkStreamer:
    """Replays a finished response as small fixed-size fragments.

    Each `async for` starts a fresh pass over the text, so the same instance
    can be iterated again and yields identical fragments. The delay sits
    between fragments only, never before the first or after the last.
    """

    def __init__(self, text: str, chunk_size: int = 5, delay: float = 0.03):
        if chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer")
        self.text = text or ""
        self.chunk_size = chunk_size
        self.delay = delay

    def chunks(self) -> List[str]:
        return [
            self.text[i:i + self.chunk_size]
            for i in range(0, len(self.text), self.chunk_size)
        ]

    def __len__(self) -> int:
        return -(-len(self.text) // self.chunk_size)

    async def _iterate(self) -> AsyncIterator[str]:
        for index, fragment in enumerate(self.chunks()):
            if index and self.delay:
                await asyncio.sleep(self.delay)
            yield fragment

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()
