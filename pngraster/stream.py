"""Write-only byte sink that keeps the codec's output chunks in order.

The encoder writes into it like a file object; ``end()`` marks the stream
complete, after which the joined bytes may be taken.
"""


class ChunkStream:
    __slots__ = ('chunks', 'ended')

    def __init__(self):
        self.chunks = []
        self.ended = False

    def write(self, data) -> int:
        if self.ended:
            raise ValueError("write to ended stream")
        self.chunks.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def end(self):
        self.ended = True

    def getvalue(self) -> bytes:
        if not self.ended:
            raise ValueError("stream has not ended")
        return b''.join(self.chunks)

    def __len__(self) -> int:
        return sum(len(c) for c in self.chunks)
