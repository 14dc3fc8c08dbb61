import random


def random_split_bytes(data: bytes, max_chunk: int = 40, seed: int | None = None) -> list[bytes]:
    """Split data into random-length chunks (empty chunks included)."""
    rng = random.Random(seed)
    chunks = []
    pos = 0
    while pos < len(data):
        n = rng.randint(0, max_chunk)
        chunks.append(data[pos : pos + n])
        pos += n
    return chunks
