"""Transport, codec, and batching building blocks."""

__all__: list[str] = []
