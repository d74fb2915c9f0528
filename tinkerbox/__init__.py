"""Small systems building blocks: lists, a frame allocator, paging, RESP and lag tools."""

__version__ = "0.1.0"