"""Licence plate recognition building blocks: fixed-point nets, image helpers, data files and tracking."""

__version__ = "0.1.0"

__all__ = [
    "geometry",
    "netimage",
    "value_buffer",
    "polygon",
    "mipmapper",
    "runtime_config",
    "minimal_data",
    "serializer",
    "hadata",
    "neural_net",
    "tracker",
]