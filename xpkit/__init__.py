"""Building blocks for resource controllers: conditions, field paths, paved objects, metadata helpers, events, logging and a controller engine."""

__version__ = "0.1.0"