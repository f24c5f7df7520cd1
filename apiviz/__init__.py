"""UML-style diagrams for generated API documentation."""

__version__ = "1.0.0"
