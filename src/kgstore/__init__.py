"""kgstore: snapshot persistence for named knowledge graphs."""

__version__ = "0.3.0"
