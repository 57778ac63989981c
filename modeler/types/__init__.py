from .model_types import Cardinality, Column, ColumnPair, Model, Relationship, Table

__all__ = [
    "Cardinality",
    "Column",
    "ColumnPair",
    "Model",
    "Relationship",
    "Table",
]
