from .ddl_generator import DDLGenerator, generate_ddl, render_ddl
from .model_serializer import deserialize_model, serialize_model

__all__ = [
    "DDLGenerator",
    "generate_ddl",
    "render_ddl",
    "deserialize_model",
    "serialize_model",
]
