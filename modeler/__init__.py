"""
모델링 도구의 XML 프래그먼트를 SQL DDL과 JSON으로 변환합니다.
"""

__version__ = "0.1.0"

from modeler.composer import deserialize_model, generate_ddl, render_ddl, serialize_model
from modeler.model_manager.draft import load_type_catalog
from modeler.model_manager.loader.model_loader import ModelLoader, load_model
from modeler.model_manager.utils.file_loader import locate_fragments

__all__ = [
    "__version__",
    "ModelLoader",
    "deserialize_model",
    "generate_ddl",
    "load_model",
    "load_type_catalog",
    "locate_fragments",
    "render_ddl",
    "serialize_model",
]
