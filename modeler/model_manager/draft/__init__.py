"""
Type mapping module.
Loads platform type-lookup documents used by the DDL generator.
"""

from modeler.model_manager.draft.type_mapping import TypeCatalog, TypeMapping, load_type_catalog

__all__ = ["TypeCatalog", "TypeMapping", "load_type_catalog"]
