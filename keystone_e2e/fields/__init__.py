"""Field test objects, one per admin UI field type."""

from .arrays import DateArrayFieldTestObject, TextArrayFieldTestObject
from .base import FieldSpec, FieldTestObject, ModelTestConfig
from .boolean import BooleanFieldTestObject
from .code import CodeFieldTestObject
from .dates import DatetimeFieldTestObject
from .files import FileFieldTestObject
from .geopoint import GeoPointFieldTestObject
from .html import HtmlFieldTestObject
from .markdown import MarkdownFieldTestObject
from .name import NameFieldTestObject
from .relationship import RelationshipFieldTestObject
from .selects import SelectFieldTestObject

FIELD_TEST_OBJECTS = {
    "boolean": BooleanFieldTestObject,
    "code": CodeFieldTestObject,
    "datearray": DateArrayFieldTestObject,
    "datetime": DatetimeFieldTestObject,
    "file": FileFieldTestObject,
    "geopoint": GeoPointFieldTestObject,
    "html": HtmlFieldTestObject,
    "markdown": MarkdownFieldTestObject,
    "name": NameFieldTestObject,
    "relationship": RelationshipFieldTestObject,
    "select": SelectFieldTestObject,
    "textarray": TextArrayFieldTestObject,
}

__all__ = [
    "FIELD_TEST_OBJECTS",
    "FieldSpec",
    "FieldTestObject",
    "ModelTestConfig",
    "BooleanFieldTestObject",
    "CodeFieldTestObject",
    "DateArrayFieldTestObject",
    "DatetimeFieldTestObject",
    "FileFieldTestObject",
    "GeoPointFieldTestObject",
    "HtmlFieldTestObject",
    "MarkdownFieldTestObject",
    "NameFieldTestObject",
    "RelationshipFieldTestObject",
    "SelectFieldTestObject",
    "TextArrayFieldTestObject",
]
