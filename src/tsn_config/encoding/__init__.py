"""Wire encoding - namespace-aware structure to XML serialization."""
from .namespaces import NAMESPACE_BY_MODULE, resolve_namespace
from .xml_encoder import encode_xml, format_scalar, xml_escape

__all__ = [
    "NAMESPACE_BY_MODULE",
    "resolve_namespace",
    "encode_xml",
    "format_scalar",
    "xml_escape",
]
