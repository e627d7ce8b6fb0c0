"""Generic structure-to-XML encoder.

Serializes nested dicts, lists and scalars to indented XML:

- ``module:tag`` keys are namespace-qualified through the module table; the
  opening tag carries a default-namespace declaration and the closing tag uses
  the bare tag.
- List values become repeated sibling elements instead of one container.
- Keys listed in ``ENTRY_ENCODERS`` already denote one element per list item
  and are emitted by a dedicated encoder so they are not wrapped twice.
- ``None`` renders as an explicit ``<nil/>`` marker; unsupported values render
  as an ``<unsupported type="..."/>`` marker instead of being dropped.

Traversal order is the dict/list order of the input; callers that need
canonical ordering must sort before encoding.
"""
from decimal import Decimal
from typing import Any, Callable

from .namespaces import resolve_namespace

INDENT = "  "

NIL_MARKER = "<nil/>"


def encode_xml(data: Any, indent: int = 0) -> str:
    """Encode a structure to an XML fragment."""
    lines: list[str] = []
    _encode(data, lines, indent)
    return "".join(lines)


def is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float))


def xml_escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_scalar(value: Any) -> str:
    """Render a scalar in canonical form.

    Booleans are lowercase, integral floats lose their decimal point, other
    floats never use exponent notation.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    return xml_escape(str(value))


def _write(lines: list[str], indent: int, text: str) -> None:
    lines.append(f"{INDENT * indent}{text}\n")


def _unsupported(value: Any) -> str:
    return f'<unsupported type="{type(value).__name__}"/>'


def _write_element(lines: list[str], open_tag: str, tag: str, value: Any, indent: int) -> None:
    """Write one element for a value of any kind."""
    if value is None:
        _write(lines, indent, f"<{open_tag}>{NIL_MARKER}</{tag}>")
    elif is_scalar(value):
        _write(lines, indent, f"<{open_tag}>{format_scalar(value)}</{tag}>")
    elif isinstance(value, dict):
        _write(lines, indent, f"<{open_tag}>")
        _encode(value, lines, indent + 1)
        _write(lines, indent, f"</{tag}>")
    else:
        _write(lines, indent, f"<{open_tag}>{_unsupported(value)}</{tag}>")


def _encode(data: Any, lines: list[str], indent: int) -> None:
    if isinstance(data, dict):
        for key, value in data.items():
            namespace, tag = resolve_namespace(key)
            open_tag = f'{tag} xmlns="{namespace}"' if namespace else tag

            if isinstance(value, (list, tuple)):
                entry_encoder = ENTRY_ENCODERS.get(tag)
                for item in value:
                    if entry_encoder is not None and isinstance(item, dict):
                        entry_encoder(item, lines, indent)
                    elif isinstance(item, (list, tuple)):
                        _write(lines, indent, f"<{open_tag}>")
                        _encode(item, lines, indent + 1)
                        _write(lines, indent, f"</{tag}>")
                    else:
                        _write_element(lines, open_tag, tag, item, indent)
                continue

            _write_element(lines, open_tag, tag, value, indent)

    elif isinstance(data, (list, tuple)):
        for item in data:
            _encode(item, lines, indent)

    elif data is None:
        _write(lines, indent, NIL_MARKER)

    elif is_scalar(data):
        # Bare scalar at the top level
        _write(lines, indent, f"<value>{format_scalar(data)}</value>")

    else:
        _write(lines, indent, _unsupported(data))


# --- Feature-specific entry encoders ---

GATE_CONTROL_ENTRY_FIELDS = (
    "index",
    "operation-name",
    "time-interval-value",
    "gate-states-value",
)


def _strip_module(value: Any) -> Any:
    if isinstance(value, str):
        return value.partition(":")[2] or value
    return value


def encode_gate_control_entry(entry: dict[str, Any], lines: list[str], indent: int) -> None:
    """Emit one ``gate-control-entry`` element with canonical child order.

    The operation identity may be module-qualified (``module:set-gate-states``);
    only the identity name is written. Absent leaves are omitted.
    """
    _write(lines, indent, "<gate-control-entry>")
    for name in GATE_CONTROL_ENTRY_FIELDS:
        if name not in entry:
            continue
        value = entry[name]
        if name == "operation-name":
            value = _strip_module(value)
        _write_element(lines, name, name, value, indent + 1)

    extra = {k: v for k, v in entry.items() if k not in GATE_CONTROL_ENTRY_FIELDS}
    if extra:
        _encode(extra, lines, indent + 1)
    _write(lines, indent, "</gate-control-entry>")


ENTRY_ENCODERS: dict[str, Callable[[dict[str, Any], list[str], int], None]] = {
    "gate-control-entry": encode_gate_control_entry,
}
