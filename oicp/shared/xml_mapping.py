"""
Typed accessors that read scalars and sub-elements from an XML element and
the matching helpers to write them. Every OICP data type and message is
mapped with these functions, so the rules about required and optional
elements live in one place:

- a required element that is absent raises MissingElementError
- an optional element that is absent yields None, never a default value
- a value that can't be converted raises InvalidElementValueError, with the
  conversion error chained as __cause__
- a collection isolates its items: a malformed item is reported to the
  caller's on_exception callback and skipped, the rest are still returned

Element names are given as qualified ElementTree tags, see Namespace.tag().
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, TypeVar, Union
from xml.etree import ElementTree as ET

from dateutil import parser as dateutil_parser
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET

from oicp.shared.exceptions import (
    InvalidElementValueError,
    MissingElementError,
    XMLMappingError,
)
from oicp.shared.messages.enums import NAMESPACE_PREFIXES

logger = logging.getLogger(__name__)

T = TypeVar("T")

# on_exception(timestamp, offending element, error)
OnExceptionCallback = Callable[[datetime, Optional[ET.Element], Exception], None]

# Raised by to_element() for documents that are not well-formed, or that
# declare entities or a DTD
MALFORMED_DOCUMENT_ERRORS = (ET.ParseError, DefusedXmlException)

for _ns, _prefix in NAMESPACE_PREFIXES.items():
    ET.register_namespace(_prefix, _ns.value)


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def report_exception(
    on_exception: Optional[OnExceptionCallback],
    node: Optional[ET.Element],
    exc: Exception,
):
    if on_exception is not None:
        on_exception(datetime.now(timezone.utc), node, exc)


def to_element(xml: Union[str, bytes, ET.Element]) -> ET.Element:
    """
    Accepts an already parsed element or the text of an XML document.
    Documents come from remote partners, entity declarations are refused.

    Raises:
        One of MALFORMED_DOCUMENT_ERRORS
    """
    if isinstance(xml, ET.Element):
        return xml
    return SafeET.fromstring(xml)


def _convert(name: str, text: str, parse_leaf: Callable[[str], T]) -> T:
    try:
        return parse_leaf(text)
    except XMLMappingError:
        raise
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise InvalidElementValueError(local_name(name), text, str(exc)) from exc


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def map_value_or_fail(
    node: ET.Element, name: str, parse_leaf: Callable[[str], T] = str
) -> T:
    """Required scalar element"""
    child = node.find(name)
    if child is None:
        raise MissingElementError(local_name(name))
    return _convert(name, _text(child), parse_leaf)


def map_value_or_none(
    node: ET.Element, name: str, parse_leaf: Callable[[str], T] = str
) -> Optional[T]:
    """Optional scalar element"""
    child = node.find(name)
    if child is None:
        return None
    return _convert(name, _text(child), parse_leaf)


def map_attribute_or_none(
    node: ET.Element, name: str, parse_leaf: Callable[[str], T] = str
) -> Optional[T]:
    value = node.get(name)
    if value is None:
        return None
    return _convert(name, value.strip(), parse_leaf)


def map_element(
    node: ET.Element, name: str, parse_child: Callable[[ET.Element], T]
) -> Optional[T]:
    """Optional nested element, handed to parse_child when present"""
    child = node.find(name)
    if child is None:
        return None
    return parse_child(child)


def map_element_or_fail(
    node: ET.Element, name: str, parse_child: Callable[[ET.Element], T]
) -> T:
    """Required nested element"""
    child = node.find(name)
    if child is None:
        raise MissingElementError(local_name(name))
    return parse_child(child)


def map_elements(
    node: ET.Element,
    container_name: Optional[str],
    item_name: str,
    parse_child: Callable[[ET.Element], T],
    on_exception: Optional[OnExceptionCallback] = None,
) -> List[T]:
    """
    Maps zero or more sibling elements into a list, preserving their order.

    Args:
        node: The element holding the container (or the items themselves)
        container_name: The element wrapping the items, None if the items
                        are direct children of node
        item_name: The tag of a single item
        parse_child: Maps a single item element
        on_exception: Receives every item that could not be mapped. The
                      item is left out of the result.
    """
    container = node if container_name is None else node.find(container_name)
    if container is None:
        return []

    items: List[T] = []
    for item in container.findall(item_name):
        try:
            items.append(parse_child(item))
        except (XMLMappingError, ValueError, TypeError) as exc:
            logger.warning(
                f"Skipping malformed '{local_name(item_name)}' element: {exc}"
            )
            report_exception(on_exception, item, exc)
    return items


def map_values(
    node: ET.Element,
    container_name: Optional[str],
    item_name: str,
    parse_leaf: Callable[[str], T] = str,
    on_exception: Optional[OnExceptionCallback] = None,
) -> List[T]:
    """Like map_elements, but for repeated scalar elements"""
    return map_elements(
        node,
        container_name,
        item_name,
        lambda item: _convert(item_name, _text(item), parse_leaf),
        on_exception,
    )


def map_values_or_fail(
    node: ET.Element,
    container_name: Optional[str],
    item_name: str,
    parse_leaf: Callable[[str], T] = str,
) -> List[T]:
    """
    Repeated scalar elements where every item is required to be valid and at
    least one item must be present. The first bad item fails the whole call.
    """
    container = node if container_name is None else node.find(container_name)
    if container is None:
        raise MissingElementError(local_name(container_name or item_name))
    items = [
        _convert(item_name, _text(item), parse_leaf)
        for item in container.findall(item_name)
    ]
    if not items:
        raise MissingElementError(local_name(item_name))
    return items


def add_element(
    parent: ET.Element, name: str, text: Optional[str] = None
) -> ET.Element:
    element = ET.SubElement(parent, name)
    if text is not None:
        element.text = text
    return element


def add_optional_element(
    parent: ET.Element,
    name: str,
    value: Optional[T],
    as_text: Callable[[T], str] = str,
) -> Optional[ET.Element]:
    """Absent values contribute no element at all"""
    if value is None:
        return None
    return add_element(parent, name, as_text(value))


def add_elements(
    parent: ET.Element,
    container_name: Optional[str],
    item_name: str,
    values: Iterable[T],
    as_text: Callable[[T], str] = str,
) -> ET.Element:
    container = parent if container_name is None else add_element(
        parent, container_name
    )
    for value in values:
        add_element(container, item_name, as_text(value))
    return container


# Leaf converters shared by all mappings


def parse_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValueError(f"'{text}' is not an XSD boolean")


def bool_as_text(value: bool) -> str:
    return "true" if value else "false"


def parse_datetime(text: str) -> datetime:
    # Fractions beyond microseconds, as sent by .NET peers, are truncated
    return dateutil_parser.isoparse(text)


def datetime_as_text(value: datetime) -> str:
    return value.isoformat()


def decimal_as_text(value: float, digits: int = 6) -> str:
    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
