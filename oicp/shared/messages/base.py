"""
The base classes of all OICP requests and responses.

Every message maps one root element, named after the protocol operation.
Parsing is split into two steps: a message class maps the children of its
root element onto a dict of field values (_map_fields) and the base class
turns those into an immutable value, threading through the correlation
metadata of requests or the originating request of responses. Parsing
never raises; failures are reported to the caller's on_exception callback
and come back as a false ParseResult (try_parse) or None (parse).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Optional,
    Type,
    TypeVar,
    Union,
)
from xml.etree import ElementTree as ET

from pydantic import Field

from oicp.shared.exceptions import (
    CustomParserError,
    ResponseBuilderError,
    UnexpectedRootElementError,
)
from oicp.shared.messages import BaseModel
from oicp.shared.messages.datatypes import StatusCode
from oicp.shared.messages.enums import StatusCodes
from oicp.shared.settings import SettingKey, shared_settings
from oicp.shared.xml_mapping import (
    MALFORMED_DOCUMENT_ERRORS,
    OnExceptionCallback,
    report_exception,
    to_element,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="OICPMessage")
Req = TypeVar("Req", bound="ARequest")
Res = TypeVar("Res", bound="AResponse")

XMLInput = Union[str, bytes, ET.Element]
# Runs after a message was built from a document, may return a new value
CustomParser = Callable[[ET.Element, Any], Any]
# Runs after a message was serialised, may return a new element
CustomSerializer = Callable[[Any, ET.Element], ET.Element]
# Runs on the staging copy of a parsed response before it is frozen
CustomMapper = Callable[[ET.Element, "ResponseBuilder"], "ResponseBuilder"]


@dataclass(frozen=True)
class ParseResult(Generic[M]):
    """The outcome of try_parse(), false when no value could be built"""

    value: Optional[M] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.value is not None

    def __bool__(self):
        return self.success


class OICPMessage(BaseModel):
    # Qualified tag of the root element, e.g. '{...evsestatus/v2.1}eRoamingPullEvseStatusById'
    root_tag: ClassVar[str]

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def _from_fields(
        cls, element: ET.Element, fields: Dict[str, Any], **context
    ) -> "OICPMessage":
        raise NotImplementedError

    def _to_xml(self) -> ET.Element:
        raise NotImplementedError

    @classmethod
    def _try_parse(
        cls,
        xml: XMLInput,
        custom_parser: Optional[CustomParser],
        on_exception: Optional[OnExceptionCallback],
        **context,
    ) -> ParseResult:
        try:
            element = to_element(xml)
        except MALFORMED_DOCUMENT_ERRORS as exc:
            logger.error(f"{cls.__name__}: document is not well-formed: {exc}")
            report_exception(on_exception, None, exc)
            return ParseResult(error=exc)

        if element.tag != cls.root_tag:
            # Not this operation, which is not an error of the document
            error = UnexpectedRootElementError(cls.root_tag, element.tag)
            logger.debug(f"{cls.__name__}: {error}")
            return ParseResult(error=error)

        try:
            fields = cls._map_fields(element, on_exception)
            value = cls._from_fields(element, fields, **context)
            if custom_parser is not None:
                value = custom_parser(element, value)
                if value is None:
                    raise CustomParserError(cls.__name__)
        except Exception as exc:
            logger.error(f"Could not parse {cls.__name__}: {exc}")
            report_exception(on_exception, element, exc)
            return ParseResult(error=exc)

        return ParseResult(value=value)

    def to_xml(
        self, custom_serializer: Optional[CustomSerializer] = None
    ) -> ET.Element:
        """
        Serialises the message into its root element. Absent optional fields
        contribute no element, the element order follows the XSD sequence.
        """
        element = self._to_xml()
        if custom_serializer is not None:
            element = custom_serializer(self, element)
        return element


# Fields every request carries for the transport, not part of the document
REQUEST_METADATA = (
    "request_timestamp",
    "cancellation_token",
    "event_tracking_id",
    "request_timeout",
)


def _default_request_timeout() -> timedelta:
    return timedelta(seconds=shared_settings[SettingKey.REQUEST_TIMEOUT])


class ARequest(OICPMessage):
    """
    An OICP request. Besides its operation specific fields every request
    carries metadata for the transport. The codec neither observes the
    cancellation token nor enforces the timeout, and the metadata takes no
    part in equality.
    """

    request_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), exclude=True
    )
    cancellation_token: Optional[Any] = Field(None, exclude=True)
    event_tracking_id: Optional[str] = Field(None, exclude=True)
    request_timeout: timedelta = Field(
        default_factory=_default_request_timeout, exclude=True
    )

    def domain_fields(self) -> Dict[str, Any]:
        return {
            name: value for name, value in self if name not in REQUEST_METADATA
        }

    def __eq__(self, other):
        if not isinstance(other, ARequest):
            return NotImplemented
        return type(self) is type(other) and (
            self.domain_fields() == other.domain_fields()
        )

    def __hash__(self):
        return hash((type(self), tuple(self.domain_fields().values())))

    @classmethod
    def _from_fields(cls, element: ET.Element, fields: Dict[str, Any], **context):
        return cls(**fields, **context)

    @classmethod
    def try_parse(
        cls: Type[Req],
        xml: XMLInput,
        custom_parser: Optional[CustomParser] = None,
        on_exception: Optional[OnExceptionCallback] = None,
        request_timestamp: Optional[datetime] = None,
        cancellation_token: Optional[Any] = None,
        event_tracking_id: Optional[str] = None,
        request_timeout: Optional[timedelta] = None,
    ) -> "ParseResult[Req]":
        metadata = {
            "request_timestamp": request_timestamp,
            "cancellation_token": cancellation_token,
            "event_tracking_id": event_tracking_id,
            "request_timeout": request_timeout,
        }
        return cls._try_parse(
            xml,
            custom_parser,
            on_exception,
            **{name: value for name, value in metadata.items() if value is not None},
        )

    @classmethod
    def parse(
        cls: Type[Req],
        xml: XMLInput,
        custom_parser: Optional[CustomParser] = None,
        on_exception: Optional[OnExceptionCallback] = None,
        request_timestamp: Optional[datetime] = None,
        cancellation_token: Optional[Any] = None,
        event_tracking_id: Optional[str] = None,
        request_timeout: Optional[timedelta] = None,
    ) -> Optional[Req]:
        return cls.try_parse(
            xml,
            custom_parser,
            on_exception,
            request_timestamp,
            cancellation_token,
            event_tracking_id,
            request_timeout,
        ).value


class AResponse(OICPMessage):
    """
    An OICP response. It keeps the request it answers for correlation, an
    optional StatusCode and a bag of custom data for values a custom mapper
    extracted from vendor extensions.

    A response whose StatusCode is not SUCCESS is a negative
    acknowledgement: a valid value whose payload is empty.
    """

    request: Optional[ARequest] = Field(None, exclude=True)
    status_code: Optional[StatusCode] = Field(None, alias="StatusCode")
    custom_data: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    def __hash__(self):
        return hash(
            (type(self),)
            + tuple(value for name, value in self if name != "custom_data")
        )

    @property
    def is_negative(self) -> bool:
        return self.status_code is not None and not self.status_code.is_success

    @classmethod
    def _empty_payload(cls) -> Dict[str, Any]:
        """The payload values of a negative acknowledgement"""
        return {}

    @classmethod
    def negative(
        cls: Type[Res],
        request: Optional[ARequest],
        code: StatusCodes,
        description: Optional[str] = None,
        additional_info: Optional[str] = None,
        custom_data: Optional[Dict[str, Any]] = None,
    ) -> Res:
        return cls(
            request=request,
            status_code=StatusCode(
                code=code, description=description, additional_info=additional_info
            ),
            custom_data=custom_data or {},
            **cls._empty_payload(),
        )

    @classmethod
    def data_error(
        cls: Type[Res],
        request: Optional[ARequest],
        description: str = "Data Error!",
        additional_info: Optional[str] = None,
    ) -> Res:
        return cls.negative(
            request, StatusCodes.DATA_ERROR, description, additional_info
        )

    @classmethod
    def system_error(
        cls: Type[Res],
        request: Optional[ARequest],
        description: str = "System Error!",
        additional_info: Optional[str] = None,
    ) -> Res:
        return cls.negative(
            request, StatusCodes.SYSTEM_ERROR, description, additional_info
        )

    @classmethod
    def service_not_available(
        cls: Type[Res],
        request: Optional[ARequest],
        description: str = "Service not available!",
        additional_info: Optional[str] = None,
    ) -> Res:
        return cls.negative(
            request, StatusCodes.SERVICE_NOT_AVAILABLE, description, additional_info
        )

    def to_builder(
        self, custom_data: Optional[Dict[str, Any]] = None
    ) -> "ResponseBuilder":
        return ResponseBuilder(
            type(self),
            {name: value for name, value in self},
            custom_data,
        )

    @classmethod
    def _from_fields(
        cls,
        element: ET.Element,
        fields: Dict[str, Any],
        request: Optional[ARequest] = None,
        custom_mapper: Optional[CustomMapper] = None,
    ):
        builder = ResponseBuilder(cls, dict(fields, request=request))
        if custom_mapper is not None:
            builder = custom_mapper(element, builder)
        return builder.to_immutable()

    @classmethod
    def try_parse(
        cls: Type[Res],
        xml: XMLInput,
        request: Optional[ARequest] = None,
        custom_mapper: Optional[CustomMapper] = None,
        custom_parser: Optional[CustomParser] = None,
        on_exception: Optional[OnExceptionCallback] = None,
    ) -> "ParseResult[Res]":
        return cls._try_parse(
            xml,
            custom_parser,
            on_exception,
            request=request,
            custom_mapper=custom_mapper,
        )

    @classmethod
    def parse(
        cls: Type[Res],
        xml: XMLInput,
        request: Optional[ARequest] = None,
        custom_mapper: Optional[CustomMapper] = None,
        custom_parser: Optional[CustomParser] = None,
        on_exception: Optional[OnExceptionCallback] = None,
    ) -> Optional[Res]:
        return cls.try_parse(
            xml, request, custom_mapper, custom_parser, on_exception
        ).value


class ResponseBuilder(Generic[Res]):
    """
    A mutable staging copy of a response. Only the response's fields can be
    read and set, the given custom data is merged into the response's own.
    to_immutable() validates the fields again and returns a new response.
    """

    def __init__(
        self,
        response_class: Type[Res],
        fields: Dict[str, Any],
        custom_data: Optional[Dict[str, Any]] = None,
    ):
        merged_custom_data = dict(fields.get("custom_data") or {})
        merged_custom_data.update(custom_data or {})
        object.__setattr__(self, "_response_class", response_class)
        object.__setattr__(
            self, "_fields", dict(fields, custom_data=merged_custom_data)
        )

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_fields"][name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no field '{name}'"
            ) from None

    def __setattr__(self, name: str, value: Any):
        if name not in self._response_class.model_fields:
            raise ResponseBuilderError(self._response_class.__name__, name)
        self._fields[name] = value

    def to_immutable(self) -> Res:
        fields = dict(self._fields)
        fields["custom_data"] = dict(fields.get("custom_data") or {})
        return self._response_class(**fields)

    def __repr__(self):
        return f"ResponseBuilder({self._response_class.__name__}, {self._fields})"
