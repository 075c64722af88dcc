"""
The identifiers of the Open InterCharge Protocol. Each identifier is an
immutable str subclass that is validated against its grammar when it is
created, so an instance is always well formed. They compare, sort and hash
by their text and can be used directly as pydantic field types.
"""

import re
from typing import Any, ClassVar, Optional, Pattern, Tuple, Type, TypeVar

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from oicp.shared.exceptions import InvalidIdentifierError
from oicp.shared.messages.enums import (
    CHARGING_STATION_ID_MAX_LEN,
    PARTNER_PRODUCT_ID_MAX_LEN,
    PARTNER_SESSION_ID_MAX_LEN,
)

T = TypeVar("T", bound="Identifier")


class Identifier(str):
    """
    Base class of all identifiers. Subclasses define the accepted grammar
    through `patterns` (the value must match at least one of them) and may
    restrict the length through `max_length`.
    """

    patterns: ClassVar[Tuple[Pattern, ...]] = ()
    max_length: ClassVar[int] = 0

    def __new__(cls, value: str):
        if not isinstance(value, str):
            raise InvalidIdentifierError(cls.__name__, value, "not a string")
        value = value.strip()
        cls.validate_format(value)
        return super().__new__(cls, value)

    @classmethod
    def validate_format(cls, value: str):
        if not value:
            raise InvalidIdentifierError(cls.__name__, value, "must not be empty")
        if cls.max_length and len(value) > cls.max_length:
            raise InvalidIdentifierError(
                cls.__name__, value, f"longer than {cls.max_length} characters"
            )
        if cls.patterns and not any(
            pattern.match(value) for pattern in cls.patterns
        ):
            raise InvalidIdentifierError(
                cls.__name__, value, "does not match the expected format"
            )

    @classmethod
    def parse(cls: Type[T], text: str) -> T:
        """
        Raises:
            InvalidIdentifierError
        """
        return cls(text)

    @classmethod
    def try_parse(cls: Type[T], text: Optional[str]) -> Optional[T]:
        if text is None:
            return None
        try:
            return cls(text)
        except InvalidIdentifierError:
            return None

    def __repr__(self):
        return f"{self.__class__.__name__}({str.__repr__(self)})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.to_string_ser_schema(),
        )


class ProviderId(Identifier):
    """The e-mobility provider, country code plus three characters: DE*GDF"""

    patterns = (re.compile(r"^[A-Za-z]{2}[*\-]?[A-Za-z0-9]{3}$"),)


class OperatorId(Identifier):
    """
    The charging station operator. Besides the alphanumeric form (DE*ABC)
    operators may still use the old telephone number form (+49*822).
    """

    patterns = (
        re.compile(r"^[A-Za-z]{2}[*\-]?[A-Za-z0-9]{3}$"),
        re.compile(r"^\+?[0-9]{1,3}\*[0-9]{3}$"),
    )


class EVSEId(Identifier):
    patterns = (
        re.compile(r"^[A-Za-z]{2}\*?[A-Za-z0-9]{3}\*?E[A-Za-z0-9*]{1,30}$"),
        re.compile(r"^\+?[0-9]{1,3}\*[0-9]{3}\*[0-9*]{1,32}$"),
    )


class EVCOId(Identifier):
    """
    The electric vehicle contract identification (eMA ID), e.g.
    DE*BMW*0010LY*3 (DIN) or DE-BMW-C001000LY-3 (ISO)
    """

    patterns = (
        # DIN, star, hyphen or no separator
        re.compile(r"^[A-Za-z]{2}\*[A-Za-z0-9]{3}\*[A-Za-z0-9]{6}\*[0-9X]$"),
        re.compile(r"^[A-Za-z]{2}-[A-Za-z0-9]{3}-[A-Za-z0-9]{6}-[0-9X]$"),
        re.compile(r"^[A-Za-z]{2}[A-Za-z0-9]{3}[A-Za-z0-9]{6}[0-9X]$"),
        # ISO 15118
        re.compile(r"^[A-Za-z]{2}-?[A-Za-z0-9]{3}-?C[A-Za-z0-9]{8}-?[0-9A-Za-z]$"),
        # Nine character instance, optional check character
        re.compile(
            r"^[A-Za-z]{2}[*\-]?[A-Za-z0-9]{3}[*\-]?[A-Za-z0-9]{9}"
            r"([*\-]?[A-Za-z0-9])?$"
        ),
    )


class SessionId(Identifier):
    """The Hubject session ID, a UUID"""

    patterns = (
        re.compile(r"^[A-Za-z0-9]{8}(-[A-Za-z0-9]{4}){3}-[A-Za-z0-9]{12}$"),
    )


class PartnerSessionId(Identifier):
    max_length = PARTNER_SESSION_ID_MAX_LEN


class PartnerProductId(Identifier):
    max_length = PARTNER_PRODUCT_ID_MAX_LEN


class ChargingStationId(Identifier):
    max_length = CHARGING_STATION_ID_MAX_LEN


class UID(Identifier):
    """The UID of an RFID card of the MIFARE family, 4, 7 or 10 bytes as hex"""

    patterns = (
        re.compile(r"^([0-9A-Fa-f]{8}|[0-9A-Fa-f]{14}|[0-9A-Fa-f]{20})$"),
    )


class HubOperatorId(Identifier):
    pass


class HubProviderId(Identifier):
    pass


class ClearingHouseId(Identifier):
    pass
