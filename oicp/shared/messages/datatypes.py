"""
This module contains the complex types shared by most OICP messages:
the status code that signals the business level outcome of an operation,
the customer identification (a choice of four shapes), geo coordinates and
addresses.

All classes are ultimately subclassed from pydantic's BaseModel, field
aliases carry the element names used on the wire. Each type reads itself
from and writes itself to an ElementTree element through the mapping
primitives of oicp.shared.xml_mapping.
"""

import re
from typing import Annotated, Callable, Optional
from xml.etree import ElementTree as ET

from pydantic import BeforeValidator, Field, model_validator

from oicp.shared.exceptions import ChoiceError, NoIdentificationFoundError
from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import (
    STATUS_DESCRIPTION_MAX_LEN,
    GeoCoordinatesResponseFormat,
    Namespace,
    PINCrypto,
    StatusCodes,
    enum_as_text,
    parse_enum,
)
from oicp.shared.messages.identifiers import UID, EVCOId
from oicp.shared.validators import one_field_must_be_set
from oicp.shared.xml_mapping import (
    add_element,
    add_optional_element,
    decimal_as_text,
    map_element,
    map_element_or_fail,
    map_value_or_fail,
    map_value_or_none,
)

CT = Namespace.COMMON_TYPES


def empty_to_none(value):
    """Empty optional texts are treated as absent, they are never emitted"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalText = Annotated[Optional[str], BeforeValidator(empty_to_none)]


def parse_status_code(text: str) -> StatusCodes:
    return StatusCodes(int(text))


class StatusCode(BaseModel):
    """
    The protocol's structured outcome of an operation, independent of
    transport level faults or malformed documents. A response carrying a
    StatusCode other than SUCCESS is a valid, fully parsed negative
    acknowledgement.
    """

    code: StatusCodes = Field(..., alias="Code")
    description: OptionalText = Field(
        None, max_length=STATUS_DESCRIPTION_MAX_LEN, alias="Description"
    )
    additional_info: OptionalText = Field(None, alias="AdditionalInfo")

    @property
    def is_success(self) -> bool:
        return self.code == StatusCodes.SUCCESS

    @classmethod
    def from_xml(cls, element: ET.Element) -> "StatusCode":
        return cls(
            code=map_value_or_fail(element, CT.tag("Code"), parse_status_code),
            description=map_value_or_none(element, CT.tag("Description")),
            additional_info=map_value_or_none(element, CT.tag("AdditionalInfo")),
        )

    def to_xml(self, tag: str = CT.tag("StatusCode")) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, CT.tag("Code"), f"{self.code.value:03d}")
        add_optional_element(element, CT.tag("Description"), self.description)
        add_optional_element(
            element, CT.tag("AdditionalInfo"), self.additional_info
        )
        return element


class HashedPIN(BaseModel):
    value: str = Field(..., min_length=1, alias="Value")
    function: PINCrypto = Field(..., alias="Function")
    salt: OptionalText = Field(None, alias="Salt")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "HashedPIN":
        return cls(
            value=map_value_or_fail(element, CT.tag("Value")),
            function=map_value_or_fail(
                element,
                CT.tag("Function"),
                lambda text: parse_enum(PINCrypto, text, strict=True),
            ),
            salt=map_value_or_none(element, CT.tag("Salt")),
        )

    def to_xml(self, tag: str = CT.tag("HashedPIN")) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, CT.tag("Value"), self.value)
        add_element(element, CT.tag("Function"), enum_as_text(self.function))
        add_optional_element(element, CT.tag("Salt"), self.salt)
        return element


class RFIDMifareFamilyIdentification(BaseModel):
    uid: UID = Field(..., alias="UID")


class QRCodeIdentification(BaseModel):
    """An EVCO ID together with either a plain PIN or a hashed PIN"""

    evco_id: EVCOId = Field(..., alias="EVCOID")
    pin: Optional[str] = Field(None, min_length=1, alias="PIN")
    hashed_pin: Optional[HashedPIN] = Field(None, alias="HashedPIN")

    @model_validator(mode="after")
    def validate_pin_choice(self):
        one_field_must_be_set(["pin", "hashed_pin"], dict(self), True)
        return self

    @classmethod
    def from_xml(cls, element: ET.Element) -> "QRCodeIdentification":
        pin = map_value_or_none(element, CT.tag("PIN"))
        hashed_pin = map_element(element, CT.tag("HashedPIN"), HashedPIN.from_xml)
        if (pin is None) == (hashed_pin is None):
            raise ChoiceError(
                "A QR code identification needs either a PIN or a HashedPIN"
            )
        return cls(
            evco_id=map_value_or_fail(element, CT.tag("EVCOID"), EVCOId.parse),
            pin=pin,
            hashed_pin=hashed_pin,
        )

    def to_xml(self, tag: str = CT.tag("QRCodeIdentification")) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, CT.tag("EVCOID"), self.evco_id)
        if self.hashed_pin is not None:
            element.append(self.hashed_pin.to_xml())
        else:
            add_optional_element(element, CT.tag("PIN"), self.pin)
        return element


class PlugAndChargeIdentification(BaseModel):
    evco_id: EVCOId = Field(..., alias="EVCOID")


class RemoteIdentification(BaseModel):
    evco_id: EVCOId = Field(..., alias="EVCOID")


class Identification(BaseModel):
    """
    The credential a customer presented, exactly one of an RFID card UID,
    a QR code, a Plug&Charge contract or a remote (app / backend)
    identification.

    The container element is named 'Identification' but lives in the
    namespace of the message using it (Authorization, Reservation,
    AuthenticationData, ...), the variants are CommonTypes.
    """

    rfid_mifare_family: Optional[RFIDMifareFamilyIdentification] = Field(
        None, alias="RFIDmifarefamilyIdentification"
    )
    qr_code: Optional[QRCodeIdentification] = Field(
        None, alias="QRCodeIdentification"
    )
    plug_and_charge: Optional[PlugAndChargeIdentification] = Field(
        None, alias="PlugAndChargeIdentification"
    )
    remote: Optional[RemoteIdentification] = Field(
        None, alias="RemoteIdentification"
    )

    @model_validator(mode="after")
    def validate_variant(self):
        one_field_must_be_set(
            ["rfid_mifare_family", "qr_code", "plug_and_charge", "remote"],
            dict(self),
            True,
        )
        return self

    @classmethod
    def from_rfid(cls, uid: str) -> "Identification":
        return cls(rfid_mifare_family=RFIDMifareFamilyIdentification(uid=uid))

    @classmethod
    def from_qr_code(cls, evco_id: str, pin: str) -> "Identification":
        return cls(qr_code=QRCodeIdentification(evco_id=evco_id, pin=pin))

    @classmethod
    def from_qr_code_hashed(
        cls,
        evco_id: str,
        hash_value: str,
        function: PINCrypto,
        salt: Optional[str] = None,
    ) -> "Identification":
        return cls(
            qr_code=QRCodeIdentification(
                evco_id=evco_id,
                hashed_pin=HashedPIN(value=hash_value, function=function, salt=salt),
            )
        )

    @classmethod
    def from_plug_and_charge(cls, evco_id: str) -> "Identification":
        return cls(plug_and_charge=PlugAndChargeIdentification(evco_id=evco_id))

    @classmethod
    def from_remote(cls, evco_id: str) -> "Identification":
        return cls(remote=RemoteIdentification(evco_id=evco_id))

    @property
    def variant(self) -> BaseModel:
        return next(value for _, value in self if value is not None)

    @property
    def evco_id(self) -> Optional[EVCOId]:
        return getattr(self.variant, "evco_id", None)

    @property
    def uid(self) -> Optional[UID]:
        return getattr(self.variant, "uid", None)

    @classmethod
    def from_xml(
        cls,
        element: Optional[ET.Element],
        custom_parser: Optional[
            Callable[[ET.Element, "Identification"], "Identification"]
        ] = None,
    ) -> "Identification":
        """
        Probes the four variant shapes in a fixed order. A missing container
        or a container without any variant is a NoIdentificationFoundError,
        more than one variant is a ChoiceError.

        custom_parser receives the container element and the identification
        and may return a replacement, e.g. one read from vendor elements.
        """
        if element is None:
            raise NoIdentificationFoundError()

        variants = {
            "rfid_mifare_family": map_element(
                element,
                CT.tag("RFIDmifarefamilyIdentification"),
                lambda e: RFIDMifareFamilyIdentification(
                    uid=map_value_or_fail(e, CT.tag("UID"), UID.parse)
                ),
            ),
            "qr_code": map_element(
                element, CT.tag("QRCodeIdentification"), QRCodeIdentification.from_xml
            ),
            "plug_and_charge": map_element(
                element,
                CT.tag("PlugAndChargeIdentification"),
                lambda e: PlugAndChargeIdentification(
                    evco_id=map_value_or_fail(e, CT.tag("EVCOID"), EVCOId.parse)
                ),
            ),
            "remote": map_element(
                element,
                CT.tag("RemoteIdentification"),
                lambda e: RemoteIdentification(
                    evco_id=map_value_or_fail(e, CT.tag("EVCOID"), EVCOId.parse)
                ),
            ),
        }
        present = {name: value for name, value in variants.items() if value is not None}
        if not present:
            raise NoIdentificationFoundError()
        if len(present) > 1:
            raise ChoiceError(
                "An identification must hold exactly one variant, found "
                f"{', '.join(present)}"
            )
        identification = cls(**present)
        if custom_parser is not None:
            identification = custom_parser(element, identification)
        return identification

    def to_xml(
        self,
        tag: str,
        custom_serializer: Optional[
            Callable[["Identification", ET.Element], ET.Element]
        ] = None,
    ) -> ET.Element:
        element = self._variant_xml(tag)
        if custom_serializer is not None:
            element = custom_serializer(self, element)
        return element

    def _variant_xml(self, tag: str) -> ET.Element:
        element = ET.Element(tag)
        if self.rfid_mifare_family is not None:
            variant = add_element(element, CT.tag("RFIDmifarefamilyIdentification"))
            add_element(variant, CT.tag("UID"), self.rfid_mifare_family.uid)
        elif self.qr_code is not None:
            element.append(self.qr_code.to_xml())
        elif self.plug_and_charge is not None:
            variant = add_element(element, CT.tag("PlugAndChargeIdentification"))
            add_element(variant, CT.tag("EVCOID"), self.plug_and_charge.evco_id)
        elif self.remote is not None:
            variant = add_element(element, CT.tag("RemoteIdentification"))
            add_element(variant, CT.tag("EVCOID"), self.remote.evco_id)
        return element


def map_identification(node: ET.Element, tag: str) -> Identification:
    return Identification.from_xml(node.find(tag))


# 50° 4' 12.3'' (the seconds may use a decimal comma)
DMS_PATTERN = re.compile(
    r"^(-?1?\d{1,2})°\s*(\d{1,2})'\s*(\d{1,2}(?:[.,]\d*)?)''$"
)


def parse_degree_minute_seconds(text: str) -> float:
    match = DMS_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"'{text}' is not in degree-minute-seconds format")
    degrees, minutes, seconds = match.groups()
    value = abs(int(degrees)) + int(minutes) / 60 + float(
        seconds.replace(",", ".")
    ) / 3600
    return -value if degrees.startswith("-") else value


def degree_minute_seconds_as_text(value: float) -> str:
    sign = "-" if value < 0 else ""
    value = abs(value)
    degrees = int(value)
    minutes = int((value - degrees) * 60)
    seconds = (value - degrees - minutes / 60) * 3600
    return f"{sign}{degrees}° {minutes}' {seconds:.3f}''"


def parse_google_coordinates(text: str):
    """'50.123 9.456' or '50.123,9.456', latitude first"""
    parts = [part for part in re.split(r"[\s,]+", text.strip()) if part]
    if len(parts) != 2:
        raise ValueError(f"'{text}' is not a 'latitude longitude' pair")
    return float(parts[0]), float(parts[1])


class GeoCoordinates(BaseModel):
    """
    A WGS84 position. On the wire it is a choice of the Google,
    DecimalDegree or DegreeMinuteSeconds shapes, all of them are read,
    DecimalDegree is written unless another format is asked for.
    """

    # XSD restriction of the DecimalDegree type
    latitude: float = Field(..., ge=-90, le=90, alias="Latitude")
    longitude: float = Field(..., ge=-180, le=180, alias="Longitude")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "GeoCoordinates":
        google = map_element(
            element,
            CT.tag("Google"),
            lambda e: map_value_or_fail(
                e, CT.tag("Coordinates"), parse_google_coordinates
            ),
        )
        decimal_degree = map_element(
            element,
            CT.tag("DecimalDegree"),
            lambda e: (
                map_value_or_fail(e, CT.tag("Latitude"), float),
                map_value_or_fail(e, CT.tag("Longitude"), float),
            ),
        )
        degree_minute_seconds = map_element(
            element,
            CT.tag("DegreeMinuteSeconds"),
            lambda e: (
                map_value_or_fail(e, CT.tag("Latitude"), parse_degree_minute_seconds),
                map_value_or_fail(
                    e, CT.tag("Longitude"), parse_degree_minute_seconds
                ),
            ),
        )
        shapes = [
            shape
            for shape in (google, decimal_degree, degree_minute_seconds)
            if shape is not None
        ]
        if len(shapes) != 1:
            raise ChoiceError(
                "Geo coordinates must be given in exactly one format, "
                f"found {len(shapes)}"
            )
        latitude, longitude = shapes[0]
        return cls(latitude=latitude, longitude=longitude)

    def to_xml(
        self,
        tag: str,
        response_format: GeoCoordinatesResponseFormat = (
            GeoCoordinatesResponseFormat.DECIMAL_DEGREE
        ),
    ) -> ET.Element:
        element = ET.Element(tag)
        if response_format == GeoCoordinatesResponseFormat.GOOGLE:
            google = add_element(element, CT.tag("Google"))
            add_element(
                google,
                CT.tag("Coordinates"),
                f"{decimal_as_text(self.latitude)} {decimal_as_text(self.longitude)}",
            )
        elif response_format == GeoCoordinatesResponseFormat.DEGREE_MINUTE_SECONDS:
            dms = add_element(element, CT.tag("DegreeMinuteSeconds"))
            add_element(
                dms, CT.tag("Longitude"), degree_minute_seconds_as_text(self.longitude)
            )
            add_element(
                dms, CT.tag("Latitude"), degree_minute_seconds_as_text(self.latitude)
            )
        else:
            decimal_degree = add_element(element, CT.tag("DecimalDegree"))
            add_element(
                decimal_degree, CT.tag("Longitude"), decimal_as_text(self.longitude)
            )
            add_element(
                decimal_degree, CT.tag("Latitude"), decimal_as_text(self.latitude)
            )
        return element


class SearchCenter(BaseModel):
    geo_coordinates: GeoCoordinates = Field(..., alias="GeoCoordinates")
    # Kilometers
    radius: float = Field(..., gt=0, alias="Radius")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "SearchCenter":
        return cls(
            geo_coordinates=map_element_or_fail(
                element, CT.tag("GeoCoordinates"), GeoCoordinates.from_xml
            ),
            radius=map_value_or_fail(element, CT.tag("Radius"), float),
        )

    def to_xml(self, tag: str) -> ET.Element:
        element = ET.Element(tag)
        element.append(self.geo_coordinates.to_xml(CT.tag("GeoCoordinates")))
        add_element(element, CT.tag("Radius"), decimal_as_text(self.radius))
        return element


# Element order of the XSD sequence
ADDRESS_ELEMENTS = (
    ("country", "Country"),
    ("city", "City"),
    ("street", "Street"),
    ("postal_code", "PostalCode"),
    ("house_num", "HouseNum"),
    ("floor", "Floor"),
    ("region", "Region"),
    ("time_zone", "TimeZone"),
)


class Address(BaseModel):
    # ISO 3166 alpha-3 (alpha-2 is accepted as well)
    country: str = Field(..., min_length=2, max_length=3, alias="Country")
    city: str = Field(..., min_length=1, max_length=50, alias="City")
    street: str = Field(..., min_length=1, max_length=100, alias="Street")
    postal_code: OptionalText = Field(None, max_length=10, alias="PostalCode")
    house_num: OptionalText = Field(None, max_length=10, alias="HouseNum")
    floor: OptionalText = Field(None, max_length=5, alias="Floor")
    region: OptionalText = Field(None, max_length=50, alias="Region")
    time_zone: OptionalText = Field(None, alias="TimeZone")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Address":
        return cls(
            country=map_value_or_fail(element, CT.tag("Country")),
            city=map_value_or_fail(element, CT.tag("City")),
            street=map_value_or_fail(element, CT.tag("Street")),
            postal_code=map_value_or_none(element, CT.tag("PostalCode")),
            house_num=map_value_or_none(element, CT.tag("HouseNum")),
            floor=map_value_or_none(element, CT.tag("Floor")),
            region=map_value_or_none(element, CT.tag("Region")),
            time_zone=map_value_or_none(element, CT.tag("TimeZone")),
        )

    def to_xml(self, tag: str) -> ET.Element:
        element = ET.Element(tag)
        for field_name, element_name in ADDRESS_ELEMENTS:
            add_optional_element(
                element, CT.tag(element_name), getattr(self, field_name)
            )
        return element
