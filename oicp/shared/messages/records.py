"""
The records that OICP operations exchange in bulk: EVSE data and status
records grouped per operator, EVSE search matches, authentication data
grouped per provider and charge detail records.

Collections of records isolate their items: a malformed record is handed
to the on_exception callback and left out, the remaining records are kept.
The same holds for the items of enum and meter value lists, so an unknown
plug type never reaches a record as a value that can't be written back.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Optional, Tuple, Type
from xml.etree import ElementTree as ET

from pydantic import Field, field_validator, model_validator

from oicp.shared.messages import BaseModel
from oicp.shared.messages.datatypes import (
    Address,
    GeoCoordinates,
    Identification,
    OptionalText,
    map_identification,
)
from oicp.shared.messages.enums import (
    Accessibility,
    ActionType,
    AuthenticationMode,
    ChargingFacility,
    ChargingMode,
    EVSEStatusType,
    GeoCoordinatesResponseFormat,
    Namespace,
    PaymentOption,
    PlugType,
    ValueAddedService,
    enum_as_text,
    is_fallback,
    parse_enum,
)
from oicp.shared.messages.identifiers import (
    ChargingStationId,
    ClearingHouseId,
    EVSEId,
    HubOperatorId,
    HubProviderId,
    OperatorId,
    PartnerProductId,
    PartnerSessionId,
    ProviderId,
    SessionId,
)
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    add_elements,
    add_optional_element,
    bool_as_text,
    datetime_as_text,
    decimal_as_text,
    map_attribute_or_none,
    map_element,
    map_element_or_fail,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    map_values,
    parse_bool,
    parse_datetime,
)

logger = logging.getLogger(__name__)

EVSE_DATA = Namespace.EVSE_DATA
EVSE_STATUS = Namespace.EVSE_STATUS
EVSE_SEARCH = Namespace.EVSE_SEARCH
AUTH_DATA = Namespace.AUTHENTICATION_DATA
AUTHORIZATION = Namespace.AUTHORIZATION

# Everything but digits and a leading '+' is dropped from hotline numbers
PHONE_NUMBER_NOISE = re.compile(r"(?!^\+)[^0-9]")


def enum_parser(enum_cls: Type):
    """Unknown values are rejected unless the fallback can be written back"""
    return lambda text: parse_enum(enum_cls, text, strict=True)


def add_enum_elements(
    parent: ET.Element,
    container_name: str,
    item_name: str,
    members: Iterable,
    required: bool = False,
):
    """Values without a wire representation are left out"""
    known = []
    for member in members:
        if is_fallback(member):
            logger.warning(f"Dropping {member} from '{container_name}'")
        else:
            known.append(member)
    if known or required:
        add_elements(
            parent, EVSE_DATA.tag(container_name), EVSE_DATA.tag(item_name), known,
            enum_as_text,
        )


class EVSEDataRecord(BaseModel):
    """The static data of a single EVSE as published by its operator"""

    delta_type: Optional[ActionType] = Field(None, alias="deltaType")
    last_update: Optional[datetime] = Field(None, alias="lastUpdate")
    evse_id: EVSEId = Field(..., alias="EvseId")
    charging_station_id: Optional[ChargingStationId] = Field(
        None, alias="ChargingStationId"
    )
    charging_station_name: OptionalText = Field(
        None, max_length=50, alias="ChargingStationName"
    )
    en_charging_station_name: OptionalText = Field(
        None, max_length=50, alias="EnChargingStationName"
    )
    address: Address = Field(..., alias="Address")
    geo_coordinates: GeoCoordinates = Field(..., alias="GeoCoordinates")
    plugs: Tuple[PlugType, ...] = Field(..., min_length=1, alias="Plugs")
    charging_facilities: Tuple[ChargingFacility, ...] = Field(
        (), alias="ChargingFacilities"
    )
    charging_modes: Tuple[ChargingMode, ...] = Field((), alias="ChargingModes")
    authentication_modes: Tuple[AuthenticationMode, ...] = Field(
        ..., min_length=1, alias="AuthenticationModes"
    )
    max_capacity: Optional[int] = Field(None, ge=0, alias="MaxCapacity")
    payment_options: Tuple[PaymentOption, ...] = Field((), alias="PaymentOptions")
    value_added_services: Tuple[ValueAddedService, ...] = Field(
        (), alias="ValueAddedServices"
    )
    accessibility: Accessibility = Field(..., alias="Accessibility")
    hotline_phone_num: str = Field(..., min_length=1, alias="HotlinePhoneNum")
    additional_info: OptionalText = Field(None, alias="AdditionalInfo")
    en_additional_info: OptionalText = Field(None, alias="EnAdditionalInfo")
    geo_charging_point_entrance: Optional[GeoCoordinates] = Field(
        None, alias="GeoChargingPointEntrance"
    )
    is_open_24_hours: bool = Field(..., alias="IsOpen24Hours")
    opening_time: OptionalText = Field(None, alias="OpeningTime")
    hub_operator_id: Optional[HubOperatorId] = Field(None, alias="HubOperatorID")
    clearinghouse_id: Optional[ClearingHouseId] = Field(
        None, alias="ClearinghouseID"
    )
    is_hubject_compatible: bool = Field(True, alias="IsHubjectCompatible")
    dynamic_info_available: str = Field(
        "auto", pattern="^(true|false|auto)$", alias="DynamicInfoAvailable"
    )

    @field_validator("hotline_phone_num")
    @classmethod
    def normalize_phone_number(cls, value: str) -> str:
        return PHONE_NUMBER_NOISE.sub("", value)

    @classmethod
    def from_xml(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> "EVSEDataRecord":
        return cls(
            delta_type=map_attribute_or_none(
                element, "deltaType", enum_parser(ActionType)
            ),
            last_update=map_attribute_or_none(element, "lastUpdate", parse_datetime),
            evse_id=map_value_or_fail(element, EVSE_DATA.tag("EvseId"), EVSEId.parse),
            charging_station_id=map_value_or_none(
                element, EVSE_DATA.tag("ChargingStationId"), ChargingStationId.parse
            ),
            charging_station_name=map_value_or_none(
                element, EVSE_DATA.tag("ChargingStationName")
            ),
            en_charging_station_name=map_value_or_none(
                element, EVSE_DATA.tag("EnChargingStationName")
            ),
            address=map_element_or_fail(
                element, EVSE_DATA.tag("Address"), Address.from_xml
            ),
            geo_coordinates=map_element_or_fail(
                element, EVSE_DATA.tag("GeoCoordinates"), GeoCoordinates.from_xml
            ),
            plugs=map_values(
                element,
                EVSE_DATA.tag("Plugs"),
                EVSE_DATA.tag("Plug"),
                enum_parser(PlugType),
                on_exception,
            ),
            charging_facilities=map_values(
                element,
                EVSE_DATA.tag("ChargingFacilities"),
                EVSE_DATA.tag("ChargingFacility"),
                enum_parser(ChargingFacility),
                on_exception,
            ),
            charging_modes=map_values(
                element,
                EVSE_DATA.tag("ChargingModes"),
                EVSE_DATA.tag("ChargingMode"),
                enum_parser(ChargingMode),
                on_exception,
            ),
            authentication_modes=map_values(
                element,
                EVSE_DATA.tag("AuthenticationModes"),
                EVSE_DATA.tag("AuthenticationMode"),
                enum_parser(AuthenticationMode),
                on_exception,
            ),
            max_capacity=map_value_or_none(
                element, EVSE_DATA.tag("MaxCapacity"), int
            ),
            payment_options=map_values(
                element,
                EVSE_DATA.tag("PaymentOptions"),
                EVSE_DATA.tag("PaymentOption"),
                enum_parser(PaymentOption),
                on_exception,
            ),
            value_added_services=map_values(
                element,
                EVSE_DATA.tag("ValueAddedServices"),
                EVSE_DATA.tag("ValueAddedService"),
                enum_parser(ValueAddedService),
                on_exception,
            ),
            accessibility=map_value_or_fail(
                element, EVSE_DATA.tag("Accessibility"), enum_parser(Accessibility)
            ),
            hotline_phone_num=map_value_or_fail(
                element, EVSE_DATA.tag("HotlinePhoneNum")
            ),
            additional_info=map_value_or_none(
                element, EVSE_DATA.tag("AdditionalInfo")
            ),
            en_additional_info=map_value_or_none(
                element, EVSE_DATA.tag("EnAdditionalInfo")
            ),
            geo_charging_point_entrance=map_element(
                element,
                EVSE_DATA.tag("GeoChargingPointEntrance"),
                GeoCoordinates.from_xml,
            ),
            is_open_24_hours=map_value_or_fail(
                element, EVSE_DATA.tag("IsOpen24Hours"), parse_bool
            ),
            opening_time=map_value_or_none(element, EVSE_DATA.tag("OpeningTime")),
            hub_operator_id=map_value_or_none(
                element, EVSE_DATA.tag("HubOperatorID"), HubOperatorId.parse
            ),
            clearinghouse_id=map_value_or_none(
                element, EVSE_DATA.tag("ClearinghouseID"), ClearingHouseId.parse
            ),
            is_hubject_compatible=map_value_or_fail(
                element, EVSE_DATA.tag("IsHubjectCompatible"), parse_bool
            ),
            dynamic_info_available=map_value_or_fail(
                element, EVSE_DATA.tag("DynamicInfoAvailable")
            ),
        )

    def to_xml(
        self,
        tag: str = EVSE_DATA.tag("EvseDataRecord"),
        geo_format: GeoCoordinatesResponseFormat = (
            GeoCoordinatesResponseFormat.DECIMAL_DEGREE
        ),
    ) -> ET.Element:
        element = ET.Element(tag)
        if self.delta_type is not None:
            element.set("deltaType", enum_as_text(self.delta_type))
        if self.last_update is not None:
            element.set("lastUpdate", datetime_as_text(self.last_update))

        add_element(element, EVSE_DATA.tag("EvseId"), self.evse_id)
        add_optional_element(
            element, EVSE_DATA.tag("ChargingStationId"), self.charging_station_id
        )
        add_optional_element(
            element, EVSE_DATA.tag("ChargingStationName"), self.charging_station_name
        )
        add_optional_element(
            element,
            EVSE_DATA.tag("EnChargingStationName"),
            self.en_charging_station_name,
        )
        element.append(self.address.to_xml(EVSE_DATA.tag("Address")))
        element.append(
            self.geo_coordinates.to_xml(EVSE_DATA.tag("GeoCoordinates"), geo_format)
        )
        add_enum_elements(element, "Plugs", "Plug", self.plugs, required=True)
        add_enum_elements(
            element, "ChargingFacilities", "ChargingFacility", self.charging_facilities
        )
        add_enum_elements(element, "ChargingModes", "ChargingMode", self.charging_modes)
        add_enum_elements(
            element,
            "AuthenticationModes",
            "AuthenticationMode",
            self.authentication_modes,
            required=True,
        )
        add_optional_element(element, EVSE_DATA.tag("MaxCapacity"), self.max_capacity)
        add_enum_elements(
            element, "PaymentOptions", "PaymentOption", self.payment_options
        )
        add_enum_elements(
            element,
            "ValueAddedServices",
            "ValueAddedService",
            self.value_added_services,
            required=True,
        )
        add_element(
            element, EVSE_DATA.tag("Accessibility"), enum_as_text(self.accessibility)
        )
        add_element(element, EVSE_DATA.tag("HotlinePhoneNum"), self.hotline_phone_num)
        add_optional_element(
            element, EVSE_DATA.tag("AdditionalInfo"), self.additional_info
        )
        add_optional_element(
            element, EVSE_DATA.tag("EnAdditionalInfo"), self.en_additional_info
        )
        if self.geo_charging_point_entrance is not None:
            element.append(
                self.geo_charging_point_entrance.to_xml(
                    EVSE_DATA.tag("GeoChargingPointEntrance"), geo_format
                )
            )
        add_element(
            element, EVSE_DATA.tag("IsOpen24Hours"), bool_as_text(self.is_open_24_hours)
        )
        add_optional_element(element, EVSE_DATA.tag("OpeningTime"), self.opening_time)
        add_optional_element(
            element, EVSE_DATA.tag("HubOperatorID"), self.hub_operator_id
        )
        add_optional_element(
            element, EVSE_DATA.tag("ClearinghouseID"), self.clearinghouse_id
        )
        add_element(
            element,
            EVSE_DATA.tag("IsHubjectCompatible"),
            bool_as_text(self.is_hubject_compatible),
        )
        add_element(
            element, EVSE_DATA.tag("DynamicInfoAvailable"), self.dynamic_info_available
        )
        return element


class OperatorEVSEData(BaseModel):
    operator_id: OperatorId = Field(..., alias="OperatorID")
    operator_name: OptionalText = Field(None, max_length=100, alias="OperatorName")
    evse_data_records: Tuple[EVSEDataRecord, ...] = Field(
        (), alias="EvseDataRecord"
    )

    @classmethod
    def from_xml(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> "OperatorEVSEData":
        return cls(
            operator_id=map_value_or_fail(
                element, EVSE_DATA.tag("OperatorID"), OperatorId.parse
            ),
            operator_name=map_value_or_none(element, EVSE_DATA.tag("OperatorName")),
            evse_data_records=map_elements(
                element,
                None,
                EVSE_DATA.tag("EvseDataRecord"),
                lambda item: EVSEDataRecord.from_xml(item, on_exception),
                on_exception,
            ),
        )

    def to_xml(
        self,
        tag: str = EVSE_DATA.tag("OperatorEvseData"),
        geo_format: GeoCoordinatesResponseFormat = (
            GeoCoordinatesResponseFormat.DECIMAL_DEGREE
        ),
    ) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, EVSE_DATA.tag("OperatorID"), self.operator_id)
        add_optional_element(element, EVSE_DATA.tag("OperatorName"), self.operator_name)
        for record in self.evse_data_records:
            element.append(record.to_xml(geo_format=geo_format))
        return element


class EVSEStatusRecord(BaseModel):
    evse_id: EVSEId = Field(..., alias="EvseId")
    evse_status: EVSEStatusType = Field(..., alias="EvseStatus")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "EVSEStatusRecord":
        return cls(
            evse_id=map_value_or_fail(
                element, EVSE_STATUS.tag("EvseId"), EVSEId.parse
            ),
            evse_status=map_value_or_fail(
                element, EVSE_STATUS.tag("EvseStatus"), enum_parser(EVSEStatusType)
            ),
        )

    def to_xml(self, tag: str = EVSE_STATUS.tag("EvseStatusRecord")) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, EVSE_STATUS.tag("EvseId"), self.evse_id)
        add_element(
            element, EVSE_STATUS.tag("EvseStatus"), enum_as_text(self.evse_status)
        )
        return element


class OperatorEVSEStatus(BaseModel):
    operator_id: OperatorId = Field(..., alias="OperatorID")
    operator_name: OptionalText = Field(None, max_length=100, alias="OperatorName")
    evse_status_records: Tuple[EVSEStatusRecord, ...] = Field(
        (), alias="EvseStatusRecord"
    )

    @classmethod
    def from_xml(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> "OperatorEVSEStatus":
        return cls(
            operator_id=map_value_or_fail(
                element, EVSE_STATUS.tag("OperatorID"), OperatorId.parse
            ),
            operator_name=map_value_or_none(
                element, EVSE_STATUS.tag("OperatorName")
            ),
            evse_status_records=map_elements(
                element,
                None,
                EVSE_STATUS.tag("EvseStatusRecord"),
                EVSEStatusRecord.from_xml,
                on_exception,
            ),
        )

    def to_xml(self, tag: str = EVSE_STATUS.tag("OperatorEvseStatus")) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, EVSE_STATUS.tag("OperatorID"), self.operator_id)
        add_optional_element(
            element, EVSE_STATUS.tag("OperatorName"), self.operator_name
        )
        for record in self.evse_status_records:
            element.append(record.to_xml())
        return element


class EVSEMatch(BaseModel):
    # Kilometers from the search center
    distance: float = Field(..., ge=0, alias="Distance")
    evse: EVSEDataRecord = Field(..., alias="EVSE")

    @classmethod
    def from_xml(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> "EVSEMatch":
        return cls(
            distance=map_value_or_fail(element, EVSE_SEARCH.tag("Distance"), float),
            evse=map_element_or_fail(
                element,
                EVSE_SEARCH.tag("EVSE"),
                lambda item: EVSEDataRecord.from_xml(item, on_exception),
            ),
        )

    def to_xml(self, tag: str = EVSE_SEARCH.tag("EvseMatch")) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, EVSE_SEARCH.tag("Distance"), decimal_as_text(self.distance))
        element.append(self.evse.to_xml(EVSE_SEARCH.tag("EVSE")))
        return element


class AuthenticationDataRecord(BaseModel):
    identification: Identification = Field(..., alias="Identification")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "AuthenticationDataRecord":
        return cls(
            identification=map_identification(
                element, AUTH_DATA.tag("Identification")
            )
        )

    def to_xml(
        self, tag: str = AUTH_DATA.tag("AuthenticationDataRecord")
    ) -> ET.Element:
        element = ET.Element(tag)
        element.append(self.identification.to_xml(AUTH_DATA.tag("Identification")))
        return element


class ProviderAuthenticationData(BaseModel):
    provider_id: ProviderId = Field(..., alias="ProviderID")
    authentication_data_records: Tuple[AuthenticationDataRecord, ...] = Field(
        (), alias="AuthenticationDataRecord"
    )

    @classmethod
    def from_xml(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> "ProviderAuthenticationData":
        return cls(
            provider_id=map_value_or_fail(
                element, AUTH_DATA.tag("ProviderID"), ProviderId.parse
            ),
            authentication_data_records=map_elements(
                element,
                None,
                AUTH_DATA.tag("AuthenticationDataRecord"),
                AuthenticationDataRecord.from_xml,
                on_exception,
            ),
        )

    def to_xml(
        self, tag: str = AUTH_DATA.tag("ProviderAuthenticationData")
    ) -> ET.Element:
        element = ET.Element(tag)
        add_element(element, AUTH_DATA.tag("ProviderID"), self.provider_id)
        for record in self.authentication_data_records:
            element.append(record.to_xml())
        return element


class ChargeDetailRecord(BaseModel):
    """
    The billing relevant facts of a finished charging session. The same
    shape is sent by an operator (eRoamingChargeDetailRecord) and returned
    in bulk to a provider (eRoamingChargeDetailRecords).
    """

    session_id: SessionId = Field(..., alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )
    evse_id: EVSEId = Field(..., alias="EvseID")
    identification: Identification = Field(..., alias="Identification")
    charging_start: Optional[datetime] = Field(None, alias="ChargingStart")
    charging_end: Optional[datetime] = Field(None, alias="ChargingEnd")
    session_start: datetime = Field(..., alias="SessionStart")
    session_end: datetime = Field(..., alias="SessionEnd")
    # kWh
    meter_value_start: Optional[float] = Field(None, alias="MeterValueStart")
    meter_value_end: Optional[float] = Field(None, alias="MeterValueEnd")
    meter_values_in_between: Tuple[float, ...] = Field(
        (), alias="MeterValueInBetween"
    )
    consumed_energy: Optional[float] = Field(None, ge=0, alias="ConsumedEnergy")
    metering_signature: OptionalText = Field(
        None, max_length=200, alias="MeteringSignature"
    )
    hub_operator_id: Optional[HubOperatorId] = Field(None, alias="HubOperatorID")
    hub_provider_id: Optional[HubProviderId] = Field(None, alias="HubProviderID")

    @model_validator(mode="after")
    def validate_session_times(self):
        if self.session_end < self.session_start:
            raise ValueError(
                f"SessionEnd {self.session_end} lies before "
                f"SessionStart {self.session_start}"
            )
        if (
            self.charging_start is not None
            and self.charging_end is not None
            and self.charging_end < self.charging_start
        ):
            raise ValueError(
                f"ChargingEnd {self.charging_end} lies before "
                f"ChargingStart {self.charging_start}"
            )
        return self

    @classmethod
    def map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> dict:
        """
        The field values read from an eRoamingChargeDetailRecord element.
        Meter values that are not numbers are handed to on_exception.
        """
        return dict(
            session_id=map_value_or_fail(
                element, AUTHORIZATION.tag("SessionID"), SessionId.parse
            ),
            partner_session_id=map_value_or_none(
                element, AUTHORIZATION.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
            partner_product_id=map_value_or_none(
                element, AUTHORIZATION.tag("PartnerProductID"), PartnerProductId.parse
            ),
            evse_id=map_value_or_fail(
                element, AUTHORIZATION.tag("EvseID"), EVSEId.parse
            ),
            identification=map_identification(
                element, AUTHORIZATION.tag("Identification")
            ),
            charging_start=map_value_or_none(
                element, AUTHORIZATION.tag("ChargingStart"), parse_datetime
            ),
            charging_end=map_value_or_none(
                element, AUTHORIZATION.tag("ChargingEnd"), parse_datetime
            ),
            session_start=map_value_or_fail(
                element, AUTHORIZATION.tag("SessionStart"), parse_datetime
            ),
            session_end=map_value_or_fail(
                element, AUTHORIZATION.tag("SessionEnd"), parse_datetime
            ),
            meter_value_start=map_value_or_none(
                element, AUTHORIZATION.tag("MeterValueStart"), float
            ),
            meter_value_end=map_value_or_none(
                element, AUTHORIZATION.tag("MeterValueEnd"), float
            ),
            meter_values_in_between=map_values(
                element,
                AUTHORIZATION.tag("MeterValueInBetween"),
                AUTHORIZATION.tag("MeterValue"),
                float,
                on_exception,
            ),
            consumed_energy=map_value_or_none(
                element, AUTHORIZATION.tag("ConsumedEnergy"), float
            ),
            metering_signature=map_value_or_none(
                element, AUTHORIZATION.tag("MeteringSignature")
            ),
            hub_operator_id=map_value_or_none(
                element, AUTHORIZATION.tag("HubOperatorID"), HubOperatorId.parse
            ),
            hub_provider_id=map_value_or_none(
                element, AUTHORIZATION.tag("HubProviderID"), HubProviderId.parse
            ),
        )

    @classmethod
    def from_xml(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback] = None
    ) -> "ChargeDetailRecord":
        return cls(**cls.map_fields(element, on_exception))

    def fill_xml(self, element: ET.Element) -> ET.Element:
        """Appends the record's elements to an eRoamingChargeDetailRecord"""
        add_element(element, AUTHORIZATION.tag("SessionID"), self.session_id)
        add_optional_element(
            element, AUTHORIZATION.tag("PartnerSessionID"), self.partner_session_id
        )
        add_optional_element(
            element, AUTHORIZATION.tag("PartnerProductID"), self.partner_product_id
        )
        add_element(element, AUTHORIZATION.tag("EvseID"), self.evse_id)
        element.append(
            self.identification.to_xml(AUTHORIZATION.tag("Identification"))
        )
        add_optional_element(
            element,
            AUTHORIZATION.tag("ChargingStart"),
            self.charging_start,
            datetime_as_text,
        )
        add_optional_element(
            element, AUTHORIZATION.tag("ChargingEnd"), self.charging_end, datetime_as_text
        )
        add_element(
            element,
            AUTHORIZATION.tag("SessionStart"),
            datetime_as_text(self.session_start),
        )
        add_element(
            element, AUTHORIZATION.tag("SessionEnd"), datetime_as_text(self.session_end)
        )
        add_optional_element(
            element,
            AUTHORIZATION.tag("MeterValueStart"),
            self.meter_value_start,
            decimal_as_text,
        )
        add_optional_element(
            element,
            AUTHORIZATION.tag("MeterValueEnd"),
            self.meter_value_end,
            decimal_as_text,
        )
        if self.meter_values_in_between:
            add_elements(
                element,
                AUTHORIZATION.tag("MeterValueInBetween"),
                AUTHORIZATION.tag("MeterValue"),
                self.meter_values_in_between,
                decimal_as_text,
            )
        add_optional_element(
            element,
            AUTHORIZATION.tag("ConsumedEnergy"),
            self.consumed_energy,
            decimal_as_text,
        )
        add_optional_element(
            element, AUTHORIZATION.tag("MeteringSignature"), self.metering_signature
        )
        add_optional_element(
            element, AUTHORIZATION.tag("HubOperatorID"), self.hub_operator_id
        )
        add_optional_element(
            element, AUTHORIZATION.tag("HubProviderID"), self.hub_provider_id
        )
        return element

    def to_xml(
        self, tag: str = AUTHORIZATION.tag("eRoamingChargeDetailRecord")
    ) -> ET.Element:
        return self.fill_xml(ET.Element(tag))
