"""
The mobile authorization operations: a customer scans the QR code of an
EVSE with a smartphone app, the provider asks for authorization and then
starts or stops the session remotely.
"""

from typing import Any, Dict, Optional
from xml.etree import ElementTree as ET

from pydantic import Field

from oicp.shared.messages.base import ARequest, AResponse
from oicp.shared.messages.datatypes import (
    Address,
    GeoCoordinates,
    OptionalText,
    QRCodeIdentification,
    StatusCode,
)
from oicp.shared.messages.enums import (
    AuthorizationStatusType,
    Namespace,
    enum_as_text,
)
from oicp.shared.messages.identifiers import EVSEId, PartnerProductId, SessionId
from oicp.shared.messages.records import enum_parser
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    add_optional_element,
    bool_as_text,
    map_element,
    map_element_or_fail,
    map_value_or_fail,
    map_value_or_none,
    parse_bool,
)

MOBILE = Namespace.MOBILE_AUTHORIZATION


class MobileAuthorizeStartRequest(ARequest):
    root_tag = MOBILE.tag("eRoamingMobileAuthorizeStart")

    evse_id: EVSEId = Field(..., alias="EvseID")
    qr_code_identification: QRCodeIdentification = Field(
        ..., alias="QRCodeIdentification"
    )
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )
    get_new_session: Optional[bool] = Field(None, alias="GetNewSession")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            evse_id=map_value_or_fail(element, MOBILE.tag("EvseID"), EVSEId.parse),
            qr_code_identification=map_element_or_fail(
                element,
                MOBILE.tag("QRCodeIdentification"),
                QRCodeIdentification.from_xml,
            ),
            partner_product_id=map_value_or_none(
                element, MOBILE.tag("PartnerProductID"), PartnerProductId.parse
            ),
            get_new_session=map_value_or_none(
                element, MOBILE.tag("GetNewSession"), parse_bool
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, MOBILE.tag("EvseID"), self.evse_id)
        element.append(
            self.qr_code_identification.to_xml(MOBILE.tag("QRCodeIdentification"))
        )
        add_optional_element(
            element, MOBILE.tag("PartnerProductID"), self.partner_product_id
        )
        add_optional_element(
            element, MOBILE.tag("GetNewSession"), self.get_new_session, bool_as_text
        )
        return element


class MobileAuthorizationStartResponse(AResponse):
    """
    The authorization decision together with the details of the charging
    station the app shows to the customer. Negative answers come without
    the station details, so GeoCoordinates is optional here.
    """

    root_tag = MOBILE.tag("eRoamingMobileAuthorizationStart")

    request: Optional[MobileAuthorizeStartRequest] = Field(None, exclude=True)
    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    authorization_status: AuthorizationStatusType = Field(
        ..., alias="AuthorizationStatus"
    )
    terms_of_use: OptionalText = Field(None, alias="TermsOfUse")
    geo_coordinates: Optional[GeoCoordinates] = Field(None, alias="GeoCoordinates")
    address: Optional[Address] = Field(None, alias="Address")
    additional_info: OptionalText = Field(None, alias="AdditionalInfo")
    en_additional_info: OptionalText = Field(None, alias="EnAdditionalInfo")
    charging_station_name: OptionalText = Field(None, alias="ChargingStationName")
    en_charging_station_name: OptionalText = Field(
        None, alias="EnChargingStationName"
    )

    @classmethod
    def _empty_payload(cls) -> Dict[str, Any]:
        return {"authorization_status": AuthorizationStatusType.NOT_AUTHORIZED}

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            session_id=map_value_or_none(
                element, MOBILE.tag("SessionID"), SessionId.parse
            ),
            authorization_status=map_value_or_fail(
                element,
                MOBILE.tag("AuthorizationStatus"),
                enum_parser(AuthorizationStatusType),
            ),
            status_code=map_element(
                element, MOBILE.tag("StatusCode"), StatusCode.from_xml
            ),
            terms_of_use=map_value_or_none(element, MOBILE.tag("TermsOfUse")),
            geo_coordinates=map_element(
                element, MOBILE.tag("GeoCoordinates"), GeoCoordinates.from_xml
            ),
            address=map_element(element, MOBILE.tag("Address"), Address.from_xml),
            additional_info=map_value_or_none(element, MOBILE.tag("AdditionalInfo")),
            en_additional_info=map_value_or_none(
                element, MOBILE.tag("EnAdditionalInfo")
            ),
            charging_station_name=map_value_or_none(
                element, MOBILE.tag("ChargingStationName")
            ),
            en_charging_station_name=map_value_or_none(
                element, MOBILE.tag("EnChargingStationName")
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_optional_element(element, MOBILE.tag("SessionID"), self.session_id)
        add_element(
            element,
            MOBILE.tag("AuthorizationStatus"),
            enum_as_text(self.authorization_status),
        )
        if self.status_code is not None:
            element.append(self.status_code.to_xml(MOBILE.tag("StatusCode")))
        add_optional_element(element, MOBILE.tag("TermsOfUse"), self.terms_of_use)
        if self.geo_coordinates is not None:
            element.append(self.geo_coordinates.to_xml(MOBILE.tag("GeoCoordinates")))
        if self.address is not None:
            element.append(self.address.to_xml(MOBILE.tag("Address")))
        add_optional_element(
            element, MOBILE.tag("AdditionalInfo"), self.additional_info
        )
        add_optional_element(
            element, MOBILE.tag("EnAdditionalInfo"), self.en_additional_info
        )
        add_optional_element(
            element, MOBILE.tag("ChargingStationName"), self.charging_station_name
        )
        add_optional_element(
            element,
            MOBILE.tag("EnChargingStationName"),
            self.en_charging_station_name,
        )
        return element


class MobileRemoteStartRequest(ARequest):
    root_tag = MOBILE.tag("eRoamingMobileRemoteStart")

    session_id: SessionId = Field(..., alias="SessionID")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            session_id=map_value_or_fail(
                element, MOBILE.tag("SessionID"), SessionId.parse
            )
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, MOBILE.tag("SessionID"), self.session_id)
        return element


class MobileRemoteStopRequest(MobileRemoteStartRequest):
    root_tag = MOBILE.tag("eRoamingMobileRemoteStop")
