"""
The EVSE data operations: a provider pulls the static EVSE data of all
operators (optionally around a search center or changed since its last
call), an operator pushes the data of its own EVSEs.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from xml.etree import ElementTree as ET

from pydantic import Field

from oicp.shared.messages.base import ARequest, AResponse
from oicp.shared.messages.datatypes import SearchCenter, StatusCode
from oicp.shared.messages.enums import (
    ActionType,
    GeoCoordinatesResponseFormat,
    Namespace,
    enum_as_text,
)
from oicp.shared.messages.identifiers import ProviderId
from oicp.shared.messages.records import OperatorEVSEData, enum_parser
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    add_optional_element,
    datetime_as_text,
    map_element,
    map_element_or_fail,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    parse_datetime,
)

EVSE_DATA = Namespace.EVSE_DATA


class PullEVSEDataRequest(ARequest):
    root_tag = EVSE_DATA.tag("eRoamingPullEvseData")

    provider_id: ProviderId = Field(..., alias="ProviderID")
    search_center: Optional[SearchCenter] = Field(None, alias="SearchCenter")
    # Only EVSE data records changed since then
    last_call: Optional[datetime] = Field(None, alias="LastCall")
    geo_coordinates_response_format: GeoCoordinatesResponseFormat = Field(
        GeoCoordinatesResponseFormat.DECIMAL_DEGREE,
        alias="GeoCoordinatesResponseFormat",
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            provider_id=map_value_or_fail(
                element, EVSE_DATA.tag("ProviderID"), ProviderId.parse
            ),
            search_center=map_element(
                element, EVSE_DATA.tag("SearchCenter"), SearchCenter.from_xml
            ),
            last_call=map_value_or_none(
                element, EVSE_DATA.tag("LastCall"), parse_datetime
            ),
            geo_coordinates_response_format=map_value_or_fail(
                element,
                EVSE_DATA.tag("GeoCoordinatesResponseFormat"),
                enum_parser(GeoCoordinatesResponseFormat),
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, EVSE_DATA.tag("ProviderID"), self.provider_id)
        if self.search_center is not None:
            element.append(self.search_center.to_xml(EVSE_DATA.tag("SearchCenter")))
        add_optional_element(
            element, EVSE_DATA.tag("LastCall"), self.last_call, datetime_as_text
        )
        add_element(
            element,
            EVSE_DATA.tag("GeoCoordinatesResponseFormat"),
            enum_as_text(self.geo_coordinates_response_format),
        )
        return element


class EVSEDataResponse(AResponse):
    root_tag = EVSE_DATA.tag("eRoamingEvseData")

    request: Optional[PullEVSEDataRequest] = Field(None, exclude=True)
    operator_evse_data: Tuple[OperatorEVSEData, ...] = Field((), alias="EvseData")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            operator_evse_data=map_elements(
                element,
                EVSE_DATA.tag("EvseData"),
                EVSE_DATA.tag("OperatorEvseData"),
                lambda item: OperatorEVSEData.from_xml(item, on_exception),
                on_exception,
            ),
            status_code=map_element(
                element, EVSE_DATA.tag("StatusCode"), StatusCode.from_xml
            ),
        )

    def _to_xml(self) -> ET.Element:
        # Coordinates are written in the format the request asked for
        geo_format = (
            self.request.geo_coordinates_response_format
            if self.request is not None
            else GeoCoordinatesResponseFormat.DECIMAL_DEGREE
        )
        element = ET.Element(self.root_tag)
        evse_data = ET.SubElement(element, EVSE_DATA.tag("EvseData"))
        for operator_evse_data in self.operator_evse_data:
            evse_data.append(operator_evse_data.to_xml(geo_format=geo_format))
        if self.status_code is not None:
            element.append(self.status_code.to_xml(EVSE_DATA.tag("StatusCode")))
        return element


class PushEVSEDataRequest(ARequest):
    """An operator uploads (full load, update, insert or delete) EVSE data"""

    root_tag = EVSE_DATA.tag("eRoamingPushEvseData")

    action_type: ActionType = Field(..., alias="ActionType")
    operator_evse_data: OperatorEVSEData = Field(..., alias="OperatorEvseData")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            action_type=map_value_or_fail(
                element, EVSE_DATA.tag("ActionType"), enum_parser(ActionType)
            ),
            operator_evse_data=map_element_or_fail(
                element,
                EVSE_DATA.tag("OperatorEvseData"),
                lambda item: OperatorEVSEData.from_xml(item, on_exception),
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(
            element, EVSE_DATA.tag("ActionType"), enum_as_text(self.action_type)
        )
        element.append(self.operator_evse_data.to_xml())
        return element
