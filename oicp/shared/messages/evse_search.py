from typing import Any, Dict, Optional, Tuple
from xml.etree import ElementTree as ET

from pydantic import Field, model_validator

from oicp.shared.messages.base import ARequest, AResponse
from oicp.shared.messages.datatypes import Address, GeoCoordinates, StatusCode
from oicp.shared.messages.enums import (
    ChargingFacility,
    Namespace,
    PlugType,
    enum_as_text,
)
from oicp.shared.messages.identifiers import ProviderId
from oicp.shared.messages.records import EVSEMatch, enum_parser
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    decimal_as_text,
    map_element,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
)

EVSE_SEARCH = Namespace.EVSE_SEARCH


class SearchEVSERequest(ARequest):
    """
    Searches EVSEs around a position or at an address, optionally only
    those offering a given plug or charging facility
    """

    root_tag = EVSE_SEARCH.tag("eRoamingSearchEvse")

    geo_coordinates: Optional[GeoCoordinates] = Field(None, alias="GeoCoordinates")
    address: Optional[Address] = Field(None, alias="Address")
    provider_id: ProviderId = Field(..., alias="ProviderID")
    # Kilometers
    range: float = Field(..., gt=0, alias="Range")
    plug: Optional[PlugType] = Field(None, alias="Plug")
    charging_facility: Optional[ChargingFacility] = Field(
        None, alias="ChargingFacility"
    )

    @model_validator(mode="after")
    def validate_search_location(self):
        if self.geo_coordinates is None and self.address is None:
            raise ValueError(
                "A search needs at least one of GeoCoordinates or Address"
            )
        return self

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            geo_coordinates=map_element(
                element, EVSE_SEARCH.tag("GeoCoordinates"), GeoCoordinates.from_xml
            ),
            address=map_element(element, EVSE_SEARCH.tag("Address"), Address.from_xml),
            provider_id=map_value_or_fail(
                element, EVSE_SEARCH.tag("ProviderID"), ProviderId.parse
            ),
            range=map_value_or_fail(element, EVSE_SEARCH.tag("Range"), float),
            plug=map_value_or_none(
                element, EVSE_SEARCH.tag("Plug"), enum_parser(PlugType)
            ),
            charging_facility=map_value_or_none(
                element,
                EVSE_SEARCH.tag("ChargingFacility"),
                enum_parser(ChargingFacility),
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        if self.geo_coordinates is not None:
            element.append(
                self.geo_coordinates.to_xml(EVSE_SEARCH.tag("GeoCoordinates"))
            )
        if self.address is not None:
            element.append(self.address.to_xml(EVSE_SEARCH.tag("Address")))
        add_element(element, EVSE_SEARCH.tag("ProviderID"), self.provider_id)
        add_element(element, EVSE_SEARCH.tag("Range"), decimal_as_text(self.range))
        if self.plug is not None:
            add_element(element, EVSE_SEARCH.tag("Plug"), enum_as_text(self.plug))
        if self.charging_facility is not None:
            add_element(
                element,
                EVSE_SEARCH.tag("ChargingFacility"),
                enum_as_text(self.charging_facility),
            )
        return element


class EVSESearchResultResponse(AResponse):
    root_tag = EVSE_SEARCH.tag("eRoamingEvseSearchResult")

    request: Optional[SearchEVSERequest] = Field(None, exclude=True)
    evse_matches: Tuple[EVSEMatch, ...] = Field((), alias="EvseMatches")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            evse_matches=map_elements(
                element,
                EVSE_SEARCH.tag("EvseMatches"),
                EVSE_SEARCH.tag("EvseMatch"),
                lambda item: EVSEMatch.from_xml(item, on_exception),
                on_exception,
            ),
            status_code=map_element(
                element, EVSE_SEARCH.tag("StatusCode"), StatusCode.from_xml
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        if self.evse_matches:
            matches = add_element(element, EVSE_SEARCH.tag("EvseMatches"))
            for match in self.evse_matches:
                matches.append(match.to_xml())
        if self.status_code is not None:
            element.append(self.status_code.to_xml(EVSE_SEARCH.tag("StatusCode")))
        return element
