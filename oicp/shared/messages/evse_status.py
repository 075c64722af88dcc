"""
The EVSE status operations: a provider pulls the dynamic status of EVSEs
(all of them, around a search center, or a list of EVSE IDs) and an
operator pushes status updates of its own EVSEs.
"""

from typing import Any, Dict, Optional, Tuple
from xml.etree import ElementTree as ET

from pydantic import Field, field_validator

from oicp.shared.messages.base import ARequest, AResponse
from oicp.shared.messages.datatypes import SearchCenter, StatusCode
from oicp.shared.messages.enums import (
    EVSE_IDS_MAX,
    ActionType,
    EVSEStatusType,
    Namespace,
    enum_as_text,
)
from oicp.shared.messages.identifiers import EVSEId, ProviderId
from oicp.shared.messages.records import (
    EVSEStatusRecord,
    OperatorEVSEStatus,
    enum_parser,
)
from oicp.shared.validators import validate_collection_size
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    map_element,
    map_element_or_fail,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    map_values_or_fail,
)

EVSE_STATUS = Namespace.EVSE_STATUS


class PullEVSEStatusRequest(ARequest):
    """
    Pulls the status of all EVSEs, optionally only those within the radius of
    a search center and only those in a given status
    """

    root_tag = EVSE_STATUS.tag("eRoamingPullEvseStatus")

    provider_id: ProviderId = Field(..., alias="ProviderID")
    search_center: Optional[SearchCenter] = Field(None, alias="SearchCenter")
    evse_status: Optional[EVSEStatusType] = Field(None, alias="EvseStatus")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            provider_id=map_value_or_fail(
                element, EVSE_STATUS.tag("ProviderID"), ProviderId.parse
            ),
            search_center=map_element(
                element, EVSE_STATUS.tag("SearchCenter"), SearchCenter.from_xml
            ),
            evse_status=map_value_or_none(
                element, EVSE_STATUS.tag("EvseStatus"), enum_parser(EVSEStatusType)
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, EVSE_STATUS.tag("ProviderID"), self.provider_id)
        if self.search_center is not None:
            element.append(self.search_center.to_xml(EVSE_STATUS.tag("SearchCenter")))
        if self.evse_status is not None:
            add_element(
                element, EVSE_STATUS.tag("EvseStatus"), enum_as_text(self.evse_status)
            )
        return element


class PullEVSEStatusByIdRequest(ARequest):
    """Pulls the status of up to 100 EVSEs given by their IDs"""

    root_tag = EVSE_STATUS.tag("eRoamingPullEvseStatusById")

    provider_id: ProviderId = Field(..., alias="ProviderID")
    evse_ids: Tuple[EVSEId, ...] = Field(..., alias="EvseId")

    @field_validator("evse_ids")
    @classmethod
    def validate_evse_ids(cls, value):
        validate_collection_size("EvseId", value, 1, EVSE_IDS_MAX)
        return value

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            provider_id=map_value_or_fail(
                element, EVSE_STATUS.tag("ProviderID"), ProviderId.parse
            ),
            evse_ids=map_values_or_fail(
                element, None, EVSE_STATUS.tag("EvseId"), EVSEId.parse
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, EVSE_STATUS.tag("ProviderID"), self.provider_id)
        for evse_id in self.evse_ids:
            add_element(element, EVSE_STATUS.tag("EvseId"), evse_id)
        return element


class EVSEStatusResponse(AResponse):
    root_tag = EVSE_STATUS.tag("eRoamingEvseStatus")

    request: Optional[PullEVSEStatusRequest] = Field(None, exclude=True)
    operator_evse_statuses: Tuple[OperatorEVSEStatus, ...] = Field(
        (), alias="EvseStatuses"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            operator_evse_statuses=map_elements(
                element,
                EVSE_STATUS.tag("EvseStatuses"),
                EVSE_STATUS.tag("OperatorEvseStatus"),
                lambda item: OperatorEVSEStatus.from_xml(item, on_exception),
                on_exception,
            ),
            status_code=map_element(
                element, EVSE_STATUS.tag("StatusCode"), StatusCode.from_xml
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        statuses = add_element(element, EVSE_STATUS.tag("EvseStatuses"))
        for operator_evse_status in self.operator_evse_statuses:
            statuses.append(operator_evse_status.to_xml())
        if self.status_code is not None:
            element.append(self.status_code.to_xml(EVSE_STATUS.tag("StatusCode")))
        return element


class EVSEStatusByIdResponse(AResponse):
    root_tag = EVSE_STATUS.tag("eRoamingEvseStatusById")

    request: Optional[PullEVSEStatusByIdRequest] = Field(None, exclude=True)
    evse_status_records: Tuple[EVSEStatusRecord, ...] = Field(
        (), alias="EvseStatusRecords"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            evse_status_records=map_elements(
                element,
                EVSE_STATUS.tag("EvseStatusRecords"),
                EVSE_STATUS.tag("EvseStatusRecord"),
                EVSEStatusRecord.from_xml,
                on_exception,
            ),
            status_code=map_element(
                element, EVSE_STATUS.tag("StatusCode"), StatusCode.from_xml
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        if self.evse_status_records:
            records = add_element(element, EVSE_STATUS.tag("EvseStatusRecords"))
            for record in self.evse_status_records:
                records.append(record.to_xml())
        if self.status_code is not None:
            element.append(self.status_code.to_xml(EVSE_STATUS.tag("StatusCode")))
        return element


class PushEVSEStatusRequest(ARequest):
    """An operator uploads (full load, update, insert or delete) EVSE states"""

    root_tag = EVSE_STATUS.tag("eRoamingPushEvseStatus")

    action_type: ActionType = Field(..., alias="ActionType")
    operator_evse_status: OperatorEVSEStatus = Field(
        ..., alias="OperatorEvseStatus"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            action_type=map_value_or_fail(
                element, EVSE_STATUS.tag("ActionType"), enum_parser(ActionType)
            ),
            operator_evse_status=map_element_or_fail(
                element,
                EVSE_STATUS.tag("OperatorEvseStatus"),
                lambda item: OperatorEVSEStatus.from_xml(item, on_exception),
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(
            element, EVSE_STATUS.tag("ActionType"), enum_as_text(self.action_type)
        )
        element.append(self.operator_evse_status.to_xml())
        return element
