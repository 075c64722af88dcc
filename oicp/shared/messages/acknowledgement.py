from typing import Any, Dict, Optional
from xml.etree import ElementTree as ET

from pydantic import Field

from oicp.shared.messages.base import ARequest, AResponse
from oicp.shared.messages.datatypes import StatusCode
from oicp.shared.messages.enums import Namespace, StatusCodes
from oicp.shared.messages.identifiers import PartnerSessionId, SessionId
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    add_optional_element,
    bool_as_text,
    map_element_or_fail,
    map_value_or_fail,
    map_value_or_none,
    parse_bool,
)

CT = Namespace.COMMON_TYPES


def _negative(code: StatusCodes, default_description: str):
    def constructor(
        cls,
        request: Optional[ARequest] = None,
        description: Optional[str] = default_description,
        additional_info: Optional[str] = None,
        session_id: Optional[str] = None,
        partner_session_id: Optional[str] = None,
        custom_data: Optional[Dict[str, Any]] = None,
    ) -> "Acknowledgement":
        return cls(
            request=request,
            result=False,
            status_code=StatusCode(
                code=code, description=description, additional_info=additional_info
            ),
            session_id=session_id,
            partner_session_id=partner_session_id,
            custom_data=custom_data or {},
        )

    constructor.__doc__ = (
        f"Negative acknowledgement with status code {code.value:03d} "
        f"({code.name})"
    )
    return classmethod(constructor)


class Acknowledgement(AResponse):
    """
    The generic response of OICP operations that only need to tell whether
    they were accepted: remote start/stop, reservations, pushing EVSE data,
    status or authentication data and sending charge detail records.
    """

    root_tag = CT.tag("eRoamingAcknowledgement")

    result: bool = Field(..., alias="Result")
    status_code: StatusCode = Field(..., alias="StatusCode")
    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )

    @classmethod
    def _empty_payload(cls) -> Dict[str, Any]:
        return {"result": False}

    @classmethod
    def success(
        cls,
        request: Optional[ARequest] = None,
        session_id: Optional[str] = None,
        partner_session_id: Optional[str] = None,
        description: Optional[str] = None,
        additional_info: Optional[str] = None,
        custom_data: Optional[Dict[str, Any]] = None,
    ) -> "Acknowledgement":
        return cls(
            request=request,
            result=True,
            status_code=StatusCode(
                code=StatusCodes.SUCCESS,
                description=description,
                additional_info=additional_info,
            ),
            session_id=session_id,
            partner_session_id=partner_session_id,
            custom_data=custom_data or {},
        )

    data_error = _negative(StatusCodes.DATA_ERROR, "Data Error!")
    system_error = _negative(StatusCodes.SYSTEM_ERROR, "System Error!")
    service_not_available = _negative(
        StatusCodes.SERVICE_NOT_AVAILABLE, "Service not available!"
    )
    session_is_invalid = _negative(StatusCodes.SESSION_IS_INVALID, "Session is invalid")
    communication_to_evse_failed = _negative(
        StatusCodes.COMMUNICATION_TO_EVSE_FAILED, "Communication to EVSE failed!"
    )
    no_ev_connected_to_evse = _negative(
        StatusCodes.NO_EV_CONNECTED_TO_EVSE, "No EV connected to EVSE!"
    )
    evse_already_reserved = _negative(
        StatusCodes.EVSE_ALREADY_RESERVED, "EVSE already reserved!"
    )
    evse_already_in_use_wrong_token = _negative(
        StatusCodes.EVSE_ALREADY_IN_USE_WRONG_TOKEN, "EVSE is already in use!"
    )
    unknown_evse_id = _negative(StatusCodes.UNKNOWN_EVSE_ID, "Unknown EVSE ID!")
    evse_out_of_service = _negative(
        StatusCodes.EVSE_OUT_OF_SERVICE, "EVSE out of service!"
    )
    no_valid_contract = _negative(StatusCodes.NO_VALID_CONTRACT, "No valid contract!")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            result=map_value_or_fail(element, CT.tag("Result"), parse_bool),
            status_code=map_element_or_fail(
                element, CT.tag("StatusCode"), StatusCode.from_xml
            ),
            session_id=map_value_or_none(
                element, CT.tag("SessionID"), SessionId.parse
            ),
            partner_session_id=map_value_or_none(
                element, CT.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, CT.tag("Result"), bool_as_text(self.result))
        element.append(self.status_code.to_xml(CT.tag("StatusCode")))
        add_optional_element(element, CT.tag("SessionID"), self.session_id)
        add_optional_element(
            element, CT.tag("PartnerSessionID"), self.partner_session_id
        )
        return element
