"""
The authorization operations.

An e-mobility provider starts and stops charging sessions remotely
(eRoamingAuthorizeRemoteStart/Stop). An operator asks the hub whether a
customer may charge (eRoamingAuthorizeStart/Stop) and reports the finished
session as a charge detail record, which providers later fetch in bulk.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Tuple
from xml.etree import ElementTree as ET

from pydantic import Field, model_validator

from oicp.shared.messages.base import ARequest, AResponse
from oicp.shared.messages.datatypes import (
    Identification,
    StatusCode,
    map_identification,
)
from oicp.shared.messages.enums import (
    AuthorizationStatusType,
    Namespace,
    StatusCodes,
    enum_as_text,
)
from oicp.shared.messages.identifiers import (
    EVSEId,
    OperatorId,
    PartnerProductId,
    PartnerSessionId,
    ProviderId,
    SessionId,
)
from oicp.shared.messages.records import ChargeDetailRecord, enum_parser
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    add_optional_element,
    datetime_as_text,
    map_element,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    parse_datetime,
)

AUTHORIZATION = Namespace.AUTHORIZATION


class RemoteStartRequest(ARequest):
    """
    The fields shared by remote start and remote reservation start, the two
    operations only differ in their namespace
    """

    namespace: ClassVar[Namespace] = AUTHORIZATION

    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )
    provider_id: ProviderId = Field(..., alias="ProviderID")
    evse_id: EVSEId = Field(..., alias="EVSEID")
    identification: Identification = Field(..., alias="Identification")
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        ns = cls.namespace
        return dict(
            session_id=map_value_or_none(element, ns.tag("SessionID"), SessionId.parse),
            partner_session_id=map_value_or_none(
                element, ns.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
            provider_id=map_value_or_fail(
                element, ns.tag("ProviderID"), ProviderId.parse
            ),
            evse_id=map_value_or_fail(element, ns.tag("EVSEID"), EVSEId.parse),
            identification=map_identification(element, ns.tag("Identification")),
            partner_product_id=map_value_or_none(
                element, ns.tag("PartnerProductID"), PartnerProductId.parse
            ),
        )

    def _to_xml(self) -> ET.Element:
        ns = self.namespace
        element = ET.Element(self.root_tag)
        add_optional_element(element, ns.tag("SessionID"), self.session_id)
        add_optional_element(
            element, ns.tag("PartnerSessionID"), self.partner_session_id
        )
        add_element(element, ns.tag("ProviderID"), self.provider_id)
        add_element(element, ns.tag("EVSEID"), self.evse_id)
        element.append(self.identification.to_xml(ns.tag("Identification")))
        add_optional_element(
            element, ns.tag("PartnerProductID"), self.partner_product_id
        )
        return element


class RemoteStopRequest(ARequest):
    """The fields shared by remote stop and remote reservation stop"""

    namespace: ClassVar[Namespace] = AUTHORIZATION

    session_id: SessionId = Field(..., alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )
    provider_id: ProviderId = Field(..., alias="ProviderID")
    evse_id: EVSEId = Field(..., alias="EVSEID")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        ns = cls.namespace
        return dict(
            session_id=map_value_or_fail(element, ns.tag("SessionID"), SessionId.parse),
            partner_session_id=map_value_or_none(
                element, ns.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
            provider_id=map_value_or_fail(
                element, ns.tag("ProviderID"), ProviderId.parse
            ),
            evse_id=map_value_or_fail(element, ns.tag("EVSEID"), EVSEId.parse),
        )

    def _to_xml(self) -> ET.Element:
        ns = self.namespace
        element = ET.Element(self.root_tag)
        add_element(element, ns.tag("SessionID"), self.session_id)
        add_optional_element(
            element, ns.tag("PartnerSessionID"), self.partner_session_id
        )
        add_element(element, ns.tag("ProviderID"), self.provider_id)
        add_element(element, ns.tag("EVSEID"), self.evse_id)
        return element


class AuthorizeRemoteStartRequest(RemoteStartRequest):
    root_tag = AUTHORIZATION.tag("eRoamingAuthorizeRemoteStart")


class AuthorizeRemoteStopRequest(RemoteStopRequest):
    root_tag = AUTHORIZATION.tag("eRoamingAuthorizeRemoteStop")


class AuthorizeStartRequest(ARequest):
    """An operator asks whether the presented identification may charge"""

    root_tag = AUTHORIZATION.tag("eRoamingAuthorizeStart")

    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )
    operator_id: OperatorId = Field(..., alias="OperatorID")
    evse_id: Optional[EVSEId] = Field(None, alias="EVSEID")
    identification: Identification = Field(..., alias="Identification")
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            session_id=map_value_or_none(
                element, AUTHORIZATION.tag("SessionID"), SessionId.parse
            ),
            partner_session_id=map_value_or_none(
                element, AUTHORIZATION.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
            operator_id=map_value_or_fail(
                element, AUTHORIZATION.tag("OperatorID"), OperatorId.parse
            ),
            evse_id=map_value_or_none(
                element, AUTHORIZATION.tag("EVSEID"), EVSEId.parse
            ),
            identification=map_identification(
                element, AUTHORIZATION.tag("Identification")
            ),
            partner_product_id=map_value_or_none(
                element, AUTHORIZATION.tag("PartnerProductID"), PartnerProductId.parse
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_optional_element(element, AUTHORIZATION.tag("SessionID"), self.session_id)
        add_optional_element(
            element, AUTHORIZATION.tag("PartnerSessionID"), self.partner_session_id
        )
        add_element(element, AUTHORIZATION.tag("OperatorID"), self.operator_id)
        add_optional_element(element, AUTHORIZATION.tag("EVSEID"), self.evse_id)
        element.append(
            self.identification.to_xml(AUTHORIZATION.tag("Identification"))
        )
        add_optional_element(
            element, AUTHORIZATION.tag("PartnerProductID"), self.partner_product_id
        )
        return element


class AuthorizeStopRequest(ARequest):
    root_tag = AUTHORIZATION.tag("eRoamingAuthorizeStop")

    session_id: SessionId = Field(..., alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )
    operator_id: OperatorId = Field(..., alias="OperatorID")
    evse_id: Optional[EVSEId] = Field(None, alias="EVSEID")
    identification: Identification = Field(..., alias="Identification")

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            session_id=map_value_or_fail(
                element, AUTHORIZATION.tag("SessionID"), SessionId.parse
            ),
            partner_session_id=map_value_or_none(
                element, AUTHORIZATION.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
            operator_id=map_value_or_fail(
                element, AUTHORIZATION.tag("OperatorID"), OperatorId.parse
            ),
            evse_id=map_value_or_none(
                element, AUTHORIZATION.tag("EVSEID"), EVSEId.parse
            ),
            identification=map_identification(
                element, AUTHORIZATION.tag("Identification")
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, AUTHORIZATION.tag("SessionID"), self.session_id)
        add_optional_element(
            element, AUTHORIZATION.tag("PartnerSessionID"), self.partner_session_id
        )
        add_element(element, AUTHORIZATION.tag("OperatorID"), self.operator_id)
        add_optional_element(element, AUTHORIZATION.tag("EVSEID"), self.evse_id)
        element.append(
            self.identification.to_xml(AUTHORIZATION.tag("Identification"))
        )
        return element


class AuthorizationResponse(AResponse):
    """The hub's decision on an eRoamingAuthorizeStart or eRoamingAuthorizeStop"""

    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    partner_session_id: Optional[PartnerSessionId] = Field(
        None, alias="PartnerSessionID"
    )
    provider_id: Optional[ProviderId] = Field(None, alias="ProviderID")
    authorization_status: AuthorizationStatusType = Field(
        ..., alias="AuthorizationStatus"
    )

    @classmethod
    def _empty_payload(cls) -> Dict[str, Any]:
        return {"authorization_status": AuthorizationStatusType.NOT_AUTHORIZED}

    @classmethod
    def authorized(
        cls,
        request: Optional[ARequest] = None,
        session_id: Optional[str] = None,
        partner_session_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        description: Optional[str] = None,
        additional_info: Optional[str] = None,
        **payload,
    ):
        return cls(
            request=request,
            session_id=session_id,
            partner_session_id=partner_session_id,
            provider_id=provider_id,
            authorization_status=AuthorizationStatusType.AUTHORIZED,
            status_code=StatusCode(
                code=StatusCodes.SUCCESS,
                description=description,
                additional_info=additional_info,
            ),
            **payload,
        )

    @classmethod
    def not_authorized(
        cls,
        request: Optional[ARequest],
        code: StatusCodes,
        description: Optional[str] = None,
        additional_info: Optional[str] = None,
        session_id: Optional[str] = None,
        partner_session_id: Optional[str] = None,
        provider_id: Optional[str] = None,
    ):
        return cls(
            request=request,
            session_id=session_id,
            partner_session_id=partner_session_id,
            provider_id=provider_id,
            authorization_status=AuthorizationStatusType.NOT_AUTHORIZED,
            status_code=StatusCode(
                code=code, description=description, additional_info=additional_info
            ),
        )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            session_id=map_value_or_none(
                element, AUTHORIZATION.tag("SessionID"), SessionId.parse
            ),
            partner_session_id=map_value_or_none(
                element, AUTHORIZATION.tag("PartnerSessionID"), PartnerSessionId.parse
            ),
            provider_id=map_value_or_none(
                element, AUTHORIZATION.tag("ProviderID"), ProviderId.parse
            ),
            authorization_status=map_value_or_fail(
                element,
                AUTHORIZATION.tag("AuthorizationStatus"),
                enum_parser(AuthorizationStatusType),
            ),
            status_code=map_element(
                element, AUTHORIZATION.tag("StatusCode"), StatusCode.from_xml
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_optional_element(element, AUTHORIZATION.tag("SessionID"), self.session_id)
        add_optional_element(
            element, AUTHORIZATION.tag("PartnerSessionID"), self.partner_session_id
        )
        add_optional_element(element, AUTHORIZATION.tag("ProviderID"), self.provider_id)
        add_element(
            element,
            AUTHORIZATION.tag("AuthorizationStatus"),
            enum_as_text(self.authorization_status),
        )
        if self.status_code is not None:
            element.append(self.status_code.to_xml(AUTHORIZATION.tag("StatusCode")))
        return element


class AuthorizationStopResponse(AuthorizationResponse):
    root_tag = AUTHORIZATION.tag("eRoamingAuthorizationStop")

    request: Optional[AuthorizeStopRequest] = Field(None, exclude=True)


class AuthorizationStartResponse(AuthorizationResponse):
    """
    The hub's answer to eRoamingAuthorizeStart. Besides the decision it may
    list further identifications that are allowed to stop the session.
    """

    root_tag = AUTHORIZATION.tag("eRoamingAuthorizationStart")

    request: Optional[AuthorizeStartRequest] = Field(None, exclude=True)
    authorization_stop_identifications: Tuple[Identification, ...] = Field(
        (), alias="AuthorizationStopIdentifications"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        fields = super()._map_fields(element, on_exception)
        fields["authorization_stop_identifications"] = map_elements(
            element,
            AUTHORIZATION.tag("AuthorizationStopIdentifications"),
            AUTHORIZATION.tag("Identification"),
            Identification.from_xml,
            on_exception,
        )
        return fields

    def _to_xml(self) -> ET.Element:
        element = super()._to_xml()
        if self.authorization_stop_identifications:
            identifications = ET.SubElement(
                element, AUTHORIZATION.tag("AuthorizationStopIdentifications")
            )
            for identification in self.authorization_stop_identifications:
                identifications.append(
                    identification.to_xml(AUTHORIZATION.tag("Identification"))
                )
        return element


class SendChargeDetailRecordRequest(ARequest):
    """An operator reports a finished charging session"""

    root_tag = AUTHORIZATION.tag("eRoamingChargeDetailRecord")

    charge_detail_record: ChargeDetailRecord = Field(
        ..., alias="ChargeDetailRecord"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            charge_detail_record=ChargeDetailRecord.from_xml(element, on_exception)
        )

    def _to_xml(self) -> ET.Element:
        return self.charge_detail_record.to_xml(self.root_tag)


class GetChargeDetailRecordsRequest(ARequest):
    """A provider fetches the charge detail records of a period"""

    root_tag = AUTHORIZATION.tag("eRoamingGetChargeDetailRecords")

    provider_id: ProviderId = Field(..., alias="ProviderID")
    from_: datetime = Field(..., alias="From")
    to: datetime = Field(..., alias="To")

    @model_validator(mode="after")
    def validate_period(self):
        if self.to < self.from_:
            raise ValueError(f"To {self.to} lies before From {self.from_}")
        return self

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            provider_id=map_value_or_fail(
                element, AUTHORIZATION.tag("ProviderID"), ProviderId.parse
            ),
            from_=map_value_or_fail(element, AUTHORIZATION.tag("From"), parse_datetime),
            to=map_value_or_fail(element, AUTHORIZATION.tag("To"), parse_datetime),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(element, AUTHORIZATION.tag("ProviderID"), self.provider_id)
        add_element(element, AUTHORIZATION.tag("From"), datetime_as_text(self.from_))
        add_element(element, AUTHORIZATION.tag("To"), datetime_as_text(self.to))
        return element


class ChargeDetailRecordsResponse(AResponse):
    root_tag = AUTHORIZATION.tag("eRoamingChargeDetailRecords")

    request: Optional[GetChargeDetailRecordsRequest] = Field(None, exclude=True)
    charge_detail_records: Tuple[ChargeDetailRecord, ...] = Field(
        (), alias="eRoamingChargeDetailRecord"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            charge_detail_records=map_elements(
                element,
                None,
                AUTHORIZATION.tag("eRoamingChargeDetailRecord"),
                lambda item: ChargeDetailRecord.from_xml(item, on_exception),
                on_exception,
            ),
            status_code=map_element(
                element, AUTHORIZATION.tag("StatusCode"), StatusCode.from_xml
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        for record in self.charge_detail_records:
            element.append(record.to_xml())
        if self.status_code is not None:
            element.append(self.status_code.to_xml(AUTHORIZATION.tag("StatusCode")))
        return element
