from typing import Any, Dict, Optional
from xml.etree import ElementTree as ET

from pydantic import Field

from oicp.shared.messages.base import ARequest
from oicp.shared.messages.enums import ActionType, Namespace, enum_as_text
from oicp.shared.messages.records import ProviderAuthenticationData, enum_parser
from oicp.shared.xml_mapping import (
    OnExceptionCallback,
    add_element,
    map_element_or_fail,
    map_value_or_fail,
)

AUTH_DATA = Namespace.AUTHENTICATION_DATA


class PushAuthenticationDataRequest(ARequest):
    """
    A provider uploads the identifications of its customers, so that the hub
    can authorize them offline
    """

    root_tag = AUTH_DATA.tag("eRoamingPushAuthenticationData")

    action_type: ActionType = Field(..., alias="ActionType")
    provider_authentication_data: ProviderAuthenticationData = Field(
        ..., alias="ProviderAuthenticationData"
    )

    @classmethod
    def _map_fields(
        cls, element: ET.Element, on_exception: Optional[OnExceptionCallback]
    ) -> Dict[str, Any]:
        return dict(
            action_type=map_value_or_fail(
                element, AUTH_DATA.tag("ActionType"), enum_parser(ActionType)
            ),
            provider_authentication_data=map_element_or_fail(
                element,
                AUTH_DATA.tag("ProviderAuthenticationData"),
                lambda item: ProviderAuthenticationData.from_xml(item, on_exception),
            ),
        )

    def _to_xml(self) -> ET.Element:
        element = ET.Element(self.root_tag)
        add_element(
            element, AUTH_DATA.tag("ActionType"), enum_as_text(self.action_type)
        )
        element.append(self.provider_authentication_data.to_xml())
        return element
