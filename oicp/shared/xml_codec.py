import logging
from typing import Dict, Optional, Type, Union
from xml.etree import ElementTree as ET

from oicp.shared.exceptions import XMLDecodingError, XMLEncodingError
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authentication_data import PushAuthenticationDataRequest
from oicp.shared.messages.authorization import (
    AuthorizationStartResponse,
    AuthorizationStopResponse,
    AuthorizeRemoteStartRequest,
    AuthorizeRemoteStopRequest,
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    ChargeDetailRecordsResponse,
    GetChargeDetailRecordsRequest,
    SendChargeDetailRecordRequest,
)
from oicp.shared.messages.base import ARequest, AResponse, OICPMessage, ParseResult
from oicp.shared.messages.evse_data import (
    EVSEDataResponse,
    PullEVSEDataRequest,
    PushEVSEDataRequest,
)
from oicp.shared.messages.evse_search import (
    EVSESearchResultResponse,
    SearchEVSERequest,
)
from oicp.shared.messages.evse_status import (
    EVSEStatusByIdResponse,
    EVSEStatusResponse,
    PullEVSEStatusByIdRequest,
    PullEVSEStatusRequest,
    PushEVSEStatusRequest,
)
from oicp.shared.messages.mobile_authorization import (
    MobileAuthorizationStartResponse,
    MobileAuthorizeStartRequest,
    MobileRemoteStartRequest,
    MobileRemoteStopRequest,
)
from oicp.shared.messages.reservation import (
    AuthorizeRemoteReservationStartRequest,
    AuthorizeRemoteReservationStopRequest,
)
from oicp.shared.settings import SettingKey, shared_settings
from oicp.shared.xml_mapping import (
    MALFORMED_DOCUMENT_ERRORS,
    OnExceptionCallback,
    local_name,
    to_element,
)

logger = logging.getLogger(__name__)

MESSAGE_CLASSES = (
    PullEVSEDataRequest,
    EVSEDataResponse,
    PushEVSEDataRequest,
    PullEVSEStatusRequest,
    EVSEStatusResponse,
    PullEVSEStatusByIdRequest,
    EVSEStatusByIdResponse,
    PushEVSEStatusRequest,
    SearchEVSERequest,
    EVSESearchResultResponse,
    AuthorizeRemoteStartRequest,
    AuthorizeRemoteStopRequest,
    AuthorizeRemoteReservationStartRequest,
    AuthorizeRemoteReservationStopRequest,
    AuthorizeStartRequest,
    AuthorizationStartResponse,
    AuthorizeStopRequest,
    AuthorizationStopResponse,
    SendChargeDetailRecordRequest,
    GetChargeDetailRecordsRequest,
    ChargeDetailRecordsResponse,
    PushAuthenticationDataRequest,
    MobileAuthorizeStartRequest,
    MobileAuthorizationStartResponse,
    MobileRemoteStartRequest,
    MobileRemoteStopRequest,
    Acknowledgement,
)


class XMLCodec:
    """
    Turns OICP messages into XML documents and back. The message is picked
    by the qualified name of the document's root element, so the caller
    doesn't need to know in advance which operation it receives.
    """

    def __init__(self):
        self.msg_classes_dict: Dict[str, Type[OICPMessage]] = {
            msg_class.root_tag: msg_class for msg_class in MESSAGE_CLASSES
        }

    def encode(self, message: OICPMessage) -> bytes:
        """
        Serialises the message into an UTF-8 encoded XML document

        Raises:
            XMLEncodingError
        """
        try:
            element = message.to_xml()
            if shared_settings[SettingKey.XML_PRETTY_PRINT]:
                ET.indent(element)
            document = ET.tostring(element, encoding="utf-8", xml_declaration=True)
        except Exception as exc:
            logger.error(f"XMLEncodingError for {message}: {exc}")
            raise XMLEncodingError(
                f"XMLEncodingError for {message}: {exc}"
            ) from exc

        if shared_settings[SettingKey.MESSAGE_LOG_XML]:
            logger.info(f"Encoded {message}: {document.decode('utf-8')}")

        return document

    def decode(
        self,
        document: Union[str, bytes],
        request: Optional[ARequest] = None,
        on_exception: Optional[OnExceptionCallback] = None,
    ) -> OICPMessage:
        """
        Decodes an XML document into the OICP message named by its root
        element.

        Args:
            document: The XML document, without any SOAP envelope
            request: The request a response document answers, ignored when
                     the document is a request itself
            on_exception: Receives every error found while mapping the
                          document, including skipped collection items

        Raises:
            XMLDecodingError
        """
        if shared_settings[SettingKey.MESSAGE_LOG_XML]:
            text = document.decode("utf-8") if isinstance(document, bytes) else document
            logger.info(f"Message to decode: {text}")

        try:
            element = to_element(document)
        except MALFORMED_DOCUMENT_ERRORS as exc:
            raise XMLDecodingError(f"Document is not well-formed: {exc}") from exc

        msg_class = self.msg_classes_dict.get(element.tag)
        if not msg_class:
            logger.error(
                "Unable to identify message to decode given the root element "
                f"{element.tag}"
            )
            raise XMLDecodingError(f"Unable to decode {local_name(element.tag)}")

        result: ParseResult
        if issubclass(msg_class, AResponse):
            result = msg_class.try_parse(
                element, request=request, on_exception=on_exception
            )
        else:
            result = msg_class.try_parse(element, on_exception=on_exception)

        if not result:
            raise XMLDecodingError(
                f"Unable to decode {msg_class.__name__}: {result.error}"
            ) from result.error

        return result.value
