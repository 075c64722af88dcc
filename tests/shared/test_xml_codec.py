import logging

import pytest
from defusedxml import DefusedXmlException

from oicp.shared.exceptions import XMLDecodingError, XMLEncodingError
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authorization import AuthorizeRemoteStartRequest
from oicp.shared.messages.datatypes import Identification
from oicp.shared.messages.enums import PlugType
from oicp.shared.messages.evse_search import SearchEVSERequest
from oicp.shared.messages.evse_status import (
    EVSEStatusByIdResponse,
    PullEVSEStatusByIdRequest,
)
from oicp.shared.settings import SettingKey, shared_settings
from oicp.shared.xml_codec import MESSAGE_CLASSES, XMLCodec
from tests.shared.messages.xml_message_container import document

REQUEST = AuthorizeRemoteStartRequest(
    provider_id="DE*GDF",
    evse_id="DE*ABC*E1*1",
    identification=Identification.from_remote("DE*GDF*01234ABCD*Z"),
)


@pytest.fixture
def codec():
    return XMLCodec()


@pytest.fixture
def restore_settings():
    saved = dict(shared_settings)
    yield shared_settings
    shared_settings.clear()
    shared_settings.update(saved)


class TestXMLCodec:
    def test_every_operation_is_known(self, codec):
        assert len(codec.msg_classes_dict) == len(MESSAGE_CLASSES)

    def test_request_round_trip(self, codec):
        document_bytes = codec.encode(REQUEST)

        assert document_bytes.startswith(b"<?xml")
        assert b"Authorization:eRoamingAuthorizeRemoteStart" in document_bytes
        assert codec.decode(document_bytes) == REQUEST

    def test_response_keeps_the_request(self, codec):
        acknowledgement = Acknowledgement.success(REQUEST)

        decoded = codec.decode(codec.encode(acknowledgement), request=REQUEST)

        assert decoded == acknowledgement
        assert decoded.request is REQUEST

    def test_unknown_root(self, codec):
        with pytest.raises(XMLDecodingError):
            codec.decode('<x:Hello xmlns:x="urn:vendor"/>')

    def test_not_well_formed(self, codec):
        with pytest.raises(XMLDecodingError) as exc_info:
            codec.decode("<Hello")
        assert exc_info.value.__cause__ is not None

    def test_entity_declarations_are_refused(self, codec):
        with pytest.raises(XMLDecodingError) as exc_info:
            codec.decode(
                '<!DOCTYPE x [<!ENTITY e "e">]>'
                '<x:Hello xmlns:x="urn:vendor">&e;</x:Hello>'
            )
        assert isinstance(exc_info.value.__cause__, DefusedXmlException)

    def test_invalid_message(self, codec, exception_sink):
        xml = document(
            "EVSEStatus:eRoamingPullEvseStatusById",
            "<EVSEStatus:ProviderID>DE*GDF</EVSEStatus:ProviderID>",
        )

        with pytest.raises(XMLDecodingError) as exc_info:
            codec.decode(xml, on_exception=exception_sink)

        assert exc_info.value.__cause__ is exception_sink.errors[0]

    def test_skipped_items_are_reported(self, codec, exception_sink):
        request = PullEVSEStatusByIdRequest(
            provider_id="DE*GDF", evse_ids=("DE*ABC*E1*1",)
        )
        xml = document(
            "EVSEStatus:eRoamingEvseStatusById",
            "<EVSEStatus:EvseStatusRecords>"
            "<EVSEStatus:EvseStatusRecord>"
            "<EVSEStatus:EvseStatus>Available</EVSEStatus:EvseStatus>"
            "</EVSEStatus:EvseStatusRecord>"
            "</EVSEStatus:EvseStatusRecords>",
        )

        response = codec.decode(xml, request=request, on_exception=exception_sink)

        assert isinstance(response, EVSEStatusByIdResponse)
        assert response.evse_status_records == ()
        assert len(exception_sink.errors) == 1

    def test_unserialisable_value(self, codec):
        request = SearchEVSERequest(
            geo_coordinates={"latitude": 50.9, "longitude": 11.6},
            provider_id="DE*GDF",
            range=5,
            plug=PlugType.UNSPECIFIED,
        )

        with pytest.raises(XMLEncodingError) as exc_info:
            codec.encode(request)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_pretty_print(self, codec, restore_settings):
        restore_settings[SettingKey.XML_PRETTY_PRINT] = True

        document_bytes = codec.encode(REQUEST)

        assert b"\n  <Authorization:ProviderID>" in document_bytes
        assert codec.decode(document_bytes) == REQUEST

    def test_message_logging(self, codec, restore_settings, caplog):
        restore_settings[SettingKey.MESSAGE_LOG_XML] = True

        with caplog.at_level(logging.INFO, logger="oicp.shared.xml_codec"):
            codec.decode(codec.encode(REQUEST))

        assert "Encoded AuthorizeRemoteStartRequest" in caplog.text
        assert "Message to decode" in caplog.text
