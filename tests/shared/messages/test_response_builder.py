import pytest
from pydantic import ValidationError

from oicp.shared.exceptions import ResponseBuilderError
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.enums import Namespace, StatusCodes
from oicp.shared.messages.evse_status import (
    EVSEStatusByIdResponse,
    PullEVSEStatusByIdRequest,
)
from oicp.shared.xml_mapping import map_value_or_none
from tests.shared.messages.xml_message_container import document

REQUEST = PullEVSEStatusByIdRequest(provider_id="DE*GDF", evse_ids=("DE*ABC*E1*1",))

STATUS_WITH_EXTENSION = document(
    "EVSEStatus:eRoamingEvseStatusById",
    "<EVSEStatus:EvseStatusRecords>"
    "<EVSEStatus:EvseStatusRecord><EVSEStatus:EvseId>DE*ABC*E1*1</EVSEStatus:EvseId>"
    "<EVSEStatus:EvseStatus>Available</EVSEStatus:EvseStatus>"
    "</EVSEStatus:EvseStatusRecord>"
    "</EVSEStatus:EvseStatusRecords>"
    '<v:Tariff xmlns:v="urn:vendor">0.39</v:Tariff>',
)


class TestResponseBuilder:
    def test_override_and_freeze(self):
        response = Acknowledgement.success(REQUEST)

        builder = response.to_builder()
        builder.partner_session_id = "0815"
        changed = builder.to_immutable()

        assert changed.partner_session_id == "0815"
        assert response.partner_session_id is None
        assert changed.request is REQUEST

    def test_custom_data_is_merged(self):
        response = Acknowledgement.success(REQUEST, custom_data={"a": 1})

        builder = response.to_builder({"b": 2})

        assert builder.custom_data == {"a": 1, "b": 2}
        assert builder.to_immutable().custom_data == {"a": 1, "b": 2}
        assert response.custom_data == {"a": 1}

    def test_unknown_field(self):
        builder = Acknowledgement.success(REQUEST).to_builder()

        with pytest.raises(ResponseBuilderError):
            builder.tariff = 0.39
        with pytest.raises(AttributeError):
            builder.tariff

    def test_freeze_validates_again(self):
        builder = Acknowledgement.success(REQUEST).to_builder()
        builder.session_id = "not a session id"

        with pytest.raises(ValidationError):
            builder.to_immutable()

    def test_responses_are_immutable(self):
        response = Acknowledgement.success(REQUEST)

        with pytest.raises(ValidationError):
            response.result = False


class TestCustomMapper:
    def test_vendor_extension_lands_in_custom_data(self):
        def custom_mapper(element, builder):
            builder.custom_data = dict(
                builder.custom_data,
                tariff=map_value_or_none(element, "{urn:vendor}Tariff", float),
            )
            return builder

        response = EVSEStatusByIdResponse.parse(
            STATUS_WITH_EXTENSION, request=REQUEST, custom_mapper=custom_mapper
        )

        assert response.custom_data == {"tariff": 0.39}
        assert len(response.evse_status_records) == 1

    def test_failing_mapper_fails_the_parse(self, exception_sink):
        def custom_mapper(element, builder):
            builder.evse_status_records = ("not a record",)
            return builder

        assert (
            EVSEStatusByIdResponse.parse(
                STATUS_WITH_EXTENSION,
                request=REQUEST,
                custom_mapper=custom_mapper,
                on_exception=exception_sink,
            )
            is None
        )
        assert len(exception_sink.errors) == 1


class TestResponseEquality:
    def test_custom_data_takes_no_part_in_hash(self):
        first = Acknowledgement.success(REQUEST, custom_data={"a": 1})
        second = Acknowledgement.success(REQUEST, custom_data={"a": 2})

        assert hash(first) == hash(second)
        assert first != second

    def test_status_code_presence(self):
        with_status = EVSEStatusByIdResponse.negative(
            REQUEST, StatusCodes.UNAUTHORIZED_ACCESS
        )
        without_status = EVSEStatusByIdResponse(request=REQUEST)

        assert with_status != without_status
        assert without_status == EVSEStatusByIdResponse(request=REQUEST)


def test_acknowledgement_lives_in_common_types():
    assert Acknowledgement.root_tag == Namespace.COMMON_TYPES.tag(
        "eRoamingAcknowledgement"
    )
