from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from oicp.shared.exceptions import InvalidElementValueError
from oicp.shared.messages.datatypes import Address, GeoCoordinates, SearchCenter
from oicp.shared.messages.enums import (
    Accessibility,
    ActionType,
    AuthenticationMode,
    ChargingFacility,
    ChargingMode,
    GeoCoordinatesResponseFormat,
    Namespace,
    PaymentOption,
    PlugType,
    StatusCodes,
    ValueAddedService,
)
from oicp.shared.messages.evse_data import (
    EVSEDataResponse,
    PullEVSEDataRequest,
    PushEVSEDataRequest,
)
from oicp.shared.messages.evse_search import (
    EVSESearchResultResponse,
    SearchEVSERequest,
)
from oicp.shared.messages.records import EVSEDataRecord, EVSEMatch, OperatorEVSEData

EVSE_DATA = Namespace.EVSE_DATA
CT = Namespace.COMMON_TYPES


def evse_data_record(evse_id: str = "DE*ABC*E1*1", **overrides) -> EVSEDataRecord:
    fields = dict(
        delta_type=ActionType.INSERT,
        last_update=datetime(2023, 3, 1, 12, 0, tzinfo=timezone.utc),
        evse_id=evse_id,
        charging_station_name="Marktplatz",
        address=Address(country="DEU", city="Jena", street="Markt", house_num="1"),
        geo_coordinates=GeoCoordinates(latitude=50.928, longitude=11.589),
        plugs=(PlugType.TYPE_2_OUTLET, PlugType.CHADEMO),
        charging_facilities=(ChargingFacility.V_380_480_3_PHASE_32A,),
        charging_modes=(ChargingMode.MODE_3,),
        authentication_modes=(
            AuthenticationMode.NFC_RFID_CLASSIC,
            AuthenticationMode.REMOTE,
        ),
        max_capacity=22,
        payment_options=(PaymentOption.CONTRACT,),
        value_added_services=(ValueAddedService.RESERVATION,),
        accessibility=Accessibility.FREE_PUBLICLY_ACCESSIBLE,
        hotline_phone_num="+49 (0) 3641 555",
        is_open_24_hours=True,
    )
    fields.update(overrides)
    return EVSEDataRecord(**fields)


class TestEVSEDataRecord:
    def test_hotline_number_is_normalised(self):
        assert evse_data_record().hotline_phone_num == "+4903641555"

    def test_round_trip(self):
        record = evse_data_record()

        assert EVSEDataRecord.from_xml(record.to_xml()) == record

    def test_attributes(self):
        element = evse_data_record().to_xml()

        assert element.get("deltaType") == "insert"
        assert element.get("lastUpdate") == "2023-03-01T12:00:00+00:00"

    def test_unknown_enum_values_are_not_written(self):
        record = evse_data_record(
            plugs=(PlugType.TYPE_2_OUTLET, PlugType.UNSPECIFIED)
        )

        element = record.to_xml()

        plugs = element.find(EVSE_DATA.tag("Plugs"))
        assert [plug.text for plug in plugs] == ["Type 2 Outlet"]

    def test_at_least_one_plug(self):
        with pytest.raises(ValidationError):
            evse_data_record(plugs=())

    def test_unknown_plug_is_reported_and_left_out(self, exception_sink):
        element = evse_data_record().to_xml()
        plugs = element.find(EVSE_DATA.tag("Plugs"))
        plugs[1].text = "Teleportation Pad"

        record = EVSEDataRecord.from_xml(element, exception_sink)

        assert record.plugs == (PlugType.TYPE_2_OUTLET,)
        assert len(exception_sink.errors) == 1
        assert isinstance(exception_sink.errors[0], InvalidElementValueError)
        assert EVSEDataRecord.from_xml(record.to_xml()) == record

    def test_record_without_known_plug_is_rejected(self, exception_sink):
        element = evse_data_record(plugs=(PlugType.CHADEMO,)).to_xml()
        element.find(EVSE_DATA.tag("Plugs"))[0].text = "Teleportation Pad"

        with pytest.raises(ValidationError):
            EVSEDataRecord.from_xml(element, exception_sink)
        assert len(exception_sink.errors) == 1

    def test_unknown_accessibility_is_rejected(self):
        element = evse_data_record().to_xml()
        element.find(EVSE_DATA.tag("Accessibility")).text = "By appointment"

        with pytest.raises(InvalidElementValueError):
            EVSEDataRecord.from_xml(element)


class TestPullEVSEData:
    def test_round_trip(self):
        request = PullEVSEDataRequest(
            provider_id="DE*GDF",
            search_center=SearchCenter(
                geo_coordinates=GeoCoordinates(latitude=50.9, longitude=11.6),
                radius=10,
            ),
            last_call=datetime(2023, 3, 1, tzinfo=timezone.utc),
            geo_coordinates_response_format=GeoCoordinatesResponseFormat.GOOGLE,
        )

        assert PullEVSEDataRequest.parse(request.to_xml()) == request

    def test_response_uses_requested_geo_format(self):
        request = PullEVSEDataRequest(
            provider_id="DE*GDF",
            geo_coordinates_response_format=GeoCoordinatesResponseFormat.GOOGLE,
        )
        response = EVSEDataResponse(
            request=request,
            operator_evse_data=(
                OperatorEVSEData(
                    operator_id="DE*ABC",
                    evse_data_records=(evse_data_record(),),
                ),
            ),
        )

        element = response.to_xml()

        coordinates = element.find(
            f"{EVSE_DATA.tag('EvseData')}/{EVSE_DATA.tag('OperatorEvseData')}/"
            f"{EVSE_DATA.tag('EvseDataRecord')}/{EVSE_DATA.tag('GeoCoordinates')}/"
            f"{CT.tag('Google')}/{CT.tag('Coordinates')}"
        )
        assert coordinates.text == "50.928 11.589"
        assert EVSEDataResponse.parse(element, request=request) == response

    def test_malformed_record_is_reported(self, exception_sink):
        good = evse_data_record("DE*ABC*E1*1")
        bad = evse_data_record("DE*ABC*E1*2").to_xml()
        bad.remove(bad.find(EVSE_DATA.tag("Accessibility")))
        operator = OperatorEVSEData(
            operator_id="DE*ABC", evse_data_records=(good,)
        ).to_xml()
        operator.append(bad)
        response = EVSEDataResponse(operator_evse_data=()).to_xml()
        response.find(EVSE_DATA.tag("EvseData")).append(operator)

        parsed = EVSEDataResponse.parse(response, on_exception=exception_sink)

        assert parsed.operator_evse_data[0].evse_data_records == (good,)
        assert len(exception_sink.reports) == 1
        assert exception_sink.reports[0][0] is bad

    def test_negative_acknowledgement(self):
        response = EVSEDataResponse.system_error(None)

        assert response.operator_evse_data == ()
        assert response.status_code.code is StatusCodes.SYSTEM_ERROR
        assert response.status_code.description == "System Error!"


def test_push_evse_data_round_trip():
    request = PushEVSEDataRequest(
        action_type=ActionType.FULL_LOAD,
        operator_evse_data=OperatorEVSEData(
            operator_id="DE*ABC",
            operator_name="ABC Charging",
            evse_data_records=(
                evse_data_record("DE*ABC*E1*1"),
                evse_data_record("DE*ABC*E1*2", is_open_24_hours=False),
            ),
        ),
    )

    assert PushEVSEDataRequest.parse(request.to_xml()) == request


class TestSearchEVSE:
    def test_needs_a_location(self):
        with pytest.raises(ValidationError):
            SearchEVSERequest(provider_id="DE*GDF", range=5)

    def test_round_trip(self):
        request = SearchEVSERequest(
            geo_coordinates=GeoCoordinates(latitude=50.9, longitude=11.6),
            provider_id="DE*GDF",
            range=5,
            plug=PlugType.CCS_COMBO_2_PLUG_CABLE_ATTACHED,
        )

        parsed = SearchEVSERequest.parse(request.to_xml())

        assert parsed == request
        assert parsed.address is None
        assert parsed.charging_facility is None

    def test_result_round_trip(self):
        response = EVSESearchResultResponse(
            evse_matches=(EVSEMatch(distance=0.75, evse=evse_data_record()),)
        )

        assert EVSESearchResultResponse.parse(response.to_xml()) == response
