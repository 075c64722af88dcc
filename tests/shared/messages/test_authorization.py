from datetime import datetime, timedelta, timezone

import pytest

from oicp.shared.exceptions import InvalidElementValueError, NoIdentificationFoundError
from oicp.shared.messages.acknowledgement import Acknowledgement
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
from oicp.shared.messages.datatypes import Identification, RemoteIdentification
from oicp.shared.messages.enums import AuthorizationStatusType, Namespace, StatusCodes
from oicp.shared.messages.records import ChargeDetailRecord
from tests.shared.messages.xml_message_container import document

AUTHORIZATION = Namespace.AUTHORIZATION

SESSION_ID = "b2688262-4a5c-4c5b-a5b7-1f7d1b5d4b3e"
EVCO_ID = "DE*GDF*01234ABCD*Z"


def remote_start(identification: str) -> str:
    return document(
        "Authorization:eRoamingAuthorizeRemoteStart",
        f"<Authorization:SessionID>{SESSION_ID}</Authorization:SessionID>"
        "<Authorization:ProviderID>DE*GDF</Authorization:ProviderID>"
        "<Authorization:EVSEID>DE*ABC*E1*1</Authorization:EVSEID>"
        f"<Authorization:Identification>{identification}"
        "</Authorization:Identification>",
    )


class TestAuthorizeRemoteStart:
    def test_remote_identification(self):
        request = AuthorizeRemoteStartRequest.parse(
            remote_start(
                "<CommonTypes:RemoteIdentification>"
                f"<CommonTypes:EVCOID>{EVCO_ID}</CommonTypes:EVCOID>"
                "</CommonTypes:RemoteIdentification>"
            )
        )

        assert request.identification == Identification.from_remote(EVCO_ID)
        assert isinstance(request.identification.variant, RemoteIdentification)
        assert request.session_id == SESSION_ID
        assert request.partner_session_id is None
        assert request.partner_product_id is None

    def test_missing_identification(self, exception_sink):
        result = AuthorizeRemoteStartRequest.try_parse(
            remote_start(""), on_exception=exception_sink
        )

        assert not result
        assert isinstance(result.error, NoIdentificationFoundError)
        assert str(result.error) == "No EVCO identification found in request."
        assert len(exception_sink.reports) == 1
        node, error = exception_sink.reports[0]
        assert node.tag == AUTHORIZATION.tag("eRoamingAuthorizeRemoteStart")
        assert error is result.error

    def test_round_trip(self):
        request = AuthorizeRemoteStartRequest(
            provider_id="DE*GDF",
            evse_id="DE*ABC*E1*1",
            identification=Identification.from_rfid("AFFE1234"),
            partner_product_id="AC1",
        )

        element = request.to_xml()

        assert element.find(AUTHORIZATION.tag("SessionID")) is None
        assert AuthorizeRemoteStartRequest.parse(element) == request

    def test_answered_by_acknowledgement(self):
        request = AuthorizeRemoteStartRequest.parse(
            remote_start(
                "<CommonTypes:RemoteIdentification>"
                f"<CommonTypes:EVCOID>{EVCO_ID}</CommonTypes:EVCOID>"
                "</CommonTypes:RemoteIdentification>"
            )
        )
        acknowledgement = Acknowledgement.success(request, session_id=SESSION_ID)

        parsed = Acknowledgement.parse(acknowledgement.to_xml(), request=request)

        assert parsed == acknowledgement
        assert parsed.result


def test_remote_stop_round_trip():
    request = AuthorizeRemoteStopRequest(
        session_id=SESSION_ID,
        partner_session_id="0815",
        provider_id="DE*GDF",
        evse_id="DE*ABC*E1*1",
    )

    assert AuthorizeRemoteStopRequest.parse(request.to_xml()) == request


class TestAuthorizeStartStop:
    def test_start_round_trip(self):
        request = AuthorizeStartRequest(
            operator_id="DE*ABC",
            evse_id="DE*ABC*E1*1",
            identification=Identification.from_qr_code(EVCO_ID, "1234"),
        )

        assert AuthorizeStartRequest.parse(request.to_xml()) == request

    def test_authorized_with_stop_identifications(self, exception_sink):
        request = AuthorizeStartRequest(
            operator_id="DE*ABC",
            identification=Identification.from_rfid("AFFE1234"),
        )
        response = AuthorizationStartResponse.authorized(
            request,
            session_id=SESSION_ID,
            provider_id="DE*GDF",
            authorization_stop_identifications=(
                Identification.from_rfid("AFFE1234"),
                Identification.from_rfid("04A2B3C4D5E6F7"),
            ),
        )

        element = response.to_xml()
        parsed = AuthorizationStartResponse.parse(
            element, request=request, on_exception=exception_sink
        )

        assert parsed == response
        assert parsed.authorization_status is AuthorizationStatusType.AUTHORIZED
        assert exception_sink.reports == []

    def test_not_authorized(self):
        request = AuthorizeStopRequest(
            session_id=SESSION_ID,
            operator_id="DE*ABC",
            identification=Identification.from_rfid("AFFE1234"),
        )

        response = AuthorizationStopResponse.not_authorized(
            request,
            StatusCodes.RFID_AUTHENTICATION_FAILED_INVALID_UID,
            "Invalid UID",
        )

        assert response.authorization_status is AuthorizationStatusType.NOT_AUTHORIZED
        assert AuthorizationStopResponse.parse(response.to_xml(), request=request) == (
            response
        )

    def test_negative_acknowledgement_is_not_authorized(self):
        response = AuthorizationStartResponse.service_not_available(None)

        assert response.authorization_status is AuthorizationStatusType.NOT_AUTHORIZED
        assert response.authorization_stop_identifications == ()
        assert response.status_code.code is StatusCodes.SERVICE_NOT_AVAILABLE


def charge_detail_record(**overrides) -> ChargeDetailRecord:
    start = datetime(2023, 3, 1, 8, 0, tzinfo=timezone.utc)
    fields = dict(
        session_id=SESSION_ID,
        partner_product_id="AC1",
        evse_id="DE*ABC*E1*1",
        identification=Identification.from_remote(EVCO_ID),
        charging_start=start + timedelta(minutes=1),
        charging_end=start + timedelta(hours=1),
        session_start=start,
        session_end=start + timedelta(hours=1, minutes=5),
        meter_value_start=1200.5,
        meter_value_end=1222.75,
        meter_values_in_between=(1210.0, 1220.25),
        consumed_energy=22.25,
    )
    fields.update(overrides)
    return ChargeDetailRecord(**fields)


class TestChargeDetailRecords:
    def test_send_round_trip(self):
        request = SendChargeDetailRecordRequest(
            charge_detail_record=charge_detail_record()
        )

        element = request.to_xml()

        assert element.tag == AUTHORIZATION.tag("eRoamingChargeDetailRecord")
        assert SendChargeDetailRecordRequest.parse(element) == request

    def test_session_end_before_start(self):
        start = datetime(2023, 3, 1, 8, 0, tzinfo=timezone.utc)
        with pytest.raises(ValueError):
            charge_detail_record(session_end=start - timedelta(minutes=1))

    def test_get_records_period(self):
        start = datetime(2023, 3, 1, tzinfo=timezone.utc)
        request = GetChargeDetailRecordsRequest(
            provider_id="DE*GDF", from_=start, to=start + timedelta(days=1)
        )

        assert GetChargeDetailRecordsRequest.parse(request.to_xml()) == request

        with pytest.raises(ValueError):
            GetChargeDetailRecordsRequest(
                provider_id="DE*GDF", from_=start, to=start - timedelta(days=1)
            )

    def test_records_response_skips_malformed_records(self, exception_sink):
        good = charge_detail_record()
        response = ChargeDetailRecordsResponse(charge_detail_records=(good,))
        element = response.to_xml()
        broken = charge_detail_record().to_xml()
        broken.remove(broken.find(AUTHORIZATION.tag("Identification")))
        element.append(broken)

        parsed = ChargeDetailRecordsResponse.parse(
            element, on_exception=exception_sink
        )

        assert parsed.charge_detail_records == (good,)
        assert len(exception_sink.errors) == 1
        assert isinstance(exception_sink.errors[0], NoIdentificationFoundError)

    def test_malformed_meter_value_is_reported(self, exception_sink):
        response = ChargeDetailRecordsResponse(
            charge_detail_records=(charge_detail_record(),)
        )
        element = response.to_xml()
        meter_values = element.find(
            f"{AUTHORIZATION.tag('eRoamingChargeDetailRecord')}"
            f"/{AUTHORIZATION.tag('MeterValueInBetween')}"
        )
        meter_values[0].text = "12,5kWh"

        parsed = ChargeDetailRecordsResponse.parse(
            element, on_exception=exception_sink
        )

        record = parsed.charge_detail_records[0]
        assert record.meter_values_in_between == (1220.25,)
        assert len(exception_sink.errors) == 1
        assert isinstance(exception_sink.errors[0], InvalidElementValueError)
        assert exception_sink.reports[0][0] is meter_values[0]

    def test_sent_record_reports_malformed_meter_value(self, exception_sink):
        element = SendChargeDetailRecordRequest(
            charge_detail_record=charge_detail_record()
        ).to_xml()
        element.find(AUTHORIZATION.tag("MeterValueInBetween"))[1].text = "n/a"

        request = SendChargeDetailRecordRequest.parse(
            element, on_exception=exception_sink
        )

        assert request.charge_detail_record.meter_values_in_between == (1210.0,)
        assert len(exception_sink.errors) == 1
