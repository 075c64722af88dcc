from datetime import datetime, timedelta
from xml.etree import ElementTree as ET

import pytest

from oicp.shared.exceptions import InvalidElementValueError, MissingElementError
from oicp.shared.messages.enums import Namespace
from oicp.shared.messages.identifiers import EVSEId
from oicp.shared.xml_mapping import (
    add_elements,
    add_optional_element,
    decimal_as_text,
    map_element,
    map_element_or_fail,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    map_values_or_fail,
    parse_bool,
    parse_datetime,
)

ST = Namespace.EVSE_STATUS

STATUS_RECORDS = f"""
<Root xmlns:s="{ST.value}">
  <s:EvseStatusRecords>
    <s:EvseId>DE*ABC*E1*1</s:EvseId>
    <s:EvseId>no id at all</s:EvseId>
    <s:EvseId>DE*ABC*E1*3</s:EvseId>
    <s:EvseId>DE*ABC*E1*4</s:EvseId>
  </s:EvseStatusRecords>
  <s:Radius>12.5</s:Radius>
  <s:Nested><s:Value>inner</s:Value></s:Nested>
</Root>
"""


@pytest.fixture
def node():
    return ET.fromstring(STATUS_RECORDS)


def parse_evse_id(item: ET.Element) -> EVSEId:
    return EVSEId.parse(item.text)


class TestScalarMapping:
    def test_required_value(self, node):
        assert map_value_or_fail(node, ST.tag("Radius"), float) == 12.5

    def test_required_value_missing(self, node):
        with pytest.raises(MissingElementError) as exc_info:
            map_value_or_fail(node, ST.tag("Distance"), float)
        assert exc_info.value.name == "Distance"

    def test_unconvertible_value_keeps_cause(self, node):
        with pytest.raises(InvalidElementValueError) as exc_info:
            map_value_or_fail(node, ST.tag("Nested"), int)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_optional_value_absent_is_none(self, node):
        assert map_value_or_none(node, ST.tag("Distance"), float) is None

    def test_optional_value_present_still_fails_on_bad_text(self, node):
        with pytest.raises(InvalidElementValueError):
            map_value_or_none(node, ST.tag("Nested"), parse_bool)


class TestElementMapping:
    def test_optional_element(self, node):
        value = map_element(
            node, ST.tag("Nested"), lambda e: map_value_or_fail(e, ST.tag("Value"))
        )
        assert value == "inner"
        assert map_element(node, ST.tag("Missing"), lambda e: e) is None

    def test_required_element_missing(self, node):
        with pytest.raises(MissingElementError):
            map_element_or_fail(node, ST.tag("Missing"), lambda e: e)


class TestCollectionMapping:
    def test_malformed_item_is_skipped_and_reported_once(self, node, exception_sink):
        evse_ids = map_elements(
            node,
            ST.tag("EvseStatusRecords"),
            ST.tag("EvseId"),
            parse_evse_id,
            exception_sink,
        )

        assert evse_ids == ["DE*ABC*E1*1", "DE*ABC*E1*3", "DE*ABC*E1*4"]
        assert len(exception_sink.reports) == 1
        rejected_node, error = exception_sink.reports[0]
        assert rejected_node.text == "no id at all"
        assert isinstance(error, ValueError)

    def test_missing_container_is_empty(self, node, exception_sink):
        assert (
            map_elements(
                node, ST.tag("Missing"), ST.tag("EvseId"), parse_evse_id,
                exception_sink,
            )
            == []
        )
        assert exception_sink.reports == []

    def test_strict_values_fail_on_first_bad_item(self, node):
        with pytest.raises(InvalidElementValueError):
            map_values_or_fail(
                node, ST.tag("EvseStatusRecords"), ST.tag("EvseId"), EVSEId.parse
            )

    def test_strict_values_need_at_least_one_item(self, node):
        with pytest.raises(MissingElementError):
            map_values_or_fail(node, None, ST.tag("EvseId"))


class TestWriting:
    def test_absent_optional_adds_no_element(self):
        parent = ET.Element("Root")
        assert add_optional_element(parent, "Optional", None) is None
        assert len(parent) == 0

    def test_collection_keeps_order(self):
        parent = ET.Element("Root")
        add_elements(parent, "Plugs", "Plug", ["b", "a", "c"])
        assert [item.text for item in parent.find("Plugs")] == ["b", "a", "c"]


@pytest.mark.parametrize(
    "text, expected",
    [("true", True), ("1", True), ("False", False), ("0", False)],
)
def test_parse_bool(text, expected):
    assert parse_bool(text) is expected


def test_parse_bool_rejects_other_text():
    with pytest.raises(ValueError):
        parse_bool("yes")


def test_parse_datetime_with_zulu_suffix():
    value = parse_datetime("2023-05-04T10:15:00Z")
    assert value.utcoffset() == timedelta(0)
    assert value.replace(tzinfo=None) == datetime(2023, 5, 4, 10, 15)


@pytest.mark.parametrize(
    "value, expected", [(50.0, "50"), (8.123456789, "8.123457"), (0.5, "0.5")]
)
def test_decimal_as_text(value, expected):
    assert decimal_as_text(value) == expected


def test_parse_datetime_with_seven_fraction_digits():
    value = parse_datetime("2017-03-02T10:00:00.1234567+01:00")
    assert value.utcoffset() == timedelta(hours=1)
    assert value.microsecond == 123456


def test_unparsable_datetime_keeps_cause(node):
    ET.SubElement(node, ST.tag("LastCall")).text = "yesterday"

    with pytest.raises(InvalidElementValueError) as exc_info:
        map_value_or_fail(node, ST.tag("LastCall"), parse_datetime)
    assert isinstance(exc_info.value.__cause__, ValueError)
