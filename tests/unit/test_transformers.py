"""
Unit tests for the transformation registry
"""

import json
from datetime import date, datetime

import pytest
from core.exceptions import (
    ConfigurationError,
    InvalidAttachmentError,
    MissingAttachmentError,
    TransformationError,
)
from ingestion.transformers import TRANSFORMATIONS, get_transformation
from ingestion.transformers.base import get_column
from ingestion.transformers.cleaned_up import clean_column_name, to_title_case
from ingestion.transformers.dates import format_date_to_iso_string
from ingestion.transformers.default import DefaultTransformation
from ingestion.transformers.passthrough import PassthroughTransformation


CLEANED_UP_CONFIG = {
    "propertyColumns": {"event": "EVENT_NAME", "timestamp": "CREATED_AT", "distinctId": "USER_ID"},
    "dataSource": "warehouse",
    "replacements": {"ID": "ID"},
    "unmatchedUserDefault": "anonymous",
}


class TestRegistry:

    def test_all_names_registered(self):
        assert set(TRANSFORMATIONS) == {
            "default",
            "JSON Map",
            "Predefined Fields",
            "passthrough",
            "Cleaned-Up Properties",
        }

    def test_get_by_name(self, make_config):
        transformation = get_transformation(make_config(transformationName="passthrough"))

        assert isinstance(transformation, PassthroughTransformation)
        assert transformation.describe()["required_attachments"] == []

    def test_unknown_name(self, make_config):
        with pytest.raises(ConfigurationError) as exc_info:
            get_transformation(make_config(transformationName="Fancy Map"))

        assert "default" in exc_info.value.context["available"]

    @pytest.mark.parametrize("name, attachment", [
        ("JSON Map", "rowToEventMap"),
        ("Predefined Fields", "fieldConfigJson"),
        ("Cleaned-Up Properties", "propertyConfigJson"),
    ])
    def test_missing_attachment_is_configuration_error(self, make_config, name, attachment):
        with pytest.raises(MissingAttachmentError) as exc_info:
            get_transformation(make_config(transformationName=name))

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.message == f"Attachment {attachment} not provided!"

    def test_get_column_tolerates_case(self):
        row = {"EVENT": "click", "distinct_id": None, "DISTINCT_ID": "u1"}

        assert get_column(row, "event") == "click"
        assert get_column(row, "distinct_id") == "u1"
        assert get_column(row, "missing") is None
        assert get_column(row, None) is None


class TestDefaultTransformation:

    def test_row_shaped_like_an_event(self, make_config):
        transformation = DefaultTransformation(make_config())
        row = {
            "event": "click",
            "timestamp": "2023-01-01",
            "distinct_id": "u1",
            "properties": '{"a":1}',
        }

        event = transformation.transform(row)

        assert event.event == "click"
        assert event.properties == {
            "timestamp": "2023-01-01",
            "distinct_id": "u1",
            "a": 1,
            "source": "snowflake_import",
        }

    def test_upper_case_columns(self, make_config):
        transformation = DefaultTransformation(make_config())
        row = {"EVENT": "click", "TIMESTAMP": "2023-01-01", "DISTINCT_ID": "u1", "PROPERTIES": None}

        event = transformation.transform(row)

        assert event.event == "click"
        assert event.properties["distinct_id"] == "u1"
        assert event.properties["source"] == "snowflake_import"

    def test_source_tag_wins_over_row_properties(self, make_config):
        transformation = DefaultTransformation(make_config())

        event = transformation.transform({"event": "x", "properties": '{"source": "other"}'})

        assert event.properties["source"] == "snowflake_import"

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
    def test_bad_properties_column(self, make_config, raw):
        transformation = DefaultTransformation(make_config())

        with pytest.raises(TransformationError):
            transformation.transform({"event": "click", "properties": raw})

    def test_missing_event_is_not_emittable(self, make_config):
        transformation = DefaultTransformation(make_config())

        event = transformation.transform({"distinct_id": "u1"})

        assert event.event == ""
        assert event.is_emittable is False


class TestJsonMapTransformation:

    def _build(self, make_config, mapping):
        contents = mapping if isinstance(mapping, bytes) else json.dumps(mapping).encode()
        return get_transformation(make_config(
            transformationName="JSON Map",
            attachments={"rowToEventMap": contents}
        ))

    def test_routes_mapped_columns(self, make_config):
        transformation = self._build(make_config, {"col_a": "event", "col_b": "distinct_id"})

        event = transformation.transform({"col_a": "signup", "col_b": "u42", "col_c": "ignored"})

        assert event.event == "signup"
        assert event.properties == {"distinct_id": "u42"}

    def test_no_event_column(self, make_config):
        transformation = self._build(make_config, {"col_b": "distinct_id"})

        event = transformation.transform({"col_a": "signup", "col_b": "u42"})

        assert event.is_emittable is False

    def test_invalid_json(self, make_config):
        with pytest.raises(InvalidAttachmentError) as exc_info:
            self._build(make_config, b"{not json")

        assert isinstance(exc_info.value, TransformationError)
        assert exc_info.value.context["attachment"] == "rowToEventMap"

    def test_mapping_must_be_an_object(self, make_config):
        with pytest.raises(InvalidAttachmentError):
            self._build(make_config, ["col_a", "event"])


class TestPassthroughTransformation:

    def test_row_becomes_properties(self, make_config, local_tz):
        local_tz("UTC0")
        transformation = get_transformation(make_config(transformationName="passthrough"))
        row = {"ORDER_ID": 7, "COMPLETED_AT_ET": "2023-01-01T12:00:00Z"}

        event = transformation.transform(row)

        assert event.event == "test_event"
        assert event.timestamp == "2023-01-01T12:00:00+00:00"
        assert event.properties == {"ORDER_ID": 7, "COMPLETED_AT_ET": "2023-01-01T12:00:00Z"}
        assert event.properties is not row

    def test_unparseable_timestamp_left_as_is(self, make_config):
        transformation = get_transformation(make_config(transformationName="passthrough"))

        event = transformation.transform({"COMPLETED_AT_ET": "yesterday"})

        assert event.timestamp is None
        assert event.properties["COMPLETED_AT_ET"] == "yesterday"


class TestPredefinedFieldsTransformation:

    def test_named_columns(self, make_config, local_tz):
        local_tz("UTC0")
        field_config = {"event": "action", "timestamp": "ts", "distinctId": "user"}
        transformation = get_transformation(make_config(
            transformationName="Predefined Fields",
            attachments={"fieldConfigJson": json.dumps(field_config)}
        ))
        row = {"ACTION": "login", "TS": "2023-01-01T00:00:00Z", "USER": "u9", "PLAN": "pro", "EMPTY": None}

        event = transformation.transform(row)

        assert event.event == "login"
        assert event.distinct_id == "u9"
        assert event.properties == {
            "timestamp": "2023-01-01T00:00:00+00:00",
            "distinct_id": "u9",
            "PLAN": "pro",
        }

    def test_incomplete_field_config(self, make_config):
        with pytest.raises(InvalidAttachmentError):
            get_transformation(make_config(
                transformationName="Predefined Fields",
                attachments={"fieldConfigJson": '{"event": "action"}'}
            ))


class TestCleanedUpPropertiesTransformation:

    def _build(self, make_config, document=None):
        return get_transformation(make_config(
            transformationName="Cleaned-Up Properties",
            attachments={"propertyConfigJson": json.dumps(document or CLEANED_UP_CONFIG)}
        ))

    def test_title_case(self):
        assert to_title_case("ORDER") == "Order"
        assert to_title_case("order total") == "Order Total"

    @pytest.mark.parametrize("column, replacements, expected", [
        ("ORDER_ID", {}, "Order Id"),
        ("ORDER_ID", {"ID": "ID"}, "Order ID"),
        ("UTM_SOURCE", {"UTM": "UTM"}, "UTM Source"),
        ("plan", {}, "Plan"),
    ])
    def test_clean_column_name(self, column, replacements, expected):
        assert clean_column_name(column, replacements) == expected

    def test_transform(self, make_config, local_tz):
        local_tz("UTC0")
        transformation = self._build(make_config)
        row = {
            "EVENT_NAME": "purchase",
            "CREATED_AT": "2023-01-01T00:00:00Z",
            "USER_ID": "u1",
            "ORDER_ID": 7,
            "COUPON": None,
            "UPDATED_TIMESTAMP": "2023-01-02T00:00:00Z",
        }

        event = transformation.transform(row)

        assert event.event == "purchase"
        assert event.properties == {
            "timestamp": "2023-01-01T00:00:00+00:00",
            "distinct_id": "u1",
            "source": "warehouse",
            "Order ID": 7,
            "Updated Timestamp": "2023-01-02T00:00:00+00:00",
        }

    def test_unmatched_user_default(self, make_config):
        transformation = self._build(make_config)

        event = transformation.transform({
            "EVENT_NAME": "purchase",
            "CREATED_AT": "2023-01-01T00:00:00Z",
            "USER_ID": None,
        })

        assert event.distinct_id == "anonymous"
        assert event.properties["distinct_id"] == "anonymous"

    def test_bad_timestamp_is_fatal(self, make_config):
        transformation = self._build(make_config)

        with pytest.raises(TransformationError) as exc_info:
            transformation.transform({"EVENT_NAME": "purchase", "CREATED_AT": "soon", "USER_ID": "u1"})

        assert exc_info.value.context["column"] == "CREATED_AT"

    def test_wrong_document_shape(self, make_config):
        with pytest.raises(InvalidAttachmentError):
            self._build(make_config, {"dataSource": "warehouse"})


class TestDateFormatting:

    @pytest.mark.parametrize("tz, expected", [
        ("UTC0", "2023-01-01T00:00:00+00:00"),
        ("IST-05:30", "2023-01-01T05:30:00+05:30"),
        ("EST+05:00", "2022-12-31T19:00:00-05:00"),
    ])
    def test_offset_follows_process_timezone(self, local_tz, tz, expected):
        local_tz(tz)

        assert format_date_to_iso_string("2023-01-01T00:00:00Z") == expected

    def test_naive_values_are_local(self, local_tz):
        local_tz("IST-05:30")

        assert format_date_to_iso_string(datetime(2023, 1, 1, 12, 0)) == "2023-01-01T12:00:00+05:30"
        assert format_date_to_iso_string(date(2023, 1, 1)) == "2023-01-01T00:00:00+05:30"

    def test_rejects_non_dates(self):
        with pytest.raises(TypeError):
            format_date_to_iso_string(12345)
        with pytest.raises(ValueError):
            format_date_to_iso_string("not a date")
