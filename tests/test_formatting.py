"""표시용 파생 값 테스트"""
from datetime import datetime, timezone

import pytest

from itx_cli.core.formatting import (
    EPOCH,
    activity_contact,
    activity_type_label,
    call_agent,
    call_duration_seconds,
    direction_arrow,
    format_duration,
    format_iso,
    member_name,
    parse_timestamp,
    role_label,
    sort_key,
    translate_name,
)
from itx_cli.core.models import Activity, LocalizedName, Member


def member(**data) -> Member:
    return Member.model_validate(data)


class TestTranslateName:
    def test_english_translation_preferred(self):
        name = LocalizedName.model_validate(
            {"translations": {"en": {"translatedText": "Open"}}, "defaultText": "Åben"}
        )
        assert translate_name(name) == "Open"

    def test_falls_back_to_default_text(self):
        name = LocalizedName.model_validate({"translations": {"da": {}}, "defaultText": "Åben"})
        assert translate_name(name) == "Åben"

    def test_missing_name(self):
        assert translate_name(None) == ""
        assert translate_name(LocalizedName()) == ""


class TestMemberName:
    def test_user_name(self):
        assert member_name(member(user={"firstName": "Anna", "lastName": "Agent"})) == "Anna Agent"

    def test_user_with_first_name_only(self):
        assert member_name(member(user={"firstName": "Anna"})) == "Anna"

    def test_entity_name(self):
        m = member(entityExtension={"entity": {"name1": "Acme", "name2": "Corp"}})
        assert member_name(m) == "Acme Corp"

    def test_name_field(self):
        assert member_name(member(name="customer@example.com")) == "customer@example.com"

    def test_unknown(self):
        assert member_name(member()) == "(unknown)"

    def test_user_takes_precedence_over_entity(self):
        m = member(
            user={"firstName": "Anna"},
            entityExtension={"entity": {"name1": "Acme"}},
            name="fallback",
        )
        assert member_name(m) == "Anna"


class TestLabels:
    @pytest.mark.parametrize(
        "role, label",
        [(1, "Assigned"), (2, "Follower"), (20, "Contact"), (0, "Role 0"), (7, "Role 7")],
    )
    def test_role_label(self, role, label):
        assert role_label(role) == label

    @pytest.mark.parametrize(
        "type_id, label",
        [
            (2, "Chat"),
            (4, "Call"),
            (8, "Note"),
            (11, "Email"),
            (13, "FB Chat"),
            (14, "WeChat"),
            (17, "SMS"),
            (24, "Screen Share"),
            (27, "IG Chat"),
            (29, "WhatsApp"),
            (99, "Activity"),
            (None, "Activity"),
        ],
    )
    def test_activity_type_label(self, type_id, label):
        assert activity_type_label(type_id) == label

    def test_direction_arrow(self):
        assert direction_arrow(1) == "->"
        assert direction_arrow(2) == "<-"
        assert direction_arrow(None) == ""
        assert direction_arrow(5) == ""


class TestTimestamps:
    def test_parse_iso_with_z(self):
        assert parse_timestamp("2024-01-15T10:00:00Z") == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)

    def test_parse_naive_iso_as_utc(self):
        assert parse_timestamp("2024-01-15T10:00:00") == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)

    def test_parse_compact_offset(self):
        assert parse_timestamp("2024-01-15T12:00:00+0200") == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)

    def test_parse_short_fraction(self):
        assert parse_timestamp("2024-01-15T10:00:00.5Z") == datetime(
            2024, 1, 15, 10, 0, 0, 500000, tzinfo=timezone.utc
        )

    def test_parse_epoch_millis(self):
        assert parse_timestamp(1704067200000) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "garbage", True])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None
        assert sort_key(value) == EPOCH

    def test_format_iso(self):
        assert format_iso("2024-01-15T10:00:00Z") == "2024-01-15T10:00:00.000Z"
        assert format_iso(None) == ""


class TestCallDerivations:
    def make_call(self, **data) -> Activity:
        return Activity.model_validate({"eactId": 1, "activityType": {"eatyId": 4}, **data})

    def test_agent_is_internal_member_with_role_zero(self):
        call = self.make_call(
            members=[
                {"role": 0, "anon": True, "name": "External"},
                {"role": 1, "anon": False, "user": {"firstName": "Bob"}},
                {"role": 0, "anon": False, "user": {"firstName": "Anna"}},
            ]
        )
        assert member_name(call_agent(call)) == "Anna"
        assert member_name(activity_contact(call)) == "External"

    def test_no_agent(self):
        assert call_agent(self.make_call(members=[{"role": 20, "anon": True}])) is None
        assert activity_contact(self.make_call()) is None

    def test_duration_rounds_to_nearest_second(self):
        call = self.make_call(startTs="2024-01-15T10:00:00.000Z", endTs="2024-01-15T10:01:05.600Z")
        assert call_duration_seconds(call) == 66

    def test_duration_missing_end(self):
        assert call_duration_seconds(self.make_call(startTs="2024-01-15T10:00:00Z")) is None

    @pytest.mark.parametrize(
        "seconds, text",
        [(0, "0s"), (59, "59s"), (60, "1m 0s"), (125, "2m 5s"), (3600, "60m 0s")],
    )
    def test_format_duration(self, seconds, text):
        assert format_duration(seconds) == text

    @pytest.mark.parametrize("seconds, text", [(-5, "-5s"), (-65, "-5s")])
    def test_format_negative_duration(self, seconds, text):
        """종료가 시작보다 이르면 분 없이 부호 있는 초"""
        assert format_duration(seconds) == text

    def test_end_before_start(self):
        call = self.make_call(startTs="2024-01-15T10:00:05Z", endTs="2024-01-15T10:00:00Z")
        assert format_duration(call_duration_seconds(call)) == "-5s"
