"""Unit tests for feed date normalisation."""

from __future__ import annotations

from datetime import datetime

import pytest

from georsscount.dates import UNKNOWN_EPOCH, to_epoch_seconds

ATOM_EPOCH = 1071340202  # 2003-12-13T18:30:02Z


class TestRssDates:
    def test_numeric_offset(self) -> None:
        assert to_epoch_seconds("Mon, 25 Aug 2014 07:07:58 +0000") == 1408950478

    def test_negative_offset(self) -> None:
        assert to_epoch_seconds("Mon, 25 Aug 2014 02:07:58 -0500") == 1408950478

    def test_single_digit_day_and_hour(self) -> None:
        assert to_epoch_seconds("Sat, 7 Sep 2002 0:00:01 +0000") == 1031356801

    def test_gmt_zone_name(self) -> None:
        assert to_epoch_seconds("Sat, 07 Sep 2002 0:00:01 GMT") == 1031356801

    def test_garbage(self) -> None:
        assert to_epoch_seconds("Someday, maybe soon") == UNKNOWN_EPOCH

    def test_us_zone_name(self) -> None:
        assert to_epoch_seconds("Mon, 25 Aug 2014 03:07:58 EDT") == 1408950478

    def test_negative_zero_offset_is_utc(self) -> None:
        assert to_epoch_seconds("Mon, 25 Aug 2014 07:07:58 -0000") == 1408950478

    @pytest.mark.parametrize(
        "text",
        [
            "Mon, 25 Aug 2014 07:07:58",  # no zone
            "25 Aug 2014 07:07:58 +0000",  # no weekday
            "Mon 25 Aug 2014 07:07:58 +0000",  # no comma
            "Mon, 25 Aug 2014 07:07 +0000",  # no seconds
            "Mon, 25 Aug 2014 07:07:58 Europe/Paris",
            "Mon, 25 Aug 2014 07:07:58 +0000 (UTC)",
            "Mon, 25 Foo 2014 07:07:58 +0000",
        ],
    )
    def test_incomplete_rss_dates_rejected(self, text: str) -> None:
        assert to_epoch_seconds(text) == UNKNOWN_EPOCH


class TestAtomDates:
    def test_utc_designator(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30:02Z") == ATOM_EPOCH

    def test_fractional_seconds_discarded(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30:02.25Z") == ATOM_EPOCH
        assert to_epoch_seconds("2003-12-13T18:30:02.999999Z") == ATOM_EPOCH

    def test_numeric_offset(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30:02+01:00") == ATOM_EPOCH - 3600

    def test_fraction_with_offset(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30:02.25+01:00") == ATOM_EPOCH - 3600

    def test_fraction_at_end_of_string(self) -> None:
        # No zone left after removing the fraction
        assert to_epoch_seconds("2003-12-13T18:30:02.25") == UNKNOWN_EPOCH

    def test_zone_required(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30:02") == UNKNOWN_EPOCH

    def test_too_short_for_time(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30Z") == UNKNOWN_EPOCH

    def test_invalid_month(self) -> None:
        assert to_epoch_seconds("2003-13-13T18:30:02Z") == UNKNOWN_EPOCH

    def test_trailing_garbage(self) -> None:
        assert to_epoch_seconds("2003-12-13T18:30:02Z and more") == UNKNOWN_EPOCH


class TestDateOnly:
    def test_assumes_local_noon(self) -> None:
        expected = int(datetime(2014, 7, 22, 12, 0, 0).timestamp())
        assert to_epoch_seconds("2014-07-22") == expected

    def test_slashes_accepted(self) -> None:
        assert to_epoch_seconds("2014/07/22") == to_epoch_seconds("2014-07-22")

    def test_not_a_date(self) -> None:
        assert to_epoch_seconds("not a day!") == UNKNOWN_EPOCH


class TestUnknown:
    @pytest.mark.parametrize("text", [None, "", "bad", "2014-07-2"])
    def test_missing_or_short(self, text: str | None) -> None:
        assert to_epoch_seconds(text) == UNKNOWN_EPOCH
