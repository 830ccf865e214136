import pytest

from src.expiry.filters import filter_records, has_expiry, is_in_scope
from tests.fixtures import make_record

WHITELIST = ["NIFTY", "BANKNIFTY"]


class TestIsInScope:
    def test_call_and_put_are_in_scope(self):
        assert is_in_scope(make_record("CE"), WHITELIST)
        assert is_in_scope(make_record("PE"), WHITELIST)

    def test_kind_and_symbol_are_trimmed(self):
        assert is_in_scope(make_record(" CE ", " NIFTY "), WHITELIST)

    @pytest.mark.parametrize("kind", ["FUT", "EQ", "ce", "", "CALL"])
    def test_other_kinds_rejected(self, kind):
        assert not is_in_scope(make_record(kind), WHITELIST)

    @pytest.mark.parametrize("symbol", ["nifty", "NIFTY50", "FINNIFTY", ""])
    def test_symbol_match_is_exact_and_case_sensitive(self, symbol):
        assert not is_in_scope(make_record(symbol=symbol), WHITELIST)

    @pytest.mark.parametrize("expiry", ["", "  ", None])
    def test_missing_expiry_rejected_before_normalization(self, expiry):
        assert not is_in_scope(make_record(expiry=expiry), WHITELIST)

    def test_unparseable_expiry_still_passes_prefilter(self):
        # The normalizer decides; the filter only checks presence
        assert is_in_scope(make_record(expiry="not-a-date"), WHITELIST)
        assert is_in_scope(make_record(expiry=0), WHITELIST)


def test_has_expiry():
    assert has_expiry("2025-11-25")
    assert has_expiry(1764028800000)
    assert not has_expiry(None)
    assert not has_expiry(" ")


def test_filter_records_keeps_in_scope_only():
    records = [
        make_record("CE", "NIFTY"),
        make_record("FUT", "NIFTY"),
        make_record("PE", "SENSEX"),
        make_record("PE", "BANKNIFTY", ""),
        make_record("PE", "BANKNIFTY"),
    ]
    kept = filter_records(records, WHITELIST)
    assert [(r.instrument_kind, r.underlying_symbol) for r in kept] == [("CE", "NIFTY"), ("PE", "BANKNIFTY")]
