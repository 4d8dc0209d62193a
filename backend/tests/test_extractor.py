"""Tests for the market-result extractor and MarketResult splitting."""

from datetime import datetime, timezone

import pytest

from sattawatch.scrapers.base import MarketResult
from sattawatch.scrapers.extractor import MarketResultExtractor


CAPTURED_AT = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


# ============================================================================
# TESTS: NUMBER SPLITTING
# ============================================================================

class TestMarketResultSplitting:
    """Tests for MarketResult.from_fields."""

    def _build(self, raw_numbers: str, market_name: str = "KALYAN") -> MarketResult:
        return MarketResult.from_fields(
            market_name=market_name,
            raw_numbers=raw_numbers,
            raw_text=f"{market_name} {raw_numbers}",
            position=1,
            captured_at=CAPTURED_AT,
        )

    def test_full_triplet(self):
        result = self._build("599-39-568")
        assert (result.open, result.jodi, result.close) == ("599", "39", "568")

    def test_missing_close_defaults_to_empty(self):
        result = self._build("599-39")
        assert (result.open, result.jodi, result.close) == ("599", "39", "")

    def test_empty_numbers_keep_all_fields_empty(self):
        result = self._build("")
        assert (result.open, result.jodi, result.close) == ("", "", "")
        assert not result.is_empty

    def test_extra_segments_are_ignored(self):
        result = self._build("1-2-3-4")
        assert (result.open, result.jodi, result.close) == ("1", "2", "3")
        assert result.raw_numbers == "1-2-3-4"

    def test_placeholder_segments_are_kept_verbatim(self):
        result = self._build("***-**-***")
        assert (result.open, result.jodi, result.close) == ("***", "**", "***")

    def test_dict_round_trip_preserves_timestamp(self):
        result = self._build("599-39-568")
        restored = MarketResult.from_dict(result.to_dict())
        assert restored == result
        assert restored.captured_at.tzinfo is not None


# ============================================================================
# TESTS: EXTRACTION
# ============================================================================

class TestMarketResultExtractor:
    """Tests for MarketResultExtractor.extract."""

    def test_extracts_entries_in_document_order(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)

        assert [r.market_name for r in results] == ["MILAN MORNING", "KALYAN", "MAIN BAZAR", ""]
        assert [r.position for r in results] == [1, 3, 4, 5]

    def test_empty_entry_is_dropped_but_consumes_position(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)

        assert 2 not in [r.position for r in results]
        positions = [r.position for r in results]
        assert positions == sorted(positions)
        assert len(set(positions)) == len(positions)

    def test_fields_are_trimmed_and_split(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)
        kalyan = results[1]

        assert kalyan.market_name == "KALYAN"
        assert kalyan.raw_numbers == "123-45"
        assert (kalyan.open, kalyan.jodi, kalyan.close) == ("123", "45", "")
        assert kalyan.raw_text.startswith("KALYAN")
        assert kalyan.raw_text.endswith("123-45")

    def test_name_without_numbers_is_retained(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)
        main_bazar = results[2]

        assert main_bazar.market_name == "MAIN BAZAR"
        assert main_bazar.raw_numbers == ""
        assert (main_bazar.open, main_bazar.jodi, main_bazar.close) == ("", "", "")

    def test_numbers_without_name_are_retained(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)
        unnamed = results[3]

        assert unnamed.market_name == ""
        assert unnamed.raw_numbers == "111-22-333"
        assert unnamed.raw_text == "111-22-333no label"

    def test_entries_outside_container_are_ignored(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)
        assert "Not a market" not in [r.market_name for r in results]

    def test_only_immediate_children_are_entries(self):
        html = """
        <div class="satta-main-result">
          <div><h4>SRIDEVI</h4><span>140-57-458</span><div><em>updated</em></div></div>
        </div>
        """
        results = MarketResultExtractor().extract(html, captured_at=CAPTURED_AT)

        assert len(results) == 1
        assert results[0].market_name == "SRIDEVI"
        assert results[0].position == 1

    def test_every_record_carries_the_capture_time(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html, captured_at=CAPTURED_AT)
        assert {r.captured_at for r in results} == {CAPTURED_AT}

    def test_capture_time_defaults_to_now_utc(self, result_board_html):
        results = MarketResultExtractor().extract(result_board_html)
        assert results[0].captured_at.tzinfo is not None

    def test_extraction_is_idempotent(self, result_board_html):
        extractor = MarketResultExtractor()
        first = extractor.extract(result_board_html, captured_at=CAPTURED_AT)
        second = extractor.extract(result_board_html, captured_at=CAPTURED_AT)
        assert first == second

    @pytest.mark.parametrize(
        "html",
        [
            "",
            "not html at all",
            "<html><body><p>maintenance</p></body></html>",
            "<div class='satta-main-result'>",
            "<div class='satta-main-result'><div><h4>",
        ],
    )
    def test_malformed_input_never_raises(self, html):
        results = MarketResultExtractor().extract(html, captured_at=CAPTURED_AT)
        assert isinstance(results, list)

    def test_missing_container_yields_no_results(self):
        html = "<div class='other-board'><div><h4>KALYAN</h4><span>1-2-3</span></div></div>"
        assert MarketResultExtractor().extract(html, captured_at=CAPTURED_AT) == []

    def test_custom_selectors(self):
        html = """
        <section id="board">
          <div><b>TIME BAZAR</b><i>245-14-789</i></div>
        </section>
        """
        extractor = MarketResultExtractor(
            container_selector="#board",
            name_selector="b",
            value_selector="i",
        )
        results = extractor.extract(html, captured_at=CAPTURED_AT)

        assert len(results) == 1
        assert results[0].market_name == "TIME BAZAR"
        assert results[0].close == "789"
