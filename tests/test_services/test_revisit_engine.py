"""Tests for the catalyst revisit engine."""

import math
import random
import sys
from datetime import datetime, timezone

import pytest

sys.path.append("src")
from catalyst_watch.exceptions import InvalidConfigurationError
from catalyst_watch.services.revisit import (
    AlertSettings,
    Catalyst,
    check_revisits,
    evaluate_catalysts,
)

NOW = datetime(2024, 1, 16, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    return AlertSettings(ticker="ACME", tolerance_points=2.0, minimum_move=3.0)


@pytest.fixture
def earnings_catalyst():
    return Catalyst(
        id="c-earnings",
        ticker="ACME",
        price_before=150.0,
        price_after=155.0,
        label="Q3 earnings beat",
    )


class TestCheckRevisitsScenarios:
    """Worked examples from the product description."""

    def test_price_within_tolerance_triggers(self, settings, earnings_catalyst):
        alerts = check_revisits("ACME", 151.50, [earnings_catalyst], settings, now=NOW)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.catalyst_id == "c-earnings"
        assert alert.catalyst_label == "Q3 earnings beat"
        assert alert.price_before == 150.0
        assert alert.current_price == 151.50
        assert alert.tolerance_points == 2.0
        assert alert.triggered_at == NOW

    def test_price_outside_tolerance_does_not_trigger(self, settings, earnings_catalyst):
        assert check_revisits("ACME", 147.99, [earnings_catalyst], settings, now=NOW) == []
        assert check_revisits("ACME", 152.01, [earnings_catalyst], settings, now=NOW) == []

    def test_price_exactly_at_tolerance_triggers(self, settings, earnings_catalyst):
        alerts = check_revisits("ACME", 148.0, [earnings_catalyst], settings, now=NOW)

        assert [a.catalyst_id for a in alerts] == ["c-earnings"]

    @pytest.mark.parametrize("price", [50.0, 99.0, 100.0, 101.0, 102.0, 1000.0])
    def test_small_catalyst_never_triggers(self, settings, price):
        small = Catalyst(id="c-small", ticker="ACME", price_before=100.0, price_after=101.0)

        assert check_revisits("ACME", price, [small], settings, now=NOW) == []

    def test_band_edges_are_inclusive(self, settings, earnings_catalyst):
        for price in (148.0, 152.0, 150.0):
            assert len(check_revisits("ACME", price, [earnings_catalyst], settings)) == 1

    def test_down_move_catalyst(self, settings):
        selloff = Catalyst(id="c-down", ticker="ACME", price_before=80.0, price_after=60.0)

        assert len(check_revisits("ACME", 79.0, [selloff], settings)) == 1


class TestCheckRevisitsBoundaries:
    def test_zero_tolerance_requires_exact_price(self, earnings_catalyst):
        settings = AlertSettings(ticker="ACME", tolerance_points=0.0, minimum_move=3.0)

        assert len(check_revisits("ACME", 150.0, [earnings_catalyst], settings)) == 1
        assert check_revisits("ACME", 150.01, [earnings_catalyst], settings) == []

    def test_zero_minimum_move_accepts_any_catalyst(self):
        settings = AlertSettings(ticker="ACME", tolerance_points=1.0, minimum_move=0.0)
        unchanged = Catalyst(id="c-flat", ticker="ACME", price_before=50.0, price_after=50.0)

        assert len(check_revisits("ACME", 50.5, [unchanged], settings)) == 1

    def test_minimum_move_is_inclusive(self):
        settings = AlertSettings(ticker="ACME", tolerance_points=1.0, minimum_move=5.0)
        exact = Catalyst(id="c-exact", ticker="ACME", price_before=150.0, price_after=155.0)

        assert len(check_revisits("ACME", 150.0, [exact], settings)) == 1

    @pytest.mark.parametrize("price", [None, float("nan"), float("inf")])
    def test_unusable_price_yields_nothing(self, settings, earnings_catalyst, price):
        assert check_revisits("ACME", price, [earnings_catalyst], settings) == []

    def test_other_tickers_are_ignored(self, settings, earnings_catalyst):
        other = Catalyst(id="c-other", ticker="MSFT", price_before=150.0, price_after=170.0)

        alerts = check_revisits("acme", 150.0, [earnings_catalyst, other], settings)

        assert [a.catalyst_id for a in alerts] == ["c-earnings"]

    def test_empty_catalysts(self, settings):
        assert check_revisits("ACME", 150.0, [], settings) == []

    def test_user_id_is_carried(self, settings, earnings_catalyst):
        alert = check_revisits(
            "ACME", 150.0, [earnings_catalyst], settings, user_id="alice", now=NOW
        )[0]

        assert alert.user_id == "alice"
        assert alert.alert_key == ("alice", "c-earnings")

    def test_multiple_catalysts_can_trigger_together(self, settings):
        catalysts = [
            Catalyst(id="a", ticker="ACME", price_before=100.0, price_after=110.0),
            Catalyst(id="b", ticker="ACME", price_before=101.0, price_after=90.0),
            Catalyst(id="c", ticker="ACME", price_before=120.0, price_after=130.0),
        ]

        alerts = check_revisits("ACME", 100.5, catalysts, settings)

        assert {a.catalyst_id for a in alerts} == {"a", "b"}


class TestCheckRevisitsProperties:
    """Randomized checks of the trigger condition."""

    def test_trigger_condition_over_random_inputs(self):
        rng = random.Random(1337)

        for _ in range(500):
            settings = AlertSettings(
                ticker="ACME",
                tolerance_points=rng.choice([0.0, rng.uniform(0, 10)]),
                minimum_move=rng.choice([0.0, rng.uniform(0, 20)]),
            )
            catalysts = [
                Catalyst(
                    id=f"c{i}",
                    ticker="ACME",
                    price_before=rng.uniform(10, 200),
                    price_after=rng.uniform(10, 200),
                )
                for i in range(rng.randint(0, 6))
            ]
            current = rng.uniform(10, 200)

            triggered = {a.catalyst_id for a in check_revisits("ACME", current, catalysts, settings)}
            expected = {
                c.id
                for c in catalysts
                if abs(c.price_after - c.price_before) >= settings.minimum_move
                and abs(current - c.price_before) <= settings.tolerance_points
            }
            assert triggered == expected

    def test_idempotent(self, settings):
        rng = random.Random(42)
        catalysts = [
            Catalyst(
                id=f"c{i}",
                ticker="ACME",
                price_before=rng.uniform(140, 160),
                price_after=rng.uniform(130, 170),
            )
            for i in range(30)
        ]

        first = check_revisits("ACME", 150.0, catalysts, settings, user_id="u", now=NOW)
        second = check_revisits("ACME", 150.0, list(reversed(catalysts)), settings, user_id="u", now=NOW)

        assert set(first) == set(second)
        assert first == check_revisits("ACME", 150.0, catalysts, settings, user_id="u", now=NOW)


class TestEvaluateCatalysts:
    def test_reports_every_catalyst(self, settings, earnings_catalyst):
        small = Catalyst(id="c-small", ticker="ACME", price_before=150.0, price_after=151.0)

        checks = evaluate_catalysts("ACME", 151.5, [earnings_catalyst, small], settings)

        assert [c.catalyst.id for c in checks] == ["c-earnings", "c-small"]
        assert checks[0].eligible and checks[0].revisiting
        assert checks[0].distance == pytest.approx(1.5)
        assert not checks[1].eligible and not checks[1].revisiting

    def test_unknown_price_gives_infinite_distance(self, settings, earnings_catalyst):
        checks = evaluate_catalysts("ACME", float("nan"), [earnings_catalyst], settings)

        assert math.isinf(checks[0].distance)
        assert checks[0].revisiting is False

    def test_to_dict(self, settings, earnings_catalyst):
        data = evaluate_catalysts("ACME", 151.5, [earnings_catalyst], settings)[0].to_dict()

        assert data["catalyst_id"] == "c-earnings"
        assert data["magnitude"] == 5.0
        assert data["revisiting"] is True


class TestModelValidation:
    """Invalid reference data is rejected at construction."""

    @pytest.mark.parametrize("field", ["tolerance_points", "minimum_move"])
    @pytest.mark.parametrize("value", [-1.0, float("nan"), float("inf"), None])
    def test_invalid_settings(self, field, value):
        with pytest.raises(InvalidConfigurationError):
            AlertSettings(ticker="ACME", **{field: value})

    def test_settings_defaults(self):
        settings = AlertSettings(ticker="acme")

        assert settings.ticker == "ACME"
        assert settings.tolerance_points == 2.0
        assert settings.minimum_move == 10.0

    @pytest.mark.parametrize("field", ["price_before", "price_after"])
    def test_catalyst_without_prices(self, field):
        prices = {"price_before": 10.0, "price_after": 20.0, field: None}

        with pytest.raises(InvalidConfigurationError):
            Catalyst(id="c", ticker="ACME", **prices)

    def test_catalyst_normalizes_ticker(self):
        catalyst = Catalyst(id="c", ticker="acme", price_before=10.0, price_after=7.5)

        assert catalyst.ticker == "ACME"
        assert catalyst.magnitude == 2.5

    def test_alert_serialization(self, settings, earnings_catalyst):
        alert = check_revisits("ACME", 150.0, [earnings_catalyst], settings, now=NOW)[0]

        data = alert.to_dict()

        assert data["triggered_at"] == NOW.isoformat()
        assert data["ticker"] == "ACME"
