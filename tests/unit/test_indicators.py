"""
Unit Tests fuer die Indikator-Funktionen
"""

import pytest
import numpy as np


class TestMovingAverages:
    """Tests fuer gleitende Durchschnitte."""

    def test_sma_and_empty_window(self):
        """Test: SMA ist der Mittelwert, leeres Fenster liefert 0."""
        from btcusd_dataset.indicators import sma

        assert sma([1.0, 2.0, 3.0, 4.0]) == 2.5
        assert sma([]) == 0.0

    def test_ema_constant_series(self):
        """Test: EMA einer konstanten Reihe ist die Konstante."""
        from btcusd_dataset.indicators import ema

        assert ema([5.0] * 30, 12) == pytest.approx(5.0)
        assert ema([], 12) == 0.0

    def test_ema_series_matches_ema(self, random_prices):
        """Test: Letzter Wert von ema_series entspricht ema()."""
        from btcusd_dataset.indicators import ema, ema_series

        series = ema_series(random_prices[:40], 9)
        assert len(series) == 40
        assert series[-1] == pytest.approx(ema(random_prices[:40], 9))

    def test_wma_weights_recent_highest(self):
        """Test: WMA gewichtet den juengsten Wert am staerksten."""
        from btcusd_dataset.indicators import wma

        assert wma([1.0, 2.0, 3.0]) == pytest.approx(14.0 / 6.0)

    def test_macd_flat_prices(self):
        """Test: MACD einer flachen Reihe ist ueberall 0."""
        from btcusd_dataset.indicators import macd

        result = macd([100.0] * 60)
        assert result.macd == pytest.approx(0.0)
        assert result.signal == pytest.approx(0.0)
        assert result.histogram == pytest.approx(0.0)

    def test_macd_histogram_consistency(self, random_prices):
        """Test: Histogramm = MACD - Signal."""
        from btcusd_dataset.indicators import macd

        result = macd(random_prices)
        assert result.histogram == pytest.approx(result.macd - result.signal)

    def test_bollinger_flat(self):
        """Test: Flache Preise ergeben zusammenfallende Baender."""
        from btcusd_dataset.indicators import bollinger_bands

        bands = bollinger_bands([50.0] * 25)
        assert bands.upper == bands.middle == bands.lower == 50.0
        assert bands.width == 0.0

    def test_bollinger_band_width_short_window(self):
        """Test: Bandbreite ist 0 bei zu kurzer Historie."""
        from btcusd_dataset.indicators import bollinger_band_width

        assert bollinger_band_width([1.0, 2.0, 3.0]) == 0.0

    def test_kama_long_series(self):
        """Test: KAMA laeuft auch auf langen Reihen (iterativ)."""
        from btcusd_dataset.indicators import kaufman_adaptive_moving_average

        prices = np.linspace(100, 200, 5000)
        value = kaufman_adaptive_moving_average(prices)
        assert np.isfinite(value)
        assert 100 <= value <= 200

    def test_rainbow_short_window(self):
        """Test: Rainbow liefert 0 bei weniger als 20 Preisen."""
        from btcusd_dataset.indicators import rainbow_moving_average

        assert rainbow_moving_average([100.0] * 10) == 0.0

    def test_ema_recursion(self):
        """Test: EMA folgt alpha * x + (1 - alpha) * ema mit Start beim ersten Wert."""
        from btcusd_dataset.indicators import ema, ema_series

        # alpha = 0.5: 1 -> 1.5 -> 2.25
        assert ema([1.0, 2.0, 3.0], 3) == pytest.approx(2.25)
        np.testing.assert_allclose(ema_series([1.0, 2.0, 3.0], 3), [1.0, 1.5, 2.25])

    def test_macd_known_values(self):
        """Test: MACD-Linie und Signal aus hand-gerechneten EMAs."""
        from btcusd_dataset.indicators import macd

        result = macd([1.0, 2.0, 4.0], fast=2, slow=3, signal=2)
        # Tag 3: EMA2([2, 4]) = 10/3, EMA3([1, 2, 4]) = 2.75
        # Tag 2: EMA2([1, 2]) = 5/3, EMA3([1, 2]) = 1.5
        assert result.macd == pytest.approx(7.0 / 12.0)
        assert result.signal == pytest.approx(4.0 / 9.0)
        assert result.histogram == pytest.approx(5.0 / 36.0)

    def test_bollinger_width_known_values(self):
        """Test: Bandbreite mit Populations-Standardabweichung."""
        from btcusd_dataset.indicators import bollinger_bands, bollinger_band_width

        prices = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        bands = bollinger_bands(prices, 8)
        # Mittel 5, sigma 2
        assert bands.middle == pytest.approx(5.0)
        assert bands.upper == pytest.approx(9.0)
        assert bands.lower == pytest.approx(1.0)
        assert bollinger_band_width(prices, 8) == pytest.approx(160.0)

    def test_kama_known_values(self):
        """Test: KAMA mit Effizienz 1 nutzt sc = fastSC^2."""
        from btcusd_dataset.indicators import kaufman_adaptive_moving_average

        # Start bei 2, zweimal sc = 4/9: 22/9, dann 254/81
        value = kaufman_adaptive_moving_average([1.0, 2.0, 3.0, 4.0], period=2)
        assert value == pytest.approx(254.0 / 81.0)

    def test_hull_linear_series(self):
        """Test: HMA einer linearen Reihe trifft den letzten Preis."""
        from btcusd_dataset.indicators import hull_moving_average

        # Roh-HMA 13/3 und 16/3, aeussere WMA = 5
        assert hull_moving_average([1.0, 2.0, 3.0, 4.0, 5.0], period=4) == pytest.approx(5.0)
        assert hull_moving_average([1.0, 2.0], period=4) == 2.0


class TestMomentum:
    """Tests fuer Momentum-Oszillatoren."""

    def test_rsi_short_window_neutral(self):
        """Test: RSI ist 50 bei weniger als period + 1 Preisen."""
        from btcusd_dataset.indicators import rsi

        assert rsi([100.0] * 10) == 50.0

    def test_rsi_flat_series_returns_100(self):
        """Test: Flache Reihe liefert RSI 100 (kein Verlust = unendliche Staerke)."""
        from btcusd_dataset.indicators import rsi

        # Bekannter Randfall: auch ohne Gewinne wird 100 geliefert
        assert rsi([100.0] * 20) == 100.0

    def test_rsi_extremes(self):
        """Test: Nur steigende Preise -> 100, nur fallende -> 0."""
        from btcusd_dataset.indicators import rsi

        assert rsi(np.arange(1.0, 30.0)) == 100.0
        assert rsi(np.arange(30.0, 1.0, -1.0)) == pytest.approx(0.0)

    def test_rsi_range(self, random_prices):
        """Test: RSI liegt fuer alle Fenster in [0, 100]."""
        from btcusd_dataset.indicators import rsi

        for end in range(15, len(random_prices)):
            value = rsi(random_prices[:end])
            assert 0.0 <= value <= 100.0

    def test_stoch_rsi_range(self, random_prices):
        """Test: StochRSI und Signal liegen in [0, 100]."""
        from btcusd_dataset.indicators import stoch_rsi

        for end in range(10, len(random_prices), 7):
            result = stoch_rsi(random_prices[:end])
            assert 0.0 <= result.stoch_rsi <= 100.0
            assert 0.0 <= result.signal <= 100.0

    def test_stoch_rsi_short_window(self):
        """Test: StochRSI ist (50, 50) bei zu kurzer Historie."""
        from btcusd_dataset.indicators import stoch_rsi

        assert tuple(stoch_rsi([100.0, 101.0, 102.0])) == (50.0, 50.0)

    def test_williams_r_range(self, random_prices):
        """Test: Williams %R liegt in [-100, 0]."""
        from btcusd_dataset.indicators import williams_r

        for end in range(14, len(random_prices)):
            assert -100.0 <= williams_r(random_prices[:end]) <= 0.0
        assert williams_r([10.0] * 20) == -50.0

    def test_stochastic_k_flat(self):
        """Test: Stochastik %K ist 50 bei flachem Fenster."""
        from btcusd_dataset.indicators import stochastic_k

        assert stochastic_k([10.0] * 20) == 50.0

    def test_mfi_without_negative_flow(self):
        """Test: MFI ist 100 ohne negativen Geldfluss."""
        from btcusd_dataset.indicators import mfi

        prices = np.arange(1.0, 20.0)
        assert mfi(prices, prices, prices, np.ones(len(prices))) == 100.0

    def test_proc(self):
        """Test: Rate of Change in Prozent."""
        from btcusd_dataset.indicators import proc

        prices = [100.0] * 10 + [110.0]
        assert proc(prices) == pytest.approx(10.0)

    def test_fisher_flat_is_zero(self):
        """Test: Fisher Transform einer flachen Reihe ist 0."""
        from btcusd_dataset.indicators import fisher_transform

        flat = [100.0] * 30
        assert fisher_transform(flat, flat) == pytest.approx(0.0)

    def test_mesa_bounded(self, random_prices):
        """Test: MESA Sine Wave liegt in (-1, 1)."""
        from btcusd_dataset.indicators import mesa_sine_wave

        value = mesa_sine_wave(random_prices)
        assert -1.0 < value < 1.0

    def test_rsi_wilder_smoothing(self):
        """Test: RSI mit Wilder-Startwert und einem Glaettungsschritt."""
        from btcusd_dataset.indicators import rsi

        # Start: avg_gain = avg_loss = 0.5; danach 0.75 / 0.25 -> rs = 3
        assert rsi([1.0, 2.0, 1.0, 2.0], period=2) == pytest.approx(75.0)

    def test_tsi_known_values(self):
        """Test: TSI aus doppelt geglaetteten Aenderungen."""
        from btcusd_dataset.indicators import tsi

        # Aenderungen +1 -1 +1 -1, doppelte EMA(2) = -5/27, Betraege bleiben 1
        value = tsi([1.0, 2.0, 1.0, 2.0, 1.0], long_period=2, short_period=2)
        assert value == pytest.approx(-500.0 / 27.0)
        assert tsi([1.0, 2.0, 1.0, 2.0], long_period=2, short_period=2) == 0.0

    def test_pmo_known_values(self):
        """Test: PMO aus doppelt geglaetteter prozentualer Aenderung."""
        from btcusd_dataset.indicators import pmo

        # ROC: +10, -10, 0, 0
        value = pmo([100.0, 110.0, 99.0, 99.0, 99.0], first_period=2, second_period=2)
        assert value == pytest.approx(-10.0 / 27.0)


class TestVolatilityAndVolume:
    """Tests fuer Volatilitaets- und Volumen-Indikatoren."""

    def test_atr_constant_prices(self):
        """Test: ATR konstanter Preise ist 0."""
        from btcusd_dataset.indicators import atr

        assert atr([100.0] * 20) == 0.0

    def test_historical_volatility_constant(self):
        """Test: Konstante Preise haben keine Volatilitaet."""
        from btcusd_dataset.indicators import historical_volatility, realized_volatility

        assert historical_volatility([100.0] * 30) == 0.0
        assert realized_volatility([100.0] * 30) == 0.0

    def test_price_channel_flat(self):
        """Test: Flacher Preiskanal liefert 0.5."""
        from btcusd_dataset.indicators import price_channel

        flat = [10.0] * 25
        assert price_channel(flat, flat, flat) == 0.5

    def test_vwap_zero_volume(self):
        """Test: VWAP ohne Volumen liefert den letzten Preis."""
        from btcusd_dataset.indicators import vwap

        assert vwap([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0], [0.0] * 7) == 7.0

    def test_obv(self):
        """Test: OBV addiert Volumen bei Anstieg, subtrahiert bei Rueckgang."""
        from btcusd_dataset.indicators import obv

        assert obv([1.0, 2.0, 1.0, 1.0], [10.0, 20.0, 30.0, 40.0]) == -10.0

    def test_volume_oscillator_zero_volume(self):
        """Test: Volumen-Oszillator ist 0 ohne Volumen."""
        from btcusd_dataset.indicators import volume_oscillator

        assert volume_oscillator([0.0] * 20) == 0.0

    def test_cmf_zero_range(self):
        """Test: CMF ist 0, wenn High == Low."""
        from btcusd_dataset.indicators import cmf

        flat = [10.0] * 25
        assert cmf(flat, flat, flat, [5.0] * 25) == 0.0

    def test_atr_known_values(self):
        """Test: ATR ist das Mittel der letzten absoluten Aenderungen."""
        from btcusd_dataset.indicators import atr

        assert atr([1.0, 3.0, 2.0, 5.0], period=3) == pytest.approx(2.0)
        assert atr([1.0, 3.0], period=3) == 0.0

    def test_keltner_known_values(self):
        """Test: Keltner-Mitte ist EMA des Typical Price, Breite 2 * mittlere True Range."""
        from btcusd_dataset.indicators import keltner_channels

        result = keltner_channels([11.0, 12.0, 13.0], [9.0, 10.0, 11.0], [10.0, 11.0, 12.0],
                                  period=3)
        assert result.middle == pytest.approx(11.25)
        assert result.upper == pytest.approx(15.25)
        assert result.lower == pytest.approx(7.25)
        assert result.position == pytest.approx(0.59375)

    def test_donchian_known_values(self):
        """Test: Donchian aus hoechstem Hoch und tiefstem Tief."""
        from btcusd_dataset.indicators import donchian_channels

        result = donchian_channels([11.0, 15.0, 13.0], [9.0, 8.0, 10.0], [10.0, 14.0, 12.0],
                                   period=3)
        assert result.upper == 15.0
        assert result.lower == 8.0
        assert result.middle == pytest.approx(11.5)
        assert result.position == pytest.approx(4.0 / 7.0)

    def test_mass_index_without_range(self):
        """Test: Ohne Tagesspanne ist jedes Verhaeltnis 1, Summe 25."""
        from btcusd_dataset.indicators import mass_index

        closes = np.linspace(100, 130, 40)
        assert mass_index(closes, closes) == pytest.approx(25.0)
        assert mass_index(closes + 2.0, closes) == pytest.approx(25.0)
        assert mass_index(closes[:20], closes[:20]) == 0.0

    @pytest.mark.parametrize("current,expected", [
        (14.0, 1.0),
        (13.0, 0.75),
        (12.2, 0.5),
        (11.7, 0.25),
        (11.0, 0.0),
        (10.0, -0.25),
    ])
    def test_camarilla_levels(self, current, expected):
        """Test: Camarilla-Position aus Vortagesschluss 12 und Spanne 2."""
        from btcusd_dataset.indicators import camarilla_pivots

        # H3 = 12.55, H4 = 13.1, L3 = 11.45, L4 = 10.9
        assert camarilla_pivots([10.0, 14.0, 12.0, current], period=3) == expected

    def test_elder_force_index_known_values(self):
        """Test: EFI ist die EMA von Preisaenderung mal Volumen."""
        from btcusd_dataset.indicators import elder_force_index

        # Kraefte [4, -3], EMA(2) = -2/3
        assert elder_force_index([10.0, 12.0, 11.0], [1.0, 2.0, 3.0], period=2) == \
            pytest.approx(-2.0 / 3.0)

    def test_chaikin_known_values(self):
        """Test: Chaikin aus EMA(fast) - EMA(slow) der A/D-Linie."""
        from btcusd_dataset.indicators import chaikin_oscillator

        # Multiplikatoren [1, 1, -1], A/D-Linie [10, 30, 0]
        value = chaikin_oscillator([3.0, 4.0, 5.0], [1.0, 2.0, 3.0], [3.0, 4.0, 3.0],
                                   [10.0, 20.0, 30.0], fast_period=2, slow_period=3)
        assert value == pytest.approx(-20.0 / 9.0)

    def test_klinger_known_values(self):
        """Test: KVO aus Daily Force mit Trendrichtung der HLC-Summe."""
        from btcusd_dataset.indicators import klinger_volume_oscillator

        # HLC-Summen 7, 10, 11 steigen; Kraefte [40, 60]
        value = klinger_volume_oscillator([3.0, 4.0, 5.0], [1.0, 2.0, 3.0], [3.0, 4.0, 3.0],
                                          [10.0, 20.0, 30.0], short_period=2, long_period=3)
        assert value == pytest.approx(10.0 / 3.0)


class TestTrendAndRegimes:
    """Tests fuer Trend-Indikatoren und Markt-Regimes."""

    def test_aroon_range(self, random_prices):
        """Test: Aroon Up/Down in [0, 100], Oszillator in [-100, 100]."""
        from btcusd_dataset.indicators import aroon

        for end in range(25, len(random_prices), 5):
            window = random_prices[:end]
            result = aroon(window, window)
            assert 0.0 <= result.up <= 100.0
            assert 0.0 <= result.down <= 100.0
            assert -100.0 <= result.oscillator <= 100.0

    def test_adx_flat_is_zero(self):
        """Test: ADX einer flachen Reihe ist 0."""
        from btcusd_dataset.indicators import adx

        flat = [100.0] * 60
        assert adx(flat, flat, flat) == 0.0

    def test_aroon_nan_window(self):
        """Test: NaN im Fenster liefert den neutralen Aroon-Wert."""
        from btcusd_dataset.indicators import aroon, AroonResult

        highs = np.linspace(100, 130, 30)
        lows = highs - 1.0
        highs[-3] = np.nan
        assert aroon(highs, lows) == AroonResult(50.0, 50.0, 0.0)
        assert aroon(lows, highs) == AroonResult(50.0, 50.0, 0.0)

    def test_parabolic_sar_known_values(self):
        """Test: SAR steigt mit wachsendem Beschleunigungsfaktor und kehrt am Tief um."""
        from btcusd_dataset.indicators import parabolic_sar

        highs = [10.0, 11.0, 12.0]
        lows = [9.0, 10.0, 11.0]
        closes = [9.5, 10.5, 11.5]
        # 9 -> 9.02 (af 0.02) -> 9.0992 (af 0.04)
        result = parabolic_sar(highs, lows, closes)
        assert result.sar == pytest.approx(9.0992)
        assert result.trend == pytest.approx((11.5 - 9.0992) / 11.5)

        reversed_result = parabolic_sar(highs + [10.0], lows + [9.0], closes + [9.5])
        assert reversed_result.sar == pytest.approx(12.0)
        assert reversed_result.trend == pytest.approx(-2.5 / 9.5)

    def test_ichimoku_known_values(self):
        """Test: Ichimoku-Linien als Mitte von Hoch und Tief der Perioden."""
        from btcusd_dataset.indicators import ichimoku, ichimoku_cloud_position

        closes = np.arange(1.0, 61.0)
        result = ichimoku(closes, closes, closes)
        assert result.conversion == pytest.approx(56.0)
        assert result.base == pytest.approx(47.5)
        assert result.span_a == pytest.approx(51.75)
        assert result.span_b == pytest.approx(34.5)
        assert result.position == 1.0

        assert ichimoku_cloud_position(40.0, closes) == 0.0
        assert ichimoku_cloud_position(30.0, closes) == -1.0
        assert ichimoku(closes[:51], closes[:51], closes[:51]).conversion == 0.0

    def test_fibonacci_retracement_known_values(self):
        """Test: Retracement-Niveaus vom Swing-Hoch 120 bei Spanne 20."""
        from btcusd_dataset.indicators import fibonacci_retracement

        result = fibonacci_retracement([110.0, 120.0, 115.0], [100.0, 105.0, 108.0],
                                       [105.0, 115.0, 112.0], period=3)
        assert result.level_236 == pytest.approx(115.28)
        assert result.level_382 == pytest.approx(112.36)
        assert result.level_500 == pytest.approx(110.0)
        assert result.level_618 == pytest.approx(107.64)
        assert result.position == 0.4

    def test_fibonacci_levels(self):
        """Test: Extension-Niveaus vom Tief aus, Nullen bei zu kurzer Historie."""
        from btcusd_dataset.indicators import fibonacci_levels

        result = fibonacci_levels([10.0, 20.0, 15.0, 12.0, 14.0], period=5)
        assert result.high == 20.0
        assert result.low == 10.0
        np.testing.assert_allclose(result.levels, [12.36, 13.82, 15.0, 16.18, 20.0])

        short = fibonacci_levels([5.0, 6.0], period=5)
        assert short.levels == (0.0, 0.0, 0.0, 0.0, 0.0)
        assert (short.high, short.low) == (6.0, 5.0)

    def test_volatility_regime_thresholds(self):
        """Test: Schwellen der Volatilitaets-Regimes."""
        from btcusd_dataset.indicators import classify_volatility_regime, VolatilityRegime

        assert classify_volatility_regime(1.5) == VolatilityRegime.EXTREME_HIGH
        assert classify_volatility_regime(0.7) == VolatilityRegime.HIGH
        assert classify_volatility_regime(0.4) == VolatilityRegime.MEDIUM
        assert classify_volatility_regime(0.25) == VolatilityRegime.LOW
        assert classify_volatility_regime(0.1) == VolatilityRegime.VERY_LOW

    def test_trend_regime_sideways_with_zero_sma(self):
        """Test: SMA von 0 fuehrt nicht zu Division durch 0."""
        from btcusd_dataset.indicators import classify_trend_regime, TrendRegime

        assert classify_trend_regime(100.0, 0.0, 0.0, 0.0) == TrendRegime.SIDEWAYS

    def test_market_regime_score_bounds(self):
        """Test: Gesamt-Score bleibt fuer alle Kombinationen in [0, 100]."""
        from btcusd_dataset.indicators import (
            market_regime_score, VolatilityRegime, TrendRegime, MomentumRegime
        )

        for v in VolatilityRegime:
            for t in TrendRegime:
                for m in MomentumRegime:
                    assert 0.0 <= market_regime_score(v, t, m) <= 100.0

        neutral = market_regime_score(VolatilityRegime.MEDIUM, TrendRegime.SIDEWAYS,
                                      MomentumRegime.NEUTRAL)
        assert neutral == 50.0
