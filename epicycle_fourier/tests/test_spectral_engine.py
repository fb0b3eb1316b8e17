"""Tests for the direct-DFT SpectralEngine.

Covers:
- construction guards (empty, NaN/Inf, shape)
- full-band round trip for every small N, odd and even
- DC band, Hermitian symmetry of real signals, Nyquist counted once
- band and frequency bounds rejection
- epicycle chain vs band reconstruction
- the 500-sample step scenario
"""

from __future__ import annotations

import numpy as np
import pytest

from epicycle_fourier.analysis.signals import step_signal
from epicycle_fourier.analysis.spectral import (
    EmptyInputError,
    FrequencyOutOfBoundsError,
    InvalidRangeError,
    NonFiniteValueError,
    SpectralEngine,
    SpectralError,
    dft_direct,
    spectrum_table,
)


def _random_complex(n: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.normal(size=n) + 1j * rng.normal(size=n)


# -----------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------


def test_empty_input_rejected() -> None:
    with pytest.raises(EmptyInputError):
        SpectralEngine.create([])


@pytest.mark.parametrize(
    "bad",
    [
        [0.0, np.nan, 1.0],
        [0.0, np.inf],
        [1.0 + 0j, complex(0.0, -np.inf)],
    ],
)
def test_non_finite_rejected(bad) -> None:
    with pytest.raises(NonFiniteValueError):
        SpectralEngine.create(bad)


def test_errors_are_value_errors() -> None:
    assert issubclass(SpectralError, ValueError)
    for cls in (EmptyInputError, NonFiniteValueError, InvalidRangeError, FrequencyOutOfBoundsError):
        assert issubclass(cls, SpectralError)


def test_two_dimensional_input_rejected() -> None:
    with pytest.raises(ValueError):
        SpectralEngine.create(np.zeros((4, 4)))


def test_from_xy_packs_complex_and_checks_shape() -> None:
    eng = SpectralEngine.from_xy([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
    np.testing.assert_array_equal(eng.original(), np.array([1 + 4j, 2 + 5j, 3 + 6j]))
    with pytest.raises(ValueError):
        SpectralEngine.from_xy([1.0, 2.0], [1.0])


def test_original_and_coefficients_are_read_only() -> None:
    eng = SpectralEngine.from_real([1.0, 2.0, 3.0, 4.0])
    with pytest.raises(ValueError):
        eng.original()[0] = 0.0
    with pytest.raises(ValueError):
        eng.coefficients[0] = 0.0


def test_input_array_is_not_aliased() -> None:
    x = np.array([1.0, 2.0, 3.0], dtype=np.complex128)
    eng = SpectralEngine.create(x)
    x[0] = 100.0
    assert eng.original()[0] == 1.0


def test_accessors() -> None:
    eng = SpectralEngine.from_real(np.arange(9.0))
    assert eng.size() == 9
    assert eng.max_frequency() == 4
    assert eng.is_real()
    assert not SpectralEngine.create([1j, 2.0]).is_real()
    assert "N=9" in repr(eng)


# -----------------------------------------------------------------------
# Transform
# -----------------------------------------------------------------------


def test_dft_direct_matches_reference_normalization() -> None:
    x = _random_complex(13, seed=3)
    np.testing.assert_allclose(dft_direct(x), np.fft.fft(x) / 13.0, atol=1e-12)


def test_complex_exponential_has_single_coefficient() -> None:
    N, n_h = 16, 5
    i = np.arange(N)
    eng = SpectralEngine.create(np.exp(2j * np.pi * n_h * i / N))
    c = eng.coefficients
    assert c[n_h] == pytest.approx(1.0 + 0j, abs=1e-12)
    others = np.delete(c, n_h)
    assert np.allclose(others, 0.0, atol=1e-12)


@pytest.mark.parametrize("N", list(range(1, 13)) + [31, 64])
def test_full_band_round_trip(N: int) -> None:
    x = _random_complex(N, seed=N)
    eng = SpectralEngine.create(x)
    recon = eng.filtered_range(0, eng.max_frequency())
    np.testing.assert_allclose(recon, x, atol=1e-9)


def test_round_trip_with_centering_returns_centered_signal() -> None:
    x = np.array([3.0, 5.0, 7.0, 9.0])
    eng = SpectralEngine.create(x, center=True)
    np.testing.assert_allclose(eng.original(), x - 6.0)
    np.testing.assert_allclose(eng.filtered_range(0, 2), x - 6.0, atol=1e-12)
    assert eng.centered


def test_dc_band_is_mean() -> None:
    x = _random_complex(10, seed=7)
    eng = SpectralEngine.create(x)
    dc = eng.filtered_range(0, 0)
    np.testing.assert_allclose(dc, np.full(10, x.mean()), atol=1e-12)


def test_dc_band_is_zero_when_centered() -> None:
    eng = SpectralEngine.create(_random_complex(10, seed=8), center=True)
    np.testing.assert_allclose(eng.filtered_range(0, 0), 0.0, atol=1e-12)


@pytest.mark.parametrize("N", [15, 16])
def test_single_band_of_real_signal_is_real(N: int) -> None:
    rng = np.random.default_rng(N)
    eng = SpectralEngine.from_real(rng.normal(size=N))
    for k in range(1, eng.max_frequency() + 1):
        assert np.allclose(eng.filtered_range(k, k).imag, 0.0, atol=1e-12), k


def test_real_signal_is_hermitian() -> None:
    rng = np.random.default_rng(1)
    eng = SpectralEngine.from_real(rng.normal(size=12))
    c = eng.coefficients
    for k in range(1, 12):
        assert c[k] == pytest.approx(np.conj(c[12 - k]), abs=1e-12)


def test_nyquist_counted_once() -> None:
    x = np.array([1.0, -1.0, 1.0, -1.0])
    eng = SpectralEngine.from_real(x)
    assert eng.band_indices(2, 2) == [2]
    np.testing.assert_allclose(eng.filtered_range(2, 2), x, atol=1e-12)


def test_band_indices_pair_negative_frequencies() -> None:
    eng = SpectralEngine.create(np.zeros(7))
    assert eng.band_indices(0, 3) == [0, 1, 6, 2, 5, 3, 4]
    assert eng.band_indices(2, 2) == [2, 5]


def test_low_pass_smooths_step() -> None:
    eng = SpectralEngine.from_real(step_signal(200, 50, 150))
    low = eng.filtered_range(0, 5).real
    full = eng.filtered_range(0, eng.max_frequency()).real
    # a truncated series cannot follow the jumps; the full band can
    assert np.max(np.abs(low - eng.original().real)) > 0.2
    np.testing.assert_allclose(full, eng.original().real, atol=1e-9)


# -----------------------------------------------------------------------
# Bounds
# -----------------------------------------------------------------------


def test_invalid_ranges_rejected() -> None:
    eng = SpectralEngine.from_real(np.arange(10.0))
    with pytest.raises(InvalidRangeError):
        eng.filtered_range(5, 3)
    with pytest.raises(InvalidRangeError):
        eng.filtered_range(0, eng.max_frequency() + 1)
    with pytest.raises(InvalidRangeError):
        eng.filtered_range(-1, 2)
    with pytest.raises(InvalidRangeError):
        eng.band_indices(3, 2)


def test_component_out_of_bounds() -> None:
    eng = SpectralEngine.from_real(np.arange(10.0))
    with pytest.raises(FrequencyOutOfBoundsError):
        eng.get_component(10, 0)
    with pytest.raises(FrequencyOutOfBoundsError):
        eng.get_component(-1, 0)
    # the upper half of the index range is valid for single components
    eng.get_component(9, 0)


@pytest.mark.parametrize("frequency", [1.5, 1.9, 0.5, float("inf")])
def test_fractional_frequency_rejected(frequency) -> None:
    eng = SpectralEngine.from_real(np.arange(10.0))
    with pytest.raises(FrequencyOutOfBoundsError):
        eng.get_component(frequency, 0)


@pytest.mark.parametrize("band", [(0.5, 2), (0.9, 2.7), (0, 2.7), (1, float("nan"))])
def test_fractional_band_rejected(band) -> None:
    eng = SpectralEngine.from_real(np.arange(10.0))
    with pytest.raises(InvalidRangeError):
        eng.filtered_range(*band)
    with pytest.raises(InvalidRangeError):
        eng.band_indices(*band)


def test_integral_index_types_accepted() -> None:
    eng = SpectralEngine.create(_random_complex(10))
    assert eng.get_component(np.int64(3), 2) == eng.get_component(3, 2)
    assert eng.get_component(3.0, 2) == eng.get_component(3, 2)
    np.testing.assert_array_equal(eng.filtered_range(0.0, np.int64(2)), eng.filtered_range(0, 2))
    assert eng.band_indices(np.int32(1), 2.0) == [1, 9, 2, 8]


def test_clamp_band() -> None:
    eng = SpectralEngine.create(np.zeros(20))
    assert eng.clamp_band(0, 50) == (0, 10)
    assert eng.clamp_band(30, 50) == (10, 10)
    assert eng.clamp_band(-3, 4) == (0, 4)
    assert eng.clamp_band(2, 7) == (2, 7)


# -----------------------------------------------------------------------
# Components and spectrum
# -----------------------------------------------------------------------


def test_get_component_formula() -> None:
    x = _random_complex(9, seed=5)
    eng = SpectralEngine.create(x)
    f, t = 4, 7
    expected = eng.coefficients[f] * np.exp(2j * np.pi * f * t / 9)
    assert eng.get_component(f, t) == pytest.approx(expected, abs=1e-12)


@pytest.mark.parametrize("band", [(0, 0), (0, 3), (1, 4), (2, 2), (0, 5)])
def test_epicycle_chain_matches_band(band) -> None:
    eng = SpectralEngine.create(_random_complex(11, seed=11))
    recon = eng.filtered_range(*band)
    for cp in range(eng.size()):
        tip = sum(eng.get_component(k, cp) for k in eng.band_indices(*band))
        assert tip == pytest.approx(recon[cp], abs=1e-9)


def test_power_spectrum_natural_order() -> None:
    eng = SpectralEngine.create(_random_complex(8, seed=2))
    np.testing.assert_allclose(eng.power_spectrum(), np.abs(eng.coefficients) ** 2)


def test_centered_power_spectrum_is_a_rotation() -> None:
    eng = SpectralEngine.create(_random_complex(8, seed=2))
    freqs, powers = eng.centered_power_spectrum()
    np.testing.assert_array_equal(freqs, np.array([-3, -2, -1, 0, 1, 2, 3, 4]))
    p = eng.power_spectrum()
    np.testing.assert_allclose(powers, np.concatenate([p[5:], p[:5]]))
    assert sorted(powers.tolist()) == sorted(p.tolist())


def test_spectrum_table_columns() -> None:
    eng = SpectralEngine.create(_random_complex(6, seed=4))
    df = spectrum_table(eng)
    assert list(df.columns) == ["index", "frequency", "re", "im", "amplitude", "phase_rad", "power"]
    assert len(df) == 6
    np.testing.assert_allclose(df["power"].to_numpy(), eng.power_spectrum())
    assert df["frequency"].tolist() == [0, 1, 2, 3, -2, -1]

    dfc = spectrum_table(eng, centered=True)
    assert dfc["frequency"].tolist() == [-2, -1, 0, 1, 2, 3]
    assert dfc["index"].tolist() == [4, 5, 0, 1, 2, 3]


# -----------------------------------------------------------------------
# Step scenario
# -----------------------------------------------------------------------


def test_step_signal_scenario() -> None:
    x = step_signal(500)
    eng = SpectralEngine.from_real(x)
    assert eng.size() == 500
    assert eng.power_spectrum()[0] == pytest.approx((200 / 500) ** 2, abs=2e-3)
    dc = eng.filtered_range(0, 0)
    assert np.allclose(dc.real, 0.4, atol=2e-3)
    assert np.allclose(dc.imag, 0.0, atol=1e-12)
