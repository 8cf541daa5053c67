import numpy as np
import pytest

from diagnostics import extract_synthetic_part, synthetic_direct_correlation


def test_synthetic_part_from_gamma():
    # FH = 0.5 * direct + 0.5 * xb with xb = [12, 18]
    xb = extract_synthetic_part([11.0, 19.0], [10.0, 20.0], gamma=[0.5, 0.5])
    assert np.allclose(xb, [12.0, 18.0])


def test_synthetic_part_rebuilds_fh_estimates():
    rng = np.random.default_rng(5)
    n = 2000
    direct = rng.normal(100, 10, size=n)
    synthetic = rng.normal(100, 10, size=n)
    gamma = rng.uniform(1e-6, 1 - 1e-6, size=n)
    fh = gamma * direct + (1 - gamma) * synthetic

    xb = extract_synthetic_part(fh, direct, gamma=gamma)
    rebuilt = gamma * direct + (1 - gamma) * xb
    assert np.allclose(rebuilt, fh, rtol=1e-9, atol=0)


def test_synthetic_part_from_random_effects():
    xb = extract_synthetic_part([11.0, 19.0, 31.0], [10.0, 20.0, 30.0], random_effects=[0.5, -1.0, 2.0])
    assert np.allclose(xb, [10.5, 20.0, 29.0])


def test_synthetic_part_scalar_random_effect():
    xb = extract_synthetic_part([11.0, 19.0], [10.0, 20.0], random_effects=1.0)
    assert np.allclose(xb, [10.0, 18.0])


def test_synthetic_part_gamma_one_not_finite():
    xb = extract_synthetic_part([10.0, 19.0], [10.0, 20.0], gamma=[1.0, 0.5])
    assert not np.isfinite(xb[0])
    assert np.isclose(xb[1], 18.0)


def test_synthetic_part_requires_exactly_one_source():
    with pytest.raises(ValueError):
        extract_synthetic_part([1.0], [1.0])
    with pytest.raises(ValueError):
        extract_synthetic_part([1.0], [1.0], gamma=[0.5], random_effects=[0.1])


def test_synthetic_part_length_checks():
    with pytest.raises(ValueError):
        extract_synthetic_part([1.0, 2.0], [1.0], gamma=[0.5, 0.5])
    with pytest.raises(ValueError):
        extract_synthetic_part([1.0, 2.0], [1.0, 2.0], gamma=[0.5])


def test_correlation_matches_pearson():
    xb = np.array([1.0, 2.0, 3.0, 5.0])
    direct = np.array([1.5, 1.9, 3.2, 4.0])
    assert synthetic_direct_correlation(xb, direct) == pytest.approx(np.corrcoef(xb, direct)[0, 1])


def test_correlation_undefined_cases():
    assert np.isnan(synthetic_direct_correlation([1.0], [2.0]))
    assert np.isnan(synthetic_direct_correlation([1.0, np.inf, 3.0], [1.0, 2.0, 3.0]))


def test_synthetic_part_random_effects_length_check():
    with pytest.raises(ValueError, match="random_effects"):
        extract_synthetic_part([11.0, 19.0, 31.0], [10.0, 20.0, 30.0], random_effects=[0.5, -1.0])

    xb = extract_synthetic_part([11.0, 19.0], [10.0, 20.0], random_effects=[1.0])
    assert np.allclose(xb, [10.0, 18.0])
