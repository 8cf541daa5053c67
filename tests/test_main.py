import argparse

import numpy as np
import pandas as pd
import pytest

from sae_diagnostics_src.config_utils import initialize_config, get_config_value
from sae_diagnostics_src.main import main
from sae_diagnostics_src.parsing_utils import parse_transformation, validate_log_level
from sae_diagnostics_src.plotting_utils import save_diagnostic_plots

from conftest import make_fh_result, make_ebp_result


def _write_inputs(tmp_path, gamma_values=None):
    rng = np.random.default_rng(8)
    n = 12
    direct = rng.normal(50.0, 5.0, size=n)
    fh = direct + rng.normal(scale=1.0, size=n)
    out = np.zeros(n, dtype=int)
    out[-2:] = 1
    domains = [f"D{i}" for i in range(n)]

    pd.DataFrame({'Domain': domains, 'Direct': direct, 'FH': fh, 'Out': out}).to_csv(
        tmp_path / "indicators.csv", index=False)
    pd.DataFrame({'Domain': domains, 'Direct': rng.uniform(1, 2, n), 'FH': rng.uniform(0.5, 1, n),
                  'Out': out}).to_csv(tmp_path / "mse.csv", index=False)
    gamma = rng.uniform(0.2, 0.8, n) if gamma_values is None else gamma_values
    pd.DataFrame({'Domain': domains, 'Gamma': gamma}).to_csv(tmp_path / "gamma.csv", index=False)
    pd.DataFrame({'random_effect': rng.normal(size=n - 2),
                  'std_real_residual': rng.normal(size=n - 2)}).to_csv(tmp_path / "re.csv", index=False)


def test_main_comparison(tmp_path, capsys):
    _write_inputs(tmp_path)
    code = main(["--indicators", str(tmp_path / "indicators.csv"),
                 "--mse", str(tmp_path / "mse.csv"),
                 "--gamma", str(tmp_path / "gamma.csv")])
    output = capsys.readouterr().out

    assert code == 0
    assert "Brown test" in output
    assert "Correlation between synthetic part and direct estimator" in output


def test_main_summary_and_figures(tmp_path, capsys):
    _write_inputs(tmp_path)
    figures = tmp_path / "figures"
    code = main(["--indicators", str(tmp_path / "indicators.csv"),
                 "--random-effects", str(tmp_path / "re.csv"),
                 "--summary",
                 "--figures-dir", str(figures)])
    output = capsys.readouterr().out

    assert code == 0
    assert "Brown test" not in output
    assert "Residual diagnostics:" in output
    assert (figures / "FH_std_residuals_qq.png").exists()
    assert (figures / "FH_random_effects_qq.png").exists()
    assert (figures / "FH_direct_vs_model.png").exists()


def test_main_missing_file(tmp_path):
    assert main(["--indicators", str(tmp_path / "absent.csv"), "--gamma", str(tmp_path / "g.csv")]) == 1


def test_main_requires_gamma_or_random_effects(tmp_path):
    _write_inputs(tmp_path)
    assert main(["--indicators", str(tmp_path / "indicators.csv")]) == 1


def test_main_rejects_invalid_gamma(tmp_path):
    _write_inputs(tmp_path, gamma_values=np.full(12, 1.5))
    assert main(["--indicators", str(tmp_path / "indicators.csv"),
                 "--gamma", str(tmp_path / "gamma.csv")]) == 1


def test_main_rejects_backtransformation_without_transformation(tmp_path):
    _write_inputs(tmp_path)
    assert main(["--indicators", str(tmp_path / "indicators.csv"),
                 "--gamma", str(tmp_path / "gamma.csv"),
                 "--backtransformation", "sm"]) == 1


def test_parse_transformation():
    assert parse_transformation(None) == "no"
    assert parse_transformation("Box-Cox") == "box.cox"
    assert parse_transformation("log", "sm") == "log"
    with pytest.raises(ValueError):
        parse_transformation("sqrt")


def test_validate_log_level():
    assert validate_log_level("debug") == "DEBUG"
    with pytest.raises(ValueError):
        validate_log_level("verbose")


def test_save_ebp_plots(tmp_path):
    paths = save_diagnostic_plots(make_ebp_result(), tmp_path, dpi=50)
    assert set(paths) == {'pearson_residuals_qq', 'random_effects_qq', 'direct_vs_model'}
    assert all(path.exists() for path in paths.values())


def test_save_fh_plots_prefix(tmp_path):
    result = make_fh_result([1.0, 2.0, 3.0, 4.0], [1.1, 2.0, 2.9, 4.1], gamma=[0.5] * 4)
    paths = save_diagnostic_plots(result, tmp_path, fname_prefix="run1", dpi=50)
    assert paths['std_residuals_qq'].name == "run1_std_residuals_qq.png"


def test_get_config_value_precedence(tmp_path):
    override = tmp_path / "local.yaml"
    override.write_text("reporting:\n  correlation_digits: 4\n")
    initialize_config(override)

    assert get_config_value('reporting.correlation_digits', 2) == 4
    assert get_config_value('reporting.unknown', 7) == 7

    args = argparse.Namespace(stable_upper_tail=None)
    assert get_config_value('brown_test.stable_upper_tail', True, args, "stable_upper_tail") is False
    args = argparse.Namespace(stable_upper_tail=True)
    assert get_config_value('brown_test.stable_upper_tail', False, args, "stable_upper_tail") is True
