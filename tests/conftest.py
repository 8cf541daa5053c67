import numpy as np
import pandas as pd
import pytest

from config import reset_config
from results import (
    ModelVariant,
    FittedModelResult,
    FHModelInternals,
    EBPModelFit,
    SampleFramework,
    EstimationMethod,
    FittingCall,
    TransformationInfo
)


def make_estimates(direct, model, out, column="FH"):
    n = len(direct)
    return pd.DataFrame({
        'Domain': [f"D{i:03d}" for i in range(n)],
        'Direct': np.asarray(direct, dtype=float),
        column: np.asarray(model, dtype=float),
        'Out': np.asarray(out, dtype=int),
    })


def make_fh_result(direct, model, out=None, mse_direct=None, mse_model=None,
                   gamma=None, random_effects=None, std_residuals=None,
                   transformation=None, backtransformation=None,
                   method="reml", mse_method="analytical", **model_kwargs):
    """Build an FH result; MSE is omitted when mse_direct is None."""
    n = len(direct)
    out = np.zeros(n, dtype=int) if out is None else np.asarray(out, dtype=int)
    indicators = make_estimates(direct, model, out)

    mse = None
    if mse_direct is not None:
        mse = make_estimates(mse_direct, mse_model, out)

    gamma_table = None
    if gamma is not None:
        gamma_table = pd.DataFrame({'Domain': indicators['Domain'], 'Gamma': np.asarray(gamma, dtype=float)})

    n_in = int((out == 0).sum())
    if random_effects is None:
        random_effects = np.linspace(-1.0, 1.0, n_in)
    if std_residuals is None:
        std_residuals = np.linspace(-1.5, 1.5, n_in)

    internals = FHModelInternals(
        random_effects=np.asarray(random_effects, dtype=float),
        std_real_residuals=np.asarray(std_residuals, dtype=float),
        gamma=gamma_table,
        **model_kwargs
    )

    return FittedModelResult(
        variant=ModelVariant.FH,
        indicators=indicators,
        framework=SampleFramework(n_domains_sampled=n_in, n_domains_unobserved=n - n_in),
        mse=mse,
        model=internals,
        transformation=TransformationInfo(transformation=transformation, backtransformation=backtransformation),
        method=EstimationMethod(method=method, mse_method=mse_method),
        call=FittingCall("fh", {'method': method})
    )


def make_ebp_result(n_domains=20, units_per_domain=10, transformation="no",
                    optimal_lambda=None, shift_parameter=None, n_unobserved=5, seed=7):
    rng = np.random.default_rng(seed)
    n_units = n_domains * units_per_domain
    sample_domains = np.repeat(np.arange(n_domains), units_per_domain)
    population_domains = np.repeat(np.arange(n_domains + n_unobserved), units_per_domain * 10)

    fit = EBPModelFit(
        pearson_residuals=rng.normal(size=n_units),
        random_intercepts=rng.normal(scale=0.5, size=n_domains),
        fixed_predictions=rng.normal(loc=10.0, scale=2.0, size=n_units),
        random_intercept_variance=0.25,
        residual_variance=1.0
    )

    direct = np.concatenate([rng.normal(loc=10.0, size=n_domains), np.full(n_unobserved, np.nan)])
    out = np.concatenate([np.zeros(n_domains, dtype=int), np.ones(n_unobserved, dtype=int)])
    indicators = pd.DataFrame({
        'Domain': np.arange(n_domains + n_unobserved),
        'Direct': direct,
        'EBP': rng.normal(loc=10.0, size=n_domains + n_unobserved),
        'Out': out,
    })

    return FittedModelResult(
        variant=ModelVariant.EBP,
        indicators=indicators,
        framework=SampleFramework(
            n_domains_sampled=n_domains,
            n_domains_unobserved=n_unobserved,
            n_units_sampled=n_units,
            n_units_population=len(population_domains),
            sample_domains=sample_domains,
            population_domains=population_domains
        ),
        model=fit,
        transformation=TransformationInfo(
            transformation=transformation,
            optimal_lambda=optimal_lambda,
            shift_parameter=shift_parameter
        ),
        method=EstimationMethod(method="reml"),
        call=FittingCall("ebp", {'L': 50})
    )


def make_direct_result(sample_domains):
    domains = np.asarray(sample_domains)
    n_dom = len(np.unique(domains))
    return FittedModelResult(
        variant=ModelVariant.DIRECT,
        indicators=pd.DataFrame({'Domain': np.unique(domains)}),
        framework=SampleFramework(
            n_domains_sampled=n_dom,
            n_units_sampled=len(domains),
            sample_domains=domains
        ),
        call=FittingCall("direct", {'var': True})
    )


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fh_gamma_result():
    rng = np.random.default_rng(11)
    n = 30
    direct = rng.normal(loc=50.0, scale=5.0, size=n)
    synthetic = direct + rng.normal(scale=2.0, size=n)
    gamma = rng.uniform(0.1, 0.9, size=n)
    model = gamma * direct + (1 - gamma) * synthetic
    out = np.zeros(n, dtype=int)
    out[-4:] = 1
    return make_fh_result(
        direct, model, out=out,
        mse_direct=rng.uniform(1.0, 3.0, size=n),
        mse_model=rng.uniform(0.5, 1.5, size=n),
        gamma=gamma
    )


@pytest.fixture
def ebp_result():
    return make_ebp_result()
