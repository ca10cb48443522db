"""
Survival and logistic models on top of lifelines and statsmodels.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
from lifelines import CoxPHFitter, KaplanMeierFitter
from lifelines.statistics import multivariate_logrank_test

from .models import ModelResult


logger = logging.getLogger(__name__)


def complete_cases(df: pd.DataFrame, columns: Sequence[str], name: str) -> pd.DataFrame:
    """Keep rows with every model input present."""
    subset = df.loc[:, list(columns)].dropna()
    dropped = len(df) - len(subset)
    if dropped:
        logger.warning(f"{name}: dropping {dropped} row(s) with missing model inputs")
    return subset


def design_matrix(
    df: pd.DataFrame,
    categorical: Sequence[str] = (),
    numeric: Sequence[str] = (),
) -> pd.DataFrame:
    """Treatment-coded covariates.

    The first category of each categorical column is the baseline. Columns
    that are constant in ``df`` (e.g. unused levels) are dropped.
    """
    parts = []
    for col in categorical:
        values = df[col]
        if not isinstance(values.dtype, pd.CategoricalDtype):
            values = values.astype("category")
        values = values.cat.remove_unused_categories()
        dummies = pd.get_dummies(values, prefix=col, prefix_sep="[T.", drop_first=True, dtype=float)
        dummies.columns = [f"{column}]" for column in dummies.columns]
        parts.append(dummies)
    for col in numeric:
        parts.append(df[[col]].astype(float))

    if not parts:
        return pd.DataFrame(index=df.index)
    X = pd.concat(parts, axis=1)
    return X.loc[:, X.nunique() > 1]


def fit_cox(
    df: pd.DataFrame,
    duration_col: str,
    event_col: str,
    categorical: Sequence[str] = (),
    numeric: Sequence[str] = (),
    name: str = "cox",
) -> ModelResult:
    """Fit a Cox proportional-hazards model.

    Args:
        df: Input table
        duration_col: Time-to-event column, in years
        event_col: Boolean event indicator
        categorical: Categorical covariates, baseline level first
        numeric: Numeric or boolean covariates
        name: Model name used in logs and exports

    Returns:
        ModelResult with hazard ratios and fit metrics
    """
    data = complete_cases(df, [duration_col, event_col, *categorical, *numeric], name)
    negative = data[duration_col] < 0
    if negative.any():
        logger.warning(f"{name}: dropping {int(negative.sum())} row(s) with negative duration")
        data = data.loc[~negative]

    X = design_matrix(data, categorical, numeric)
    frame = X.assign(
        **{duration_col: data[duration_col].astype(float), event_col: data[event_col].astype(bool)}
    )

    logger.info(f"Fitting {name} on {len(frame)} rows with {X.shape[1]} covariate(s)")
    cph = CoxPHFitter()
    cph.fit(frame, duration_col=duration_col, event_col=event_col)

    summary = cph.summary
    coefficients = summary[
        ["coef", "exp(coef)", "se(coef)", "exp(coef) lower 95%", "exp(coef) upper 95%", "p"]
    ].copy()
    coefficients.index.name = "covariate"

    lr_test = cph.log_likelihood_ratio_test()
    metrics = {
        "concordance": float(cph.concordance_index_),
        "log_likelihood": float(cph.log_likelihood_),
        "aic_partial": float(cph.AIC_partial_),
        "lr_test_statistic": float(lr_test.test_statistic),
        "lr_test_p": float(lr_test.p_value),
    }
    return ModelResult(
        name=name,
        kind="cox",
        n_obs=int(len(frame)),
        n_events=int(frame[event_col].sum()),
        coefficients=coefficients,
        metrics=metrics,
    )


def fit_logit(
    df: pd.DataFrame,
    outcome: str,
    categorical: Sequence[str] = (),
    numeric: Sequence[str] = (),
    name: str = "logit",
) -> ModelResult:
    """Fit a binomial GLM with logit link.

    Args:
        df: Input table
        outcome: Boolean outcome column
        categorical: Categorical covariates, baseline level first
        numeric: Numeric or boolean covariates
        name: Model name used in logs and exports

    Returns:
        ModelResult with log-odds, odds ratios and fit metrics
    """
    data = complete_cases(df, [outcome, *categorical, *numeric], name)
    X = sm.add_constant(design_matrix(data, categorical, numeric), has_constant="add")
    y = data[outcome].astype(float)

    logger.info(f"Fitting {name} on {len(y)} rows with {X.shape[1] - 1} covariate(s)")
    result = sm.GLM(y, X, family=sm.families.Binomial()).fit()

    tbl = result.summary2().tables[1].copy()
    coefficients = pd.DataFrame(
        {
            "coef": tbl["Coef."],
            "std err": tbl["Std.Err."],
            "z": tbl["z"],
            "p": tbl["P>|z|"],
            "odds_ratio": np.exp(tbl["Coef."]),
        }
    )
    coefficients.index.name = "term"

    metrics = {
        "aic": float(result.aic),
        "deviance": float(result.deviance),
        "null_deviance": float(result.null_deviance),
        "df_model": float(result.df_model),
    }
    return ModelResult(
        name=name,
        kind="logit",
        n_obs=int(result.nobs),
        n_events=int(y.sum()),
        coefficients=coefficients,
        metrics=metrics,
    )


def kaplan_meier_table(
    df: pd.DataFrame,
    duration_col: str,
    event_col: str,
    group_col: str,
    horizons: Iterable[float] = (1.0, 5.0, 10.0),
) -> pd.DataFrame:
    """Per-group Kaplan-Meier summary: counts, median survival and survival at horizons."""
    data = complete_cases(df, [duration_col, event_col, group_col], "kaplan_meier")
    data = data.loc[data[duration_col] >= 0]
    horizons = list(horizons)

    rows: List[Dict] = []
    groups = data[group_col]
    levels = groups.cat.categories if isinstance(groups.dtype, pd.CategoricalDtype) else sorted(groups.unique())
    for level in levels:
        sub = data.loc[groups == level]
        if len(sub) == 0:
            continue
        kmf = KaplanMeierFitter()
        kmf.fit(sub[duration_col], event_observed=sub[event_col].astype(bool), label=str(level))
        row = {
            "group": str(level),
            "n": int(len(sub)),
            "events": int(sub[event_col].astype(bool).sum()),
            "median_survival": float(kmf.median_survival_time_),
        }
        for horizon, prob in zip(horizons, kmf.survival_function_at_times(horizons)):
            row[f"survival_at_{horizon:g}"] = float(prob)
        rows.append(row)
    return pd.DataFrame(rows)


def logrank_by_group(
    df: pd.DataFrame,
    duration_col: str,
    event_col: str,
    group_col: str,
) -> Optional[Dict[str, float]]:
    """Multivariate log-rank test across the levels of ``group_col``."""
    data = complete_cases(df, [duration_col, event_col, group_col], "logrank")
    data = data.loc[data[duration_col] >= 0]
    if data[group_col].nunique() < 2:
        logger.warning("Log-rank test needs at least two groups")
        return None
    res = multivariate_logrank_test(
        data[duration_col], data[group_col].astype(str), data[event_col].astype(bool)
    )
    return {
        "test_statistic": float(res.test_statistic),
        "p_value": float(res.p_value),
        "degrees_of_freedom": float(res.degrees_of_freedom),
    }


def survival_crosstab(df: pd.DataFrame, feature: str, outcome: str) -> pd.DataFrame:
    """Contingency counts of ``outcome`` by ``feature`` with the survival share."""
    table = pd.crosstab(df[feature], df[outcome].astype(bool))
    table = table.reindex(columns=[False, True], fill_value=0)
    table.columns = ["not_survived", "survived"]
    table["total"] = table["not_survived"] + table["survived"]
    table["survival_rate"] = table["survived"] / table["total"].where(table["total"] > 0)
    table.index = table.index.astype(str)
    table.index.name = "level"
    out = table.reset_index()
    out.insert(0, "feature", feature)
    return out
