"""
最小二乗法 (OLS) による回帰モデルの当てはめと結果レポート

カテゴリ変数は基準カテゴリ以外の水準ごとにダミー変数を作り、
基準カテゴリの効果は切片に含める。
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm

from analysis.exceptions import AnalysisError, DomainError, UnmappedCodeError
from analysis.recoder import CATEGORICAL_SPECS
from dataset.models import CategoricalSpec

logger = logging.getLogger(__name__)

INTERCEPT = 'Intercept'


@dataclass(frozen=True)
class ModelFormula:
    """
    回帰モデルの定義

    Args:
        response: 目的変数の列名
        predictors: 説明変数の列名 (主効果)
        interaction: 交互作用項を作る説明変数の組
        log_response: 目的変数を対数変換する
        log_predictors: 対数変換する説明変数
    """
    response: str
    predictors: Tuple[str, ...]
    interaction: Optional[Tuple[str, str]] = None
    log_response: bool = False
    log_predictors: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'predictors', tuple(self.predictors))
        object.__setattr__(self, 'log_predictors', tuple(self.log_predictors))

        if not self.predictors:
            raise ValueError("At least one predictor is required")
        if self.interaction is not None:
            object.__setattr__(self, 'interaction', tuple(self.interaction))
            missing = [p for p in self.interaction if p not in self.predictors]
            if len(self.interaction) != 2 or missing:
                raise ValueError(
                    f"Interaction {self.interaction} must name two of the predictors {self.predictors}"
                )
        unknown = [p for p in self.log_predictors if p not in self.predictors]
        if unknown:
            raise ValueError(f"Log-transformed columns are not predictors: {unknown}")

    def term(self, column: str) -> str:
        return f"log({column})" if column in self.log_predictors else column

    def describe(self) -> str:
        """R形式の式 (例: total_count ~ temp_raw * holiday)"""
        response = f"log({self.response})" if self.log_response else self.response
        terms = [self.term(p) for p in self.predictors]
        if self.interaction is not None:
            a, b = (self.term(p) for p in self.interaction)
            terms = [f"{a} * {b}" if t == a else t for t in terms if t != b]
        return f"{response} ~ {' + '.join(terms)}"


@dataclass(frozen=True)
class CoefficientEstimate:
    """係数の推定値"""
    name: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float


@dataclass(frozen=True)
class RegressionReport:
    """OLSの当てはめ結果"""
    formula: ModelFormula
    intercept: CoefficientEstimate
    coefficients: Dict[str, CoefficientEstimate]
    r_squared: float
    adj_r_squared: float
    n_obs: int
    residuals: pd.Series = field(repr=False)
    fitted_values: pd.Series = field(repr=False)
    categorical_specs: Dict[str, CategoricalSpec] = field(repr=False, default_factory=dict)

    def coefficient(self, name: str) -> CoefficientEstimate:
        if name == INTERCEPT:
            return self.intercept
        try:
            return self.coefficients[name]
        except KeyError:
            raise KeyError(
                f"No coefficient '{name}' in {self.formula.describe()} "
                f"(available: {list(self.coefficients)})"
            ) from None

    def predict(self, rows: pd.DataFrame) -> pd.Series:
        """
        新しい行に対する予測値を計算

        対数モデルの場合は対数スケールの値を返す。

        Args:
            rows: 説明変数の列を含む DataFrame

        Returns:
            予測値の Series (rows と同じインデックス)
        """
        design = build_design_matrix(rows, self.formula, self.categorical_specs)
        params = pd.Series(
            {INTERCEPT: self.intercept.estimate,
             **{name: c.estimate for name, c in self.coefficients.items()}}
        )
        predicted = design[params.index].to_numpy() @ params.to_numpy()
        return pd.Series(predicted, index=rows.index, name='fitted')

    def to_frame(self) -> pd.DataFrame:
        """係数表"""
        estimates = [self.intercept] + list(self.coefficients.values())
        return pd.DataFrame([
            {'term': c.name, 'estimate': c.estimate, 'std_error': c.std_error,
             't_value': c.t_value, 'p_value': c.p_value}
            for c in estimates
        ]).set_index('term')

    def summary_text(self) -> str:
        lines = [
            f"Model: {self.formula.describe()}",
            f"Observations: {self.n_obs}",
            f"{'term':<32}{'estimate':>14}{'std. error':>14}{'p-value':>10}",
        ]
        for c in [self.intercept] + list(self.coefficients.values()):
            lines.append(f"{c.name:<32}{c.estimate:>14.4f}{c.std_error:>14.4f}{c.p_value:>10.4f}")
        lines.append(f"R-squared: {self.r_squared:.4f}  Adjusted R-squared: {self.adj_r_squared:.4f}")
        return '\n'.join(lines)


@dataclass
class ModelSuite:
    """複数モデルの当てはめ結果 (失敗したモデルは failures に入る)"""
    reports: Dict[str, RegressionReport] = field(default_factory=dict)
    failures: Dict[str, AnalysisError] = field(default_factory=dict)


STANDARD_MODELS: Dict[str, ModelFormula] = {
    'temp': ModelFormula('total_count', ('temp_raw',)),
    'temp_holiday': ModelFormula('total_count', ('temp_raw', 'holiday')),
    'feeling_temp': ModelFormula('total_count', ('feeling_temp_raw',)),
    'feeling_temp_season': ModelFormula('total_count', ('feeling_temp_raw', 'season')),
    'temp_holiday_interaction': ModelFormula(
        'total_count', ('temp_raw', 'holiday'), interaction=('temp_raw', 'holiday')
    ),
    'log_windspeed': ModelFormula(
        'total_count', ('windspeed_raw',),
        log_response=True, log_predictors=('windspeed_raw',)
    ),
}


def _log(values: pd.Series, column: str) -> pd.Series:
    non_positive = int((values <= 0).sum())
    if non_positive:
        raise DomainError(column, non_positive)
    return np.log(values)


def _expand_predictor(table: pd.DataFrame,
                      column: str,
                      formula: ModelFormula,
                      specs: Dict[str, CategoricalSpec]) -> pd.DataFrame:
    """説明変数1つ分の計画行列の列を作る"""
    if column in specs:
        spec = specs[column]
        values = table[column].astype(object)
        unknown = sorted(set(values[~values.isin(spec.categories)].tolist()), key=str)
        if unknown:
            raise UnmappedCodeError(column, unknown)
        return pd.DataFrame(
            {f"{column}[{label}]": (values == label).astype(float) for label in spec.non_baseline},
            index=table.index,
        )

    values = table[column].astype(float)
    if column in formula.log_predictors:
        values = _log(values, column)
    return pd.DataFrame({formula.term(column): values}, index=table.index)


def build_design_matrix(table: pd.DataFrame,
                        formula: ModelFormula,
                        specs: Optional[Dict[str, CategoricalSpec]] = None) -> pd.DataFrame:
    """
    計画行列を作成

    Args:
        table: 説明変数を含むテーブル
        formula: モデル定義
        specs: カテゴリ定義 (省略時は標準の4列)

    Returns:
        先頭列が Intercept の DataFrame
    """
    specs = CATEGORICAL_SPECS if specs is None else specs

    # 説明変数ごとの列
    blocks = {p: _expand_predictor(table, p, formula, specs) for p in formula.predictors}
    design = pd.concat(list(blocks.values()), axis=1)

    # 交互作用項 (列同士の積)
    if formula.interaction is not None:
        a, b = formula.interaction
        for col_a in blocks[a].columns:
            for col_b in blocks[b].columns:
                design[f"{col_a}:{col_b}"] = blocks[a][col_a] * blocks[b][col_b]

    design.insert(0, INTERCEPT, 1.0)
    return design


def response_vector(table: pd.DataFrame, formula: ModelFormula) -> pd.Series:
    values = table[formula.response].astype(float)
    if formula.log_response:
        values = _log(values, formula.response).rename(f"log({formula.response})")
    return values


def fit_ols(table: pd.DataFrame,
            formula: ModelFormula,
            specs: Optional[Dict[str, CategoricalSpec]] = None) -> RegressionReport:
    """
    OLSでモデルを当てはめる

    Args:
        table: 分析用テーブル
        formula: モデル定義
        specs: カテゴリ定義 (省略時は標準の4列)

    Returns:
        RegressionReport

    Raises:
        DomainError: 対数変換する列に0以下の値がある場合
        UnmappedCodeError: カテゴリ列に定義外のラベルがある場合
    """
    specs = CATEGORICAL_SPECS if specs is None else specs

    # 計画行列と目的変数
    design = build_design_matrix(table, formula, specs)
    response = response_vector(table, formula)
    results = sm.OLS(response, design).fit()

    estimates = {
        name: CoefficientEstimate(
            name=name,
            estimate=float(results.params[name]),
            std_error=float(results.bse[name]),
            t_value=float(results.tvalues[name]),
            p_value=float(results.pvalues[name]),
        )
        for name in design.columns
    }
    # 切片は係数とは分けて保持
    intercept = estimates.pop(INTERCEPT)

    report = RegressionReport(
        formula=formula,
        intercept=intercept,
        coefficients=estimates,
        r_squared=float(results.rsquared),
        adj_r_squared=float(results.rsquared_adj),
        n_obs=int(results.nobs),
        residuals=results.resid,
        fitted_values=results.fittedvalues,
        categorical_specs=dict(specs),
    )
    logger.info(f"Fitted {formula.describe()}: R^2={report.r_squared:.3f}")
    return report


def fit_standard_models(table: pd.DataFrame,
                        specs: Optional[Dict[str, CategoricalSpec]] = None,
                        models: Optional[Dict[str, ModelFormula]] = None) -> ModelSuite:
    """
    標準の回帰モデルをまとめて当てはめる

    各モデルは独立しており、1つが DomainError で失敗しても残りは続行する。

    Args:
        table: 分析用テーブル
        specs: カテゴリ定義
        models: キー→モデル定義 (省略時は STANDARD_MODELS)

    Returns:
        ModelSuite
    """
    models = STANDARD_MODELS if models is None else models
    suite = ModelSuite()

    for key, formula in models.items():
        try:
            suite.reports[key] = fit_ols(table, formula, specs)
        except DomainError as e:
            logger.error(f"Skipping {formula.describe()}: {e}")
            suite.failures[key] = e

    return suite


def residual_frame(report: RegressionReport) -> pd.DataFrame:
    """残差と予測値の組 (残差プロット用)"""
    return pd.DataFrame({
        'fitted': report.fitted_values,
        'residual': report.residuals,
    })
