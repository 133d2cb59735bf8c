"""
Maximum-likelihood estimation with an R-style interface and output.

This is the user-facing API: it adapts arrays or DataFrame columns into
observations, fits by Nelder-Mead, and reports the usual inference.
"""

import warnings
import numpy as np
import pandas as pd
from typing import Optional, Union, List
from scipy import stats
from scipy.special import expit

from ._core.families import DistributionModel, get_family
from ._core.objective import Observations, LikelihoodObjective
from ._core.simplex import NelderMead, SimplexOptions
from ._core.hessian import numerical_hessian
from .exceptions import DimensionMismatch, InvalidParameter, NonFiniteObjective
from .lrt import likelihood_ratio_test


class MaximumLikelihood:
    """
    Fit a distribution family by maximum likelihood.

    Examples
    --------
    >>> import numpy as np
    >>> from pylikelihood import mle
    >>>
    >>> rng = np.random.default_rng(0)
    >>> model = mle(rng.normal(5.0, 2.0, 1000), family='normal')
    >>> model.summary()     # Prints estimates, standard errors, AIC
    >>> model.params        # Named estimates
    >>> model.conf_int()    # Wald confidence intervals
    >>>
    >>> # Logistic regression on (successes, trials) counts
    >>> model = mle(y='deaths', X=['const', 'dose'], trials='n',
    ...             data=df, family='binomial')
    """

    def __init__(
        self,
        y: Union[str, np.ndarray],
        X: Optional[Union[List[str], np.ndarray]] = None,
        data: Optional[pd.DataFrame] = None,
        family: Union[str, DistributionModel] = 'normal',
        trials: Optional[Union[str, int, np.ndarray]] = None,
        start: Optional[np.ndarray] = None,
        bounds: Optional[list] = None,
        options: Optional[SimplexOptions] = None,
    ):
        """
        Fit the model.

        Parameters
        ----------
        y : str or array
            Response variable
            - If string: column name in data
            - If array: values, or (successes, trials) rows for binomial
        X : list of str or array, optional
            Regressors (design matrix, no intercept added)
        data : DataFrame, optional
            Dataset containing the named columns
        family : str or DistributionModel, default='normal'
            'normal', 'poisson', 'binomial', or a family instance
        trials : str, int or array, optional
            Binomial trial counts when y holds successes only
        start : array, optional
            Starting parameters (default: family's data-driven guess)
        bounds : list of (lower, upper), optional
            Parameter bounds (default: family's bounds)
        options : SimplexOptions, optional
            Optimizer configuration
        """
        # Parse inputs
        if isinstance(y, str):
            if data is None:
                raise ValueError("Must provide data when y is a string")
            y_values = data[y].values
            self.y_name = y
        else:
            y_values = np.asarray(y)
            self.y_name = 'y'

        if X is None:
            self.X_values = None
            self.X_names = []
        elif isinstance(X, list) and all(isinstance(x, str) for x in X):
            if data is None:
                raise ValueError("Must provide data when X is list of strings")
            self.X_values = np.asarray(data[X].values, dtype=np.float64)
            self.X_names = list(X)
        else:
            self.X_values = np.asarray(X, dtype=np.float64)
            if self.X_values.ndim == 1:
                self.X_values = self.X_values.reshape(-1, 1)
            self.X_names = [f'x{i}' for i in range(self.X_values.shape[1])]

        if trials is not None:
            if isinstance(trials, str):
                if data is None:
                    raise ValueError("Must provide data when trials is a string")
                trials = data[trials].values
            y_values = np.asarray(y_values, dtype=np.float64)
            if y_values.ndim != 1:
                raise DimensionMismatch("y must be 1-dimensional when trials is given")
            trials = np.broadcast_to(np.asarray(trials, dtype=np.float64), y_values.shape)
            y_values = np.column_stack([y_values, trials])

        n_features = self.X_values.shape[1] if self.X_values is not None else None
        self.family = get_family(family, n_features=n_features)

        self.observations = Observations(y_values, self.X_values)
        self.objective = LikelihoodObjective(self.family, self.observations)

        # Store metadata
        self.n_obs = self.observations.n_obs
        self.n_params = self.family.param_count()
        if self.family.requires_design and len(self.X_names) == self.n_params:
            self.param_names = list(self.X_names)
        else:
            self.param_names = list(self.family.param_names)

        if start is None:
            start = self.family.start_params(self.observations.y, self.observations.X)
        if bounds is None:
            bounds = self.family.bounds
        self.optimizer = NelderMead(options)
        self.result = self.optimizer.minimize(self.objective, start, bounds=bounds)

        # Compute statistical inference
        self._compute_statistics()

    def _compute_statistics(self):
        """Compute log-likelihood, information criteria and standard errors."""
        result = self.result
        k, n = self.n_params, self.n_obs

        self.coefficients = np.array(result.params)
        self.loglik = result.log_likelihood
        self.aic = 2 * k - 2 * self.loglik
        self.bic = k * np.log(n) - 2 * self.loglik
        self.converged = result.converged
        self.iterations = result.iterations

        # Var(θ) = H⁻¹, H the Hessian of the negative log-likelihood
        self.vcov = np.full((k, k), np.nan)
        try:
            hessian = numerical_hessian(self.objective, self.coefficients)
            self.vcov = np.linalg.inv(hessian)
        except (InvalidParameter, NonFiniteObjective):
            warnings.warn(
                "Hessian could not be evaluated near the estimate "
                "(parameter on or near a bound); standard errors are NaN",
                RuntimeWarning,
                stacklevel=3,
            )
        except np.linalg.LinAlgError:
            warnings.warn(
                "Hessian is singular; standard errors are NaN",
                RuntimeWarning,
                stacklevel=3,
            )

        with np.errstate(invalid='ignore', divide='ignore'):
            self.std_errors = np.sqrt(np.diag(self.vcov))
            self.z_values = self.coefficients / self.std_errors
        self.pvalues = 2 * stats.norm.sf(np.abs(self.z_values))

    @property
    def params(self):
        """Named estimates (pandas Series)."""
        return pd.Series(self.coefficients, index=self.param_names)

    def conf_int(self, alpha: float = 0.05):
        """
        Wald confidence intervals for the parameters.

        Parameters
        ----------
        alpha : float
            Significance level (default: 0.05 for 95% CI)

        Returns
        -------
        DataFrame
            Confidence intervals with columns 'lower' and 'upper'
        """
        z_crit = stats.norm.ppf(1 - alpha / 2)
        lower = self.coefficients - z_crit * self.std_errors
        upper = self.coefficients + z_crit * self.std_errors

        return pd.DataFrame({
            'lower': lower,
            'upper': upper
        }, index=self.param_names)

    def compare(self, null: "MaximumLikelihood"):
        """
        Likelihood-ratio test of this model against a nested ``null`` model.

        Returns
        -------
        LRTResult
        """
        return likelihood_ratio_test(
            null.result, self.result, null.n_params, self.n_params
        )

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Success probabilities for new design rows (binomial family).

        Parameters
        ----------
        newdata : DataFrame or array
            - If DataFrame: must have columns matching self.X_names
            - If array: must have the same number of columns as X
        """
        if not self.family.requires_design:
            raise ValueError(f"{self.family.name} family has no regressors to predict from")
        if isinstance(newdata, pd.DataFrame):
            X_new = newdata[self.X_names].values
        else:
            X_new = np.asarray(newdata, dtype=np.float64)
        if X_new.ndim == 1:
            X_new = X_new.reshape(1, -1)
        if X_new.shape[1] != self.n_params:
            raise DimensionMismatch(
                f"newdata has {X_new.shape[1]} columns, expected {self.n_params}"
            )
        return expit(X_new @ self.coefficients)

    def summary(self):
        """
        Print summary of the fit (like R's summary of an mle fit).
        """
        print()
        print("="*80)
        print("MAXIMUM LIKELIHOOD ESTIMATION RESULTS")
        print("="*80)
        print()

        print(f"Family: {self.family.name}")
        print(f"Dependent variable: {self.y_name}")
        print(f"Number of observations: {self.n_obs}")
        print()

        print("Coefficients:")
        print("-"*80)
        print(f"{'Parameter':<20} {'Estimate':>12} {'Std. Error':>12} {'z value':>10} {'Pr(>|z|)':>12}")
        print("-"*80)

        for i, name in enumerate(self.param_names):
            p = self.pvalues[i]
            if np.isnan(p):
                sig = ''
                p_str = 'NA'
            else:
                if p < 0.001:
                    sig = ' ***'
                elif p < 0.01:
                    sig = ' **'
                elif p < 0.05:
                    sig = ' *'
                elif p < 0.1:
                    sig = ' .'
                else:
                    sig = ''

                p_str = f"{p:.4f}" if p >= 0.0001 else "<.0001"

            print(f"{name:<20} {self.coefficients[i]:>12.4f} {self.std_errors[i]:>12.4f} "
                  f"{self.z_values[i]:>10.3f} {p_str:>12}{sig}")

        print("-"*80)
        print("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        print()

        print(f"Log-likelihood: {self.loglik:.4f} (df={self.n_params})")
        print(f"AIC:            {self.aic:.4f}")
        print(f"BIC:            {self.bic:.4f}")
        status = "converged" if self.converged else "NOT converged"
        print(f"Nelder-Mead {status} in {self.iterations} iterations "
              f"({self.result.evaluation_count} evaluations)")
        print("="*80)
        print()

    def __repr__(self):
        return (f"MaximumLikelihood(family={self.family.name}, n={self.n_obs}, "
                f"k={self.n_params}, logLik={self.loglik:.3f})")


def mle(y, X=None, data=None, **kwargs):
    """
    Fit a model by maximum likelihood (convenience function).

    Parameters
    ----------
    y : str or array
        Response variable
    X : list of str or array, optional
        Regressors
    data : DataFrame, optional
        Dataset
    **kwargs
        Additional arguments passed to MaximumLikelihood

    Returns
    -------
    MaximumLikelihood
        Fitted model object

    Examples
    --------
    >>> model = mle(y='claims', data=policies, family='poisson')
    >>> model.summary()
    >>> model.params['rate']
    """
    return MaximumLikelihood(y=y, X=X, data=data, **kwargs)


__all__ = ["MaximumLikelihood", "mle"]
