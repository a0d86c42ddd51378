""" beta.py

Beta distributions for proportions vaccinated. These give callers a way to carry
uncertainty in measured coverage into the dose models, by sampling coverage from the
fitted distributions (see uncertainty.py). Parameters can be found from a mean and
variance, from observed quantiles, from a sample of proportions, or from individual-level
vaccination records grouped by age. """
import warnings
import numpy as np
import pandas as pd
from collections import namedtuple

## For debug plots
import matplotlib.pyplot as plt

## For fitting
from scipy.optimize import minimize
from scipy.special import expit, logit
from scipy.stats import beta as beta_dist

from propvacc.errors import ConfigurationError, InvalidArgumentError

BetaParams = namedtuple("BetaParams",["shape1","shape2"])

## Weight on shrinking age group logits toward the pooled
## logit, which keeps all-or-nothing groups finite.
RIDGE = 1e-3

#### Beta parameters from summary statistics
##############################################################################
def fit_beta(mu=None,sigma=None,quantiles=None,probs=None,verbose=False):

	""" Find the shape parameters of a Beta distribution. The method depends on the
	arguments supplied:

	mu & sigma: the mean and variance, solved analytically. Both may be arrays.
	quantiles & probs: observed proportions (probs) at the given quantiles, e.g.
					   (0, 0.25, 0.5, 0.75, 1) for min, quartiles and max. Solved by
					   least squares with Nelder-Mead, starting from a flat Beta(1,1).
	probs only: a sample of observed proportions, solved by maximum likelihood. """

	given = tuple(x is not None for x in (mu,sigma,quantiles,probs))
	if given == (True,True,False,False):
		return _fit_moments(mu,sigma,verbose)
	elif given == (False,False,True,True):
		return _fit_quantiles(quantiles,probs,verbose)
	elif given == (False,False,False,True):
		return _fit_mle(probs,verbose)
	raise ConfigurationError("Arguments must be only: mu & sigma | quantiles & probs | probs only")

def _fit_moments(mu,sigma,verbose=False):

	if verbose:
		print("Calculating Beta distribution parameters analytically from mean (mu) and variance (sigma)")

	mu = np.asarray(mu,dtype=float)
	sigma = np.asarray(sigma,dtype=float)
	if np.any((mu <= 0) | (mu >= 1)):
		raise InvalidArgumentError("mu must be strictly between 0 and 1")
	if np.any(sigma <= 0):
		raise InvalidArgumentError("sigma must be positive")

	shape1 = ((1.-mu)/sigma-1./mu)*(mu**2)
	shape2 = shape1*(1./mu-1.)
	if np.any(shape1 <= 0):
		raise InvalidArgumentError("variance (sigma) must be less than mu*(1-mu)")
	if shape1.ndim == 0:
		return BetaParams(float(shape1),float(shape2))
	return BetaParams(shape1,shape2)

def _fit_quantiles(quantiles,probs,verbose=False):

	quantiles = np.asarray(quantiles,dtype=float)
	probs = np.asarray(probs,dtype=float)
	if quantiles.shape != probs.shape:
		raise InvalidArgumentError("Dimensions of quantiles and probs must match")
	if np.any((quantiles < 0) | (quantiles > 1)):
		raise InvalidArgumentError("quantiles must be between 0 and 1")

	if verbose:
		print("Calculating Beta distribution parameters from quantiles using sums of squares")

	## Shapes are optimized on the log scale so they
	## stay positive.
	def sse(x):
		a, b = np.exp(x)
		return np.sum((beta_dist.ppf(quantiles,a,b)-probs)**2)
	result = minimize(sse,x0=np.zeros((2,)),
					  method="Nelder-Mead",
					  options={"maxiter":100000,"xatol":1e-8,"fatol":1e-14})
	if not result["success"]:
		warnings.warn("Quantile fit did not converge: {}".format(result["message"]),RuntimeWarning)
	a, b = np.exp(result["x"])
	return BetaParams(float(a),float(b))

def _fit_mle(probs,verbose=False):

	probs = np.asarray(probs,dtype=float)
	if np.any((probs <= 0) | (probs >= 1)):
		raise InvalidArgumentError("proportions must be strictly between 0 and 1 for maximum likelihood")

	if verbose:
		print("Calculating Beta distribution parameters from probabilities using maximum likelihood")
		print("n = {}".format(len(probs)))

	a, b, loc, scale = beta_dist.fit(probs,2.,2.,floc=0.,fscale=1.)
	return BetaParams(float(a),float(b))

#### Beta parameters by age group
##############################################################################
def age_breaks(age,breaks=None):

	""" Cut points for the age groups, always starting at 0 and reaching the
	oldest age (rounded up). """

	top = max(np.ceil(np.max(age)),1.)
	if breaks is None:
		breaks = [0.,top]
	breaks = np.atleast_1d(np.asarray(breaks,dtype=float))
	if breaks[0] != 0:
		breaks = np.concatenate([[0.],breaks])
	if breaks.max() < np.max(age):
		breaks = np.concatenate([breaks,[top]])
	return np.unique(breaks)

def smooth_by_age(age,vaccinated,breaks=None,correlation=1.,verbose=False,debug=False):

	""" Beta parameters for the proportion vaccinated in each age group, given
	individual-level records.

	age: array of ages at the time of the survey.
	vaccinated: binary array, 1 for vaccinated.
	breaks: scalar or array of age group cut points. None means one group for everyone.
	correlation: in age groups, the scale over which the smoothed proportions are
				 expected to vary.

	The logit proportion vaccinated in each group is estimated with a penalized binomial
	regression, regularized by a second difference (random walk) penalty across groups.
	mu is the fitted proportion and sigma its variance, by the delta method.

	Output is a dataframe with columns age, n, mu, sigma, shape1 and shape2, with one
	row for each age group that has observations. """

	age = np.asarray(age,dtype=float)
	vaccinated = np.asarray(vaccinated,dtype=float)
	if age.shape != vaccinated.shape:
		raise InvalidArgumentError("age and vaccinated must have the same length")

	## Drop incomplete observations
	complete = ~(np.isnan(age) | np.isnan(vaccinated))
	if verbose:
		print("Complete observations: n = {} of {}".format(complete.sum(),len(age)))
	age = age[complete]
	vaccinated = vaccinated[complete]
	if len(age) == 0:
		raise InvalidArgumentError("no complete observations")
	if np.any((vaccinated != 0) & (vaccinated != 1)):
		raise InvalidArgumentError("vaccinated must be 0 or 1")
	if np.any(age < 0):
		raise InvalidArgumentError("ages must be non-negative")

	## Left-closed groups, with the oldest age folded
	## into the last group.
	breaks = age_breaks(age,breaks)
	K = len(breaks)-1
	group = np.minimum(np.searchsorted(breaks,age,side="right")-1,K-1)
	labels = np.array(["{:g}-{:g}".format(lo,hi) for lo, hi in zip(breaks[:-1],breaks[1:])])

	## Tally each group and keep the ones with data
	n = np.bincount(group,minlength=K)
	k = np.bincount(group,weights=vaccinated,minlength=K)
	present = n > 0
	n, k, labels = n[present], k[present], labels[present]
	if verbose:
		print("Estimating mean (mu) and variance (sigma) for {} age groups".format(len(labels)))

	## Fit and convert to beta parameters
	theta, cov = penalized_logit(k,n,correlation)
	mu = expit(theta)
	sigma = ((mu*(1.-mu))**2)*np.diag(cov)
	params = fit_beta(mu=mu,sigma=sigma)
	df = pd.DataFrame({"age":labels,
					   "n":n.astype(int),
					   "mu":mu,
					   "sigma":sigma,
					   "shape1":params.shape1,
					   "shape2":params.shape2})

	## Plot if debug
	if debug:
		x = np.arange(len(df))
		sd = np.sqrt(sigma)
		fig, axes = plt.subplots(figsize=(12,5))
		axes.spines["left"].set_position(("axes",-0.025))
		axes.spines["top"].set_visible(False)
		axes.spines["right"].set_visible(False)
		axes.fill_between(x,mu-2.*sd,mu+2.*sd,
						  facecolor="#8F2D56",edgecolor="None",alpha=0.3)
		axes.plot(x,k/n,ls="None",marker="o",markersize=9,
				  markeredgecolor="k",markerfacecolor="None",markeredgewidth=1,
				  label="Observed")
		axes.plot(x,mu,lw=3,color="#8F2D56",label="Smoothed")
		axes.set_xticks(x)
		axes.set_xticklabels(df["age"],rotation=45)
		axes.set_ylim((0,1))
		axes.set_ylabel("Proportion vaccinated")
		axes.legend(frameon=False,fontsize=16)
		fig.tight_layout()
		plt.show()

	return df

def penalized_logit(k,n,correlation=1.):

	""" Logit proportions for grouped binomial data (k successes of n in each group),
	with a random walk penalty across neighboring groups. Returns the estimates and their
	covariance from the inverse Hessian. """

	k = np.asarray(k,dtype=float)
	n = np.asarray(n,dtype=float)
	K = len(n)

	## Regularization matrix: second differences across groups (only
	## defined with 3 or more), plus a weak ridge toward the pooled logit.
	lam = RIDGE*np.eye(K)
	if K > 2:
		D2 = np.diff(np.eye(K),n=2,axis=0)
		lam += np.dot(D2.T,D2)*((correlation**4)/8.)
	theta_bar = logit(np.clip(k.sum()/n.sum(),1e-6,1.-1e-6))

	## Negative log likelihood plus penalty, with
	## gradient and hessian.
	def cost(theta):
		dt = theta-theta_bar
		ll = np.sum(k*theta-n*np.logaddexp(0.,theta))
		return -ll+np.dot(dt.T,np.dot(lam,dt))
	def grad_cost(theta):
		return n*expit(theta)-k+2.*np.dot(lam,theta-theta_bar)
	def hess_cost(theta):
		p = expit(theta)
		return np.diag(n*p*(1.-p))+2.*lam
	x0 = logit((k+0.5)/(n+1.))
	result = minimize(cost,x0=x0,
					  jac=grad_cost,
					  hess=hess_cost,
					  method="Newton-CG")
	if not result["success"]:
		warnings.warn("Age group smoothing did not converge: {}".format(result["message"]),RuntimeWarning)

	theta = result["x"]
	cov = np.linalg.inv(hess_cost(theta))
	return theta, cov
